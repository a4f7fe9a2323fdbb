"""
Catalog schemas: products, their reference entities and price history.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field

from models.base import BaseSchema


class Supplier(BaseSchema):
    """Supplier reference entity (unique by name)."""

    id: Optional[str] = Field(None, description="Supplier UUID, None until committed")
    name: str = Field(..., description="Supplier name (case-sensitive)")


class Category(BaseSchema):
    """Product category reference entity (unique by name)."""

    id: Optional[str] = Field(None, description="Category UUID, None until committed")
    name: str = Field(..., description="Category name (case-sensitive)")


class PriceType(str, Enum):
    """Which monetary field a price history record belongs to."""
    PURCHASE = "purchase"
    RETAIL = "retail"


class Product(BaseSchema):
    """
    Catalog record.

    Natural key is the barcode. All numeric fields are nullable decimals.
    """

    id: Optional[str] = Field(None, description="Product UUID, None until committed")
    barcode: str = Field(..., min_length=1, description="Product barcode (unique)")
    item_number: Optional[str] = Field(None, description="Supplier item code")
    product_name: Optional[str] = Field(None, description="Primary display name")
    second_product_name: Optional[str] = Field(None, description="Secondary display name")
    purchase_price: Optional[Decimal] = Field(None, description="Purchase price")
    retail_price: Optional[Decimal] = Field(None, description="Retail price")
    stock_quantity: Optional[Decimal] = Field(None, description="Quantity in stock")
    supplier: Optional[Supplier] = None
    category: Optional[Category] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def display_name(self) -> Optional[str]:
        """Primary name, falling back to the secondary name."""
        for name in (self.product_name, self.second_product_name):
            if name and name.strip():
                return name.strip()
        return None


class ProductPrice(BaseSchema):
    """
    Price history record.

    Append-only: written when a price value changes, never updated.
    """

    id: Optional[str] = Field(None, description="Record UUID, None until committed")
    product_barcode: str = Field(..., description="Owning product barcode")
    price_type: PriceType = Field(..., description="purchase or retail")
    price: Decimal = Field(..., description="New price value")
    effective_at: datetime = Field(..., description="When the price became effective")
    source: str = Field(..., description="Origin tag, e.g. IMPORT_EXCEL")
    note: Optional[str] = Field(None, description="Free-text note")
    created_at: datetime = Field(..., description="When the record was written")
