"""
Import reconciliation schemas.

Drafts are store-independent snapshots of one product's field values.
A reconciliation run produces new drafts, update drafts, duplicate
warnings and row errors for human review before anything is written.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field

from models.base import BaseSchema


class ProductField(str, Enum):
    """
    Product fields compared during reconciliation.

    Declaration order is the order changed fields are reported in.
    Values match ProductDraft attribute names.
    """
    ITEM_NUMBER = "item_number"
    PRODUCT_NAME = "product_name"
    SECOND_PRODUCT_NAME = "second_product_name"
    PURCHASE_PRICE = "purchase_price"
    RETAIL_PRICE = "retail_price"
    STOCK_QUANTITY = "stock_quantity"
    SUPPLIER_NAME = "supplier_name"
    CATEGORY_NAME = "category_name"


class FieldKind(str, Enum):
    """How a field is parsed and compared."""
    TEXT = "text"
    DECIMAL = "decimal"


@dataclass(frozen=True)
class FieldSpec:
    """One row of the field lookup table."""
    field: ProductField
    column: str
    kind: FieldKind


# Raw import column for each field. Quantity also accepts "quantity",
# handled by the row grouper.
FIELD_SPECS: tuple[FieldSpec, ...] = (
    FieldSpec(ProductField.ITEM_NUMBER, "itemNumber", FieldKind.TEXT),
    FieldSpec(ProductField.PRODUCT_NAME, "productName", FieldKind.TEXT),
    FieldSpec(ProductField.SECOND_PRODUCT_NAME, "secondProductName", FieldKind.TEXT),
    FieldSpec(ProductField.PURCHASE_PRICE, "purchasePrice", FieldKind.DECIMAL),
    FieldSpec(ProductField.RETAIL_PRICE, "retailPrice", FieldKind.DECIMAL),
    FieldSpec(ProductField.STOCK_QUANTITY, "stockQuantity", FieldKind.DECIMAL),
    FieldSpec(ProductField.SUPPLIER_NAME, "supplier", FieldKind.TEXT),
    FieldSpec(ProductField.CATEGORY_NAME, "category", FieldKind.TEXT),
)


class ProductDraft(BaseSchema):
    """Snapshot of one logical input row, keyed by barcode."""

    barcode: str = Field(..., min_length=1, description="Natural key")
    item_number: Optional[str] = None
    product_name: Optional[str] = None
    second_product_name: Optional[str] = None
    purchase_price: Optional[Decimal] = None
    retail_price: Optional[Decimal] = None
    stock_quantity: Optional[Decimal] = None
    supplier_name: Optional[str] = None
    category_name: Optional[str] = None

    def value_of(self, field: ProductField):
        """Read a field by identifier."""
        return getattr(self, field.value)


class ProductUpdateDraft(BaseSchema):
    """
    Pending update of an existing product.

    Applied all-or-nothing: every field in changed_fields is written.
    """

    barcode: str
    old: ProductDraft
    new: ProductDraft
    changed_fields: list[ProductField] = Field(..., min_length=1)


class DuplicateWarning(BaseSchema):
    """Barcode that appeared on more than one input row."""

    barcode: str
    row_numbers: list[int] = Field(..., description="1-based data row numbers")


class RowError(BaseSchema):
    """Input row that could not be classified."""

    row_number: int = Field(..., ge=1, description="1-based data row number")
    reason: str
    row_content: dict[str, str] = Field(default_factory=dict)


class ReconciliationResult(BaseSchema):
    """Outcome of one reconciliation run."""

    new_products: list[ProductDraft] = Field(default_factory=list)
    updated_products: list[ProductUpdateDraft] = Field(default_factory=list)
    errors: list[RowError] = Field(default_factory=list)
    warnings: list[DuplicateWarning] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        """True if applying the result would write anything."""
        return bool(self.new_products or self.updated_products)


class ApplyResult(BaseSchema):
    """Counts of what an apply wrote."""

    products_created: int = 0
    products_updated: int = 0
    price_records_created: int = 0
    suppliers_created: int = 0
    categories_created: int = 0
    skipped_barcodes: list[str] = Field(
        default_factory=list,
        description="Update drafts whose product no longer exists"
    )


class ImportAnalysisResponse(BaseSchema):
    """Analysis returned to the client for review."""

    preview_id: str
    has_changes: bool
    new_count: int
    updated_count: int
    error_count: int
    warning_count: int
    result: ReconciliationResult

    @classmethod
    def create(cls, preview_id: str, result: ReconciliationResult) -> "ImportAnalysisResponse":
        return cls(
            preview_id=preview_id,
            has_changes=result.has_changes,
            new_count=len(result.new_products),
            updated_count=len(result.updated_products),
            error_count=len(result.errors),
            warning_count=len(result.warnings),
            result=result,
        )
