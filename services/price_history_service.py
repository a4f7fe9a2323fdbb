"""
Price history: append-only audit trail of purchase and retail prices.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

import structlog

from config import settings
from models.catalog import Product, PriceType, ProductPrice
from exceptions import ProductNotFoundError
from services.catalog_session import CatalogSession
from utils.number_utils import decimals_equal

logger = structlog.get_logger(__name__)


def record_price_change(
    session: CatalogSession,
    product: Product,
    price_type: PriceType,
    old_price: Optional[Decimal],
    new_price: Optional[Decimal],
    source: str,
    effective_at: Optional[datetime] = None
) -> Optional[ProductPrice]:
    """
    Stage a history record if a price was set or changed.

    Nothing is recorded when the new price is absent or equal (within
    epsilon) to the old one.

    Returns:
        The staged record, or None
    """
    if new_price is None:
        return None
    if decimals_equal(old_price, new_price, settings.decimal_epsilon):
        return None

    now = datetime.now(timezone.utc)
    record = ProductPrice(
        product_barcode=product.barcode,
        price_type=price_type,
        price=new_price,
        effective_at=effective_at or now,
        source=source,
        created_at=now,
    )
    session.add_price(record)

    logger.debug(
        "price_change_recorded",
        barcode=product.barcode,
        price_type=price_type.value,
        old_price=str(old_price) if old_price is not None else None,
        new_price=str(new_price),
        source=source
    )

    return record


class PriceHistoryService:
    """Read access to a product's price history."""

    def __init__(self, session: Optional[CatalogSession] = None):
        self.session = session or CatalogSession()

    def get_history(self, barcode: str) -> list[ProductPrice]:
        """
        Price records for a product, newest first.

        Raises:
            ProductNotFoundError: If the barcode is not in the catalog
        """
        logger.info("getting_price_history", barcode=barcode)

        if self.session.get_product(barcode) is None:
            raise ProductNotFoundError(barcode)

        history = self.session.get_price_history(barcode)
        history.sort(key=lambda record: record.effective_at, reverse=True)

        logger.info("price_history_retrieved", barcode=barcode, count=len(history))
        return history


def get_price_history_service() -> PriceHistoryService:
    """Fresh service per call; each holds its own unit of work."""
    return PriceHistoryService()
