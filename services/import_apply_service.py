"""
Applies a reviewed reconciliation result to the catalog.

All writes of one apply share a single unit of work: either every draft
lands (with its price history and new suppliers/categories) or nothing
does.
"""

from typing import Optional

import structlog

from config import settings
from models.catalog import Product, PriceType
from models.reconciliation import (
    ProductField,
    ProductDraft,
    ProductUpdateDraft,
    ReconciliationResult,
    ApplyResult,
)
from exceptions import ProductBarcodeExistsError
from services.catalog_session import CatalogSession
from services.price_history_service import record_price_change
from services.reference_service import find_or_create_supplier, find_or_create_category

logger = structlog.get_logger(__name__)


class ImportApplyService:
    """
    Writes new and updated products from a reconciliation result.
    """

    def __init__(
        self,
        session: Optional[CatalogSession] = None,
        price_source: Optional[str] = None
    ):
        self.session = session or CatalogSession()
        self.price_source = price_source or settings.import_price_source

    def apply(self, result: ReconciliationResult) -> ApplyResult:
        """
        Apply all drafts in one transaction.

        Args:
            result: Reviewed reconciliation result

        Returns:
            ApplyResult with counts of what was written

        Raises:
            ProductBarcodeExistsError: If a new draft's barcode now exists
            DatabaseError: If the commit fails
        """
        logger.info(
            "applying_import",
            new=len(result.new_products),
            updated=len(result.updated_products)
        )

        summary = ApplyResult()

        try:
            for draft in result.new_products:
                self._create_product(draft, summary)

            for update in result.updated_products:
                self._update_product(update, summary)

            pending = self.session.pending_changes()
            summary.suppliers_created = pending["suppliers"]
            summary.categories_created = pending["categories"]

            self.session.commit()

        except Exception as e:
            logger.error("apply_import_failed", error=str(e))
            self.session.rollback()
            raise

        logger.info(
            "import_applied",
            created=summary.products_created,
            updated=summary.products_updated,
            price_records=summary.price_records_created,
            skipped=len(summary.skipped_barcodes)
        )

        return summary

    def _create_product(self, draft: ProductDraft, summary: ApplyResult) -> None:
        if self.session.get_product(draft.barcode) is not None:
            raise ProductBarcodeExistsError(draft.barcode)

        product = Product(
            barcode=draft.barcode,
            item_number=draft.item_number,
            product_name=draft.product_name,
            second_product_name=draft.second_product_name,
            purchase_price=draft.purchase_price,
            retail_price=draft.retail_price,
            stock_quantity=draft.stock_quantity,
        )
        if draft.supplier_name:
            product.supplier = find_or_create_supplier(self.session, draft.supplier_name)
        if draft.category_name:
            product.category = find_or_create_category(self.session, draft.category_name)

        self.session.add_product(product)
        summary.products_created += 1

        self._record_prices(product, None, None, summary)

    def _update_product(self, update: ProductUpdateDraft, summary: ApplyResult) -> None:
        product = self.session.get_product(update.barcode)
        if product is None:
            logger.warning("update_skipped_product_missing", barcode=update.barcode)
            summary.skipped_barcodes.append(update.barcode)
            return

        old_purchase = product.purchase_price
        old_retail = product.retail_price

        for field in update.changed_fields:
            self._apply_field(product, field, update.new)

        summary.products_updated += 1

        self._record_prices(product, old_purchase, old_retail, summary)

    def _apply_field(self, product: Product, field: ProductField, new: ProductDraft) -> None:
        if field == ProductField.SUPPLIER_NAME:
            if new.supplier_name:
                product.supplier = find_or_create_supplier(self.session, new.supplier_name)
            else:
                product.supplier = None
        elif field == ProductField.CATEGORY_NAME:
            if new.category_name:
                product.category = find_or_create_category(self.session, new.category_name)
            else:
                product.category = None
        else:
            setattr(product, field.value, new.value_of(field))

    def _record_prices(self, product, old_purchase, old_retail, summary: ApplyResult) -> None:
        for price_type, old_price, new_price in (
            (PriceType.PURCHASE, old_purchase, product.purchase_price),
            (PriceType.RETAIL, old_retail, product.retail_price),
        ):
            record = record_price_change(
                self.session, product, price_type, old_price, new_price, self.price_source
            )
            if record is not None:
                summary.price_records_created += 1
