"""
Catalog diff: turns grouped import rows into a reviewable change-set.

Read-only. Nothing here touches the store; callers pass in a snapshot
of the catalog keyed by barcode.
"""

from decimal import Decimal
from types import MappingProxyType
from typing import Iterable, Mapping

import structlog

from models.catalog import Product
from models.reconciliation import (
    FIELD_SPECS,
    FieldKind,
    ProductField,
    ProductDraft,
    ProductUpdateDraft,
    DuplicateWarning,
    ReconciliationResult,
)
from exceptions import ImportFormatError
from services.row_grouper import PendingRow, group_rows
from utils.number_utils import DEFAULT_EPSILON, decimals_equal, parse_decimal
from utils.text_utils import trimmed_or_none

logger = structlog.get_logger(__name__)

BARCODE_COLUMN = "barcode"


def require_barcode_column(header: list[str]) -> None:
    """
    Fail fast when the table cannot be keyed by barcode.

    Raises:
        ImportFormatError: If the header has no "barcode" column
    """
    if BARCODE_COLUMN not in header:
        raise ImportFormatError(
            "Column 'barcode' not found in the file header.",
            details={"header": header},
        )


def build_draft(barcode: str, pending: PendingRow) -> ProductDraft:
    """Draft from the merged row of one barcode."""
    values = {}
    for field_spec in FIELD_SPECS:
        raw = pending.last_row.get(field_spec.column)
        if field_spec.field == ProductField.STOCK_QUANTITY:
            values[field_spec.field.value] = pending.stock_quantity
        elif field_spec.kind == FieldKind.DECIMAL:
            values[field_spec.field.value] = parse_decimal(raw)
        else:
            values[field_spec.field.value] = trimmed_or_none(raw)

    return ProductDraft(barcode=barcode, **values)


def draft_from_product(product: Product) -> ProductDraft:
    """Draft of a catalog record's current stored state."""
    return ProductDraft(
        barcode=product.barcode,
        item_number=product.item_number,
        product_name=product.product_name,
        second_product_name=product.second_product_name,
        purchase_price=product.purchase_price,
        retail_price=product.retail_price,
        stock_quantity=product.stock_quantity,
        supplier_name=product.supplier.name if product.supplier else None,
        category_name=product.category.name if product.category else None,
    )


def build_snapshot(products: Iterable[Product]) -> Mapping[str, ProductDraft]:
    """Read-only barcode → draft map of the catalog."""
    return MappingProxyType({
        product.barcode: draft_from_product(product) for product in products
    })


def changed_fields(
    old: ProductDraft,
    new: ProductDraft,
    epsilon: Decimal = DEFAULT_EPSILON
) -> list[ProductField]:
    """
    Fields whose values differ, in declaration order.

    Text: absent equals "". Decimal: compared with epsilon.
    """
    changed = []
    for field_spec in FIELD_SPECS:
        old_value = old.value_of(field_spec.field)
        new_value = new.value_of(field_spec.field)

        if field_spec.kind == FieldKind.DECIMAL:
            if not decimals_equal(old_value, new_value, epsilon):
                changed.append(field_spec.field)
        elif (old_value or "") != (new_value or ""):
            changed.append(field_spec.field)

    return changed


def reconcile(
    header: list[str],
    data_rows: list[list[str]],
    snapshot: Mapping[str, ProductDraft],
    epsilon: Decimal = DEFAULT_EPSILON
) -> ReconciliationResult:
    """
    Diff an import table against a catalog snapshot.

    Args:
        header: Column names; must contain "barcode"
        data_rows: Rows below the header
        snapshot: Current catalog drafts keyed by barcode
        epsilon: Tolerance for decimal comparisons

    Returns:
        ReconciliationResult with drafts, warnings and errors

    Raises:
        ImportFormatError: If the header has no barcode column
    """
    require_barcode_column(header)

    grouped = group_rows(header, data_rows)
    result = ReconciliationResult(errors=grouped.errors)

    for barcode in sorted(grouped.pending):
        pending = grouped.pending[barcode]
        draft = build_draft(barcode, pending)

        existing = snapshot.get(barcode)
        if existing is None:
            result.new_products.append(draft)
        else:
            fields = changed_fields(existing, draft, epsilon)
            if fields:
                result.updated_products.append(ProductUpdateDraft(
                    barcode=barcode,
                    old=existing,
                    new=draft,
                    changed_fields=fields,
                ))

        if len(pending.row_numbers) > 1:
            result.warnings.append(DuplicateWarning(
                barcode=barcode,
                row_numbers=pending.row_numbers,
            ))

    logger.debug(
        "reconciliation_complete",
        rows=len(data_rows),
        new=len(result.new_products),
        updated=len(result.updated_products),
        errors=len(result.errors),
        warnings=len(result.warnings)
    )

    return result

