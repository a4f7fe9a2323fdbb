"""
Groups import rows by barcode.

Rows sharing a barcode collapse into one pending row: the last row's
values win and quantities are summed across the group.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from models.reconciliation import RowError
from utils.number_utils import parse_decimal

MISSING_BARCODE = "Missing barcode."


def build_row_map(header: list[str], row: list[str]) -> dict[str, str]:
    """
    Key a raw row by column name.

    Short rows are padded with "" and every value is trimmed. If the
    header repeats a column name, the rightmost cell wins.
    """
    values: dict[str, str] = {}
    for index, column in enumerate(header):
        cell = row[index] if index < len(row) else ""
        values[column] = (cell or "").strip()
    return values


def row_quantity(values: dict[str, str]) -> Optional[Decimal]:
    """Quantity of a row: stockQuantity, then quantity."""
    quantity = parse_decimal(values.get("stockQuantity"))
    if quantity is None:
        quantity = parse_decimal(values.get("quantity"))
    return quantity


def literal_quantity(values: dict[str, str]) -> Optional[Decimal]:
    """
    The row's own quantity cell: stockQuantity when that column exists,
    else quantity. An empty stockQuantity cell does not fall through.
    """
    if "stockQuantity" in values:
        return parse_decimal(values["stockQuantity"])
    return parse_decimal(values.get("quantity"))


@dataclass
class PendingRow:
    """Accumulated state of all rows sharing one barcode."""

    last_row: dict[str, str]
    row_numbers: list[int] = field(default_factory=list)
    quantity_sum: Decimal = Decimal("0")

    @property
    def stock_quantity(self) -> Optional[Decimal]:
        """
        Stock quantity for the draft.

        A positive sum overrides the last row; otherwise the last row's
        own value (if any) is used as is.
        """
        if self.quantity_sum > 0:
            return self.quantity_sum
        return literal_quantity(self.last_row)


@dataclass
class GroupedRows:
    """Output of group_rows."""

    pending: dict[str, PendingRow] = field(default_factory=dict)
    errors: list[RowError] = field(default_factory=list)


def group_rows(header: list[str], data_rows: list[list[str]]) -> GroupedRows:
    """
    Group data rows by trimmed barcode.

    Args:
        header: Column names
        data_rows: Rows below the header; row numbers are 1-based

    Returns:
        Pending rows keyed by barcode plus one error per row without a barcode
    """
    grouped = GroupedRows()

    for row_number, row in enumerate(data_rows, start=1):
        values = build_row_map(header, row)
        barcode = values.get("barcode", "")

        if not barcode:
            grouped.errors.append(RowError(
                row_number=row_number,
                reason=MISSING_BARCODE,
                row_content=values,
            ))
            continue

        quantity = row_quantity(values) or Decimal("0")

        pending = grouped.pending.get(barcode)
        if pending is None:
            grouped.pending[barcode] = PendingRow(
                last_row=values,
                row_numbers=[row_number],
                quantity_sum=quantity,
            )
        else:
            pending.last_row = values
            pending.row_numbers.append(row_number)
            pending.quantity_sum += quantity

    return grouped
