"""
Inventory session operations: barcode scans, export and import hand-off.
"""

from decimal import Decimal
from io import BytesIO
from typing import Optional

import structlog

from models.inventory_session import (
    DEFAULT_MANUAL_HEADER,
    InventorySession,
    ScanResult,
)
from exceptions import InventorySessionNotFoundError, ValidationError
from services.catalog_session import CatalogSession
from services.export_service import get_export_service
from utils.number_utils import format_quantity, parse_decimal
from utils.text_utils import find_column

logger = structlog.get_logger(__name__)


class InventorySessionService:
    """
    Grid-level operations on a stored inventory session.
    """

    def __init__(self, session: Optional[CatalogSession] = None):
        self.session = session or CatalogSession()

    def get(self, session_id: str) -> InventorySession:
        """
        Load an inventory session.

        Raises:
            InventorySessionNotFoundError: If it does not exist
        """
        inventory = self.session.get_inventory_session(session_id)
        if inventory is None:
            raise InventorySessionNotFoundError(session_id)
        return inventory

    # ===================
    # SCANNING
    # ===================

    def register_scan(self, session_id: str, code: str) -> ScanResult:
        """
        Count one scanned barcode.

        Increments realQuantity of the first row with that barcode. In a
        manual-entry session an unknown barcode appends a new row,
        prefilled from the catalog when the product exists.

        Args:
            session_id: Inventory session identifier
            code: Decoded barcode

        Returns:
            ScanResult describing the touched row

        Raises:
            InventorySessionNotFoundError: If the session does not exist
            ValidationError: If the grid cannot take the scan
        """
        barcode = (code or "").strip()
        if not barcode:
            raise ValidationError("Scanned code is empty", code="SCAN_EMPTY_CODE")

        inventory = self.get(session_id)
        logger.info("registering_scan", session_id=session_id, barcode=barcode)

        grid = [list(row) for row in inventory.data]
        if not grid and inventory.is_manual_entry:
            grid = [list(DEFAULT_MANUAL_HEADER)]
        if not grid:
            raise ValidationError(
                "Session has no grid loaded",
                code="SCAN_NO_GRID",
                details={"session_id": session_id}
            )

        header = grid[0]
        barcode_index = find_column(header, "barcode")
        if barcode_index is None:
            raise ValidationError(
                "Session grid has no barcode column",
                code="SCAN_NO_BARCODE_COLUMN",
                details={"session_id": session_id}
            )
        quantity_index = find_column(header, "realQuantity")

        product = self.session.get_product(barcode)

        row_index = self._find_row(grid, barcode_index, barcode)
        if row_index is not None:
            if quantity_index is None:
                raise ValidationError(
                    "Session grid has no realQuantity column",
                    code="SCAN_NO_QUANTITY_COLUMN",
                    details={"session_id": session_id}
                )
            row = grid[row_index]
            if len(row) < len(header):
                row.extend([""] * (len(header) - len(row)))

            current = parse_decimal(row[quantity_index]) or Decimal("0")
            row[quantity_index] = format_quantity(current + 1)

            result = ScanResult(
                row_index=row_index,
                created=False,
                product_found=product is not None,
                real_quantity=row[quantity_index],
            )

        elif inventory.is_manual_entry:
            grid.append(self._new_row(header, barcode, product))
            row_index = len(grid) - 1

            result = ScanResult(
                row_index=row_index,
                created=True,
                product_found=product is not None,
                real_quantity="1",
                message=None if product else "Product not in catalog, row added with barcode only",
            )

        else:
            raise ValidationError(
                f"No row found for barcode {barcode}",
                code="SCAN_ROW_NOT_FOUND",
                details={"session_id": session_id, "barcode": barcode}
            )

        inventory.data = grid
        self.session.save_inventory_session(inventory)
        self.session.commit()

        logger.info(
            "scan_registered",
            session_id=session_id,
            barcode=barcode,
            row_index=result.row_index,
            created=result.created
        )

        return result

    def _find_row(self, grid: list[list[str]], barcode_index: int, barcode: str) -> Optional[int]:
        for index in range(1, len(grid)):
            row = grid[index]
            if barcode_index < len(row) and row[barcode_index].strip() == barcode:
                return index
        return None

    def _new_row(self, header: list[str], barcode: str, product) -> list[str]:
        row = [""] * len(header)
        row[find_column(header, "barcode")] = barcode

        name_index = find_column(header, "productName")
        if name_index is not None and product is not None:
            row[name_index] = product.display_name or ""

        quantity_index = find_column(header, "realQuantity")
        if quantity_index is not None:
            row[quantity_index] = "1"

        price_index = find_column(header, "RetailPrice", case_insensitive=True)
        if price_index is not None and product is not None:
            if product.retail_price is not None and product.retail_price > 0:
                row[price_index] = f"{product.retail_price:.2f}"

        return row

    # ===================
    # IMPORT HAND-OFF
    # ===================

    def mapped_rows_for_import(self, session_id: str) -> list[dict[str, str]]:
        """
        Session grid as column-keyed rows for product import.

        Empty cells are dropped and rows without a barcode are skipped.

        Raises:
            ValidationError: If the grid has no usable rows
        """
        inventory = self.get(session_id)
        header = inventory.header

        rows = []
        for raw in inventory.data[1:]:
            values = {}
            for index, column in enumerate(header):
                cell = raw[index].strip() if index < len(raw) else ""
                if cell:
                    values[column] = cell
            if values.get("barcode"):
                rows.append(values)

        if not rows:
            raise ValidationError(
                "No valid rows to import",
                code="IMPORT_NO_VALID_ROWS",
                details={"session_id": session_id}
            )

        logger.info("session_rows_mapped", session_id=session_id, rows=len(rows))
        return rows

    # ===================
    # EXPORT
    # ===================

    def export(self, session_id: str) -> tuple[str, BytesIO]:
        """
        Export the session grid and mark the session as exported.

        Returns:
            Tuple of (file name, Excel file)
        """
        inventory = self.get(session_id)

        filename, output = get_export_service().export_grid(inventory.data, inventory.title)

        inventory.was_exported = True
        self.session.save_inventory_session(inventory)
        self.session.commit()

        logger.info("inventory_session_exported", session_id=session_id, filename=filename)
        return filename, output


def get_inventory_session_service() -> InventorySessionService:
    """Fresh service per call; each holds its own unit of work."""
    return InventorySessionService()
