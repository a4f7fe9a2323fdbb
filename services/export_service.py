"""
Export service: writes an inventory grid to an Excel workbook.

Every cell is written as text so barcodes and counted quantities keep
exactly what was typed (no leading-zero loss, no formulas).
"""

from datetime import datetime
from io import BytesIO
from typing import Optional

from openpyxl import Workbook
from openpyxl.cell.cell import TYPE_STRING
import structlog

from utils.text_utils import sanitize_filename

logger = structlog.get_logger(__name__)

SHEET_TITLE = "Inventory"
DEFAULT_FILE_NAME = "Inventory"


def export_filename(preferred_name: str, now: Optional[datetime] = None) -> str:
    """
    Build the download name for an export.

    "Fornitore 12/03" at 2025-12-03 14:05:09 →
    "Fornitore 12-03_2025-12-03_14-05-09.xlsx"
    """
    now = now or datetime.now()
    base = sanitize_filename(preferred_name, default=DEFAULT_FILE_NAME)
    return f"{base}_{now.strftime('%Y-%m-%d_%H-%M-%S')}.xlsx"


class ExportService:
    """Service for generating inventory export files."""

    def generate_grid_excel(self, grid: list[list[str]]) -> BytesIO:
        """
        Generate an Excel file from a grid.

        Args:
            grid: Header row followed by data rows

        Returns:
            BytesIO containing the Excel file
        """
        logger.info(
            "generating_grid_export",
            rows=len(grid),
            columns=len(grid[0]) if grid else 0,
        )

        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_TITLE

        for row_index, row in enumerate(grid, start=1):
            for col_index, value in enumerate(row, start=1):
                cell = ws.cell(row=row_index, column=col_index, value=str(value))
                cell.data_type = TYPE_STRING

        # Save to BytesIO
        output = BytesIO()
        wb.save(output)
        output.seek(0)

        return output

    def export_grid(self, grid: list[list[str]], preferred_name: str) -> tuple[str, BytesIO]:
        """Generate the workbook and its download name."""
        return export_filename(preferred_name), self.generate_grid_excel(grid)


# Singleton instance
_export_service: Optional[ExportService] = None


def get_export_service() -> ExportService:
    """Get or create ExportService instance."""
    global _export_service
    if _export_service is None:
        _export_service = ExportService()
    return _export_service
