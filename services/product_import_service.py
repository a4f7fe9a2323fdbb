"""
Product import: analyze an uploaded table against the catalog, hold the
result for review, then apply it.

Analysis is read-only. Nothing is written until apply.
"""

from typing import Optional

import structlog

from config import settings
from models.reconciliation import ReconciliationResult, ApplyResult
from exceptions import ImportPreviewNotFoundError
from parsers.grid_parser import TabularGrid, grid_from_mapped_rows
from services import preview_cache_service
from services.catalog_diff_service import build_snapshot, reconcile, require_barcode_column
from services.catalog_session import CatalogSession
from services.import_apply_service import ImportApplyService

logger = structlog.get_logger(__name__)


class ProductImportService:
    """
    Import pipeline: analyze, preview, apply.
    """

    def __init__(self, session: Optional[CatalogSession] = None):
        self.session = session or CatalogSession()

    # ===================
    # ANALYSIS
    # ===================

    def analyze_grid(self, header: list[str], rows: list[list[str]]) -> ReconciliationResult:
        """
        Diff a decoded table against the current catalog.

        Args:
            header: Column names
            rows: Data rows

        Returns:
            ReconciliationResult for review

        Raises:
            ImportFormatError: If the header has no barcode column
        """
        logger.info("analyzing_import", columns=len(header), rows=len(rows))

        require_barcode_column(header)

        snapshot = build_snapshot(self.session.fetch_products())
        # Apply must re-read live records, not the ones loaded here
        self.session.reset()

        result = reconcile(header, rows, snapshot, epsilon=settings.decimal_epsilon)

        logger.info(
            "import_analyzed",
            catalog_size=len(snapshot),
            new=len(result.new_products),
            updated=len(result.updated_products),
            errors=len(result.errors),
            warnings=len(result.warnings)
        )

        return result

    def analyze(self, grid: TabularGrid) -> ReconciliationResult:
        """Analyze a decoded file."""
        return self.analyze_grid(grid.header, grid.rows)

    def analyze_mapped_rows(self, rows: list[dict[str, str]]) -> ReconciliationResult:
        """Analyze rows already keyed by column name."""
        return self.analyze(grid_from_mapped_rows(rows))

    # ===================
    # PREVIEW
    # ===================

    def preview(self, result: ReconciliationResult) -> str:
        """Hold a result for review. Returns the preview id."""
        return preview_cache_service.store_preview(result)

    def get_preview(self, preview_id: str) -> ReconciliationResult:
        """
        Raises:
            ImportPreviewNotFoundError: If expired or unknown
        """
        result = preview_cache_service.retrieve_preview(preview_id)
        if result is None:
            raise ImportPreviewNotFoundError(preview_id)
        return result

    def discard_preview(self, preview_id: str) -> None:
        """
        Drop a preview without applying it.

        Raises:
            ImportPreviewNotFoundError: If expired or unknown
        """
        if not preview_cache_service.delete_preview(preview_id):
            raise ImportPreviewNotFoundError(preview_id)
        logger.info("import_preview_discarded", preview_id=preview_id)

    # ===================
    # APPLY
    # ===================

    def apply(self, result: ReconciliationResult) -> ApplyResult:
        """Apply a reviewed result in one transaction."""
        return ImportApplyService(self.session).apply(result)

    def apply_preview(self, preview_id: str) -> ApplyResult:
        """
        Apply a held preview, then drop it.

        The preview is kept if the apply fails, so it can be retried.
        """
        result = self.get_preview(preview_id)
        applied = self.apply(result)
        preview_cache_service.delete_preview(preview_id)

        logger.info("import_preview_applied", preview_id=preview_id)
        return applied


def get_product_import_service() -> ProductImportService:
    """Fresh service per call; each holds its own unit of work."""
    return ProductImportService()
