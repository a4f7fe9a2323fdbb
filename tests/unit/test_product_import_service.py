"""
Unit tests for ProductImportService (analyze, preview, apply).

Run: pytest tests/unit/test_product_import_service.py -v
"""

from decimal import Decimal

import pytest

from parsers.grid_parser import TabularGrid
from services import preview_cache_service
from services.catalog_session import CatalogSession
from services.product_import_service import ProductImportService
from exceptions import ImportFormatError, ImportPreviewNotFoundError, DatabaseError

from tests.factories import ProductRowFactory


@pytest.fixture
def import_service(mock_supabase) -> ProductImportService:
    return ProductImportService(CatalogSession(client=mock_supabase))


class TestAnalyze:
    """Tests for analysis entry points."""

    def test_analyze_grid(self, mock_supabase, import_service):
        mock_supabase.set_table_data("products", [
            ProductRowFactory.create(barcode="B2", product_name="Gadget", retail_price="9.99")
        ])
        grid = TabularGrid(
            header=["barcode", "productName", "retailPrice"],
            rows=[["B1", "Widget", "1"], ["B2", "Gadget", "10.99"]],
        )

        result = import_service.analyze(grid)

        assert [draft.barcode for draft in result.new_products] == ["B1"]
        assert [update.barcode for update in result.updated_products] == ["B2"]
        assert mock_supabase.rpc_calls == []

    def test_missing_barcode_column(self, import_service):
        with pytest.raises(ImportFormatError):
            import_service.analyze_grid(["code"], [["B1"]])

    def test_analyze_mapped_rows(self, import_service):
        rows = [
            {"barcode": "B1", "quantity": "2"},
            {"barcode": "B1", "productName": "Widget", "quantity": "3"},
        ]

        result = import_service.analyze_mapped_rows(rows)

        draft = result.new_products[0]
        assert draft.stock_quantity == Decimal("5")
        assert draft.product_name == "Widget"
        assert result.warnings[0].row_numbers == [1, 2]


class TestPreviewFlow:
    """Tests for preview storage and apply."""

    def test_apply_preview_then_gone(self, mock_supabase, import_service):
        result = import_service.analyze_grid(["barcode", "productName"], [["B1", "Widget"]])
        preview_id = import_service.preview(result)

        applied = import_service.apply_preview(preview_id)

        assert applied.products_created == 1
        assert mock_supabase.get_table_data("products")[0]["barcode"] == "B1"
        with pytest.raises(ImportPreviewNotFoundError):
            import_service.apply_preview(preview_id)

    def test_failed_apply_keeps_preview(self, mock_supabase, import_service):
        result = import_service.analyze_grid(["barcode"], [["B1"]])
        preview_id = import_service.preview(result)
        mock_supabase.rpc_error = Exception("down")

        with pytest.raises(DatabaseError):
            import_service.apply_preview(preview_id)

        assert preview_cache_service.retrieve_preview(preview_id) is result

    def test_discard_preview(self, import_service):
        result = import_service.analyze_grid(["barcode"], [["B1"]])
        preview_id = import_service.preview(result)

        import_service.discard_preview(preview_id)

        with pytest.raises(ImportPreviewNotFoundError):
            import_service.get_preview(preview_id)

    def test_discard_unknown_preview(self, import_service):
        with pytest.raises(ImportPreviewNotFoundError) as exc:
            import_service.discard_preview("nope")

        assert exc.value.status_code == 404

    def test_expired_preview(self, import_service):
        result = import_service.analyze_grid(["barcode"], [["B1"]])
        preview_id = preview_cache_service.store_preview(result, ttl_minutes=-1)

        with pytest.raises(ImportPreviewNotFoundError):
            import_service.get_preview(preview_id)
