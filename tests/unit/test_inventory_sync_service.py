"""
Unit tests for InventorySyncService.

Run: pytest tests/unit/test_inventory_sync_service.py -v
"""

from decimal import Decimal

import pytest

from models.inventory_session import SyncStatus
from services.inventory_sync_service import (
    InventorySyncService,
    SYNC_ERROR_COLUMN,
    INVALID_QUANTITY,
    INVALID_RETAIL_PRICE,
    BARCODE_NOT_FOUND,
)
from exceptions import InventorySessionNotFoundError

from tests.factories import ProductRowFactory, InventorySessionFactory


def stored_session(mock_supabase, session_id: str = "s1") -> dict:
    return next(row for row in mock_supabase.get_table_data("inventory_sessions") if row["id"] == session_id)


def stored_product(mock_supabase, barcode: str) -> dict:
    return next(row for row in mock_supabase.get_table_data("products") if row["barcode"] == barcode)


@pytest.fixture
def sync_service(catalog_session) -> InventorySyncService:
    return InventorySyncService(catalog_session)


class TestSyncRows:
    """Per-row sync behavior."""

    def test_negative_quantity_fails_row(self, mock_supabase, sync_service):
        # Arrange
        mock_supabase.set_table_data("products", [
            ProductRowFactory.create(barcode="B3", stock_quantity="2", retail_price="4")
        ])
        mock_supabase.set_table_data("inventory_sessions", [
            InventorySessionFactory.create(id="s1", data=[
                ["barcode", "quantity", "RetailPrice"],
                ["B3", "-1", "5"],
            ])
        ])

        # Act
        result = sync_service.sync("s1")

        # Assert
        assert result.failed == 1
        assert result.succeeded == 0
        assert result.attempted_updates == 1

        session = stored_session(mock_supabase)
        assert session["data"][0] == ["barcode", "quantity", "RetailPrice", SYNC_ERROR_COLUMN]
        assert session["data"][1][3] == INVALID_QUANTITY
        assert session["sync_status"] == SyncStatus.ATTEMPTED_WITH_ERRORS.value

        product = stored_product(mock_supabase, "B3")
        assert product["stock_quantity"] == "2"
        assert product["retail_price"] == "4"
        assert mock_supabase.get_table_data("product_prices") == []

    def test_success_updates_stock_and_retail(self, mock_supabase, sync_service):
        mock_supabase.set_table_data("products", [
            ProductRowFactory.create(barcode="B1", stock_quantity="10", retail_price="4")
        ])
        mock_supabase.set_table_data("inventory_sessions", [
            InventorySessionFactory.create(id="s1", data=[
                ["barcode", "realQuantity", "RetailPrice"],
                ["B1", "3", "5,50"],
            ])
        ])

        result = sync_service.sync("s1")

        assert result.succeeded == 1
        assert result.failed == 0

        product = stored_product(mock_supabase, "B1")
        assert Decimal(product["stock_quantity"]) == Decimal("3")
        assert Decimal(product["retail_price"]) == Decimal("5.50")

        prices = mock_supabase.get_table_data("product_prices")
        assert len(prices) == 1
        assert prices[0]["price_type"] == "retail"
        assert prices[0]["source"] == "INVENTORY_SYNC"
        assert stored_session(mock_supabase)["sync_status"] == SyncStatus.SYNCED_SUCCESSFULLY.value

    def test_unchanged_retail_price_adds_no_history(self, mock_supabase, sync_service):
        mock_supabase.set_table_data("products", [
            ProductRowFactory.create(barcode="B1", retail_price="5")
        ])
        mock_supabase.set_table_data("inventory_sessions", [
            InventorySessionFactory.create(id="s1", data=[
                ["barcode", "realQuantity", "RetailPrice"],
                ["B1", "1", "5.00"],
            ])
        ])

        result = sync_service.sync("s1")

        assert result.succeeded == 1
        assert mock_supabase.get_table_data("product_prices") == []

    def test_real_quantity_preferred_over_quantity(self, mock_supabase, sync_service):
        mock_supabase.set_table_data("products", [ProductRowFactory.create(barcode="B1")])
        mock_supabase.set_table_data("inventory_sessions", [
            InventorySessionFactory.create(id="s1", data=[
                ["barcode", "quantity", "realQuantity"],
                ["B1", "9", "2"],
            ])
        ])

        sync_service.sync("s1")

        assert Decimal(stored_product(mock_supabase, "B1")["stock_quantity"]) == Decimal("2")

    def test_invalid_retail_price_fails_row(self, mock_supabase, sync_service):
        mock_supabase.set_table_data("products", [
            ProductRowFactory.create(barcode="B1", stock_quantity="7")
        ])
        mock_supabase.set_table_data("inventory_sessions", [
            InventorySessionFactory.create(id="s1", data=[
                ["barcode", "realQuantity", "RetailPrice"],
                ["B1", "3", "abc"],
            ])
        ])

        result = sync_service.sync("s1")

        assert result.failed == 1
        assert stored_session(mock_supabase)["data"][1][3] == INVALID_RETAIL_PRICE
        assert stored_product(mock_supabase, "B1")["stock_quantity"] == "7"

    def test_lowercase_retail_price_column_is_accepted(self, mock_supabase, sync_service):
        mock_supabase.set_table_data("products", [ProductRowFactory.create(barcode="B1")])
        mock_supabase.set_table_data("inventory_sessions", [
            InventorySessionFactory.create(id="s1", data=[
                ["barcode", "realQuantity", "retailPrice"],
                ["B1", "1", "2.5"],
            ])
        ])

        sync_service.sync("s1")

        assert Decimal(stored_product(mock_supabase, "B1")["retail_price"]) == Decimal("2.5")

    def test_unknown_barcode_fails_row(self, mock_supabase, sync_service):
        mock_supabase.set_table_data("inventory_sessions", [
            InventorySessionFactory.create(id="s1", data=[
                ["barcode", "realQuantity"],
                ["NOPE", "1"],
            ])
        ])

        result = sync_service.sync("s1")

        assert result.failed == 1
        assert stored_session(mock_supabase)["data"][1][2] == BARCODE_NOT_FOUND

    def test_failed_row_does_not_block_others(self, mock_supabase, sync_service):
        mock_supabase.set_table_data("products", [ProductRowFactory.create(barcode="B1")])
        mock_supabase.set_table_data("inventory_sessions", [
            InventorySessionFactory.create(id="s1", data=[
                ["barcode", "realQuantity"],
                ["NOPE", "1"],
                ["B1", "4"],
            ])
        ])

        result = sync_service.sync("s1")

        assert result.processed_rows == 2
        assert result.succeeded == 1
        assert result.failed == 1
        assert Decimal(stored_product(mock_supabase, "B1")["stock_quantity"]) == Decimal("4")


class TestSyncGrid:
    """Grid-level behavior."""

    def test_uncounted_rows_leave_status_untouched(self, mock_supabase, sync_service):
        mock_supabase.set_table_data("inventory_sessions", [
            InventorySessionFactory.create(
                id="s1",
                sync_status="synced_successfully",
                data=[
                    ["barcode", "realQuantity"],
                    ["B1", ""],
                    ["", "3"],
                ]
            )
        ])

        result = sync_service.sync("s1")

        assert result.processed_rows == 2
        assert result.attempted_updates == 0
        session = stored_session(mock_supabase)
        assert session["sync_status"] == "synced_successfully"
        assert session["data"][0] == ["barcode", "realQuantity", SYNC_ERROR_COLUMN]

    def test_previous_errors_are_reset_and_short_rows_padded(self, mock_supabase, sync_service):
        mock_supabase.set_table_data("products", [ProductRowFactory.create(barcode="B1")])
        mock_supabase.set_table_data("inventory_sessions", [
            InventorySessionFactory.create(id="s1", data=[
                ["barcode", "realQuantity", SYNC_ERROR_COLUMN],
                ["B1", "1", "Barcode not found"],
                ["B2"],
            ])
        ])

        sync_service.sync("s1")

        data = stored_session(mock_supabase)["data"]
        assert data[1] == ["B1", "1", ""]
        assert data[2] == ["B2", "", ""]

    def test_no_barcode_column_saves_grid_only(self, mock_supabase, sync_service):
        mock_supabase.set_table_data("inventory_sessions", [
            InventorySessionFactory.create(id="s1", data=[["code", "realQuantity"], ["B1", "1"]])
        ])

        result = sync_service.sync("s1")

        assert result.processed_rows == 0
        assert result.attempted_updates == 0
        assert stored_session(mock_supabase)["data"][0] == ["code", "realQuantity", SYNC_ERROR_COLUMN]

    def test_empty_grid_writes_nothing(self, mock_supabase, sync_service):
        mock_supabase.set_table_data("inventory_sessions", [
            InventorySessionFactory.create(id="s1", data=[])
        ])

        result = sync_service.sync("s1")

        assert result.processed_rows == 0
        assert mock_supabase.rpc_calls == []

    def test_one_commit_per_sync(self, mock_supabase, sync_service):
        mock_supabase.set_table_data("products", ProductRowFactory.create_batch(2))
        barcodes = [row["barcode"] for row in mock_supabase.get_table_data("products")]
        mock_supabase.set_table_data("inventory_sessions", [
            InventorySessionFactory.create(id="s1", data=[
                ["barcode", "realQuantity"],
                [barcodes[0], "1"],
                [barcodes[1], "2"],
            ])
        ])

        sync_service.sync("s1")

        assert len(mock_supabase.rpc_calls) == 1

    def test_unknown_session_raises(self, sync_service):
        with pytest.raises(InventorySessionNotFoundError):
            sync_service.sync("missing")

    def test_summary_message(self, mock_supabase, sync_service):
        mock_supabase.set_table_data("inventory_sessions", [
            InventorySessionFactory.create(id="s1", data=[
                ["barcode", "realQuantity"],
                ["NOPE", "1"],
            ])
        ])

        result = sync_service.sync("s1")

        assert result.summary_message == (
            "Rows with quantity: 1\n"
            "Updated successfully: 0\n"
            "With errors: 1"
        )
