"""
Inventory sync: writes counted quantities (and optional retail prices)
from a session grid back to the catalog.

Row-level problems are written into the grid's SyncError column instead
of aborting the run. The grid and all catalog changes are committed
together.

A retail price on a counted row is always written to the product, but
an INVENTORY_SYNC history record is added only when it differs from the
stored price. Price history records changes, so a recount that repeats
the current price leaves the history as it was; imports follow the same
rule.
"""

from decimal import Decimal
from typing import Optional

import structlog

from config import settings
from models.catalog import PriceType
from models.inventory_session import InventorySession, SyncStatus, SyncResult
from exceptions import InventorySessionNotFoundError
from services.catalog_session import CatalogSession
from services.price_history_service import record_price_change
from utils.number_utils import normalize_number_string, parse_decimal
from utils.text_utils import find_column

logger = structlog.get_logger(__name__)

SYNC_ERROR_COLUMN = "SyncError"

INVALID_QUANTITY = "Invalid quantity"
INVALID_RETAIL_PRICE = "Invalid retail price"
BARCODE_NOT_FOUND = "Barcode not found"


def _parse_non_negative(text: str) -> Optional[Decimal]:
    value = parse_decimal(text)
    if value is None or value < 0:
        return None
    return value


class InventorySyncService:
    """
    Pushes an inventory session's counts into the catalog.
    """

    def __init__(
        self,
        session: Optional[CatalogSession] = None,
        price_source: Optional[str] = None
    ):
        self.session = session or CatalogSession()
        self.price_source = price_source or settings.sync_price_source

    def sync(self, session_id: str) -> SyncResult:
        """
        Sync a stored inventory session and commit.

        Args:
            session_id: Inventory session identifier

        Returns:
            SyncResult with counts and summary message

        Raises:
            InventorySessionNotFoundError: If the session does not exist
            DatabaseError: If the commit fails
        """
        logger.info("syncing_inventory_session", session_id=session_id)

        inventory = self.session.get_inventory_session(session_id)
        if inventory is None:
            raise InventorySessionNotFoundError(session_id)

        try:
            result = self.sync_session(inventory)
            self.session.commit()
        except Exception as e:
            logger.error("inventory_sync_failed", session_id=session_id, error=str(e))
            self.session.rollback()
            raise

        logger.info(
            "inventory_session_synced",
            session_id=session_id,
            processed=result.processed_rows,
            attempted=result.attempted_updates,
            succeeded=result.succeeded,
            failed=result.failed,
            status=inventory.sync_status.value
        )

        return result

    def sync_session(self, inventory: InventorySession) -> SyncResult:
        """
        Apply a session grid to the catalog without committing.

        Mutates the session grid (SyncError column) and status, and
        stages the session plus product changes on the unit of work.
        """
        if not inventory.data:
            return SyncResult()

        grid = [list(row) for row in inventory.data]
        header = grid[0]

        if SYNC_ERROR_COLUMN not in header:
            header.append(SYNC_ERROR_COLUMN)
        error_index = header.index(SYNC_ERROR_COLUMN)

        barcode_index = find_column(header, "barcode")
        if barcode_index is None:
            logger.warning("sync_skipped_no_barcode_column", session_id=inventory.id)
            inventory.data = grid
            self.session.save_inventory_session(inventory)
            return SyncResult()

        quantity_index = find_column(header, "realQuantity")
        if quantity_index is None:
            quantity_index = find_column(header, "quantity")
        price_index = find_column(header, "RetailPrice", case_insensitive=True)

        result = SyncResult()

        for row in grid[1:]:
            result.processed_rows += 1

            if len(row) < len(header):
                row.extend([""] * (len(header) - len(row)))
            row[error_index] = ""

            barcode = row[barcode_index].strip()
            if not barcode:
                continue

            quantity_text = ""
            if quantity_index is not None:
                quantity_text = normalize_number_string(row[quantity_index])
            if not quantity_text:
                continue

            result.attempted_updates += 1

            quantity = _parse_non_negative(quantity_text)
            if quantity is None:
                row[error_index] = INVALID_QUANTITY
                result.failed += 1
                continue

            new_retail = None
            if price_index is not None:
                price_text = normalize_number_string(row[price_index])
                if price_text:
                    new_retail = _parse_non_negative(price_text)
                    if new_retail is None:
                        row[error_index] = INVALID_RETAIL_PRICE
                        result.failed += 1
                        continue

            product = self.session.get_product(barcode)
            if product is None:
                row[error_index] = BARCODE_NOT_FOUND
                result.failed += 1
                continue

            product.stock_quantity = quantity

            if new_retail is not None:
                old_retail = product.retail_price
                product.retail_price = new_retail
                # No record when new_retail equals the stored price
                record_price_change(
                    self.session,
                    product,
                    PriceType.RETAIL,
                    old_retail,
                    new_retail,
                    self.price_source
                )

            result.succeeded += 1

        inventory.data = grid

        if result.attempted_updates > 0:
            if result.failed == 0:
                inventory.sync_status = SyncStatus.SYNCED_SUCCESSFULLY
            else:
                inventory.sync_status = SyncStatus.ATTEMPTED_WITH_ERRORS

        self.session.save_inventory_session(inventory)
        return result


def get_inventory_sync_service() -> InventorySyncService:
    """Fresh service per call; each holds its own unit of work."""
    return InventorySyncService()
