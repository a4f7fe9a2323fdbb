"""
Inventory count session schemas.

A session owns one grid (row 0 is the header) filled in while counting
stock. Syncing writes the counted values back to the catalog.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, computed_field

from models.base import BaseSchema, RawSchema

DEFAULT_MANUAL_HEADER = ["barcode", "productName", "realQuantity", "RetailPrice"]


class SyncStatus(str, Enum):
    """Outcome of the last catalog sync of a session."""
    NOT_ATTEMPTED = "not_attempted"
    SYNCED_SUCCESSFULLY = "synced_successfully"
    ATTEMPTED_WITH_ERRORS = "attempted_with_errors"


class InventorySession(RawSchema):
    """Inventory count session with its grid."""

    id: str = Field(..., description="Session identifier (usually the generated file name)")
    title: str = ""
    supplier: str = ""
    category: str = ""
    is_manual_entry: bool = False
    data: list[list[str]] = Field(default_factory=list, description="Header + data rows")
    sync_status: SyncStatus = SyncStatus.NOT_ATTEMPTED
    was_exported: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def header(self) -> list[str]:
        return self.data[0] if self.data else []


class SyncResult(BaseSchema):
    """Counts reported after syncing a session grid."""

    processed_rows: int = 0
    attempted_updates: int = 0
    succeeded: int = 0
    failed: int = 0

    @computed_field
    @property
    def summary_message(self) -> str:
        """Ready-to-display summary."""
        return (
            f"Rows with quantity: {self.attempted_updates}\n"
            f"Updated successfully: {self.succeeded}\n"
            f"With errors: {self.failed}"
        )


class ScanRequest(BaseSchema):
    """Decoded barcode from the scanner or keyboard."""

    code: str = Field(..., min_length=1, description="Scanned barcode")


class ScanResult(BaseSchema):
    """Where a scan landed in the session grid."""

    row_index: int = Field(..., description="Grid row index (header is 0)")
    created: bool = Field(..., description="True if a new row was appended")
    product_found: bool = Field(..., description="True if the barcode is in the catalog")
    real_quantity: str = Field(..., description="Counted quantity after the scan")
    message: Optional[str] = None
