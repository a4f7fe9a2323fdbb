"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema, RawSchema
from models.catalog import (
    Supplier,
    Category,
    PriceType,
    Product,
    ProductPrice,
)
from models.reconciliation import (
    ProductField,
    FieldKind,
    FieldSpec,
    FIELD_SPECS,
    ProductDraft,
    ProductUpdateDraft,
    DuplicateWarning,
    RowError,
    ReconciliationResult,
    ApplyResult,
    ImportAnalysisResponse,
)
from models.inventory_session import (
    DEFAULT_MANUAL_HEADER,
    SyncStatus,
    InventorySession,
    SyncResult,
    ScanRequest,
    ScanResult,
)

__all__ = [
    # Base
    "BaseSchema",
    "RawSchema",

    # Catalog
    "Supplier",
    "Category",
    "PriceType",
    "Product",
    "ProductPrice",

    # Reconciliation
    "ProductField",
    "FieldKind",
    "FieldSpec",
    "FIELD_SPECS",
    "ProductDraft",
    "ProductUpdateDraft",
    "DuplicateWarning",
    "RowError",
    "ReconciliationResult",
    "ApplyResult",
    "ImportAnalysisResponse",

    # Inventory sessions
    "DEFAULT_MANUAL_HEADER",
    "SyncStatus",
    "InventorySession",
    "SyncResult",
    "ScanRequest",
    "ScanResult",
]
