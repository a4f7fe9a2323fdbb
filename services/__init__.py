"""
Business logic services.

Each service handles one domain area. Services that write hold their own
CatalogSession (unit of work), so the get_*_service() factories return a
fresh instance per call.
"""

from services.catalog_session import CatalogSession
from services.product_import_service import ProductImportService, get_product_import_service
from services.import_apply_service import ImportApplyService
from services.inventory_sync_service import InventorySyncService, get_inventory_sync_service
from services.inventory_session_service import (
    InventorySessionService,
    get_inventory_session_service,
)
from services.price_history_service import PriceHistoryService, get_price_history_service
from services.export_service import ExportService, get_export_service

__all__ = [
    "CatalogSession",
    "ProductImportService",
    "get_product_import_service",
    "ImportApplyService",
    "InventorySyncService",
    "get_inventory_sync_service",
    "InventorySessionService",
    "get_inventory_session_service",
    "PriceHistoryService",
    "get_price_history_service",
    "ExportService",
    "get_export_service",
]
