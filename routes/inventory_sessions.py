"""
Inventory session API routes.

Scanning, catalog sync, export, and handing a session grid to the
product import flow.
"""

from urllib.parse import quote

from fastapi import APIRouter
from fastapi.responses import JSONResponse, StreamingResponse
import structlog

from models.inventory_session import InventorySession, SyncResult, ScanRequest, ScanResult
from models.reconciliation import ImportAnalysisResponse
from services.inventory_session_service import get_inventory_session_service
from services.inventory_sync_service import get_inventory_sync_service
from services.product_import_service import get_product_import_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.get("/{session_id}", response_model=InventorySession)
async def get_inventory_session(session_id: str):
    """
    Get a session with its grid.

    Raises:
        404: Session not found
    """
    try:
        service = get_inventory_session_service()
        return service.get(session_id)

    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/sync", response_model=SyncResult)
async def sync_inventory_session(session_id: str):
    """
    Write counted quantities and retail prices to the catalog.

    Row problems are reported in the grid's SyncError column.
    """
    try:
        service = get_inventory_sync_service()
        return service.sync(session_id)

    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/scan", response_model=ScanResult)
async def scan_barcode(session_id: str, request: ScanRequest):
    """
    Count one scanned barcode in the session grid.
    """
    try:
        service = get_inventory_session_service()
        return service.register_scan(session_id, request.code)

    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/import-analysis", response_model=ImportAnalysisResponse)
async def analyze_session_import(session_id: str):
    """
    Analyze the session grid as a product import.

    Apply the result through /api/imports/{preview_id}/apply.
    """
    try:
        rows = get_inventory_session_service().mapped_rows_for_import(session_id)

        service = get_product_import_service()
        result = service.analyze_mapped_rows(rows)
        preview_id = service.preview(result)

        return ImportAnalysisResponse.create(preview_id, result)

    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}/export")
async def export_inventory_session(session_id: str):
    """
    Download the session grid as an Excel file.
    """
    try:
        service = get_inventory_session_service()
        filename, output = service.export(session_id)

        return StreamingResponse(
            output,
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"}
        )

    except Exception as e:
        return handle_error(e)
