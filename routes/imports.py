"""
Product import API routes.

Two-step flow: analyze an upload (read-only, returns a preview id),
then apply or discard the preview.
"""

from fastapi import APIRouter, UploadFile, File
from fastapi.responses import JSONResponse
import structlog

from config import settings
from models.reconciliation import ImportAnalysisResponse, ApplyResult
from parsers.grid_parser import read_grid
from services.product_import_service import get_product_import_service
from exceptions import AppError, GridParseError

logger = structlog.get_logger(__name__)

router = APIRouter()


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

@router.post("/analyze", response_model=ImportAnalysisResponse)
async def analyze_import(
    file: UploadFile = File(..., description="Excel (.xlsx) or CSV file with a barcode column")
):
    """
    Analyze an import file against the catalog.

    Nothing is written. The returned preview_id is used to apply the result.
    """
    logger.info(
        "import_upload_received",
        filename=file.filename,
        content_type=file.content_type
    )

    try:
        contents = await file.read()

        if len(contents) == 0:
            raise GridParseError("Uploaded file is empty")
        if len(contents) > settings.max_upload_bytes:
            raise GridParseError(
                "Uploaded file is too large",
                details={"max_upload_mb": settings.max_upload_mb}
            )

        grid = read_grid(contents, file.filename or "")

        service = get_product_import_service()
        result = service.analyze(grid)
        preview_id = service.preview(result)

        return ImportAnalysisResponse.create(preview_id, result)

    except Exception as e:
        return handle_error(e)


@router.post("/{preview_id}/apply", response_model=ApplyResult)
async def apply_import(preview_id: str):
    """
    Apply an analyzed import in one transaction.

    Returns 404 if the preview expired.
    """
    try:
        service = get_product_import_service()
        return service.apply_preview(preview_id)

    except Exception as e:
        return handle_error(e)


@router.delete("/{preview_id}", status_code=204)
async def discard_import(preview_id: str):
    """
    Discard an analyzed import without applying it.
    """
    try:
        service = get_product_import_service()
        service.discard_preview(preview_id)
        return None

    except Exception as e:
        return handle_error(e)
