"""
Product API routes.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.catalog import ProductPrice
from services.price_history_service import get_price_history_service
from exceptions import AppError

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

@router.get("/{barcode}/price-history", response_model=list[ProductPrice])
async def get_price_history(barcode: str):
    """
    Get purchase and retail price history, newest first.

    Raises:
        404: Product not found
    """
    try:
        service = get_price_history_service()
        return service.get_history(barcode)

    except Exception as e:
        return handle_error(e)
