"""
Catalog Reconciliation: Main Application

FastAPI application entry point. Mounts the import, inventory session
and product routers and configures structured logging.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import structlog
from datetime import datetime, timezone

from config import settings, check_connection
from exceptions import AppError

API_VERSION = "0.1.0"


def configure_logging() -> None:
    """Route structlog through stdlib logging at the configured level."""
    logging.basicConfig(level=settings.log_level.upper(), format="%(message)s")

    renderer = (
        structlog.processors.JSONRenderer() if settings.is_production
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Log startup settings and report whether the catalog tables are reachable.
    """
    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug,
        commit_function=settings.catalog_commit_function,
        preview_ttl_minutes=settings.preview_ttl_minutes
    )

    db_status = check_connection()
    if db_status["status"] == "healthy":
        logger.info(
            "database_connected",
            products=db_status["products_count"],
            inventory_sessions=db_status["inventory_sessions_count"]
        )
    else:
        logger.error("database_connection_failed", error=db_status.get("error"))

    yield

    logger.info("application_shutting_down")


app = FastAPI(
    title="Catalog Reconciliation",
    description="Spreadsheet import reconciliation and inventory count sync for a product catalog",
    version=API_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """Service status plus catalog table reachability."""
    db_status = check_connection()

    return {
        "status": "healthy" if db_status["status"] == "healthy" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "database": db_status
    }


@app.get("/")
async def root():
    """API information and mounted endpoints."""
    return {
        "name": "Catalog Reconciliation API",
        "version": API_VERSION,
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "import_analyze": "POST /api/imports/analyze",
            "import_apply": "POST /api/imports/{preview_id}/apply",
            "inventory_sync": "POST /api/inventory-sessions/{session_id}/sync",
            "inventory_scan": "POST /api/inventory-sessions/{session_id}/scan",
            "inventory_export": "GET /api/inventory-sessions/{session_id}/export",
            "price_history": "GET /api/products/{barcode}/price-history"
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Application errors raised outside a route's own handle_error."""
    logger.warning(
        "app_error",
        path=request.url.path,
        code=exc.code,
        status_code=exc.status_code
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch unhandled exceptions and return the standard error format.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes import products_router, imports_router, inventory_sessions_router

app.include_router(products_router, prefix="/api/products", tags=["Products"])
app.include_router(imports_router, prefix="/api/imports", tags=["Imports"])
app.include_router(inventory_sessions_router, prefix="/api/inventory-sessions", tags=["Inventory Sessions"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
