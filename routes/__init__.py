"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.products import router as products_router
from routes.imports import router as imports_router
from routes.inventory_sessions import router as inventory_sessions_router

__all__ = [
    "products_router",
    "imports_router",
    "inventory_sessions_router",
]
