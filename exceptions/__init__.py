"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    DuplicateError,
    DatabaseError,

    # Catalog
    ProductNotFoundError,
    ProductBarcodeExistsError,

    # Import
    ImportFormatError,
    GridParseError,
    ImportPreviewNotFoundError,

    # Inventory sessions
    InventorySessionNotFoundError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DuplicateError",
    "DatabaseError",

    # Catalog
    "ProductNotFoundError",
    "ProductBarcodeExistsError",

    # Import
    "ImportFormatError",
    "GridParseError",
    "ImportPreviewNotFoundError",

    # Inventory sessions
    "InventorySessionNotFoundError",
]
