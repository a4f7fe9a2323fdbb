"""
Custom exception classes for the application.

Every error carries a stable code, a human-readable message and the HTTP
status the API layer should answer with.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PRODUCT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class DuplicateError(ConflictError):
    """Duplicate resource (409)."""

    def __init__(
        self,
        resource: str,
        field: str,
        value: str
    ):
        super().__init__(
            code=f"{resource.upper()}_{field.upper()}_EXISTS",
            message=f"{resource} with this {field} already exists",
            details={field: value}
        )


# ===================
# CATALOG ERRORS
# ===================

class ProductNotFoundError(NotFoundError):
    """Product not found for a barcode."""

    def __init__(self, barcode: str):
        super().__init__(
            resource="Product",
            identifier=barcode,
            code="PRODUCT_NOT_FOUND"
        )


class ProductBarcodeExistsError(DuplicateError):
    """Product barcode already exists."""

    def __init__(self, barcode: str):
        super().__init__(
            resource="Product",
            field="barcode",
            value=barcode
        )


# ===================
# IMPORT ERRORS
# ===================

class ImportFormatError(ValidationError):
    """Imported table is structurally unusable (e.g. no barcode column)."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="IMPORT_INVALID_FORMAT",
            message=message,
            details=details
        )


class GridParseError(ValidationError):
    """Uploaded file could not be decoded into a header and rows."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="GRID_PARSE_ERROR",
            message=message,
            details=details
        )


class ImportPreviewNotFoundError(NotFoundError):
    """Import preview expired or never existed."""

    def __init__(self, preview_id: str):
        super().__init__(
            resource="Import preview",
            identifier=preview_id,
            code="IMPORT_PREVIEW_NOT_FOUND"
        )


# ===================
# INVENTORY SESSION ERRORS
# ===================

class InventorySessionNotFoundError(NotFoundError):
    """Inventory count session not found."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="Inventory session",
            identifier=session_id,
            code="INVENTORY_SESSION_NOT_FOUND"
        )
