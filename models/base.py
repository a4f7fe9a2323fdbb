"""
Base schemas for all models.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class RawSchema(BaseSchema):
    """
    Base for schemas that carry user-entered grids verbatim.

    Cells are stored exactly as typed, so no whitespace stripping.
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=False,
        validate_assignment=True
    )
