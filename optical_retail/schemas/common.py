"""
Common Schemas
Shared Pydantic models for common API structures
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Optional


class CamelModel(BaseModel):
    """
    Base for API models

    Attributes are snake_case in Python and camelCase on the wire; either
    form is accepted on input.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


class ErrorResponse(BaseModel):
    """
    Standard error response model

    Used for all API error responses
    """
    detail: str = Field(..., description="Human-readable error message")
    type: Optional[str] = Field(None, description="Error category")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "detail": "Audit not found",
            "type": "not_found"
        }
    })


class SuccessResponse(BaseModel):
    """
    Standard success response model

    Used for operations that don't return specific data
    """
    success: bool = Field(True, description="Operation success flag")
    message: Optional[str] = Field(None, description="Success message")
    data: Optional[Dict[str, Any]] = Field(None, description="Additional response data")
