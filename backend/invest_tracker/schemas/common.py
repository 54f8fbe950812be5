"""Shared schema building blocks: response envelope and numeric types."""

from decimal import Decimal
from typing import Annotated, Any, Generic, Optional, TypeVar

from pydantic import BaseModel, PlainSerializer

T = TypeVar("T")

# Numeric columns are Decimal internally and plain JSON numbers on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope wrapping every payload."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class ErrorResponse(BaseModel):
    """Error envelope."""

    success: bool = False
    message: str
    errors: Optional[list[dict[str, Any]]] = None


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    """Build a success envelope; response_model handles serialization."""
    return {"success": True, "message": message, "data": data}
