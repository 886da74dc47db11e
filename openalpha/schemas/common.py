"""
Common schema types used across the API.
"""

from typing import Any, List, Optional

from pydantic import BaseModel


class FieldError(BaseModel):
    field: str
    message: str
    type: str


class ErrorResponse(BaseModel):
    """Body of every error response."""

    detail: str
    kind: str
    retryable: bool = False
    code: Optional[str] = None
    request_id: Optional[str] = None
    errors: Optional[List[FieldError]] = None


class SuccessResponse(BaseModel):
    """Standard success response."""

    message: str
    data: Optional[Any] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    database: str = "connected"
    llm: str = "stub"
