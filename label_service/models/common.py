"""
Common Pydantic models shared across the application.
"""

from datetime import datetime
from typing import Literal
from pydantic import BaseModel, Field

from label_service.config import settings


class ErrorResponse(BaseModel):
    """Standard error response model."""

    status: Literal["error"] = "error"
    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict | None = Field(None, description="Additional error context")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    request_id: str | None = Field(None, description="Unique request identifier")


class AllocateRequest(BaseModel):
    """Request to reserve a batch of new codes."""

    prefix: str = Field(settings.default_prefix, description="1-3 letters or digits, upper-cased before use")
    count: int = Field(1, strict=True, description="Number of codes to reserve")


class AllocateResponse(BaseModel):
    """Codes issued by one allocation call, in order."""

    codes: list[str]


class GenerateSheetRequest(BaseModel):
    """Request to render codes onto label sheets."""

    codes: list[str] = Field(default_factory=list, description="Codes in print order")
    start_index: int = Field(
        1,
        alias="startIndex",
        strict=True,
        description="1-based label slot on the first sheet"
    )

    model_config = {"populate_by_name": True}


class IssuedCode(BaseModel):
    """One ledger entry."""

    id: int
    code: str
    prefix: str
    number: int
    created_at: datetime


class IssuedCodesResponse(BaseModel):
    """Newest-first slice of the ledger."""

    codes: list[IssuedCode]
    count: int


class NextCodeResponse(BaseModel):
    """Code the next allocation would start with."""

    prefix: str
    next_code: str
