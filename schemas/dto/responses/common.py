"""Response bodies not tied to one resource: errors, health and acknowledgements."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every AppError response; ``field`` names the offending input."""

    error: str
    code: str
    field: Optional[str] = None
    details: Optional[Any] = None


class HealthResponse(BaseModel):
    status: Literal["healthy", "unhealthy"]
    checks: dict[str, Literal["ok", "error"]]


class MessageResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


def error_responses(*status_codes: int) -> dict[int | str, dict[str, Any]]:
    """OpenAPI ``responses=`` entry documenting ErrorResponse for each status."""
    return {code: {"model": ErrorResponse} for code in status_codes}
