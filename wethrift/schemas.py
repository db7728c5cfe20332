"""
schemas.py — cross-cutting HTTP envelope contracts.

Every route answers with one of two shapes:
  success: {"success": true,  "data": ...}
  failure: {"success": false, "error": {"code", "message", "details"}}
"""
from __future__ import annotations

from typing import Any, List, Literal, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorDetail(BaseModel):
    field: Optional[str] = None
    issue: str


class ErrorBody(BaseModel):
    code: str
    message: str
    details: List[ErrorDetail] = []


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    error: ErrorBody


def make_error_response(
    code: str,
    message: str,
    details: list[dict[str, Any]] | None = None,
    status_code: int = 500,
) -> JSONResponse:
    """Build the standard {success: false, error: {code, message, details}} response."""
    body = ErrorResponse(
        error=ErrorBody(
            code=code,
            message=message,
            details=[ErrorDetail(**d) for d in details or []],
        )
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def make_success_response(data: Any, status_code: int = 200) -> JSONResponse:
    """Build the standard {success: true, data: ...} response. `data` must be JSON-ready."""
    return JSONResponse(status_code=status_code, content={"success": True, "data": data})
