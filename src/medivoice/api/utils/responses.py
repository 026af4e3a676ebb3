from typing import Any, Optional

from fastapi import Request

from ..schemas.common import ApiResponse, ErrorResponse


def request_id_of(request: Request) -> str:
    return getattr(request.state, "request_id", None) or ""


def ok(request: Request, data: Any = None, message: str = "") -> ApiResponse[Any]:
    return ApiResponse(success=True, message=message, request_id=request_id_of(request), data=data)


def fail(request: Request, error: str, message: str, details: Optional[dict] = None) -> ErrorResponse:
    return ErrorResponse(error=error, message=message, request_id=request_id_of(request), details=details or {})
