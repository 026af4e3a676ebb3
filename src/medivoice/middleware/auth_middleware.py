"""
Authentication middleware - resolves the caller before any consultation route runs.

Public endpoints (health checks, API docs) are excluded. Every other request
must carry an API key; the mapped user id is stored on request.state.user_id
and scopes all session reads and writes.
"""
import logging

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..api.utils.responses import fail
from ..core.auth import get_auth_service

logger = logging.getLogger(__name__)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Reject unauthenticated requests to non-public endpoints with 401."""

    PUBLIC_PATHS = {
        "/",
        "/favicon.ico",
        "/docs",
        "/redoc",
        "/openapi.json",
        "/health",
        "/health/live",
        "/health/ready",
    }

    PUBLIC_PATH_PREFIXES = {
        "/docs",
        "/redoc",
    }

    def is_public_endpoint(self, path: str) -> bool:
        normalized_path = path.rstrip("/") or "/"

        if normalized_path in self.PUBLIC_PATHS:
            return True

        return any(path.startswith(prefix + "/") for prefix in self.PUBLIC_PATH_PREFIXES)

    async def dispatch(self, request: Request, call_next):
        # CORS preflight carries no credentials
        if request.method == "OPTIONS" or self.is_public_endpoint(request.url.path):
            return await call_next(request)

        api_key = request.headers.get("X-API-Key")
        auth_header = request.headers.get("Authorization")

        try:
            user_id = get_auth_service().get_user_from_request(api_key=api_key, auth_header=auth_header)
        except HTTPException as e:
            logger.warning(
                f"❌ Authentication failed for {request.method} {request.url.path}: {e.detail} "
                f"(IP: {request.client.host if request.client else 'unknown'})"
            )
            body = fail(
                request,
                "UNAUTHORIZED",
                "Authentication required for this endpoint",
                {
                    "path": request.url.path,
                    "method": request.method,
                    "hint": "Provide X-API-Key header or Authorization Bearer token",
                },
            )
            return JSONResponse(
                status_code=401,
                content=body.model_dump(),
                headers={"WWW-Authenticate": "Bearer"},
            )

        request.state.user_id = user_id
        logger.debug(f"✅ Authenticated user: {user_id} accessing {request.url.path}")
        return await call_next(request)
