"""API middleware for request logging and machine-client API keys."""

import hmac
import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from physiopro.core.auth import ACCESS_COOKIE, decode_token

logger = logging.getLogger(__name__)

PUBLIC_PATHS = ("/health", "/health/ready", "/health/live", "/docs", "/openapi.json")


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging all requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        logger.info(f"Request: {request.method} {request.url.path} client={_client_host(request)}")

        response = await call_next(request)

        duration = time.time() - start_time
        logger.info(
            f"Response: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s"
        )
        response.headers["X-Process-Time"] = f"{duration:.3f}"

        return response


class APIKeyMiddleware(BaseHTTPMiddleware):
    """Require an API key unless the caller holds a valid session cookie."""

    def __init__(self, app, api_key: str):
        super().__init__(app)
        self.api_key = api_key

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path in PUBLIC_PATHS or path.startswith("/api/v1/auth/"):
            return await call_next(request)

        token = request.cookies.get(ACCESS_COOKIE)
        if token:
            claims = decode_token(token)
            if claims and claims.get("type") == "access":
                return await call_next(request)

        provided_key = extract_api_key(request)
        if not provided_key or not hmac.compare_digest(provided_key, self.api_key):
            logger.warning(f"Unauthorized request: {request.method} {path} client={_client_host(request)}")
            return Response(
                content='{"error": "Unauthorized", "detail": "Invalid or missing API key"}',
                status_code=401,
                media_type="application/json",
            )

        return await call_next(request)


def extract_api_key(request: Request) -> str | None:
    """API key from ``Authorization: Bearer`` or ``X-API-Key``."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]
    return request.headers.get("X-API-Key")
