"""Per-caller request budget for the AI endpoints."""

import hmac
import time
from collections import defaultdict, deque

from fastapi import HTTPException, Request

from physiopro.api.middleware import extract_api_key
from physiopro.config import get_settings
from physiopro.core.auth import ACCESS_COOKIE, decode_token


class SlidingWindowRateLimiter:
    """Allow ``max_requests`` per caller within any ``window_seconds`` span.

    Callers are told apart by the signed-in user: the session cookie, or the
    ``X-User-Id`` header when it comes with the machine-client API key. Any
    other request is counted against its client address. Mount it as a route
    dependency::

        ai_rate_limiter = SlidingWindowRateLimiter(max_requests=20)

        @router.post("/exercise-search", dependencies=[Depends(ai_rate_limiter)])
    """

    def __init__(self, max_requests: int = 10, window_seconds: int = 60):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._hits: dict[str, deque[float]] = defaultdict(deque)

    def caller(self, request: Request) -> str:
        token = request.cookies.get(ACCESS_COOKIE)
        claims = decode_token(token) if token else None
        if claims and claims.get("type") == "access" and claims.get("sub"):
            return f"user:{claims['sub']}"

        api_key = get_settings().api_key
        provided_key = extract_api_key(request)
        user_id = request.headers.get("x-user-id")
        if api_key and provided_key and user_id and hmac.compare_digest(provided_key, api_key):
            return f"user:{user_id}"
        return f"ip:{request.client.host if request.client else 'unknown'}"

    def reset(self) -> None:
        self._hits.clear()

    async def __call__(self, request: Request) -> None:
        hits = self._hits[self.caller(request)]
        now = time.monotonic()
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()

        if len(hits) >= self.max_requests:
            wait = max(1, int(hits[0] + self.window_seconds - now))
            raise HTTPException(
                status_code=429,
                detail=f"Too many AI requests. Limit is {self.max_requests} per {self.window_seconds}s.",
                headers={"Retry-After": str(wait)},
            )
        hits.append(now)
