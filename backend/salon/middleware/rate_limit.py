"""
Salon Booking Backend — Credential Rate Limiting Middleware
==============================================================

What:  Per-IP sliding window limiter on the credential endpoints
       (POST /register, POST /login). Other paths pass straight through.
How:   Keeps recent request timestamps per IP in memory. When the count in
       the last `window` seconds reaches `requests`, the request is answered
       with 429 and a Retry-After header without reaching the route.

Single-process only: state lives in this middleware instance, so several
uvicorn workers each enforce their own limit.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from salon.exceptions import RateLimitExceededError
from salon.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

CREDENTIAL_PATHS = frozenset({"/register", "/login"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter for credential endpoints.

    Args:
        requests: Max requests per IP within the window
        window:   Window length in seconds
        enabled:  When False every request passes through
    """

    CLEANUP_EVERY = 1000

    def __init__(self, app, requests: int = 20, window: int = 300, enabled: bool = True):
        super().__init__(app)
        self.max_requests = requests
        self.window = window
        self.enabled = enabled
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Preflights (OPTIONS) and other methods never count against the window
        if (
            not self.enabled
            or request.method != "POST"
            or request.url.path not in CREDENTIAL_PATHS
        ):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - self.window

        recent = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = recent

        if len(recent) >= self.max_requests:
            retry_after = int(recent[0] + self.window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s on %s: %d requests in %ds window",
                client_ip,
                request.url.path,
                len(recent),
                self.window,
            )
            return self._reject(RateLimitExceededError(retry_after=retry_after))

        recent.append(now)

        self._seen += 1
        if self._seen % self.CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    @staticmethod
    def _reject(exc: RateLimitExceededError) -> JSONResponse:
        # Raised exceptions do not reach the app's handlers from middleware,
        # so the envelope is built here.
        return JSONResponse(
            status_code=429,
            content={
                "error": "rate_limit_exceeded",
                "message": exc.message,
                "details": {"retry_after": exc.retry_after},
                "request_id": request_id_var.get("") or None,
            },
            headers={"Retry-After": str(exc.retry_after)},
        )

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Drops IPs with no request inside the current window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
