from __future__ import annotations

from typing import Iterable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from agency_admin.core.errors import RateLimited, app_error_handler
from agency_admin.core.rate_limit import InMemoryRateLimiter


class PublicSubmitRateLimitMiddleware(BaseHTTPMiddleware):
    """
    Applies ONLY to the listed public POST endpoints, keyed by client address.
    """

    def __init__(self, app, limiter: InMemoryRateLimiter, paths: Iterable[str]):
        super().__init__(app)
        self.limiter = limiter
        self.paths = set(paths)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        method = request.method.upper()

        if method == "POST" and path in self.paths:
            client_key = request.client.host if request.client else "unknown"
            if not self.limiter.allow(client_key, f"{method}:{path}"):
                # raised errors would bypass the app handlers out here
                return await app_error_handler(
                    request, RateLimited("Too many submissions, try again in a minute.")
                )
        return await call_next(request)
