# backend/utils/rate_limit.py
import time
from dataclasses import dataclass

from fastapi import HTTPException, Request, status


@dataclass
class _Window:
    count: int
    reset_at: float


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


class RateLimiter:
    """Fixed-window request counter per client, usable as a FastAPI dependency.

    State lives in this process only. Behind more than one instance the
    counters need a shared store instead.
    """

    def __init__(self, max_requests: int = 10, window_seconds: int = 60, clock=time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows = {}

    def _evict_expired(self, now: float):
        for key in [k for k, w in self._windows.items() if w.reset_at <= now]:
            del self._windows[key]

    def hit(self, key: str):
        """Count one request; returns ``(allowed, remaining, reset_at)``."""
        now = self.clock()
        self._evict_expired(now)

        window = self._windows.get(key)
        if window is None:
            window = self._windows[key] = _Window(count=0, reset_at=now + self.window_seconds)

        window.count += 1
        allowed = window.count <= self.max_requests
        remaining = max(0, self.max_requests - window.count)
        return allowed, remaining, window.reset_at

    def __call__(self, request: Request):
        allowed, remaining, reset_at = self.hit(client_key(request))
        if not allowed:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests, please try again later",
                headers={
                    "X-RateLimit-Limit": str(self.max_requests),
                    "X-RateLimit-Remaining": str(remaining),
                    "Retry-After": str(max(1, int(reset_at - self.clock()))),
                },
            )
