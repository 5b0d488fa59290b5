# app/utils/rate_limiter.py
"""
Fixed-window request rate limiting, used as a FastAPI dependency.

Counters live in process memory: each API worker counts independently, so with
N workers/instances a client can make up to N × max_requests per window.
Swap `store` for a shared backend (e.g. a key-value store with TTL) when
limits must hold across instances.
"""

import math
import random
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Request

from app.config import settings
from app.utils.errors import RateLimitError
from app.utils.logger import get_logger

logger = get_logger(__name__)

SWEEP_PROBABILITY = 0.01


@dataclass(frozen=True)
class RateLimitPolicy:
    name: str
    window_seconds: int
    max_requests: int
    message: str = "Too many requests, please try again later"
    per_token: bool = False   # key by bearer token instead of client IP when present


class InMemoryRateLimitStore:
    """window_key → [count, reset_at]. Expired windows are swept lazily."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._counters: dict = {}
        self._lock = threading.Lock()
        self._clock = clock

    def hit(self, key: str, policy: RateLimitPolicy) -> Optional[int]:
        """
        Count one request. Returns None if allowed, otherwise the number
        of seconds until the window resets.
        """
        now = self._clock()
        window = math.floor(now / policy.window_seconds)
        window_key = f"{policy.name}:{key}:{window}"
        with self._lock:
            entry = self._counters.get(window_key)
            if entry is None:
                entry = [0, (window + 1) * policy.window_seconds]
                self._counters[window_key] = entry
            if entry[0] >= policy.max_requests:
                return max(1, math.ceil(entry[1] - now))
            entry[0] += 1
            if random.random() < SWEEP_PROBABILITY:
                self._sweep(now)
        return None

    def _sweep(self, now: float):
        expired = [k for k, (_, reset_at) in self._counters.items() if reset_at < now]
        for k in expired:
            del self._counters[k]

    def reset(self):
        with self._lock:
            self._counters.clear()

    def __len__(self):
        return len(self._counters)


store = InMemoryRateLimitStore()


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("x-real-ip") or (request.client.host if request.client else "unknown")


def request_key(request: Request, policy: RateLimitPolicy) -> str:
    if policy.per_token:
        auth = request.headers.get("authorization")
        if auth:
            return f"token:{auth}"
    return f"ip:{client_key(request)}"


def rate_limit(policy: RateLimitPolicy):
    """Dependency factory: `dependencies=[Depends(rate_limit(STANDARD))]`."""
    def dependency(request: Request):
        retry_after = store.hit(request_key(request, policy), policy)
        if retry_after is not None:
            logger.warning(f"[RATE] {policy.name} limit hit by {client_key(request)} on {request.url.path}")
            raise RateLimitError(policy.message, retry_after=retry_after)
    return dependency


STANDARD = RateLimitPolicy("standard", settings.RATE_LIMIT_STANDARD_WINDOW, settings.RATE_LIMIT_STANDARD_MAX,
                           "Too many requests from this IP, please try again later")
REVIEWS = RateLimitPolicy("reviews", settings.RATE_LIMIT_REVIEWS_WINDOW, settings.RATE_LIMIT_REVIEWS_MAX,
                          "Too many review submissions, please try again later", per_token=True)
MEETINGS = RateLimitPolicy("meetings", settings.RATE_LIMIT_MEETINGS_WINDOW, settings.RATE_LIMIT_MEETINGS_MAX,
                           "Too many meeting requests, please try again later", per_token=True)
ADMIN = RateLimitPolicy("admin", settings.RATE_LIMIT_ADMIN_WINDOW, settings.RATE_LIMIT_ADMIN_MAX,
                        "Admin rate limit exceeded")
