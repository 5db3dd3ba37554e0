"""Per-client request throttling for the public write endpoints.

Two routes are exposed to anyone on the network: the admin login form
(password guessing) and the booking form (slot hoarding). Each gets a
fixed-window counter keyed by client IP. Counters live in process memory;
the service runs as a single instance.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from app.api.deps import get_client_ip

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitRule:
    """At most ``requests`` calls per ``window_seconds`` for one route."""

    method: str
    path: str
    requests: int
    window_seconds: int


@dataclass
class RateLimitDecision:
    """Outcome of counting one request."""

    allowed: bool
    limit: int
    remaining: int
    reset_after: int  # seconds until the window closes

    @property
    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_after),
        }


DEFAULT_RULES: tuple[RateLimitRule, ...] = (
    RateLimitRule("POST", "/api/v1/auth/login", requests=5, window_seconds=60),
    RateLimitRule("POST", "/api/v1/bookings", requests=30, window_seconds=3600),
)


class FixedWindowCounter:
    """Request counts per key, reset when a key's window elapses."""

    # Sweep stale keys at most this often
    SWEEP_INTERVAL = 300

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._windows)

    def hit(self, key: str, rule: RateLimitRule) -> RateLimitDecision:
        """Count one request for ``key`` under ``rule``."""
        now = self._clock()
        self._sweep(now, rule.window_seconds)

        started, count = self._windows.get(key, (now, 0))
        if now - started >= rule.window_seconds:
            started, count = now, 0

        reset_after = max(math.ceil(rule.window_seconds - (now - started)), 0)

        if count >= rule.requests:
            return RateLimitDecision(False, rule.requests, 0, reset_after)

        count += 1
        self._windows[key] = (started, count)
        return RateLimitDecision(True, rule.requests, rule.requests - count, reset_after)

    def _sweep(self, now: float, window_seconds: int) -> None:
        if now - self._last_sweep < self.SWEEP_INTERVAL:
            return
        horizon = max(window_seconds, self.SWEEP_INTERVAL)
        self._windows = {
            key: state for key, state in self._windows.items() if now - state[0] < horizon
        }
        self._last_sweep = now


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Answer 429 once a client exceeds the rule for a route.

    Routes without a rule pass straight through.
    """

    def __init__(
        self,
        app,
        rules: tuple[RateLimitRule, ...] = DEFAULT_RULES,
        counter: FixedWindowCounter | None = None,
        enabled: bool = True,
    ) -> None:
        super().__init__(app)
        self.rules = {(rule.method, rule.path): rule for rule in rules}
        self.counter = counter or FixedWindowCounter()
        self.enabled = enabled

    def rule_for(self, request: Request) -> RateLimitRule | None:
        path = request.url.path.rstrip("/") or "/"
        return self.rules.get((request.method, path))

    async def dispatch(self, request: Request, call_next) -> Response:
        rule = self.rule_for(request) if self.enabled else None
        if rule is None:
            return await call_next(request)

        client = get_client_ip(request) or "unknown"
        decision = self.counter.hit(f"{rule.method} {rule.path} {client}", rule)

        if not decision.allowed:
            logger.warning(f"Rate limit exceeded: {rule.method} {rule.path} from {client}")
            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Too many requests. Please try again later.",
                    "error": "rate_limited",
                    "retry_after": decision.reset_after,
                },
                headers={"Retry-After": str(decision.reset_after), **decision.headers},
            )

        response = await call_next(request)
        response.headers.update(decision.headers)
        return response
