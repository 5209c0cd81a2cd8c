# ratelimit.py
"""
Fixed-window request limiter keyed by client address.

In-memory and per process: each worker counts on its own. Only paths under
the configured prefix are counted.
"""
from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Tuple

from flask import Flask, jsonify, request


class FixedWindowLimiter:
    def __init__(self, limit: int, window_sec: int, clock: Callable[[], float] = time.monotonic):
        self.limit = int(limit)
        self.window_sec = int(window_sec)
        self._clock = clock
        self._windows: Dict[str, Tuple[int, float]] = {}  # key -> (count, window_start)
        self._lock = threading.Lock()

    def hit(self, key: str) -> Tuple[bool, int, float]:
        """Count one request. Returns (allowed, remaining, seconds_until_reset)."""
        now = self._clock()
        with self._lock:
            count, start = self._windows.get(key, (0, now))
            if now - start >= self.window_sec:
                count, start = 0, now
            count += 1
            self._windows[key] = (count, start)
            # drop expired windows now and then so the table stays small
            if len(self._windows) > 10_000:
                self._windows = {
                    k: v for k, v in self._windows.items() if now - v[1] < self.window_sec
                }
        reset_in = max(0.0, start + self.window_sec - now)
        return count <= self.limit, max(0, self.limit - count), reset_in

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


def _reset_at(reset_in: float) -> str:
    """Window end as a unix timestamp."""
    return str(int(time.time() + reset_in))


def init_rate_limit(app: Flask, prefix: str = "/api/") -> FixedWindowLimiter:
    limiter = FixedWindowLimiter(app.config["RATE_LIMIT_MAX"], app.config["RATE_LIMIT_WINDOW_SEC"])
    app.extensions["rate_limiter"] = limiter

    @app.before_request
    def _rate_limit():
        if not app.config.get("RATE_LIMIT_ENABLED", True) or not request.path.startswith(prefix):
            return None
        if request.method == "OPTIONS":
            return None
        allowed, remaining, reset_in = limiter.hit(request.remote_addr or "unknown")
        if allowed:
            request.environ["ratelimit.remaining"] = remaining
            request.environ["ratelimit.reset"] = _reset_at(reset_in)
            return None
        app.logger.warning("[ratelimit] %s over limit on %s", request.remote_addr, request.path)
        resp = jsonify(error="Too many requests, please try again later.")
        resp.status_code = 429
        resp.headers["Retry-After"] = str(int(reset_in) + 1)
        resp.headers["X-RateLimit-Limit"] = str(limiter.limit)
        resp.headers["X-RateLimit-Remaining"] = "0"
        resp.headers["X-RateLimit-Reset"] = _reset_at(reset_in)
        return resp

    @app.after_request
    def _rate_limit_headers(resp):
        remaining = request.environ.get("ratelimit.remaining")
        if remaining is not None:
            resp.headers["X-RateLimit-Limit"] = str(limiter.limit)
            resp.headers["X-RateLimit-Remaining"] = str(remaining)
            resp.headers["X-RateLimit-Reset"] = request.environ.get("ratelimit.reset", "")
        return resp

    return limiter
