import logging
import math
import threading
import time
from collections import defaultdict
from collections.abc import Callable

from fastapi import Depends, Request

from sortr.errors import TooManyRequests

logger = logging.getLogger(__name__)


class RateLimiter:
    """In-memory sliding window of attempts per client key (usually the IP)."""

    def __init__(
        self,
        max_attempts: int,
        window_seconds: int,
        *,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.enabled = enabled
        self._clock = clock
        self._attempts: dict[str, list[float]] = defaultdict(list)
        self._lock = threading.Lock()

    def hit(self, key: str) -> None:
        """Count one attempt for ``key``; raises TooManyRequests when over the limit."""
        if not self.enabled:
            return
        with self._lock:
            now = self._clock()
            attempts = [t for t in self._attempts[key] if now - t < self.window_seconds]
            if len(attempts) >= self.max_attempts:
                self._attempts[key] = attempts
                retry_after = max(1, math.ceil(attempts[0] + self.window_seconds - now))
                logger.warning("AUDIT: rate limit hit for %s, retry in %ds", key, retry_after)
                raise TooManyRequests(retry_after)
            attempts.append(now)
            self._attempts[key] = attempts

    def reset(self, key: str) -> None:
        """Clear attempts after a successful login."""
        with self._lock:
            self._attempts.pop(key, None)


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def limit_auth_attempts(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> str:
    """Dependency for login/register/OAuth routes. Returns the client key."""
    key = client_key(request)
    limiter.hit(key)
    return key
