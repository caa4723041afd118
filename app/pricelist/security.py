"""
Request guards: URL validation (SSRF), bearer token checks and rate limiting.

These are plain functions and classes with no FastAPI coupling; the
dependencies module wires them into routes.
"""

import logging
import math
import re
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import urlsplit

from .errors import AuthError, RateLimitError

logger = logging.getLogger(__name__)


# =============================================================================
# URL Validation
# =============================================================================

ALLOWED_SCHEMES = frozenset({"http", "https"})

LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "0.0.0.0", "::1"})

# 10.0.0.0/8, 172.16.0.0/12 and 192.168.0.0/16, matched on the hostname text
PRIVATE_HOST_PATTERN = re.compile(r"^(10\.|192\.168\.|172\.(1[6-9]|2[0-9]|3[01])\.)")


def is_allowed_url(candidate: Any) -> bool:
    """
    Check that a URL is safe for the server to fetch.

    Only http/https URLs are accepted, and hostnames that are loopback or
    inside RFC1918 private ranges are refused. The check is lexical: a public
    name that resolves to a private address is not detected.

    Args:
        candidate: Value supplied by the client.

    Returns:
        True if the URL may be fetched, False otherwise. Never raises.
    """
    if not isinstance(candidate, str) or not candidate.strip():
        return False

    try:
        parsed = urlsplit(candidate.strip())
        hostname = parsed.hostname
    except ValueError:
        return False

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        return False

    if not hostname:
        return False

    hostname = hostname.lower()
    if hostname in LOOPBACK_HOSTS:
        return False

    if PRIVATE_HOST_PATTERN.match(hostname):
        return False

    return True


# =============================================================================
# Bearer Authentication
# =============================================================================

BEARER_PREFIX = "Bearer "


def verify_bearer_token(authorization: str | None, expected_token: str | None) -> None:
    """
    Validate an Authorization header against the configured secret.

    Raises:
        AuthError: 401 when the header is missing or not a Bearer header,
            403 when the token does not match.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthError("Missing or invalid authorization header", status_code=401)

    token = authorization[len(BEARER_PREFIX):]

    if not expected_token:
        logger.warning("BEARER_TOKEN is not configured; rejecting request")
        raise AuthError("Invalid bearer token", status_code=403)

    if not secrets.compare_digest(token.encode("utf-8"), expected_token.encode("utf-8")):
        raise AuthError("Invalid bearer token", status_code=403)


# =============================================================================
# Rate Limiting
# =============================================================================


@dataclass
class RateLimitStatus:
    """Outcome of counting one request against a client's window."""

    limit: int
    remaining: int
    reset_after: float
    window_seconds: int
    allowed: bool

    def headers(self) -> dict[str, str]:
        """Standard ``RateLimit-*`` response headers."""
        reset = max(0, math.ceil(self.reset_after))
        headers = {
            "RateLimit-Policy": f"{self.limit};w={self.window_seconds}",
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(reset),
        }
        if not self.allowed:
            headers["Retry-After"] = str(reset)
        return headers


class RateLimiter:
    """
    Fixed-window request counter keyed by client identifier.

    State lives in the instance, so each application (and each test) owns
    its own limiter.
    """

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: int = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the rate limiter.

        Args:
            max_requests: Requests allowed per client per window.
            window_seconds: Length of a window in seconds.
            clock: Monotonic time source, replaceable in tests.
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> RateLimitStatus:
        """Count a request for ``key`` and report whether it is allowed."""
        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            started, count = self._windows.get(key, (now, 0))
            count += 1
            self._windows[key] = (started, count)

        reset_after = started + self.window_seconds - now
        return RateLimitStatus(
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_after=reset_after,
            window_seconds=self.window_seconds,
            allowed=count <= self.max_requests,
        )

    def check(self, key: str) -> RateLimitStatus:
        """
        Count a request and raise if the client is over its quota.

        Raises:
            RateLimitError: With rate-limit headers attached.
        """
        status = self.hit(key)
        if not status.allowed:
            logger.warning("Rate limit exceeded for client %s", key)
            raise RateLimitError(
                "Too many requests, please try again later.",
                headers=status.headers(),
            )
        return status

    def reset(self) -> None:
        """Forget all recorded requests."""
        with self._lock:
            self._windows.clear()

    def _evict_expired(self, now: float) -> None:
        expired = [
            key
            for key, (started, _) in self._windows.items()
            if now - started >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]
