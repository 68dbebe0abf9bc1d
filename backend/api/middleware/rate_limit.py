"""
Rate limiting using slowapi.

Sign-in endpoints get tight per-IP limits; everything else shares a global
default applied by ``SlowAPIMiddleware``. Storage is Redis when
``REDIS_URL`` is configured and in-process memory otherwise.
"""

import ipaddress
import logging

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from infrastructure.config.settings import settings

logger = logging.getLogger(__name__)


def _is_public_ip(value: str) -> bool:
    """True for a syntactically valid, non-private, non-loopback address."""
    try:
        addr = ipaddress.ip_address(value)
    except ValueError:
        return False
    return not (addr.is_private or addr.is_loopback or addr.is_link_local)


def _get_real_ip(request: Request) -> str:
    """Client IP from proxy headers, falling back to the connection address.

    Private addresses in forwarding headers are ignored so a spoofed
    ``X-Forwarded-For: 127.0.0.1`` cannot escape its bucket.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        candidate = forwarded.split(",")[0].strip()
        if _is_public_ip(candidate):
            return candidate
    real_ip = request.headers.get("x-real-ip")
    if real_ip and _is_public_ip(real_ip.strip()):
        return real_ip.strip()
    return get_remote_address(request)


# Format: "count/period" where period can be: second, minute, hour, day
RATE_LIMITS = {
    "login": "5/minute",
    "init": "3/minute",
    "default": "100/minute",
}

_storage_uri = settings.redis_url or "memory://"

if not settings.redis_url and settings.is_production:
    logger.warning(
        "Rate limiter using in-memory storage; limits are per process. Set REDIS_URL for shared limits."
    )

limiter = Limiter(
    key_func=_get_real_ip,
    storage_uri=_storage_uri,
    default_limits=[RATE_LIMITS["default"]],
)


def get_rate_limit(endpoint: str) -> str:
    """
    Rate limit for an endpoint identifier.

    Example:
        >>> get_rate_limit("login")
        '5/minute'
        >>> get_rate_limit("unknown")
        '100/minute'
    """
    return RATE_LIMITS.get(endpoint, RATE_LIMITS["default"])
