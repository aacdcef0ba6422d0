# middleware/rate_limit.py
"""
Rate limiting configuration using slowapi.

Every route gets the default limit through SlowAPIMiddleware; health and
feature probes opt out with ``@limiter.exempt``.
"""
import logging

from fastapi import Request
from jose import JWTError, jwt
from slowapi import Limiter
from slowapi.util import get_remote_address

from config.settings import get_settings

logger = logging.getLogger(__name__)


def _get_rate_limit_key(request: Request) -> str:
    """
    Identify the caller for rate-limiting.

    Strategy:
      1. If the request carries a session token (bearer or cookie), use its
         ``sub`` so the limit is per-user regardless of IP.
      2. Otherwise, fall back to client IP.
    """
    token = None
    auth = request.headers.get("Authorization", "")
    if auth.lower().startswith("bearer "):
        token = auth.split(" ", 1)[1].strip()
    if not token:
        token = request.cookies.get(get_settings().auth_cookie_name)

    if token:
        try:
            # Unverified: only buckets the limit, auth is enforced by the route dependency
            sub = jwt.get_unverified_claims(token).get("sub")
            if sub:
                return f"user:{sub}"
        except JWTError:
            pass

    return get_remote_address(request)


def build_limiter() -> Limiter:
    settings = get_settings()
    limit = settings.rate_limit_config.limit_string
    storage = settings.redis_url or "memory://"
    logger.info("Rate limit configured: %s (storage=%s)", limit, storage.split("://", 1)[0])
    return Limiter(
        key_func=_get_rate_limit_key,
        default_limits=[limit],
        storage_uri=storage,
        strategy="fixed-window",
    )


limiter = build_limiter()
