# services/stack_auth.py
"""
Optional hosted auth service (Stack Auth).

When the three Stack keys are configured, bearer tokens issued by Stack are
verified against the project's JWKS and mapped to a local user, created on
first sight (same flow as any other external identity).
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict

import httpx
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from config.settings import get_settings
from models.user import User
from services.user_service import get_or_create_external_user
from utils.common_helpers import safe_json
from utils.errors import AuthenticationError, ServiceUnavailableError

logger = logging.getLogger(__name__)

JWKS_TTL_SECONDS = 600
_ALGORITHMS = ["ES256", "RS256"]

_jwks_cache: Dict[str, Any] = {"url": None, "keys": None, "fetched_at": 0.0}


def is_configured() -> bool:
    return get_settings().stack_auth_config.configured


def clear_jwks_cache() -> None:
    _jwks_cache.update({"url": None, "keys": None, "fetched_at": 0.0})


async def fetch_jwks(force: bool = False) -> Dict[str, Any]:
    cfg = get_settings().stack_auth_config
    url = cfg.jwks_url
    fresh = time.time() - _jwks_cache["fetched_at"] < JWKS_TTL_SECONDS
    if not force and _jwks_cache["keys"] is not None and _jwks_cache["url"] == url and fresh:
        return _jwks_cache["keys"]

    try:
        async with httpx.AsyncClient(timeout=5.0) as client:
            resp = await client.get(url)
    except httpx.RequestError as exc:
        logger.warning("stack_auth_jwks_unreachable error=%s", exc.__class__.__name__)
        raise ServiceUnavailableError("Auth service unreachable")

    if resp.status_code != 200:
        logger.warning("stack_auth_jwks_error status=%s", resp.status_code)
        raise ServiceUnavailableError("Auth service unavailable")

    keys = safe_json(resp)
    if keys is None:
        raise ServiceUnavailableError("Auth service returned an invalid key set")
    _jwks_cache.update({"url": url, "keys": keys, "fetched_at": time.time()})
    return keys


async def verify_stack_token(token: str) -> Dict[str, Any]:
    cfg = get_settings().stack_auth_config
    if not cfg.configured:
        raise AuthenticationError("Hosted auth is not configured")

    jwks = await fetch_jwks()
    try:
        return jwt.decode(
            token,
            jwks,
            algorithms=_ALGORITHMS,
            audience=cfg.project_id,
            options={"verify_at_hash": False},
        )
    except JWTError:
        raise AuthenticationError("Invalid or expired token")


def get_or_create_stack_user(db: Session, payload: Dict[str, Any]) -> User:
    stack_user_id = payload.get("sub")
    if not stack_user_id:
        raise AuthenticationError("Invalid auth token")

    email = payload.get("email") or payload.get("primary_email")
    return get_or_create_external_user(
        db,
        provider="stack",
        external_id=str(stack_user_id),
        email=email,
        full_name=payload.get("name") or payload.get("display_name"),
        avatar_url=payload.get("picture") or payload.get("profile_image_url"),
        email_verified=bool(payload.get("email_verified") or payload.get("primary_email_verified")),
    )


async def check_stack_auth_health() -> Dict[str, bool]:
    """configured / reachable / can_authenticate. Never raises."""
    if not is_configured():
        return {"configured": False, "reachable": False, "can_authenticate": False}

    try:
        jwks = await fetch_jwks(force=True)
    except ServiceUnavailableError:
        return {"configured": True, "reachable": False, "can_authenticate": False}

    has_keys = bool(isinstance(jwks, dict) and jwks.get("keys"))
    return {"configured": True, "reachable": True, "can_authenticate": has_keys}
