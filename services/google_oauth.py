# services/google_oauth.py
import logging
from typing import Any, Dict

import httpx
from sqlalchemy.orm import Session

from config.settings import get_settings
from models.user import User
from services.user_service import get_or_create_external_user
from utils.common_helpers import safe_json
from utils.errors import AuthenticationError, ServiceUnavailableError

logger = logging.getLogger(__name__)

GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
GOOGLE_ISSUERS = {"accounts.google.com", "https://accounts.google.com"}


async def verify_google_id_token(id_token: str) -> Dict[str, Any]:
    """Validate a Google ID token with the tokeninfo endpoint and check it was minted for us."""
    settings = get_settings()
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            resp = await client.get(GOOGLE_TOKENINFO_URL, params={"id_token": id_token})
    except httpx.RequestError as exc:
        logger.warning("google_tokeninfo_unreachable error=%s", exc.__class__.__name__)
        raise ServiceUnavailableError("Google sign-in is temporarily unavailable")

    claims = safe_json(resp) if resp.status_code == 200 else None
    if not claims:
        raise AuthenticationError("Invalid Google token")

    if claims.get("aud") != settings.google_client_id:
        logger.warning("google_token_audience_mismatch")
        raise AuthenticationError("Invalid Google token")
    if claims.get("iss") not in GOOGLE_ISSUERS:
        raise AuthenticationError("Invalid Google token")
    if not claims.get("sub") or not claims.get("email"):
        raise AuthenticationError("Google token is missing identity claims")
    if str(claims.get("email_verified", "")).lower() != "true":
        raise AuthenticationError("Google account email is not verified")
    return claims


def get_or_create_google_user(db: Session, claims: Dict[str, Any]) -> User:
    return get_or_create_external_user(
        db,
        provider="google",
        external_id=str(claims["sub"]),
        email=claims["email"],
        full_name=claims.get("name"),
        avatar_url=claims.get("picture"),
        email_verified=True,
    )
