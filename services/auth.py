# services/auth.py
from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from config.settings import get_settings
from database import get_db
from models.user import User
from services import stack_auth
from services.security import verify_password
from utils.errors import AuthenticationError, ServiceUnavailableError

logger = logging.getLogger(__name__)

# ========================
# Config
# ========================

ALGORITHM = "HS256"

# Bearer for API clients; browsers use the session cookie instead
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/signin", auto_error=False)

# ========================
# Session tokens
# ========================

def create_session_token(
    user: User,
    expires_delta: Optional[timedelta] = None,
) -> Tuple[str, datetime]:
    """
    Issue a session JWT. The user id travels in ``sub`` so every request can
    resolve the session user without a session table.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(seconds=settings.session_max_age))
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "name": user.display_name,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(claims, settings.auth_secret, algorithm=ALGORITHM), expire

def decode_session_token(token: str) -> Dict[str, Any]:
    """Decode & verify a session JWT. Raises AuthenticationError on failure."""
    try:
        return jwt.decode(token, get_settings().auth_secret, algorithms=[ALGORITHM])
    except JWTError:
        raise AuthenticationError("Invalid or expired token")

def _is_local_token(token: str) -> bool:
    try:
        return jwt.get_unverified_header(token).get("alg") == ALGORITHM
    except JWTError:
        return False

# ========================
# User resolution
# ========================

def _get_user_by_sub(db: Session, sub: Any) -> User:
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token subject")
    user = db.get(User, user_id)
    if not user:
        # Token outlived its user
        raise AuthenticationError("Session user no longer exists")
    return user

def _extract_token(request: Request, bearer: Optional[str]) -> Optional[str]:
    if bearer:
        return bearer
    return request.cookies.get(get_settings().auth_cookie_name) or None

async def resolve_user(db: Session, token: str) -> User:
    if _is_local_token(token):
        payload = decode_session_token(token)
        sub = payload.get("sub")
        if not sub:
            raise AuthenticationError("Invalid token payload")
        return _get_user_by_sub(db, sub)

    if stack_auth.is_configured():
        payload = await stack_auth.verify_stack_token(token)
        return stack_auth.get_or_create_stack_user(db, payload)

    raise AuthenticationError("Invalid or expired token")

async def get_current_user(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    token = _extract_token(request, bearer)
    if not token:
        raise AuthenticationError("Not authenticated")
    return await resolve_user(db, token)

async def get_optional_user(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    token = _extract_token(request, bearer)
    if not token:
        return None
    try:
        return await resolve_user(db, token)
    except AuthenticationError:
        return None
    except ServiceUnavailableError as exc:
        logger.warning("optional_auth_unavailable error=%s", exc.message)
        return None

def authenticate_credentials(db: Session, email: str, password: str) -> Optional[User]:
    """Credentials provider: the user when email/password match, else None."""
    user = db.query(User).filter(User.email == email).first()
    if not user or not user.password_hash:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user
