from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config.settings import get_settings
from models.follow import UserFollow
from models.portfolio import Portfolio
from models.post import Post
from models.user import User
from schemas.user import UserOut, UserProfileOut, UserStats
from services.security import get_password_hash
from utils.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_EXTERNAL_ID_FIELDS = {"stack": "stack_user_id", "google": "google_sub"}


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(func.lower(User.username) == username.strip().lower()).first()


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_or_404(db: Session, user_id: int) -> User:
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def create_user(
    db: Session,
    *,
    email: str,
    password: str,
    full_name: str,
    username: str | None = None,
    avatar_url: str | None = None,
) -> User:
    if get_user_by_email(db, email):
        raise ConflictError("User already exists")
    if username and get_user_by_username(db, username):
        raise ConflictError("Username is already taken")

    features = get_settings().features
    user = User(
        email=email,
        username=username,
        full_name=full_name,
        password_hash=get_password_hash(password),
        avatar_url=avatar_url,
        # Verification mail is out of band; without the flag accounts start verified
        email_verified=not features.email_verification,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent signup for the same email/username won the race
        db.rollback()
        raise ConflictError("User already exists")
    db.refresh(user)
    logger.info("user_created user_id=%s", user.id)
    return user


def get_or_create_external_user(
    db: Session,
    *,
    provider: str,
    external_id: str,
    email: Optional[str],
    full_name: Optional[str] = None,
    avatar_url: Optional[str] = None,
    email_verified: bool = False,
) -> User:
    """
    Map an external identity (hosted auth, Google) to a local user.

    1) existing link by external id
    2) existing account with the same email gets linked
    3) otherwise a new password-less account is created
    """
    field = _EXTERNAL_ID_FIELDS[provider]
    column = getattr(User, field)

    user = db.query(User).filter(column == external_id).first()
    if user:
        return user

    if not email:
        raise ValidationError(f"Cannot create user: email missing from {provider} identity")
    email = email.strip().lower()

    user = get_user_by_email(db, email)
    if user:
        setattr(user, field, external_id)
        if email_verified:
            user.email_verified = True
        if not user.avatar_url and avatar_url:
            user.avatar_url = avatar_url
    else:
        user = User(
            email=email,
            full_name=full_name,
            avatar_url=avatar_url,
            email_verified=email_verified,
            password_hash=None,
        )
        setattr(user, field, external_id)
        db.add(user)

    db.commit()
    db.refresh(user)
    logger.info("external_user_linked provider=%s user_id=%s", provider, user.id)
    return user


def get_user_stats(db: Session, user_id: int) -> UserStats:
    post_count = db.query(func.count(Post.id)).filter(Post.user_id == user_id).scalar() or 0
    follower_count = (
        db.query(func.count(UserFollow.id)).filter(UserFollow.following_id == user_id).scalar() or 0
    )
    following_count = (
        db.query(func.count(UserFollow.id)).filter(UserFollow.follower_id == user_id).scalar() or 0
    )
    portfolio_count, total_value = (
        db.query(func.count(Portfolio.id), func.coalesce(func.sum(Portfolio.total_value), 0.0))
        .filter(Portfolio.user_id == user_id)
        .one()
    )
    return UserStats(
        post_count=post_count,
        follower_count=follower_count,
        following_count=following_count,
        portfolio_count=portfolio_count or 0,
        total_portfolio_value=round(float(total_value or 0.0), 2),
    )


_PROFILE_FIELDS = (
    "full_name",
    "username",
    "bio",
    "location",
    "website_url",
    "occupation",
    "avatar_url",
    "cover_image_url",
    "is_private",
)


def update_profile(db: Session, user: User, changes: Dict[str, Any]) -> User:
    username = changes.get("username")
    if username and username != user.username:
        other = get_user_by_username(db, username)
        if other and other.id != user.id:
            raise ConflictError("Username is already taken")

    for field in _PROFILE_FIELDS:
        if field in changes:
            setattr(user, field, changes[field])

    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if username and get_user_by_username(db, username):
            raise ConflictError("Username is already taken")
        raise ConflictError("Profile could not be updated")
    db.refresh(user)
    return user


def suggested_users(db: Session, viewer_id: int | None, limit: int = 5) -> List[User]:
    query = db.query(User).filter(User.is_private.is_(False))
    if viewer_id is not None:
        followed = select(UserFollow.following_id).where(UserFollow.follower_id == viewer_id)
        query = query.filter(User.id != viewer_id, User.id.notin_(followed))
    return query.order_by(User.created_at.desc(), User.id.desc()).limit(limit).all()


# -----------------------
# DTO mapping
# -----------------------

def to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        name=user.display_name,
        username=user.username,
        avatar_url=user.avatar_url,
    )


def to_profile_out(user: User, stats: UserStats | None, *, full: bool) -> UserProfileOut:
    """``full`` is False for a private profile seen by someone else: basic fields only."""
    base = UserProfileOut(
        id=user.id,
        username=user.username,
        full_name=user.full_name,
        avatar_url=user.avatar_url,
        is_verified=user.is_verified,
        is_private=user.is_private,
    )
    if not full:
        return base
    return base.model_copy(
        update={
            "email": user.email,
            "bio": user.bio,
            "location": user.location,
            "website_url": user.website_url,
            "occupation": user.occupation,
            "cover_image_url": user.cover_image_url,
            "created_at": user.created_at,
            "stats": stats,
        }
    )
