from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.follow import UserFollow
from models.user import User
from services.notification_service import create_notification
from services.user_service import get_user_or_404
from utils.errors import ValidationError

logger = logging.getLogger(__name__)


def _find(db: Session, follower_id: int, following_id: int) -> UserFollow | None:
    return (
        db.query(UserFollow)
        .filter(UserFollow.follower_id == follower_id, UserFollow.following_id == following_id)
        .first()
    )


def is_following(db: Session, follower_id: int, following_id: int) -> bool:
    return _find(db, follower_id, following_id) is not None


def follow_user(db: Session, follower: User, following_id: int) -> bool:
    """Idempotent. Returns True when a new follow row was created."""
    if follower.id == following_id:
        raise ValidationError("You cannot follow yourself")
    target = get_user_or_404(db, following_id)

    if _find(db, follower.id, target.id):
        return False

    db.add(UserFollow(follower_id=follower.id, following_id=target.id))
    create_notification(
        db,
        user_id=target.id,
        type="follow",
        title=f"{follower.display_name} started following you",
        data={"follower_id": follower.id},
        commit=False,
    )
    try:
        db.commit()
    except IntegrityError:
        # Same pair inserted concurrently; the follow exists either way
        db.rollback()
        return False
    logger.info("user_followed follower_id=%s following_id=%s", follower.id, target.id)
    return True


def unfollow_user(db: Session, follower: User, following_id: int) -> bool:
    """Idempotent. Returns True when a follow row was removed."""
    get_user_or_404(db, following_id)
    existing = _find(db, follower.id, following_id)
    if not existing:
        return False
    db.delete(existing)
    db.commit()
    return True
