from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from models.notification import Notification
from utils.errors import NotFoundError

NOTIFICATION_TYPES = {"like", "follow", "comment", "mention", "system"}


def create_notification(
    db: Session,
    *,
    user_id: int,
    type: str,
    title: str,
    message: Optional[str] = None,
    data: Optional[Dict[str, Any]] = None,
    commit: bool = True,
) -> Notification:
    """Queue a notification. ``commit=False`` lets callers fold it into their own transaction."""
    if type not in NOTIFICATION_TYPES:
        raise ValueError(f"unknown notification type: {type}")
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        data=data or {},
    )
    db.add(notification)
    if commit:
        db.commit()
        db.refresh(notification)
    return notification


def list_notifications(
    db: Session,
    user_id: int,
    *,
    limit: int = 20,
    unread_only: bool = False,
) -> List[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()


def mark_notification_read(db: Session, user_id: int, notification_id: int) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if not notification:
        raise NotFoundError("Notification not found")
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: int) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return updated
