# routers/notification_routes.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.user import User
from schemas.notification import NotificationOut
from services.auth import get_current_user
from services.notification_service import list_notifications, mark_all_read, mark_notification_read

router = APIRouter(prefix="/notifications")


@router.get("")
def notifications(
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = list_notifications(db, user.id, limit=limit, unread_only=unread_only)
    return {"notifications": [NotificationOut.model_validate(n) for n in rows]}


@router.post("/read-all")
def read_all(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return {"updated": mark_all_read(db, user.id)}


@router.post("/{notification_id}/read")
def read_one(
    notification_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"notification": NotificationOut.model_validate(mark_notification_read(db, user.id, notification_id))}
