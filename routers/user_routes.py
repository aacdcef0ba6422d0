# routers/user_routes.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.user import User
from schemas.user import ProfileUpdate, SuggestedUserOut, UserCreate
from services.auth import get_current_user, get_optional_user
from services.follow_service import follow_user, is_following, unfollow_user
from services.user_service import (
    create_user,
    get_user_by_email,
    get_user_by_id,
    get_user_or_404,
    get_user_stats,
    suggested_users,
    to_profile_out,
    to_user_out,
    update_profile,
)
from utils.errors import NotFoundError, ValidationError

router = APIRouter(prefix="/users")


def _profile_for(db: Session, user: User, viewer: Optional[User]):
    full = not user.is_private or (viewer is not None and viewer.id == user.id)
    stats = get_user_stats(db, user.id) if full else None
    return to_profile_out(user, stats, full=full)


@router.post("", status_code=201)
def create_account(body: UserCreate, db: Session = Depends(get_db)):
    user = create_user(
        db,
        email=body.email,
        password=body.password,
        full_name=body.name,
        username=body.username,
    )
    return {"user": to_user_out(user)}


@router.get("")
def lookup_user(
    email: Optional[str] = Query(None),
    id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    if not email and id is None:
        raise ValidationError("Either email or id is required")
    user = get_user_by_email(db, email) if email else get_user_by_id(db, id)
    if not user:
        raise NotFoundError("User not found")
    return {"user": _profile_for(db, user, viewer)}


@router.get("/me")
def me(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return {"user": to_profile_out(user, get_user_stats(db, user.id), full=True)}


@router.patch("/me")
def update_me(
    body: ProfileUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    user = update_profile(db, user, body.model_dump(exclude_unset=True))
    return {"user": to_profile_out(user, get_user_stats(db, user.id), full=True)}


@router.get("/suggested")
def suggested(
    limit: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    users = suggested_users(db, viewer.id if viewer else None, limit=limit)
    return {"users": [SuggestedUserOut.model_validate(u) for u in users]}


@router.get("/{user_id}")
def get_profile(
    user_id: int,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return {"user": _profile_for(db, get_user_or_404(db, user_id), viewer)}


@router.get("/{user_id}/follow")
def follow_status(
    user_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"following": is_following(db, user.id, user_id)}


@router.post("/{user_id}/follow")
def follow(
    user_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    created = follow_user(db, user, user_id)
    return {"following": True, "created": created}


@router.delete("/{user_id}/follow")
def unfollow(
    user_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    removed = unfollow_user(db, user, user_id)
    return {"following": False, "removed": removed}
