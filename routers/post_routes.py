# routers/post_routes.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.user import User
from schemas.post import PostCreate
from services.auth import get_current_user, get_optional_user
from services.post_service import (
    DEFAULT_PAGE_SIZE,
    create_post,
    delete_post,
    get_post,
    like_post,
    list_posts,
    trending_topics,
    unlike_post,
)

router = APIRouter(prefix="/posts")


@router.get("")
def feed(
    limit: int = Query(DEFAULT_PAGE_SIZE),
    offset: int = Query(0),
    user_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    posts = list_posts(
        db,
        limit=limit,
        offset=offset,
        author_id=user_id,
        viewer_id=viewer.id if viewer else None,
    )
    return {"posts": posts}


@router.post("", status_code=201)
def new_post(
    body: PostCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"post": create_post(db, user, body)}


@router.get("/trending-topics")
def trending(limit: int = Query(10, ge=1, le=50), db: Session = Depends(get_db)):
    return {"topics": trending_topics(db, limit=limit)}


@router.get("/{post_id}")
def read_post(
    post_id: int,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return {"post": get_post(db, post_id, viewer.id if viewer else None)}


@router.delete("/{post_id}")
def remove_post(
    post_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    delete_post(db, user, post_id)
    return {"message": "Post deleted"}


@router.post("/{post_id}/like")
def like(
    post_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return like_post(db, user, post_id)


@router.delete("/{post_id}/like")
def unlike(
    post_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return unlike_post(db, user, post_id)
