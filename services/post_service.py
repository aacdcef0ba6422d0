from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.post import Post, PostLike
from models.user import User
from schemas.post import AuthorOut, LikeOut, PostCreate, PostOut, TrendingTopicOut
from services.notification_service import create_notification
from utils.common_helpers import clamp
from utils.errors import AuthorizationError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


# -----------------------
# Mapping
# -----------------------

def _author_dto(user: User) -> AuthorOut:
    return AuthorOut(
        id=user.id,
        name=user.display_name,
        username=user.username,
        avatar_url=user.avatar_url,
        is_verified=user.is_verified,
    )


def _post_dto(post: Post, author: User, liked: Optional[bool] = None) -> PostOut:
    return PostOut(
        id=post.id,
        content=post.content,
        images=list(post.images or []),
        post_type=post.post_type,
        tags=list(post.tags or []),
        is_public=post.is_public,
        like_count=post.like_count,
        comment_count=post.comment_count,
        created_at=post.created_at,
        author=_author_dto(author),
        liked=liked,
    )


def _liked_post_ids(db: Session, viewer_id: int, post_ids: Iterable[int]) -> set[int]:
    ids = list(post_ids)
    if not ids:
        return set()
    rows = (
        db.query(PostLike.post_id)
        .filter(PostLike.user_id == viewer_id, PostLike.post_id.in_(ids))
        .all()
    )
    return {r[0] for r in rows}


# -----------------------
# Queries
# -----------------------

def create_post(db: Session, author: User, data: PostCreate) -> PostOut:
    post = Post(
        user_id=author.id,
        content=data.content,
        images=data.images,
        post_type=data.post_type,
        tags=data.tags,
        is_public=data.is_public,
        like_count=0,
        comment_count=0,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("post_created post_id=%s user_id=%s", post.id, author.id)
    return _post_dto(post, author, liked=False)


def list_posts(
    db: Session,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    author_id: Optional[int] = None,
    viewer_id: Optional[int] = None,
) -> List[PostOut]:
    """Public posts newest first; a viewer also sees their own private posts."""
    limit = clamp(limit, 1, MAX_PAGE_SIZE)
    offset = max(0, offset)

    query = db.query(Post, User).join(User, Post.user_id == User.id)
    if viewer_id is not None:
        query = query.filter(or_(Post.is_public.is_(True), Post.user_id == viewer_id))
    else:
        query = query.filter(Post.is_public.is_(True))
    if author_id is not None:
        query = query.filter(Post.user_id == author_id)

    rows: List[Tuple[Post, User]] = (
        query.order_by(Post.created_at.desc(), Post.id.desc()).limit(limit).offset(offset).all()
    )

    liked_ids: set[int] = set()
    if viewer_id is not None:
        liked_ids = _liked_post_ids(db, viewer_id, (p.id for p, _ in rows))

    return [
        _post_dto(post, author, liked=(post.id in liked_ids) if viewer_id is not None else None)
        for post, author in rows
    ]


def _get_visible_post(db: Session, post_id: int, viewer_id: Optional[int]) -> Post:
    post = db.get(Post, post_id)
    if not post or (not post.is_public and post.user_id != viewer_id):
        raise NotFoundError("Post not found")
    return post


def get_post(db: Session, post_id: int, viewer_id: Optional[int] = None) -> PostOut:
    post = _get_visible_post(db, post_id, viewer_id)
    liked = None
    if viewer_id is not None:
        liked = post.id in _liked_post_ids(db, viewer_id, [post.id])
    return _post_dto(post, post.author, liked=liked)


def delete_post(db: Session, user: User, post_id: int) -> None:
    post = _get_visible_post(db, post_id, user.id)
    if post.user_id != user.id:
        raise AuthorizationError("You can only delete your own posts")
    db.delete(post)
    db.commit()


# -----------------------
# Likes
# -----------------------

def _count_likes(db: Session, post_id: int) -> int:
    return db.query(func.count(PostLike.id)).filter(PostLike.post_id == post_id).scalar() or 0


def _set_like(db: Session, user: User, post_id: int, liked: bool) -> LikeOut:
    """
    Insert or delete the (post, user) like row and recompute like_count from
    post_likes, all in one transaction. Rolls back on any database error.
    """
    post = _get_visible_post(db, post_id, user.id)
    created = False

    try:
        existing = (
            db.query(PostLike)
            .filter(PostLike.post_id == post_id, PostLike.user_id == user.id)
            .first()
        )
        if liked and existing is None:
            db.add(PostLike(post_id=post_id, user_id=user.id))
            db.flush()
            created = True
        elif not liked and existing is not None:
            db.delete(existing)
            db.flush()

        post.like_count = _count_likes(db, post_id)

        if created and post.user_id != user.id:
            create_notification(
                db,
                user_id=post.user_id,
                type="like",
                title=f"{user.display_name} liked your post",
                data={"post_id": post_id, "user_id": user.id},
                commit=False,
            )
        db.commit()
    except IntegrityError:
        # Unique (post_id, user_id) hit: a concurrent like landed first.
        db.rollback()
        post = db.get(Post, post_id)
        post.like_count = _count_likes(db, post_id)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("like_update_failed post_id=%s", post_id)
        raise

    db.refresh(post)
    return LikeOut(post_id=post_id, like_count=post.like_count, liked=liked)


def like_post(db: Session, user: User, post_id: int) -> LikeOut:
    return _set_like(db, user, post_id, liked=True)


def unlike_post(db: Session, user: User, post_id: int) -> LikeOut:
    return _set_like(db, user, post_id, liked=False)


# -----------------------
# Trending
# -----------------------

def trending_topics(db: Session, *, limit: int = 10, window: int = 200) -> List[TrendingTopicOut]:
    """Most used tags across the ``window`` most recent public posts."""
    rows = (
        db.query(Post.tags)
        .filter(Post.is_public.is_(True))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .limit(window)
        .all()
    )
    counts: Counter[str] = Counter()
    for (tags,) in rows:
        counts.update(set(tags or []))
    return [TrendingTopicOut(tag=tag, post_count=n) for tag, n in counts.most_common(limit)]
