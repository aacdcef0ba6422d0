from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from schemas.common import required_text
from utils.common_helpers import dedupe

POST_TYPES = {"general", "investment", "question", "analysis", "news"}


class PostCreate(BaseModel):
    content: str
    images: list[str] = Field(default_factory=list)
    post_type: str = "general"
    tags: list[str] = Field(default_factory=list)
    is_public: bool = True

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        return required_text(v, "content", 5000)

    @field_validator("images")
    @classmethod
    def check_images(cls, v: list[str]) -> list[str]:
        urls = [u.strip() for u in v if u and u.strip()]
        if len(urls) > 4:
            raise ValueError("at most 4 images per post")
        return urls

    @field_validator("post_type")
    @classmethod
    def check_post_type(cls, v: str) -> str:
        value = (v or "general").strip().lower()
        if value not in POST_TYPES:
            raise ValueError(f"post_type must be one of {sorted(POST_TYPES)}")
        return value

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: list[str]) -> list[str]:
        tags = dedupe(t.strip().lstrip("#").lower() for t in v if t and t.strip().lstrip("#"))
        if len(tags) > 10:
            raise ValueError("at most 10 tags per post")
        return tags


class AuthorOut(BaseModel):
    id: int
    name: str
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    is_verified: bool = False


class PostOut(BaseModel):
    id: int
    content: str
    images: list[str] = Field(default_factory=list)
    post_type: str
    tags: list[str] = Field(default_factory=list)
    is_public: bool
    like_count: int
    comment_count: int
    created_at: datetime
    author: AuthorOut
    liked: Optional[bool] = None


class LikeOut(BaseModel):
    post_id: int
    like_count: int
    liked: bool


class TrendingTopicOut(BaseModel):
    tag: str
    post_count: int
