from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from schemas.common import normalize_email, optional_text, required_text, validate_password, validate_username


class UserCreate(BaseModel):
    email: str
    name: str
    username: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return required_text(v, "name", 120)

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        return validate_username(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password(v)


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website_url: Optional[str] = None
    occupation: Optional[str] = None
    avatar_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    is_private: Optional[bool] = None

    @field_validator("username")
    @classmethod
    def check_username(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else validate_username(v)

    @field_validator("full_name", "location", "occupation")
    @classmethod
    def validate_short_text(cls, v: Optional[str], info) -> Optional[str]:
        return optional_text(v, info.field_name, 120)

    @field_validator("bio")
    @classmethod
    def validate_bio(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v, "bio", 1000)

    @field_validator("website_url", "avatar_url", "cover_image_url")
    @classmethod
    def validate_url(cls, v: Optional[str], info) -> Optional[str]:
        return optional_text(v, info.field_name, 2048)

    @field_validator("is_private")
    @classmethod
    def check_is_private(cls, v: Optional[bool]) -> bool:
        if v is None:
            raise ValueError("is_private must be a boolean")
        return v


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None


class UserStats(BaseModel):
    post_count: int = 0
    follower_count: int = 0
    following_count: int = 0
    portfolio_count: int = 0
    total_portfolio_value: float = 0.0


class UserProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: Optional[str] = None
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_verified: bool = False
    is_private: bool = False
    bio: Optional[str] = None
    location: Optional[str] = None
    website_url: Optional[str] = None
    occupation: Optional[str] = None
    cover_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    stats: Optional[UserStats] = None


class SuggestedUserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_verified: bool = False
