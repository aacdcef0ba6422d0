from datetime import datetime

from pydantic import BaseModel, field_validator

from schemas.common import normalize_email, required_text, validate_password
from schemas.user import UserOut


class SignupRequest(BaseModel):
    firstName: str
    lastName: str
    email: str
    password: str

    @field_validator("firstName", "lastName")
    @classmethod
    def validate_names(cls, v: str, info) -> str:
        return required_text(v, info.field_name, 60)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password(v)


class SigninRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return normalize_email(v)


class GoogleSigninRequest(BaseModel):
    id_token: str


class SessionUser(BaseModel):
    id: str
    email: str
    name: str | None = None
    image: str | None = None


class SessionOut(BaseModel):
    user: SessionUser
    expires: datetime


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserOut


class SignupOut(BaseModel):
    message: str
    user: UserOut
