import re

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_USERNAME_RE = re.compile(r"^[A-Za-z0-9_.]{3,50}$")


def normalize_email(value: str) -> str:
    email = (value or "").strip().lower()
    if not email:
        raise ValueError("email is required")
    if len(email) > 320 or not _EMAIL_RE.match(email):
        raise ValueError("email is not a valid address")
    return email


def validate_password(value: str) -> str:
    if not value:
        raise ValueError("password is required")
    if len(value) < 8:
        raise ValueError("password must be at least 8 characters")
    if len(value.encode("utf-8")) > 72:
        raise ValueError("password must be at most 72 bytes")
    return value


def validate_username(value: str) -> str:
    username = (value or "").strip()
    if not _USERNAME_RE.match(username):
        raise ValueError("username must be 3-50 letters, digits, '_' or '.'")
    return username


def required_text(value: str, field: str, max_len: int) -> str:
    text = (value or "").strip()
    if not text:
        raise ValueError(f"{field} is required")
    if len(text) > max_len:
        raise ValueError(f"{field} must be at most {max_len} characters")
    return text


def optional_text(value: str | None, field: str, max_len: int) -> str | None:
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if len(text) > max_len:
        raise ValueError(f"{field} must be at most {max_len} characters")
    return text
