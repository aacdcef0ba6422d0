# routers/auth_routes.py
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from config.settings import get_settings
from database import get_db
from models.user import User
from schemas.auth import (
    GoogleSigninRequest,
    SessionOut,
    SessionUser,
    SigninRequest,
    SignupOut,
    SignupRequest,
    TokenOut,
)
from services import google_oauth, stack_auth
from services.auth import authenticate_credentials, create_session_token, get_current_user
from services.user_service import create_user, to_user_out
from utils.errors import AuthenticationError, NotFoundError

router = APIRouter()


def _issue_session(response: Response, user: User) -> TokenOut:
    settings = get_settings()
    token, expires_at = create_session_token(user)
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.session_max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )
    return TokenOut(access_token=token, expires_at=expires_at, user=to_user_out(user))


@router.post("/signup", status_code=201, response_model=SignupOut)
def signup(body: SignupRequest, db: Session = Depends(get_db)):
    user = create_user(
        db,
        email=body.email,
        password=body.password,
        full_name=f"{body.firstName} {body.lastName}",
    )
    return SignupOut(message="User created successfully", user=to_user_out(user))


@router.post("/auth/signin", response_model=TokenOut)
def signin(body: SigninRequest, response: Response, db: Session = Depends(get_db)):
    user = authenticate_credentials(db, body.email, body.password)
    if not user:
        raise AuthenticationError("Invalid email or password")
    return _issue_session(response, user)


@router.post("/auth/signout")
def signout(response: Response):
    response.delete_cookie(get_settings().auth_cookie_name, path="/")
    return {"message": "Signed out"}


@router.get("/auth/session", response_model=SessionOut)
def session(user: User = Depends(get_current_user)):
    # Rolling session: every read pushes the expiry out by the max age
    expires = datetime.now(timezone.utc) + timedelta(seconds=get_settings().session_max_age)
    return SessionOut(
        user=SessionUser(
            id=str(user.id),
            email=user.email,
            name=user.display_name,
            image=user.avatar_url,
        ),
        expires=expires,
    )


@router.get("/auth/providers")
def providers():
    settings = get_settings()
    out = [{"id": "credentials", "name": "Email and password"}]
    if settings.google_oauth_enabled:
        out.append({"id": "google", "name": "Google"})
    if stack_auth.is_configured():
        out.append({"id": "stack", "name": "Stack Auth"})
    return {"providers": out}


@router.post("/auth/google", response_model=TokenOut)
async def google_signin(
    body: GoogleSigninRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    if not get_settings().google_oauth_enabled:
        raise NotFoundError("Google sign-in is not enabled")
    claims = await google_oauth.verify_google_id_token(body.id_token)
    user = google_oauth.get_or_create_google_user(db, claims)
    return _issue_session(response, user)
