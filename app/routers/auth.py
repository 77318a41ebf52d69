# app/routers/auth.py
from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from app.core.auth import get_token, require_auth
from app.core.config import get_settings
from app.database import get_session
from app.models.user import User
from app.repositories.user_repo import TokenRepository, UserRepository
from app.schemas.common import Message
from app.schemas.user import AuthResponse, LoginRequest, SignupRequest, UserRead
from app.services.auth_service import AuthService

router = APIRouter(tags=["Auth"])

settings = get_settings()
service = AuthService(UserRepository(), TokenRepository())


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="none" if settings.COOKIE_SECURE else "lax",
        max_age=settings.COOKIE_MAX_AGE_SECONDS,
    )


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="none" if settings.COOKIE_SECURE else "lax",
    )


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
def signup(
    payload: SignupRequest,
    session: Session = Depends(get_session),
):
    """
    Register a new shop account (Supabase Auth + profile row).
    """
    user = service.signup(session, payload)
    return AuthResponse(
        message="User created successfully", user=UserRead.model_validate(user)
    )


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    response: Response,
    session: Session = Depends(get_session),
):
    """
    Sign in and start a cookie session.

    The access token is also accepted as a Bearer header by every route.
    """
    user, token = service.login(session, payload)
    _set_session_cookie(response, token)
    return AuthResponse(user=UserRead.model_validate(user))


@router.get("/verify-token", response_model=AuthResponse)
def verify_token(current_user: User = Depends(require_auth)):
    """
    Session probe used by the storefront's periodic token check.

    200 with the profile while the session is valid, 401 otherwise.
    """
    return AuthResponse(user=UserRead.model_validate(current_user))


@router.api_route("/logout", methods=["GET", "POST"], response_model=Message)
def logout(
    response: Response,
    token: str | None = Depends(get_token),
    session: Session = Depends(get_session),
):
    """
    Revoke the current token and clear the session cookie.

    Always succeeds, even without a session.
    """
    service.logout(session, token)
    _clear_session_cookie(response)
    return Message(message="Logged out successfully")
