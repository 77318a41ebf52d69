# app/core/auth.py
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError
from sqlmodel import Session, select

from app.core.config import get_settings
from app.database import get_session
from app.models.user import BlacklistedToken, User

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can fall back to the session cookie or guest mode.
bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_ROLES = {"admin", "superadmin"}


def create_access_token(
    sub: uuid.UUID | str,
    email: str,
    expires_in: timedelta = timedelta(hours=24),
) -> str:
    """
    Mint an HS256 access token with the same claims Supabase Auth issues.

    Used by maintenance scripts (seeding a super admin) and tests;
    regular sessions get their token from Supabase at /login.
    """
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(sub),
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify an access token (JWT).

    Verification:
      - signature (HS256 using JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified (Supabase 'aud' may vary)

    Raises:
        HTTPException(401): if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
            options={"verify_aud": False},
        )
    except ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token expired. Please log in again.",
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def get_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    """
    Raw access token from the Authorization header, else from the
    session cookie. None when the caller is a guest.
    """
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(settings.AUTH_COOKIE_NAME) or None


def is_token_revoked(session: Session, token: str) -> bool:
    stmt = select(BlacklistedToken).where(BlacklistedToken.token == token)
    return session.exec(stmt).first() is not None


def _default_name_from_email(email: str) -> str:
    """
    Derive a default display name from email if the user has not
    completed their profile yet.
    """
    if "@" in email:
        return email.split("@", 1)[0]
    return email


def get_current_user(
    token: str | None = Depends(get_token),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the current user from the access token.

    Flow:
      1. No token => guest => return None.
      2. Reject tokens revoked by /logout.
      3. Decode JWT => extract 'sub' and 'email'.
      4. Find user profile; auto-provision a minimal one if missing.

    Raises:
        HTTPException(401): if token is revoked, malformed or missing claims.
    """
    if token is None:
        return None  # guest mode

    payload = decode_access_token(token)

    if is_token_revoked(session, token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session has been logged out",
        )

    sub = payload.get("sub")
    email = payload.get("email")

    if not sub or not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub/email",
        )

    try:
        sub_uuid = uuid.UUID(sub)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid sub in token",
        )

    user = session.get(User, sub_uuid)

    # Default role = "user" (admins must be promoted).
    if user is None:
        user = User(
            id=sub_uuid,
            email=email,
            name=_default_name_from_email(email),
            role="user",
        )
        session.add(user)
        session.commit()
        session.refresh(user)

    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Enforce authentication. Guests are rejected with 401.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token not provided. Please log in first.",
        )
    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    """
    Enforce admin role (admin or superadmin).

    Raises:
        HTTPException(403): for regular customers.
    """
    if user.role not in ADMIN_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admins only.",
        )
    return user


def require_user(user: User = Depends(require_auth)) -> User:
    """
    Enforce that only customers (role='user') can access a route.

    Use this for the server-side cart. Admins will be rejected with 403.
    """
    if user.role != "user":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Customer access required",
        )
    return user
