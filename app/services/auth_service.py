# app/services/auth_service.py
import logging
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session
from supabase import AuthError

from app.core.auth import decode_access_token
from app.core.supabase_client import supabase_public
from app.models.user import User
from app.repositories.user_repo import TokenRepository, UserRepository
from app.schemas.user import LoginRequest, SignupRequest

logger = logging.getLogger(__name__)


class AuthService:
    """
    Session lifecycle on top of Supabase Auth.

    Responsibilities:
      - sign up / sign in through Supabase (passwords never touch our DB)
      - mirror the profile row in public.users
      - revoke access tokens on logout
    """

    def __init__(self, user_repo: UserRepository, token_repo: TokenRepository):
        self.user_repo = user_repo
        self.token_repo = token_repo

    def signup(self, session: Session, payload: SignupRequest) -> User:
        """
        Create the Supabase account and the matching profile.

        Raises:
            HTTPException(400): email already registered or rejected by Supabase.
        """
        if self.user_repo.get_by_email(session, payload.email) is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="An account with this email already exists",
            )

        try:
            res = supabase_public().auth.sign_up(
                {"email": payload.email, "password": payload.password}
            )
        except AuthError as e:
            logger.warning("Supabase sign_up rejected %s: %s", payload.email, e)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e),
            )

        if res.user is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Sign up failed",
            )

        user = User(
            id=uuid.UUID(str(res.user.id)),
            email=payload.email,
            name=payload.name,
            phone=payload.phone,
            address=payload.address,
            city=payload.city,
            role="user",
        )
        return self.user_repo.create(session, user)

    def login(self, session: Session, payload: LoginRequest) -> tuple[User, str]:
        """
        Exchange email + password for a Supabase access token.

        Returns:
            (profile, access_token)

        Raises:
            HTTPException(401): wrong credentials.
        """
        try:
            res = supabase_public().auth.sign_in_with_password(
                {"email": payload.email, "password": payload.password}
            )
        except AuthError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Email or password is incorrect",
            )

        if res.session is None or res.user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Email or password is incorrect",
            )

        user_id = uuid.UUID(str(res.user.id))
        user = self.user_repo.get_by_id(session, user_id)
        if user is None:
            user = self.user_repo.create(
                session,
                User(
                    id=user_id,
                    email=payload.email,
                    name=payload.email.split("@", 1)[0],
                    role="user",
                ),
            )

        return user, res.session.access_token

    def logout(self, session: Session, token: str | None) -> None:
        """
        Revoke the presented token until it expires.

        Tokens that no longer verify need no revocation; logout always
        succeeds so the client can drop its cookie.
        """
        if not token:
            return

        try:
            payload = decode_access_token(token)
        except HTTPException:
            return

        now = datetime.now(timezone.utc)
        expires_at = datetime.fromtimestamp(payload.get("exp", now.timestamp()), timezone.utc)
        self.token_repo.purge_expired(session, now)
        self.token_repo.add(session, token, expires_at)
        logger.info("Token revoked for sub=%s", payload.get("sub"))
