# app/repositories/user_repo.py
import uuid
from datetime import datetime

from sqlalchemy import delete
from sqlmodel import Session, select

from app.models.user import BlacklistedToken, User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    # ----- Basic CRUD -----

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def get_by_email(self, session: Session, email: str) -> User | None:
        """Return a User by unique email, or None if not found."""
        stmt = select(User).where(User.email == email)
        return session.exec(stmt).first()

    def list_all(self, session: Session) -> list[User]:
        """All users, newest first (admin panel shows the full list)."""
        stmt = select(User).order_by(User.created_at.desc())
        return session.exec(stmt).all()

    def create(self, session: Session, user: User) -> User:
        """Insert a new User and return the persisted row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user


class TokenRepository:
    """
    Revoked access tokens.
    """

    def add(self, session: Session, token: str, expires_at: datetime) -> None:
        exists = session.exec(
            select(BlacklistedToken).where(BlacklistedToken.token == token)
        ).first()
        if exists is None:
            session.add(BlacklistedToken(token=token, expires_at=expires_at))
        session.commit()

    def purge_expired(self, session: Session, now: datetime) -> None:
        session.execute(delete(BlacklistedToken).where(BlacklistedToken.expires_at < now))
        session.commit()
