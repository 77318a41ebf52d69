# app/services/user_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import UserUpdate, UserRoleUpdate


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - profile edits (email is owned by Supabase Auth and never changes here)
      - role constraints
      - map domain errors to HTTP errors
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Self profile -----

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update for profile edits.
        Fields left out (or blank) keep their current value.
        """
        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(current_user, field, value)

        return self.repo.update(session, current_user)

    # ----- Admin operations -----

    def list_users(self, session: Session) -> list[User]:
        return self.repo.list_all(session)

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        """
        Raises:
            HTTPException(404): if not found.
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        return user

    def update_role(
        self,
        session: Session,
        acting_user: User,
        user_id: uuid.UUID,
        payload: UserRoleUpdate,
    ) -> User:
        """
        Change a user's role.

        Rules:
          - only a superadmin may grant or revoke 'superadmin'
          - nobody changes their own role
        """
        user = self.get_user(session, user_id)

        if user.id == acting_user.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot change your own role",
            )

        touches_superadmin = "superadmin" in (user.role, payload.role)
        if touches_superadmin and acting_user.role != "superadmin":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only a super admin can manage super admins",
            )

        user.role = payload.role
        return self.repo.update(session, user)
