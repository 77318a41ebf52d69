# app/routers/users.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_auth, require_admin
from app.database import get_session
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import UserList, UserRead, UserUpdate, UserRoleUpdate
from app.services.user_service import UserService

router = APIRouter(tags=["Users"])

repo = UserRepository()
service = UserService(repo)


# -------- Self profile --------


@router.get("/users/me", response_model=UserRead)
def read_me(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile.
    """
    return current_user


@router.patch("/users/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Update name / phone / address / city (partial update).
    """
    return service.update_me(session, current_user, payload)


# -------- Admin endpoints --------


@router.get(
    "/all-users",
    response_model=UserList,
    dependencies=[Depends(require_admin)],
)
def list_users(session: Session = Depends(get_session)):
    """
    List all users (admin only).
    """
    users = service.list_users(session)
    return UserList(
        users=[UserRead.model_validate(u) for u in users],
        total=len(users),
    )


@router.patch("/users/{user_id}/role", response_model=UserRead)
def change_role(
    user_id: uuid.UUID,
    payload: UserRoleUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """
    Update a user's role (admin only).

    Allowed roles: user, admin, superadmin (superadmin changes need a
    superadmin).
    """
    return service.update_role(session, admin, user_id, payload)
