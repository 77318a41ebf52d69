# app/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Shop account profile.

    Identity:
      - id: MUST match Supabase auth.users.id (UUID from JWT "sub")

    Role:
      - "user" | "admin" | "superadmin"
      - anonymous visitors have no row and no token.

    Passwords live in Supabase Auth; this table mirrors identity,
    contact details used at checkout, and the application role.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches Supabase auth.users.id",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Email from Supabase auth.users",
    )

    # Shop name shown in the admin panel
    name: str = Field(
        max_length=50,
        description="Shop / customer display name",
    )

    role: str = Field(
        default="user",
        index=True,
        description="Application role: user | admin | superadmin",
    )

    phone: str | None = None
    address: str | None = None
    city: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class BlacklistedToken(SQLModel, table=True):
    """
    Access token revoked by /logout.

    Rows past `expires_at` are useless (the JWT is expired anyway) and
    are purged on the next logout.
    """

    __tablename__ = "blacklisted_tokens"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
    )

    token: str = Field(unique=True, index=True)

    expires_at: datetime = Field(index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
