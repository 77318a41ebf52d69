# app/models/media.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Media(SQLModel, table=True):
    """
    Image stored in the media library (Supabase Storage object + metadata).
    """

    __tablename__ = "media"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(description="Original file name without extension")
    original_name: str

    url: str = Field(description="Public URL")

    storage_path: str = Field(
        unique=True,
        description="Object path inside the storage bucket",
    )

    size: int = Field(ge=0, description="Size in bytes")

    content_type: str

    folder: str = Field(default="media")

    uploaded_by: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
    )
