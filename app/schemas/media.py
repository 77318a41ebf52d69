# app/schemas/media.py
import uuid
from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field

from app.schemas.common import Pagination


class MediaRead(SQLModel):
    id: uuid.UUID
    name: str
    original_name: str
    url: str
    size: int
    content_type: str
    folder: str
    uploaded_by: uuid.UUID
    created_at: datetime


class UploadError(SQLModel):
    file_name: str
    error: str


class MediaUploadResult(SQLModel):
    success: bool = True
    uploaded_images: list[MediaRead]
    errors: list[UploadError] = []


class MediaPage(SQLModel):
    success: bool = True
    media: list[MediaRead]
    pagination: Pagination


class MediaBulkDelete(SQLModel):
    model_config = ConfigDict(extra="forbid")

    ids: list[uuid.UUID] = Field(min_length=1)


class MediaDeleted(SQLModel):
    success: bool = True
    id: uuid.UUID
    name: str
