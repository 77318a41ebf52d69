# app/services/media_service.py
import logging
import uuid
from typing import Iterable

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.storage_utils import (
    delete_from_storage,
    generate_object_path,
    upload_to_storage,
)
from app.models.media import Media
from app.repositories.media_repo import MediaRepository
from app.schemas.common import BulkDeleteResult, build_pagination, page_to_offset
from app.schemas.media import (
    MediaDeleted,
    MediaPage,
    MediaRead,
    MediaUploadResult,
    UploadError,
)

logger = logging.getLogger(__name__)

# --- Image config ---

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image
MAX_FILES_PER_UPLOAD = 10
MEDIA_FOLDER = "media"

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class MediaService:
    """
    Media library: image uploads to Supabase Storage plus metadata rows.

    Uploads are processed file by file; a bad file is reported in
    `errors` without aborting the rest of the batch.
    """

    def __init__(self, repo: MediaRepository):
        self.repo = repo

    @staticmethod
    def _validate_and_get_ext(content_type: str | None, file_bytes: bytes) -> str:
        if not content_type or not content_type.startswith("image/"):
            raise ValueError("Only image files are allowed")
        if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise ValueError("Unsupported image format. Please use JPEG, PNG, or WebP")
        if len(file_bytes) > MAX_IMAGE_BYTES:
            raise ValueError("Image too large (max 5MB)")
        return ALLOWED_IMAGE_CONTENT_TYPES[content_type]

    def upload_images(
        self,
        session: Session,
        uploaded_by: uuid.UUID,
        files: Iterable[tuple[str, str | None, bytes]],
    ) -> MediaUploadResult:
        """
        Args:
            files: iterable of (file_name, content_type, file_bytes)

        Raises:
            HTTPException(400): no files, too many files, or every file failed.
        """
        files = list(files)
        if not files:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No images provided",
            )
        if len(files) > MAX_FILES_PER_UPLOAD:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"At most {MAX_FILES_PER_UPLOAD} images per upload",
            )

        uploaded: list[MediaRead] = []
        errors: list[UploadError] = []

        for file_name, content_type, file_bytes in files:
            try:
                ext = self._validate_and_get_ext(content_type, file_bytes)
            except ValueError as e:
                errors.append(UploadError(file_name=file_name, error=str(e)))
                continue

            path = generate_object_path(MEDIA_FOLDER, file_name, ext)
            try:
                url = upload_to_storage(path, file_bytes, content_type)
            except Exception as e:
                logger.warning("Storage upload failed for %s: %s", file_name, e)
                errors.append(UploadError(file_name=file_name, error=str(e)))
                continue

            stem = file_name.rsplit(".", 1)[0] if "." in file_name else file_name
            media = self.repo.create(
                session,
                Media(
                    name=stem,
                    original_name=file_name,
                    url=url,
                    storage_path=path,
                    size=len(file_bytes),
                    content_type=content_type,
                    folder=MEDIA_FOLDER,
                    uploaded_by=uploaded_by,
                ),
            )
            uploaded.append(MediaRead.model_validate(media))

        if not uploaded:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "message": "Failed to upload any images",
                    "errors": [e.model_dump() for e in errors],
                },
            )

        return MediaUploadResult(uploaded_images=uploaded, errors=errors)

    def list_media(self, session: Session, page: int = 1, limit: int = 50) -> MediaPage:
        items = self.repo.list_page(session, page_to_offset(page, limit), limit)
        total = self.repo.count(session)
        return MediaPage(
            media=[MediaRead.model_validate(m) for m in items],
            pagination=build_pagination(page, limit, total),
        )

    def _remove_objects(self, paths: list[str]) -> None:
        # Best-effort: the rows are already gone
        for path in paths:
            try:
                delete_from_storage(path)
            except Exception as e:
                logger.warning("Storage cleanup failed for %s: %s", path, e)

    def delete_media(self, session: Session, media_id: uuid.UUID) -> MediaDeleted:
        media = self.repo.get_by_id(session, media_id)
        if not media:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Media not found",
            )
        deleted = MediaDeleted(id=media.id, name=media.name)
        paths = [media.storage_path]
        self.repo.delete_many(session, [media])
        self._remove_objects(paths)
        return deleted

    def bulk_delete_media(
        self, session: Session, media_ids: list[uuid.UUID]
    ) -> BulkDeleteResult:
        items = self.repo.get_many(session, media_ids)
        if not items:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No media items found",
            )
        deleted_ids = [m.id for m in items]
        paths = [m.storage_path for m in items]
        self.repo.delete_many(session, items)
        self._remove_objects(paths)
        return BulkDeleteResult(
            deleted_count=len(deleted_ids),
            requested_count=len(media_ids),
            deleted_ids=deleted_ids,
        )
