# app/routers/media.py
import uuid

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.models.user import User
from app.repositories.media_repo import MediaRepository
from app.schemas.common import BulkDeleteResult, MAX_PAGE_SIZE
from app.schemas.media import MediaBulkDelete, MediaDeleted, MediaPage, MediaUploadResult
from app.services.media_service import MediaService

router = APIRouter(prefix="/media", tags=["Media"])

service = MediaService(MediaRepository())


@router.post("/upload", response_model=MediaUploadResult)
def upload_media(
    images: list[UploadFile] = File(...),
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """
    Upload up to 10 images (JPEG / PNG / WEBP, 5MB each) to the media library.

    Files that fail validation or upload are reported in `errors`; the
    request only fails when nothing was uploaded.
    """
    files = [(f.filename or "image", f.content_type, f.file.read()) for f in images]
    return service.upload_images(session, admin.id, files)


@router.get(
    "",
    response_model=MediaPage,
    dependencies=[Depends(require_admin)],
)
def list_media(
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=MAX_PAGE_SIZE),
):
    return service.list_media(session, page, limit)


@router.delete(
    "/bulk",
    response_model=BulkDeleteResult,
    dependencies=[Depends(require_admin)],
)
def bulk_delete_media(
    payload: MediaBulkDelete,
    session: Session = Depends(get_session),
):
    return service.bulk_delete_media(session, payload.ids)


@router.delete(
    "/{media_id}",
    response_model=MediaDeleted,
    dependencies=[Depends(require_admin)],
)
def delete_media(
    media_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.delete_media(session, media_id)
