# app/repositories/media_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from app.models.media import Media


class MediaRepository:
    """
    Data access layer for the media library.
    """

    def get_by_id(self, session: Session, media_id: uuid.UUID) -> Media | None:
        return session.get(Media, media_id)

    def get_many(self, session: Session, media_ids: list[uuid.UUID]) -> list[Media]:
        stmt = select(Media).where(Media.id.in_(media_ids))
        return session.exec(stmt).all()

    def list_page(self, session: Session, skip: int, limit: int) -> list[Media]:
        stmt = select(Media).order_by(Media.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def count(self, session: Session) -> int:
        return session.exec(select(func.count()).select_from(Media)).one()

    def create(self, session: Session, media: Media) -> Media:
        session.add(media)
        session.commit()
        session.refresh(media)
        return media

    def delete_many(self, session: Session, items: list[Media]) -> None:
        for media in items:
            session.delete(media)
        session.commit()
