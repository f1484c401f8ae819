"""
Guide repository backed by SQLAlchemy (SQLite by default).
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.models import CityCoordinate, GuideRecord, HeadingPattern
from repositories.models import GuideORM

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the backing store cannot complete a read or write."""


def _guide_from_orm(orm: GuideORM) -> GuideRecord:
    return GuideRecord(
        id=orm.id,
        content=orm.content,
        heading_pattern=HeadingPattern(orm.heading_pattern),
        city_images=dict(orm.city_images or {}),
        coordinates=[CityCoordinate.from_dict(c) for c in (orm.coordinates or [])],
        created_at=orm.created_at,
        updated_at=orm.updated_at,
    )


def _update_orm_from_guide(orm: GuideORM, guide: GuideRecord) -> None:
    # Full replacement: every payload column is overwritten.
    orm.content = guide.content
    orm.heading_pattern = guide.heading_pattern.value
    orm.city_images = dict(guide.city_images)
    orm.coordinates = [c.to_dict() for c in guide.coordinates]


class GuidesRepository:
    """Upsert and point lookup for guides."""

    def get_guide(self, session: Session, guide_id: str) -> Optional[GuideRecord]:
        """Return the guide, or None when no guide has this id."""
        try:
            orm = session.get(GuideORM, guide_id)
        except SQLAlchemyError as exc:
            logger.exception("Failed to read guide %s", guide_id)
            raise StoreError(f"Could not read guide {guide_id}: {exc}") from exc
        if not orm:
            return None
        return _guide_from_orm(orm)

    def upsert_guide(self, session: Session, guide: GuideRecord) -> GuideRecord:
        """Insert the guide or fully replace the one stored under the same id."""
        now = datetime.utcnow()
        try:
            orm = session.get(GuideORM, guide.id)
            if orm is None:
                orm = GuideORM(id=guide.id, created_at=now)
            _update_orm_from_guide(orm, guide)
            orm.updated_at = now
            session.add(orm)
            session.commit()
            session.refresh(orm)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Failed to save guide %s", guide.id)
            raise StoreError(f"Could not save guide {guide.id}: {exc}") from exc
        return _guide_from_orm(orm)
