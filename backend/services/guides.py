"""
Guide write/read workflow.

Write: detect heading pattern -> extract cities -> enrich -> upsert.
Read: plain lookup; enrichment captured at write time is served unchanged.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from domain.models import GuideRecord, HeadingPattern
from repositories import GuidesRepository
from services.enrichment import build_enrichment_maps, enrich_cities
from services.heading_extractor import detect_heading_pattern, extract_cities

logger = logging.getLogger(__name__)


@dataclass
class SaveResult:
    guide: GuideRecord
    city_count: int

    @property
    def image_count(self) -> int:
        return len(self.guide.city_images)

    @property
    def coordinate_count(self) -> int:
        return len(self.guide.coordinates)


def save_guide(
    session: Session,
    repo: GuidesRepository,
    guide_id: str,
    content: str,
    pattern: Optional[HeadingPattern] = None,
) -> SaveResult:
    """Extract, enrich and store a guide, replacing any previous one with this id.

    Raises StoreError when the guide cannot be persisted; lookup failures
    only leave cities without a picture or coordinates.
    """
    heading_pattern = pattern or detect_heading_pattern(content)
    cities = extract_cities(content, heading_pattern)
    logger.info(
        "Saving guide %s: %d cities found with %s headings",
        guide_id,
        len(cities),
        heading_pattern.value,
    )

    city_images, coordinates = build_enrichment_maps(enrich_cities(cities))
    record = GuideRecord(
        id=guide_id,
        content=content,
        heading_pattern=heading_pattern,
        city_images=city_images,
        coordinates=coordinates,
    )
    stored = repo.upsert_guide(session, record)
    return SaveResult(guide=stored, city_count=len(cities))


def load_guide(session: Session, repo: GuidesRepository, guide_id: str) -> Optional[GuideRecord]:
    """Return the stored guide or None if it was never written."""
    return repo.get_guide(session, guide_id)
