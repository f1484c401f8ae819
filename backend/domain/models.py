"""
Core domain models for the travel guide service.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class HeadingPattern(str, Enum):
    """
    Heading conventions a guide can use to name its stops.

    - MARKDOWN: "## Tokyo" / "### Tokyo" lines, the whole line remainder is the city.
    - DAY_SEPARATOR: HTML sub-headings such as "Day 1 – Tokyo", the city follows the dash.
    """
    MARKDOWN = "markdown"
    DAY_SEPARATOR = "day_separator"


@dataclass(frozen=True)
class CityCoordinate:
    """A geocoded stop, kept in document order."""
    name: str
    lat: float
    lon: float

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "lat": self.lat, "lon": self.lon}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CityCoordinate":
        return cls(name=str(data["name"]), lat=float(data["lat"]), lon=float(data["lon"]))


@dataclass
class CityEnrichment:
    """Best-effort lookups for one city; any field may be missing."""
    name: str
    image_url: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None


@dataclass
class GuideRecord:
    """
    A persisted travel guide.

    city_images and coordinates are captured when the guide is written and
    served as-is afterwards; content is never re-enriched on read.
    """
    id: str
    content: str
    heading_pattern: HeadingPattern = HeadingPattern.MARKDOWN
    city_images: Dict[str, str] = field(default_factory=dict)
    coordinates: List[CityCoordinate] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "heading_pattern": self.heading_pattern.value,
            "city_images": dict(self.city_images),
            "coordinates": [c.to_dict() for c in self.coordinates],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
