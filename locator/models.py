"""Core data models shared by the search service and the import job."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional

from locator.search.distance import format_distance

FEATURE_GROUPS = ("Service options", "Amenities", "Accessibility", "Children")


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


class SortKey(str, enum.Enum):
    DISTANCE = "distance"
    RATING = "rating"
    NAME = "name"


@dataclass(slots=True)
class Location:
    """A restaurant row as stored in the locations table."""

    id: int
    name: str
    slug: str
    address: str = ""
    street: Optional[str] = None
    city: str = ""
    postal_code: str = ""
    country: str = ""
    phone: Optional[str] = None
    website: Optional[str] = None
    latitude: float = 0.0
    longitude: float = 0.0
    rating: Optional[float] = None
    reviews_count: int = 0
    reviews_link: Optional[str] = None
    working_hours: str = ""
    photo: Optional[str] = None
    photos_count: int = 0
    business_status: str = "OPERATIONAL"
    about: Dict[str, Any] = field(default_factory=dict, repr=False)
    created_at: Optional[Any] = None
    updated_at: Optional[Any] = None
    # Only meaningful inside a single search call.
    distance: Optional[float] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Location":
        known = {f.name for f in fields(cls)} - {"distance"}
        values = {key: value for key, value in row.items() if key in known}
        for key in ("reviews_count", "photos_count"):
            values[key] = int(values.get(key) or 0)
        for key in ("latitude", "longitude"):
            values[key] = float(values.get(key) or 0.0)
        if values.get("rating") is not None:
            values["rating"] = float(values["rating"])
        values["about"] = values.get("about") or {}
        values["working_hours"] = values.get("working_hours") or ""
        return cls(**values)

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    @property
    def is_operational(self) -> bool:
        return self.business_status == "OPERATIONAL"

    def features(self) -> Dict[str, Dict[str, Any]]:
        return {group: self.about[group] for group in FEATURE_GROUPS if isinstance(self.about.get(group), dict)}

    def to_dict(self) -> Dict[str, Any]:
        payload = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "distance"}
        for key in ("created_at", "updated_at"):
            if hasattr(payload[key], "isoformat"):
                payload[key] = payload[key].isoformat()
        if self.distance is not None:
            payload["distance"] = self.distance
            payload["distance_text"] = format_distance(self.distance)
        return payload


@dataclass(slots=True)
class SearchQuery:
    """Parameters of a single search call; never persisted."""

    search_text: Optional[str] = None
    reference: Optional[Coordinate] = None
    radius_meters: float = 20000
    min_rating: Optional[float] = None
    open_now: bool = False
    sort_key: SortKey = SortKey.DISTANCE
    limit: int = 50
    offset: int = 0

    @property
    def trimmed_text(self) -> str:
        return (self.search_text or "").strip()

    @property
    def rating_threshold(self) -> Optional[float]:
        # 0 or less means no threshold, so unrated rows are kept.
        if self.min_rating is None or self.min_rating <= 0:
            return None
        return self.min_rating

    def validate(self) -> None:
        if not isinstance(self.sort_key, SortKey):
            raise ValueError(f"unknown sort key: {self.sort_key!r}")
        if not math.isfinite(self.radius_meters) or self.radius_meters <= 0:
            raise ValueError("radius must be positive")
        if self.limit < 0 or self.offset < 0:
            raise ValueError("limit and offset must not be negative")
        if self.min_rating is not None and not 0 <= self.min_rating <= 5:
            raise ValueError("min_rating must be between 0 and 5")
        if self.reference is not None and not (
            math.isfinite(self.reference.latitude) and math.isfinite(self.reference.longitude)
        ):
            raise ValueError("reference coordinate must be finite")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "search_text": self.search_text,
            "reference": (
                {"latitude": self.reference.latitude, "longitude": self.reference.longitude}
                if self.reference
                else None
            ),
            "radius_meters": self.radius_meters,
            "min_rating": self.min_rating,
            "open_now": self.open_now,
            "sort_key": self.sort_key.value,
            "limit": self.limit,
            "offset": self.offset,
        }


@dataclass(slots=True)
class SearchResult:
    locations: List[Location]
    total: int
    query: SearchQuery
    strategy: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "locations": [location.to_dict() for location in self.locations],
            "total": self.total,
            "strategy": self.strategy,
            "query": self.query.to_dict(),
        }
