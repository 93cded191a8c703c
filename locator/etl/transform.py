"""Utilities for transforming scraped restaurant records into database rows."""

import logging
import re
from datetime import datetime
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

SLUG_BASE_MAX_LENGTH = 80

_SLUG_STRIP_RE = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-+")


def generate_slug(name: Optional[str], address: Optional[str], identifier: int) -> str:
    combined = f"{name or ''} {address or ''}".lower()
    base = _SLUG_STRIP_RE.sub("", combined)
    base = _WHITESPACE_RE.sub("-", base.strip())
    base = _HYPHENS_RE.sub("-", base).strip("-")
    base = base[:SLUG_BASE_MAX_LENGTH].rstrip("-")
    return f"{base}-{identifier}" if base else str(identifier)


def _parse_rating(value: Any) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug("Unable to parse rating %r", value)
        return None


def to_location_row(record: Dict[str, Any], identifier: int, now: datetime) -> Dict[str, Any]:
    name = record.get("name") or "McDonald's"
    address = record.get("address") or ""

    return {
        "id": identifier,
        "name": name,
        "address": address,
        "street": record.get("street") or "",
        "city": record.get("city") or "London",
        "postal_code": record.get("postal_code") or "",
        "country": record.get("country") or "United Kingdom",
        "phone": record.get("phone") or None,
        "website": record.get("website") or None,
        "latitude": record.get("latitude") or 0,
        "longitude": record.get("longitude") or 0,
        "rating": _parse_rating(record.get("rating")),
        "reviews_count": record.get("reviews_count") or 0,
        "reviews_link": record.get("reviews_link") or None,
        "working_hours": record.get("working_hours") or "",
        "photo": record.get("photo") or None,
        "photos_count": record.get("photos_count") or 0,
        "business_status": record.get("business_status") or "OPERATIONAL",
        "about": record.get("about") or None,
        "slug": generate_slug(name, address, identifier),
        "created_at": now,
        "updated_at": now,
    }
