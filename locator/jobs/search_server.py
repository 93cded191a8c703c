"""HTTP entrypoint exposing location search (Cloud Run friendly)."""

from __future__ import annotations

import logging
import math
import os
from datetime import datetime
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from flask import Flask, jsonify, request

from locator.core.config import get_settings
from locator.core.repository import LocationRepository, RepositoryError
from locator.models import Coordinate, SearchQuery, SortKey
from locator.search.distance import directions_url
from locator.search.hours import format_schedule, is_open_at
from locator.search.resolver import SearchResolver
from locator.search.stats import summarize
from locator.vendors.google_geocoding import GoogleGeocoder

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def _get_repository() -> LocationRepository:
    return LocationRepository()


def _get_resolver() -> SearchResolver:
    settings = get_settings()
    geocoder = GoogleGeocoder(
        settings.google_api_key,
        region_hint=settings.geocode_region_hint,
        timeout=settings.geocode_timeout_seconds,
    )
    return SearchResolver.from_settings(settings, _get_repository(), geocoder)


def _now() -> datetime:
    return datetime.now(ZoneInfo(get_settings().local_timezone))


# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    """Plain-text liveness reply for the locator API."""
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    """Lightweight health endpoint; does not touch the database."""
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "pagination_mode": settings.pagination_mode,
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.get("/search")
def search() -> Any:
    """
    Search locations.
    Query params: q, lat, lng, near_me, radius, min_rating, open_now, sort, limit, offset
    """
    try:
        query = _parse_search_args(request.args)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    try:
        result = _get_resolver().resolve(query)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    except RepositoryError as exc:
        logger.error("Search failed: %s", exc)
        return jsonify({"error": str(exc)}), 502

    return jsonify({"data": result.to_dict()}), 200


@app.get("/locations/<slug>")
def location_detail(slug: str) -> Any:
    try:
        location = _get_repository().get_by_slug(slug)
    except RepositoryError as exc:
        logger.error("Location lookup failed for %s: %s", slug, exc)
        return jsonify({"error": str(exc)}), 502

    if location is None:
        return jsonify({"error": f"location {slug!r} not found"}), 404

    payload = location.to_dict()
    payload.update(
        hours=format_schedule(location.working_hours),
        open_now=is_open_at(location.working_hours, _now()),
        features=location.features(),
        directions_url=directions_url(location.latitude, location.longitude),
    )
    return jsonify({"data": payload}), 200


@app.get("/stats")
def stats() -> Any:
    try:
        locations = _get_repository().fetch_all()
    except RepositoryError as exc:
        logger.error("Stats query failed: %s", exc)
        return jsonify({"error": str(exc)}), 502
    return jsonify({"data": summarize(locations).to_dict()}), 200


# ---------- Internals ----------


def _optional_float(args: Dict[str, str], name: str) -> Optional[float]:
    raw = args.get(name)
    if raw in (None, ""):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be numeric") from exc
    if not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number")
    return value


def _optional_int(args: Dict[str, str], name: str, default: int) -> int:
    raw = args.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be an integer") from exc


def _parse_search_args(args) -> SearchQuery:
    settings = get_settings()

    latitude = _optional_float(args, "lat")
    longitude = _optional_float(args, "lng")
    if (latitude is None) != (longitude is None):
        raise ValueError("lat and lng must be provided together")

    reference = None
    if latitude is not None:
        reference = Coordinate(latitude, longitude)
    elif str(args.get("near_me", "")).lower() in _TRUTHY:
        # Device location unavailable: search around the configured centre point.
        reference = Coordinate(*settings.fallback_coordinate)

    sort_raw = (args.get("sort") or SortKey.DISTANCE.value).lower()
    try:
        sort_key = SortKey(sort_raw)
    except ValueError as exc:
        raise ValueError(f"sort must be one of {[key.value for key in SortKey]}") from exc

    radius = _optional_float(args, "radius")
    return SearchQuery(
        search_text=args.get("q") or None,
        reference=reference,
        radius_meters=radius if radius is not None else settings.default_radius_meters,
        min_rating=_optional_float(args, "min_rating"),
        open_now=str(args.get("open_now", "")).lower() in _TRUTHY,
        sort_key=sort_key,
        limit=_optional_int(args, "limit", settings.default_limit),
        offset=_optional_int(args, "offset", 0),
    )


def main() -> None:
    """Bind on the PORT Cloud Run injects, falling back to SERVER_PORT."""
    env_port = os.getenv("PORT")
    logger.info("[BOOT] ENV PORT=%s", env_port)

    port = int(env_port or get_settings().server_port)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)

    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
