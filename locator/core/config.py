"""Application configuration helpers."""

import logging
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PAGINATION_MODES = {"legacy", "filter_first"}
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ConfigError(RuntimeError):
    """Raised when a configuration value cannot be used."""


@dataclass(frozen=True)
class Settings:
    google_api_key: str = ""
    database_url: str = ""
    locations_table: str = "restaurant_locations"
    server_port: int = 8080
    default_radius_meters: float = 20000
    default_limit: int = 50
    pagination_mode: str = "filter_first"
    max_candidates: int = 1000
    geocode_region_hint: str = "UK"
    geocode_timeout_seconds: float = 5.0
    db_statement_timeout_ms: int = 5000
    local_timezone: str = "Europe/London"
    fallback_coordinate: Tuple[float, float] = (51.5074, -0.1278)


def _get_number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be numeric, got {raw!r}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    google_api_key = os.getenv("GOOGLE_API_KEY", "")
    database_url = os.getenv("DATABASE_URL", "")

    locations_table = os.getenv("LOCATIONS_TABLE", "restaurant_locations").strip()
    if not _IDENTIFIER_RE.match(locations_table):
        raise ConfigError(f"LOCATIONS_TABLE must be a plain identifier, got {locations_table!r}")

    pagination_mode = os.getenv("SEARCH_PAGINATION_MODE", "filter_first").strip().lower()
    if pagination_mode not in PAGINATION_MODES:
        raise ConfigError(
            f"SEARCH_PAGINATION_MODE must be one of {sorted(PAGINATION_MODES)}, got {pagination_mode!r}"
        )

    fallback_coordinate = (
        _get_number("FALLBACK_LATITUDE", "51.5074", float),
        _get_number("FALLBACK_LONGITUDE", "-0.1278", float),
    )

    if not database_url:
        logger.warning("DATABASE_URL is not set; database operations will fail.")
    if not google_api_key:
        logger.warning("GOOGLE_API_KEY is not configured; geocoding will always fall back to text search.")

    return Settings(
        google_api_key=google_api_key,
        database_url=database_url,
        locations_table=locations_table,
        server_port=_get_number("SERVER_PORT", "8080", int),
        default_radius_meters=_get_number("SEARCH_DEFAULT_RADIUS_M", "20000", float),
        default_limit=_get_number("SEARCH_DEFAULT_LIMIT", "50", int),
        pagination_mode=pagination_mode,
        max_candidates=_get_number("SEARCH_MAX_CANDIDATES", "1000", int),
        geocode_region_hint=os.getenv("GEOCODE_REGION_HINT", "UK").strip(),
        geocode_timeout_seconds=_get_number("GEOCODE_TIMEOUT_SECONDS", "5", float),
        db_statement_timeout_ms=_get_number("DB_STATEMENT_TIMEOUT_MS", "5000", int),
        local_timezone=os.getenv("LOCAL_TIMEZONE", "Europe/London").strip(),
        fallback_coordinate=fallback_coordinate,
    )
