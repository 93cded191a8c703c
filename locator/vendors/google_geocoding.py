"""Client utilities for the Google Geocoding API."""

import logging
from typing import Any, Dict, Optional

import requests

from locator.models import Coordinate

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://maps.googleapis.com/maps/api/geocode"


class GeocodingError(RuntimeError):
    """Raised when the Geocoding API returns a non-successful response."""


def geocode(address: str, api_key: str, region_hint: Optional[str] = "UK", timeout: float = 10) -> Dict[str, Any]:
    query = f"{address}, {region_hint}" if region_hint else address
    params = {"address": query, "key": api_key}
    response = _SESSION.get(f"{_BASE_URL}/json", params=params, timeout=timeout)
    response.raise_for_status()
    payload = response.json()
    status = payload.get("status")
    if status not in {"OK", "ZERO_RESULTS"}:
        logger.error("geocode failed: status=%s, error_message=%s", status, payload.get("error_message"))
        raise GeocodingError(payload.get("error_message") or status)
    return payload


class GoogleGeocoder:
    """Resolves free text to a coordinate; every failure comes back as ``None``."""

    def __init__(self, api_key: str, region_hint: Optional[str] = "UK", timeout: float = 5.0) -> None:
        self.api_key = api_key
        self.region_hint = region_hint
        self.timeout = timeout

    def resolve(self, text: str) -> Optional[Coordinate]:
        if not self.api_key:
            logger.warning("Skipping geocode for %r: GOOGLE_API_KEY is not configured", text)
            return None
        try:
            payload = geocode(text, self.api_key, region_hint=self.region_hint, timeout=self.timeout)
            results = payload.get("results") or []
            if payload.get("status") != "OK" or not results:
                logger.info("No geocoding match for %r", text)
                return None
            location = results[0]["geometry"]["location"]
            return Coordinate(float(location["lat"]), float(location["lng"]))
        except (requests.RequestException, GeocodingError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Geocoding %r failed: %s", text, exc)
            return None
