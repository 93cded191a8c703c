"""Turns a search query into a filtered, measured and ordered page of locations.

Resolution happens in two steps. ``choose_strategy`` classifies the query and
decides where the candidate set comes from:

* ``EXPLICIT``   caller supplied a reference coordinate (text is ignored)
* ``GEOCODED``   the text resolved to a reference coordinate
* ``TEXT_MATCH`` candidates restricted by substring/prefix terms
* ``NO_MATCH``   outward code with no text hits and no geocode result
* ``UNFILTERED`` nothing to search on

``resolve`` then fetches the candidates and applies, in order: distance
annotation, radius filter (``EXPLICIT``/``GEOCODED`` only), sort, "open now"
filter and pagination.

Two pagination modes exist. ``legacy`` lets the database page the raw query,
so later filters can shrink a page below ``limit`` and ``total`` is the
database count before any client-side filter. ``filter_first`` pulls up to
``max_candidates`` rows, filters and sorts them, then slices the page;
``total`` is then the number of rows that survived filtering.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, List, Optional, Protocol, Sequence, Tuple
from zoneinfo import ZoneInfo

from locator.core.repository import LocationFilter, Page, TextTerm
from locator.models import Coordinate, Location, SearchQuery, SearchResult, SortKey
from locator.search.distance import distance_between
from locator.search.hours import is_open_at
from locator.search.postcode import QueryKind, classify_query

logger = logging.getLogger(__name__)

MIN_GEOCODE_LENGTH = 3


class CandidateSource(Protocol):
    def count(self, location_filter: LocationFilter) -> int: ...

    def fetch(self, location_filter: LocationFilter, offset: int = 0, limit: Optional[int] = None) -> Page: ...


class Geocoder(Protocol):
    def resolve(self, text: str) -> Optional[Coordinate]: ...


class StrategyKind(enum.Enum):
    EXPLICIT = "explicit"
    GEOCODED = "geocoded"
    TEXT_MATCH = "text_match"
    NO_MATCH = "no_match"
    UNFILTERED = "unfiltered"


@dataclass(frozen=True)
class Strategy:
    kind: StrategyKind
    reference: Optional[Coordinate] = None
    text_terms: Tuple[TextTerm, ...] = field(default_factory=tuple)

    @property
    def applies_radius(self) -> bool:
        return self.kind in (StrategyKind.EXPLICIT, StrategyKind.GEOCODED)


def postcode_terms(text: str, prefix: bool) -> Tuple[TextTerm, ...]:
    return (
        TextTerm("postal_code", text, "prefix" if prefix else "contains"),
        TextTerm("address", text),
        TextTerm("city", text),
    )


def free_text_terms(text: str) -> Tuple[TextTerm, ...]:
    return tuple(TextTerm(name, text) for name in ("name", "address", "city", "postal_code"))


def sort_locations(locations: Sequence[Location], sort_key: SortKey, has_reference: bool) -> List[Location]:
    if sort_key is SortKey.DISTANCE:
        if not has_reference:
            return list(locations)
        return sorted(locations, key=lambda loc: loc.distance if loc.distance is not None else 0.0)
    if sort_key is SortKey.RATING:
        return sorted(locations, key=lambda loc: loc.rating or 0.0, reverse=True)
    return sorted(locations, key=lambda loc: (loc.name or "").casefold())


class SearchResolver:
    def __init__(
        self,
        repository: CandidateSource,
        geocoder: Geocoder,
        *,
        pagination_mode: str = "filter_first",
        max_candidates: int = 1000,
        clock: Optional[Callable[[], datetime]] = None,
        timezone: str = "Europe/London",
    ) -> None:
        if pagination_mode not in {"legacy", "filter_first"}:
            raise ValueError(f"unknown pagination mode {pagination_mode!r}")
        self.repository = repository
        self.geocoder = geocoder
        self.pagination_mode = pagination_mode
        self.max_candidates = max_candidates
        self.clock = clock or (lambda: datetime.now(ZoneInfo(timezone)))

    @classmethod
    def from_settings(cls, settings, repository: CandidateSource, geocoder: Geocoder) -> "SearchResolver":
        return cls(
            repository,
            geocoder,
            pagination_mode=settings.pagination_mode,
            max_candidates=settings.max_candidates,
            timezone=settings.local_timezone,
        )

    def _geocode(self, text: str) -> Optional[Strategy]:
        reference = self.geocoder.resolve(text)
        if reference is None:
            logger.debug("Geocoding gave no coordinate for %r", text)
            return None
        logger.debug("Geocoded %r to %s", text, reference)
        return Strategy(StrategyKind.GEOCODED, reference=reference)

    def choose_strategy(self, query: SearchQuery) -> Strategy:
        if query.reference is not None:
            return Strategy(StrategyKind.EXPLICIT, reference=query.reference)

        text = query.trimmed_text
        if not text:
            return Strategy(StrategyKind.UNFILTERED)

        kind = classify_query(text)
        if kind is QueryKind.PARTIAL_POSTCODE:
            terms = postcode_terms(text, prefix=True)
            text_hits = self.repository.count(LocationFilter(min_rating=query.rating_threshold, text_terms=terms))
            logger.debug("Outward code %r matched %d locations by text", text, text_hits)
            if text_hits > 0:
                return Strategy(StrategyKind.TEXT_MATCH, text_terms=terms)
            return self._geocode(text) or Strategy(StrategyKind.NO_MATCH)

        if kind is QueryKind.FULL_POSTCODE:
            return self._geocode(text) or Strategy(StrategyKind.TEXT_MATCH, text_terms=postcode_terms(text, prefix=False))

        if len(text) >= MIN_GEOCODE_LENGTH:
            geocoded = self._geocode(text)
            if geocoded:
                return geocoded
        return Strategy(StrategyKind.TEXT_MATCH, text_terms=free_text_terms(text))

    def resolve(self, query: SearchQuery) -> SearchResult:
        query.validate()
        strategy = self.choose_strategy(query)
        logger.info("Resolving search text=%r with strategy=%s", query.search_text, strategy.kind.value)

        location_filter = LocationFilter(min_rating=query.rating_threshold, text_terms=strategy.text_terms)
        legacy = self.pagination_mode == "legacy"
        if legacy:
            page = self.repository.fetch(location_filter, offset=query.offset, limit=query.limit)
        else:
            page = self.repository.fetch(location_filter, offset=0, limit=self.max_candidates)
            if page.total > len(page.rows):
                logger.warning(
                    "%d candidates exceed max_candidates=%d; fetching all of them",
                    page.total,
                    self.max_candidates,
                )
                page = self.repository.fetch(location_filter, offset=0, limit=page.total)
        locations = list(page.rows)

        reference = strategy.reference
        if reference is not None:
            locations = [replace(loc, distance=distance_between(reference, loc)) for loc in locations]
            if strategy.applies_radius:
                before = len(locations)
                locations = [loc for loc in locations if loc.distance <= query.radius_meters]
                logger.debug("Radius filter kept %d of %d", len(locations), before)

        locations = sort_locations(locations, query.sort_key, reference is not None)

        if query.open_now:
            now = self.clock()
            before = len(locations)
            locations = [loc for loc in locations if is_open_at(loc.working_hours, now)]
            logger.debug("Open-now filter kept %d of %d", len(locations), before)

        if legacy:
            total = page.total or len(locations)
        else:
            total = len(locations)
            locations = locations[query.offset : query.offset + query.limit]

        return SearchResult(locations=locations, total=total, query=query, strategy=strategy.kind.value)
