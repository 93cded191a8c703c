"""Read-side access to the locations table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

import psycopg2
from psycopg2 import extras

from locator.core.config import get_settings
from locator.core.db import LOCATION_COLUMNS, get_connection
from locator.models import Location

logger = logging.getLogger(__name__)

SEARCHABLE_FIELDS = {"name", "address", "city", "postal_code"}
MATCH_MODES = {"prefix", "contains"}


class RepositoryError(RuntimeError):
    """Raised when the data store rejects or fails a query."""


class TextTerm(NamedTuple):
    field: str
    value: str
    match: str = "contains"

    def pattern(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        if self.match == "prefix":
            return f"{escaped}%"
        return f"%{escaped}%"


@dataclass(frozen=True)
class LocationFilter:
    """Rating threshold plus text terms OR-ed together."""

    min_rating: Optional[float] = None
    text_terms: Tuple[TextTerm, ...] = field(default_factory=tuple)

    def to_sql(self) -> Tuple[str, Dict[str, Any]]:
        clauses: List[str] = []
        params: Dict[str, Any] = {}
        if self.min_rating is not None and self.min_rating > 0:
            clauses.append("rating >= %(min_rating)s")
            params["min_rating"] = self.min_rating
        if self.text_terms:
            alternatives = []
            for index, term in enumerate(self.text_terms):
                if term.field not in SEARCHABLE_FIELDS:
                    raise ValueError(f"{term.field!r} is not a searchable field")
                if term.match not in MATCH_MODES:
                    raise ValueError(f"unknown match mode {term.match!r}")
                key = f"term_{index}"
                alternatives.append(f"{term.field} ILIKE %({key})s")
                params[key] = term.pattern()
            clauses.append("(" + " OR ".join(alternatives) + ")")
        where = " WHERE " + " AND ".join(clauses) if clauses else ""
        return where, params


class Page(NamedTuple):
    rows: List[Location]
    total: int


class LocationRepository:
    """PostgreSQL-backed implementation of the candidate fetch contract."""

    def __init__(self, table: Optional[str] = None) -> None:
        self.table = table or get_settings().locations_table

    def _run(self, sql: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        try:
            with get_connection() as conn:
                with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                    cur.execute(sql, params)
                    return list(cur.fetchall())
        except psycopg2.Error as exc:
            message = getattr(exc, "pgerror", None) or str(exc)
            logger.error("Location query failed: %s", message)
            raise RepositoryError(message) from exc

    def count(self, location_filter: LocationFilter) -> int:
        where, params = location_filter.to_sql()
        rows = self._run(f"SELECT COUNT(*) AS total FROM {self.table}{where}", params)
        return int(rows[0]["total"]) if rows else 0

    def fetch(self, location_filter: LocationFilter, offset: int = 0, limit: Optional[int] = None) -> Page:
        """Return one page of rows ordered by id plus the pre-pagination total."""
        where, params = location_filter.to_sql()
        total = self.count(location_filter)

        sql = f"SELECT {', '.join(LOCATION_COLUMNS)} FROM {self.table}{where} ORDER BY id ASC"
        if limit is not None:
            sql += " LIMIT %(limit)s"
            params["limit"] = limit
        sql += " OFFSET %(offset)s"
        params["offset"] = offset

        rows = [Location.from_row(row) for row in self._run(sql, params)]
        logger.debug("Fetched %d of %d locations (offset=%d, limit=%s)", len(rows), total, offset, limit)
        return Page(rows=rows, total=total)

    def get_by_slug(self, slug: str) -> Optional[Location]:
        rows = self._run(
            f"SELECT {', '.join(LOCATION_COLUMNS)} FROM {self.table} WHERE slug = %(slug)s LIMIT 1",
            {"slug": slug},
        )
        return Location.from_row(rows[0]) if rows else None

    def fetch_all(self) -> List[Location]:
        return self.fetch(LocationFilter()).rows
