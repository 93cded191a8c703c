"""Database helpers for the locator."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional

import psycopg2
from psycopg2 import extras, pool

from locator.core.config import get_settings

logger = logging.getLogger(__name__)

_connection_pool: Optional[pool.SimpleConnectionPool] = None

LOCATION_COLUMNS = (
    "id",
    "name",
    "address",
    "street",
    "city",
    "postal_code",
    "country",
    "phone",
    "website",
    "latitude",
    "longitude",
    "rating",
    "reviews_count",
    "reviews_link",
    "working_hours",
    "photo",
    "photos_count",
    "business_status",
    "about",
    "slug",
    "created_at",
    "updated_at",
)


def init_pool(minconn: int = 1, maxconn: int = 5) -> pool.SimpleConnectionPool:
    """Initialise and return the shared connection pool."""
    global _connection_pool
    if _connection_pool is None:
        settings = get_settings()
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is required for database connections")
        _connection_pool = pool.SimpleConnectionPool(
            minconn,
            maxconn,
            dsn=settings.database_url,
            connect_timeout=10,
            options=f"-c statement_timeout={settings.db_statement_timeout_ms}",
        )
        logger.info("Database connection pool initialised")
    return _connection_pool


@contextmanager
def get_connection():
    """Context manager yielding a pooled connection."""
    pg_pool = init_pool()
    conn = pg_pool.getconn()
    try:
        yield conn
    finally:
        pg_pool.putconn(conn)


def _prepare_params(row: Dict[str, Any]) -> Dict[str, Any]:
    params = {column: row.get(column) for column in LOCATION_COLUMNS}
    params["about"] = extras.Json(row.get("about")) if row.get("about") is not None else None
    return params


def _insert_sql(table: str) -> str:
    columns = ", ".join(LOCATION_COLUMNS)
    placeholders = ", ".join(f"%({column})s" for column in LOCATION_COLUMNS)
    return f"INSERT INTO {table} ({columns}) VALUES ({placeholders})"


def replace_all_locations(rows: Iterable[Dict[str, Any]], batch_size: int = 50) -> int:
    """Delete every stored location, then insert ``rows`` in batches.

    Each batch commits on its own; a failing batch is rolled back, logged and
    skipped. Returns the number of rows inserted.
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")

    table = get_settings().locations_table
    params = [_prepare_params(row) for row in rows]
    for item in params:
        if not item["slug"] or item["id"] is None:
            raise ValueError("id and slug are required for every location")

    batches: List[List[Dict[str, Any]]] = [params[i : i + batch_size] for i in range(0, len(params), batch_size)]
    inserted = 0

    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(f"DELETE FROM {table}")
        conn.commit()
        logger.info("Cleared existing rows from %s", table)

        for index, batch in enumerate(batches, start=1):
            try:
                with conn.cursor() as cur:
                    extras.execute_batch(cur, _insert_sql(table), batch)
                conn.commit()
            except psycopg2.Error as exc:
                conn.rollback()
                logger.error("Failed to insert batch %d/%d: %s", index, len(batches), exc)
                continue
            inserted += len(batch)
            logger.info("Batch %d/%d inserted (%d/%d locations)", index, len(batches), inserted, len(params))

    return inserted
