"""CLI job that replaces the stored locations with a JSON dataset."""

import argparse
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from locator.core.db import init_pool, replace_all_locations
from locator.core.repository import LocationFilter, LocationRepository
from locator.etl.transform import to_location_row

logger = logging.getLogger(__name__)


class ImportFailedError(RuntimeError):
    """Raised when a non-empty dataset left no rows in the table."""


def load_records(path: Path) -> List[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of locations")
    return data


def run_import_job(*, path: Path, batch_size: int, expected: Optional[int] = None) -> int:
    records = load_records(path)
    logger.info("Loaded %d locations from %s", len(records), path)

    init_pool()

    now = datetime.now(timezone.utc)
    rows = [to_location_row(record, identifier, now) for identifier, record in enumerate(records, start=1)]
    inserted = replace_all_locations(rows, batch_size=batch_size)
    if rows and inserted == 0:
        raise ImportFailedError(f"none of the {len(rows)} locations were inserted; the table is now empty")

    stored = LocationRepository().count(LocationFilter())
    logger.info("Import finished: inserted=%d stored=%d", inserted, stored)
    if expected is not None and stored != expected:
        logger.warning("Expected %d locations, database holds %d", expected, stored)
    return stored


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Replace stored locations with a JSON dataset")
    parser.add_argument("path", type=Path, help="JSON file holding an array of location records")
    parser.add_argument("--batch-size", dest="batch_size", type=int, default=50, help="Rows per insert batch")
    parser.add_argument("--expected", dest="expected", type=int, help="Warn when the final count differs")
    return parser


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    parser = build_parser()
    args = parser.parse_args()

    try:
        run_import_job(path=args.path, batch_size=args.batch_size, expected=args.expected)
    except ImportFailedError as exc:
        logger.error("Import failed: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
