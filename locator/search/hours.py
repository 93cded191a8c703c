"""Working-hours parsing and the "open now" check.

Schedules are stored as ``Day,Open,Close`` entries joined with ``|``, e.g.
``"Monday,7am,11pm|Tuesday,Open 24 hours,"``. Times only ever carry an hour
and an am/pm suffix.
"""

import logging
import re
from datetime import datetime
from typing import Dict, List, NamedTuple, Optional

logger = logging.getLogger(__name__)

OPEN_24_HOURS = "Open 24 hours"
DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
_TIME_RE = re.compile(r"(\d{1,2})(am|pm)", re.IGNORECASE)


class ScheduleEntry(NamedTuple):
    day: str
    opens: str
    closes: str


def parse_schedule(working_hours: Optional[str]) -> List[ScheduleEntry]:
    entries: List[ScheduleEntry] = []
    if not working_hours:
        return entries
    for chunk in working_hours.split("|"):
        parts = [part.strip() for part in chunk.split(",")]
        if len(parts) < 3:
            continue
        entries.append(ScheduleEntry(parts[0], parts[1], parts[2]))
    return entries


def parse_time(value: Optional[str]) -> Optional[int]:
    """Convert ``"7am"``/``"11pm"`` to minutes since midnight."""
    if not value:
        return None
    match = _TIME_RE.search(value)
    if not match:
        return None
    hours = int(match.group(1))
    suffix = match.group(2).lower()
    if suffix == "pm" and hours != 12:
        hours += 12
    elif suffix == "am" and hours == 12:
        hours = 0
    return hours * 60


def day_name(when: datetime) -> str:
    # weekday() is Monday-first, the schedule is Sunday-first.
    return DAY_NAMES[(when.weekday() + 1) % 7]


def is_open_at(working_hours: Optional[str], when: datetime) -> bool:
    """Return True when the schedule says the location is open at ``when``.

    Anything missing or unparseable counts as closed.
    """
    today = day_name(when)
    current = when.hour * 60 + when.minute

    for entry in parse_schedule(working_hours):
        if entry.day != today:
            continue
        if entry.opens == OPEN_24_HOURS:
            return True

        opens = parse_time(entry.opens)
        closes = parse_time(entry.closes)
        if opens is None or closes is None:
            logger.debug("Skipping unparseable hours entry: %s", entry)
            continue
        if closes < opens:
            return current >= opens or current <= closes
        return opens <= current <= closes

    return False


def format_schedule(working_hours: Optional[str]) -> Dict[str, str]:
    hours: Dict[str, str] = {}
    for entry in parse_schedule(working_hours):
        if entry.opens == OPEN_24_HOURS:
            hours[entry.day] = OPEN_24_HOURS
        else:
            hours[entry.day] = f"{entry.opens} - {entry.closes}"
    return hours
