"""UK postcode recognition used to pick a search strategy."""

import enum
import re

_OUTWARD = r"[A-Za-z]{1,2}[0-9]{1,2}"
FULL_POSTCODE_RE = re.compile(rf"^{_OUTWARD}[A-Za-z]?\s?[0-9][A-Za-z]{{2}}$|^{_OUTWARD}$")
PARTIAL_POSTCODE_RE = re.compile(rf"^{_OUTWARD}$")


class QueryKind(enum.Enum):
    FULL_POSTCODE = "full_postcode"
    PARTIAL_POSTCODE = "partial_postcode"
    FREE_TEXT = "free_text"


def classify_query(text: str) -> QueryKind:
    """Classify a search string as a full postcode, an outward code or free text.

    The full-postcode pattern also accepts the outward code on its own, so the
    partial check has to win first.
    """
    candidate = (text or "").strip()
    if PARTIAL_POSTCODE_RE.match(candidate):
        return QueryKind.PARTIAL_POSTCODE
    if FULL_POSTCODE_RE.match(candidate):
        return QueryKind.FULL_POSTCODE
    return QueryKind.FREE_TEXT
