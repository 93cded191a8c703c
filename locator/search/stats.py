"""Directory-wide summary figures."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable


@dataclass(frozen=True)
class DirectoryStats:
    total_locations: int
    average_rating: float
    total_reviews: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def summarize(locations: Iterable) -> DirectoryStats:
    """Average rating only counts locations that have a rating at all."""
    total = 0
    reviews = 0
    ratings = []
    for location in locations:
        total += 1
        reviews += location.reviews_count or 0
        if location.rating is not None:
            ratings.append(location.rating)

    average = round(sum(ratings) / len(ratings), 1) if ratings else 0.0
    return DirectoryStats(total_locations=total, average_rating=average, total_reviews=reviews)
