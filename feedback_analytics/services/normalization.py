"""
Rating normalization, lecture/lab classification and snapshot validation.

Every aggregation view starts from ``rate_snapshots``: snapshots whose
response does not parse to a rating never reach a view.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, NamedTuple, Optional

from config import LAB, LAB_CATEGORY_KEYWORDS, LECTURE, RATING_PRECISION
from feedback_analytics.models.response import classify_response
from feedback_analytics.models.snapshot import FeedbackSnapshot

logger = logging.getLogger(__name__)


class RatedSnapshot(NamedTuple):
    snapshot: FeedbackSnapshot
    rating: float
    lecture_type: str


def parse_response_value(response_value) -> Optional[float]:
    """
    Convert a raw response value into a rating.

    Numbers pass through, strings are parsed leniently and ``{"score": n}``
    objects yield their score. Anything else is ``None``. A parsed zero
    stays ``0.0``; callers decide whether zero takes part in an average.
    """
    return classify_response(response_value).rating()


def determine_lecture_type(snapshot: FeedbackSnapshot) -> str:
    """Return LAB for lab categories or batch-specific questions, else LECTURE."""
    category_name = (snapshot.question_category_name or '').lower()
    batch = (snapshot.question_batch or '').lower()

    if any(keyword in category_name for keyword in LAB_CATEGORY_KEYWORDS):
        return LAB
    if batch not in ('none', ''):
        return LAB
    return LECTURE


def rate_snapshots(snapshots: Iterable[FeedbackSnapshot]) -> List[RatedSnapshot]:
    """Keep only snapshots with a usable rating, paired with rating and lecture type."""
    if not isinstance(snapshots, (list, tuple)):
        raise TypeError(f"Expected a list of snapshots, got {type(snapshots).__name__}")

    rated = []
    for snapshot in snapshots:
        rating = snapshot.rating
        if rating is None:
            continue
        rated.append(RatedSnapshot(snapshot, rating, determine_lecture_type(snapshot)))

    logger.debug(f"Rated {len(rated)} of {len(snapshots)} snapshots")
    return rated


_RATING_QUANTUM = Decimal(1).scaleb(-RATING_PRECISION)


def round_rating(value: float) -> float:
    """Round half up on the exact binary value, so 8.125 -> 8.13 and 1.005 -> 1.0."""
    return float(Decimal(value).quantize(_RATING_QUANTUM, rounding=ROUND_HALF_UP))


def average(values: List[float]) -> Optional[float]:
    """Rounded mean, or None for an empty list."""
    if not values:
        return None
    return round_rating(sum(values) / len(values))


def positive_only(values: List[float]) -> List[float]:
    """Drop zero and negative ratings."""
    return [value for value in values if value > 0]
