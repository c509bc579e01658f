"""
Derived Engagement Metrics

Pure formulas shared by the analytics engine and the author analytics
endpoints. Rounding is half-up, matching what the dashboards display.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

SECONDS_PER_DAY = 24 * 60 * 60


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to ``digits`` decimals, halves away from zero."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def engagement_rate(views: int, likes: int, comments: int) -> float:
    """
    (likes + comments) / views * 100, rounded to 2 decimals.

    Returns 0 when there are no views.
    """
    if views <= 0:
        return 0.0
    return round_half_up((likes + comments) / views * 100, 2)


def trending_score(
    likes: int,
    comments: int,
    published_at: Optional[datetime],
    now: datetime,
) -> float:
    """
    (likes + 2 * comments) / max(days since published, 1).

    Days are fractional. A blog without a publication timestamp counts as
    one day old.
    """
    if published_at is None:
        days_since_published = 1.0
    else:
        days_since_published = (now - published_at).total_seconds() / SECONDS_PER_DAY
    return (likes + comments * 2) / max(days_since_published, 1.0)


def growth_percentage(current: int, prior: int) -> float:
    """
    Relative change from the prior window to the current one, in percent.

    A prior window with no events reports 100 when the current one has any,
    otherwise 0. Rounded to 1 decimal.
    """
    if prior > 0:
        return round_half_up((current - prior) / prior * 100, 1)
    return 100.0 if current > 0 else 0.0


def average_views_per_blog(total_views: int, total_blogs: int) -> int:
    """Views per authored blog, rounded to a whole number."""
    if total_blogs <= 0:
        return 0
    return int(round_half_up(total_views / total_blogs))
