"""
Feedback Domain Rules
=====================

Pure business rules for customer feedback records: sentiment derivation,
list filters and relative date windows.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from feedback_triage.config import (
    DATE_RANGE_DAYS,
    DateRange,
    Sentiment,
)

ALL = "all"


def derive_sentiment(rating: Optional[int]) -> str:
    """
    Derive sentiment from a 1..5 star rating.

    4 and 5 are positive, 1 to 3 negative. Anything else (missing or out
    of range) is neutral.
    """
    if rating is None:
        return Sentiment.NEUTRAL
    if 4 <= rating <= 5:
        return Sentiment.POSITIVE
    if 1 <= rating <= 3:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def sentiment_flags(sentiment: str) -> Tuple[bool, bool]:
    """Return ``(positive_flag, negative_flag)`` for a sentiment."""
    return sentiment == Sentiment.POSITIVE, sentiment == Sentiment.NEGATIVE


def is_negative(rating: Optional[int], sentiment: Optional[str]) -> bool:
    """Feedback is analysed for issues only when it is negative."""
    if rating is not None and rating >= 4:
        return False
    return sentiment == Sentiment.NEGATIVE


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value or value.lower() == ALL:
        return None
    return value


@dataclass(frozen=True)
class FeedbackFilter:
    """
    Filters shared by feedback listing and analytics.

    ``None`` means "no filter". The dashboard sends ``all`` for an unset
    select box; ``from_params`` normalizes that away.
    """
    service: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = None
    search: Optional[str] = None
    date_range: Optional[str] = None
    custom_date_from: Optional[date] = None
    custom_date_to: Optional[date] = None

    @classmethod
    def from_params(
        cls,
        service: Optional[str] = None,
        location: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        date_range: Optional[str] = None,
        custom_date_from: Optional[date] = None,
        custom_date_to: Optional[date] = None,
    ) -> "FeedbackFilter":
        search = search.strip() if search else None
        return cls(
            service=_clean(service),
            location=_clean(location),
            status=_clean(status),
            search=search or None,
            date_range=_clean(date_range),
            custom_date_from=custom_date_from,
            custom_date_to=custom_date_to,
        )

    def without(self, *fields: str) -> "FeedbackFilter":
        """Copy of this filter with the named fields cleared."""
        values = {name: getattr(self, name) for name in self.__dataclass_fields__}
        for name in fields:
            values[name] = None
        return FeedbackFilter(**values)

    def created_after(self, now: datetime) -> Optional[datetime]:
        """Lower bound on ``created_at`` implied by the date filters."""
        bounds = []
        if self.date_range and self.date_range != DateRange.ALL:
            days = DATE_RANGE_DAYS.get(self.date_range)
            if days is not None:
                bounds.append(now - timedelta(days=days))
        if self.custom_date_from:
            bounds.append(datetime.combine(self.custom_date_from, time.min))
        return max(bounds) if bounds else None

    def created_before(self) -> Optional[datetime]:
        """Exclusive upper bound; ``custom_date_to`` includes the whole day."""
        if not self.custom_date_to:
            return None
        return datetime.combine(self.custom_date_to + timedelta(days=1), time.min)
