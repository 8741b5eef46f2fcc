"""
Analytics Application Services
===============================

Aggregates for the dashboard. Every aggregate takes the same
FeedbackFilter as the feedback list.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from feedback_triage.analytics.application.dto import (
    LocationBreakdown,
    MetricsResponse,
    RatingBucket,
    SentimentBreakdown,
    ServiceBreakdown,
    TimelinePoint,
    TopIssue,
)
from feedback_triage.config import SERVICE_TYPES
from feedback_triage.feedback.domain import FeedbackFilter

RATING_LABELS = {1: "Very Poor", 2: "Poor", 3: "Average", 4: "Good", 5: "Excellent"}


class IAnalyticsRepository(ABC):
    """Interface for aggregate queries."""

    @abstractmethod
    async def sentiment_counts(self, filters: FeedbackFilter) -> dict:
        """Counts keyed by sentiment."""

    @abstractmethod
    async def status_counts(self, filters: FeedbackFilter) -> dict:
        """Counts keyed by feedback status."""

    @abstractmethod
    async def rating_counts(self, filters: FeedbackFilter) -> dict:
        """Counts keyed by rating."""

    @abstractmethod
    async def average_rating(self, filters: FeedbackFilter) -> Optional[float]:
        pass

    @abstractmethod
    async def by_service(self, filters: FeedbackFilter) -> List[dict]:
        pass

    @abstractmethod
    async def by_location(self, filters: FeedbackFilter) -> List[dict]:
        pass

    @abstractmethod
    async def timeline(self, filters: FeedbackFilter) -> List[dict]:
        pass

    @abstractmethod
    async def top_issues(self, category: Optional[str], limit: int) -> List[dict]:
        pass


class AnalyticsService:
    """Service computing dashboard aggregates."""

    def __init__(self, repository: IAnalyticsRepository):
        self._repo = repository

    async def metrics(self, filters: FeedbackFilter) -> MetricsResponse:
        sentiments = await self._repo.sentiment_counts(filters)
        statuses = await self._repo.status_counts(filters)
        ratings = await self._repo.rating_counts(filters)
        average = await self._repo.average_rating(filters)

        return MetricsResponse(
            total=sum(sentiments.values()),
            positive=sentiments.get("positive", 0),
            negative=sentiments.get("negative", 0),
            neutral=sentiments.get("neutral", 0),
            pending=statuses.get("new", 0),
            in_progress=statuses.get("in_progress", 0),
            resolved=statuses.get("resolved", 0),
            escalated=statuses.get("escalated", 0),
            average_rating=round(average, 2) if average is not None else 0.0,
            rating_distribution={str(r): ratings.get(r, 0) for r in range(1, 6)}
        )

    async def sentiment(self, filters: FeedbackFilter) -> SentimentBreakdown:
        return SentimentBreakdown(**await self._repo.sentiment_counts(filters))

    async def by_service(self, filters: FeedbackFilter) -> List[ServiceBreakdown]:
        """Always lists every service type; the service filter is ignored."""
        rows = {row["service_type"]: row for row in await self._repo.by_service(filters.without("service"))}
        return [
            ServiceBreakdown(**rows.get(service, {"service_type": service}))
            for service in SERVICE_TYPES
        ]

    async def by_location(self, filters: FeedbackFilter) -> List[LocationBreakdown]:
        """Locations seen in the feedback; the location filter is ignored."""
        rows = await self._repo.by_location(filters.without("location"))
        return [LocationBreakdown(**row) for row in rows]

    async def rating_distribution(self, filters: FeedbackFilter) -> List[RatingBucket]:
        counts = await self._repo.rating_counts(filters)
        return [
            RatingBucket(rating=rating, label=label, count=counts.get(rating, 0))
            for rating, label in RATING_LABELS.items()
        ]

    async def timeline(self, filters: FeedbackFilter) -> List[TimelinePoint]:
        return [TimelinePoint(**row) for row in await self._repo.timeline(filters)]

    async def top_issues(self, filters: FeedbackFilter, limit: int = 8) -> List[TopIssue]:
        """Approved issues with the most feedback, within the service filter."""
        rows = await self._repo.top_issues(filters.service, limit)
        return [TopIssue(**row) for row in rows]
