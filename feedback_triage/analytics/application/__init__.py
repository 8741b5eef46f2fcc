"""
Analytics Application Layer
============================

Contains:
- Services: Dashboard aggregates
- DTOs: Response models
"""

from feedback_triage.analytics.application.dto import (
    MetricsResponse,
    SentimentBreakdown,
    ServiceBreakdown,
    LocationBreakdown,
    RatingBucket,
    TimelinePoint,
    TopIssue,
)
from feedback_triage.analytics.application.services import (
    RATING_LABELS,
    AnalyticsService,
    IAnalyticsRepository,
)

__all__ = [
    "MetricsResponse",
    "SentimentBreakdown",
    "ServiceBreakdown",
    "LocationBreakdown",
    "RatingBucket",
    "TimelinePoint",
    "TopIssue",
    "RATING_LABELS",
    "AnalyticsService",
    "IAnalyticsRepository",
]
