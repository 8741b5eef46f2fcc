"""
Analytics Controllers (API Routes)
===================================

Read-only dashboard endpoints. All of them accept the feedback filters
`service`, `location`, `date_range`, `custom_date_from` and
`custom_date_to`.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_triage.infrastructure.database import get_session
from feedback_triage.analytics.application import (
    AnalyticsService,
    LocationBreakdown,
    MetricsResponse,
    RatingBucket,
    SentimentBreakdown,
    ServiceBreakdown,
    TimelinePoint,
    TopIssue,
)
from feedback_triage.analytics.infrastructure import SQLAlchemyAnalyticsRepository
from feedback_triage.employees.application import EmployeeService, EmployeeStatsResponse
from feedback_triage.employees.interfaces import get_employee_service
from feedback_triage.feedback.application import DateRangeStr
from feedback_triage.feedback.domain import FeedbackFilter

router = APIRouter(prefix="/api", tags=["Analytics"])


METRICS_RESPONSE_EXAMPLE = {
    "total": 120,
    "positive": 70,
    "negative": 42,
    "neutral": 8,
    "pending": 30,
    "in_progress": 12,
    "resolved": 70,
    "escalated": 8,
    "average_rating": 3.65,
    "rating_distribution": {"1": 10, "2": 14, "3": 18, "4": 38, "5": 40}
}


# ========== Dependencies ==========

async def get_analytics_service(session: AsyncSession = Depends(get_session)) -> AnalyticsService:
    """Get analytics service instance."""
    return AnalyticsService(SQLAlchemyAnalyticsRepository(session))


def get_analytics_filter(
    service: Optional[str] = Query(None, description="ATM, OnlineBanking, CoreBanking or 'all'"),
    location: Optional[str] = Query(None),
    date_range: Optional[DateRangeStr] = Query(None),
    custom_date_from: Optional[date] = Query(None),
    custom_date_to: Optional[date] = Query(None, description="Inclusive"),
) -> FeedbackFilter:
    """Dashboard filter query parameters."""
    return FeedbackFilter.from_params(
        service=service,
        location=location,
        date_range=date_range,
        custom_date_from=custom_date_from,
        custom_date_to=custom_date_to,
    )


# ========== Route Handlers ==========

@router.get(
    "/metrics",
    response_model=MetricsResponse,
    summary="Headline metrics",
    description="Totals per sentiment and status, the average rating and the rating distribution.",
    responses={200: {"content": {"application/json": {"example": METRICS_RESPONSE_EXAMPLE}}}}
)
async def get_metrics(
    filters: FeedbackFilter = Depends(get_analytics_filter),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return await service.metrics(filters)


@router.get("/analytics/sentiment", response_model=SentimentBreakdown, summary="Sentiment counts")
async def get_sentiment(
    filters: FeedbackFilter = Depends(get_analytics_filter),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return await service.sentiment(filters)


@router.get(
    "/analytics/services",
    response_model=List[ServiceBreakdown],
    summary="Feedback per service type",
    description="Always lists ATM, OnlineBanking and CoreBanking; the `service` filter is ignored."
)
async def get_services(
    filters: FeedbackFilter = Depends(get_analytics_filter),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return await service.by_service(filters)


@router.get(
    "/analytics/locations",
    response_model=List[LocationBreakdown],
    summary="Feedback per location",
    description="Feedback without a location is skipped; the `location` filter is ignored."
)
async def get_locations(
    filters: FeedbackFilter = Depends(get_analytics_filter),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return await service.by_location(filters)


@router.get("/analytics/ratings", response_model=List[RatingBucket], summary="Rating distribution")
async def get_ratings(
    filters: FeedbackFilter = Depends(get_analytics_filter),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return await service.rating_distribution(filters)


@router.get(
    "/analytics/timeline",
    response_model=List[TimelinePoint],
    summary="Daily sentiment timeline",
    description="One point per day with feedback, oldest first."
)
async def get_timeline(
    filters: FeedbackFilter = Depends(get_analytics_filter),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return await service.timeline(filters)


@router.get(
    "/analytics/top-issues",
    response_model=List[TopIssue],
    summary="Most reported approved issues"
)
async def get_top_issues(
    filters: FeedbackFilter = Depends(get_analytics_filter),
    limit: int = Query(8, ge=1, le=50),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return await service.top_issues(filters, limit=limit)


@router.get(
    "/analytics/employees",
    response_model=List[EmployeeStatsResponse],
    summary="Employee interaction statistics",
    description="Per employee interaction counts and the sentiment of the feedback they handled. "
                "`date_range` limits by interaction date."
)
async def get_employee_stats(
    employee_id: Optional[str] = Query(None, description="Only this employee"),
    date_range: Optional[DateRangeStr] = Query(None),
    service: EmployeeService = Depends(get_employee_service)
):
    return await service.employee_stats(employee_id, date_range)


analytics_router = router
