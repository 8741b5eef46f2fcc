"""
Analytics Infrastructure Repositories
======================================

Aggregate queries over the feedback and issues tables. Counting happens
in SQL; only the grouped rows are loaded.
"""

from typing import Any, List, Optional

from sqlalchemy import and_, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_triage.analytics.application import IAnalyticsRepository
from feedback_triage.config import IssueStatus, Sentiment
from feedback_triage.feedback.domain import FeedbackFilter
from feedback_triage.feedback.infrastructure import FeedbackModel, build_feedback_conditions
from feedback_triage.issues.infrastructure import IssueModel


def _count_when(condition: Any) -> Any:
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def _where(stmt: Any, filters: FeedbackFilter) -> Any:
    conditions = build_feedback_conditions(filters)
    return stmt.where(and_(*conditions)) if conditions else stmt


class SQLAlchemyAnalyticsRepository(IAnalyticsRepository):
    """SQLAlchemy implementation of the dashboard aggregates."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _grouped_counts(self, column: Any, filters: FeedbackFilter) -> dict:
        stmt = _where(select(column, func.count(FeedbackModel.id)), filters).group_by(column)
        result = await self._session.execute(stmt)
        return {key: int(count) for key, count in result.all()}

    async def sentiment_counts(self, filters: FeedbackFilter) -> dict:
        counts = {Sentiment.POSITIVE: 0, Sentiment.NEGATIVE: 0, Sentiment.NEUTRAL: 0}
        counts.update(await self._grouped_counts(FeedbackModel.sentiment, filters))
        return counts

    async def status_counts(self, filters: FeedbackFilter) -> dict:
        return await self._grouped_counts(FeedbackModel.status, filters)

    async def rating_counts(self, filters: FeedbackFilter) -> dict:
        return await self._grouped_counts(FeedbackModel.review_rating, filters)

    async def average_rating(self, filters: FeedbackFilter) -> Optional[float]:
        stmt = _where(select(func.avg(FeedbackModel.review_rating)), filters)
        value = (await self._session.execute(stmt)).scalar()
        return float(value) if value is not None else None

    async def by_service(self, filters: FeedbackFilter) -> List[dict]:
        stmt = _where(
            select(
                FeedbackModel.service_type,
                _count_when(FeedbackModel.sentiment == Sentiment.POSITIVE).label("positive"),
                _count_when(FeedbackModel.sentiment == Sentiment.NEGATIVE).label("negative"),
                func.count(FeedbackModel.id).label("total"),
            ),
            filters
        ).group_by(FeedbackModel.service_type)
        result = await self._session.execute(stmt)
        return [
            {
                "service_type": row.service_type,
                "positive": int(row.positive),
                "negative": int(row.negative),
                "total": int(row.total),
            }
            for row in result.all()
        ]

    async def by_location(self, filters: FeedbackFilter) -> List[dict]:
        stmt = (
            _where(
                select(
                    FeedbackModel.issue_location,
                    _count_when(FeedbackModel.sentiment == Sentiment.POSITIVE).label("positive"),
                    _count_when(FeedbackModel.sentiment == Sentiment.NEGATIVE).label("negative"),
                    func.count(FeedbackModel.id).label("total"),
                    func.avg(FeedbackModel.review_rating).label("average_rating"),
                ),
                filters
            )
            .where(FeedbackModel.issue_location.is_not(None))
            .group_by(FeedbackModel.issue_location)
            .order_by(func.count(FeedbackModel.id).desc(), FeedbackModel.issue_location.asc())
        )
        result = await self._session.execute(stmt)
        return [
            {
                "location": row.issue_location,
                "positive": int(row.positive),
                "negative": int(row.negative),
                "total": int(row.total),
                "average_rating": round(float(row.average_rating or 0), 2),
            }
            for row in result.all()
        ]

    async def timeline(self, filters: FeedbackFilter) -> List[dict]:
        day = func.date(FeedbackModel.created_at)
        stmt = (
            _where(
                select(
                    day.label("day"),
                    _count_when(FeedbackModel.sentiment == Sentiment.POSITIVE).label("positive"),
                    _count_when(FeedbackModel.sentiment == Sentiment.NEGATIVE).label("negative"),
                    _count_when(FeedbackModel.sentiment == Sentiment.NEUTRAL).label("neutral"),
                    func.avg(FeedbackModel.review_rating).label("average_rating"),
                ),
                filters
            )
            .group_by(day)
            .order_by(day.asc())
        )
        result = await self._session.execute(stmt)
        return [
            {
                "date": row.day,
                "positive": int(row.positive),
                "negative": int(row.negative),
                "neutral": int(row.neutral),
                "average_rating": (
                    round(float(row.average_rating), 2) if row.average_rating is not None else None
                ),
            }
            for row in result.all()
        ]

    async def top_issues(self, category: Optional[str], limit: int) -> List[dict]:
        stmt = select(IssueModel).where(
            IssueModel.status == IssueStatus.APPROVED,
            IssueModel.feedback_count > 0
        )
        if category:
            stmt = stmt.where(IssueModel.category == category)
        stmt = stmt.order_by(IssueModel.feedback_count.desc(), IssueModel.title.asc()).limit(limit)
        result = await self._session.execute(stmt)
        return [
            {
                "id": issue.id,
                "title": issue.title,
                "category": issue.category,
                "feedback_count": issue.feedback_count,
            }
            for issue in result.scalars().all()
        ]
