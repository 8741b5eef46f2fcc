"""
Feedback Infrastructure Repositories
=====================================

SQLAlchemy implementation of the feedback repository.
"""

from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_triage.config import Sentiment
from feedback_triage.core import utc_now
from feedback_triage.feedback.application import IFeedbackRepository
from feedback_triage.feedback.domain import FeedbackFilter
from feedback_triage.feedback.infrastructure.models import FeedbackModel


def build_feedback_conditions(
    filters: FeedbackFilter,
    now: Optional[datetime] = None
) -> List[Any]:
    """
    Translate a FeedbackFilter into SQL conditions on the feedback table.

    Shared with the analytics queries so that every aggregate honours the
    same filters as the feedback list.
    """
    conditions = []

    if filters.service:
        conditions.append(FeedbackModel.service_type == filters.service)

    if filters.location:
        conditions.append(FeedbackModel.issue_location == filters.location)

    if filters.status:
        conditions.append(FeedbackModel.status == filters.status)

    if filters.search:
        pattern = f"%{filters.search}%"
        conditions.append(or_(
            FeedbackModel.customer_name.ilike(pattern),
            FeedbackModel.review_text.ilike(pattern)
        ))

    created_after = filters.created_after(now or utc_now())
    if created_after is not None:
        conditions.append(FeedbackModel.created_at >= created_after)

    created_before = filters.created_before()
    if created_before is not None:
        conditions.append(FeedbackModel.created_at < created_before)

    return conditions


class SQLAlchemyFeedbackRepository(IFeedbackRepository):
    """
    SQLAlchemy implementation of the feedback repository.

    Handles persistence of feedback records using async SQLAlchemy.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, feedback_id: str) -> Optional[FeedbackModel]:
        """Get feedback by id."""
        return await self._session.get(FeedbackModel, feedback_id)

    async def create(self, data: dict) -> FeedbackModel:
        """Insert one feedback record."""
        model = FeedbackModel(**data)
        self._session.add(model)
        await self._session.flush()
        return model

    async def create_many(self, records: List[dict]) -> int:
        """Insert several feedback records in the current transaction."""
        models = [FeedbackModel(**data) for data in records]
        self._session.add_all(models)
        await self._session.flush()
        return len(models)

    async def update(self, feedback: FeedbackModel, changes: dict) -> FeedbackModel:
        """Apply field changes to a feedback record."""
        for field, value in changes.items():
            setattr(feedback, field, value)
        await self._session.flush()
        return feedback

    async def delete(self, feedback: FeedbackModel) -> None:
        """
        Delete a feedback record.

        Issue links and interactions are removed explicitly, SQLite does not
        enforce ON DELETE by default.
        """
        from feedback_triage.issues.infrastructure.models import FeedbackIssueModel, PendingIssueModel
        from feedback_triage.employees.infrastructure.models import EmployeeInteractionModel

        await self._session.execute(
            delete(FeedbackIssueModel).where(FeedbackIssueModel.feedback_id == feedback.id)
        )
        await self._session.execute(
            delete(EmployeeInteractionModel).where(EmployeeInteractionModel.feedback_id == feedback.id)
        )
        await self._session.execute(
            update(PendingIssueModel)
            .where(PendingIssueModel.detected_from_feedback_id == feedback.id)
            .values(detected_from_feedback_id=None)
        )
        await self._session.delete(feedback)
        await self._session.flush()

    async def list(
        self,
        filters: FeedbackFilter,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[FeedbackModel]:
        """List feedback with filters, newest first."""
        stmt = select(FeedbackModel)

        conditions = build_feedback_conditions(filters)
        if conditions:
            stmt = stmt.where(and_(*conditions))

        stmt = stmt.order_by(FeedbackModel.created_at.desc(), FeedbackModel.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)

        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_pending_detection(self, limit: int) -> List[FeedbackModel]:
        """Oldest negative feedback not yet analysed for issues."""
        stmt = (
            select(FeedbackModel)
            .where(
                FeedbackModel.sentiment == Sentiment.NEGATIVE,
                FeedbackModel.detected_issues.is_(None)
            )
            .order_by(FeedbackModel.created_at.asc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def mark_detected(self, feedback: FeedbackModel, titles: List[str]) -> None:
        """Record the issue titles detected for a feedback record."""
        feedback.detected_issues = list(titles)
        await self._session.flush()
