"""
Issues Infrastructure Repositories
===================================

SQLAlchemy implementations of the issue repositories.

Duplicate matching compares normalized titles in Python over the rows of
one category; issue tables stay small, so this avoids storing a second
normalized column.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_triage.config import IssueStatus
from feedback_triage.issues.application import (
    IIssueRepository,
    IPendingIssueRepository,
    IRejectedIssueRepository,
)
from feedback_triage.issues.domain import normalize_title
from feedback_triage.issues.infrastructure.models import (
    FeedbackIssueModel,
    IssueModel,
    PendingIssueModel,
    PendingResolutionModel,
    RejectedIssueModel,
)


def _first_with_title(models: List[Any], title: str, attr: str = "title") -> Optional[Any]:
    wanted = normalize_title(title)
    for model in models:
        if normalize_title(getattr(model, attr)) == wanted:
            return model
    return None


async def _apply(session: AsyncSession, model: Any, changes: dict) -> Any:
    for field, value in changes.items():
        setattr(model, field, value)
    await session.flush()
    return model


class SQLAlchemyIssueRepository(IIssueRepository):
    """SQLAlchemy implementation for issues and feedback links."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, issue_id: str) -> Optional[IssueModel]:
        return await self._session.get(IssueModel, issue_id)

    async def list(self, status: Optional[str] = None) -> List[IssueModel]:
        stmt = select(IssueModel)
        if status:
            stmt = stmt.where(IssueModel.status == status)
        stmt = stmt.order_by(IssueModel.created_at.desc())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, data: dict) -> IssueModel:
        model = IssueModel(**data)
        self._session.add(model)
        await self._session.flush()
        return model

    async def update(self, issue: IssueModel, changes: dict) -> IssueModel:
        return await _apply(self._session, issue, changes)

    async def delete(self, issue: IssueModel) -> None:
        await self._session.execute(
            delete(FeedbackIssueModel).where(FeedbackIssueModel.issue_id == issue.id)
        )
        await self._session.delete(issue)
        await self._session.flush()

    async def find_approved_by_title(self, title: str, category: str) -> Optional[IssueModel]:
        stmt = (
            select(IssueModel)
            .where(IssueModel.status == IssueStatus.APPROVED, IssueModel.category == category)
            .order_by(IssueModel.created_at.asc())
        )
        result = await self._session.execute(stmt)
        return _first_with_title(list(result.scalars().all()), title)

    async def link_feedback(self, feedback_id: str, issue_id: str) -> bool:
        """Link feedback to an issue; a second call for the same pair is a no-op."""
        stmt = select(FeedbackIssueModel.id).where(
            FeedbackIssueModel.feedback_id == feedback_id,
            FeedbackIssueModel.issue_id == issue_id
        )
        result = await self._session.execute(stmt)
        if result.scalar_one_or_none() is not None:
            return False

        self._session.add(FeedbackIssueModel(feedback_id=feedback_id, issue_id=issue_id))
        await self._session.flush()
        return True


class SQLAlchemyPendingIssueRepository(IPendingIssueRepository):
    """SQLAlchemy implementation for pending issues and their resolutions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, pending_id: str) -> Optional[PendingIssueModel]:
        return await self._session.get(PendingIssueModel, pending_id)

    async def list(self) -> List[PendingIssueModel]:
        stmt = select(PendingIssueModel).order_by(PendingIssueModel.created_at.desc())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, data: dict) -> PendingIssueModel:
        model = PendingIssueModel(**data)
        self._session.add(model)
        await self._session.flush()
        return model

    async def update(self, pending: PendingIssueModel, changes: dict) -> PendingIssueModel:
        return await _apply(self._session, pending, changes)

    async def delete(self, pending: PendingIssueModel) -> None:
        await self._session.execute(
            delete(PendingResolutionModel).where(PendingResolutionModel.pending_issue_id == pending.id)
        )
        await self._session.delete(pending)
        await self._session.flush()

    async def find_by_title(self, title: str, category: str) -> Optional[PendingIssueModel]:
        stmt = (
            select(PendingIssueModel)
            .where(PendingIssueModel.category == category)
            .order_by(PendingIssueModel.created_at.asc())
        )
        result = await self._session.execute(stmt)
        return _first_with_title(list(result.scalars().all()), title)

    async def list_resolutions(self, pending_ids: List[str]) -> Dict[str, List[PendingResolutionModel]]:
        if not pending_ids:
            return {}
        stmt = (
            select(PendingResolutionModel)
            .where(PendingResolutionModel.pending_issue_id.in_(pending_ids))
            .order_by(PendingResolutionModel.created_at.asc())
        )
        result = await self._session.execute(stmt)
        grouped: Dict[str, List[PendingResolutionModel]] = {}
        for resolution in result.scalars().all():
            grouped.setdefault(resolution.pending_issue_id, []).append(resolution)
        return grouped

    async def add_resolution(
        self,
        pending_id: str,
        resolution_text: str,
        confidence_score: Optional[float]
    ) -> PendingResolutionModel:
        model = PendingResolutionModel(
            pending_issue_id=pending_id,
            resolution_text=resolution_text,
            confidence_score=confidence_score
        )
        self._session.add(model)
        await self._session.flush()
        return model

    async def get_resolution(self, resolution_id: str) -> Optional[PendingResolutionModel]:
        return await self._session.get(PendingResolutionModel, resolution_id)

    async def update_resolution(
        self,
        resolution: PendingResolutionModel,
        changes: dict
    ) -> PendingResolutionModel:
        return await _apply(self._session, resolution, changes)

    async def feedback_summaries(self, feedback_ids: List[str]) -> Dict[str, Any]:
        from feedback_triage.feedback.infrastructure.models import FeedbackModel

        if not feedback_ids:
            return {}
        stmt = select(FeedbackModel).where(FeedbackModel.id.in_(set(feedback_ids)))
        result = await self._session.execute(stmt)
        return {feedback.id: feedback for feedback in result.scalars().all()}


class SQLAlchemyRejectedIssueRepository(IRejectedIssueRepository):
    """SQLAlchemy implementation for the rejected issue archive."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, rejected_id: str) -> Optional[RejectedIssueModel]:
        return await self._session.get(RejectedIssueModel, rejected_id)

    async def list(self) -> List[RejectedIssueModel]:
        stmt = select(RejectedIssueModel).order_by(RejectedIssueModel.rejected_at.desc())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, data: dict) -> RejectedIssueModel:
        model = RejectedIssueModel(**data)
        self._session.add(model)
        await self._session.flush()
        return model

    async def delete(self, rejected: RejectedIssueModel) -> None:
        await self._session.delete(rejected)
        await self._session.flush()

    async def find_by_title(self, title: str, category: str) -> Optional[RejectedIssueModel]:
        stmt = select(RejectedIssueModel).where(RejectedIssueModel.category == category)
        result = await self._session.execute(stmt)
        return _first_with_title(list(result.scalars().all()), title, attr="original_title")
