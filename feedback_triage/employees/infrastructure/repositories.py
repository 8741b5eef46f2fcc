"""
Employees Infrastructure Repositories
======================================

SQLAlchemy implementation of the employee repository.
"""

from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import and_, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_triage.config import InteractionType, Sentiment
from feedback_triage.employees.application import IEmployeeRepository
from feedback_triage.employees.infrastructure.models import (
    BankEmployeeModel,
    EmployeeInteractionModel,
)
from feedback_triage.feedback.infrastructure.models import FeedbackModel


def _count_when(condition: Any) -> Any:
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


class SQLAlchemyEmployeeRepository(IEmployeeRepository):
    """SQLAlchemy implementation for employees and interactions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, employee_pk: str) -> Optional[BankEmployeeModel]:
        return await self._session.get(BankEmployeeModel, employee_pk)

    async def get_by_employee_id(self, employee_id: str) -> Optional[BankEmployeeModel]:
        stmt = select(BankEmployeeModel).where(BankEmployeeModel.employee_id == employee_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(self) -> List[BankEmployeeModel]:
        stmt = select(BankEmployeeModel).order_by(BankEmployeeModel.name.asc())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, data: dict) -> BankEmployeeModel:
        model = BankEmployeeModel(**data)
        self._session.add(model)
        await self._session.flush()
        return model

    async def list_interactions(self, employee_pk: Optional[str] = None) -> List[EmployeeInteractionModel]:
        stmt = select(EmployeeInteractionModel)
        if employee_pk:
            stmt = stmt.where(EmployeeInteractionModel.employee_id == employee_pk)
        stmt = stmt.order_by(
            EmployeeInteractionModel.interaction_date.desc(),
            EmployeeInteractionModel.id.desc()
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def create_interaction(self, data: dict) -> EmployeeInteractionModel:
        model = EmployeeInteractionModel(**data)
        self._session.add(model)
        await self._session.flush()
        return model

    async def stats(
        self,
        employee_pk: Optional[str] = None,
        since: Optional[datetime] = None
    ) -> List[dict]:
        """
        One row per employee, including those without interactions.

        The date bound sits in the join condition so that employees with
        no interactions in the window still appear with zero counts.
        """
        join_on = BankEmployeeModel.id == EmployeeInteractionModel.employee_id
        if since is not None:
            join_on = and_(join_on, EmployeeInteractionModel.interaction_date >= since)

        interaction_type = EmployeeInteractionModel.interaction_type
        stmt = (
            select(
                BankEmployeeModel.id,
                BankEmployeeModel.employee_id,
                BankEmployeeModel.name,
                BankEmployeeModel.department,
                BankEmployeeModel.branch_location,
                func.count(EmployeeInteractionModel.id).label("total_interactions"),
                _count_when(interaction_type == InteractionType.CONTACTED).label("contacted"),
                _count_when(interaction_type == InteractionType.RESOLVED).label("resolved"),
                _count_when(interaction_type == InteractionType.ESCALATED).label("escalated"),
                _count_when(FeedbackModel.sentiment == Sentiment.POSITIVE).label("positive_feedback"),
                _count_when(FeedbackModel.sentiment == Sentiment.NEGATIVE).label("negative_feedback"),
                func.avg(FeedbackModel.review_rating).label("average_rating"),
            )
            .select_from(BankEmployeeModel)
            .outerjoin(EmployeeInteractionModel, join_on)
            .outerjoin(FeedbackModel, FeedbackModel.id == EmployeeInteractionModel.feedback_id)
            .group_by(
                BankEmployeeModel.id,
                BankEmployeeModel.employee_id,
                BankEmployeeModel.name,
                BankEmployeeModel.department,
                BankEmployeeModel.branch_location,
            )
            .order_by(BankEmployeeModel.name.asc())
        )
        if employee_pk:
            stmt = stmt.where(BankEmployeeModel.id == employee_pk)

        result = await self._session.execute(stmt)
        rows = []
        for row in result.mappings().all():
            data = dict(row)
            for key in ("total_interactions", "contacted", "resolved", "escalated",
                        "positive_feedback", "negative_feedback"):
                data[key] = int(data[key] or 0)
            if data["average_rating"] is not None:
                data["average_rating"] = round(float(data["average_rating"]), 2)
            rows.append(data)
        return rows
