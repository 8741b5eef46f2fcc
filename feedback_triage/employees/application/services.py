"""
Employees Application Services
===============================

Staff registry, interaction log and per employee statistics.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Optional

from feedback_triage.core import (
    DuplicateResourceException,
    ResourceNotFoundException,
    utc_now,
    to_naive_utc,
)
from feedback_triage.employees.application.dto import (
    EmployeeCreateRequest,
    EmployeeStatsResponse,
    InteractionCreateRequest,
)
from feedback_triage.feedback.application import IFeedbackRepository
from feedback_triage.feedback.domain import FeedbackFilter
from feedback_triage.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


# ========== Repository Interfaces ==========

class IEmployeeRepository(ABC):
    """Interface for employee and interaction data access."""

    @abstractmethod
    async def get_by_id(self, employee_pk: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def get_by_employee_id(self, employee_id: str) -> Optional[Any]:
        """Look up by staff number."""

    @abstractmethod
    async def list(self) -> List[Any]:
        pass

    @abstractmethod
    async def create(self, data: dict) -> Any:
        pass

    @abstractmethod
    async def list_interactions(self, employee_pk: Optional[str] = None) -> List[Any]:
        """Interactions, newest first."""

    @abstractmethod
    async def create_interaction(self, data: dict) -> Any:
        pass

    @abstractmethod
    async def stats(
        self,
        employee_pk: Optional[str] = None,
        since: Optional[datetime] = None
    ) -> List[dict]:
        """Aggregate interactions per employee."""


# ========== Application Services ==========

class EmployeeService:
    """Service for bank employees and their feedback interactions."""

    def __init__(self, repository: IEmployeeRepository, feedback_repository: IFeedbackRepository):
        self._repo = repository
        self._feedback_repo = feedback_repository

    async def list_employees(self) -> List[Any]:
        return await self._repo.list()

    async def get_employee(self, employee_pk: str) -> Any:
        employee = await self._repo.get_by_id(employee_pk)
        if employee is None:
            raise ResourceNotFoundException("Employee", employee_pk)
        return employee

    async def create_employee(self, request: EmployeeCreateRequest) -> Any:
        """
        Register an employee.

        Raises:
            DuplicateResourceException: If the staff number is already registered
        """
        if await self._repo.get_by_employee_id(request.employee_id) is not None:
            raise DuplicateResourceException("Employee", "employee_id", request.employee_id)
        employee = await self._repo.create(request.model_dump())
        logger.info("Employee created", extra={"employee_pk": employee.id})
        return employee

    async def list_interactions(self, employee_pk: Optional[str] = None) -> List[Any]:
        return await self._repo.list_interactions(employee_pk)

    async def create_interaction(self, request: InteractionCreateRequest) -> Any:
        await self.get_employee(request.employee_id)
        if await self._feedback_repo.get_by_id(request.feedback_id) is None:
            raise ResourceNotFoundException("Feedback", request.feedback_id)

        data = request.model_dump(exclude_none=True)
        data["interaction_date"] = (
            to_naive_utc(request.interaction_date) if request.interaction_date else utc_now()
        )
        interaction = await self._repo.create_interaction(data)

        logger.info(
            "Employee interaction recorded",
            extra={
                "employee_pk": request.employee_id,
                "feedback_id": request.feedback_id,
                "interaction_type": request.interaction_type
            }
        )
        return interaction

    async def employee_stats(
        self,
        employee_pk: Optional[str] = None,
        date_range: Optional[str] = None
    ) -> List[EmployeeStatsResponse]:
        """Per employee totals; ``date_range`` limits by interaction date."""
        since = FeedbackFilter.from_params(date_range=date_range).created_after(utc_now())
        rows = await self._repo.stats(employee_pk, since)
        return [EmployeeStatsResponse(**row) for row in rows]
