"""
Employees Controllers (API Routes)
===================================

FastAPI routes for bank employees and their feedback interactions.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_triage.infrastructure.database import get_session
from feedback_triage.employees.application import (
    EmployeeCreateRequest,
    EmployeeResponse,
    EmployeeService,
    InteractionCreateRequest,
    InteractionResponse,
)
from feedback_triage.employees.infrastructure import SQLAlchemyEmployeeRepository
from feedback_triage.feedback.infrastructure import SQLAlchemyFeedbackRepository

router = APIRouter(prefix="/api/employees", tags=["Employees"])


# ========== Dependencies ==========

async def get_employee_service(session: AsyncSession = Depends(get_session)) -> EmployeeService:
    """Get employee service instance."""
    return EmployeeService(
        SQLAlchemyEmployeeRepository(session),
        SQLAlchemyFeedbackRepository(session)
    )


# ========== Route Handlers ==========

@router.get("", response_model=List[EmployeeResponse], summary="List employees")
async def list_employees(service: EmployeeService = Depends(get_employee_service)):
    return await service.list_employees()


@router.post(
    "",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an employee",
    responses={409: {"description": "Staff number already registered"}}
)
async def create_employee(
    payload: EmployeeCreateRequest,
    service: EmployeeService = Depends(get_employee_service)
):
    return await service.create_employee(payload)


# Registered before /{employee_pk} so "interactions" is not read as an id
@router.get(
    "/interactions",
    response_model=List[InteractionResponse],
    summary="List interactions",
    description="Employee interactions with feedback, newest first."
)
async def list_interactions(
    employee_id: Optional[str] = Query(None, description="Only this employee's interactions"),
    service: EmployeeService = Depends(get_employee_service)
):
    return await service.list_interactions(employee_id)


@router.post(
    "/interactions",
    response_model=InteractionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record an interaction",
    responses={
        201: {"description": "Interaction recorded"},
        404: {"description": "Employee or feedback not found"}
    }
)
async def create_interaction(
    payload: InteractionCreateRequest,
    service: EmployeeService = Depends(get_employee_service)
):
    return await service.create_interaction(payload)


@router.get(
    "/{employee_pk}",
    response_model=EmployeeResponse,
    summary="Get an employee",
    responses={404: {"description": "Employee not found"}}
)
async def get_employee(employee_pk: str, service: EmployeeService = Depends(get_employee_service)):
    return await service.get_employee(employee_pk)


employees_router = router
