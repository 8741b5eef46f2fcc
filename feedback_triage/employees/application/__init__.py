"""
Employees Application Layer
============================

Contains:
- Services: Employee registry, interactions and statistics
- DTOs: Request/response models
"""

from feedback_triage.employees.application.dto import (
    InteractionTypeStr,
    EmployeeCreateRequest,
    InteractionCreateRequest,
    EmployeeResponse,
    InteractionResponse,
    EmployeeStatsResponse,
)
from feedback_triage.employees.application.services import (
    EmployeeService,
    IEmployeeRepository,
)

__all__ = [
    "InteractionTypeStr",
    "EmployeeCreateRequest",
    "InteractionCreateRequest",
    "EmployeeResponse",
    "InteractionResponse",
    "EmployeeStatsResponse",
    "EmployeeService",
    "IEmployeeRepository",
]
