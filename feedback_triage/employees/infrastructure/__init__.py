"""
Employees Infrastructure Layer
===============================

Contains:
- Models: SQLAlchemy ORM models
- Repositories: Data access implementations
"""

from feedback_triage.employees.infrastructure.models import (
    BankEmployeeModel,
    EmployeeInteractionModel,
)
from feedback_triage.employees.infrastructure.repositories import SQLAlchemyEmployeeRepository

__all__ = [
    "BankEmployeeModel",
    "EmployeeInteractionModel",
    "SQLAlchemyEmployeeRepository",
]
