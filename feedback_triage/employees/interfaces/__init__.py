"""
Employees Interfaces Layer
==========================

Interface adapters (controllers) for the employee registry.
"""

from feedback_triage.employees.interfaces.controllers import employees_router, get_employee_service

__all__ = ["employees_router", "get_employee_service"]
