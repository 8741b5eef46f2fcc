"""
Issues Interfaces Layer
=======================

Interface adapters (controllers) for issue detection and review.

Contains:
- Controllers: FastAPI route handlers

This is the outermost layer - handles HTTP requests/responses and
delegates to application services.
"""

from feedback_triage.issues.interfaces.controllers import issues_router, build_detection_service

__all__ = ["issues_router", "build_detection_service"]
