"""
Feedback Infrastructure Layer
==============================

Contains:
- Models: SQLAlchemy ORM models
- Repositories: Data access implementations
"""

from feedback_triage.feedback.infrastructure.models import FeedbackModel
from feedback_triage.feedback.infrastructure.repositories import (
    SQLAlchemyFeedbackRepository,
    build_feedback_conditions,
)

__all__ = [
    "FeedbackModel",
    "SQLAlchemyFeedbackRepository",
    "build_feedback_conditions",
]
