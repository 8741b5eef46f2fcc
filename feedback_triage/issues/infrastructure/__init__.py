"""
Issues Infrastructure Layer
============================

Contains:
- Models: SQLAlchemy ORM models
- Repositories: Data access implementations
- External: LLM adapter, rules hot-reload, detection scheduler
"""

from feedback_triage.issues.infrastructure.models import (
    IssueModel,
    PendingIssueModel,
    PendingResolutionModel,
    RejectedIssueModel,
    FeedbackIssueModel,
)
from feedback_triage.issues.infrastructure.repositories import (
    SQLAlchemyIssueRepository,
    SQLAlchemyPendingIssueRepository,
    SQLAlchemyRejectedIssueRepository,
)
from feedback_triage.issues.infrastructure.external import (
    CircuitState,
    CircuitBreaker,
    LLMClientAdapter,
    DetectionRulesManager,
    DetectionScheduler,
)

__all__ = [
    "IssueModel",
    "PendingIssueModel",
    "PendingResolutionModel",
    "RejectedIssueModel",
    "FeedbackIssueModel",
    "SQLAlchemyIssueRepository",
    "SQLAlchemyPendingIssueRepository",
    "SQLAlchemyRejectedIssueRepository",
    "CircuitState",
    "CircuitBreaker",
    "LLMClientAdapter",
    "DetectionRulesManager",
    "DetectionScheduler",
]
