"""
Feedback Application Layer
===========================

Contains:
- Services: Feedback CRUD and CSV import
- DTOs: Request/response models
"""

from feedback_triage.feedback.application.dto import (
    ServiceTypeStr,
    FeedbackStatusStr,
    SentimentStr,
    DateRangeStr,
    FeedbackCreateRequest,
    FeedbackUpdateRequest,
    FeedbackResponse,
    CsvImportResponse,
)
from feedback_triage.feedback.application.services import (
    FeedbackService,
    CsvImportService,
    IFeedbackRepository,
    IIssueDetector,
    build_feedback_record,
)

__all__ = [
    # DTOs
    "ServiceTypeStr",
    "FeedbackStatusStr",
    "SentimentStr",
    "DateRangeStr",
    "FeedbackCreateRequest",
    "FeedbackUpdateRequest",
    "FeedbackResponse",
    "CsvImportResponse",
    # Services
    "FeedbackService",
    "CsvImportService",
    "build_feedback_record",
    # Repository Interfaces
    "IFeedbackRepository",
    "IIssueDetector",
]
