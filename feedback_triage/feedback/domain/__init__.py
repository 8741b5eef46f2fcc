"""
Feedback Domain Layer
=====================

Pure business rules for feedback records.
"""

from feedback_triage.feedback.domain.entities import (
    FeedbackFilter,
    derive_sentiment,
    sentiment_flags,
    is_negative,
)

__all__ = [
    "FeedbackFilter",
    "derive_sentiment",
    "sentiment_flags",
    "is_negative",
]
