"""
Feedback Infrastructure Models
===============================

SQLAlchemy ORM models for the feedback module.
"""

from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from feedback_triage.core import utc_now
from feedback_triage.infrastructure.database import Base


def new_id() -> str:
    return str(uuid4())


class FeedbackModel(Base):
    """
    Customer feedback record.

    ``detected_issues`` is NULL until issue detection has looked at the
    record; an empty list means it was analysed and nothing was found.
    """
    __tablename__ = "feedback"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # Customer
    customer_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    customer_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Review
    service_type: Mapped[str] = mapped_column(String(50), nullable=False)
    review_text: Mapped[str] = mapped_column(Text, nullable=False)
    review_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    issue_location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contacted_bank_person: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Triage state
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="new")
    sentiment: Mapped[str] = mapped_column(String(20), nullable=False, default="neutral")
    positive_flag: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    negative_flag: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    detected_issues: Mapped[Optional[List[str]]] = mapped_column(
        JSON(none_as_null=True),
        nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utc_now,
        onupdate=utc_now
    )

    __table_args__ = (
        Index("idx_feedback_service_type", "service_type"),
        Index("idx_feedback_status", "status"),
        Index("idx_feedback_sentiment", "sentiment"),
        Index("idx_feedback_location", "issue_location"),
        Index("idx_feedback_created_at", "created_at"),
    )
