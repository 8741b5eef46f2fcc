"""
Issues Infrastructure Models
=============================

SQLAlchemy ORM models for approved, pending and rejected issues.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    DateTime, Float, ForeignKey, Index, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from feedback_triage.core import utc_now
from feedback_triage.infrastructure.database import Base
from feedback_triage.feedback.infrastructure.models import new_id


class IssueModel(Base):
    """Master issue list; approved issues carry a resolution."""
    __tablename__ = "issues"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    resolution: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    confidence_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    feedback_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    approved_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    approved_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        Index("idx_issues_status", "status"),
        Index("idx_issues_category", "category"),
    )


class PendingIssueModel(Base):
    """Detected issue awaiting review."""
    __tablename__ = "pending_issues"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    confidence_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    feedback_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    detected_from_feedback_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("feedback.id", ondelete="SET NULL"),
        nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        Index("idx_pending_issues_category", "category"),
    )


class PendingResolutionModel(Base):
    """Candidate resolution attached to a pending issue."""
    __tablename__ = "pending_resolutions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    pending_issue_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("pending_issues.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    resolution_text: Mapped[str] = mapped_column(Text, nullable=False)
    confidence_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now)


class RejectedIssueModel(Base):
    """Archive of rejected pending issues; suppresses re-detection."""
    __tablename__ = "rejected_issues"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    original_title: Mapped[str] = mapped_column(String(255), nullable=False)
    original_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rejected_by: Mapped[str] = mapped_column(String(255), nullable=False)
    rejected_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now)
    original_pending_issue_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)


class FeedbackIssueModel(Base):
    """Link between a feedback record and an approved issue."""
    __tablename__ = "feedback_issues"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    feedback_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("feedback.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    issue_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("issues.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now)

    __table_args__ = (
        UniqueConstraint("feedback_id", "issue_id", name="uq_feedback_issue"),
    )
