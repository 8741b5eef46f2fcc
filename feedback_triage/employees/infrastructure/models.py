"""
Employees Infrastructure Models
================================

SQLAlchemy ORM models for bank staff and their feedback interactions.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from feedback_triage.core import utc_now
from feedback_triage.infrastructure.database import Base
from feedback_triage.feedback.infrastructure.models import new_id


class BankEmployeeModel(Base):
    """Bank staff member."""
    __tablename__ = "bank_employees"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    employee_id: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    branch_location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now)


class EmployeeInteractionModel(Base):
    """A staff member contacting, resolving or escalating a feedback record."""
    __tablename__ = "employee_feedback_interactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    employee_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("bank_employees.id", ondelete="CASCADE"),
        nullable=False
    )
    feedback_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("feedback.id", ondelete="CASCADE"),
        nullable=False
    )
    interaction_type: Mapped[str] = mapped_column(String(20), nullable=False)
    interaction_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_interactions_employee", "employee_id"),
        Index("idx_interactions_feedback", "feedback_id"),
        Index("idx_interactions_date", "interaction_date"),
    )
