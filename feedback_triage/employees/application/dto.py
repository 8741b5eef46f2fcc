"""
Employees Application DTOs
===========================

Pydantic models for employee and interaction requests and responses.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Literal
from datetime import datetime


InteractionTypeStr = Literal["contacted", "resolved", "escalated"]


# ========== Request DTOs ==========

class EmployeeCreateRequest(BaseModel):
    """Request model for registering a bank employee."""
    employee_id: str = Field(..., min_length=1, max_length=50, description="Staff number, unique")
    name: str = Field(..., min_length=1, max_length=255)
    department: Optional[str] = Field(None, max_length=100)
    branch_location: Optional[str] = Field(None, max_length=255)
    role: Optional[str] = Field(None, max_length=100)

    @field_validator("employee_id", "name", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class InteractionCreateRequest(BaseModel):
    """Record an employee interaction with a feedback record."""
    employee_id: str = Field(..., description="Id of the bank_employees row")
    feedback_id: str
    interaction_type: InteractionTypeStr
    notes: Optional[str] = None
    interaction_date: Optional[datetime] = None


# ========== Response DTOs ==========

class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: str
    name: str
    department: Optional[str] = None
    branch_location: Optional[str] = None
    role: Optional[str] = None
    created_at: datetime


class InteractionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: str
    feedback_id: str
    interaction_type: str
    interaction_date: datetime
    notes: Optional[str] = None


class EmployeeStatsResponse(BaseModel):
    """Per employee interaction totals and the sentiment of handled feedback."""
    id: str
    employee_id: str
    name: str
    department: Optional[str] = None
    branch_location: Optional[str] = None
    total_interactions: int = 0
    contacted: int = 0
    resolved: int = 0
    escalated: int = 0
    positive_feedback: int = 0
    negative_feedback: int = 0
    average_rating: Optional[float] = None
