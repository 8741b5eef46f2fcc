"""
Feedback Application DTOs
==========================

Pydantic models for feedback requests and responses.

The same create model validates API payloads and CSV rows, so both paths
accept exactly the same records.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Literal
from datetime import datetime


# ========== Type Aliases for Literals ==========
ServiceTypeStr = Literal["ATM", "OnlineBanking", "CoreBanking"]
FeedbackStatusStr = Literal["new", "in_progress", "resolved", "escalated"]
SentimentStr = Literal["positive", "negative", "neutral"]
DateRangeStr = Literal["all", "last_week", "last_month", "last_quarter", "last_year"]

OPTIONAL_TEXT_FIELDS = (
    "customer_id", "customer_phone", "customer_email",
    "issue_location", "contacted_bank_person",
)


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


# ========== Request DTOs ==========

class FeedbackCreateRequest(BaseModel):
    """Request model for creating a feedback record."""
    id: Optional[str] = Field(
        None,
        max_length=36,
        description="Caller supplied id (e.g. fb_001); a UUID is generated when omitted"
    )
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=50)
    customer_email: Optional[str] = Field(None, max_length=255)
    customer_id: Optional[str] = Field(None, max_length=100)
    service_type: ServiceTypeStr
    review_text: str = Field(..., min_length=1)
    review_rating: int = Field(..., ge=1, le=5, description="Star rating 1..5")
    issue_location: Optional[str] = Field(None, max_length=255)
    contacted_bank_person: Optional[str] = Field(None, max_length=255)
    status: FeedbackStatusStr = "new"
    sentiment: Optional[SentimentStr] = Field(
        None,
        description="Derived from the rating when omitted"
    )
    created_at: Optional[datetime] = None

    @field_validator("customer_name", "review_text", mode="before")
    @classmethod
    def strip_required(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator(*OPTIONAL_TEXT_FIELDS, "id", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v) if isinstance(v, str) else v


class FeedbackUpdateRequest(BaseModel):
    """
    Partial update for a feedback record.

    Only fields present in the payload are written.
    """
    customer_name: Optional[str] = Field(None, min_length=1, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=50)
    customer_email: Optional[str] = Field(None, max_length=255)
    customer_id: Optional[str] = Field(None, max_length=100)
    service_type: Optional[ServiceTypeStr] = None
    review_text: Optional[str] = Field(None, min_length=1)
    review_rating: Optional[int] = Field(None, ge=1, le=5)
    issue_location: Optional[str] = Field(None, max_length=255)
    contacted_bank_person: Optional[str] = Field(None, max_length=255)
    status: Optional[FeedbackStatusStr] = None
    sentiment: Optional[SentimentStr] = None


# ========== Response DTOs ==========

class FeedbackResponse(BaseModel):
    """Response model for a feedback record."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: Optional[str] = None
    customer_name: str
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    service_type: str
    review_text: str
    review_rating: int
    issue_location: Optional[str] = None
    contacted_bank_person: Optional[str] = None
    status: str
    sentiment: str
    positive_flag: bool
    negative_flag: bool
    detected_issues: Optional[List[str]] = None
    created_at: datetime
    updated_at: datetime


class CsvImportResponse(BaseModel):
    """Response model for CSV import."""
    imported: int = Field(..., description="Rows inserted")
    failed: int = Field(..., description="Rows rejected by validation")
    errors: List[str] = Field(default_factory=list, description="One message per rejected row")
    message: str
