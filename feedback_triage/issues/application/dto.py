"""
Issues Application DTOs
========================

Pydantic models for issue, pending issue and rejected issue endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Literal, Any
from datetime import datetime

from feedback_triage.feedback.application.dto import ServiceTypeStr


# ========== Type Aliases for Literals ==========
IssueStatusStr = Literal["pending", "approved", "rejected"]
DetectionOutcomeStr = Literal["skipped", "no_issue", "created", "merged", "linked", "suppressed"]


# ========== Request DTOs ==========

class PendingIssueCreateRequest(BaseModel):
    """Request model for manually creating a pending issue."""
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: ServiceTypeStr
    confidence_score: Optional[float] = Field(None, ge=0.0, le=1.0)
    feedback_count: int = Field(default=1, ge=0)
    detected_from_feedback_id: Optional[str] = None
    resolution_text: Optional[str] = Field(
        None,
        min_length=1,
        description="Initial resolution; drafted automatically when omitted"
    )


class PendingIssueUpdateRequest(BaseModel):
    """Partial update for a pending issue."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[ServiceTypeStr] = None
    confidence_score: Optional[float] = Field(None, ge=0.0, le=1.0)
    feedback_count: Optional[int] = Field(None, ge=0)


class ResolutionCreateRequest(BaseModel):
    """Request model for adding a resolution to a pending issue."""
    resolution_text: str = Field(..., min_length=1)
    confidence_score: Optional[float] = Field(None, ge=0.0, le=1.0)


class ResolutionUpdateRequest(BaseModel):
    """Request model for editing a pending resolution."""
    resolution_text: str = Field(..., min_length=1)
    confidence_score: Optional[float] = Field(None, ge=0.0, le=1.0)


class ApprovePendingIssueRequest(BaseModel):
    """Approve a pending issue; edited fields replace the detected ones."""
    approved_by: str = Field(..., min_length=1)
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    resolution: Optional[str] = None


class RejectPendingIssueRequest(BaseModel):
    """Reject a pending issue."""
    rejected_by: str = Field(..., min_length=1)
    reason: Optional[str] = None


class MergePendingIssueRequest(BaseModel):
    """Fold a pending issue into an existing issue."""
    target_issue_id: str = Field(..., min_length=1)
    merged_by: str = Field(..., min_length=1)


class IssueCreateRequest(BaseModel):
    """Request model for creating an issue directly."""
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: ServiceTypeStr
    resolution: Optional[str] = None
    status: IssueStatusStr = "pending"
    confidence_score: Optional[float] = Field(None, ge=0.0, le=1.0)
    feedback_count: int = Field(default=0, ge=0)
    approved_by: Optional[str] = None


class IssueUpdateRequest(BaseModel):
    """Partial update for an issue."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[ServiceTypeStr] = None
    resolution: Optional[str] = None
    status: Optional[IssueStatusStr] = None
    confidence_score: Optional[float] = Field(None, ge=0.0, le=1.0)
    feedback_count: Optional[int] = Field(None, ge=0)


class IssueApproveRequest(BaseModel):
    """Approve an issue, optionally setting its resolution."""
    approved_by: str = Field(..., min_length=1)
    resolution: Optional[str] = None


class IssueRejectRequest(BaseModel):
    """Reject an issue."""
    rejected_by: Optional[str] = None
    reason: Optional[str] = None


# ========== Response DTOs ==========

class IssueResponse(BaseModel):
    """Response model for an issue."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    category: str
    resolution: Optional[str] = None
    status: str
    confidence_score: Optional[float] = None
    feedback_count: int
    approved_by: Optional[str] = None
    approved_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class PendingResolutionResponse(BaseModel):
    """Response model for a pending resolution."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    pending_issue_id: str
    resolution_text: str
    confidence_score: Optional[float] = None
    created_at: datetime


class FeedbackSummary(BaseModel):
    """The feedback record a pending issue was detected from."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_name: str
    review_text: str
    service_type: str
    issue_location: Optional[str] = None
    created_at: datetime


class PendingIssueResponse(BaseModel):
    """Response model for a pending issue with its resolutions."""
    id: str
    title: str
    description: Optional[str] = None
    category: str
    confidence_score: Optional[float] = None
    feedback_count: int
    detected_from_feedback_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    resolutions: List[PendingResolutionResponse] = Field(default_factory=list)
    feedback: Optional[FeedbackSummary] = None

    @classmethod
    def from_view(cls, view: Any) -> "PendingIssueResponse":
        """Build from a PendingIssueView."""
        issue = view.issue
        return cls(
            id=issue.id,
            title=issue.title,
            description=issue.description,
            category=issue.category,
            confidence_score=issue.confidence_score,
            feedback_count=issue.feedback_count,
            detected_from_feedback_id=issue.detected_from_feedback_id,
            created_at=issue.created_at,
            updated_at=issue.updated_at,
            resolutions=[PendingResolutionResponse.model_validate(r) for r in view.resolutions],
            feedback=FeedbackSummary.model_validate(view.feedback) if view.feedback else None
        )


class RejectedIssueResponse(BaseModel):
    """Response model for a rejected issue."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    original_title: str
    original_description: Optional[str] = None
    category: str
    rejection_reason: Optional[str] = None
    rejected_by: str
    rejected_at: datetime
    original_pending_issue_id: Optional[str] = None


class CandidateInfo(BaseModel):
    """Issue candidate extracted from feedback."""
    title: str
    description: str
    category: str
    confidence_score: float
    source: str


class DetectionResponse(BaseModel):
    """Response model for on-demand issue detection."""
    feedback_id: str
    outcome: DetectionOutcomeStr
    detected_issues: List[str] = Field(default_factory=list)
    pending_issue_id: Optional[str] = None
    issue_id: Optional[str] = None
    rejected_issue_id: Optional[str] = None
    candidate: Optional[CandidateInfo] = None

    @classmethod
    def from_result(cls, result: Any) -> "DetectionResponse":
        """Build from a DetectionResult."""
        candidate = None
        if result.candidate is not None:
            candidate = CandidateInfo(
                title=result.candidate.title,
                description=result.candidate.description,
                category=result.candidate.category,
                confidence_score=result.candidate.confidence_score,
                source=result.candidate.source
            )
        return cls(
            feedback_id=result.feedback_id,
            outcome=result.outcome,
            detected_issues=result.detected_issues,
            pending_issue_id=result.pending_issue_id,
            issue_id=result.issue_id,
            rejected_issue_id=result.rejected_issue_id,
            candidate=candidate
        )
