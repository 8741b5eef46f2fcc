"""
Issues Application Layer
=========================

Contains:
- Services: Detection, resolution drafting and review workflow
- DTOs: Request/response models

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from feedback_triage.issues.application.dto import (
    IssueStatusStr,
    DetectionOutcomeStr,
    PendingIssueCreateRequest,
    PendingIssueUpdateRequest,
    ResolutionCreateRequest,
    ResolutionUpdateRequest,
    ApprovePendingIssueRequest,
    RejectPendingIssueRequest,
    MergePendingIssueRequest,
    IssueCreateRequest,
    IssueUpdateRequest,
    IssueApproveRequest,
    IssueRejectRequest,
    IssueResponse,
    PendingResolutionResponse,
    FeedbackSummary,
    PendingIssueResponse,
    RejectedIssueResponse,
    CandidateInfo,
    DetectionResponse,
)
from feedback_triage.issues.application.services import (
    RESOLUTION_PENDING,
    ResolutionService,
    IssueDetectionService,
    PendingIssueService,
    PendingIssueView,
    IssueService,
    RejectedIssueService,
    IIssueRepository,
    IPendingIssueRepository,
    IRejectedIssueRepository,
    ILLMClient,
    IRuleSetProvider,
)

__all__ = [
    # DTOs
    "IssueStatusStr",
    "DetectionOutcomeStr",
    "PendingIssueCreateRequest",
    "PendingIssueUpdateRequest",
    "ResolutionCreateRequest",
    "ResolutionUpdateRequest",
    "ApprovePendingIssueRequest",
    "RejectPendingIssueRequest",
    "MergePendingIssueRequest",
    "IssueCreateRequest",
    "IssueUpdateRequest",
    "IssueApproveRequest",
    "IssueRejectRequest",
    "IssueResponse",
    "PendingResolutionResponse",
    "FeedbackSummary",
    "PendingIssueResponse",
    "RejectedIssueResponse",
    "CandidateInfo",
    "DetectionResponse",
    # Services
    "RESOLUTION_PENDING",
    "ResolutionService",
    "IssueDetectionService",
    "PendingIssueService",
    "PendingIssueView",
    "IssueService",
    "RejectedIssueService",
    # Interfaces
    "IIssueRepository",
    "IPendingIssueRepository",
    "IRejectedIssueRepository",
    "ILLMClient",
    "IRuleSetProvider",
]
