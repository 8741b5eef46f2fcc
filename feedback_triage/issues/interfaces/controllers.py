"""
Issues Controllers (API Routes)
================================

FastAPI routes for issues, pending issues, pending resolutions and
rejected issues.

Controllers are thin - they delegate to application services.
"""

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_triage.config import settings
from feedback_triage.infrastructure.database import get_session
from feedback_triage.feedback.infrastructure import SQLAlchemyFeedbackRepository
from feedback_triage.issues.application import (
    IssueDetectionService,
    IssueService,
    PendingIssueService,
    RejectedIssueService,
    ResolutionService,
    IssueStatusStr,
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
    PendingIssueResponse,
    PendingResolutionResponse,
    RejectedIssueResponse,
)
from feedback_triage.issues.infrastructure import (
    DetectionRulesManager,
    SQLAlchemyIssueRepository,
    SQLAlchemyPendingIssueRepository,
    SQLAlchemyRejectedIssueRepository,
)
from feedback_triage.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["Issues"])


# ========== Example payloads for Swagger ==========

PENDING_ISSUE_RESPONSE_EXAMPLE = {
    "id": "5b0f7c1e-2f4a-4c59-9a43-0c1b2d3e4f50",
    "title": "ATM malfunction",
    "description": "Customer could not complete a transaction at an ATM.",
    "category": "ATM",
    "confidence_score": 0.8,
    "feedback_count": 3,
    "detected_from_feedback_id": "fb_001",
    "created_at": "2024-01-15T10:00:00",
    "updated_at": "2024-01-16T08:30:00",
    "resolutions": [
        {
            "id": "9e8d7c6b-5a49-4f3e-8d2c-1b0a9f8e7d6c",
            "pending_issue_id": "5b0f7c1e-2f4a-4c59-9a43-0c1b2d3e4f50",
            "resolution_text": "1. Check ATM operational status and error logs\n2. Verify cash availability and card reader functionality",
            "confidence_score": 0.85,
            "created_at": "2024-01-15T10:00:01"
        }
    ],
    "feedback": {
        "id": "fb_001",
        "customer_name": "Ahmad Rahman",
        "review_text": "ATM was out of service for the whole weekend.",
        "service_type": "ATM",
        "issue_location": "Kuala Lumpur",
        "created_at": "2024-01-15T09:58:00"
    }
}

ISSUE_RESPONSE_EXAMPLE = {
    "id": "0c3f9f54-8f86-4d2b-bb39-94b1d4b7f3aa",
    "title": "ATM malfunction",
    "description": "Customer could not complete a transaction at an ATM.",
    "category": "ATM",
    "resolution": "1. Check ATM operational status and error logs\n2. Direct customer to nearest working ATM",
    "status": "approved",
    "confidence_score": 0.8,
    "feedback_count": 3,
    "approved_by": "ops.lead@bank.example",
    "approved_date": "2024-01-16T09:00:00",
    "created_at": "2024-01-16T09:00:00",
    "updated_at": "2024-01-16T09:00:00"
}


# ========== Dependencies ==========

def build_resolution_service(state: Any) -> ResolutionService:
    rules = getattr(state, "rules_manager", None) or DetectionRulesManager()
    return ResolutionService(getattr(state, "llm_adapter", None), rules)


def build_detection_service(session: AsyncSession, state: Any) -> IssueDetectionService:
    """
    Wire an IssueDetectionService for one session.

    Shared by the request dependencies and the background sweep job.
    """
    rules = getattr(state, "rules_manager", None) or DetectionRulesManager()
    llm = getattr(state, "llm_adapter", None)
    return IssueDetectionService(
        feedback_repository=SQLAlchemyFeedbackRepository(session),
        issue_repository=SQLAlchemyIssueRepository(session),
        pending_repository=SQLAlchemyPendingIssueRepository(session),
        rejected_repository=SQLAlchemyRejectedIssueRepository(session),
        rules=rules,
        resolution_service=ResolutionService(llm, rules),
        llm_client=llm,
        min_confidence=settings.min_issue_confidence
    )


async def get_pending_issue_service(
    request: Request,
    session: AsyncSession = Depends(get_session)
) -> PendingIssueService:
    """Get pending issue service instance."""
    return PendingIssueService(
        pending_repository=SQLAlchemyPendingIssueRepository(session),
        issue_repository=SQLAlchemyIssueRepository(session),
        rejected_repository=SQLAlchemyRejectedIssueRepository(session),
        feedback_repository=SQLAlchemyFeedbackRepository(session),
        resolution_service=build_resolution_service(request.app.state)
    )


async def get_issue_service(session: AsyncSession = Depends(get_session)) -> IssueService:
    """Get issue service instance."""
    return IssueService(SQLAlchemyIssueRepository(session))


async def get_rejected_issue_service(
    session: AsyncSession = Depends(get_session)
) -> RejectedIssueService:
    """Get rejected issue service instance."""
    return RejectedIssueService(SQLAlchemyRejectedIssueRepository(session))


# ========== Pending Issues ==========

@router.get(
    "/pending-issues",
    response_model=List[PendingIssueResponse],
    tags=["Pending Issues"],
    summary="List pending issues",
    description="Pending issues awaiting review, newest first, with their drafted resolutions "
                "and a summary of the feedback they were detected from.",
    responses={200: {"content": {"application/json": {"example": [PENDING_ISSUE_RESPONSE_EXAMPLE]}}}}
)
async def list_pending_issues(service: PendingIssueService = Depends(get_pending_issue_service)):
    views = await service.list_pending()
    return [PendingIssueResponse.from_view(view) for view in views]


@router.post(
    "/pending-issues",
    response_model=PendingIssueResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Pending Issues"],
    summary="Create a pending issue",
    description="""
    Create a pending issue by hand.

    When `resolution_text` is omitted a resolution is drafted (LLM when
    configured, otherwise the matching template).
    """
)
async def create_pending_issue(
    payload: PendingIssueCreateRequest,
    service: PendingIssueService = Depends(get_pending_issue_service)
):
    view = await service.create_pending(payload)
    return PendingIssueResponse.from_view(view)


@router.get(
    "/pending-issues/{pending_id}",
    response_model=PendingIssueResponse,
    tags=["Pending Issues"],
    summary="Get a pending issue",
    responses={
        200: {"content": {"application/json": {"example": PENDING_ISSUE_RESPONSE_EXAMPLE}}},
        404: {"description": "Pending issue not found"}
    }
)
async def get_pending_issue(
    pending_id: str,
    service: PendingIssueService = Depends(get_pending_issue_service)
):
    return PendingIssueResponse.from_view(await service.get_pending(pending_id))


@router.put(
    "/pending-issues/{pending_id}",
    response_model=PendingIssueResponse,
    tags=["Pending Issues"],
    summary="Update a pending issue"
)
async def update_pending_issue(
    pending_id: str,
    payload: PendingIssueUpdateRequest,
    service: PendingIssueService = Depends(get_pending_issue_service)
):
    return PendingIssueResponse.from_view(await service.update_pending(pending_id, payload))


@router.post(
    "/pending-issues/{pending_id}/resolutions",
    response_model=PendingResolutionResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Pending Issues"],
    summary="Add a resolution to a pending issue"
)
async def add_pending_resolution(
    pending_id: str,
    payload: ResolutionCreateRequest,
    service: PendingIssueService = Depends(get_pending_issue_service)
):
    return await service.add_resolution(pending_id, payload)


@router.post(
    "/pending-issues/{pending_id}/generate-resolution",
    response_model=PendingResolutionResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Pending Issues"],
    summary="Draft another resolution",
    description="Asks the LLM for a new resolution and attaches it to the pending issue. "
                "Falls back to the template when the LLM is unavailable."
)
async def generate_pending_resolution(
    pending_id: str,
    service: PendingIssueService = Depends(get_pending_issue_service)
):
    return await service.generate_resolution(pending_id)


@router.post(
    "/pending-issues/{pending_id}/approve",
    response_model=IssueResponse,
    tags=["Pending Issues"],
    summary="Approve a pending issue",
    description="""
    Promote a pending issue to the master issue list.

    Edited `title`, `description` and `resolution` replace the detected
    values. Without an edited resolution the first drafted one is used,
    else `"Resolution pending"`. The source feedback is linked to the new
    issue and the pending issue is deleted.
    """,
    responses={
        200: {"content": {"application/json": {"example": ISSUE_RESPONSE_EXAMPLE}}},
        404: {"description": "Pending issue not found"}
    }
)
async def approve_pending_issue(
    pending_id: str,
    payload: ApprovePendingIssueRequest,
    service: PendingIssueService = Depends(get_pending_issue_service)
):
    return await service.approve(pending_id, payload)


@router.post(
    "/pending-issues/{pending_id}/reject",
    response_model=RejectedIssueResponse,
    tags=["Pending Issues"],
    summary="Reject a pending issue",
    description="Archives the pending issue in rejected issues. Later detections with the "
                "same title and category are suppressed."
)
async def reject_pending_issue(
    pending_id: str,
    payload: RejectPendingIssueRequest,
    service: PendingIssueService = Depends(get_pending_issue_service)
):
    return await service.reject(pending_id, payload)


@router.post(
    "/pending-issues/{pending_id}/merge",
    response_model=IssueResponse,
    tags=["Pending Issues"],
    summary="Merge a pending issue into an existing issue",
    description="Adds the pending issue's feedback count to the target issue, links the "
                "source feedback to it and deletes the pending issue.",
    responses={404: {"description": "Pending issue or target issue not found"}}
)
async def merge_pending_issue(
    pending_id: str,
    payload: MergePendingIssueRequest,
    service: PendingIssueService = Depends(get_pending_issue_service)
):
    return await service.merge(pending_id, payload)


@router.put(
    "/pending-resolutions/{resolution_id}",
    response_model=PendingResolutionResponse,
    tags=["Pending Issues"],
    summary="Edit a pending resolution"
)
async def update_pending_resolution(
    resolution_id: str,
    payload: ResolutionUpdateRequest,
    service: PendingIssueService = Depends(get_pending_issue_service)
):
    return await service.update_resolution(resolution_id, payload)


# ========== Issues ==========

@router.get(
    "/issues",
    response_model=List[IssueResponse],
    summary="List issues",
    responses={200: {"content": {"application/json": {"example": [ISSUE_RESPONSE_EXAMPLE]}}}}
)
async def list_issues(
    status_filter: Optional[IssueStatusStr] = Query(None, alias="status"),
    service: IssueService = Depends(get_issue_service)
):
    return await service.list_issues(status_filter)


@router.post(
    "/issues",
    response_model=IssueResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an issue"
)
async def create_issue(
    payload: IssueCreateRequest,
    service: IssueService = Depends(get_issue_service)
):
    return await service.create_issue(payload)


@router.get(
    "/issues/{issue_id}",
    response_model=IssueResponse,
    summary="Get an issue",
    responses={404: {"description": "Issue not found"}}
)
async def get_issue(issue_id: str, service: IssueService = Depends(get_issue_service)):
    return await service.get_issue(issue_id)


@router.put("/issues/{issue_id}", response_model=IssueResponse, summary="Update an issue")
async def update_issue(
    issue_id: str,
    payload: IssueUpdateRequest,
    service: IssueService = Depends(get_issue_service)
):
    return await service.update_issue(issue_id, payload)


@router.delete(
    "/issues/{issue_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete an issue"
)
async def delete_issue(issue_id: str, service: IssueService = Depends(get_issue_service)):
    await service.delete_issue(issue_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/issues/{issue_id}/approve", response_model=IssueResponse, summary="Approve an issue")
async def approve_issue(
    issue_id: str,
    payload: IssueApproveRequest,
    service: IssueService = Depends(get_issue_service)
):
    return await service.approve_issue(issue_id, payload)


@router.post("/issues/{issue_id}/reject", response_model=IssueResponse, summary="Reject an issue")
async def reject_issue(
    issue_id: str,
    payload: Optional[IssueRejectRequest] = None,
    service: IssueService = Depends(get_issue_service)
):
    return await service.reject_issue(issue_id, payload or IssueRejectRequest())


# ========== Rejected Issues ==========

@router.get(
    "/rejected-issues",
    response_model=List[RejectedIssueResponse],
    tags=["Rejected Issues"],
    summary="List rejected issues"
)
async def list_rejected_issues(
    service: RejectedIssueService = Depends(get_rejected_issue_service)
):
    return await service.list_rejected()


@router.get(
    "/rejected-issues/{rejected_id}",
    response_model=RejectedIssueResponse,
    tags=["Rejected Issues"],
    summary="Get a rejected issue",
    responses={404: {"description": "Rejected issue not found"}}
)
async def get_rejected_issue(
    rejected_id: str,
    service: RejectedIssueService = Depends(get_rejected_issue_service)
):
    return await service.get_rejected(rejected_id)


@router.delete(
    "/rejected-issues/{rejected_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    tags=["Rejected Issues"],
    summary="Delete a rejected issue",
    description="Removes the archive entry, so the same issue can be detected again."
)
async def delete_rejected_issue(
    rejected_id: str,
    service: RejectedIssueService = Depends(get_rejected_issue_service)
):
    await service.delete_rejected(rejected_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Export router for inclusion in main app
issues_router = router
