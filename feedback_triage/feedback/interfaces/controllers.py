"""
Feedback Controllers (API Routes)
==================================

FastAPI routes for feedback intake: CRUD, CSV import and on-demand
issue detection.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Request, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_triage.config import settings
from feedback_triage.core import CsvImportException
from feedback_triage.infrastructure.database import get_session
from feedback_triage.feedback.application import (
    CsvImportResponse,
    CsvImportService,
    DateRangeStr,
    FeedbackCreateRequest,
    FeedbackResponse,
    FeedbackService,
    FeedbackUpdateRequest,
)
from feedback_triage.feedback.domain import FeedbackFilter
from feedback_triage.feedback.infrastructure import SQLAlchemyFeedbackRepository
from feedback_triage.issues.application import DetectionResponse
from feedback_triage.issues.interfaces import build_detection_service
from feedback_triage.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["Feedback"])


# ========== Example payloads for Swagger ==========

FEEDBACK_CREATE_EXAMPLE = {
    "customer_name": "Ahmad Rahman",
    "customer_phone": "+60123456789",
    "customer_email": "ahmad.rahman@email.com",
    "service_type": "ATM",
    "review_text": "ATM was out of service for the whole weekend and I could not withdraw cash.",
    "review_rating": 2,
    "issue_location": "Kuala Lumpur",
    "contacted_bank_person": "Siti Nurhaliza"
}

FEEDBACK_RESPONSE_EXAMPLE = {
    "id": "fb_001",
    "customer_id": None,
    "customer_name": "Ahmad Rahman",
    "customer_phone": "+60123456789",
    "customer_email": "ahmad.rahman@email.com",
    "service_type": "ATM",
    "review_text": "ATM was out of service for the whole weekend and I could not withdraw cash.",
    "review_rating": 2,
    "issue_location": "Kuala Lumpur",
    "contacted_bank_person": "Siti Nurhaliza",
    "status": "new",
    "sentiment": "negative",
    "positive_flag": False,
    "negative_flag": True,
    "detected_issues": ["ATM malfunction"],
    "created_at": "2024-01-15T09:58:00",
    "updated_at": "2024-01-15T09:58:00"
}

CSV_IMPORT_RESPONSE_EXAMPLE = {
    "imported": 2,
    "failed": 1,
    "errors": ["row 3: review_rating: Input should be less than or equal to 5"],
    "message": "Imported 2 feedback records, 1 rows failed validation"
}


# ========== Dependencies ==========

async def get_feedback_service(
    request: Request,
    session: AsyncSession = Depends(get_session)
) -> FeedbackService:
    """Get feedback service instance wired to issue detection."""
    return FeedbackService(
        repository=SQLAlchemyFeedbackRepository(session),
        detector=build_detection_service(session, request.app.state)
    )


async def get_csv_import_service(session: AsyncSession = Depends(get_session)) -> CsvImportService:
    """Get CSV import service instance."""
    return CsvImportService(SQLAlchemyFeedbackRepository(session))


def get_feedback_filter(
    service: Optional[str] = Query(None, description="ATM, OnlineBanking, CoreBanking or 'all'"),
    location: Optional[str] = Query(None, description="Exact branch location or 'all'"),
    status_filter: Optional[str] = Query(None, alias="status", description="Feedback status or 'all'"),
    search: Optional[str] = Query(None, description="Substring of customer name or review text"),
    date_range: Optional[DateRangeStr] = Query(None),
    custom_date_from: Optional[date] = Query(None),
    custom_date_to: Optional[date] = Query(None, description="Inclusive"),
) -> FeedbackFilter:
    """Shared feedback filter query parameters."""
    return FeedbackFilter.from_params(
        service=service,
        location=location,
        status=status_filter,
        search=search,
        date_range=date_range,
        custom_date_from=custom_date_from,
        custom_date_to=custom_date_to,
    )


# ========== Route Handlers ==========

@router.get(
    "/feedback",
    response_model=List[FeedbackResponse],
    summary="List feedback",
    description="""
    List feedback records, newest first.

    **Filters** (all optional, `all` means no filter):
    - `service`, `location`, `status`: exact match
    - `search`: case-insensitive match on customer name or review text
    - `date_range`: last_week, last_month, last_quarter or last_year
    - `custom_date_from` / `custom_date_to`: inclusive calendar dates
    """,
    responses={200: {"content": {"application/json": {"example": [FEEDBACK_RESPONSE_EXAMPLE]}}}}
)
async def list_feedback(
    filters: FeedbackFilter = Depends(get_feedback_filter),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    service: FeedbackService = Depends(get_feedback_service)
):
    return await service.list_feedback(filters, limit=limit, offset=offset)


@router.post(
    "/feedback",
    response_model=FeedbackResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit feedback",
    description="""
    Create a feedback record.

    Sentiment is derived from the rating (4-5 positive, 1-3 negative)
    unless supplied. Negative feedback is analysed for issues straight
    away when automatic detection is enabled; otherwise the background
    sweep picks it up.
    """,
    responses={
        201: {"content": {"application/json": {"example": FEEDBACK_RESPONSE_EXAMPLE}}},
        409: {"description": "A feedback record with this id already exists"}
    }
)
async def create_feedback(
    request: Request,
    payload: FeedbackCreateRequest,
    service: FeedbackService = Depends(get_feedback_service)
):
    correlation_id = getattr(request.state, "correlation_id", None)
    logger.info(
        "Feedback submission received",
        extra={"correlation_id": correlation_id, "service_type": payload.service_type}
    )
    return await service.create_feedback(payload)


@router.get(
    "/feedback/{feedback_id}",
    response_model=FeedbackResponse,
    summary="Get feedback",
    responses={404: {"description": "Feedback not found"}}
)
async def get_feedback(feedback_id: str, service: FeedbackService = Depends(get_feedback_service)):
    return await service.get_feedback(feedback_id)


@router.put(
    "/feedback/{feedback_id}",
    response_model=FeedbackResponse,
    summary="Update feedback",
    description="Partial update. A new rating re-derives the sentiment unless one is supplied."
)
async def update_feedback(
    feedback_id: str,
    payload: FeedbackUpdateRequest,
    service: FeedbackService = Depends(get_feedback_service)
):
    return await service.update_feedback(feedback_id, payload)


@router.delete(
    "/feedback/{feedback_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete feedback",
    description="Deletes the record with its issue links and employee interactions."
)
async def delete_feedback(feedback_id: str, service: FeedbackService = Depends(get_feedback_service)):
    await service.delete_feedback(feedback_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/feedback/{feedback_id}/detect-issues",
    response_model=DetectionResponse,
    summary="Run issue detection",
    description="""
    Analyse one feedback record now.

    **Outcomes:**
    - `skipped`: feedback is not negative
    - `no_issue`: nothing actionable found
    - `created`: a new pending issue was filed
    - `merged`: counted against an existing pending issue
    - `linked`: linked to an approved issue
    - `suppressed`: matches a rejected issue
    """
)
async def detect_feedback_issues(
    request: Request,
    feedback_id: str,
    service: FeedbackService = Depends(get_feedback_service)
):
    result = await service.detect_issues(feedback_id)
    logger.info(
        "On-demand detection complete",
        extra={
            "correlation_id": getattr(request.state, "correlation_id", None),
            "feedback_id": feedback_id,
            "outcome": result.outcome
        }
    )
    return DetectionResponse.from_result(result)


@router.post(
    "/import-csv",
    response_model=CsvImportResponse,
    summary="Import feedback from CSV",
    description=f"""
    Upload a UTF-8 CSV file as multipart field `file`.

    **Columns:** customer_name, service_type, review_text and review_rating
    are required; customer_phone, customer_email, customer_id,
    issue_location and contacted_bank_person are optional.

    Valid rows are imported and invalid rows reported individually.
    Maximum size: {settings.csv_max_bytes} bytes.
    """,
    responses={
        200: {"content": {"application/json": {"example": CSV_IMPORT_RESPONSE_EXAMPLE}}},
        400: {"description": "No file, empty file, bad encoding or missing columns"}
    }
)
async def import_csv(
    file: Optional[UploadFile] = File(None),
    service: CsvImportService = Depends(get_csv_import_service)
):
    if file is None:
        raise CsvImportException("No file uploaded", details={"field": "file"})
    # Read at most one byte past the limit
    content = await file.read(settings.csv_max_bytes + 1)
    logger.info("CSV upload received", extra={"csv_filename": file.filename, "size_bytes": len(content)})
    return await service.import_csv(content)


# Export router for inclusion in main app
feedback_router = router
