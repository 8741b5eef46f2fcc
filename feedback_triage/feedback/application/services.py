"""
Feedback Application Services
==============================

Application services for feedback intake: CRUD, CSV import and the hook
that hands negative feedback to issue detection.
"""

import csv
import io
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from feedback_triage.config import settings
from feedback_triage.core import (
    ApplicationException,
    ConfigurationException,
    CsvImportException,
    DuplicateResourceException,
    ResourceNotFoundException,
    utc_now,
    to_naive_utc,
)
from feedback_triage.feedback.application.dto import (
    CsvImportResponse,
    FeedbackCreateRequest,
    FeedbackUpdateRequest,
)
from feedback_triage.feedback.domain import (
    FeedbackFilter,
    derive_sentiment,
    is_negative,
    sentiment_flags,
)
from feedback_triage.shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)


# ========== Repository Interfaces ==========

class IFeedbackRepository(ABC):
    """Interface for feedback data access."""

    @abstractmethod
    async def get_by_id(self, feedback_id: str) -> Optional[Any]:
        """Get feedback by id."""

    @abstractmethod
    async def create(self, data: dict) -> Any:
        """Insert one feedback record."""

    @abstractmethod
    async def create_many(self, records: List[dict]) -> int:
        """Insert several feedback records."""

    @abstractmethod
    async def update(self, feedback: Any, changes: dict) -> Any:
        """Apply field changes to a feedback record."""

    @abstractmethod
    async def delete(self, feedback: Any) -> None:
        """Delete a feedback record and the rows that reference it."""

    @abstractmethod
    async def list(
        self,
        filters: FeedbackFilter,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[Any]:
        """List feedback with filters, newest first."""

    @abstractmethod
    async def list_pending_detection(self, limit: int) -> List[Any]:
        """Negative feedback that issue detection has not analysed yet."""

    @abstractmethod
    async def mark_detected(self, feedback: Any, titles: List[str]) -> None:
        """Record the issue titles detected for a feedback record."""


class IIssueDetector(ABC):
    """Interface for running issue detection on one feedback record."""

    @abstractmethod
    async def detect_from_feedback(self, feedback: Any) -> Any:
        """Analyse a feedback record and return the detection result."""


# ========== Helpers ==========

NON_NULLABLE_FIELDS = {
    "customer_name", "service_type", "review_text", "review_rating", "status", "sentiment",
}


def build_feedback_record(request: FeedbackCreateRequest) -> dict:
    """Turn a validated create request into column values."""
    data = request.model_dump(exclude_none=True)
    sentiment = data.get("sentiment") or derive_sentiment(request.review_rating)
    positive, negative = sentiment_flags(sentiment)
    data["sentiment"] = sentiment
    data["positive_flag"] = positive
    data["negative_flag"] = negative
    if request.created_at is not None:
        data["created_at"] = to_naive_utc(request.created_at)
        data["updated_at"] = data["created_at"]
    return data


def format_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic error into ``field: message; ...``."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        parts.append(f"{location}: {item.get('msg')}" if location else item.get("msg", ""))
    return "; ".join(parts)


# ========== Application Services ==========

class FeedbackService:
    """
    Service for feedback CRUD.

    Negative feedback created through the API is handed to the issue
    detector straight away when automatic detection is enabled.
    """

    def __init__(
        self,
        repository: IFeedbackRepository,
        detector: Optional[IIssueDetector] = None,
        auto_detect: Optional[bool] = None
    ):
        self._repo = repository
        self._detector = detector
        self._auto_detect = settings.auto_detect_issues if auto_detect is None else auto_detect

    async def list_feedback(
        self,
        filters: FeedbackFilter,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[Any]:
        return await self._repo.list(filters, limit=limit, offset=offset)

    async def get_feedback(self, feedback_id: str) -> Any:
        feedback = await self._repo.get_by_id(feedback_id)
        if feedback is None:
            raise ResourceNotFoundException("Feedback", feedback_id)
        return feedback

    async def create_feedback(self, request: FeedbackCreateRequest) -> Any:
        """
        Create a feedback record.

        Sentiment and flags are derived from the rating unless the caller
        supplies a sentiment.

        Raises:
            DuplicateResourceException: If the caller supplied id is already taken
        """
        if request.id and await self._repo.get_by_id(request.id) is not None:
            raise DuplicateResourceException("Feedback", "id", request.id)

        feedback = await self._repo.create(build_feedback_record(request))

        logger.info(
            "Feedback created",
            extra={
                "feedback_id": feedback.id,
                "service_type": feedback.service_type,
                "sentiment": feedback.sentiment
            }
        )

        if self._auto_detect and self._detector is not None and is_negative(
            feedback.review_rating, feedback.sentiment
        ):
            try:
                await self._detector.detect_from_feedback(feedback)
            except ApplicationException as e:
                # The sweep job retries records left with detected_issues NULL
                logger.warning(
                    "Issue detection failed for new feedback",
                    extra={"feedback_id": feedback.id, "error": str(e)}
                )

        return feedback

    async def update_feedback(self, feedback_id: str, request: FeedbackUpdateRequest) -> Any:
        """
        Apply a partial update.

        A new rating re-derives the sentiment unless one is supplied.
        """
        feedback = await self.get_feedback(feedback_id)

        changes = request.model_dump(exclude_unset=True)
        for field in NON_NULLABLE_FIELDS:
            if field in changes and changes[field] is None:
                del changes[field]

        if "review_rating" in changes and "sentiment" not in changes:
            changes["sentiment"] = derive_sentiment(changes["review_rating"])
        if "sentiment" in changes:
            positive, negative = sentiment_flags(changes["sentiment"])
            changes["positive_flag"] = positive
            changes["negative_flag"] = negative

        changes["updated_at"] = utc_now()
        return await self._repo.update(feedback, changes)

    async def delete_feedback(self, feedback_id: str) -> None:
        feedback = await self.get_feedback(feedback_id)
        await self._repo.delete(feedback)
        logger.info("Feedback deleted", extra={"feedback_id": feedback_id})

    async def detect_issues(self, feedback_id: str) -> Any:
        """Run issue detection for one feedback record on demand."""
        if self._detector is None:
            raise ConfigurationException("Issue detection is not configured")
        feedback = await self.get_feedback(feedback_id)
        return await self._detector.detect_from_feedback(feedback)


class CsvImportService:
    """
    Bulk import of feedback from CSV.

    Only the canonical column names are recognised. Each row is validated
    on its own; valid rows are inserted together and invalid rows are
    reported as ``row N: message`` (N is the line number in the file,
    the header being line 1).
    """

    CSV_COLUMNS = (
        "customer_name",
        "customer_phone",
        "customer_email",
        "customer_id",
        "service_type",
        "review_text",
        "review_rating",
        "issue_location",
        "contacted_bank_person",
    )
    REQUIRED_COLUMNS = ("customer_name", "service_type", "review_text", "review_rating")

    def __init__(self, repository: IFeedbackRepository, max_bytes: Optional[int] = None):
        self._repo = repository
        self._max_bytes = max_bytes or settings.csv_max_bytes

    def _decode(self, content: bytes) -> str:
        if not content or not content.strip():
            raise CsvImportException("CSV file is empty")
        if len(content) > self._max_bytes:
            raise CsvImportException(
                f"CSV file exceeds {self._max_bytes} bytes",
                details={"size": len(content)}
            )
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise CsvImportException("CSV file must be UTF-8 encoded")

    def parse(self, content: bytes) -> Tuple[List[dict], List[str]]:
        """
        Parse and validate CSV content.

        Returns:
            (records ready for insert, error messages)

        Raises:
            CsvImportException: If the file is empty, not UTF-8, or lacks
                a required column
        """
        reader = csv.DictReader(io.StringIO(self._decode(content)))
        headers = [(name or "").strip() for name in (reader.fieldnames or [])]
        missing = [column for column in self.REQUIRED_COLUMNS if column not in headers]
        if missing:
            raise CsvImportException(
                f"CSV is missing required columns: {', '.join(missing)}",
                details={"missing_columns": missing}
            )
        reader.fieldnames = headers

        records: List[dict] = []
        errors: List[str] = []
        for row_number, row in enumerate(reader, start=2):
            values = {
                column: (row.get(column) or "").strip()
                for column in self.CSV_COLUMNS
            }
            if not any(values.values()):
                continue
            try:
                request = FeedbackCreateRequest.model_validate(values)
            except ValidationError as e:
                errors.append(f"row {row_number}: {format_validation_error(e)}")
                continue
            records.append(build_feedback_record(request))

        return records, errors

    async def import_csv(self, content: bytes) -> CsvImportResponse:
        with log_latency(logger, "csv_import", size_bytes=len(content or b"")):
            records, errors = self.parse(content)
            imported = await self._repo.create_many(records) if records else 0

        message = f"Imported {imported} feedback records"
        if errors:
            message += f", {len(errors)} rows failed validation"

        logger.info(
            "CSV import complete",
            extra={"imported": imported, "failed": len(errors)}
        )

        return CsvImportResponse(
            imported=imported,
            failed=len(errors),
            errors=errors,
            message=message
        )
