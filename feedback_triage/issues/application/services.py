"""
Issues Application Services
============================

Application services for issue detection, resolution drafting and the
pending issue review workflow.

Orchestrates business logic between domain rules, the LLM and repositories.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from feedback_triage.config import DetectionOutcome, IssueStatus, settings
from feedback_triage.core import (
    IssueWorkflowException,
    LLMException,
    ResourceNotFoundException,
    utc_now,
)
from feedback_triage.feedback.application import IFeedbackRepository
from feedback_triage.feedback.domain import is_negative
from feedback_triage.issues.application.dto import (
    ApprovePendingIssueRequest,
    IssueApproveRequest,
    IssueCreateRequest,
    IssueRejectRequest,
    IssueUpdateRequest,
    MergePendingIssueRequest,
    PendingIssueCreateRequest,
    PendingIssueUpdateRequest,
    RejectPendingIssueRequest,
    ResolutionCreateRequest,
    ResolutionUpdateRequest,
)
from feedback_triage.issues.domain import (
    DetectionResult,
    DetectionRuleSet,
    IssueCandidate,
    IssuePromptBuilder,
    KeywordIssueDetector,
    ResolutionDraft,
    extract_json_object,
    normalize_category,
    normalize_title,
)
from feedback_triage.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

RESOLUTION_PENDING = "Resolution pending"


# ========== Repository Interfaces ==========

class IIssueRepository(ABC):
    """Interface for issue data access."""

    @abstractmethod
    async def get_by_id(self, issue_id: str) -> Optional[Any]:
        """Get issue by id."""

    @abstractmethod
    async def list(self, status: Optional[str] = None) -> List[Any]:
        """List issues, newest first."""

    @abstractmethod
    async def create(self, data: dict) -> Any:
        """Insert an issue."""

    @abstractmethod
    async def update(self, issue: Any, changes: dict) -> Any:
        """Apply field changes to an issue."""

    @abstractmethod
    async def delete(self, issue: Any) -> None:
        """Delete an issue and its feedback links."""

    @abstractmethod
    async def find_approved_by_title(self, title: str, category: str) -> Optional[Any]:
        """Approved issue whose normalized title and category match."""

    @abstractmethod
    async def link_feedback(self, feedback_id: str, issue_id: str) -> bool:
        """Link feedback to an issue; False when the link already exists."""


class IPendingIssueRepository(ABC):
    """Interface for pending issue data access."""

    @abstractmethod
    async def get_by_id(self, pending_id: str) -> Optional[Any]:
        """Get pending issue by id."""

    @abstractmethod
    async def list(self) -> List[Any]:
        """List pending issues, newest first."""

    @abstractmethod
    async def create(self, data: dict) -> Any:
        """Insert a pending issue."""

    @abstractmethod
    async def update(self, pending: Any, changes: dict) -> Any:
        """Apply field changes to a pending issue."""

    @abstractmethod
    async def delete(self, pending: Any) -> None:
        """Delete a pending issue and its resolutions."""

    @abstractmethod
    async def find_by_title(self, title: str, category: str) -> Optional[Any]:
        """Pending issue whose normalized title and category match."""

    @abstractmethod
    async def list_resolutions(self, pending_ids: List[str]) -> Dict[str, List[Any]]:
        """Resolutions grouped by pending issue id, oldest first."""

    @abstractmethod
    async def add_resolution(
        self,
        pending_id: str,
        resolution_text: str,
        confidence_score: Optional[float]
    ) -> Any:
        """Attach a resolution to a pending issue."""

    @abstractmethod
    async def get_resolution(self, resolution_id: str) -> Optional[Any]:
        """Get pending resolution by id."""

    @abstractmethod
    async def update_resolution(self, resolution: Any, changes: dict) -> Any:
        """Apply field changes to a pending resolution."""

    @abstractmethod
    async def feedback_summaries(self, feedback_ids: List[str]) -> Dict[str, Any]:
        """Source feedback records keyed by id."""


class IRejectedIssueRepository(ABC):
    """Interface for rejected issue data access."""

    @abstractmethod
    async def get_by_id(self, rejected_id: str) -> Optional[Any]:
        """Get rejected issue by id."""

    @abstractmethod
    async def list(self) -> List[Any]:
        """List rejected issues, newest first."""

    @abstractmethod
    async def create(self, data: dict) -> Any:
        """Archive a rejected issue."""

    @abstractmethod
    async def delete(self, rejected: Any) -> None:
        """Delete a rejected issue."""

    @abstractmethod
    async def find_by_title(self, title: str, category: str) -> Optional[Any]:
        """Rejected issue whose normalized title and category match."""


class ILLMClient(ABC):
    """Interface for LLM operations."""

    @abstractmethod
    async def chat_completion(
        self,
        messages: List[dict],
        temperature: float,
        max_tokens: int,
        operation: str = "chat_completion"
    ) -> Any:
        """Generate chat completion."""


class IRuleSetProvider(ABC):
    """Interface for access to the current keyword rules."""

    @property
    @abstractmethod
    def rule_set(self) -> DetectionRuleSet:
        """Current rule set."""


# ========== Application Services ==========

class ResolutionService:
    """
    Drafts resolutions for issues.

    Uses the LLM when available; otherwise, or when the call fails, the
    matching keyword rule's template.
    """

    TEMPERATURE = 0.4
    MAX_TOKENS = 600
    DEFAULT_CONFIDENCE = 0.85
    TEXT_REPLY_CONFIDENCE = 0.7
    TEMPLATE_CONFIDENCE = 0.5

    def __init__(self, llm_client: Optional[ILLMClient], rules: IRuleSetProvider):
        self._llm = llm_client
        self._rules = rules

    def template(self, title: str, category: Optional[str], text: Optional[str] = None) -> ResolutionDraft:
        detector = KeywordIssueDetector(self._rules.rule_set)
        return ResolutionDraft(
            resolution_text=detector.resolution_for(title, category, text),
            confidence_score=self.TEMPLATE_CONFIDENCE,
            source="template"
        )

    async def draft(
        self,
        title: str,
        description: Optional[str],
        category: str,
        feedback_text: Optional[str] = None
    ) -> ResolutionDraft:
        """
        Draft a resolution for an issue.

        A JSON reply supplies text and confidence (0.85 when missing); a
        plain text reply is used verbatim with confidence 0.7.
        """
        if self._llm is None:
            return self.template(title, category, feedback_text)

        prompt = IssuePromptBuilder.build_resolution_prompt(
            title, category, description or "", feedback_text
        )
        messages = [
            {"role": "system", "content": IssuePromptBuilder.get_system_prompt()},
            {"role": "user", "content": prompt}
        ]

        try:
            response = await self._llm.chat_completion(
                messages=messages,
                temperature=self.TEMPERATURE,
                max_tokens=self.MAX_TOKENS,
                operation="resolution"
            )
        except LLMException as e:
            logger.warning(
                "Resolution drafting failed, using template",
                extra={"issue_title": title, "error": str(e)}
            )
            return self.template(title, category, feedback_text)

        content = (response.content or "").strip()
        try:
            data = extract_json_object(content)
        except ValueError:
            data = None

        if data and isinstance(data.get("resolution_text"), str) and data["resolution_text"].strip():
            try:
                confidence = float(data.get("confidence_score") or self.DEFAULT_CONFIDENCE)
            except (TypeError, ValueError):
                confidence = self.DEFAULT_CONFIDENCE
            return ResolutionDraft(
                resolution_text=data["resolution_text"].strip(),
                confidence_score=min(max(confidence, 0.0), 1.0),
                source="llm"
            )

        if content:
            return ResolutionDraft(
                resolution_text=content,
                confidence_score=self.TEXT_REPLY_CONFIDENCE,
                source="llm_text"
            )

        return self.template(title, category, feedback_text)


class IssueDetectionService:
    """
    Detects issues in negative feedback and files them for review.

    Flow per feedback record:
    1. Skip non-negative feedback
    2. Extract a candidate (LLM first, keyword rules as fallback)
    3. Drop candidates below the confidence floor
    4. Deduplicate against approved, pending and rejected issues
    5. Record the titles on the feedback
    """

    TEMPERATURE = 0.3
    MAX_TOKENS = 600
    DEFAULT_LLM_CONFIDENCE = 0.7

    def __init__(
        self,
        feedback_repository: IFeedbackRepository,
        issue_repository: IIssueRepository,
        pending_repository: IPendingIssueRepository,
        rejected_repository: IRejectedIssueRepository,
        rules: IRuleSetProvider,
        resolution_service: ResolutionService,
        llm_client: Optional[ILLMClient] = None,
        min_confidence: Optional[float] = None
    ):
        self._feedback_repo = feedback_repository
        self._issue_repo = issue_repository
        self._pending_repo = pending_repository
        self._rejected_repo = rejected_repository
        self._rules = rules
        self._resolutions = resolution_service
        self._llm = llm_client
        self._min_confidence = (
            settings.min_issue_confidence if min_confidence is None else min_confidence
        )

    async def extract_candidate(self, feedback: Any) -> Optional[IssueCandidate]:
        """
        Extract at most one issue candidate from a feedback record.

        An LLM reply of ``null`` (or one with no JSON object) means the
        model found no issue. LLM errors, an open circuit and malformed
        replies fall back to the keyword rules.
        """
        if self._llm is not None:
            try:
                return await self._extract_with_llm(feedback)
            except LLMException as e:
                logger.warning(
                    "LLM issue extraction failed, using keyword rules",
                    extra={"feedback_id": feedback.id, "error": str(e)}
                )
            except (ValueError, TypeError) as e:
                logger.warning(
                    "Unusable LLM reply, using keyword rules",
                    extra={"feedback_id": feedback.id, "error": str(e)}
                )

        detector = KeywordIssueDetector(self._rules.rule_set)
        return detector.detect(feedback.review_text, feedback.service_type)

    async def _extract_with_llm(self, feedback: Any) -> Optional[IssueCandidate]:
        prompt = IssuePromptBuilder.build_detection_prompt(
            feedback.service_type, feedback.review_rating, feedback.review_text
        )
        messages = [
            {"role": "system", "content": IssuePromptBuilder.get_system_prompt()},
            {"role": "user", "content": prompt}
        ]

        response = await self._llm.chat_completion(
            messages=messages,
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
            operation="issue_detection"
        )

        data = extract_json_object(response.content)
        if data is None:
            return None

        for key in ("title", "description", "category"):
            if data.get(key) is not None and not isinstance(data[key], str):
                raise ValueError(f"LLM reply field '{key}' is not a string")

        confidence = data.get("confidence_score")
        return IssueCandidate(
            title=data.get("title") or "",
            description=data.get("description") or feedback.review_text,
            category=normalize_category(data.get("category"), feedback.service_type),
            confidence_score=self.DEFAULT_LLM_CONFIDENCE if confidence is None else float(confidence),
            source="llm"
        )

    async def detect_from_feedback(self, feedback: Any) -> DetectionResult:
        """
        Run the detection flow for one feedback record.

        Returns:
            DetectionResult with the outcome and the affected record ids
        """
        if not is_negative(feedback.review_rating, feedback.sentiment):
            await self._feedback_repo.mark_detected(feedback, [])
            return DetectionResult(feedback_id=feedback.id, outcome=DetectionOutcome.SKIPPED)

        candidate = await self.extract_candidate(feedback)

        if candidate is not None and candidate.confidence_score < self._min_confidence:
            logger.info(
                "Issue candidate below confidence floor",
                extra={
                    "feedback_id": feedback.id,
                    "issue_title": candidate.title,
                    "confidence_score": candidate.confidence_score
                }
            )
            candidate = None

        if candidate is None:
            await self._feedback_repo.mark_detected(feedback, [])
            return DetectionResult(feedback_id=feedback.id, outcome=DetectionOutcome.NO_ISSUE)

        result = await self._file_candidate(feedback, candidate)
        await self._feedback_repo.mark_detected(feedback, result.detected_issues)

        logger.info(
            "Issue detection complete",
            extra={
                "feedback_id": feedback.id,
                "outcome": result.outcome,
                "issue_title": candidate.title,
                "candidate_source": candidate.source
            }
        )
        return result

    @staticmethod
    def _already_counted(feedback: Any, title: str) -> bool:
        """True when an earlier detection run filed this feedback under ``title``."""
        wanted = normalize_title(title)
        return any(normalize_title(seen) == wanted for seen in feedback.detected_issues or [])

    async def _file_candidate(self, feedback: Any, candidate: IssueCandidate) -> DetectionResult:
        issue = await self._issue_repo.find_approved_by_title(candidate.title, candidate.category)
        if issue is not None:
            linked = await self._issue_repo.link_feedback(feedback.id, issue.id)
            if linked and not self._already_counted(feedback, issue.title):
                await self._issue_repo.update(issue, {"feedback_count": issue.feedback_count + 1})
            return DetectionResult(
                feedback_id=feedback.id,
                outcome=DetectionOutcome.LINKED,
                detected_issues=[issue.title],
                issue_id=issue.id,
                candidate=candidate
            )

        pending = await self._pending_repo.find_by_title(candidate.title, candidate.category)
        if pending is not None:
            counted = (
                pending.detected_from_feedback_id == feedback.id
                or self._already_counted(feedback, pending.title)
            )
            if not counted:
                await self._pending_repo.update(pending, {"feedback_count": pending.feedback_count + 1})
            return DetectionResult(
                feedback_id=feedback.id,
                outcome=DetectionOutcome.MERGED,
                detected_issues=[pending.title],
                pending_issue_id=pending.id,
                candidate=candidate
            )

        rejected = await self._rejected_repo.find_by_title(candidate.title, candidate.category)
        if rejected is not None:
            return DetectionResult(
                feedback_id=feedback.id,
                outcome=DetectionOutcome.SUPPRESSED,
                detected_issues=[candidate.title],
                rejected_issue_id=rejected.id,
                candidate=candidate
            )

        pending = await self._pending_repo.create({
            "title": candidate.title,
            "description": candidate.description,
            "category": candidate.category,
            "confidence_score": candidate.confidence_score,
            "feedback_count": 1,
            "detected_from_feedback_id": feedback.id,
        })
        draft = await self._resolutions.draft(
            candidate.title, candidate.description, candidate.category, feedback.review_text
        )
        await self._pending_repo.add_resolution(pending.id, draft.resolution_text, draft.confidence_score)

        return DetectionResult(
            feedback_id=feedback.id,
            outcome=DetectionOutcome.CREATED,
            detected_issues=[candidate.title],
            pending_issue_id=pending.id,
            candidate=candidate
        )

    async def sweep(self, batch_size: Optional[int] = None) -> Dict[str, int]:
        """
        Run detection over negative feedback not analysed yet.

        Returns:
            Count of records per outcome
        """
        batch = await self._feedback_repo.list_pending_detection(
            batch_size or settings.detection_batch_size
        )
        counts: Dict[str, int] = {}
        for feedback in batch:
            result = await self.detect_from_feedback(feedback)
            counts[result.outcome] = counts.get(result.outcome, 0) + 1
        return counts


@dataclass
class PendingIssueView:
    """A pending issue with its resolutions and source feedback."""
    issue: Any
    resolutions: List[Any] = field(default_factory=list)
    feedback: Optional[Any] = None


class PendingIssueService:
    """
    Review workflow for pending issues.

    Approve turns a pending issue into an approved issue, reject archives
    it, merge folds it into an existing issue. All three delete the
    pending issue.
    """

    def __init__(
        self,
        pending_repository: IPendingIssueRepository,
        issue_repository: IIssueRepository,
        rejected_repository: IRejectedIssueRepository,
        feedback_repository: IFeedbackRepository,
        resolution_service: ResolutionService
    ):
        self._pending_repo = pending_repository
        self._issue_repo = issue_repository
        self._rejected_repo = rejected_repository
        self._feedback_repo = feedback_repository
        self._resolutions = resolution_service

    async def _get(self, pending_id: str) -> Any:
        pending = await self._pending_repo.get_by_id(pending_id)
        if pending is None:
            raise ResourceNotFoundException("Pending issue", pending_id)
        return pending

    async def _views(self, issues: List[Any]) -> List[PendingIssueView]:
        ids = [issue.id for issue in issues]
        resolutions = await self._pending_repo.list_resolutions(ids)
        feedback_ids = [i.detected_from_feedback_id for i in issues if i.detected_from_feedback_id]
        feedback = await self._pending_repo.feedback_summaries(feedback_ids)
        return [
            PendingIssueView(
                issue=issue,
                resolutions=resolutions.get(issue.id, []),
                feedback=feedback.get(issue.detected_from_feedback_id)
            )
            for issue in issues
        ]

    async def list_pending(self) -> List[PendingIssueView]:
        return await self._views(await self._pending_repo.list())

    async def get_pending(self, pending_id: str) -> PendingIssueView:
        views = await self._views([await self._get(pending_id)])
        return views[0]

    async def create_pending(self, request: PendingIssueCreateRequest) -> PendingIssueView:
        """Create a pending issue by hand; a resolution is drafted if none is given."""
        feedback_text = None
        if request.detected_from_feedback_id:
            source = await self._feedback_repo.get_by_id(request.detected_from_feedback_id)
            if source is None:
                raise ResourceNotFoundException("Feedback", request.detected_from_feedback_id)
            feedback_text = source.review_text

        pending = await self._pending_repo.create(
            request.model_dump(exclude={"resolution_text"})
        )

        if request.resolution_text:
            await self._pending_repo.add_resolution(
                pending.id, request.resolution_text, request.confidence_score
            )
        else:
            draft = await self._resolutions.draft(
                pending.title, pending.description, pending.category, feedback_text
            )
            await self._pending_repo.add_resolution(
                pending.id, draft.resolution_text, draft.confidence_score
            )

        return await self.get_pending(pending.id)

    async def update_pending(
        self,
        pending_id: str,
        request: PendingIssueUpdateRequest
    ) -> PendingIssueView:
        pending = await self._get(pending_id)
        changes = {k: v for k, v in request.model_dump(exclude_unset=True).items()
                   if v is not None or k in ("description", "confidence_score")}
        changes["updated_at"] = utc_now()
        await self._pending_repo.update(pending, changes)
        return await self.get_pending(pending_id)

    async def add_resolution(self, pending_id: str, request: ResolutionCreateRequest) -> Any:
        await self._get(pending_id)
        return await self._pending_repo.add_resolution(
            pending_id, request.resolution_text, request.confidence_score
        )

    async def update_resolution(self, resolution_id: str, request: ResolutionUpdateRequest) -> Any:
        resolution = await self._pending_repo.get_resolution(resolution_id)
        if resolution is None:
            raise ResourceNotFoundException("Pending resolution", resolution_id)
        return await self._pending_repo.update_resolution(
            resolution, request.model_dump(exclude_unset=True)
        )

    async def generate_resolution(self, pending_id: str) -> Any:
        """Draft a fresh resolution and attach it to the pending issue."""
        pending = await self._get(pending_id)
        feedback_text = None
        if pending.detected_from_feedback_id:
            source = await self._feedback_repo.get_by_id(pending.detected_from_feedback_id)
            feedback_text = source.review_text if source else None

        draft = await self._resolutions.draft(
            pending.title, pending.description, pending.category, feedback_text
        )
        return await self._pending_repo.add_resolution(
            pending.id, draft.resolution_text, draft.confidence_score
        )

    async def approve(self, pending_id: str, request: ApprovePendingIssueRequest) -> Any:
        """
        Approve a pending issue.

        Edited title/description/resolution win over the detected values;
        the resolution falls back to the first drafted one.
        """
        pending = await self._get(pending_id)
        resolutions = (await self._pending_repo.list_resolutions([pending.id])).get(pending.id, [])
        resolution = (
            request.resolution
            or (resolutions[0].resolution_text if resolutions else None)
            or RESOLUTION_PENDING
        )

        issue = await self._issue_repo.create({
            "title": request.title or pending.title,
            "description": request.description or pending.description,
            "category": pending.category,
            "resolution": resolution,
            "status": IssueStatus.APPROVED,
            "confidence_score": pending.confidence_score,
            "feedback_count": pending.feedback_count,
            "approved_by": request.approved_by,
            "approved_date": utc_now(),
        })

        if pending.detected_from_feedback_id:
            await self._issue_repo.link_feedback(pending.detected_from_feedback_id, issue.id)

        await self._pending_repo.delete(pending)

        logger.info(
            "Pending issue approved",
            extra={"pending_issue_id": pending_id, "issue_id": issue.id, "approved_by": request.approved_by}
        )
        return issue

    async def reject(self, pending_id: str, request: RejectPendingIssueRequest) -> Any:
        """Archive a pending issue in rejected_issues and delete it."""
        pending = await self._get(pending_id)

        rejected = await self._rejected_repo.create({
            "original_title": pending.title,
            "original_description": pending.description,
            "category": pending.category,
            "rejection_reason": request.reason,
            "rejected_by": request.rejected_by,
            "original_pending_issue_id": pending.id,
        })
        await self._pending_repo.delete(pending)

        logger.info(
            "Pending issue rejected",
            extra={"pending_issue_id": pending_id, "rejected_by": request.rejected_by}
        )
        return rejected

    async def merge(self, pending_id: str, request: MergePendingIssueRequest) -> Any:
        """
        Fold a pending issue into an existing issue.

        Raises:
            ResourceNotFoundException: If either issue is missing
            IssueWorkflowException: If the target issue was rejected
        """
        pending = await self._get(pending_id)
        target = await self._issue_repo.get_by_id(request.target_issue_id)
        if target is None:
            raise ResourceNotFoundException("Issue", request.target_issue_id)
        if target.status == IssueStatus.REJECTED:
            raise IssueWorkflowException(
                "merge into issue",
                "the target issue was rejected",
                details={"target_issue_id": target.id}
            )

        if pending.detected_from_feedback_id:
            await self._issue_repo.link_feedback(pending.detected_from_feedback_id, target.id)

        target = await self._issue_repo.update(target, {
            "feedback_count": target.feedback_count + pending.feedback_count,
            "updated_at": utc_now(),
        })
        await self._pending_repo.delete(pending)

        logger.info(
            "Pending issue merged",
            extra={
                "pending_issue_id": pending_id,
                "issue_id": target.id,
                "merged_by": request.merged_by
            }
        )
        return target


class IssueService:
    """CRUD and status changes for the master issue list."""

    def __init__(self, issue_repository: IIssueRepository):
        self._repo = issue_repository

    async def list_issues(self, status: Optional[str] = None) -> List[Any]:
        return await self._repo.list(status)

    async def get_issue(self, issue_id: str) -> Any:
        issue = await self._repo.get_by_id(issue_id)
        if issue is None:
            raise ResourceNotFoundException("Issue", issue_id)
        return issue

    async def create_issue(self, request: IssueCreateRequest) -> Any:
        data = request.model_dump()
        if data["status"] == IssueStatus.APPROVED:
            data["approved_date"] = utc_now()
        return await self._repo.create(data)

    async def update_issue(self, issue_id: str, request: IssueUpdateRequest) -> Any:
        issue = await self.get_issue(issue_id)
        changes = {k: v for k, v in request.model_dump(exclude_unset=True).items()
                   if v is not None or k in ("description", "resolution", "confidence_score")}
        changes["updated_at"] = utc_now()
        return await self._repo.update(issue, changes)

    async def approve_issue(self, issue_id: str, request: IssueApproveRequest) -> Any:
        issue = await self.get_issue(issue_id)
        changes = {
            "status": IssueStatus.APPROVED,
            "approved_by": request.approved_by,
            "approved_date": utc_now(),
            "updated_at": utc_now(),
        }
        if request.resolution:
            changes["resolution"] = request.resolution
        return await self._repo.update(issue, changes)

    async def reject_issue(self, issue_id: str, request: IssueRejectRequest) -> Any:
        issue = await self.get_issue(issue_id)
        logger.info(
            "Issue rejected",
            extra={"issue_id": issue_id, "rejected_by": request.rejected_by, "reason": request.reason}
        )
        return await self._repo.update(issue, {
            "status": IssueStatus.REJECTED,
            "updated_at": utc_now(),
        })

    async def delete_issue(self, issue_id: str) -> None:
        issue = await self.get_issue(issue_id)
        await self._repo.delete(issue)


class RejectedIssueService:
    """Read and purge the rejected issue archive."""

    def __init__(self, rejected_repository: IRejectedIssueRepository):
        self._repo = rejected_repository

    async def list_rejected(self) -> List[Any]:
        return await self._repo.list()

    async def get_rejected(self, rejected_id: str) -> Any:
        rejected = await self._repo.get_by_id(rejected_id)
        if rejected is None:
            raise ResourceNotFoundException("Rejected issue", rejected_id)
        return rejected

    async def delete_rejected(self, rejected_id: str) -> None:
        rejected = await self.get_rejected(rejected_id)
        await self._repo.delete(rejected)
