"""
Issues Domain Entities
======================

Domain objects for issue detection and resolution drafting.

Contains pure Python business objects; no database or HTTP concerns.
"""

import json
import re
import string
from dataclasses import dataclass, field
from typing import List, Optional

from feedback_triage.config import SERVICE_TYPES


@dataclass
class IssueCandidate:
    """
    A problem extracted from one negative feedback record.

    Produced either by the LLM or by the keyword rules; ``rule_name`` is
    set only for the latter.
    """
    title: str
    description: str
    category: str
    confidence_score: float
    source: str = "llm"  # "llm" or "rules"
    rule_name: Optional[str] = None

    def __post_init__(self):
        """Validate and clamp the candidate."""
        self.title = (self.title or "").strip()
        self.description = (self.description or "").strip()
        if not self.title:
            raise ValueError("Issue title must not be empty")
        self.confidence_score = min(max(float(self.confidence_score), 0.0), 1.0)

    @property
    def normalized_title(self) -> str:
        return normalize_title(self.title)


@dataclass
class ResolutionDraft:
    """Suggested remediation for an issue."""
    resolution_text: str
    confidence_score: float
    source: str = "llm"  # "llm", "llm_text" or "template"


@dataclass
class DetectionResult:
    """What issue detection did with one feedback record."""
    feedback_id: str
    outcome: str
    detected_issues: List[str] = field(default_factory=list)
    pending_issue_id: Optional[str] = None
    issue_id: Optional[str] = None
    rejected_issue_id: Optional[str] = None
    candidate: Optional[IssueCandidate] = None


_PUNCTUATION = re.compile(f"[{re.escape(string.punctuation)}]")
_WHITESPACE = re.compile(r"\s+")


def normalize_title(title: str) -> str:
    """
    Normalize an issue title for duplicate matching.

    Lower-cases, strips punctuation and collapses whitespace, so
    "ATM  malfunction!" and "atm malfunction" compare equal.
    """
    text = _PUNCTUATION.sub(" ", (title or "").lower())
    return _WHITESPACE.sub(" ", text).strip()


def normalize_category(category: Optional[str], fallback: str) -> str:
    """Map an LLM category onto a known service type, else ``fallback``."""
    if category and isinstance(category, str):
        wanted = category.replace(" ", "").lower()
        for service_type in SERVICE_TYPES:
            if service_type.lower() == wanted:
                return service_type
    return fallback


_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json_object(content: str) -> Optional[dict]:
    """
    Pull the JSON object out of an LLM reply.

    Takes everything from the first ``{`` to the last ``}``, which also
    copes with markdown fences and chatter around the object.

    Returns:
        The parsed object, or None when the reply holds no object
        (e.g. the model answered ``null``)

    Raises:
        ValueError: If an object is present but is not valid JSON
    """
    match = _JSON_OBJECT.search(content or "")
    if not match:
        return None
    data = json.loads(match.group(0))
    if not isinstance(data, dict):
        raise ValueError("LLM reply JSON is not an object")
    return data


class IssuePromptBuilder:
    """
    Builds prompts for issue detection and resolution drafting.

    All prompt wording lives here.
    """

    SYSTEM_PROMPT = (
        "You are an analyst for a retail bank. You read customer feedback and "
        "identify operational issues that bank staff should fix. "
        "Respond with JSON only."
    )

    @classmethod
    def build_detection_prompt(cls, service_type: str, rating: int, review_text: str) -> str:
        """Build the issue extraction prompt for one feedback record."""
        return f"""Analyze this bank customer feedback and identify potential issues:

Service Type: {service_type}
Rating: {rating}/5
Feedback: "{review_text}"

If there is a legitimate issue, extract the following information in JSON format:
{{
  "title": "Brief issue title",
  "description": "Detailed description of the issue",
  "category": "Category (ATM, OnlineBanking, CoreBanking)",
  "confidence_score": decimal between 0 and 1
}}

If there is no legitimate issue, return null."""

    @classmethod
    def build_resolution_prompt(
        cls,
        title: str,
        category: str,
        description: str,
        feedback_text: Optional[str] = None
    ) -> str:
        """Build the resolution drafting prompt for an issue."""
        feedback_line = f"Original Feedback: {feedback_text}\n" if feedback_text else ""
        return f"""Generate a resolution recommendation for this banking issue:

Issue Title: {title}
Category: {category}
Description: {description}
{feedback_line}
Provide a detailed step-by-step resolution in a professional tone suitable for bank staff.
The resolution should be actionable, specific, and follow best practices in banking.
Format the response as JSON:
{{
  "resolution_text": "The step-by-step resolution text",
  "confidence_score": decimal between 0 and 1 representing confidence in this resolution
}}"""

    @classmethod
    def get_system_prompt(cls) -> str:
        return cls.SYSTEM_PROMPT
