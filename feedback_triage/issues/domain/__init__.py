"""
Issues Domain Layer
===================

Contains:
- Entities: IssueCandidate, ResolutionDraft, DetectionResult
- Rules: Keyword heuristics and their YAML schema
- Prompt building for the LLM

This layer is framework-agnostic and contains pure business logic.
"""

from feedback_triage.issues.domain.entities import (
    IssueCandidate,
    ResolutionDraft,
    DetectionResult,
    IssuePromptBuilder,
    normalize_title,
    normalize_category,
    extract_json_object,
)
from feedback_triage.issues.domain.rules import (
    DEFAULT_RESOLUTION,
    DetectionRule,
    ServiceFallback,
    DetectionRuleSet,
    KeywordIssueDetector,
)

__all__ = [
    "IssueCandidate",
    "ResolutionDraft",
    "DetectionResult",
    "IssuePromptBuilder",
    "normalize_title",
    "normalize_category",
    "extract_json_object",
    "DEFAULT_RESOLUTION",
    "DetectionRule",
    "ServiceFallback",
    "DetectionRuleSet",
    "KeywordIssueDetector",
]
