"""
Issue Detection Rules
=====================

Keyword heuristics used when the LLM is unavailable or its reply cannot be
used. Rules are loaded from YAML and hot-reloaded; the defaults below apply
when the file is missing or leaves a section out.
"""

import re
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from feedback_triage.config import SERVICE_TYPES, ServiceType
from feedback_triage.issues.domain.entities import IssueCandidate, normalize_title


DEFAULT_RESOLUTION = (
    "1. Acknowledge customer concern promptly\n"
    "2. Review issue with appropriate department\n"
    "3. Document incident for future reference\n"
    "4. Follow standard escalation procedures\n"
    "5. Provide regular updates to customer on resolution progress"
)


class DetectionRule(BaseModel):
    """A keyword rule: any keyword found as a whole word triggers the issue."""
    name: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    keywords: List[str] = Field(..., min_length=1)
    confidence: float = Field(default=0.6, ge=0.0, le=1.0)
    resolution: str = DEFAULT_RESOLUTION

    @field_validator("keywords")
    @classmethod
    def lower_keywords(cls, v: List[str]) -> List[str]:
        """Keywords are matched against lower-cased text."""
        keywords = [k.strip().lower() for k in v if k and k.strip()]
        if not keywords:
            raise ValueError("rule needs at least one keyword")
        return keywords

    def matches(self, text: str) -> bool:
        return any(
            re.search(rf"\b{re.escape(keyword)}\b", text)
            for keyword in self.keywords
        )


class ServiceFallback(BaseModel):
    """Issue reported for a service type when no keyword rule matches."""
    title: str = Field(..., min_length=1)
    description: str = ""
    confidence: float = Field(default=0.6, ge=0.0, le=1.0)
    resolution: str = DEFAULT_RESOLUTION


def _default_rules() -> List[DetectionRule]:
    return [
        DetectionRule(
            name="minimum_balance",
            title="Minimum balance requirements",
            description="Customer is unhappy about account balance rules or fees.",
            keywords=["balance", "minimum"],
            resolution=(
                "1. Review account terms and notify customers of changes in advance\n"
                "2. Provide clear communication about minimum balance requirements\n"
                "3. Offer alternative account types with lower balance requirements\n"
                "4. Implement grace period for existing customers\n"
                "5. Provide financial counseling to help customers maintain required balances"
            ),
        ),
        DetectionRule(
            name="long_wait",
            title="Long waiting times",
            description="Customer waited too long to be served.",
            keywords=["queue", "wait", "waiting", "long"],
            resolution=(
                "1. Implement queue management system during peak hours\n"
                "2. Add more service counters if possible\n"
                "3. Train staff on efficient customer service\n"
                "4. Consider appointment-based services for complex transactions\n"
                "5. Provide estimated wait times to customers"
            ),
        ),
        DetectionRule(
            name="staff_service",
            title="Poor customer service",
            description="Customer reports unhelpful or unprofessional staff.",
            keywords=["staff", "service"],
            resolution=(
                "1. Provide additional customer service training to staff\n"
                "2. Review and update service protocols\n"
                "3. Implement customer feedback system\n"
                "4. Conduct regular staff performance evaluations\n"
                "5. Recognize and reward excellent service"
            ),
        ),
        DetectionRule(
            name="accessibility",
            title="Branch accessibility",
            description="Customer had trouble physically accessing bank facilities.",
            keywords=["accessibility", "accessible", "wheelchair", "elderly", "disabled", "stairs"],
            resolution=(
                "1. Conduct accessibility audit of branch facilities\n"
                "2. Install ramps and accessible entrances where needed\n"
                "3. Provide priority service counters for elderly and disabled customers\n"
                "4. Train staff on accessibility assistance protocols\n"
                "5. Implement digital alternatives for common transactions"
            ),
        ),
    ]


def _default_fallbacks() -> Dict[str, ServiceFallback]:
    return {
        ServiceType.ATM: ServiceFallback(
            title="ATM malfunction",
            description="Customer could not complete a transaction at an ATM.",
            resolution=(
                "1. Check ATM operational status and error logs\n"
                "2. Verify cash availability and card reader functionality\n"
                "3. If machine is faulty, place 'Out of Order' sign\n"
                "4. Direct customer to nearest working ATM\n"
                "5. Follow up with technical team for repair if needed"
            ),
        ),
        ServiceType.ONLINE_BANKING: ServiceFallback(
            title="Online banking access problems",
            description="Customer could not use online banking as expected.",
            resolution=(
                "1. Verify customer's login credentials and account status\n"
                "2. Check for any ongoing system maintenance\n"
                "3. Guide customer through browser cache clearing\n"
                "4. Suggest trying different browser or device\n"
                "5. Escalate to IT support if issue persists"
            ),
        ),
        ServiceType.CORE_BANKING: ServiceFallback(
            title="Core banking system disruption",
            description="Customer was affected by a core banking system problem.",
            resolution=(
                "1. Check core banking system status dashboard\n"
                "2. Document error details and customer information\n"
                "3. Contact technical operations team immediately\n"
                "4. Provide estimated resolution time to customer\n"
                "5. Follow up with customer once issue is resolved"
            ),
        ),
    }


class DetectionRuleSet(BaseModel):
    """
    Keyword rules loaded from YAML.

    Rules are evaluated in order; the first match wins.
    """
    rules: List[DetectionRule] = Field(default_factory=_default_rules)
    service_fallbacks: Dict[str, ServiceFallback] = Field(default_factory=_default_fallbacks)
    default_resolution: str = DEFAULT_RESOLUTION

    @field_validator("service_fallbacks")
    @classmethod
    def fill_fallbacks(cls, v: Dict[str, ServiceFallback]) -> Dict[str, ServiceFallback]:
        """Every service type gets a fallback, even if the file omits it."""
        defaults = _default_fallbacks()
        for service_type in SERVICE_TYPES:
            if service_type not in v:
                v[service_type] = defaults[service_type]
        return v

    def match_rule(self, text: str) -> Optional[DetectionRule]:
        """First rule whose keywords appear in ``text``."""
        lowered = (text or "").lower()
        for rule in self.rules:
            if rule.matches(lowered):
                return rule
        return None

    def find_by_title(self, title: str) -> Optional[DetectionRule]:
        wanted = normalize_title(title)
        for rule in self.rules:
            if normalize_title(rule.title) == wanted:
                return rule
        return None


class KeywordIssueDetector:
    """
    Pure keyword heuristics over a rule set.

    Stateless apart from the rule set it is given.
    """

    def __init__(self, rule_set: DetectionRuleSet):
        self._rules = rule_set

    def detect(self, review_text: str, service_type: str) -> Optional[IssueCandidate]:
        """
        Derive an issue candidate from review text.

        Returns the first matching keyword rule's issue, else the service
        type's fallback issue, else None for an unknown service type.
        """
        rule = self._rules.match_rule(review_text)
        if rule is not None:
            return IssueCandidate(
                title=rule.title,
                description=rule.description or review_text,
                category=service_type,
                confidence_score=rule.confidence,
                source="rules",
                rule_name=rule.name,
            )

        fallback = self._rules.service_fallbacks.get(service_type)
        if fallback is None:
            return None
        return IssueCandidate(
            title=fallback.title,
            description=fallback.description or review_text,
            category=service_type,
            confidence_score=fallback.confidence,
            source="rules",
            rule_name=f"fallback:{service_type}",
        )

    def resolution_for(
        self,
        title: str,
        category: Optional[str] = None,
        text: Optional[str] = None
    ) -> str:
        """
        Template resolution for an issue.

        Looks for a rule by title, then by keywords in the title and text,
        then the category's fallback, then the default template.
        """
        rule = self._rules.find_by_title(title)
        if rule is None:
            rule = self._rules.match_rule(f"{title} {text or ''}")
        if rule is not None:
            return rule.resolution

        if category:
            for fallback in self._rules.service_fallbacks.values():
                if normalize_title(fallback.title) == normalize_title(title):
                    return fallback.resolution
            fallback = self._rules.service_fallbacks.get(category)
            if fallback is not None:
                return fallback.resolution

        return self._rules.default_resolution
