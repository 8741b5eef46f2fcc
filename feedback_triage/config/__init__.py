"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from pathlib import Path
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="feedback-triage", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: str = Field(default="json", description="json or text")
    slow_request_ms: int = Field(
        default=2000,
        description="Requests slower than this are logged as warnings",
        ge=1
    )

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3001, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="mysql+aiomysql://root@localhost:3306/feedback_db",
        description="MySQL connection URL (async)"
    )
    db_pool_size: int = Field(default=10, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== LLM (OpenAI-compatible chat completions) ==========
    openai_api_key: Optional[str] = Field(
        default=None,
        description="API key for the chat completion provider"
    )
    openai_base_url: Optional[str] = Field(
        default=None,
        description="Override base URL for OpenAI-compatible providers"
    )
    llm_model: str = Field(
        default="gpt-3.5-turbo",
        description="Model used for issue detection and resolution drafting"
    )
    llm_temperature: float = Field(
        default=0.3,
        description="Default temperature for LLM",
        ge=0.0,
        le=1.0
    )
    llm_max_tokens: int = Field(
        default=600,
        description="Default max tokens for LLM generation",
        ge=1,
        le=8000
    )
    llm_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for a single chat completion call",
        ge=1.0
    )
    llm_failure_threshold: int = Field(
        default=5,
        description="Consecutive LLM failures that open the circuit breaker",
        ge=1
    )
    llm_recovery_seconds: float = Field(
        default=60.0,
        description="Seconds the circuit stays open before a probe call",
        ge=1.0
    )
    mock_llm: bool = Field(
        default=False,
        description="Use mock LLM responses for testing (no API calls)"
    )

    # ========== Issue Detection ==========
    detection_rules_path: Path = Field(
        default=Path("detection_rules.yaml"),
        description="Path to keyword heuristics YAML file"
    )
    auto_detect_issues: bool = Field(
        default=True,
        description="Run issue detection when negative feedback is created"
    )
    min_issue_confidence: float = Field(
        default=0.4,
        description="Candidates below this confidence are dropped",
        ge=0.0,
        le=1.0
    )
    detection_interval_seconds: int = Field(
        default=300,
        description="Seconds between background detection sweeps (0 disables)",
        ge=0
    )
    detection_batch_size: int = Field(
        default=50,
        description="Feedback records analysed per sweep",
        ge=1,
        le=1000
    )

    # ========== CSV Import ==========
    csv_max_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum accepted CSV upload size",
        ge=1024
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production", "test"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @property
    def llm_configured(self) -> bool:
        return self.mock_llm or bool(self.openai_api_key)


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class ServiceType(str):
    """Banking service channels a feedback record belongs to."""
    ATM = "ATM"
    ONLINE_BANKING = "OnlineBanking"
    CORE_BANKING = "CoreBanking"


class FeedbackStatus(str):
    """Feedback handling statuses."""
    NEW = "new"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    ESCALATED = "escalated"


class Sentiment(str):
    """Feedback sentiment."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class IssueStatus(str):
    """Master issue statuses."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class InteractionType(str):
    """Employee interaction types with a feedback record."""
    CONTACTED = "contacted"
    RESOLVED = "resolved"
    ESCALATED = "escalated"


class DateRange(str):
    """Relative date windows accepted by list and analytics filters."""
    ALL = "all"
    LAST_WEEK = "last_week"
    LAST_MONTH = "last_month"
    LAST_QUARTER = "last_quarter"
    LAST_YEAR = "last_year"


class DetectionOutcome(str):
    """What issue detection did with a feedback record."""
    SKIPPED = "skipped"
    NO_ISSUE = "no_issue"
    CREATED = "created"
    MERGED = "merged"
    LINKED = "linked"
    SUPPRESSED = "suppressed"


# ========== Lists for validation ==========

SERVICE_TYPES = [ServiceType.ATM, ServiceType.ONLINE_BANKING, ServiceType.CORE_BANKING]
FEEDBACK_STATUSES = [
    FeedbackStatus.NEW, FeedbackStatus.IN_PROGRESS,
    FeedbackStatus.RESOLVED, FeedbackStatus.ESCALATED
]
SENTIMENTS = [Sentiment.POSITIVE, Sentiment.NEGATIVE, Sentiment.NEUTRAL]
ISSUE_STATUSES = [IssueStatus.PENDING, IssueStatus.APPROVED, IssueStatus.REJECTED]
INTERACTION_TYPES = [
    InteractionType.CONTACTED, InteractionType.RESOLVED, InteractionType.ESCALATED
]

# Days covered by each relative date window
DATE_RANGE_DAYS = {
    DateRange.LAST_WEEK: 7,
    DateRange.LAST_MONTH: 30,
    DateRange.LAST_QUARTER: 90,
    DateRange.LAST_YEAR: 365,
}
