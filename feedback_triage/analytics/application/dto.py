"""
Analytics Application DTOs
===========================

Response models for dashboard aggregates.
"""

from pydantic import BaseModel, Field
from typing import Dict, Optional
from datetime import date


class MetricsResponse(BaseModel):
    """Headline feedback metrics."""
    total: int = 0
    positive: int = 0
    negative: int = 0
    neutral: int = 0
    pending: int = Field(0, description="Feedback still in status 'new'")
    in_progress: int = 0
    resolved: int = 0
    escalated: int = 0
    average_rating: float = 0.0
    rating_distribution: Dict[str, int] = Field(
        default_factory=lambda: {str(rating): 0 for rating in range(1, 6)}
    )


class SentimentBreakdown(BaseModel):
    positive: int = 0
    negative: int = 0
    neutral: int = 0


class ServiceBreakdown(BaseModel):
    service_type: str
    positive: int = 0
    negative: int = 0
    total: int = 0


class LocationBreakdown(BaseModel):
    location: str
    positive: int = 0
    negative: int = 0
    total: int = 0
    average_rating: float = 0.0


class RatingBucket(BaseModel):
    rating: int
    label: str
    count: int = 0


class TimelinePoint(BaseModel):
    date: date
    positive: int = 0
    negative: int = 0
    neutral: int = 0
    average_rating: Optional[float] = None


class TopIssue(BaseModel):
    id: str
    title: str
    category: str
    feedback_count: int
