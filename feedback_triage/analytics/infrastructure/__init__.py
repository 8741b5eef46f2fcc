"""
Analytics Infrastructure Layer
===============================

Contains:
- Repositories: Aggregate queries
"""

from feedback_triage.analytics.infrastructure.repositories import SQLAlchemyAnalyticsRepository

__all__ = ["SQLAlchemyAnalyticsRepository"]
