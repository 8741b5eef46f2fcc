"""
Analytics Interfaces Layer
==========================

Interface adapters (controllers) for dashboard analytics.
"""

from feedback_triage.analytics.interfaces.controllers import analytics_router

__all__ = ["analytics_router"]
