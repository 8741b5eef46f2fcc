"""
Feedback Interfaces Layer
=========================

Interface adapters (controllers) for feedback intake.
"""

from feedback_triage.feedback.interfaces.controllers import feedback_router

__all__ = ["feedback_router"]
