"""
Bank feedback intake and issue triage service.
"""

__version__ = "1.0.0"
