"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system.
"""

from feedback_triage.core.exceptions import (
    ApplicationException,
    DomainException,
    IssueWorkflowException,
    ValidationException,
    CsvImportException,
    ResourceNotFoundException,
    ConflictException,
    DuplicateResourceException,
    ConfigurationException,
    ExternalServiceException,
    LLMException,
)
from feedback_triage.core.clock import utc_now, to_naive_utc

__all__ = [
    "ApplicationException",
    "DomainException",
    "IssueWorkflowException",
    "ValidationException",
    "CsvImportException",
    "ResourceNotFoundException",
    "ConflictException",
    "DuplicateResourceException",
    "ConfigurationException",
    "ExternalServiceException",
    "LLMException",
    "utc_now",
    "to_naive_utc",
]
