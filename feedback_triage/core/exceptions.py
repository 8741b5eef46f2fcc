"""
Core Exceptions
================

Exceptions raised by services and mapped to HTTP responses by the
handlers in ``shared.api.middleware``:

- ResourceNotFoundException -> 404
- ConflictException -> 409
- ValidationException, DomainException -> 400
- anything else -> 500
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """A business rule refused the operation."""


class IssueWorkflowException(DomainException):
    """An issue review action is not allowed in the issue's current state."""

    def __init__(self, action: str, reason: str, details: Optional[dict] = None):
        self.action = action
        super().__init__(f"Cannot {action}: {reason}", details)


class ValidationException(ApplicationException):
    """Input failed validation outside the request schema."""


class CsvImportException(ValidationException):
    """The uploaded CSV file cannot be imported at all."""


class ResourceNotFoundException(ApplicationException):
    """A requested record does not exist."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class ConflictException(ApplicationException):
    """A write collides with existing data."""


class DuplicateResourceException(ConflictException):
    """A record with the same unique key already exists."""

    def __init__(self, resource_type: str, key: str, value: str):
        self.resource_type = resource_type
        super().__init__(
            f"{resource_type} with {key} '{value}' already exists",
            details={key: value}
        )


class ConfigurationException(ApplicationException):
    """A required setting or collaborator is missing."""


class ExternalServiceException(ApplicationException):
    """Base exception for external service failures."""

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.service_name = service_name
        super().__init__(f"{service_name}: {message}", details)


class LLMException(ExternalServiceException):
    """The LLM call failed, timed out or was short-circuited."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("LLM", message, details)
