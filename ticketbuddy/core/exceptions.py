"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries. Each class carries the HTTP status
the edge handler answers with.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""

    status_code = 400


class ValidationException(ApplicationException):
    """Exception for validation errors."""

    status_code = 400


class WebhookSignatureException(ApplicationException):
    """Raised when a webhook delivery fails HMAC verification."""

    status_code = 401


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    status_code = 404

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


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""

    status_code = 503


class ExternalServiceException(ApplicationException):
    """Base exception for external service failures."""

    status_code = 502

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.service_name = service_name
        super().__init__(f"{service_name}: {message}", details)


class LLMException(ExternalServiceException):
    """Exception for LLM API failures."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("LLM Service", message, details)


class GitHubAPIException(ExternalServiceException):
    """
    Non-2xx answer from the GitHub REST API.

    Client errors are relayed with the upstream status; anything else is
    reported as a bad gateway.
    """

    def __init__(
        self,
        upstream_status: int,
        message: str,
        details: Optional[dict] = None
    ):
        self.upstream_status = upstream_status
        super().__init__("GitHub API", message, details)

    @property
    def status_code(self) -> int:
        if 400 <= self.upstream_status < 500:
            return self.upstream_status
        return 502


class MergeRejectedException(DomainException):
    """GitHub refused to merge a pull request."""

    def __init__(
        self,
        upstream_status: int,
        reason: str,
        details: Optional[dict] = None
    ):
        self.upstream_status = upstream_status
        self.reason = reason
        super().__init__(reason, details)

    @property
    def status_code(self) -> int:
        return self.upstream_status
