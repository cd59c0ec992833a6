"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system.
"""

from ticketbuddy.core.exceptions import (
    ApplicationException,
    DomainException,
    ValidationException,
    WebhookSignatureException,
    ResourceNotFoundException,
    ConfigurationException,
    ExternalServiceException,
    LLMException,
    GitHubAPIException,
    MergeRejectedException,
)

__all__ = [
    "ApplicationException",
    "DomainException",
    "ValidationException",
    "WebhookSignatureException",
    "ResourceNotFoundException",
    "ConfigurationException",
    "ExternalServiceException",
    "LLMException",
    "GitHubAPIException",
    "MergeRejectedException",
]
