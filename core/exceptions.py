"""
Centralized exception hierarchy for domain-specific errors.

This module provides custom exception classes that represent specific
error conditions in the location service, so API handlers can map them to
consistent HTTP responses.
"""


class AasPaasError(Exception):
    """Base exception for all application-specific errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AasPaasError):
    """Exception raised when request validation fails."""


class ExternalServiceError(AasPaasError):
    """Exception raised when an upstream service call fails."""


class ProviderTransportError(ExternalServiceError):
    """Network failure or non-success HTTP status from a geocoding provider."""


class ProviderParseError(ExternalServiceError):
    """Malformed or unexpected JSON payload from a geocoding provider."""


class RateLimitError(AasPaasError):
    """Exception raised when a client exceeds its request quota."""


class ResourceNotFoundError(AasPaasError):
    """Exception raised when a requested resource is not found."""


AasPaasException = AasPaasError
ValidationException = ValidationError
ExternalServiceException = ExternalServiceError
RateLimitException = RateLimitError
ResourceNotFoundException = ResourceNotFoundError
