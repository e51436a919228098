"""
Core utilities package for the Patient Consultation API.
Provides the exception hierarchy, authentication dependencies and rate limiting.
"""

from .exceptions import (
    PatientPortalException,
    AuthenticationError,
    AuthorizationError,
    ValidationError,
    BadRequestError,
    NotFoundError,
    ConflictError,
    SubscriptionError,
    ExternalServiceError,
    ConfigurationError,
    DatabaseError
)

__all__ = [
    # Exceptions
    "PatientPortalException",
    "AuthenticationError",
    "AuthorizationError",
    "ValidationError",
    "BadRequestError",
    "NotFoundError",
    "ConflictError",
    "SubscriptionError",
    "ExternalServiceError",
    "ConfigurationError",
    "DatabaseError",
]
