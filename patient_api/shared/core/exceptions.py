# 📄 File: patient_api/shared/core/exceptions.py
# 🧭 Purpose (Layman Explanation):
# Names every kind of problem the consultation app can report (not signed in, no subscription,
# Stripe is down...) so the website always gets a clear, consistent error message.
# 🧪 Purpose (Technical Summary):
# Exception hierarchy carrying an HTTP status, a stable error code and structured details,
# rendered into the JSON error envelope by the registered exception handlers.
# 🔗 Dependencies:
# FastAPI status constants, typing
# 🔄 Connected Modules / Calls From:
# Domain services, gateways, repositories, auth dependencies, api.middleware.error_handling

from typing import Any, Dict, Optional

from fastapi import status


def _with_fields(details: Optional[Dict[str, Any]], **fields: Any) -> Dict[str, Any]:
    """Merge the non-empty keyword fields into a details dict."""
    merged = dict(details or {})
    for key, value in fields.items():
        if value is not None and value != "":
            merged[key] = value
    return merged


class PatientPortalException(Exception):
    """
    Base exception class for the consultation application.

    Subclasses set ``status_code`` and ``error_code``; handlers only rely on
    ``message``, ``status_code``, ``error_code`` and ``details``.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        super().__init__(self.message)


# =============================================================================
# AUTHENTICATION & AUTHORIZATION
# =============================================================================

class AuthenticationError(PatientPortalException):
    """Bearer token missing, invalid or expired."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "AUTHENTICATION_ERROR"

    def __init__(self, message: str = "User not authenticated", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)


class AuthorizationError(PatientPortalException):
    """The caller acts on something that belongs to another user."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "AUTHORIZATION_ERROR"

    def __init__(
        self,
        message: str = "Access denied",
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        user_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details=_with_fields(
            details, resource_type=resource_type, resource_id=resource_id, user_id=user_id
        ))


# =============================================================================
# REQUEST & DATA
# =============================================================================

class ValidationError(PatientPortalException):
    """
    Input passed schema validation but breaks a domain rule, such as an answer that is not
    one of a question's options.
    """

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        constraint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details=_with_fields(details, field=field, constraint=constraint))


class BadRequestError(PatientPortalException):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "BAD_REQUEST"

    def __init__(
        self,
        message: str = "Bad request",
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details=_with_fields(details, field=field))


class NotFoundError(PatientPortalException):
    """Unknown consultation module, missing subscription record."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details=_with_fields(
            details, resource_type=resource_type, resource_id=resource_id
        ))


class ConflictError(PatientPortalException):
    """A unique resource already exists, e.g. an account for the email address."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT_ERROR"

    def __init__(
        self,
        message: str = "Resource conflict",
        resource_type: Optional[str] = None,
        conflict_field: Optional[str] = None,
        existing_value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details=_with_fields(
            details,
            resource_type=resource_type,
            conflict_field=conflict_field,
            existing_value=str(existing_value) if existing_value is not None else None,
        ))


# =============================================================================
# ACCESS
# =============================================================================

class SubscriptionError(PatientPortalException):
    """Consultation content needs a subscription that currently grants access."""

    status_code = status.HTTP_402_PAYMENT_REQUIRED
    error_code = "SUBSCRIPTION_ERROR"

    def __init__(
        self,
        message: str = "Active subscription required",
        feature: Optional[str] = None,
        subscription_status: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details=_with_fields(
            details, feature=feature, subscription_status=subscription_status
        ))


# =============================================================================
# EXTERNAL SERVICES & INFRASTRUCTURE
# =============================================================================

class ExternalServiceError(PatientPortalException):
    """Stripe, Resend, Supabase or the HTML to PDF API failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "EXTERNAL_SERVICE_ERROR"

    def __init__(
        self,
        message: str = "External service error",
        service: Optional[str] = None,
        service_response: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.service = service
        super().__init__(message, details=_with_fields(
            details, service=service, service_response=service_response
        ))


class ConfigurationError(PatientPortalException):
    """A required API key or secret is not set."""

    error_code = "CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str = "Service is not configured",
        setting: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details=_with_fields(details, setting=setting))


class DatabaseError(PatientPortalException):
    error_code = "DATABASE_ERROR"

    def __init__(
        self,
        message: str = "Database error",
        operation: Optional[str] = None,
        table: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details=_with_fields(details, operation=operation, table=table))
