"""
Common FastAPI dependencies for the Patient Consultation API.
Provides bearer-token authentication against Supabase and the current user model.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from patient_api.shared.core.exceptions import AuthenticationError
from patient_api.shared.infrastructure.external.supabase_auth import (
    SupabaseAuthGateway,
    get_supabase_auth_gateway,
)
from patient_api.shared.utils.logging import bind_user

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI documentation; missing headers are reported as 401 by us
security = HTTPBearer(auto_error=False)


class CurrentUser:
    """User information resolved from the bearer token."""

    def __init__(
        self,
        user_id: str,
        email: Optional[str],
        user_metadata: Optional[Dict[str, Any]] = None
    ):
        self.user_id = user_id
        self.email = email
        self.user_metadata = user_metadata or {}

    @property
    def first_name(self) -> Optional[str]:
        return self.user_metadata.get("first_name")


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_gateway: SupabaseAuthGateway = Depends(get_supabase_auth_gateway),
) -> CurrentUser:
    """
    Resolve the authenticated user from the Authorization header.

    Args:
        request: FastAPI request object
        credentials: Bearer credentials, if any
        auth_gateway: Supabase auth gateway

    Returns:
        CurrentUser: Current user information

    Raises:
        AuthenticationError: If the header is missing or the token is rejected
    """
    if credentials is None or not credentials.credentials:
        logger.debug(f"Missing bearer token for {request.url.path}")
        raise AuthenticationError("User not authenticated")

    auth_user = await auth_gateway.get_user(credentials.credentials)

    current_user = CurrentUser(
        user_id=auth_user.id,
        email=auth_user.email,
        user_metadata=auth_user.user_metadata,
    )
    request.state.user_id = current_user.user_id
    bind_user(current_user.user_id)

    logger.debug(f"Current user resolved: {current_user.user_id}")
    return current_user
