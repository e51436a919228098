# 📄 File: patient_api/shared/infrastructure/external/supabase_auth.py
# 🧭 Purpose (Layman Explanation):
# Talks to Supabase, where patient accounts live: it checks login tokens, creates new accounts
# at registration, finds accounts by email and remembers small per-user notes.
# 🧪 Purpose (Technical Summary):
# Async gateway over the synchronous supabase-py auth client. Calls run in Starlette's thread
# pool; Supabase AuthError is translated into the application exception hierarchy.
# 🔗 Dependencies:
# supabase-py (auth + admin API), starlette.concurrency, patient_api.shared.config.supabase
# 🔄 Connected Modules / Calls From:
# patient_api.shared.core.dependencies (bearer token resolution), registration service,
# webhook service, document service (metadata timestamps)

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from starlette.concurrency import run_in_threadpool
from supabase import AuthApiError, AuthError

from patient_api.shared.config.supabase import get_supabase_client
from patient_api.shared.core.exceptions import (
    AuthenticationError,
    ConflictError,
    ExternalServiceError,
)

logger = logging.getLogger(__name__)

USER_LOOKUP_PAGE_SIZE = 200


@dataclass
class AuthUser:
    """The subset of a Supabase auth user the API relies on."""

    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_supabase(cls, user: Any) -> "AuthUser":
        return cls(
            id=str(user.id),
            email=getattr(user, "email", None),
            user_metadata=dict(getattr(user, "user_metadata", None) or {}),
        )

    @property
    def first_name(self) -> Optional[str]:
        return self.user_metadata.get("first_name")


def _is_duplicate_user_error(error: AuthError) -> bool:
    code = getattr(error, "code", None)
    message = str(getattr(error, "message", error)).lower()
    return code == "email_exists" or "already been registered" in message or "already registered" in message


class SupabaseAuthGateway:
    """
    Supabase auth operations used by the API.

    The underlying client uses the service role key, so admin calls are permitted.
    """

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    async def get_user(self, access_token: str) -> AuthUser:
        """
        Resolve a bearer access token to its user.

        Raises:
            AuthenticationError: If the token is invalid or expired
        """
        try:
            response = await run_in_threadpool(self.client.auth.get_user, access_token)
        except AuthError as e:
            logger.info(f"Rejected access token: {e}")
            raise AuthenticationError("User not authenticated")

        if response is None or response.user is None:
            raise AuthenticationError("User not authenticated")

        return AuthUser.from_supabase(response.user)

    async def create_user(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> AuthUser:
        """
        Create a confirmed account with the patient's name in its metadata.

        Raises:
            ConflictError: If an account with this email already exists
            ExternalServiceError: For any other Supabase failure
        """
        attributes = {
            "email": email,
            "password": password,
            "user_metadata": {
                "first_name": first_name,
                "last_name": last_name,
            },
            "email_confirm": True,
        }

        try:
            response = await run_in_threadpool(self.client.auth.admin.create_user, attributes)
        except AuthApiError as e:
            if _is_duplicate_user_error(e):
                raise ConflictError(
                    "An account with this email already exists. Please sign in instead.",
                    resource_type="user",
                    conflict_field="email",
                )
            logger.error(f"Supabase user creation failed for {email}: {e}")
            raise ExternalServiceError(
                f"Failed to create account: {e}",
                service="supabase",
                service_response=str(e),
            )
        except AuthError as e:
            logger.error(f"Supabase user creation failed for {email}: {e}")
            raise ExternalServiceError(f"Failed to create account: {e}", service="supabase")

        logger.info(f"Created Supabase user {response.user.id}")
        return AuthUser.from_supabase(response.user)

    async def find_user_by_email(self, email: str) -> Optional[AuthUser]:
        """Page through the admin user list looking for an email address."""
        target = email.strip().lower()
        page = 1

        try:
            while True:
                users = await run_in_threadpool(
                    self.client.auth.admin.list_users,
                    page=page,
                    per_page=USER_LOOKUP_PAGE_SIZE,
                )
                for user in users:
                    if (getattr(user, "email", None) or "").lower() == target:
                        return AuthUser.from_supabase(user)
                if len(users) < USER_LOOKUP_PAGE_SIZE:
                    return None
                page += 1
        except AuthError as e:
            logger.error(f"Supabase user lookup failed: {e}")
            raise ExternalServiceError(f"Failed to look up user: {e}", service="supabase")

    async def update_user_metadata(self, user_id: str, metadata: Dict[str, Any]) -> None:
        """Merge keys into a user's metadata."""
        try:
            await run_in_threadpool(
                self.client.auth.admin.update_user_by_id,
                user_id,
                {"user_metadata": metadata},
            )
        except AuthError as e:
            logger.error(f"Failed to update metadata for user {user_id}: {e}")
            raise ExternalServiceError(f"Failed to update user: {e}", service="supabase")


def get_supabase_auth_gateway() -> SupabaseAuthGateway:
    """FastAPI dependency returning the auth gateway."""
    return SupabaseAuthGateway()
