# 📄 File: patient_api/shared/config/supabase.py
# 🧭 Purpose (Layman Explanation):
# Opens the line to Supabase, where patient accounts live, the first time the app needs to check
# a login or create an account, and hangs up when the app shuts down.
# 🧪 Purpose (Technical Summary):
# Lazily built service-role supabase-py Client (no token refresh, no session persistence),
# cached per process and dropped on shutdown.
# 🔗 Dependencies:
# supabase-py, patient_api.shared.config.settings
# 🔄 Connected Modules / Calls From:
# patient_api.shared.infrastructure.external.supabase_auth, patient_api.main (shutdown cleanup)

import logging
from typing import Optional

from supabase import Client, ClientOptions, create_client

from patient_api.shared.core.exceptions import ConfigurationError

from .settings import get_settings

logger = logging.getLogger(__name__)

_client: Optional[Client] = None


def _build_client() -> Client:
    settings = get_settings()
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise ConfigurationError("Supabase is not configured", setting="SUPABASE_SERVICE_ROLE_KEY")

    # Admin endpoints (create user, list users) need the service role key
    options = ClientOptions(
        headers={"User-Agent": f"PatientConsultationAPI/{settings.APP_VERSION}"},
        auto_refresh_token=False,
        persist_session=False,
    )
    client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY, options=options)
    logger.info(f"Supabase client created for {settings.SUPABASE_URL}")
    return client


def get_supabase_client() -> Client:
    """
    Return the process-wide Supabase client, creating it on first use.

    Raises:
        ConfigurationError: If the Supabase URL or service role key is missing
    """
    global _client
    if _client is None:
        _client = _build_client()
    return _client


async def cleanup_supabase() -> None:
    """Forget the cached client on application shutdown."""
    global _client
    if _client is not None:
        _client = None
        logger.info("Supabase client released")
