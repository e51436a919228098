"""
Rate limiting for the Patient Consultation API.
Per-client limits on the endpoints that create accounts or send email, using slowapi.
"""

import logging
from datetime import datetime, timezone

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from ..config.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Shared limiter; routers decorate endpoints with limiter.limit(...)
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
)


def registration_limit() -> str:
    return get_settings().REGISTRATION_RATE_LIMIT


def contact_limit() -> str:
    return get_settings().CONTACT_RATE_LIMIT


def document_limit() -> str:
    return get_settings().DOCUMENT_RATE_LIMIT


def configure_limiter() -> Limiter:
    """Apply the current settings to the shared limiter."""
    limiter.enabled = get_settings().RATE_LIMIT_ENABLED
    return limiter


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render slowapi rejections in the standard error envelope."""
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)} on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=429,
        content={
            "error": {
                "code": "RATE_LIMIT_EXCEEDED",
                "message": f"Rate limit exceeded: {exc.detail}",
                "details": {},
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "request_id": getattr(request.state, "request_id", None),
            }
        },
    )
