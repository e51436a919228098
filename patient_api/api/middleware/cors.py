# 📄 File: patient_api/api/middleware/cors.py
# 🧭 Purpose (Layman Explanation):
# Lets the UK, US and Australian websites (and local development sites) call the API from the
# browser, and nobody else.
# 🧪 Purpose (Technical Summary):
# CORS configuration from settings: allowed origins, credentials, methods, headers and preflight
# caching, applied with Starlette's CORSMiddleware.
# 🔗 Dependencies:
# FastAPI CORSMiddleware, patient_api.shared.config.settings
# 🔄 Connected Modules / Calls From:
# patient_api.main (middleware registration)

import logging
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from patient_api.shared.config.settings import get_settings

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ["GET", "POST", "PUT", "OPTIONS"]
ALLOWED_HEADERS = [
    "Authorization",
    "Content-Type",
    "Accept",
    "Origin",
    "X-Client-Info",
    "X-Request-ID",
    "Stripe-Signature",
]
EXPOSED_HEADERS = ["X-Request-ID", "X-Response-Time"]


def cors_options() -> Dict[str, Any]:
    settings = get_settings()
    return {
        "allow_origins": settings.cors_origins_list,
        "allow_credentials": settings.CORS_ALLOW_CREDENTIALS,
        "allow_methods": ALLOWED_METHODS,
        "allow_headers": ALLOWED_HEADERS,
        "expose_headers": EXPOSED_HEADERS,
        "max_age": settings.CORS_MAX_AGE,
    }


def setup_cors(app: FastAPI) -> None:
    """Add CORS handling; preflight requests are answered by the middleware."""
    options = cors_options()
    app.add_middleware(CORSMiddleware, **options)
    logger.info(f"CORS configured for {len(options['allow_origins'])} origins")
