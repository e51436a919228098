# 📄 File: patient_api/api/middleware/__init__.py
# 🧭 Purpose (Layman Explanation):
# Organizes the helpers that look at every request on its way in and out: giving it an id,
# timing it, logging it and turning crashes into tidy error messages.
# 🧪 Purpose (Technical Summary):
# Package initialization for API middleware: shared configuration and path exclusion.
# 🔗 Dependencies:
# None
# 🔄 Connected Modules / Calls From:
# patient_api.main, patient_api.api.middleware.*

"""
Middleware Stack Order (outermost first):
    1. CORSMiddleware (preflight and CORS headers, also on error responses)
    2. ErrorHandlingMiddleware (request id, timing headers, catch-all error envelope)
    3. RequestLoggingMiddleware (one structured line per request)
    4. Application Routes
"""

from typing import Any, Dict

# Middleware configuration constants
MIDDLEWARE_CONFIG: Dict[str, Dict[str, Any]] = {
    "logging": {
        "exclude_paths": [
            "/api/v1/health",
            "/favicon.ico",
        ],
        "slow_request_threshold": 2.0,
    },
    "error_handling": {
        "request_id_header": "X-Request-ID",
        "response_time_header": "X-Response-Time",
    },
}


def get_middleware_config(name: str) -> Dict[str, Any]:
    return MIDDLEWARE_CONFIG.get(name, {})


def should_exclude_path(middleware_name: str, path: str) -> bool:
    """
    Check if a path is excluded from a middleware

    Args:
        middleware_name: Key in MIDDLEWARE_CONFIG
        path: Request path

    Returns:
        True if the middleware should skip the path
    """
    return path in get_middleware_config(middleware_name).get("exclude_paths", [])
