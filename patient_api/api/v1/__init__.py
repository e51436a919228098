# 📄 File: patient_api/api/v1/__init__.py
# 🧭 Purpose (Layman Explanation):
# Organizes version 1 of the API so a later version can be added without breaking the website.
# 🧪 Purpose (Technical Summary):
# Package initialization for API version 1: route prefixes and OpenAPI tags for the module
# routers aggregated in router.py.
# 🔗 Dependencies:
# None
# 🔄 Connected Modules / Calls From:
# patient_api.api.v1.router, patient_api.main

"""
Patient Consultation API Version 1

Structure:
    v1/
    ├── __init__.py          # This file
    ├── router.py            # Main v1 router aggregation
    └── health.py            # Health check endpoints

Module routers live in patient_api.modules.<module>.presentation.api.v1.
"""

from typing import Any, Dict, List

__version__ = "1.0.0"
__api_version__ = "v1"

# API v1 route prefixes
ROUTE_PREFIXES: Dict[str, str] = {
    "consultation": "/consultation",
    "payments": "/payments",
    "notifications": "/notifications",
    "markets": "/markets",
}

# API v1 tags for OpenAPI documentation
API_TAGS: List[Dict[str, Any]] = [
    {
        "name": "Consultation",
        "description": "Questionnaire modules, saved answers, progress and summary"
    },
    {
        "name": "Payments",
        "description": "Checkout, discount codes, registration and Stripe webhooks"
    },
    {
        "name": "Notifications",
        "description": "Contact, welcome and consultation document emails"
    },
    {
        "name": "Markets",
        "description": "Regional market configuration"
    },
    {
        "name": "Health Check",
        "description": "System health and status monitoring"
    },
]


def get_api_info() -> Dict[str, Any]:
    """
    Get API v1 information

    Returns:
        Dictionary with API v1 metadata and route prefixes
    """
    return {
        "version": __version__,
        "api_version": __api_version__,
        "route_prefixes": ROUTE_PREFIXES,
    }


__all__ = [
    "ROUTE_PREFIXES",
    "API_TAGS",
    "get_api_info",
]
