# 📄 File: patient_api/api/__init__.py
# 🧭 Purpose (Layman Explanation):
# Marks the api folder as a package holding the web-facing parts of the app:
# the request middleware and the version 1 routes.
# 🧪 Purpose (Technical Summary):
# Package initialization for the API layer (middleware and versioned routers).
# 🔗 Dependencies:
# None (package initialization)
# 🔄 Connected Modules / Calls From:
# patient_api.main, middleware imports

"""
Patient Consultation API Package

Structure:
    api/
    ├── __init__.py          # This file
    ├── middleware/          # Error handling, CORS and request logging
    └── v1/                  # API version 1
        ├── router.py        # Main v1 router
        └── health.py        # Health check endpoints
"""

API_PREFIX = "/api"
CURRENT_VERSION = "v1"

__all__ = [
    "API_PREFIX",
    "CURRENT_VERSION",
]
