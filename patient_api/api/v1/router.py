# 📄 File: patient_api/api/v1/router.py
# 🧭 Purpose (Layman Explanation):
# Acts like a traffic director for all API version 1 requests, sending questionnaire requests
# to the consultation module, payment requests to the payments module, and so on.
# 🧪 Purpose (Technical Summary):
# Main API v1 router aggregation that combines all module routers under their prefixes.
# 🔗 Dependencies:
# FastAPI, patient_api.api.v1.health, patient_api.modules.*.presentation.api.v1.*
# 🔄 Connected Modules / Calls From:
# patient_api.main

import logging

from fastapi import APIRouter

from patient_api.modules.consultation.presentation.api.v1.consultation import consultation_router
from patient_api.modules.markets.presentation.api.v1.markets import markets_router
from patient_api.modules.notifications.presentation.api.v1.notifications import notifications_router
from patient_api.modules.payments.presentation.api.v1.payments import payments_router

from . import ROUTE_PREFIXES, get_api_info
from .health import health_router

logger = logging.getLogger(__name__)

# Create main API v1 router
api_v1_router = APIRouter()

# Health check routes (no prefix)
api_v1_router.include_router(health_router, tags=["Health Check"])

api_v1_router.include_router(
    consultation_router,
    prefix=ROUTE_PREFIXES["consultation"],
    tags=["Consultation"]
)
api_v1_router.include_router(
    payments_router,
    prefix=ROUTE_PREFIXES["payments"],
    tags=["Payments"]
)
api_v1_router.include_router(
    notifications_router,
    prefix=ROUTE_PREFIXES["notifications"],
    tags=["Notifications"]
)
api_v1_router.include_router(
    markets_router,
    prefix=ROUTE_PREFIXES["markets"],
    tags=["Markets"]
)


@api_v1_router.get(
    "/",
    summary="API v1 Information",
    description="API v1 version information and route prefixes",
    tags=["API Info"]
)
async def api_v1_info() -> dict:
    return get_api_info()
