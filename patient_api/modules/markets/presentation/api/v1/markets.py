# 📄 File: patient_api/modules/markets/presentation/api/v1/markets.py
# 🧭 Purpose (Layman Explanation):
# Lets the website ask which regional settings (currency, price, wording) to use.
# 🧪 Purpose (Technical Summary):
# Read-only FastAPI endpoints over the static market configuration.
# 🔗 Dependencies:
# FastAPI router, market_service, market schemas
# 🔄 Connected Modules / Calls From:
# patient_api.api.v1.router (mounted at /markets)

import logging
from typing import Optional

from fastapi import APIRouter, Query

from patient_api.modules.markets.domain.services.market_service import (
    DEFAULT_MARKET,
    detect_market_from_hostname,
    get_market_config,
    list_market_configs,
)
from patient_api.modules.markets.presentation.api.schemas.market_schemas import (
    MarketListResponse,
    MarketResponse,
)

logger = logging.getLogger(__name__)

markets_router = APIRouter()


@markets_router.get(
    "",
    response_model=MarketListResponse,
    summary="List markets",
    description="All regional market configurations",
)
async def list_markets() -> MarketListResponse:
    return MarketListResponse(markets=list_market_configs(), default_market=DEFAULT_MARKET.value)


@markets_router.get(
    "/resolve",
    response_model=MarketResponse,
    summary="Resolve market",
    description="Resolve the market for a hostname; unknown hostnames fall back to the UK market",
)
async def resolve_market(
    hostname: Optional[str] = Query(None, description="Hostname the site is served from")
) -> MarketResponse:
    code = detect_market_from_hostname(hostname)
    logger.debug(f"Resolved hostname '{hostname}' to market {code.value}")
    return MarketResponse(market=get_market_config(code), hostname=hostname)
