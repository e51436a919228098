# 📄 File: patient_api/modules/markets/presentation/api/schemas/market_schemas.py
# 🧭 Purpose (Layman Explanation):
# Shapes the market information the website receives.
# 🧪 Purpose (Technical Summary):
# Pydantic response schemas for the markets endpoints.
# 🔗 Dependencies:
# pydantic, market domain model
# 🔄 Connected Modules / Calls From:
# patient_api.modules.markets.presentation.api.v1.markets

from typing import List, Optional

from pydantic import BaseModel, Field

from patient_api.modules.markets.domain.models.market import MarketConfig


class MarketResponse(BaseModel):
    """Market configuration as exposed to the web client"""

    market: MarketConfig
    hostname: Optional[str] = Field(None, description="Hostname the market was resolved from")


class MarketListResponse(BaseModel):
    markets: List[MarketConfig]
    default_market: str
