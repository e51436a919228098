# 📄 File: patient_api/modules/markets/domain/models/market.py
# 🧭 Purpose (Layman Explanation):
# Describes a regional version of the site (UK, US, Australia): which currency it charges in,
# what the price is, which web addresses belong to it and a few wording differences.
# 🧪 Purpose (Technical Summary):
# Immutable pydantic domain models for the static market configuration.
# 🔗 Dependencies:
# pydantic, enum
# 🔄 Connected Modules / Calls From:
# market_service.py, payment service (checkout currency), welcome email service, markets API

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class MarketCode(str, Enum):
    """Regional deployments of the consultation site"""
    UK = "UK"
    US = "US"
    AU = "AU"


class Currency(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    code: str

    @property
    def stripe_code(self) -> str:
        """Stripe expects lowercase ISO codes."""
        return self.code.lower()


class Pricing(BaseModel):
    model_config = ConfigDict(frozen=True)

    regular: float
    display: str


class Terminology(BaseModel):
    model_config = ConfigDict(frozen=True)

    doctor: str
    mum: str
    consultation: str = "appointment"


class HintLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    link: Optional[str] = None


class HelpfulHints(BaseModel):
    """Market specific notes shown on the Helpful Hints module"""
    model_config = ConfigDict(frozen=True)

    mammogram_info: HintLink
    rebate_info: Optional[HintLink] = None


class MarketConfig(BaseModel):
    """
    Market configuration domain model.

    Read-only at runtime; one instance per MarketCode.
    """
    model_config = ConfigDict(frozen=True)

    code: MarketCode
    name: str
    currency: Currency
    pricing: Pricing
    terminology: Terminology
    domains: List[str]
    site_url: str
    helpful_hints: HelpfulHints
    affiliate_tracking_id: Optional[str] = None

    def matches_hostname(self, hostname: str) -> bool:
        return any(domain in hostname for domain in self.domains)
