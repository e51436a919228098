# 📄 File: patient_api/modules/markets/domain/services/market_service.py
# 🧭 Purpose (Layman Explanation):
# Works out which regional site a visitor is on from the web address they used,
# falling back to the UK site when the address is not recognised.
# 🧪 Purpose (Technical Summary):
# Static market table plus hostname/origin resolution. Matching is substring based and
# ordered so that the .com.au domain is tested before the .com domain it contains.
# 🔗 Dependencies:
# urllib.parse, patient_api.shared.config.settings (affiliate tracking ids)
# 🔄 Connected Modules / Calls From:
# markets API, payment service (checkout currency), welcome email service

import logging
from typing import Dict, List, Optional
from urllib.parse import urlparse

from patient_api.modules.markets.domain.models.market import (
    Currency,
    HelpfulHints,
    HintLink,
    MarketCode,
    MarketConfig,
    Pricing,
    Terminology,
)
from patient_api.shared.config.settings import get_settings

logger = logging.getLogger(__name__)

DEFAULT_MARKET = MarketCode.UK

# Insertion order is the matching order
MARKET_CONFIGS: Dict[MarketCode, MarketConfig] = {
    MarketCode.UK: MarketConfig(
        code=MarketCode.UK,
        name="United Kingdom",
        currency=Currency(symbol="£", code="GBP"),
        pricing=Pricing(regular=10, display="£10"),
        terminology=Terminology(doctor="doctor", mum="mum"),
        domains=["menopause.the-empowered-patient.org", "localhost"],
        site_url="https://menopause.the-empowered-patient.org",
        helpful_hints=HelpfulHints(
            mammogram_info=HintLink(
                text=(
                    "The NHS automatically invites people registered as female with a doctor who are "
                    "aged 50-71 for breast screening every three years."
                ),
                link="https://www.nhs.uk/tests-and-treatments/breast-screening-mammogram/when-youll-be-invited-and-who-should-go/",
            ),
        ),
    ),
    MarketCode.AU: MarketConfig(
        code=MarketCode.AU,
        name="Australia",
        currency=Currency(symbol="$", code="AUD"),
        pricing=Pricing(regular=10, display="$10"),
        terminology=Terminology(doctor="doctor", mum="mum"),
        domains=["menopause.the-empowered-patient.com.au"],
        site_url="https://menopause.the-empowered-patient.com.au",
        helpful_hints=HelpfulHints(
            mammogram_info=HintLink(
                text=(
                    "If you are aged over 40 in Australia then you are eligible for a free mammogram. "
                    "If you are over 50 your doctor will encourage you to have one as part of normal "
                    "screening, so book in for it before you even have your consultation with your "
                    "doctor for your menopause symptoms."
                ),
                link="https://www.health.gov.au/our-work/breastscreen-australia-program/having-a-breast-screen/who-should-have-a-breast-screen",
            ),
            rebate_info=HintLink(
                text=(
                    "If you are in Australia you will most likely be eligible for a special menopause "
                    "consultation rebate. The Menopause and Perimenopause Health Assessment has a "
                    "rebate of $101.90 as at July 2025."
                ),
                link="https://www.mbsonline.gov.au/internet/mbsonline/publishing.nsf/Content/Factsheet-Menopause+and+perimenopause+health+assessment+services",
            ),
        ),
    ),
    MarketCode.US: MarketConfig(
        code=MarketCode.US,
        name="United States",
        currency=Currency(symbol="$", code="USD"),
        pricing=Pricing(regular=10, display="$10"),
        terminology=Terminology(doctor="doctor", mum="mom"),
        domains=["menopause.the-empowered-patient.com"],
        site_url="https://menopause.the-empowered-patient.com",
        helpful_hints=HelpfulHints(
            mammogram_info=HintLink(
                text=(
                    "Major medical organizations now recommend that women begin mammogram screening "
                    "at age 40. Discuss the right schedule for you with your doctor."
                ),
                link="https://www.cancer.org/cancer/types/breast-cancer/screening-tests-and-early-detection/american-cancer-society-recommendations-for-the-early-detection-of-breast-cancer.html",
            ),
        ),
    ),
}


def _tracking_id(code: MarketCode) -> Optional[str]:
    return getattr(get_settings(), f"AFFILIATE_TRACKING_ID_{code.value}", None)


def get_market_config(code: MarketCode) -> MarketConfig:
    """
    Get a market's configuration, including its configured affiliate tracking id.

    Args:
        code: Market code

    Returns:
        MarketConfig: The market configuration
    """
    config = MARKET_CONFIGS[code]
    tracking_id = _tracking_id(code)
    if tracking_id:
        return config.model_copy(update={"affiliate_tracking_id": tracking_id})
    return config


def list_market_configs() -> List[MarketConfig]:
    return [get_market_config(code) for code in MARKET_CONFIGS]


def parse_market_code(value: Optional[str]) -> MarketCode:
    """Parse a market code, defaulting to the UK for unknown values."""
    try:
        return MarketCode((value or "").upper())
    except ValueError:
        return DEFAULT_MARKET


def detect_market_from_hostname(hostname: Optional[str]) -> MarketCode:
    """
    Detect the market for a hostname.

    A market matches when one of its domains is contained in the hostname.
    Unknown or empty hostnames resolve to the UK market.
    """
    hostname = (hostname or "").strip().lower()
    if hostname:
        for code, config in MARKET_CONFIGS.items():
            if config.matches_hostname(hostname):
                return code

    logger.debug(f"No market matched hostname '{hostname}', using {DEFAULT_MARKET.value}")
    return DEFAULT_MARKET


def detect_market_from_origin(origin: Optional[str]) -> MarketConfig:
    """Resolve the market configuration from an Origin header value."""
    hostname = urlparse(origin).hostname if origin else None
    return get_market_config(detect_market_from_hostname(hostname))
