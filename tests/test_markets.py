import pytest

from patient_api.modules.markets.domain.models.market import MarketCode
from patient_api.modules.markets.domain.services.market_service import (
    detect_market_from_hostname,
    detect_market_from_origin,
    get_market_config,
    parse_market_code,
)


@pytest.mark.parametrize(
    "hostname, expected",
    [
        ("menopause.the-empowered-patient.org", MarketCode.UK),
        ("menopause.the-empowered-patient.com.au", MarketCode.AU),
        ("menopause.the-empowered-patient.com", MarketCode.US),
        ("localhost", MarketCode.UK),
        ("preview.example.net", MarketCode.UK),
        ("", MarketCode.UK),
        (None, MarketCode.UK),
    ],
)
def test_detect_market_from_hostname(hostname, expected):
    assert detect_market_from_hostname(hostname) == expected


def test_detect_market_from_origin():
    market = detect_market_from_origin("https://menopause.the-empowered-patient.com")

    assert market.code == MarketCode.US
    assert market.currency.stripe_code == "usd"
    assert market.terminology.mum == "mom"


def test_parse_market_code_defaults_to_uk():
    assert parse_market_code("au") == MarketCode.AU
    assert parse_market_code("FR") == MarketCode.UK
    assert parse_market_code(None) == MarketCode.UK


def test_tracking_id_comes_from_settings(monkeypatch):
    from patient_api.shared.config.settings import get_settings

    monkeypatch.setenv("AFFILIATE_TRACKING_ID_US", "track-us")
    get_settings.cache_clear()

    assert get_market_config(MarketCode.US).affiliate_tracking_id == "track-us"
    assert get_market_config(MarketCode.UK).affiliate_tracking_id is None


def test_only_australia_has_rebate_hint():
    assert get_market_config(MarketCode.AU).helpful_hints.rebate_info is not None
    assert get_market_config(MarketCode.UK).helpful_hints.rebate_info is None


def test_list_markets(client):
    response = client.get("/api/v1/markets")

    assert response.status_code == 200
    body = response.json()
    assert [market["code"] for market in body["markets"]] == ["UK", "AU", "US"]
    assert body["default_market"] == "UK"


def test_resolve_unknown_hostname_falls_back_to_uk(client):
    response = client.get("/api/v1/markets/resolve", params={"hostname": "unknown.example.com"})

    assert response.status_code == 200
    assert response.json()["market"]["code"] == "UK"
    assert response.json()["market"]["currency"]["code"] == "GBP"
