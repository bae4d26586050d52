"""Configuration tests."""

from fastapi_couriers.config import CouriersConfig


def test_default_settings() -> None:
    config = CouriersConfig()
    assert config.request_timeout == 20.0
    assert config.redact_pii is True
    assert config.royal_express_tenant == "royalexpress"
    assert config.royal_express_default_business_id is None
    assert config.default_service == "Standard"
    assert config.sync_delay_seconds == 2.0


def test_default_api_urls() -> None:
    config = CouriersConfig()
    assert config.trans_express_api_url == "https://portal.transexpress.lk/api"
    assert config.royal_express_api_url == (
        "https://v1.api.curfox.com/api/public"
    )
    assert config.farda_express_api_url.startswith("https://")


def test_default_origin_is_a_colombo_warehouse() -> None:
    origin = CouriersConfig().default_origin
    assert origin["state"] == "Colombo"
    assert origin["country"] == "LK"
    assert origin["phone"]


def test_default_origin_is_not_shared() -> None:
    first = CouriersConfig()
    first.default_origin["city"] = "Galle"
    assert CouriersConfig().default_origin["city"] == "Kotte"


def test_env_prefix(monkeypatch) -> None:
    monkeypatch.setenv("COURIERS_REQUEST_TIMEOUT", "5")
    monkeypatch.setenv("COURIERS_ROYAL_EXPRESS_TENANT", "royal-staging")
    monkeypatch.setenv("COURIERS_ROYAL_EXPRESS_DEFAULT_BUSINESS_ID", "42")
    monkeypatch.setenv("COURIERS_REDACT_PII", "false")

    config = CouriersConfig()
    assert config.request_timeout == 5.0
    assert config.royal_express_tenant == "royal-staging"
    assert config.royal_express_default_business_id == 42
    assert config.redact_pii is False


def test_custom_settings() -> None:
    config = CouriersConfig(
        trans_express_api_url="https://trans.test",
        sync_delay_seconds=0,
    )
    assert config.trans_express_api_url == "https://trans.test"
    assert config.sync_delay_seconds == 0
