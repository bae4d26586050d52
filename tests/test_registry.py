"""ProviderRegistry tests."""

from __future__ import annotations

import logging

import pytest

from fastapi_couriers.exceptions import (
    ProviderNotConfiguredError,
    UnsupportedProviderError,
)
from fastapi_couriers.providers import (
    FardaExpressProvider,
    RoyalExpressProvider,
    TransExpressProvider,
)
from fastapi_couriers.registry import ProviderRegistry
from fastapi_couriers.types import ShippingProviderType, TenantShippingConfig


class TestProviderRegistry:
    @pytest.mark.parametrize(
        ("provider", "expected"),
        [
            (ShippingProviderType.FARDA_EXPRESS, FardaExpressProvider),
            (ShippingProviderType.TRANS_EXPRESS, TransExpressProvider),
            (ShippingProviderType.ROYAL_EXPRESS, RoyalExpressProvider),
        ],
    )
    def test_create_builds_adapter(
        self, config, tenant_config, provider, expected
    ) -> None:
        adapter = ProviderRegistry(config).create(provider, tenant_config)
        assert isinstance(adapter, expected)
        assert adapter.config is config

    def test_create_accepts_provider_strings(
        self, config, tenant_config
    ) -> None:
        adapter = ProviderRegistry(config).create(
            "TRANS_EXPRESS", tenant_config
        )
        assert isinstance(adapter, TransExpressProvider)

    def test_adapters_are_created_per_call(
        self, config, tenant_config
    ) -> None:
        registry = ProviderRegistry(config)
        first = registry.create(
            ShippingProviderType.FARDA_EXPRESS, tenant_config
        )
        second = registry.create(
            ShippingProviderType.FARDA_EXPRESS, tenant_config
        )
        assert first is not second

    def test_royal_express_tenant_from_settings(
        self, config, tenant_config
    ) -> None:
        tenant_config.royal_express_tenant = "royal-staging"
        adapter = ProviderRegistry(config).create(
            ShippingProviderType.ROYAL_EXPRESS, tenant_config
        )
        assert adapter.tenant == "royal-staging"

    def test_adapter_logger_is_namespaced(self, config, tenant_config) -> None:
        adapter = ProviderRegistry(config).create(
            ShippingProviderType.TRANS_EXPRESS, tenant_config
        )
        assert adapter.logger is logging.getLogger(
            "fastapi_couriers.providers.trans_express"
        )

    def test_sl_post_has_no_adapter(self, config, tenant_config) -> None:
        registry = ProviderRegistry(config)
        assert not registry.supports(ShippingProviderType.SL_POST)
        with pytest.raises(UnsupportedProviderError, match="manually"):
            registry.create(ShippingProviderType.SL_POST, tenant_config)

    def test_unknown_provider(self, config, tenant_config) -> None:
        with pytest.raises(UnsupportedProviderError, match="DHL"):
            ProviderRegistry(config).create("DHL", tenant_config)

    @pytest.mark.parametrize(
        "provider",
        [
            ShippingProviderType.FARDA_EXPRESS,
            ShippingProviderType.TRANS_EXPRESS,
            ShippingProviderType.ROYAL_EXPRESS,
        ],
    )
    def test_missing_credentials(self, config, provider) -> None:
        tenant = TenantShippingConfig(tenant_id="tenant-empty")
        with pytest.raises(ProviderNotConfiguredError, match="tenant-empty"):
            ProviderRegistry(config).create(provider, tenant)

    def test_farda_express_needs_both_keys(self, config) -> None:
        tenant = TenantShippingConfig(
            tenant_id="t-1", farda_express_api_key="farda-key"
        )
        with pytest.raises(ProviderNotConfiguredError):
            ProviderRegistry(config).create(
                ShippingProviderType.FARDA_EXPRESS, tenant
            )

    def test_available(self, config) -> None:
        assert ProviderRegistry(config).available() == [
            ShippingProviderType.FARDA_EXPRESS,
            ShippingProviderType.TRANS_EXPRESS,
            ShippingProviderType.ROYAL_EXPRESS,
        ]

    def test_register_replaces_factory(self, config, tenant_config) -> None:
        calls = []

        def factory(tenant, **kwargs):
            calls.append((tenant, kwargs))
            return TransExpressProvider("override", **kwargs)

        registry = ProviderRegistry(config, transport="transport")
        registry.register(ShippingProviderType.TRANS_EXPRESS, factory)
        adapter = registry.create(
            ShippingProviderType.TRANS_EXPRESS, tenant_config
        )

        assert adapter.auth.token == "override"
        ((tenant, kwargs),) = calls
        assert tenant is tenant_config
        assert kwargs["config"] is config
        assert kwargs["transport"] == "transport"

    def test_register_rejects_sl_post(self, config) -> None:
        with pytest.raises(UnsupportedProviderError):
            ProviderRegistry(config).register(
                ShippingProviderType.SL_POST, lambda tenant, **kw: None
            )

    @pytest.mark.parametrize(
        ("provider", "url"),
        [
            ("FARDA_EXPRESS", "https://farda-express.com/track?id=5501"),
            ("TRANS_EXPRESS", "https://transexpress.lk/tracking/5501"),
            ("ROYAL_EXPRESS", "https://merchant.curfox.com/tracking/5501"),
        ],
    )
    def test_tracking_url_needs_no_tenant(self, config, provider, url) -> None:
        assert ProviderRegistry(config).tracking_url(provider, "5501") == url

    def test_sl_post_has_no_tracking_page(self, config) -> None:
        with pytest.raises(UnsupportedProviderError, match="SL Post"):
            ProviderRegistry(config).tracking_url(
                ShippingProviderType.SL_POST, "RR1LK"
            )
