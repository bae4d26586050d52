"""Selection of courier adapters by provider type."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from fastapi_couriers.config import CouriersConfig
from fastapi_couriers.exceptions import (
    ProviderNotConfiguredError,
    UnsupportedProviderError,
)
from fastapi_couriers.providers.base import BaseShippingProvider
from fastapi_couriers.providers.farda_express import FardaExpressProvider
from fastapi_couriers.providers.royal_express import RoyalExpressProvider
from fastapi_couriers.providers.trans_express import TransExpressProvider
from fastapi_couriers.types import ShippingProviderType, TenantShippingConfig

logger = logging.getLogger(__name__)

ProviderFactory = Callable[..., BaseShippingProvider]


def _farda_express(
    tenant: TenantShippingConfig, **kwargs: Any
) -> FardaExpressProvider:
    if not tenant.farda_express_client_id or not tenant.farda_express_api_key:
        raise ProviderNotConfiguredError(
            "Farda Express client ID and API key are not configured for "
            f"tenant {tenant.tenant_id}"
        )
    return FardaExpressProvider(
        tenant.farda_express_client_id, tenant.farda_express_api_key, **kwargs
    )


def _trans_express(
    tenant: TenantShippingConfig, **kwargs: Any
) -> TransExpressProvider:
    if not tenant.trans_express_api_key:
        raise ProviderNotConfiguredError(
            f"Trans Express API key is not configured for tenant "
            f"{tenant.tenant_id}"
        )
    return TransExpressProvider(tenant.trans_express_api_key, **kwargs)


def _royal_express(
    tenant: TenantShippingConfig, **kwargs: Any
) -> RoyalExpressProvider:
    if not tenant.royal_express_api_key:
        raise ProviderNotConfiguredError(
            f"Royal Express credentials are not configured for tenant "
            f"{tenant.tenant_id}"
        )
    return RoyalExpressProvider(
        tenant.royal_express_api_key,
        tenant=tenant.royal_express_tenant,
        **kwargs,
    )


DEFAULT_FACTORIES: dict[ShippingProviderType, ProviderFactory] = {
    ShippingProviderType.FARDA_EXPRESS: _farda_express,
    ShippingProviderType.TRANS_EXPRESS: _trans_express,
    ShippingProviderType.ROYAL_EXPRESS: _royal_express,
}

#: Adapter classes whose public tracking pages need no credentials.
TRACKING_PAGES: dict[ShippingProviderType, type[BaseShippingProvider]] = {
    ShippingProviderType.FARDA_EXPRESS: FardaExpressProvider,
    ShippingProviderType.TRANS_EXPRESS: TransExpressProvider,
    ShippingProviderType.ROYAL_EXPRESS: RoyalExpressProvider,
}


def _provider_type(
    provider: ShippingProviderType | str,
) -> ShippingProviderType:
    try:
        return ShippingProviderType(provider)
    except ValueError as exc:
        raise UnsupportedProviderError(
            f"Unknown shipping provider: {provider}"
        ) from exc


class ProviderRegistry:
    """Builds tenant-scoped courier adapters.

    Adapters are created per call from the tenant's credentials; the
    registry keeps no adapter instances. A factory receives the tenant
    config plus the ``config``, ``transport`` and ``logger`` keywords.
    """

    def __init__(
        self,
        config: CouriersConfig | None = None,
        *,
        transport: Any = None,
    ) -> None:
        self.config = config or CouriersConfig()
        self.transport = transport
        self._factories: dict[ShippingProviderType, ProviderFactory] = dict(
            DEFAULT_FACTORIES
        )

    def register(
        self, provider: ShippingProviderType, factory: ProviderFactory
    ) -> None:
        """Register or replace the factory for a provider type."""
        if provider is ShippingProviderType.SL_POST:
            raise UnsupportedProviderError(
                "SL Post is tracked manually and takes no adapter"
            )
        self._factories[provider] = factory

    def supports(self, provider: ShippingProviderType) -> bool:
        return provider in self._factories

    def available(self) -> list[ShippingProviderType]:
        return [p for p in ShippingProviderType if p in self._factories]

    def create(
        self,
        provider: ShippingProviderType | str,
        tenant: TenantShippingConfig,
    ) -> BaseShippingProvider:
        provider_type = _provider_type(provider)
        factory = self._factories.get(provider_type)
        if factory is None:
            raise UnsupportedProviderError(
                f"{provider_type.display_name} has no API integration; "
                f"record its tracking number manually"
            )
        logger.debug(
            "Creating %s adapter for tenant %s",
            provider_type.display_name,
            tenant.tenant_id,
        )
        return factory(
            tenant,
            config=self.config,
            transport=self.transport,
            logger=logging.getLogger(
                f"fastapi_couriers.providers.{provider_type.lower()}"
            ),
        )

    def tracking_url(
        self, provider: ShippingProviderType | str, tracking_number: str
    ) -> str:
        """Public tracking page for a waybill; no tenant login involved."""
        provider_type = _provider_type(provider)
        adapter_class = TRACKING_PAGES.get(provider_type)
        if adapter_class is None:
            raise UnsupportedProviderError(
                f"{provider_type.display_name} has no tracking page"
            )
        return adapter_class.get_tracking_url(tracking_number)
