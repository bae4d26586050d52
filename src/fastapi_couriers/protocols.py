"""Contracts between the shipping core and its collaborators."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from fastapi_couriers.types import (
    OrderSnapshot,
    OrderStatus,
    PackageDetails,
    ShipmentStatus,
    ShippingAddress,
    ShippingLabel,
    ShippingProviderType,
    ShippingRate,
    TenantShippingConfig,
)


@runtime_checkable
class ShippingProvider(Protocol):
    """The four-operation contract every courier adapter satisfies."""

    def get_name(self) -> str: ...

    async def get_rates(
        self,
        origin: ShippingAddress,
        destination: ShippingAddress,
        package: PackageDetails,
    ) -> list[ShippingRate]: ...

    async def create_shipment(
        self,
        origin: ShippingAddress,
        destination: ShippingAddress,
        package: PackageDetails,
        service: str = "Standard",
        **options: Any,
    ) -> ShippingLabel: ...

    async def track_shipment(self, tracking_number: str) -> ShipmentStatus: ...

    def get_tracking_url(self, tracking_number: str) -> str: ...


@runtime_checkable
class OrderRepository(Protocol):
    """Order data layer the orchestrator reads from and writes to."""

    async def get_order(
        self, tenant_id: str, order_id: str
    ) -> OrderSnapshot: ...

    async def save_shipping_info(
        self,
        tenant_id: str,
        order_id: str,
        *,
        provider: ShippingProviderType,
        tracking_number: str,
        shipped_at: datetime,
    ) -> None: ...

    async def record_tracking_update(
        self,
        tenant_id: str,
        order_id: str,
        *,
        shipment_status: ShipmentStatus,
        order_status: OrderStatus,
        checked_at: datetime,
        delivered_at: datetime | None = None,
    ) -> None: ...

    async def list_trackable_orders(
        self,
        tenant_id: str,
        provider: ShippingProviderType | None = None,
    ) -> list[OrderSnapshot]: ...

    async def restore_stock(self, tenant_id: str, order_id: str) -> None: ...


@runtime_checkable
class TenantConfigResolver(Protocol):
    """Looks up the courier credentials stored for a tenant."""

    async def resolve(self, tenant_id: str) -> TenantShippingConfig: ...
