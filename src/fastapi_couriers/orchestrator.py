"""Order-level shipping workflow on top of the courier adapters."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from fastapi_couriers.config import CouriersConfig
from fastapi_couriers.exceptions import (
    AlreadyShippedError,
    InvalidShipmentRequestError,
    ShippingError,
    UnsupportedProviderError,
)
from fastapi_couriers.locations.base import LocationDirectory
from fastapi_couriers.protocols import OrderRepository, TenantConfigResolver
from fastapi_couriers.providers.base import (
    BaseShippingProvider,
    compute_cod_amount,
)
from fastapi_couriers.providers.royal_express import RoyalExpressProvider
from fastapi_couriers.providers.trans_express import TransExpressProvider
from fastapi_couriers.registry import ProviderRegistry
from fastapi_couriers.status import order_status_for
from fastapi_couriers.types import (
    EnhancedTrackingResult,
    OrderSnapshot,
    OrderStatus,
    PackageDetails,
    ShipmentStatus,
    ShippingAddress,
    ShippingLabel,
    ShippingProviderType,
    ShippingRate,
    TenantShippingConfig,
    TrackingUpdate,
)

logger = logging.getLogger(__name__)

_SHIPPED_STATUSES = frozenset(
    {OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.RETURNED}
)
#: Order states a courier status never overrides.
_FINAL_STATUSES = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.RETURNED, OrderStatus.CANCELLED}
)


@dataclass(frozen=True)
class ShipOrderRequest:
    """What the caller chooses when shipping an order."""

    provider: ShippingProviderType
    service: str | None = None
    weight: float = 1.0
    description: str | None = None
    #: SL Post only; the number the user copied from the post office slip.
    tracking_number: str | None = None
    city_id: int | None = None
    district_id: int | None = None
    city_name: str | None = None


@dataclass
class SyncReport:
    processed: int = 0
    updates: list[TrackingUpdate] = field(default_factory=list)

    @property
    def updated(self) -> int:
        return sum(1 for u in self.updates if u.success and u.changed)

    @property
    def failed(self) -> int:
        return sum(1 for u in self.updates if not u.success)


def _now() -> datetime:
    return datetime.now(UTC)


class ShippingOrchestrator:
    """Ships orders and keeps their tracking status current.

    The order data layer and the tenant credential store are injected;
    adapters come from the :class:`ProviderRegistry`.
    """

    def __init__(
        self,
        repository: OrderRepository,
        tenant_resolver: TenantConfigResolver,
        registry: ProviderRegistry | None = None,
        config: CouriersConfig | None = None,
    ) -> None:
        self.repository = repository
        self.tenant_resolver = tenant_resolver
        self.config = config or CouriersConfig()
        self.registry = registry or ProviderRegistry(self.config)

    async def adapter(
        self,
        tenant_id: str,
        provider: ShippingProviderType,
        tenant: TenantShippingConfig | None = None,
    ) -> BaseShippingProvider:
        if tenant is None:
            tenant = await self.tenant_resolver.resolve(tenant_id)
        return self.registry.create(provider, tenant)

    def origin_for(self, tenant: TenantShippingConfig) -> ShippingAddress:
        if tenant.warehouse is not None:
            return tenant.warehouse
        return ShippingAddress(**self.config.default_origin)

    @staticmethod
    def destination_for(
        order: OrderSnapshot, city_name: str | None = None
    ) -> ShippingAddress:
        return ShippingAddress(
            name=order.customer_name,
            street=order.customer_address,
            city=city_name or order.customer_city,
            state=order.customer_state,
            postal_code="",
            phone=order.customer_phone,
            alternate_phone=order.customer_second_phone,
        )

    async def ship_order(
        self, tenant_id: str, order_id: str, request: ShipOrderRequest
    ) -> ShippingLabel:
        order = await self.repository.get_order(tenant_id, order_id)
        if order.tracking_number or order.status in _SHIPPED_STATUSES:
            raise AlreadyShippedError(
                f"Order {order_id} was already shipped with "
                f"{order.tracking_number or 'a courier'}"
            )

        if request.provider is ShippingProviderType.SL_POST:
            return await self._record_manual_shipment(
                tenant_id, order_id, request.tracking_number
            )

        tenant = await self.tenant_resolver.resolve(tenant_id)
        adapter = await self.adapter(tenant_id, request.provider, tenant)
        origin = self.origin_for(tenant)
        destination = self.destination_for(order, request.city_name)
        package = PackageDetails(
            weight=request.weight,
            description=request.description or order.product_name or None,
        )
        service = request.service or self.config.default_service
        cod_amount = compute_cod_amount(
            order.unit_price, order.quantity, order.discount
        )
        booking = {
            "cod_amount": cod_amount,
            "tenant_id": tenant_id,
            "order_id": order_id,
        }

        if isinstance(adapter, TransExpressProvider):
            booking["order_prefix"] = tenant.trans_express_order_prefix
            known_city = request.city_id or request.district_id
            if not known_city and destination.city:
                label = await adapter.create_shipment_by_city_name(
                    destination,
                    package,
                    service,
                    destination.city,
                    **booking,
                )
            else:
                label = await adapter.create_shipment(
                    origin,
                    destination,
                    package,
                    service,
                    city_id=request.city_id,
                    district_id=request.district_id,
                    **booking,
                )
        else:
            if isinstance(adapter, RoyalExpressProvider):
                booking["order_prefix"] = tenant.royal_express_order_prefix
            label = await adapter.create_shipment(
                origin, destination, package, service, **booking
            )

        await self.repository.save_shipping_info(
            tenant_id,
            order_id,
            provider=request.provider,
            tracking_number=label.tracking_number,
            shipped_at=_now(),
        )
        logger.info(
            "Shipped order %s for tenant %s with %s: %s (COD %s)",
            order_id,
            tenant_id,
            label.provider,
            label.tracking_number,
            cod_amount,
        )
        return label

    async def _record_manual_shipment(
        self, tenant_id: str, order_id: str, tracking_number: str | None
    ) -> ShippingLabel:
        tracking = (tracking_number or "").strip()
        if not tracking:
            raise InvalidShipmentRequestError(
                "SL Post shipments need the tracking number from the slip"
            )
        await self.repository.save_shipping_info(
            tenant_id,
            order_id,
            provider=ShippingProviderType.SL_POST,
            tracking_number=tracking,
            shipped_at=_now(),
        )
        logger.info(
            "Recorded SL Post tracking number %s for order %s",
            tracking,
            order_id,
        )
        return ShippingLabel(
            tracking_number=tracking,
            label_url="",
            provider=ShippingProviderType.SL_POST.display_name,
        )

    async def _track(
        self, adapter: BaseShippingProvider, tracking_number: str
    ) -> ShipmentStatus:
        if isinstance(adapter, RoyalExpressProvider):
            result = await adapter.track_shipment_enhanced(tracking_number)
            return result.basic_status
        return await adapter.track_shipment(tracking_number)

    async def refresh_tracking(
        self,
        tenant_id: str,
        order_id: str,
        *,
        adapter: BaseShippingProvider | None = None,
        order: OrderSnapshot | None = None,
    ) -> TrackingUpdate:
        """Ask the courier for the latest status and persist it.

        Delivered, returned and cancelled orders keep their status, and so
        does any order while the courier reports PENDING.
        """
        if order is None:
            order = await self.repository.get_order(tenant_id, order_id)
        if not order.tracking_number or order.shipping_provider is None:
            raise InvalidShipmentRequestError(
                f"Order {order_id} has not been shipped yet"
            )
        if adapter is None:
            adapter = await self.adapter(tenant_id, order.shipping_provider)

        status = await self._track(adapter, order.tracking_number)
        order_status = order_status_for(status)
        # PENDING is also what a failed courier call degrades to.
        if order.status in _FINAL_STATUSES or status is ShipmentStatus.PENDING:
            order_status = order.status
        changed = order_status != order.status
        checked_at = _now()

        delivered_at = None
        if changed and order_status is OrderStatus.DELIVERED:
            delivered_at = checked_at
        await self.repository.record_tracking_update(
            tenant_id,
            order_id,
            shipment_status=status,
            order_status=order_status,
            checked_at=checked_at,
            delivered_at=delivered_at,
        )
        if changed and order_status is OrderStatus.RETURNED:
            await self.repository.restore_stock(tenant_id, order_id)
            logger.info("Order %s was returned, stock restored", order_id)
        if changed:
            logger.info(
                "Order %s moved from %s to %s (courier status %s)",
                order_id,
                order.status,
                order_status,
                status,
            )

        return TrackingUpdate(
            order_id=order_id,
            success=True,
            status=status,
            order_status=order_status,
            changed=changed,
            checked_at=checked_at,
        )

    async def sync_tenant(
        self,
        tenant_id: str,
        provider: ShippingProviderType | None = None,
    ) -> SyncReport:
        """Refresh every shipped order of a tenant, one at a time.

        Consecutive courier calls are spaced by ``sync_delay_seconds``.
        A failing order is reported in the result and does not stop the run.
        """
        orders = await self.repository.list_trackable_orders(
            tenant_id, provider
        )
        report = SyncReport(processed=len(orders))
        if not orders:
            return report

        tenant = await self.tenant_resolver.resolve(tenant_id)
        adapters: dict[ShippingProviderType, BaseShippingProvider] = {}
        delay = self.config.sync_delay_seconds

        for index, order in enumerate(orders):
            if index and delay > 0:
                await asyncio.sleep(delay)
            try:
                order_provider = order.shipping_provider
                if order_provider not in adapters:
                    adapters[order_provider] = await self.adapter(
                        tenant_id, order_provider, tenant
                    )
                update = await self.refresh_tracking(
                    tenant_id,
                    order.id,
                    adapter=adapters[order_provider],
                    order=order,
                )
            except ShippingError as exc:
                logger.warning(
                    "Tracking sync failed for order %s: %s", order.id, exc
                )
                update = TrackingUpdate(
                    order_id=order.id,
                    success=False,
                    error=str(exc),
                    checked_at=_now(),
                )
            report.updates.append(update)

        logger.info(
            "Synced %d orders for tenant %s: %d updated, %d failed",
            report.processed,
            tenant_id,
            report.updated,
            report.failed,
        )
        return report

    async def enhanced_tracking(
        self, tenant_id: str, order_id: str
    ) -> EnhancedTrackingResult:
        order = await self.repository.get_order(tenant_id, order_id)
        if order.shipping_provider is not ShippingProviderType.ROYAL_EXPRESS:
            raise UnsupportedProviderError(
                "Enhanced tracking is only available for Royal Express orders"
            )
        if not order.tracking_number:
            raise InvalidShipmentRequestError(
                f"Order {order_id} has no tracking number"
            )
        adapter = await self.adapter(tenant_id, order.shipping_provider)
        return await adapter.track_shipment_enhanced(order.tracking_number)

    async def get_rates(
        self,
        tenant_id: str,
        provider: ShippingProviderType,
        destination: ShippingAddress,
        package: PackageDetails,
        origin: ShippingAddress | None = None,
    ) -> list[ShippingRate]:
        tenant = await self.tenant_resolver.resolve(tenant_id)
        adapter = await self.adapter(tenant_id, provider, tenant)
        return await adapter.get_rates(
            origin or self.origin_for(tenant), destination, package
        )

    async def get_tracking_url(
        self,
        tenant_id: str,
        provider: ShippingProviderType,
        tracking_number: str,
    ) -> str:
        """Tracking pages are public, so the tenant needs no credentials."""
        logger.debug(
            "Tracking URL for %s waybill %s requested by tenant %s",
            provider,
            tracking_number,
            tenant_id,
        )
        return self.registry.tracking_url(provider, tracking_number)

    async def locations(
        self, tenant_id: str, provider: ShippingProviderType
    ) -> LocationDirectory:
        adapter = await self.adapter(tenant_id, provider)
        return adapter.locations
