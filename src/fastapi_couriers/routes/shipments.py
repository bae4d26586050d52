"""Provider and shipment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from fastapi_couriers.dependencies import (
    get_orchestrator,
    get_registry,
    get_tenant_id,
)
from fastapi_couriers.orchestrator import ShipOrderRequest
from fastapi_couriers.registry import ProviderRegistry
from fastapi_couriers.schemas import (
    PackageSchema,
    ProviderResponse,
    RateResponse,
    RatesRequest,
    ShipmentResponse,
    ShipOrderBody,
    TrackingUrlResponse,
)
from fastapi_couriers.types import PackageDetails, ShippingProviderType

router = APIRouter()


@router.get("/shipping/health")
async def shipping_health() -> dict[str, str]:
    """Healthcheck endpoint for shipping routes."""
    return {"status": "ok"}


@router.get("/shipping/providers", response_model=list[ProviderResponse])
async def list_providers(
    registry: ProviderRegistry = Depends(get_registry),
) -> list[ProviderResponse]:
    """List selectable couriers; SL Post is listed without an API."""
    return [
        ProviderResponse(
            provider=provider,
            display_name=provider.display_name,
            has_api=registry.supports(provider),
        )
        for provider in ShippingProviderType
    ]


def _package(schema: PackageSchema) -> PackageDetails:
    return PackageDetails(**schema.model_dump())


@router.post(
    "/shipping/providers/{provider}/rates",
    response_model=list[RateResponse],
)
async def get_rates(
    provider: ShippingProviderType,
    body: RatesRequest,
    tenant_id: str = Depends(get_tenant_id),
    orchestrator=Depends(get_orchestrator),
) -> list[RateResponse]:
    """Quote the courier's service tiers."""
    rates = await orchestrator.get_rates(
        tenant_id,
        provider,
        body.destination.to_address(),
        _package(body.package),
        origin=body.origin.to_address() if body.origin else None,
    )
    return [RateResponse.from_rate(rate) for rate in rates]


@router.get(
    "/shipping/providers/{provider}/tracking-url/{tracking_number}",
    response_model=TrackingUrlResponse,
)
async def get_tracking_url(
    provider: ShippingProviderType,
    tracking_number: str,
    tenant_id: str = Depends(get_tenant_id),
    orchestrator=Depends(get_orchestrator),
) -> TrackingUrlResponse:
    """Public tracking page for a waybill."""
    url = await orchestrator.get_tracking_url(
        tenant_id, provider, tracking_number
    )
    return TrackingUrlResponse(
        provider=provider, tracking_number=tracking_number, tracking_url=url
    )


@router.post("/orders/{order_id}/shipment", response_model=ShipmentResponse)
async def ship_order(
    order_id: str,
    body: ShipOrderBody,
    tenant_id: str = Depends(get_tenant_id),
    orchestrator=Depends(get_orchestrator),
) -> ShipmentResponse:
    """Book the order with a courier, or record an SL Post number."""
    label = await orchestrator.ship_order(
        tenant_id, order_id, ShipOrderRequest(**body.model_dump())
    )
    return ShipmentResponse.from_label(order_id, label)
