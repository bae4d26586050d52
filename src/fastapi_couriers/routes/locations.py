"""Courier region and city lookups for address forms."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from fastapi_couriers.dependencies import get_orchestrator, get_tenant_id
from fastapi_couriers.schemas import CityResponse
from fastapi_couriers.types import ShippingProviderType

router = APIRouter()


@router.get("/locations/{provider}/regions", response_model=list[str])
async def list_regions(
    provider: ShippingProviderType,
    tenant_id: str = Depends(get_tenant_id),
    orchestrator=Depends(get_orchestrator),
) -> list[str]:
    """Districts or states known to the courier."""
    directory = await orchestrator.locations(tenant_id, provider)
    return await directory.get_regions()


@router.get(
    "/locations/{provider}/regions/{region}/cities",
    response_model=list[CityResponse],
)
async def list_cities(
    provider: ShippingProviderType,
    region: str,
    tenant_id: str = Depends(get_tenant_id),
    orchestrator=Depends(get_orchestrator),
) -> list[CityResponse]:
    directory = await orchestrator.locations(tenant_id, provider)
    cities = await directory.get_cities(region)
    return [CityResponse.from_city(city) for city in cities]
