"""Router factory for fastapi-couriers."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from fastapi_couriers.config import CouriersConfig
from fastapi_couriers.exceptions import register_exception_handlers
from fastapi_couriers.protocols import OrderRepository, TenantConfigResolver
from fastapi_couriers.registry import ProviderRegistry
from fastapi_couriers.routes.locations import router as locations_router
from fastapi_couriers.routes.shipments import router as shipments_router
from fastapi_couriers.routes.tracking import router as tracking_router


def create_shipping_router(
    *,
    config: CouriersConfig,
    repository: OrderRepository,
    tenant_resolver: TenantConfigResolver,
    registry: ProviderRegistry | None = None,
) -> APIRouter:
    """Create a configured API router."""
    actual_registry = registry or ProviderRegistry(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        app.state.couriers_config = config
        app.state.couriers_repository = repository
        app.state.couriers_tenant_resolver = tenant_resolver
        app.state.couriers_registry = actual_registry
        register_exception_handlers(app)
        yield

    router = APIRouter(lifespan=lifespan)
    router.include_router(shipments_router)
    router.include_router(tracking_router)
    router.include_router(locations_router)
    return router
