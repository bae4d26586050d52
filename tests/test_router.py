"""Router tests."""

from conftest import InMemoryOrderRepository, StaticTenantResolver
from fastapi import APIRouter, FastAPI

from fastapi_couriers.config import CouriersConfig
from fastapi_couriers.exceptions import (
    AlreadyShippedError,
    CommunicationError,
    ShippingError,
)
from fastapi_couriers.registry import ProviderRegistry
from fastapi_couriers.router import create_shipping_router


def _router(**kwargs):
    return create_shipping_router(
        config=CouriersConfig(),
        repository=InMemoryOrderRepository(),
        tenant_resolver=StaticTenantResolver(),
        **kwargs,
    )


def test_create_shipping_router_returns_apirouter() -> None:
    assert isinstance(_router(), APIRouter)


def test_router_includes_every_endpoint_group() -> None:
    app = FastAPI()
    app.include_router(_router())
    paths = set(app.openapi()["paths"])

    assert {
        "/shipping/health",
        "/shipping/providers",
        "/orders/{order_id}/shipment",
        "/orders/{order_id}/tracking",
        "/orders/{order_id}/enhanced-tracking",
        "/tracking/sync",
        "/locations/{provider}/regions",
        "/locations/{provider}/regions/{region}/cities",
    } <= paths


async def test_exception_handlers_registered_after_lifespan() -> None:
    """Exception handlers should be registered when the router lifespan runs."""
    app = FastAPI()
    app.include_router(_router())

    async with app.router.lifespan_context(app) as _:
        handlers = app.exception_handlers
        assert CommunicationError in handlers
        assert AlreadyShippedError in handlers
        assert ShippingError in handlers


async def test_lifespan_populates_app_state() -> None:
    config = CouriersConfig(sync_delay_seconds=0)
    repository = InMemoryOrderRepository()
    resolver = StaticTenantResolver()
    registry = ProviderRegistry(config)
    app = FastAPI()
    app.include_router(
        create_shipping_router(
            config=config,
            repository=repository,
            tenant_resolver=resolver,
            registry=registry,
        )
    )

    async with app.router.lifespan_context(app) as _:
        assert app.state.couriers_config is config
        assert app.state.couriers_repository is repository
        assert app.state.couriers_tenant_resolver is resolver
        assert app.state.couriers_registry is registry


async def test_default_registry_uses_router_config() -> None:
    config = CouriersConfig(sync_delay_seconds=0)
    app = FastAPI()
    app.include_router(
        create_shipping_router(
            config=config,
            repository=InMemoryOrderRepository(),
            tenant_resolver=StaticTenantResolver(),
        )
    )

    async with app.router.lifespan_context(app) as _:
        registry = app.state.couriers_registry
        assert isinstance(registry, ProviderRegistry)
        assert registry.config is config
