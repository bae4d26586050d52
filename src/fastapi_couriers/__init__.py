"""Sri Lankan courier integrations for FastAPI applications."""

from typing import TYPE_CHECKING

__version__ = "0.1.0"

__all__ = [
    "CouriersConfig",
    "OrderRepository",
    "ProviderRegistry",
    "ShipmentStatus",
    "ShippingError",
    "ShippingOrchestrator",
    "ShippingProviderType",
    "TenantConfigResolver",
    "__version__",
    "create_shipping_router",
    "register_exception_handlers",
]

if TYPE_CHECKING:
    from fastapi_couriers.config import CouriersConfig
    from fastapi_couriers.exceptions import (
        ShippingError,
        register_exception_handlers,
    )
    from fastapi_couriers.orchestrator import ShippingOrchestrator
    from fastapi_couriers.protocols import (
        OrderRepository,
        TenantConfigResolver,
    )
    from fastapi_couriers.registry import ProviderRegistry
    from fastapi_couriers.router import create_shipping_router
    from fastapi_couriers.types import ShipmentStatus, ShippingProviderType


def __getattr__(name: str):
    # Lazy imports to avoid loading FastAPI and the adapters on import.
    if name == "CouriersConfig":
        from fastapi_couriers.config import CouriersConfig

        return CouriersConfig
    if name == "create_shipping_router":
        from fastapi_couriers.router import create_shipping_router

        return create_shipping_router
    if name == "ProviderRegistry":
        from fastapi_couriers.registry import ProviderRegistry

        return ProviderRegistry
    if name == "ShippingOrchestrator":
        from fastapi_couriers.orchestrator import ShippingOrchestrator

        return ShippingOrchestrator
    if name in ("ShippingError", "register_exception_handlers"):
        from fastapi_couriers import exceptions

        return getattr(exceptions, name)
    if name in ("OrderRepository", "TenantConfigResolver"):
        from fastapi_couriers import protocols

        return getattr(protocols, name)
    if name in ("ShipmentStatus", "ShippingProviderType"):
        from fastapi_couriers import types

        return getattr(types, name)
    raise AttributeError(
        f"module 'fastapi_couriers' has no attribute {name!r}"
    )
