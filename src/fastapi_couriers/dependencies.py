"""Dependency providers for request handlers."""

from __future__ import annotations

from fastapi import Header, Request

from fastapi_couriers.config import CouriersConfig
from fastapi_couriers.orchestrator import ShippingOrchestrator
from fastapi_couriers.protocols import OrderRepository, TenantConfigResolver
from fastapi_couriers.registry import ProviderRegistry


def get_config(request: Request) -> CouriersConfig:
    """Read config from FastAPI app state."""
    return request.app.state.couriers_config


def get_repository(request: Request) -> OrderRepository:
    """Read order repository from FastAPI app state."""
    return request.app.state.couriers_repository


def get_tenant_resolver(request: Request) -> TenantConfigResolver:
    """Read tenant config resolver from FastAPI app state."""
    return request.app.state.couriers_tenant_resolver


def get_registry(request: Request) -> ProviderRegistry:
    """Read provider registry from FastAPI app state."""
    return request.app.state.couriers_registry


def get_tenant_id(x_tenant_id: str = Header()) -> str:
    """Tenant the request acts for, from the ``X-Tenant-ID`` header."""
    return x_tenant_id


def get_orchestrator(request: Request) -> ShippingOrchestrator:
    """Create ShippingOrchestrator for the current request."""
    return ShippingOrchestrator(
        repository=get_repository(request),
        tenant_resolver=get_tenant_resolver(request),
        registry=get_registry(request),
        config=get_config(request),
    )
