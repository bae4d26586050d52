"""Dependency injection tests."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from fastapi_couriers.config import CouriersConfig
from fastapi_couriers.dependencies import (
    get_config,
    get_orchestrator,
    get_registry,
    get_repository,
    get_tenant_id,
    get_tenant_resolver,
)
from fastapi_couriers.orchestrator import ShippingOrchestrator
from fastapi_couriers.registry import ProviderRegistry


def _make_request(**state_attrs):
    """Create a mock request with app.state attributes."""
    request = MagicMock()
    state = SimpleNamespace(**state_attrs)
    request.app.state = state
    return request


class TestDependencies:
    def test_get_config_from_app_state(self) -> None:
        config = CouriersConfig(sync_delay_seconds=0)
        request = _make_request(couriers_config=config)
        assert get_config(request) is config

    def test_get_repository_from_app_state(self) -> None:
        repo = MagicMock()
        request = _make_request(couriers_repository=repo)
        assert get_repository(request) is repo

    def test_get_tenant_resolver_from_app_state(self) -> None:
        resolver = MagicMock()
        request = _make_request(couriers_tenant_resolver=resolver)
        assert get_tenant_resolver(request) is resolver

    def test_get_registry_from_app_state(self) -> None:
        registry = ProviderRegistry(CouriersConfig())
        request = _make_request(couriers_registry=registry)
        assert get_registry(request) is registry

    def test_get_orchestrator_wires_app_state(self) -> None:
        config = CouriersConfig(sync_delay_seconds=0)
        repo = MagicMock()
        resolver = MagicMock()
        registry = ProviderRegistry(config)
        request = _make_request(
            couriers_config=config,
            couriers_repository=repo,
            couriers_tenant_resolver=resolver,
            couriers_registry=registry,
        )

        orchestrator = get_orchestrator(request)

        assert isinstance(orchestrator, ShippingOrchestrator)
        assert orchestrator.repository is repo
        assert orchestrator.tenant_resolver is resolver
        assert orchestrator.registry is registry
        assert orchestrator.config is config


def _tenant_app() -> FastAPI:
    app = FastAPI()

    @app.get("/whoami")
    async def whoami(tenant_id: str = Depends(get_tenant_id)) -> dict:
        return {"tenant_id": tenant_id}

    return app


def test_tenant_id_from_header() -> None:
    client = TestClient(_tenant_app())
    resp = client.get("/whoami", headers={"X-Tenant-ID": "tenant-1a2b3c4d"})

    assert resp.status_code == 200
    assert resp.json() == {"tenant_id": "tenant-1a2b3c4d"}


def test_missing_tenant_header_is_rejected() -> None:
    client = TestClient(_tenant_app())
    resp = client.get("/whoami")

    assert resp.status_code == 422
