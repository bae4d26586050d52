"""Shared fixtures for fastapi-couriers tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any

import httpx
import pytest

from fastapi_couriers.config import CouriersConfig
from fastapi_couriers.exceptions import OrderNotFoundError
from fastapi_couriers.types import (
    OrderSnapshot,
    OrderStatus,
    ShipmentStatus,
    ShippingAddress,
    ShippingProviderType,
    TenantShippingConfig,
)

FARDA_URL = "https://farda.test"
TRANS_URL = "https://trans.test"
ROYAL_URL = "https://royal.test"

TENANT_ID = "tenant-1a2b3c4d"
ORDER_ID = "ord-9f8e7d6c5b"


class CourierStub:
    """Scripted courier API behind an ``httpx.MockTransport``.

    A scripted response is a dict/list (200 JSON), a ``(status, body)``
    tuple or a callable taking the request. The last response queued for a
    route is repeated.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Any]] = {}
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def add(self, method: str, path: str, *responses: Any) -> CourierStub:
        self.routes.setdefault((method.upper(), path), []).extend(responses)
        return self

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.method == method.upper() and r.url.path == path
        ]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": "route not stubbed"})
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(reply):
            return reply(request)
        status, body = reply if isinstance(reply, tuple) else (200, reply)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)


def json_body(request: httpx.Request) -> Any:
    return json.loads(request.content)


def form_body(request: httpx.Request) -> dict[str, str]:
    return dict(httpx.QueryParams(request.content.decode()))


class InMemoryOrderRepository:
    def __init__(self, *orders: OrderSnapshot) -> None:
        self.orders: dict[str, OrderSnapshot] = {o.id: o for o in orders}
        self.shipping_saves: list[dict] = []
        self.tracking_updates: list[dict] = []
        self.restocked: list[str] = []

    def add(self, order: OrderSnapshot) -> OrderSnapshot:
        self.orders[order.id] = order
        return order

    async def get_order(self, tenant_id: str, order_id: str) -> OrderSnapshot:
        order = self.orders.get(order_id)
        if order is None or order.tenant_id != tenant_id:
            raise OrderNotFoundError(order_id)
        return replace(order)

    async def save_shipping_info(
        self,
        tenant_id: str,
        order_id: str,
        *,
        provider: ShippingProviderType,
        tracking_number: str,
        shipped_at: datetime,
    ) -> None:
        order = self.orders[order_id]
        order.shipping_provider = provider
        order.tracking_number = tracking_number
        order.status = OrderStatus.SHIPPED
        self.shipping_saves.append(
            {
                "order_id": order_id,
                "provider": provider,
                "tracking_number": tracking_number,
                "shipped_at": shipped_at,
            }
        )

    async def record_tracking_update(
        self,
        tenant_id: str,
        order_id: str,
        *,
        shipment_status: ShipmentStatus,
        order_status: OrderStatus,
        checked_at: datetime,
        delivered_at: datetime | None = None,
    ) -> None:
        self.orders[order_id].status = order_status
        self.tracking_updates.append(
            {
                "order_id": order_id,
                "shipment_status": shipment_status,
                "order_status": order_status,
                "checked_at": checked_at,
                "delivered_at": delivered_at,
            }
        )

    async def list_trackable_orders(
        self,
        tenant_id: str,
        provider: ShippingProviderType | None = None,
    ) -> list[OrderSnapshot]:
        return [
            replace(o)
            for o in self.orders.values()
            if o.tenant_id == tenant_id
            and o.status in (OrderStatus.SHIPPED, OrderStatus.RESCHEDULED)
            and o.tracking_number
            and o.shipping_provider is not ShippingProviderType.SL_POST
            and (provider is None or o.shipping_provider is provider)
        ]

    async def restore_stock(self, tenant_id: str, order_id: str) -> None:
        self.restocked.append(order_id)


class StaticTenantResolver:
    def __init__(self, *configs: TenantShippingConfig) -> None:
        self.configs = {c.tenant_id: c for c in configs}

    async def resolve(self, tenant_id: str) -> TenantShippingConfig:
        return self.configs.get(
            tenant_id, TenantShippingConfig(tenant_id=tenant_id)
        )


def make_order(**overrides: Any) -> OrderSnapshot:
    fields: dict[str, Any] = {
        "id": ORDER_ID,
        "tenant_id": TENANT_ID,
        "customer_name": "John Doe",
        "customer_phone": "+94771234567",
        "customer_address": "456 Main St",
        "unit_price": Decimal("2500.00"),
        "quantity": 2,
        "discount": Decimal("500.00"),
        "customer_city": "Colombo 02",
        "customer_state": "Colombo",
        "product_name": "Herbal Tea",
    }
    fields.update(overrides)
    return OrderSnapshot(**fields)


def royal_login_ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200, json={"message": "success", "token": "tok-1", "user": {}}
    )


def royal_express_stub(overrides: dict | None = None) -> CourierStub:
    """Curfox stub with a working login, user, businesses and states."""
    routes: dict[tuple[str, str], Any] = {
        ("POST", "/merchant/login"): royal_login_ok,
        ("GET", "/merchant/user/get-current"): {
            "data": {"merchant": {"name": "Lanka Herbals"}}
        },
        ("GET", "/merchant/business"): {
            "data": [
                {"id": 11, "business_name": "Main", "is_default": False},
                {"id": 22, "business_name": "Default", "is_default": True},
            ]
        },
        ("GET", "/merchant/state"): {
            "data": [
                {"id": 1, "name": "Colombo"},
                {"id": 2, "name": "Galle"},
                {"id": 3, "name": "Kandy"},
            ]
        },
    }
    routes.update(overrides or {})
    stub = CourierStub()
    for (method, path), reply in routes.items():
        if reply is not None:
            stub.add(method, path, reply)
    return stub


@pytest.fixture()
def config() -> CouriersConfig:
    return CouriersConfig(
        farda_express_api_url=FARDA_URL,
        trans_express_api_url=TRANS_URL,
        royal_express_api_url=ROYAL_URL,
        royal_express_email="",
        royal_express_password="",
        royal_express_default_business_id=None,
        sync_delay_seconds=0,
    )


@pytest.fixture()
def tenant_config() -> TenantShippingConfig:
    return TenantShippingConfig(
        tenant_id=TENANT_ID,
        farda_express_client_id="client-7",
        farda_express_api_key="farda-key",
        trans_express_api_key="trans-key",
        trans_express_order_prefix="SHOP",
        royal_express_api_key="merchant@example.com:s3cret",
        royal_express_order_prefix="RX",
        royal_express_tenant="royalexpress",
    )


@pytest.fixture()
def origin() -> ShippingAddress:
    return ShippingAddress(
        name="Warehouse",
        street="123 Warehouse St",
        city="Colombo",
        state="Colombo",
        postal_code="10300",
        phone="+9477123456",
    )


@pytest.fixture()
def destination() -> ShippingAddress:
    return ShippingAddress(
        name="John Doe",
        street="456 Main St",
        city="Colombo 02",
        state="Colombo",
        postal_code="",
        phone="+94771234567",
    )


@pytest.fixture()
def order() -> OrderSnapshot:
    return make_order()


@pytest.fixture()
def repository(order) -> InMemoryOrderRepository:
    return InMemoryOrderRepository(order)


@pytest.fixture()
def tenant_resolver(tenant_config) -> StaticTenantResolver:
    return StaticTenantResolver(tenant_config)


@pytest.fixture()
def stub() -> CourierStub:
    return CourierStub()


@pytest.fixture()
async def async_engine():
    """Create an in-memory aiosqlite async engine."""
    sa = pytest.importorskip("sqlalchemy")  # noqa: F841
    from sqlalchemy.ext.asyncio import create_async_engine

    from fastapi_couriers.contrib.sqlalchemy.models import Base

    engine = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
async def async_session_factory(async_engine):
    """Create an async session factory bound to the in-memory engine."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    factory = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )
    yield factory


@pytest.fixture()
def sqlalchemy_repository(async_session_factory):
    """Create an SQLAlchemyOrderRepository."""
    from fastapi_couriers.contrib.sqlalchemy.repository import (
        SQLAlchemyOrderRepository,
    )

    return SQLAlchemyOrderRepository(async_session_factory)


ResponseFactory = Callable[[httpx.Request], httpx.Response]
