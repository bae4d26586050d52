"""SQLAlchemy model tests with real aiosqlite DB."""

from decimal import Decimal

import pytest
from sqlalchemy import inspect, select

from fastapi_couriers.contrib.sqlalchemy.models import (
    OrderModel,
    ProductModel,
    StockAdjustmentModel,
    TrackingUpdateModel,
)


@pytest.fixture()
async def async_session(async_session_factory):
    async with async_session_factory() as session:
        yield session


def test_table_names() -> None:
    assert OrderModel.__tablename__ == "couriers_orders"
    assert ProductModel.__tablename__ == "couriers_products"
    assert TrackingUpdateModel.__tablename__ == "couriers_tracking_updates"
    assert StockAdjustmentModel.__tablename__ == "couriers_stock_adjustments"


def test_order_model_has_shipping_columns() -> None:
    column_names = {col.key for col in inspect(OrderModel).column_attrs}

    assert {
        "shipping_provider",
        "tracking_number",
        "last_shipment_status",
        "shipped_at",
        "delivered_at",
        "stock_restored",
    } <= column_names


async def test_order_model_defaults(async_session) -> None:
    """Verify default values are set correctly."""
    order = OrderModel(
        id="ord-1",
        tenant_id="tenant-1",
        customer_name="John Doe",
        customer_phone="+94771234567",
        customer_address="456 Main St",
        unit_price=Decimal("2500.00"),
    )
    async_session.add(order)
    await async_session.commit()
    await async_session.refresh(order)

    assert order.status == "CONFIRMED"
    assert order.quantity == 1
    assert order.discount == 0
    assert order.customer_city == ""
    assert order.customer_second_phone == ""
    assert order.product_id is None
    assert order.tracking_number is None
    assert order.shipped_at is None
    assert order.stock_restored is False


async def test_product_stock_defaults_to_zero(async_session) -> None:
    async_session.add(ProductModel(id="p-1", tenant_id="t-1", name="Tea"))
    await async_session.commit()

    product = await async_session.get(ProductModel, "p-1")
    assert product.stock == 0


async def test_tracking_update_gets_id_and_timestamp(async_session) -> None:
    async_session.add(
        OrderModel(
            id="ord-1",
            tenant_id="tenant-1",
            customer_name="John Doe",
            customer_phone="+94771234567",
            customer_address="456 Main St",
            unit_price=Decimal("100"),
        )
    )
    async_session.add(
        TrackingUpdateModel(
            tenant_id="tenant-1",
            order_id="ord-1",
            shipment_status="IN_TRANSIT",
            order_status="SHIPPED",
        )
    )
    await async_session.commit()

    update = (
        await async_session.execute(select(TrackingUpdateModel))
    ).scalar_one()
    assert update.id is not None
    assert update.checked_at is not None
