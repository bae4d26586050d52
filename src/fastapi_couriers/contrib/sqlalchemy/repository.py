"""SQLAlchemy order repository implementation."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fastapi_couriers.contrib.sqlalchemy.models import (
    OrderModel,
    ProductModel,
    StockAdjustmentModel,
    TrackingUpdateModel,
)
from fastapi_couriers.exceptions import AlreadyShippedError, OrderNotFoundError
from fastapi_couriers.types import (
    OrderSnapshot,
    OrderStatus,
    ShipmentStatus,
    ShippingProviderType,
)

logger = logging.getLogger(__name__)

#: Orders still moving through a courier network.
TRACKABLE_STATUSES = (OrderStatus.SHIPPED, OrderStatus.RESCHEDULED)


class SQLAlchemyOrderRepository:
    """Order repository backed by SQLAlchemy async sessions."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        self.session_factory = session_factory

    @staticmethod
    async def _load(
        session: AsyncSession, tenant_id: str, order_id: str
    ) -> OrderModel:
        result = await session.execute(
            select(OrderModel).where(
                OrderModel.id == order_id, OrderModel.tenant_id == tenant_id
            )
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    @staticmethod
    async def _snapshot(
        session: AsyncSession, order: OrderModel
    ) -> OrderSnapshot:
        product_name = ""
        if order.product_id:
            product = await session.get(ProductModel, order.product_id)
            product_name = product.name if product else ""
        provider = order.shipping_provider
        return OrderSnapshot(
            id=order.id,
            tenant_id=order.tenant_id,
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            customer_address=order.customer_address,
            unit_price=Decimal(order.unit_price),
            quantity=order.quantity,
            discount=Decimal(order.discount or 0),
            customer_second_phone=order.customer_second_phone or "",
            customer_city=order.customer_city or "",
            customer_state=order.customer_state or "",
            product_name=product_name,
            status=OrderStatus(order.status),
            shipping_provider=ShippingProviderType(provider)
            if provider
            else None,
            tracking_number=order.tracking_number,
        )

    async def get_order(self, tenant_id: str, order_id: str) -> OrderSnapshot:
        async with self.session_factory() as session:
            order = await self._load(session, tenant_id, order_id)
            return await self._snapshot(session, order)

    async def save_shipping_info(
        self,
        tenant_id: str,
        order_id: str,
        *,
        provider: ShippingProviderType,
        tracking_number: str,
        shipped_at: datetime,
    ) -> None:
        async with self.session_factory() as session:
            order = await self._load(session, tenant_id, order_id)
            if order.tracking_number:
                raise AlreadyShippedError(
                    f"Order {order_id} already has tracking number "
                    f"{order.tracking_number}"
                )
            order.shipping_provider = str(provider)
            order.tracking_number = tracking_number
            order.status = str(OrderStatus.SHIPPED)
            order.shipped_at = shipped_at
            await session.commit()

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
        async with self.session_factory() as session:
            order = await self._load(session, tenant_id, order_id)
            session.add(
                TrackingUpdateModel(
                    tenant_id=tenant_id,
                    order_id=order_id,
                    shipment_status=str(shipment_status),
                    order_status=str(order_status),
                    checked_at=checked_at,
                )
            )
            order.status = str(order_status)
            order.last_shipment_status = str(shipment_status)
            if delivered_at is not None:
                order.delivered_at = delivered_at
            elif order_status is not OrderStatus.DELIVERED:
                order.delivered_at = None
            await session.commit()

    async def list_trackable_orders(
        self,
        tenant_id: str,
        provider: ShippingProviderType | None = None,
    ) -> list[OrderSnapshot]:
        """Shipped orders with a courier-issued tracking number."""
        stmt = select(OrderModel).where(
            OrderModel.tenant_id == tenant_id,
            OrderModel.status.in_([str(s) for s in TRACKABLE_STATUSES]),
            OrderModel.tracking_number.is_not(None),
            OrderModel.shipping_provider.is_not(None),
            OrderModel.shipping_provider != str(ShippingProviderType.SL_POST),
        )
        if provider is not None:
            stmt = stmt.where(OrderModel.shipping_provider == str(provider))
        async with self.session_factory() as session:
            result = await session.execute(stmt.order_by(OrderModel.id))
            return [
                await self._snapshot(session, order)
                for order in result.scalars().all()
            ]

    async def restore_stock(self, tenant_id: str, order_id: str) -> None:
        """Put a returned order's quantity back on the shelf, once."""
        async with self.session_factory() as session:
            order = await self._load(session, tenant_id, order_id)
            if order.stock_restored or not order.product_id:
                return
            product = await session.get(ProductModel, order.product_id)
            if product is None:
                logger.warning(
                    "Product %s of returned order %s no longer exists",
                    order.product_id,
                    order_id,
                )
                return
            previous = product.stock
            product.stock = previous + order.quantity
            order.stock_restored = True
            session.add(
                StockAdjustmentModel(
                    tenant_id=tenant_id,
                    product_id=product.id,
                    order_id=order.id,
                    quantity=order.quantity,
                    previous_stock=previous,
                    new_stock=product.stock,
                    reason=f"Order returned ({order.tracking_number})",
                )
            )
            await session.commit()
