"""SQLAlchemy order/product/tracking models."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""


class ProductModel(Base):
    """Stocked product an order is placed for."""

    __tablename__ = "couriers_products"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), index=True)
    name: Mapped[str] = mapped_column(String(255))
    stock: Mapped[int] = mapped_column(Integer, default=0)


class OrderModel(Base):
    """Minimal order persistence model for the shipping workflow."""

    __tablename__ = "couriers_orders"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), index=True)
    product_id: Mapped[str | None] = mapped_column(
        ForeignKey("couriers_products.id"), default=None
    )
    customer_name: Mapped[str] = mapped_column(String(255))
    customer_phone: Mapped[str] = mapped_column(String(32))
    customer_second_phone: Mapped[str] = mapped_column(String(32), default="")
    customer_address: Mapped[str] = mapped_column(String(512))
    customer_city: Mapped[str] = mapped_column(String(128), default="")
    customer_state: Mapped[str] = mapped_column(String(128), default="")
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    status: Mapped[str] = mapped_column(String(32), default="CONFIRMED")
    shipping_provider: Mapped[str | None] = mapped_column(
        String(32), default=None
    )
    tracking_number: Mapped[str | None] = mapped_column(
        String(128), default=None, index=True
    )
    last_shipment_status: Mapped[str | None] = mapped_column(
        String(32), default=None
    )
    shipped_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    delivered_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    stock_restored: Mapped[bool] = mapped_column(Boolean, default=False)


class TrackingUpdateModel(Base):
    """One courier status check of an order."""

    __tablename__ = "couriers_tracking_updates"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tenant_id: Mapped[str] = mapped_column(String(64), index=True)
    order_id: Mapped[str] = mapped_column(
        ForeignKey("couriers_orders.id"), index=True
    )
    shipment_status: Mapped[str] = mapped_column(String(32))
    order_status: Mapped[str] = mapped_column(String(32))
    checked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )


class StockAdjustmentModel(Base):
    """Audit record of a stock change caused by a returned order."""

    __tablename__ = "couriers_stock_adjustments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tenant_id: Mapped[str] = mapped_column(String(64), index=True)
    product_id: Mapped[str] = mapped_column(ForeignKey("couriers_products.id"))
    order_id: Mapped[str] = mapped_column(ForeignKey("couriers_orders.id"))
    quantity: Mapped[int] = mapped_column(Integer)
    previous_stock: Mapped[int] = mapped_column(Integer)
    new_stock: Mapped[int] = mapped_column(Integer)
    reason: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
