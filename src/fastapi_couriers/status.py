"""Courier status vocabularies mapped onto ShipmentStatus."""

from __future__ import annotations

from collections.abc import Mapping

from fastapi_couriers.types import (
    OrderStatus,
    RoyalExpressOrderStatus,
    ShipmentStatus,
    ShippingProviderType,
)

_COMMON_STATUSES: dict[str, ShipmentStatus] = {
    "processing": ShipmentStatus.PENDING,
    "picked up": ShipmentStatus.IN_TRANSIT,
    "in transit": ShipmentStatus.IN_TRANSIT,
    "out for delivery": ShipmentStatus.OUT_FOR_DELIVERY,
    "delivered": ShipmentStatus.DELIVERED,
    "rescheduled": ShipmentStatus.RESCHEDULED,
    "failed delivery": ShipmentStatus.EXCEPTION,
    "returned": ShipmentStatus.RETURNED,
    "canceled": ShipmentStatus.EXCEPTION,
    "cancelled": ShipmentStatus.EXCEPTION,
}

FARDA_EXPRESS_STATUSES: dict[str, ShipmentStatus] = {
    **_COMMON_STATUSES,
    "pending": ShipmentStatus.PENDING,
    "order received": ShipmentStatus.PENDING,
    "dispatched": ShipmentStatus.IN_TRANSIT,
    "received at branch": ShipmentStatus.IN_TRANSIT,
    "return": ShipmentStatus.RETURNED,
    "return to client": ShipmentStatus.RETURNED,
}

TRANS_EXPRESS_STATUSES: dict[str, ShipmentStatus] = dict(_COMMON_STATUSES)

ROYAL_EXPRESS_STATUSES: dict[str, ShipmentStatus] = {
    **_COMMON_STATUSES,
    "pending": ShipmentStatus.PENDING,
    "returned to sender": ShipmentStatus.RETURNED,
    "returned to hub": ShipmentStatus.RETURNED,
    "return to client": ShipmentStatus.RETURNED,
}

_PROVIDER_STATUSES: dict[ShippingProviderType, Mapping[str, ShipmentStatus]] = {
    ShippingProviderType.FARDA_EXPRESS: FARDA_EXPRESS_STATUSES,
    ShippingProviderType.TRANS_EXPRESS: TRANS_EXPRESS_STATUSES,
    ShippingProviderType.ROYAL_EXPRESS: ROYAL_EXPRESS_STATUSES,
}

_ROYAL_EXPRESS_ALIASES = {"cancelled": RoyalExpressOrderStatus.CANCELED}

_ROYAL_EXPRESS_TO_SHIPMENT: dict[RoyalExpressOrderStatus, ShipmentStatus] = {
    RoyalExpressOrderStatus.ORDER_PLACED: ShipmentStatus.PENDING,
    RoyalExpressOrderStatus.ORDER_CONFIRMED: ShipmentStatus.PENDING,
    RoyalExpressOrderStatus.PAYMENT_PENDING: ShipmentStatus.PENDING,
    RoyalExpressOrderStatus.PAYMENT_CONFIRMED: ShipmentStatus.PENDING,
    RoyalExpressOrderStatus.PROCESSING: ShipmentStatus.PENDING,
    RoyalExpressOrderStatus.READY_FOR_PICKUP: ShipmentStatus.PENDING,
    RoyalExpressOrderStatus.PICKED_UP: ShipmentStatus.IN_TRANSIT,
    RoyalExpressOrderStatus.IN_TRANSIT: ShipmentStatus.IN_TRANSIT,
    RoyalExpressOrderStatus.ARRIVED_AT_HUB: ShipmentStatus.IN_TRANSIT,
    RoyalExpressOrderStatus.RETURN_IN_TRANSIT: ShipmentStatus.IN_TRANSIT,
    RoyalExpressOrderStatus.OUT_FOR_DELIVERY: ShipmentStatus.OUT_FOR_DELIVERY,
    RoyalExpressOrderStatus.DELIVERY_ATTEMPTED: ShipmentStatus.OUT_FOR_DELIVERY,
    RoyalExpressOrderStatus.DELIVERED: ShipmentStatus.DELIVERED,
    RoyalExpressOrderStatus.DELIVERY_CONFIRMED: ShipmentStatus.DELIVERED,
    RoyalExpressOrderStatus.RETURNED_TO_HUB: ShipmentStatus.RETURNED,
    RoyalExpressOrderStatus.RETURNED_TO_SENDER: ShipmentStatus.RETURNED,
    RoyalExpressOrderStatus.FAILED_DELIVERY: ShipmentStatus.EXCEPTION,
    RoyalExpressOrderStatus.CANCELED: ShipmentStatus.EXCEPTION,
    RoyalExpressOrderStatus.REFUND_INITIATED: ShipmentStatus.EXCEPTION,
    RoyalExpressOrderStatus.REFUND_COMPLETED: ShipmentStatus.EXCEPTION,
    RoyalExpressOrderStatus.EXCEPTION: ShipmentStatus.EXCEPTION,
}

_ORDER_STATUS_FOR = {
    ShipmentStatus.DELIVERED: OrderStatus.DELIVERED,
    ShipmentStatus.RETURNED: OrderStatus.RETURNED,
    ShipmentStatus.RESCHEDULED: OrderStatus.RESCHEDULED,
}


def _key(raw: object) -> str:
    return str(raw or "").strip().casefold()


def normalize_with(
    table: Mapping[str, ShipmentStatus], raw: object
) -> ShipmentStatus:
    """Look up a raw courier status; unknown values become EXCEPTION."""
    return table.get(_key(raw), ShipmentStatus.EXCEPTION)


def normalize_status(
    provider: ShippingProviderType, raw: object
) -> ShipmentStatus:
    table = _PROVIDER_STATUSES.get(provider)
    if table is None:
        return ShipmentStatus.EXCEPTION
    return normalize_with(table, raw)


def map_royal_express_status(raw: object) -> RoyalExpressOrderStatus:
    key = _key(raw)
    if key in _ROYAL_EXPRESS_ALIASES:
        return _ROYAL_EXPRESS_ALIASES[key]
    for status in RoyalExpressOrderStatus:
        if status.value.casefold() == key:
            return status
    return RoyalExpressOrderStatus.EXCEPTION


def royal_express_to_shipment_status(
    status: RoyalExpressOrderStatus,
) -> ShipmentStatus:
    return _ROYAL_EXPRESS_TO_SHIPMENT.get(status, ShipmentStatus.EXCEPTION)


def order_status_for(status: ShipmentStatus) -> OrderStatus:
    """Order status to persist after a tracking refresh."""
    return _ORDER_STATUS_FOR.get(status, OrderStatus.SHIPPED)
