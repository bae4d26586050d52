"""Neutral shipping data model shared by all courier adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from fastapi_couriers.exceptions import InvalidShipmentRequestError


class ShipmentStatus(StrEnum):
    """Internal shipment status vocabulary."""

    PENDING = "PENDING"
    IN_TRANSIT = "IN_TRANSIT"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    RESCHEDULED = "RESCHEDULED"
    RETURNED = "RETURNED"
    EXCEPTION = "EXCEPTION"

    def collapsed(self) -> ShipmentStatus:
        """Return the five-value view where returns count as exceptions."""
        if self in (ShipmentStatus.RETURNED, ShipmentStatus.RESCHEDULED):
            return ShipmentStatus.EXCEPTION
        return self


class ShippingProviderType(StrEnum):
    """Couriers a tenant can ship an order with."""

    FARDA_EXPRESS = "FARDA_EXPRESS"
    TRANS_EXPRESS = "TRANS_EXPRESS"
    ROYAL_EXPRESS = "ROYAL_EXPRESS"
    SL_POST = "SL_POST"

    @property
    def display_name(self) -> str:
        return {
            ShippingProviderType.FARDA_EXPRESS: "Farda Express",
            ShippingProviderType.TRANS_EXPRESS: "Trans Express",
            ShippingProviderType.ROYAL_EXPRESS: "Royal Express",
            ShippingProviderType.SL_POST: "SL Post",
        }[self]

    @property
    def has_api(self) -> bool:
        return self is not ShippingProviderType.SL_POST


class OrderStatus(StrEnum):
    """Order record states touched by the shipping workflow."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    RETURNED = "RETURNED"
    RESCHEDULED = "RESCHEDULED"
    CANCELLED = "CANCELLED"


class RoyalExpressOrderStatus(StrEnum):
    """Full Royal Express (Curfox) order status vocabulary."""

    ORDER_PLACED = "Order Placed"
    ORDER_CONFIRMED = "Order Confirmed"
    PAYMENT_PENDING = "Payment Pending"
    PAYMENT_CONFIRMED = "Payment Confirmed"
    PROCESSING = "Processing"
    READY_FOR_PICKUP = "Ready for Pickup"
    PICKED_UP = "Picked Up"
    IN_TRANSIT = "In Transit"
    ARRIVED_AT_HUB = "Arrived at Hub"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERY_ATTEMPTED = "Delivery Attempted"
    DELIVERED = "Delivered"
    DELIVERY_CONFIRMED = "Delivery Confirmed"
    FAILED_DELIVERY = "Failed Delivery"
    RETURNED_TO_HUB = "Returned to Hub"
    RETURN_IN_TRANSIT = "Return in Transit"
    RETURNED_TO_SENDER = "Returned to Sender"
    CANCELED = "Canceled"
    REFUND_INITIATED = "Refund Initiated"
    REFUND_COMPLETED = "Refund Completed"
    EXCEPTION = "Exception"


@dataclass
class ShippingAddress:
    """Origin (warehouse) or destination (customer) address."""

    name: str
    street: str
    city: str
    state: str
    postal_code: str
    phone: str
    country: str = "LK"
    alternate_phone: str = ""

    def __post_init__(self) -> None:
        missing = [
            attr
            for attr in ("name", "street", "phone")
            if not str(getattr(self, attr) or "").strip()
        ]
        if missing:
            raise InvalidShipmentRequestError(
                f"Address is missing required fields: {', '.join(missing)}"
            )

    def full_address(self) -> str:
        parts = [self.street, self.city, self.postal_code]
        return ", ".join(part for part in parts if part)


@dataclass
class PackageDetails:
    """Parcel weight in kg and dimensions in cm."""

    weight: float
    length: float = 10
    width: float = 10
    height: float = 10
    description: str | None = None

    def __post_init__(self) -> None:
        if self.weight is None or float(self.weight) <= 0:
            raise InvalidShipmentRequestError(
                f"Package weight must be positive, got {self.weight!r}"
            )


@dataclass(frozen=True)
class ShippingRate:
    provider: str
    service: str
    rate: float
    estimated_days: int


@dataclass(frozen=True)
class ShippingLabel:
    """Result of a successful booking."""

    tracking_number: str
    label_url: str
    provider: str

    def __post_init__(self) -> None:
        if not str(self.tracking_number or "").strip():
            raise InvalidShipmentRequestError(
                "A shipping label requires a tracking number"
            )


@dataclass(frozen=True)
class LocationCity:
    """City entry in a courier's location directory."""

    id: int
    name: str
    region: str


@dataclass
class TenantShippingConfig:
    """Courier credentials stored in a tenant's settings."""

    tenant_id: str
    farda_express_client_id: str | None = None
    farda_express_api_key: str | None = None
    trans_express_api_key: str | None = None
    trans_express_order_prefix: str | None = None
    royal_express_api_key: str | None = None
    royal_express_order_prefix: str | None = None
    royal_express_tenant: str | None = None
    warehouse: ShippingAddress | None = None


@dataclass
class OrderSnapshot:
    """The order fields the shipping core reads from the data layer."""

    id: str
    tenant_id: str
    customer_name: str
    customer_phone: str
    customer_address: str
    unit_price: Decimal
    quantity: int = 1
    discount: Decimal = Decimal("0")
    customer_second_phone: str = ""
    customer_city: str = ""
    customer_state: str = ""
    product_name: str = ""
    status: OrderStatus = OrderStatus.CONFIRMED
    shipping_provider: ShippingProviderType | None = None
    tracking_number: str | None = None


@dataclass(frozen=True)
class StatusHistoryEntry:
    status: RoyalExpressOrderStatus
    timestamp: str
    description: str | None = None
    location: str | None = None


@dataclass
class EnhancedOrderStatus:
    order_id: str
    current_status: RoyalExpressOrderStatus
    status_history: list[StatusHistoryEntry] = field(default_factory=list)
    tracking_number: str | None = None
    estimated_delivery: str | None = None


@dataclass(frozen=True)
class OrderFinancialInfo:
    order_id: str
    total_amount: float
    shipping_cost: float
    tax_amount: float
    discount_amount: float
    payment_status: str
    payment_method: str
    currency: str


@dataclass
class CompleteOrderInfo:
    status: EnhancedOrderStatus
    tracking: dict | None = None
    financial: OrderFinancialInfo | None = None


@dataclass
class EnhancedTrackingResult:
    basic_status: ShipmentStatus
    enhanced_status: EnhancedOrderStatus | None = None
    tracking_info: dict | None = None
    financial_info: OrderFinancialInfo | None = None


@dataclass(frozen=True)
class TrackingUpdate:
    """Outcome of refreshing one order's tracking status."""

    order_id: str
    success: bool
    status: ShipmentStatus | None = None
    order_status: OrderStatus | None = None
    changed: bool = False
    error: str | None = None
    checked_at: datetime | None = None
