"""Request/response schemas for HTTP endpoints."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from fastapi_couriers.types import (
    EnhancedTrackingResult,
    LocationCity,
    OrderStatus,
    ShipmentStatus,
    ShippingAddress,
    ShippingLabel,
    ShippingProviderType,
    ShippingRate,
    TrackingUpdate,
)


class AddressSchema(BaseModel):
    name: str
    street: str
    city: str = ""
    state: str = ""
    postal_code: str = ""
    phone: str
    country: str = "LK"
    alternate_phone: str = ""

    def to_address(self) -> ShippingAddress:
        return ShippingAddress(**self.model_dump())


class PackageSchema(BaseModel):
    weight: float = Field(gt=0)
    length: float = 10
    width: float = 10
    height: float = 10
    description: str | None = None


class RatesRequest(BaseModel):
    destination: AddressSchema
    package: PackageSchema
    origin: AddressSchema | None = None


class RateResponse(BaseModel):
    provider: str
    service: str
    rate: float
    estimated_days: int

    @classmethod
    def from_rate(cls, rate: ShippingRate) -> RateResponse:
        return cls(
            provider=rate.provider,
            service=rate.service,
            rate=rate.rate,
            estimated_days=rate.estimated_days,
        )


class ProviderResponse(BaseModel):
    provider: ShippingProviderType
    display_name: str
    has_api: bool


class TrackingUrlResponse(BaseModel):
    provider: ShippingProviderType
    tracking_number: str
    tracking_url: str


class ShipOrderBody(BaseModel):
    """Payload for shipping an order.

    ``tracking_number`` is only used for SL Post, which has no API.
    Trans Express books by ``city_name`` (or the order's city) unless
    ``city_id`` or ``district_id`` is given.
    """

    provider: ShippingProviderType
    service: str | None = None
    weight: float = Field(default=1.0, gt=0)
    description: str | None = None
    tracking_number: str | None = None
    city_id: int | None = None
    district_id: int | None = None
    city_name: str | None = None


class ShipmentResponse(BaseModel):
    """Serialized shipping label."""

    order_id: str
    tracking_number: str
    label_url: str
    provider: str

    @classmethod
    def from_label(cls, order_id: str, label: ShippingLabel):
        return cls(
            order_id=order_id,
            tracking_number=label.tracking_number,
            label_url=label.label_url,
            provider=label.provider,
        )


class TrackingUpdateResponse(BaseModel):
    order_id: str
    success: bool
    status: ShipmentStatus | None = None
    order_status: OrderStatus | None = None
    changed: bool = False
    error: str | None = None
    checked_at: datetime | None = None

    @classmethod
    def from_update(cls, update: TrackingUpdate):
        return cls(
            order_id=update.order_id,
            success=update.success,
            status=update.status,
            order_status=update.order_status,
            changed=update.changed,
            error=update.error,
            checked_at=update.checked_at,
        )


class SyncRequest(BaseModel):
    provider: ShippingProviderType | None = None


class SyncResponse(BaseModel):
    processed: int
    updated: int
    failed: int
    updates: list[TrackingUpdateResponse]


class StatusHistoryItem(BaseModel):
    status: str
    timestamp: str
    description: str | None = None
    location: str | None = None


class EnhancedTrackingResponse(BaseModel):
    basic_status: ShipmentStatus
    current_status: str | None = None
    tracking_number: str | None = None
    status_history: list[StatusHistoryItem] = Field(default_factory=list)
    tracking_info: dict[str, Any] | None = None
    financial_info: dict[str, Any] | None = None

    @classmethod
    def from_result(cls, result: EnhancedTrackingResult):
        enhanced = result.enhanced_status
        financial = result.financial_info
        return cls(
            basic_status=result.basic_status,
            current_status=enhanced.current_status if enhanced else None,
            tracking_number=enhanced.tracking_number if enhanced else None,
            status_history=[
                StatusHistoryItem(
                    status=entry.status,
                    timestamp=entry.timestamp,
                    description=entry.description,
                    location=entry.location,
                )
                for entry in (enhanced.status_history if enhanced else [])
            ],
            tracking_info=result.tracking_info,
            financial_info=asdict(financial) if financial else None,
        )


class CityResponse(BaseModel):
    id: int
    name: str
    region: str

    @classmethod
    def from_city(cls, city: LocationCity):
        return cls(id=city.id, name=city.name, region=city.region)
