"""Trans Express adapter (bearer token REST API)."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from fastapi_couriers.auth import BearerTokenAuth
from fastapi_couriers.exceptions import (
    DuplicateWaybillError,
    InvalidCityError,
    InvalidStateError,
    ResponseParseError,
    ShipmentRejectedError,
)
from fastapi_couriers.locations.trans_express import (
    DEFAULT_CITY_ID,
    TransExpressLocations,
)
from fastapi_couriers.providers.base import (
    BaseShippingProvider,
    BookingContext,
    generate_order_no,
)
from fastapi_couriers.status import TRANS_EXPRESS_STATUSES
from fastapi_couriers.types import (
    PackageDetails,
    ShippingAddress,
    ShippingLabel,
    ShippingProviderType,
)

CREATE_SHIPMENT_ENDPOINT = "/orders/upload/single-auto"
CREATE_SHIPMENT_WITHOUT_CITY_ENDPOINT = (
    "/orders/upload/single-auto-without-city"
)
TRACK_SHIPMENT_ENDPOINT = "/tracking"


def classify_error(
    message: str, context: BookingContext
) -> ShipmentRejectedError | None:
    text = message.lower()
    if "order_no" in text or "order no" in text or "waybill" in text:
        if "taken" in text or "already" in text or "duplicate" in text:
            return DuplicateWaybillError(
                "Trans Express already has an order with this order number. "
                "Check whether the order was shipped before booking again."
            )
    if "district" in text:
        return InvalidStateError(
            f"Invalid district: Trans Express did not accept the district "
            f"for {context.destination_city or 'the destination'}. "
            f"Pick the district from the Trans Express list."
        )
    if "city" in text:
        return InvalidCityError(
            f"Invalid city name: Trans Express does not recognize "
            f'"{context.destination_city}". '
            f"Pick the city from the Trans Express city list."
        )
    return None


def extract_waybill(response: Any) -> str:
    """Read the waybill from ``order`` or ``orders`` (object or list)."""
    if not isinstance(response, dict):
        raise ResponseParseError(
            f"Failed to create shipment with Trans Express: {response!r}"
        )
    for key in ("order", "orders"):
        candidate = response.get(key)
        if isinstance(candidate, list):
            candidate = candidate[0] if candidate else None
        if isinstance(candidate, dict) and candidate.get("waybill_id"):
            return str(candidate["waybill_id"])
    reason = response.get("message") or response.get("error") or response
    raise ResponseParseError(
        f"Failed to create shipment with Trans Express: {reason}"
    )


def extract_current_status(response: Any) -> str | None:
    if not isinstance(response, dict):
        raise ResponseParseError(
            f"Unexpected Trans Express tracking response: {response!r}"
        )
    data = response.get("data")
    if isinstance(data, list):
        data = data[0] if data else None
    if not data:
        return None
    if not isinstance(data, dict):
        raise ResponseParseError(
            f"Unexpected Trans Express tracking data: {data!r}"
        )
    return str(data.get("current_status") or "Processing")


class TransExpressProvider(BaseShippingProvider):
    provider_type = ShippingProviderType.TRANS_EXPRESS
    display_name = "Trans Express"
    tracking_url_template = "https://transexpress.lk/tracking/{tracking_number}"
    label_url_template = "https://transexpress.lk/print-label/{tracking_number}"
    status_table = TRANS_EXPRESS_STATUSES
    static_rates = (("Standard", 350, 3), ("Express", 450, 1))
    error_classifier = staticmethod(classify_error)

    def __init__(self, api_key: str, **kwargs: Any) -> None:
        self.auth = BearerTokenAuth(api_key)
        super().__init__(**kwargs)

    def _base_url(self) -> str:
        return self.config.trans_express_api_url

    def _create_locations(self) -> TransExpressLocations:
        return TransExpressLocations(self._request, logger=self.logger)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = {**kwargs.pop("headers", {}), **await self.auth.headers()}
        return await self.http.request(method, path, headers=headers, **kwargs)

    def _order_payload(
        self,
        destination: ShippingAddress,
        package: PackageDetails,
        service: str,
        cod_amount: Decimal | float | None,
        order_no: str,
    ) -> dict[str, Any]:
        return {
            "order_no": order_no,
            "customer_name": destination.name,
            "address": destination.street,
            "description": package.description
            or f"{package.weight}kg package - {service}",
            "phone_no": destination.phone,
            "phone_no2": destination.alternate_phone or "",
            "cod": float(cod_amount or 0),
            "note": f"{service} service",
        }

    async def _book(
        self, endpoint: str, payload: dict, context: BookingContext
    ) -> ShippingLabel:
        response = await self._submit(
            "POST", endpoint, json=payload, context=context
        )
        try:
            label = self._label(extract_waybill(response))
        except ResponseParseError as exc:
            self._raise_classified(exc, context)
        self.logger.info(
            "Booked Trans Express shipment %s for order %s",
            label.tracking_number,
            payload["order_no"],
        )
        return label

    async def create_shipment(
        self,
        origin: ShippingAddress,
        destination: ShippingAddress,
        package: PackageDetails,
        service: str = "Standard",
        *,
        cod_amount: Decimal | float | None = None,
        tenant_id: str | None = None,
        order_id: str | None = None,
        order_prefix: str | None = None,
        city_id: int | None = None,
        district_id: int | None = None,
        **options: Any,
    ) -> ShippingLabel:
        payload = self._order_payload(
            destination,
            package,
            service,
            cod_amount,
            generate_order_no(tenant_id, order_id, order_prefix),
        )
        if city_id:
            payload["city_id"] = city_id
        if district_id:
            payload["district_id"] = district_id
        if not city_id and not district_id:
            payload["city_id"] = DEFAULT_CITY_ID

        context = BookingContext(
            origin_city=origin.city,
            destination_city=destination.city,
            destination_state=destination.state,
        )
        return await self._book(CREATE_SHIPMENT_ENDPOINT, payload, context)

    async def create_shipment_by_city_name(
        self,
        destination: ShippingAddress,
        package: PackageDetails,
        service: str,
        city_name: str,
        *,
        cod_amount: Decimal | float | None = None,
        tenant_id: str | None = None,
        order_id: str | None = None,
        order_prefix: str | None = None,
    ) -> ShippingLabel:
        """Book with a free-text city when no Trans Express city ID is known."""
        payload = self._order_payload(
            destination,
            package,
            service,
            cod_amount,
            generate_order_no(tenant_id, order_id, order_prefix),
        )
        payload["city"] = city_name
        context = BookingContext(
            destination_city=city_name,
            destination_state=destination.state,
        )
        return await self._book(
            CREATE_SHIPMENT_WITHOUT_CITY_ENDPOINT, payload, context
        )

    async def _fetch_tracking_status(self, tracking_number: str) -> str | None:
        response = await self._request(
            "POST",
            TRACK_SHIPMENT_ENDPOINT,
            json={"waybill_id": tracking_number},
        )
        if isinstance(response, dict) and response.get("error"):
            self.logger.warning(
                "Trans Express tracking error for %s: %s",
                tracking_number,
                response["error"],
            )
        return extract_current_status(response)
