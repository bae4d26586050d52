"""Farda Express adapter (form-encoded API keyed by client ID and API key).

Farda answers every call with HTTP 200 and reports failures through a
numeric ``status`` field in the JSON body.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any

from fastapi_couriers.auth import ClientKeyAuth
from fastapi_couriers.exceptions import (
    DuplicateWaybillError,
    InvalidCityError,
    InvalidMerchantError,
    ResponseParseError,
    ShipmentRejectedError,
)
from fastapi_couriers.locations.farda_express import FardaExpressLocations
from fastapi_couriers.providers.base import (
    BaseShippingProvider,
    BookingContext,
    generate_order_no,
)
from fastapi_couriers.status import FARDA_EXPRESS_STATUSES
from fastapi_couriers.types import (
    PackageDetails,
    ShippingAddress,
    ShippingLabel,
    ShippingProviderType,
)

CREATE_SHIPMENT_ENDPOINT = "/new_api_v1.php"
TRACK_SHIPMENT_ENDPOINT = "/tracking_api_v1.php"

SUCCESS_CODE = 200

FARDA_EXPRESS_ERROR_CODES = {
    201: "Inactive client",
    202: "Invalid order id",
    203: "Invalid weight",
    204: "Empty or invalid parcel description",
    205: "Empty or invalid recipient name",
    206: "Invalid contact number 1",
    207: "Invalid contact number 2",
    208: "Empty or invalid address",
    209: "Invalid amount",
    210: "Invalid city",
    211: "Parcel insert unsuccessful",
    212: "Invalid or inactive client",
    213: "Invalid API key",
    214: "Invalid exchange value",
    215: "System maintenance mode is activated",
}

_MERCHANT_CODES = frozenset({201, 212, 213})
_ERROR_CODE_RE = re.compile(r"\bstatus (\d{3})\b")


def _status_code(response: Any) -> int | None:
    if not isinstance(response, dict):
        return None
    try:
        return int(response.get("status"))
    except (TypeError, ValueError):
        return None


def describe_error(code: int | None) -> str:
    return FARDA_EXPRESS_ERROR_CODES.get(code, "Unknown error")


def classify_error(
    message: str, context: BookingContext
) -> ShipmentRejectedError | None:
    match = _ERROR_CODE_RE.search(message)
    code = int(match.group(1)) if match else None
    if code == 210 or (code is None and "city" in message.lower()):
        return InvalidCityError(
            f"Invalid city name: Farda Express does not deliver to "
            f'"{context.destination_city}". '
            f"Pick the city from the Farda Express city list."
        )
    if code == 202:
        return DuplicateWaybillError(
            "Farda Express refused the order ID. It is either malformed or "
            "already used by another parcel."
        )
    if code in _MERCHANT_CODES:
        return InvalidMerchantError(
            f"Farda Express rejected the client account: "
            f"{describe_error(code)}. Check the tenant's client ID and "
            f"API key."
        )
    return None


def extract_waybill(response: Any) -> str:
    """Read the waybill from ``waybill_no`` or ``data.waybill_no``."""
    code = _status_code(response)
    if code is not None and code != SUCCESS_CODE:
        raise ResponseParseError(
            f"Farda Express returned status {code}: {describe_error(code)}"
        )
    if isinstance(response, dict):
        data = response.get("data")
        for source in (response, data):
            if isinstance(source, dict) and source.get("waybill_no"):
                return str(source["waybill_no"])
    raise ResponseParseError(
        f"Failed to create shipment with Farda Express: {response!r}"
    )


def extract_current_status(response: Any) -> str | None:
    """Current status, or the status of the latest event in ``data``."""
    if not isinstance(response, dict):
        raise ResponseParseError(
            f"Unexpected Farda Express tracking response: {response!r}"
        )
    code = _status_code(response)
    if code is not None and code != SUCCESS_CODE:
        raise ResponseParseError(
            f"Farda Express returned status {code}: {describe_error(code)}"
        )
    if response.get("current_status"):
        return str(response["current_status"])
    events = response.get("data")
    if isinstance(events, dict):
        events = [events]
    if not events:
        return None
    latest = events[-1]
    if not isinstance(latest, dict):
        raise ResponseParseError(
            f"Unexpected Farda Express tracking event: {latest!r}"
        )
    return latest.get("status") or latest.get("current_status")


class FardaExpressProvider(BaseShippingProvider):
    provider_type = ShippingProviderType.FARDA_EXPRESS
    display_name = "Farda Express"
    tracking_url_template = (
        "https://farda-express.com/track?id={tracking_number}"
    )
    label_url_template = (
        "https://www.fdedomestic.com/waybill.php?waybill_no={tracking_number}"
    )
    status_table = FARDA_EXPRESS_STATUSES
    static_rates = (("Standard", 400, 2),)
    error_classifier = staticmethod(classify_error)

    def __init__(self, client_id: str, api_key: str, **kwargs: Any) -> None:
        self.auth = ClientKeyAuth(client_id, api_key)
        super().__init__(**kwargs)

    def _base_url(self) -> str:
        return self.config.farda_express_api_url

    def _create_locations(self) -> FardaExpressLocations:
        return FardaExpressLocations(logger=self.logger)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        form = {**self.auth.fields(), **kwargs.pop("data", {})}
        return await self.http.request(method, path, data=form, **kwargs)

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
        **options: Any,
    ) -> ShippingLabel:
        order_no = generate_order_no(tenant_id, order_id, order_prefix)
        form = {
            "order_id": order_no,
            "parcel_weight": str(package.weight),
            "parcel_description": package.description
            or f"{package.weight}kg package - {service}",
            "recipient_name": destination.name,
            "recipient_contact_1": destination.phone,
            "recipient_contact_2": destination.alternate_phone or "",
            "recipient_address": destination.full_address(),
            "recipient_city": destination.city,
            "amount": str(Decimal(str(cod_amount or 0))),
            "exchange": "0",
        }
        context = BookingContext(
            origin_city=origin.city,
            destination_city=destination.city,
            destination_state=destination.state,
        )
        response = await self._submit(
            "POST", CREATE_SHIPMENT_ENDPOINT, data=form, context=context
        )
        try:
            label = self._label(extract_waybill(response))
        except ResponseParseError as exc:
            self._raise_classified(exc, context)
        self.logger.info(
            "Booked Farda Express shipment %s for order %s",
            label.tracking_number,
            order_no,
        )
        return label

    async def _fetch_tracking_status(self, tracking_number: str) -> str | None:
        response = await self._request(
            "POST",
            TRACK_SHIPMENT_ENDPOINT,
            data={"waybill_id": tracking_number},
        )
        return extract_current_status(response)
