"""Royal Express adapter (Curfox merchant API with session login)."""

from __future__ import annotations

import asyncio
import random
from decimal import Decimal
from typing import Any

from fastapi_couriers.auth import SessionLoginAuth, parse_credentials
from fastapi_couriers.exceptions import (
    AuthenticationError,
    DuplicateWaybillError,
    InvalidCityError,
    InvalidMerchantError,
    InvalidStateError,
    RateCardError,
    ResponseParseError,
    ShipmentRejectedError,
    ShippingError,
)
from fastapi_couriers.locations.royal_express import RoyalExpressLocations
from fastapi_couriers.providers.base import (
    BaseShippingProvider,
    BookingContext,
    generate_order_no,
)
from fastapi_couriers.status import (
    ROYAL_EXPRESS_STATUSES,
    map_royal_express_status,
    royal_express_to_shipment_status,
)
from fastapi_couriers.types import (
    CompleteOrderInfo,
    EnhancedOrderStatus,
    EnhancedTrackingResult,
    OrderFinancialInfo,
    PackageDetails,
    ShipmentStatus,
    ShippingAddress,
    ShippingLabel,
    ShippingProviderType,
    StatusHistoryEntry,
)

LOGIN_ENDPOINT = "/merchant/login"
CURRENT_USER_ENDPOINT = "/merchant/user/get-current"
BUSINESSES_ENDPOINT = "/merchant/business"
CREATE_SHIPMENT_ENDPOINT = "/merchant/order/single"
TRACKING_INFO_ENDPOINT = "/merchant/order/tracking-info"
ORDER_STATUS_ENDPOINT = "/merchant/order/{order_id}/status"
FINANCIAL_INFO_ENDPOINT = "/merchant/order/financial-info"

DEFAULT_MERCHANT_NAME = "Merchant"
DEFAULT_ORIGIN_CITY = "Kotte"
DEFAULT_STATE = "Colombo"


def classify_error(
    message: str, context: BookingContext
) -> ShipmentRejectedError | None:
    if "rate_card.destination_city_id" in message:
        return RateCardError(
            f"Rate card error: The merchant account doesn't have a rate card "
            f"set up for the specified city combination "
            f"({context.origin_city} to {context.destination_city}). "
            f"Ask Royal Express to set up a rate card for merchant business "
            f"{context.merchant_id} covering {context.origin_city} to "
            f"{context.destination_city}."
        )
    if "origin_city_name" in message or "destination_city_name" in message:
        return InvalidCityError(
            f"Invalid city name: One of the city names provided "
            f"({context.origin_city} or {context.destination_city}) is not "
            f"recognized by Royal Express. Valid city names are configured "
            f"by Royal Express for each merchant account."
        )
    if "origin_state_name" in message or "destination_state_name" in message:
        hint = "The state name must match exactly, including capitalization."
        if context.valid_states:
            hint = f"Valid state names are: {', '.join(context.valid_states)}"
        return InvalidStateError(
            f"Invalid state name: One of the state names provided "
            f"({context.origin_state} or {context.destination_state}) is not "
            f"recognized by Royal Express. {hint}"
        )
    if "waybill" in message:
        return DuplicateWaybillError(
            f"Waybill error: The waybill format is invalid or the waybill "
            f"number already exists. Details: {message}"
        )
    if "merchant_business_id" in message:
        return InvalidMerchantError(
            f"Merchant ID error: The merchant business ID "
            f"{context.merchant_id} is invalid. Details: {message}"
        )
    return None


def _rows(response: Any) -> list:
    data = response.get("data") if isinstance(response, dict) else None
    return data if isinstance(data, list) else []


def _require_success(response: Any, api_name: str) -> Any:
    if not isinstance(response, dict):
        raise ResponseParseError(
            f"Invalid response format from {api_name} API: {response!r}"
        )
    if not response.get("status") or not response.get("data"):
        raise ResponseParseError(
            f"Invalid response format from {api_name} API: "
            f"{response.get('message')}"
        )
    return response["data"]


def _status_name(entry: Any) -> str:
    status = entry.get("status") if isinstance(entry, dict) else None
    if isinstance(status, dict):
        status = status.get("name")
    return str(status or "pending")


class RoyalExpressProvider(BaseShippingProvider):
    """Royal Express bookings through the Curfox merchant API.

    ``credentials`` is an ``email:password`` string; when either half is
    missing the deployment-wide login from :class:`CouriersConfig` is used.
    """

    provider_type = ShippingProviderType.ROYAL_EXPRESS
    display_name = "Royal Express"
    tracking_url_template = (
        "https://merchant.curfox.com/tracking/{tracking_number}"
    )
    label_url_template = (
        "https://royalexpress.merchant.curfox.com/orders/"
        "{tracking_number}/waybill"
    )
    status_table = ROYAL_EXPRESS_STATUSES
    static_rates = (("Standard", 380, 3), ("Express", 480, 1))
    error_classifier = staticmethod(classify_error)

    def __init__(
        self,
        credentials: str | None,
        tenant: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        email, password = parse_credentials(
            credentials,
            default_email=self.config.royal_express_email,
            default_password=self.config.royal_express_password,
        )
        self.tenant = tenant or self.config.royal_express_tenant
        self.auth = SessionLoginAuth(
            self.http,
            email=email,
            password=password,
            tenant=self.tenant,
            login_path=LOGIN_ENDPOINT,
        )
        self.logger.debug("Royal Express provider using tenant %s", self.tenant)

    def _base_url(self) -> str:
        return self.config.royal_express_api_url

    def _create_locations(self) -> RoyalExpressLocations:
        return RoyalExpressLocations(self._request, logger=self.logger)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            headers = {
                **kwargs.pop("headers", {}),
                **await self.auth.headers(),
            }
            return await self.http.request(
                method, path, headers=headers, **kwargs
            )
        except AuthenticationError:
            self.auth.invalidate()
            raise

    async def get_user_info(self) -> Any:
        return await self._request("GET", CURRENT_USER_ENDPOINT)

    async def get_businesses(self) -> Any:
        return await self._request(
            "GET", BUSINESSES_ENDPOINT, params={"noPagination": ""}
        )

    async def get_states(
        self, *, name: str | None = None, country_id: int | None = None
    ) -> list[dict]:
        return await self.locations.fetch_states(
            name=name, country_id=country_id
        )

    def normalize_state_name(self, state: str | None) -> str:
        return self.locations.normalize_region_name(state or DEFAULT_STATE)

    async def _merchant_name(self) -> str:
        user_info = await self.get_user_info()
        data = user_info.get("data") if isinstance(user_info, dict) else None
        merchant = data.get("merchant") if isinstance(data, dict) else None
        if isinstance(merchant, dict) and merchant.get("name"):
            return str(merchant["name"])
        return DEFAULT_MERCHANT_NAME

    async def _business_id(self) -> int:
        """The merchant's default business, else its first one."""
        try:
            businesses = [
                row
                for row in _rows(await self.get_businesses())
                if isinstance(row, dict) and row.get("id") is not None
            ]
        except AuthenticationError:
            raise
        except ShippingError as exc:
            self.logger.warning(
                "Failed to fetch Royal Express businesses: %s", exc
            )
            businesses = []

        if businesses:
            business = next(
                (row for row in businesses if row.get("is_default") is True),
                businesses[0],
            )
            self.logger.info(
                "Using Royal Express business %s (ID %s)",
                business.get("business_name"),
                business["id"],
            )
            return int(business["id"])

        fallback = self.config.royal_express_default_business_id
        if fallback is None:
            raise InvalidMerchantError(
                "No Royal Express business is registered for this merchant "
                "account and no default business ID is configured."
            )
        self.logger.warning(
            "No Royal Express businesses found, using configured ID %s",
            fallback,
        )
        return fallback

    async def _check_states(self, **states: str) -> tuple[str, ...]:
        """Warn about state names missing from the upstream list."""
        valid = await self.locations.get_valid_region_names()
        if valid is None:
            self.logger.warning(
                "Royal Express state list unavailable, skipping the check"
            )
            return ()
        for label, state in states.items():
            if state not in valid:
                self.logger.warning(
                    'Royal Express does not list %s state "%s", sending it '
                    "anyway. Valid state names are: %s",
                    label,
                    state,
                    ", ".join(valid),
                )
        return tuple(valid)

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
        merchant_name = await self._merchant_name()
        business_id = await self._business_id()

        origin_city = origin.city or DEFAULT_ORIGIN_CITY
        destination_city = destination.city or "colombo"
        origin_state = self.normalize_state_name(origin.state)
        destination_state = self.normalize_state_name(destination.state)
        self.logger.info(
            "Creating Royal Express shipment from %s (%s) to %s (%s)",
            origin_city,
            origin_state,
            destination_city,
            destination_state,
        )
        valid_states = await self._check_states(
            origin=origin_state, destination=destination_state
        )

        payload = {
            "general_data": {
                "merchant_business_id": business_id,
                "origin_city_name": origin_city,
                "origin_state_name": origin_state,
                "merchant_name": merchant_name,
            },
            "order_data": [
                {
                    "waybill_number": f"JX{random.randrange(10_000_000)}",
                    "order_no": generate_order_no(
                        tenant_id, order_id, order_prefix
                    ),
                    "customer_name": destination.name,
                    "customer_address": destination.full_address()
                    or destination.street,
                    "customer_phone": destination.phone,
                    "customer_secondary_phone": destination.alternate_phone
                    or "",
                    "destination_city_name": destination_city,
                    "destination_state_name": destination_state,
                    "cod": float(cod_amount or 0),
                    "description": package.description
                    or f"{package.weight}kg package",
                    "weight": package.weight,
                    "remark": f"{service} service",
                }
            ],
        }
        context = BookingContext(
            origin_city=origin_city,
            destination_city=destination_city,
            origin_state=origin_state,
            destination_state=destination_state,
            merchant_id=business_id,
            valid_states=valid_states,
        )
        response = await self._submit(
            "POST", CREATE_SHIPMENT_ENDPOINT, json=payload, context=context
        )
        created = _rows(response)
        first = created[0] if created else None
        if isinstance(first, dict):
            first = first.get("waybill_number")
        if not first:
            self._raise_classified(
                ResponseParseError(
                    f"Failed to create shipment with Royal Express: "
                    f"{response!r}"
                ),
                context,
            )
        label = self._label(first)
        self.logger.info(
            "Booked Royal Express shipment %s for business %s",
            label.tracking_number,
            business_id,
        )
        return label

    async def _fetch_tracking_status(self, tracking_number: str) -> str | None:
        response = await self._request(
            "GET",
            TRACKING_INFO_ENDPOINT,
            params={"waybill_number": tracking_number},
        )
        rows = _rows(response)
        if not rows:
            if isinstance(response, dict) and response.get("error"):
                self.logger.warning(
                    "Royal Express tracking error for %s: %s",
                    tracking_number,
                    response["error"],
                )
            return None
        # Most recent event first.
        return _status_name(rows[0])

    async def get_enhanced_order_status(
        self, order_id: str
    ) -> EnhancedOrderStatus:
        response = await self._request(
            "GET", ORDER_STATUS_ENDPOINT.format(order_id=order_id)
        )
        rows = _require_success(response, "Order Status")
        if not isinstance(rows, list):
            raise ResponseParseError(
                f"Unexpected Royal Express status history: {rows!r}"
            )
        history = sorted(
            (row for row in rows if isinstance(row, dict)),
            key=lambda row: str(row.get("created_at") or ""),
            reverse=True,
        )
        if not history:
            raise ResponseParseError(
                f"Royal Express returned no status history for {order_id}"
            )
        entries = [
            StatusHistoryEntry(
                status=map_royal_express_status(_status_name(row)),
                timestamp=str(row.get("created_at") or ""),
                description=row.get("description"),
            )
            for row in history
        ]
        return EnhancedOrderStatus(
            order_id=order_id,
            current_status=entries[0].status,
            status_history=entries,
        )

    async def get_order_tracking_info(self, order_id: str) -> dict:
        response = await self._request(
            "GET", TRACKING_INFO_ENDPOINT, params={"waybill_number": order_id}
        )
        _require_success(response, "Tracking Info")
        return response

    async def get_order_financial_info(
        self, order_id: str
    ) -> OrderFinancialInfo:
        response = await self._request(
            "POST", FINANCIAL_INFO_ENDPOINT, json={"order_id": order_id}
        )
        data = _require_success(response, "Financial Info")
        if not isinstance(data, dict):
            raise ResponseParseError(
                f"Unexpected Royal Express financial info: {data!r}"
            )
        return OrderFinancialInfo(
            order_id=str(data.get("order_id") or order_id),
            total_amount=float(data.get("total_amount") or 0),
            shipping_cost=float(data.get("shipping_cost") or 0),
            tax_amount=float(data.get("tax_amount") or 0),
            discount_amount=float(data.get("discount_amount") or 0),
            payment_status=str(data.get("payment_status") or ""),
            payment_method=str(data.get("payment_method") or ""),
            currency=str(data.get("currency") or "LKR"),
        )

    async def get_complete_order_info(self, order_id: str) -> CompleteOrderInfo:
        """Status, tracking and financial info fetched concurrently.

        The status history is required; tracking and financial info are
        dropped with a warning when their calls fail.
        """
        status, tracking, financial = await asyncio.gather(
            self.get_enhanced_order_status(order_id),
            self.get_order_tracking_info(order_id),
            self.get_order_financial_info(order_id),
            return_exceptions=True,
        )
        if isinstance(status, BaseException):
            raise status

        if isinstance(tracking, BaseException):
            self.logger.warning(
                "Failed to fetch tracking info for %s: %s", order_id, tracking
            )
            tracking = None
        else:
            rows = _rows(tracking)
            if rows and isinstance(rows[0], dict):
                status.tracking_number = rows[0].get("tracking_number")

        if isinstance(financial, BaseException):
            self.logger.warning(
                "Failed to fetch financial info for %s: %s", order_id, financial
            )
            financial = None

        return CompleteOrderInfo(
            status=status, tracking=tracking, financial=financial
        )

    async def track_shipment_enhanced(
        self, tracking_number: str
    ) -> EnhancedTrackingResult:
        try:
            info = await self.get_complete_order_info(tracking_number)
        except AuthenticationError as exc:
            # Basic tracking would log in again with the same credentials.
            self.logger.warning(
                "Enhanced tracking for %s was rejected by Royal Express: %s",
                tracking_number,
                exc,
            )
            return EnhancedTrackingResult(basic_status=ShipmentStatus.PENDING)
        except (ShippingError, KeyError, TypeError, ValueError) as exc:
            self.logger.warning(
                "Enhanced tracking failed for %s, falling back to basic "
                "tracking: %s",
                tracking_number,
                exc,
            )
            return EnhancedTrackingResult(
                basic_status=await self.track_shipment(tracking_number)
            )
        return EnhancedTrackingResult(
            basic_status=royal_express_to_shipment_status(
                info.status.current_status
            ),
            enhanced_status=info.status,
            tracking_info=info.tracking,
            financial_info=info.financial,
        )
