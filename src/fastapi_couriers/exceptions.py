"""Shipping errors and their mapping to HTTP responses."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class ShippingError(Exception):
    """Base class for every error raised by the shipping core."""

    code = "shipping_error"


class CommunicationError(ShippingError):
    """Courier could not be reached or answered with a non-2xx status."""

    code = "communication_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AuthenticationError(CommunicationError):
    """Courier rejected the tenant's credentials."""

    code = "courier_auth_failed"


class ResponseParseError(ShippingError):
    """Courier answered with a body in no recognized shape."""

    code = "unexpected_response"


class ShipmentRejectedError(ShippingError):
    """Courier refused the booking for a business reason."""

    code = "shipment_rejected"


class RateCardError(ShipmentRejectedError):
    code = "rate_card_missing"


class InvalidCityError(ShipmentRejectedError):
    code = "invalid_city"


class InvalidStateError(ShipmentRejectedError):
    code = "invalid_state"


class DuplicateWaybillError(ShipmentRejectedError):
    code = "duplicate_waybill"


class InvalidMerchantError(ShipmentRejectedError):
    code = "invalid_merchant"


class InvalidShipmentRequestError(ShippingError, ValueError):
    """Neutral request failed local validation."""

    code = "invalid_request"


class ProviderNotConfiguredError(ShippingError):
    """Tenant has no usable credentials for the selected courier."""

    code = "provider_not_configured"


class UnsupportedProviderError(ShippingError):
    """Selected courier has no API adapter."""

    code = "unsupported_provider"


class AlreadyShippedError(ShippingError):
    code = "already_shipped"


class OrderNotFoundError(ShippingError):
    code = "order_not_found"

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


def _error_response(status_code: int, exc: ShippingError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": exc.code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register shipping exception handlers on a FastAPI app.

    More specific handlers must be registered first so FastAPI
    matches them before the generic ShippingError handler.

    Handler order (most specific first):
    1. OrderNotFoundError → 404
    2. AlreadyShippedError → 409
    3. ShipmentRejectedError, InvalidShipmentRequestError → 422
    4. CommunicationError, ResponseParseError → 502
    5. ShippingError → 400 (catch-all)
    """

    @app.exception_handler(OrderNotFoundError)
    async def _not_found(
        request: Request,
        exc: OrderNotFoundError,
    ) -> JSONResponse:
        return _error_response(404, exc)

    @app.exception_handler(AlreadyShippedError)
    async def _already_shipped(
        request: Request,
        exc: AlreadyShippedError,
    ) -> JSONResponse:
        return _error_response(409, exc)

    @app.exception_handler(ShipmentRejectedError)
    async def _rejected(
        request: Request,
        exc: ShipmentRejectedError,
    ) -> JSONResponse:
        return _error_response(422, exc)

    @app.exception_handler(InvalidShipmentRequestError)
    async def _invalid_request(
        request: Request,
        exc: InvalidShipmentRequestError,
    ) -> JSONResponse:
        return _error_response(422, exc)

    @app.exception_handler(CommunicationError)
    async def _communication_error(
        request: Request,
        exc: CommunicationError,
    ) -> JSONResponse:
        return _error_response(502, exc)

    @app.exception_handler(ResponseParseError)
    async def _unexpected_response(
        request: Request,
        exc: ResponseParseError,
    ) -> JSONResponse:
        return _error_response(502, exc)

    @app.exception_handler(ShippingError)
    async def _shipping_error(
        request: Request,
        exc: ShippingError,
    ) -> JSONResponse:
        return _error_response(400, exc)
