"""Base class for courier adapters."""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, ClassVar, NoReturn

import httpx

from fastapi_couriers.config import CouriersConfig
from fastapi_couriers.exceptions import (
    AuthenticationError,
    CommunicationError,
    ResponseParseError,
    ShipmentRejectedError,
    ShippingError,
)
from fastapi_couriers.http import CourierHttpClient
from fastapi_couriers.locations.base import LocationDirectory
from fastapi_couriers.status import normalize_with
from fastapi_couriers.types import (
    PackageDetails,
    ShipmentStatus,
    ShippingAddress,
    ShippingLabel,
    ShippingProviderType,
    ShippingRate,
)


@dataclass(frozen=True)
class BookingContext:
    """Values quoted back to the user when a booking is rejected."""

    origin_city: str = ""
    destination_city: str = ""
    origin_state: str = ""
    destination_state: str = ""
    merchant_id: int | str | None = None
    valid_states: tuple[str, ...] = ()


ErrorClassifier = Callable[[str, BookingContext], ShipmentRejectedError | None]


def generate_order_no(
    tenant_id: str | None = None,
    order_id: str | None = None,
    prefix: str | None = None,
) -> str:
    """Build the courier-side order number for a booking.

    ``{prefix}-{ORDER}`` where the prefix defaults to the first eight
    characters of the tenant ID; a random number when either ID is missing.
    """
    if tenant_id and order_id:
        head = prefix or tenant_id[:8].upper()
        return f"{head}-{order_id[:8].upper()}"
    return str(random.randrange(100_000_000))


def compute_cod_amount(
    unit_price: Decimal | float | int,
    quantity: int = 1,
    discount: Decimal | float | int | None = None,
) -> Decimal:
    """Cash on delivery: line total minus discount, never negative."""
    total = Decimal(str(unit_price)) * quantity
    amount = total - Decimal(str(discount or 0))
    return max(amount, Decimal("0"))


class BaseShippingProvider(ABC):
    """Uniform contract every courier adapter implements.

    ``create_shipment`` fails loudly with a ShippingError; ``track_shipment``
    never raises and degrades to PENDING.
    """

    provider_type: ClassVar[ShippingProviderType]
    display_name: ClassVar[str]
    tracking_url_template: ClassVar[str]
    label_url_template: ClassVar[str]
    status_table: ClassVar[Mapping[str, ShipmentStatus]]
    #: (service, rate, estimated days)
    static_rates: ClassVar[tuple[tuple[str, float, int], ...]] = ()
    error_classifier: ClassVar[ErrorClassifier | None] = None

    def __init__(
        self,
        *,
        config: CouriersConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or CouriersConfig()
        self.logger = logger or logging.getLogger(type(self).__module__)
        self.http = CourierHttpClient(
            provider_name=self.display_name,
            base_url=self._base_url(),
            timeout=self.config.request_timeout,
            transport=transport,
            logger=self.logger,
            redact_pii=self.config.redact_pii,
        )
        self.locations = self._create_locations()

    @abstractmethod
    def _base_url(self) -> str: ...

    @abstractmethod
    def _create_locations(self) -> LocationDirectory: ...

    def get_name(self) -> str:
        return self.display_name

    async def get_rates(
        self,
        origin: ShippingAddress,
        destination: ShippingAddress,
        package: PackageDetails,
    ) -> list[ShippingRate]:
        """Quote service tiers; these couriers publish no live rate API."""
        return [
            ShippingRate(
                provider=self.get_name(),
                service=service,
                rate=rate,
                estimated_days=days,
            )
            for service, rate, days in self.static_rates
        ]

    @abstractmethod
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
    ) -> ShippingLabel: ...

    @abstractmethod
    async def _fetch_tracking_status(self, tracking_number: str) -> str | None:
        """Return the courier's raw status, or None when it has none yet."""

    async def track_shipment(self, tracking_number: str) -> ShipmentStatus:
        try:
            raw_status = await self._fetch_tracking_status(tracking_number)
        except (ShippingError, KeyError, TypeError, ValueError) as exc:
            self.logger.warning(
                "Tracking %s with %s failed, reporting PENDING: %s",
                tracking_number,
                self.display_name,
                exc,
            )
            return ShipmentStatus.PENDING

        if raw_status is None:
            self.logger.warning(
                "No tracking data from %s for %s, defaulting to PENDING",
                self.display_name,
                tracking_number,
            )
            return ShipmentStatus.PENDING

        status = self.normalize_status(raw_status)
        self.logger.info(
            "%s status for %s: %s (%s)",
            self.display_name,
            tracking_number,
            status,
            raw_status,
        )
        return status

    def normalize_status(self, raw_status: object) -> ShipmentStatus:
        return normalize_with(self.status_table, raw_status)

    @classmethod
    def get_tracking_url(cls, tracking_number: str) -> str:
        return cls.tracking_url_template.format(
            tracking_number=tracking_number
        )

    def _label(self, tracking_number: object) -> ShippingLabel:
        tracking = str(tracking_number or "").strip()
        if not tracking:
            raise ResponseParseError(
                f"{self.display_name} did not return a tracking number"
            )
        return ShippingLabel(
            tracking_number=tracking,
            label_url=self.label_url_template.format(tracking_number=tracking),
            provider=self.get_name(),
        )

    async def _submit(
        self,
        method: str,
        path: str,
        *,
        context: BookingContext,
        **kwargs: Any,
    ) -> Any:
        """Send a booking request, translating known rejection messages."""
        try:
            return await self._request(method, path, **kwargs)
        except AuthenticationError:
            raise
        except ShippingError as exc:
            self._raise_classified(exc, context)

    def _raise_classified(
        self, exc: ShippingError, context: BookingContext
    ) -> NoReturn:
        """Re-raise ``exc`` as a classified rejection when one matches.

        Only upstream text is classified: the response body of an HTTP error
        or the message of an unparseable success response.
        """
        if isinstance(exc, CommunicationError):
            upstream_text = exc.body or ""
        else:
            upstream_text = str(exc)
        classifier = type(self).error_classifier
        classified = None
        if classifier and upstream_text:
            classified = classifier(upstream_text, context)
        if classified is None:
            raise exc
        self.logger.error(
            "%s rejected the booking: %s", self.display_name, classified
        )
        raise classified from exc

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        return await self.http.request(method, path, **kwargs)
