"""Shared httpx transport for courier APIs."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

import httpx

from fastapi_couriers.exceptions import (
    AuthenticationError,
    CommunicationError,
    ResponseParseError,
)


SENSITIVE_KEYS = frozenset(
    {
        "phone",
        "phone_no",
        "phone_no2",
        "customer_phone",
        "customer_secondary_phone",
        "recipient_contact_1",
        "recipient_contact_2",
        "password",
        "api_key",
        "token",
        "authorization",
    }
)

_PHONE_RE = re.compile(r"\+?\d[\d\s-]{7,}\d")


def redact(value: Any) -> Any:
    """Mask phone numbers and secrets in a payload before logging it."""
    if isinstance(value, Mapping):
        return {
            key: "***" if str(key).lower() in SENSITIVE_KEYS else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, list | tuple):
        return [redact(item) for item in value]
    if isinstance(value, str):
        return _PHONE_RE.sub("***", value)
    return value


class CourierHttpClient:
    """Issues one JSON request per call against a courier base URL.

    Every failure is raised as a ShippingError subclass so adapters never
    see raw httpx exceptions.
    """

    def __init__(
        self,
        *,
        provider_name: str,
        base_url: str,
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
        redact_pii: bool = True,
    ) -> None:
        self.provider_name = provider_name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)
        self.redact_pii = redact_pii

    def _loggable(self, value: Any) -> Any:
        return redact(value) if self.redact_pii else value

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        json: Any = None,
        data: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        request_headers = {"Accept": "application/json"}
        request_headers.update(headers or {})
        self.logger.debug(
            "%s %s %s body=%s",
            self.provider_name,
            method,
            url,
            self._loggable(json if json is not None else data),
        )

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.request(
                    method,
                    url,
                    headers=request_headers,
                    json=json,
                    data=data,
                    params=params,
                )
        except httpx.TimeoutException as exc:
            raise CommunicationError(
                f"{self.provider_name} request to {path} timed out"
            ) from exc
        except httpx.HTTPError as exc:
            raise CommunicationError(
                f"{self.provider_name} request to {path} failed: {exc}"
            ) from exc

        body = response.text
        self.logger.debug(
            "%s responded %s: %s",
            self.provider_name,
            response.status_code,
            self._loggable(body),
        )

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"{self.provider_name} rejected the credentials "
                f"(status {response.status_code}): {body}",
                status_code=response.status_code,
                body=body,
            )
        if response.is_error:
            raise CommunicationError(
                f"{self.provider_name} HTTP error! "
                f"status: {response.status_code}, body: {body}",
                status_code=response.status_code,
                body=body,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ResponseParseError(
                f"Invalid JSON response from {self.provider_name}: {body}"
            ) from exc
