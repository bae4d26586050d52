"""Credential handling for courier APIs."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from fastapi_couriers.exceptions import (
    AuthenticationError,
    CommunicationError,
    ProviderNotConfiguredError,
)
from fastapi_couriers.http import CourierHttpClient

logger = logging.getLogger(__name__)


class AuthState(Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


def parse_credentials(
    credentials: str | None,
    *,
    default_email: str = "",
    default_password: str = "",
) -> tuple[str, str]:
    """Split an ``email:password`` credential string.

    Falls back to the given defaults when either half is missing.
    """
    email, _, password = (credentials or "").partition(":")
    if not email or not password:
        email, password = default_email, default_password
    if not email or not password:
        raise ProviderNotConfiguredError(
            "Royal Express credentials must use the format email:password"
        )
    return email, password


class BearerTokenAuth:
    """Pre-keyed bearer token; a 401 is surfaced as-is."""

    state = AuthState.AUTHENTICATED

    def __init__(self, token: str) -> None:
        if not token:
            raise ProviderNotConfiguredError("API token is required")
        self.token = token

    async def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def invalidate(self) -> None:
        pass


class ClientKeyAuth:
    """Client ID and API key sent inside each request body."""

    state = AuthState.AUTHENTICATED

    def __init__(self, client_id: str, api_key: str) -> None:
        if not client_id or not api_key:
            raise ProviderNotConfiguredError(
                "Both client ID and API key are required"
            )
        self.client_id = client_id
        self.api_key = api_key

    def fields(self) -> dict[str, str]:
        return {"client_id": self.client_id, "api_key": self.api_key}

    async def headers(self) -> dict[str, str]:
        return {}

    def invalidate(self) -> None:
        pass


class SessionLoginAuth:
    """Email/password login exchanged for a bearer token.

    The token is cached on the instance until ``invalidate`` is called after
    an authentication failure; the next request then logs in again.
    """

    def __init__(
        self,
        http: CourierHttpClient,
        *,
        email: str,
        password: str,
        tenant: str,
        login_path: str = "/merchant/login",
    ) -> None:
        self.http = http
        self.email = email
        self.password = password
        self.tenant = tenant
        self.login_path = login_path
        self._token: str | None = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> AuthState:
        if self._token:
            return AuthState.AUTHENTICATED
        return AuthState.UNAUTHENTICATED

    def tenant_headers(self) -> dict[str, str]:
        return {"X-tenant": self.tenant}

    async def authenticate(self) -> str:
        async with self._lock:
            if self._token:
                return self._token

            logger.info("Logging in to %s", self.http.provider_name)
            try:
                payload = await self.http.request(
                    "POST",
                    self.login_path,
                    headers=self.tenant_headers(),
                    json={"email": self.email, "password": self.password},
                )
            except AuthenticationError:
                raise
            except CommunicationError as exc:
                if exc.status_code is None:
                    raise
                raise AuthenticationError(
                    f"Authentication failed: {exc}",
                    status_code=exc.status_code,
                    body=exc.body,
                ) from exc

            token = payload.get("token") if isinstance(payload, dict) else None
            message = (
                payload.get("message") if isinstance(payload, dict) else None
            )
            if message != "success" or not token:
                raise AuthenticationError(f"Authentication failed: {message}")

            self._token = token
            return token

    async def headers(self) -> dict[str, str]:
        token = await self.authenticate()
        return {**self.tenant_headers(), "Authorization": f"Bearer {token}"}

    def invalidate(self) -> None:
        if self._token:
            logger.info(
                "Clearing cached %s session token", self.http.provider_name
            )
        self._token = None
