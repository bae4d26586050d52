"""Courier credential handling tests."""

from __future__ import annotations

import asyncio

import httpx
import pytest
from conftest import CourierStub, json_body, royal_login_ok

from fastapi_couriers.auth import (
    AuthState,
    BearerTokenAuth,
    ClientKeyAuth,
    SessionLoginAuth,
    parse_credentials,
)
from fastapi_couriers.exceptions import (
    AuthenticationError,
    CommunicationError,
    ProviderNotConfiguredError,
)
from fastapi_couriers.http import CourierHttpClient


class TestParseCredentials:
    def test_splits_on_first_colon(self) -> None:
        assert parse_credentials("ops@shop.lk:pa:ss") == (
            "ops@shop.lk",
            "pa:ss",
        )

    def test_falls_back_to_defaults(self) -> None:
        assert parse_credentials(
            "no-colon",
            default_email="env@shop.lk",
            default_password="envpass",
        ) == ("env@shop.lk", "envpass")

    @pytest.mark.parametrize("credentials", [None, "", "email-only", ":pw"])
    def test_rejects_incomplete_credentials(self, credentials) -> None:
        with pytest.raises(ProviderNotConfiguredError, match="email:password"):
            parse_credentials(credentials)


class TestStaticAuth:
    async def test_bearer_token(self) -> None:
        auth = BearerTokenAuth("trans-key")
        assert auth.state is AuthState.AUTHENTICATED
        assert await auth.headers() == {"Authorization": "Bearer trans-key"}

    def test_bearer_token_required(self) -> None:
        with pytest.raises(ProviderNotConfiguredError):
            BearerTokenAuth("")

    async def test_client_key_fields(self) -> None:
        auth = ClientKeyAuth("client-7", "farda-key")
        assert auth.fields() == {
            "client_id": "client-7",
            "api_key": "farda-key",
        }
        assert await auth.headers() == {}

    def test_client_key_requires_both_parts(self) -> None:
        with pytest.raises(ProviderNotConfiguredError):
            ClientKeyAuth("client-7", "")


def _session(stub: CourierStub) -> SessionLoginAuth:
    http = CourierHttpClient(
        provider_name="Royal Express",
        base_url="https://royal.test",
        transport=stub.transport,
    )
    return SessionLoginAuth(
        http, email="ops@shop.lk", password="s3cret", tenant="royalexpress"
    )


class TestSessionLoginAuth:
    async def test_logs_in_once_and_caches_token(self, stub) -> None:
        stub.add("POST", "/merchant/login", royal_login_ok)
        auth = _session(stub)
        assert auth.state is AuthState.UNAUTHENTICATED

        first = await auth.headers()
        second = await auth.headers()

        assert first == second == {
            "X-tenant": "royalexpress",
            "Authorization": "Bearer tok-1",
        }
        assert auth.state is AuthState.AUTHENTICATED
        (login,) = stub.calls("POST", "/merchant/login")
        assert login.headers["X-tenant"] == "royalexpress"
        assert json_body(login) == {
            "email": "ops@shop.lk",
            "password": "s3cret",
        }

    async def test_concurrent_callers_share_one_login(self, stub) -> None:
        stub.add("POST", "/merchant/login", royal_login_ok)
        auth = _session(stub)

        await asyncio.gather(*(auth.authenticate() for _ in range(5)))

        assert len(stub.calls("POST", "/merchant/login")) == 1

    async def test_invalidate_forces_new_login(self, stub) -> None:
        stub.add("POST", "/merchant/login", royal_login_ok)
        auth = _session(stub)
        await auth.authenticate()

        auth.invalidate()
        assert auth.state is AuthState.UNAUTHENTICATED
        await auth.authenticate()

        assert len(stub.calls("POST", "/merchant/login")) == 2

    async def test_non_success_message(self, stub) -> None:
        stub.add("POST", "/merchant/login", {"message": "Invalid login"})
        auth = _session(stub)

        with pytest.raises(AuthenticationError, match="Invalid login"):
            await auth.authenticate()
        assert auth.state is AuthState.UNAUTHENTICATED

    async def test_missing_token(self, stub) -> None:
        stub.add("POST", "/merchant/login", {"message": "success"})
        with pytest.raises(AuthenticationError):
            await _session(stub).authenticate()

    async def test_http_error_during_login(self, stub) -> None:
        stub.add("POST", "/merchant/login", (422, {"message": "bad email"}))

        with pytest.raises(AuthenticationError) as exc_info:
            await _session(stub).authenticate()
        assert exc_info.value.status_code == 422

    async def test_failed_login_is_not_cached(self, stub) -> None:
        stub.add(
            "POST",
            "/merchant/login",
            (401, {"message": "Unauthenticated"}),
            royal_login_ok,
        )
        auth = _session(stub)

        with pytest.raises(AuthenticationError):
            await auth.authenticate()
        assert await auth.authenticate() == "tok-1"

    async def test_network_error_is_not_an_auth_error(self) -> None:
        def fail(request):
            raise httpx.ConnectError("no route to host")

        http = CourierHttpClient(
            provider_name="Royal Express",
            base_url="https://royal.test",
            transport=httpx.MockTransport(fail),
        )
        auth = SessionLoginAuth(
            http, email="ops@shop.lk", password="pw", tenant="royalexpress"
        )
        with pytest.raises(CommunicationError) as exc_info:
            await auth.authenticate()
        assert not isinstance(exc_info.value, AuthenticationError)
