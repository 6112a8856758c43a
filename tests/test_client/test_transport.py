"""Tests for the asynchronous HTTP transport."""

from __future__ import annotations

import base64
from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from factuursturen.client.transport import Transport, error_detail
from factuursturen.exceptions import (
    AuthError,
    ConnectionError_,
    InvalidUsageError,
    NotFoundError,
    ServerError,
)
from factuursturen.models import ClientConfig, Product, RequestConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_config(max_retries: int = 0, username: str | None = "acme") -> ClientConfig:
    return ClientConfig(
        base_url="https://api.example.com/api/v1/",
        username=username,
        request=RequestConfig(timeout=5, max_retries=max_retries),
    )


def _transport(handler, **config_kwargs: Any) -> Transport:
    return Transport(_make_config(**config_kwargs), "secret", httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_context_manager_opens_and_closes(self) -> None:
        transport = _transport(lambda request: httpx.Response(200))
        assert not transport.is_open
        async with transport:
            assert transport.is_open
        assert not transport.is_open

    @pytest.mark.asyncio
    async def test_send_before_open_raises(self) -> None:
        transport = _transport(lambda request: httpx.Response(200))
        with pytest.raises(InvalidUsageError):
            await transport.send("GET", "products")


# ---------------------------------------------------------------------------
# Request shape
# ---------------------------------------------------------------------------


class TestRequestShape:
    @pytest.mark.asyncio
    async def test_url_auth_and_accept_header(self) -> None:
        seen: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("authorization")
            seen["accept"] = request.headers.get("accept")
            return httpx.Response(200, json=[])

        async with _transport(handler) as transport:
            await transport.execute("GET", "products")

        expected = base64.b64encode(b"acme:secret").decode()
        assert seen["url"] == "https://api.example.com/api/v1/products"
        assert seen["auth"] == f"Basic {expected}"
        assert seen["accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_no_auth_without_username(self) -> None:
        seen: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200)

        async with _transport(handler, username=None) as transport:
            await transport.send("GET", "products")

        assert seen["auth"] is None

    @pytest.mark.asyncio
    async def test_json_body_sent(self) -> None:
        seen: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["content_type"] = request.headers.get("content-type")
            seen["body"] = request.content
            return httpx.Response(200, text="1")

        async with _transport(handler) as transport:
            await transport.send("POST", "products", json_body=[{"name": "x"}])

        assert seen["content_type"] == "application/json"
        assert b'"name"' in seen["body"]


# ---------------------------------------------------------------------------
# execute: parsing and error mapping
# ---------------------------------------------------------------------------


class TestExecute:
    @pytest.mark.asyncio
    async def test_parses_into_result_type(self) -> None:
        handler = lambda request: httpx.Response(200, json=[{"id": 1, "name": "a"}])
        async with _transport(handler) as transport:
            result = await transport.execute("GET", "products", list[Product])

        assert isinstance(result[0], Product)
        assert result[0].id == 1

    @pytest.mark.asyncio
    async def test_raw_json_without_result_type(self) -> None:
        handler = lambda request: httpx.Response(200, json={"a": 1})
        async with _transport(handler) as transport:
            assert await transport.execute("GET", "x") == {"a": 1}

    @pytest.mark.asyncio
    async def test_empty_body_is_none(self) -> None:
        async with _transport(lambda request: httpx.Response(204)) as transport:
            assert await transport.execute("GET", "products/1", Product) is None

    @pytest.mark.asyncio
    async def test_not_found_ok(self) -> None:
        async with _transport(lambda request: httpx.Response(404)) as transport:
            assert await transport.execute("GET", "products/1", Product, not_found_ok=True) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "exc_type"),
        [(401, AuthError), (403, AuthError), (404, NotFoundError), (400, ServerError), (500, ServerError)],
    )
    async def test_error_mapping(self, status: int, exc_type: type) -> None:
        handler = lambda request: httpx.Response(status, json={"message": "nope"})
        async with _transport(handler) as transport:
            with pytest.raises(exc_type, match=f"HTTP {status}: nope"):
                await transport.execute("GET", "products")

    @pytest.mark.asyncio
    async def test_invalid_json_raises_server_error(self) -> None:
        handler = lambda request: httpx.Response(200, text="<html>")
        async with _transport(handler) as transport:
            with pytest.raises(ServerError, match="Invalid JSON"):
                await transport.execute("GET", "products")

    @pytest.mark.asyncio
    async def test_wrong_shape_raises_server_error(self) -> None:
        handler = lambda request: httpx.Response(200, json={"id": "not-a-number"})
        async with _transport(handler) as transport:
            with pytest.raises(ServerError, match="Unexpected response shape"):
                await transport.execute("GET", "products/1", Product)


# ---------------------------------------------------------------------------
# send: raw responses
# ---------------------------------------------------------------------------


class TestSend:
    @pytest.mark.asyncio
    async def test_error_status_returned_not_raised(self) -> None:
        async with _transport(lambda request: httpx.Response(422)) as transport:
            response = await transport.send("PUT", "products/1", json_body=[{}])

        assert response.status_code == 422
        assert not response.is_success


# ---------------------------------------------------------------------------
# Retry
# ---------------------------------------------------------------------------


class TestRetry:
    @pytest.mark.asyncio
    async def test_retries_5xx_then_succeeds(self) -> None:
        responses = iter([httpx.Response(503), httpx.Response(200, json=[])])

        with patch("factuursturen.client.transport.asyncio.sleep", new=AsyncMock()) as sleep:
            async with _transport(lambda request: next(responses), max_retries=2) as transport:
                result = await transport.execute("GET", "products")

        assert result == []
        sleep.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_5xx_returned_after_retries_exhausted(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(502)

        with patch("factuursturen.client.transport.asyncio.sleep", new=AsyncMock()) as sleep:
            async with _transport(handler, max_retries=2) as transport:
                response = await transport.send("DELETE", "products/1")

        assert response.status_code == 502
        assert len(calls) == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1, 2]

    @pytest.mark.asyncio
    async def test_connection_error_after_retries(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with patch("factuursturen.client.transport.asyncio.sleep", new=AsyncMock()):
            async with _transport(handler, max_retries=1) as transport:
                with pytest.raises(ConnectionError_, match="after 2 attempts"):
                    await transport.send("GET", "products")

    @pytest.mark.asyncio
    async def test_timeout_is_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with _transport(handler) as transport:
            with pytest.raises(ConnectionError_):
                await transport.send("GET", "products")


# ---------------------------------------------------------------------------
# error_detail
# ---------------------------------------------------------------------------


class TestErrorDetail:
    def test_message_key(self) -> None:
        assert error_detail(httpx.Response(400, json={"message": "bad"})) == "bad"

    def test_error_key(self) -> None:
        assert error_detail(httpx.Response(400, json={"error": "worse"})) == "worse"

    def test_plain_text_truncated(self) -> None:
        assert error_detail(httpx.Response(500, text="x" * 500)) == "x" * 200

    def test_empty(self) -> None:
        assert error_detail(httpx.Response(500)) == ""

    def test_json_list(self) -> None:
        assert error_detail(httpx.Response(400, json=["a"])) == "['a']"
