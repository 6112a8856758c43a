"""Asynchronous HTTP transport for the FactuurSturen API.

:class:`Transport` wraps :class:`httpx.AsyncClient` and owns everything
about a single request/response exchange: basic auth with the account's
user name and API key, JSON content negotiation, retry with exponential
backoff, and mapping of error statuses to the exception hierarchy in
:mod:`factuursturen.exceptions`.

It exposes two entry points because callers need two shapes of answer:

- :meth:`Transport.execute` parses a successful body into a typed value
  and raises for error statuses. Used for reads.
- :meth:`Transport.send` hands back the raw :class:`httpx.Response` so the
  caller can branch on ``response.is_success`` itself. Used for writes,
  where a rejection becomes a
  :class:`~factuursturen.exceptions.RequestFailedError`.

Both raise :class:`~factuursturen.exceptions.ConnectionError_` when the
network keeps failing after all retries.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from factuursturen.exceptions import (
    AuthError,
    ConnectionError_,
    InvalidUsageError,
    NotFoundError,
    ServerError,
)
from factuursturen.models import ClientConfig
from factuursturen.output import get_output

T = TypeVar("T")


class Transport:
    """Executes requests against the service with retry and error mapping.

    Must be used as an async context manager, or opened and closed with
    :meth:`open` / :meth:`aclose`.

    Args:
        config: Base URL and request settings (timeout, retries, SSL verify).
        api_key: The account's API key, sent as the basic-auth password.
        http_transport: Optional :mod:`httpx` transport to route requests
            through instead of the network (``httpx.MockTransport`` in tests).

    Example::

        async with Transport(config, api_key) as transport:
            products = await transport.execute("GET", "products", list[Product])
    """

    def __init__(
        self,
        config: ClientConfig,
        api_key: Optional[str] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._api_key = api_key
        self._http_transport = http_transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def is_open(self) -> bool:
        return self._client is not None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def open(self) -> None:
        if self._client is not None:
            return
        request = self._config.request
        auth = None
        if self._config.username and self._api_key:
            auth = httpx.BasicAuth(self._config.username, self._api_key)
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            auth=auth,
            headers={"Accept": "application/json"},
            timeout=request.timeout,
            verify=request.verify_ssl,
            follow_redirects=True,
            transport=self._http_transport,
        )

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> Transport:
        self.open()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    async def execute(
        self,
        method: str,
        path: str,
        result_type: Any = None,
        json_body: Optional[Any] = None,
        not_found_ok: bool = False,
    ) -> Any:
        """Send a request and parse the successful body.

        Args:
            method: HTTP method.
            path: Path relative to the configured base URL (``"products/7"``).
            result_type: Type the JSON body is validated into (a pydantic
                model, ``list[Product]``, ...). ``None`` returns the decoded
                JSON unchanged.
            json_body: Optional JSON-serialisable request body.
            not_found_ok: Return ``None`` on HTTP 404 instead of raising.

        Returns:
            The parsed body, or ``None`` for an empty body (or a tolerated 404).

        Raises:
            AuthError: On 401 / 403.
            NotFoundError: On 404 unless *not_found_ok*.
            ServerError: On any other error status, or a body that does not
                match *result_type*.
            ConnectionError_: On network / timeout errors after all retries.
        """
        response = await self.send(method, path, json_body=json_body)

        if response.status_code == 404 and not_found_ok:
            get_output().debug(f"{method.upper()} {path}: not found")
            return None
        self._map_response_error(response)

        if not response.content:
            return None
        try:
            data = response.json()
        except ValueError as exc:
            raise ServerError(f"Invalid JSON from {method.upper()} {path}: {exc}") from exc
        if result_type is None:
            return data
        try:
            return TypeAdapter(result_type).validate_python(data)
        except ValidationError as exc:
            raise ServerError(
                f"Unexpected response shape from {method.upper()} {path}: {exc}"
            ) from exc

    async def send(
        self,
        method: str,
        path: str,
        json_body: Optional[Any] = None,
    ) -> httpx.Response:
        """Send a request and return the raw response, whatever its status.

        Raises:
            ConnectionError_: On network / timeout errors after all retries.
        """
        if self._client is None:
            raise InvalidUsageError("Transport is not open -- use 'async with'")
        return await self._execute_with_retry(method, path, json_body)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _execute_with_retry(
        self,
        method: str,
        path: str,
        json_body: Any,
    ) -> httpx.Response:
        """Retry on 5xx and connection / timeout errors, doubling the delay: 1 s, 2 s, 4 s, ..."""
        assert self._client is not None

        max_retries = self._config.request.max_retries
        output = get_output()

        for attempt in range(max_retries + 1):
            try:
                kwargs: dict[str, Any] = {"method": method, "url": path}
                if json_body is not None:
                    kwargs["json"] = json_body
                response = await self._client.request(**kwargs)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    output.debug(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    await asyncio.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                output.debug(
                    f"Server error {response.status_code}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                await asyncio.sleep(delay)
                continue

            output.debug(f"{method.upper()} {path} -> HTTP {response.status_code}")
            return response

        raise ServerError("Request failed after all retries")  # pragma: no cover

    @staticmethod
    def _map_response_error(response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        msg = error_detail(response)
        full_msg = f"HTTP {status}: {msg}" if msg else f"HTTP {status}"

        if status in (401, 403):
            raise AuthError(full_msg)
        if status == 404:
            raise NotFoundError(full_msg)
        raise ServerError(full_msg)


def error_detail(response: httpx.Response) -> str:
    """Best-effort human-readable message from an error response body."""
    try:
        detail = response.json()
    except ValueError:
        return response.text[:200] if response.text else ""
    if isinstance(detail, dict):
        return str(detail.get("message") or detail.get("error") or detail.get("detail") or "")
    return str(detail)
