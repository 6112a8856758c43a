"""Shared test fixtures for factuursturen.

Provides an in-process fake of the FactuurSturen API (served through
``httpx.MockTransport``), a factory for clients wired to it, isolated
config directories, and output-state management.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from factuursturen.client import FactuurSturenClient, Transport
from factuursturen.models import ClientConfig, RequestConfig
from factuursturen.output import OutputFormat, OutputManager, reset_output, set_output


API_PREFIX = "/api/v1/"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Install a quiet manager for the test and drop it afterwards.

    The OutputManager caches sys.stdout/sys.stderr at creation time; a
    fresh one per test keeps capsys and CliRunner redirection working.
    """
    set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Fake service
# ---------------------------------------------------------------------------


class FakeService:
    """Minimal stand-in for the FactuurSturen API.

    Routes are keyed by ``(METHOD, path)`` with the path relative to the API
    root (``"products/7"``). Unrouted requests get a 404. Every request is
    recorded in :attr:`calls` as ``(method, path, decoded_json_body)``.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.calls: list[tuple[str, str, Any]] = []

    def route(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body: Any = None,
        text: Optional[str] = None,
    ) -> None:
        if text is not None:
            self.routes[(method, path)] = lambda: httpx.Response(status, text=text)
        elif json_body is not None:
            self.routes[(method, path)] = lambda: httpx.Response(status, json=json_body)
        else:
            self.routes[(method, path)] = lambda: httpx.Response(status)

    def route_callable(self, method: str, path: str, factory: Callable[[], httpx.Response]) -> None:
        self.routes[(method, path)] = factory

    def count(self, method: str, path: str) -> int:
        return sum(1 for m, p, _ in self.calls if m == method and p == path)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith(API_PREFIX):
            path = path[len(API_PREFIX):]
        body = json.loads(request.content) if request.content else None
        self.calls.append((request.method, path, body))
        factory = self.routes.get((request.method, path))
        if factory is None:
            return httpx.Response(404, json={"message": f"no route for {request.method} {path}"})
        return factory()


@pytest.fixture
def service() -> FakeService:
    return FakeService()


@pytest.fixture
def make_client(service: FakeService) -> Callable[..., FactuurSturenClient]:
    """Factory for clients routed to the fake service.

    Keyword arguments are passed to :class:`ClientConfig`; retries default
    to zero so error tests don't sleep.
    """

    def _factory(**config_kwargs: Any) -> FactuurSturenClient:
        config_kwargs.setdefault("username", "acme")
        config_kwargs.setdefault("request", RequestConfig(max_retries=0))
        config = ClientConfig(**config_kwargs)
        transport = Transport(config, "secret-key", httpx.MockTransport(service))
        return FactuurSturenClient(config, transport=transport)

    return _factory


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config directory at tmp_path and clear FACTUURSTUREN_* variables.

    Returns:
        The config directory (``tmp_path/config/factuursturen``).
    """
    monkeypatch.setattr("factuursturen.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for var in [
        "FACTUURSTUREN_BASE_URL",
        "FACTUURSTUREN_USERNAME",
        "FACTUURSTUREN_API_KEY_SOURCE",
        "FACTUURSTUREN_CACHE",
        "FACTUURSTUREN_API_KEY",
    ]:
        monkeypatch.delenv(var, raising=False)
    return tmp_path / "config" / "factuursturen"


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()
