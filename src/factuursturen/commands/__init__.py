"""Sub-command groups for the ``factuursturen`` command line.

Each module exposes a :class:`typer.Typer` group that :mod:`factuursturen.app`
mounts on the root application. :func:`run_with_client` is the shared glue:
it builds a client from the resolved configuration, runs one coroutine
against it, and turns library errors into exit codes.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

import typer

from factuursturen.client import FactuurSturenClient
from factuursturen.config import resolve_config
from factuursturen.exceptions import FactuurSturenError
from factuursturen.output import error

T = TypeVar("T")


def run_with_client(
    ctx: typer.Context,
    action: Callable[[FactuurSturenClient], Awaitable[T]],
) -> T:
    """Run *action* against a freshly opened client.

    ``ctx.obj`` may carry ``base_url`` / ``username`` / ``cache`` overrides
    from the root callback and an ``http_transport`` to route requests through.

    Raises:
        typer.Exit: With the error's exit code when a
            :class:`~factuursturen.exceptions.FactuurSturenError` occurs.
    """
    obj: dict[str, Any] = ctx.obj or {}

    async def _run() -> T:
        config = resolve_config(
            cli_base_url=obj.get("base_url"),
            cli_username=obj.get("username"),
            cli_cache=obj.get("cache"),
        )
        client = FactuurSturenClient.from_config(config, obj.get("http_transport"))
        async with client:
            return await action(client)

    try:
        return asyncio.run(_run())
    except FactuurSturenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
