"""Typer application and console-script entry point for factuursturen.

The command line is a thin shell over
:class:`~factuursturen.client.FactuurSturenClient`: every sub-command
resolves configuration, opens a client, runs one coroutine, and prints the
result through :mod:`factuursturen.output`.

See Also:
    :mod:`factuursturen.commands` for the sub-command groups.
"""

from __future__ import annotations

import signal
import sys
from typing import Any, Optional

import typer

from factuursturen import __version__
from factuursturen.commands.config import config_app
from factuursturen.commands.invoices import invoices_app
from factuursturen.commands.products import products_app
from factuursturen.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="factuursturen",
    help="Work with products and invoices on FactuurSturen.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(products_app, name="products", help="List, create, update and delete products.")
app.add_typer(invoices_app, name="invoices", help="Inspect invoices.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"factuursturen {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Override the API root URL."
    ),
    username: Optional[str] = typer.Option(
        None, "--username", "-u", help="Account user name."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colour output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress informational output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    cache: Optional[bool] = typer.Option(
        None, "--cache/--no-cache", help="Override response caching for this run."
    ),
) -> None:
    """Set up output and stash the connection overrides in ``ctx.obj`` for sub-commands."""
    from factuursturen.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["base_url"] = base_url
    ctx.obj["username"] = username
    ctx.obj["cache"] = cache


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """Entry point of the ``factuursturen`` console script.

    Library errors escaping a command are printed and turned into the
    matching exit code; anything else exits with
    :data:`~factuursturen.exit_codes.EXIT_GENERIC_FAILURE`.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except Exception as exc:
        from factuursturen.exceptions import FactuurSturenError
        from factuursturen.output import error

        if isinstance(exc, FactuurSturenError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc!r}")
        sys.exit(EXIT_GENERIC_FAILURE)
