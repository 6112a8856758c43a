"""Config commands -- view and modify the stored configuration.

Settings live in ``config.json`` in the factuursturen config directory and
hold the account user name, where to read the API key from, the base URL,
and the caching default.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError

from factuursturen.config import get_config_dir, load_config, resolve_config, save_config
from factuursturen.exceptions import FactuurSturenError
from factuursturen.models import ClientConfig
from factuursturen.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration (file, environment and flags combined).

    Example::

        factuursturen config show --json
    """
    obj = ctx.obj or {}
    try:
        config = resolve_config(
            cli_base_url=obj.get("base_url"),
            cli_username=obj.get("username"),
            cli_cache=obj.get("cache"),
        )
    except FactuurSturenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g. 'request.timeout')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is coerced to the type of the existing field and the result
    is validated before it is saved.

    Example::

        factuursturen config set username acme
        factuursturen config set allow_response_caching false
        factuursturen config set request.max_retries 5
    """
    try:
        config = load_config()
    except FactuurSturenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    current = target[final_key]
    if isinstance(current, bool):
        coerced: object = value.lower() in ("true", "1", "yes", "on")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    else:
        coerced = value

    target[final_key] = coerced

    try:
        new_config = ClientConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_config(new_config)
    success(f"Set {key} = {coerced}")
