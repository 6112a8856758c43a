"""Configuration with XDG paths, atomic writes, and precedence resolution.

* **Directory layout** -- ``$XDG_CONFIG_HOME/factuursturen`` on Linux/BSD,
  ``~/.factuursturen/`` on macOS and Windows (:func:`get_config_dir`).
* **Config file** -- one :class:`~factuursturen.models.ClientConfig` stored
  as ``config.json`` (:func:`load_config`, :func:`save_config`).
* **Precedence** -- :func:`resolve_config` layers CLI flags over
  ``FACTUURSTUREN_*`` environment variables over the config file over
  defaults.
* **Credentials** -- :func:`resolve_credential` reads the API key from an
  env var, a file, an interactive prompt, or takes it literally.

Writes go through a temp file that is renamed over the target so a crash
never leaves a truncated config behind.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Optional

from factuursturen.exceptions import ConfigError
from factuursturen.models import ClientConfig

_APP_NAME = "factuursturen"
_CONFIG_FILENAME = "config.json"

ENV_BASE_URL = "FACTUURSTUREN_BASE_URL"
ENV_USERNAME = "FACTUURSTUREN_USERNAME"
ENV_API_KEY_SOURCE = "FACTUURSTUREN_API_KEY_SOURCE"
ENV_CACHE = "FACTUURSTUREN_CACHE"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary."""
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* via a sibling temp file and ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Config file ---


def load_config() -> ClientConfig:
    """Load the stored configuration.

    Returns:
        The deserialised :class:`~factuursturen.models.ClientConfig`, or a
        default instance when no file exists yet.

    Raises:
        ConfigError: If the file holds invalid JSON or fails validation.
    """
    path = config_path()
    if not path.is_file():
        return ClientConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return ClientConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: ClientConfig) -> None:
    data = config.model_dump(mode="json")
    _atomic_write(config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean (got {value!r})")


def resolve_config(
    cli_base_url: Optional[str] = None,
    cli_username: Optional[str] = None,
    cli_cache: Optional[bool] = None,
) -> ClientConfig:
    """Resolve the effective client configuration.

    Precedence (high to low):
        1. CLI flags
        2. Environment variables (``FACTUURSTUREN_BASE_URL``,
           ``FACTUURSTUREN_USERNAME``, ``FACTUURSTUREN_API_KEY_SOURCE``,
           ``FACTUURSTUREN_CACHE``)
        3. Config file
        4. Defaults

    Raises:
        ConfigError: On an unreadable config file or a malformed
            ``FACTUURSTUREN_CACHE`` value.
    """
    config = load_config()

    env_base_url = os.environ.get(ENV_BASE_URL)
    if env_base_url:
        config.base_url = env_base_url
    env_username = os.environ.get(ENV_USERNAME)
    if env_username:
        config.username = env_username
    env_key_source = os.environ.get(ENV_API_KEY_SOURCE)
    if env_key_source:
        config.api_key_source = env_key_source
    env_cache = os.environ.get(ENV_CACHE)
    if env_cache:
        config.allow_response_caching = _parse_bool(ENV_CACHE, env_cache)

    if cli_base_url is not None:
        config.base_url = cli_base_url
    if cli_username is not None:
        config.username = cli_username
    if cli_cache is not None:
        config.allow_response_caching = cli_cache

    return config


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads the file, stripped of whitespace
        - ``"prompt"`` -- asks interactively (requires a TTY)
        - anything else is taken as the literal key

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for the API key: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("FactuurSturen API key: ")

    if not source:
        raise ConfigError("Empty credential source")
    return source
