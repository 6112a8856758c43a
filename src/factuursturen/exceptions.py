"""Exception hierarchy for factuursturen.

All exceptions inherit from :class:`FactuurSturenError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`factuursturen.exit_codes`. Library callers catch the specific
subclasses; the command line catches ``FactuurSturenError`` and exits with
the matching code.

Subclass hierarchy::

    FactuurSturenError (exit 1)
    +-- InvalidUsageError   (exit 2)
    |   +-- NullArgumentError
    +-- AuthError           (exit 3)
    +-- NotFoundError       (exit 4)
    +-- ServerError         (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- RequestFailedError  (exit 7)
    +-- ConfigError         (exit 1)
"""

from __future__ import annotations

from http import HTTPStatus

from factuursturen.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_REQUEST_FAILED,
    EXIT_SERVER_ERROR,
)


class FactuurSturenError(Exception):
    """Base exception for all factuursturen errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(FactuurSturenError):
    """Raised for invalid arguments or missing required values."""

    exit_code = EXIT_INVALID_USAGE


class NullArgumentError(InvalidUsageError, TypeError):
    """Raised when a required argument is ``None``.

    Args:
        argument: Name of the offending parameter.
    """

    def __init__(self, argument: str):
        super().__init__(f"Argument '{argument}' must not be None")
        self.argument = argument


class AuthError(FactuurSturenError):
    """Raised when the service rejects the credentials (HTTP 401 / 403)."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(FactuurSturenError):
    """Raised when the service returns HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(FactuurSturenError):
    """Raised when the service returns an HTTP error not covered elsewhere (mostly 5xx)."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(FactuurSturenError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class RequestFailedError(FactuurSturenError):
    """Raised when a create, update or delete is answered with a non-success status.

    The upstream status code is kept on :attr:`status_code` for inspection.
    Nothing is retried at this layer and no cached state is changed.

    Args:
        status_code: The HTTP status returned by the service.
        message: Optional detail from the response body.
    """

    exit_code = EXIT_REQUEST_FAILED

    def __init__(self, status_code: int, message: str | None = None):
        try:
            phrase = HTTPStatus(status_code).phrase
        except ValueError:
            phrase = "Unknown status"
        text = f"Request failed with HTTP {status_code} {phrase}"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)
        self.status_code = status_code


class ConfigError(FactuurSturenError):
    """Raised for configuration problems (invalid JSON, unresolvable credentials)."""

    exit_code = EXIT_GENERIC_FAILURE
