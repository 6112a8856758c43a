"""Numeric process exit codes used by the ``factuursturen`` command line.

Each constant maps to an error category and is referenced by the
corresponding :class:`~factuursturen.exceptions.FactuurSturenError`
subclass, so shell scripts can tell failure classes apart without parsing
stderr.

Example::

    $ factuursturen products delete 7
    $ echo $?
    7   # EXIT_REQUEST_FAILED -- the service rejected the delete
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments or a missing required value."""

EXIT_AUTH_FAILURE = 3
"""The service rejected the username / API key."""

EXIT_NOT_FOUND = 4
"""The requested resource does not exist (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The service returned an HTTP 5xx error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_REQUEST_FAILED = 7
"""A create, update or delete was answered with a non-success status."""
