"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specdrive.exceptions.SpecdriveError` subclass.
Wrapper scripts can inspect the exit code to tell a mis-configured provider
apart from a failed credential exchange without parsing stderr.

Example::

    $ specdrive get cdns_v1 42
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the refresh-token exchange was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an unsupported verb."""

EXIT_AUTH_FAILURE = 3
"""Authentication failed (upstream token exchange or HTTP 401/403)."""

EXIT_NOT_FOUND = 4
"""The requested resource instance was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The remote API answered with an error status."""

EXIT_CONNECTION_ERROR = 6
"""The HTTP transport failed (timeout, DNS failure, connection refused)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The API description could not be loaded or parsed."""

EXIT_CONFIGURATION_ERROR = 8
"""The description and the operator configuration are inconsistent."""
