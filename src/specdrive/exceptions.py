"""Exception hierarchy for specdrive.

All exceptions inherit from :class:`SpecdriveError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specdrive.exit_codes`.
The CLI entry point in :func:`specdrive.app.main` catches ``SpecdriveError``
and exits with the matching code.

Resolution errors are never retried: a :class:`ConfigurationError` means the
API description and the operator configuration disagree, and an
:class:`UpstreamAuthError` means a credential exchange was rejected.

Subclass hierarchy::

    SpecdriveError (exit 1)
    +-- ConfigurationError      (exit 8)
    +-- UpstreamAuthError       (exit 3)
    +-- UnsupportedMethodError  (exit 2)
    +-- TransportError          (exit 6)
    +-- SpecParseError          (exit 7)
    +-- ApiStatusError          (exit 5)
        +-- AuthError           (exit 3)
        +-- NotFoundError       (exit 4)
"""

from __future__ import annotations

from typing import Optional

from specdrive.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONFIGURATION_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class SpecdriveError(Exception):
    """Base exception for all specdrive errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specdrive.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr. Must
            never contain secret values.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(SpecdriveError):
    """Raised when the description or operator configuration is inconsistent.

    Covers undefined security schemes, unknown regions, missing host or path,
    missing instance ids and unresolvable credential sources.
    """

    exit_code = EXIT_CONFIGURATION_ERROR


class UpstreamAuthError(SpecdriveError):
    """Raised when a refresh-token exchange returns an unexpected answer."""

    exit_code = EXIT_AUTH_FAILURE

    def __init__(self, message: str, token_url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.token_url = token_url
        self.status_code = status_code


class UnsupportedMethodError(SpecdriveError):
    """Raised when the dispatcher is asked for a verb it does not handle."""

    exit_code = EXIT_INVALID_USAGE


class TransportError(SpecdriveError):
    """Raised when the HTTP call itself fails.

    The original :mod:`httpx` exception is kept as ``__cause__``.
    """

    exit_code = EXIT_CONNECTION_ERROR

    def __init__(self, message: str, method: str, url: str):
        super().__init__(message)
        self.method = method
        self.url = url


class SpecParseError(SpecdriveError):
    """Raised when the API description cannot be loaded or parsed."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ApiStatusError(SpecdriveError):
    """Raised by :func:`~specdrive.client.response.check_response` for HTTP >= 400."""

    exit_code = EXIT_SERVER_ERROR

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class AuthError(ApiStatusError):
    """Raised when the API answers 401 or 403."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(ApiStatusError):
    """Raised when the API answers 404."""

    exit_code = EXIT_NOT_FOUND
