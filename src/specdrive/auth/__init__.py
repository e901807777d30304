"""Authentication for description-driven API calls.

The main entry points are:

- :class:`RequestContext` -- per-call accumulator of URL and headers.
- :data:`Authenticator` -- closed union of the API-key-in-header,
  API-key-in-query and refresh-token variants.
- :func:`build_credentials` -- pairs declared security schemes with the
  operator's secrets.
- :class:`AuthResolver` -- selects operation-level or global schemes and
  applies them in order.

Typical usage::

    from specdrive.auth import AuthResolver, build_credentials

    credentials = build_credentials(description.security_schemes, config)
    resolver = AuthResolver(description.global_security)
    ctx = resolver.resolve(url, operation.security, credentials, http_client)
"""

from specdrive.auth.base import (
    APIKeyHeaderAuthenticator,
    APIKeyQueryAuthenticator,
    Authenticator,
    CredentialDefinition,
    RefreshTokenAuthenticator,
    RequestContext,
)
from specdrive.auth.credentials import build_credentials, create_authenticator
from specdrive.auth.handlers import prepare_auth
from specdrive.auth.resolver import AuthResolver

__all__ = [
    "APIKeyHeaderAuthenticator",
    "APIKeyQueryAuthenticator",
    "Authenticator",
    "AuthResolver",
    "CredentialDefinition",
    "RefreshTokenAuthenticator",
    "RequestContext",
    "build_credentials",
    "create_authenticator",
    "prepare_auth",
]
