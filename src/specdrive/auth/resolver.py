"""Select, validate and apply the security schemes of one call.

:class:`AuthResolver` owns the global security list of an API description
and decides, per call, which list applies:

1. a non-empty operation-level list, used as-is (never merged with, and
   never falling back to, the global list);
2. otherwise the global list;
3. otherwise no authentication.

Every selected scheme must be present in the credential definitions before
any authenticator runs, so a mis-configured call fails without touching the
network.
"""

from __future__ import annotations

from typing import Sequence

import httpx

from specdrive.auth.base import CredentialDefinition, RequestContext
from specdrive.auth.handlers import prepare_auth
from specdrive.exceptions import ConfigurationError
from specdrive.output import debug


class AuthResolver:
    """Resolve the authenticated request context for a target URL.

    Args:
        global_security: The description's global scheme names, in
            declaration order.

    Example::

        resolver = AuthResolver(description.global_security)
        ctx = resolver.resolve(url, operation.security, credentials, client)
    """

    def __init__(self, global_security: Sequence[str] = ()) -> None:
        self._global_security = tuple(global_security)

    @property
    def global_security(self) -> tuple[str, ...]:
        return self._global_security

    def select_schemes(self, operation_security: Sequence[str]) -> tuple[str, ...]:
        """Return the scheme names that apply; empty means no auth."""
        if operation_security:
            debug(
                "Operation security schemes found, overriding global security: "
                f"{list(operation_security)}"
            )
            return tuple(operation_security)
        if self._global_security:
            debug(f"Falling back to global security schemes: {list(self._global_security)}")
            return self._global_security
        return ()

    def resolve(
        self,
        target_url: str,
        operation_security: Sequence[str],
        credentials: CredentialDefinition,
        http_client: httpx.Client,
    ) -> RequestContext:
        """Build a fresh :class:`RequestContext` for *target_url*.

        Args:
            target_url: The resolved resource URL.
            operation_security: The operation's own scheme names (may be empty).
            credentials: Scheme name -> authenticator.
            http_client: Transport for authenticators that need a sub-request.

        Returns:
            A new context with auth headers added and the URL possibly
            rewritten.

        Raises:
            ConfigurationError: If a selected scheme has no credential.
            UpstreamAuthError: If a token exchange is rejected.
            TransportError: If a token exchange cannot be sent.
        """
        ctx = RequestContext(url=target_url)
        schemes = self.select_schemes(operation_security)
        if not schemes:
            return ctx

        for name in schemes:
            if name not in credentials:
                raise ConfigurationError(
                    f"operation's security policy '{name}' is not defined, please make "
                    f"sure the operator configuration provides a credential for the "
                    f"security definition named '{name}' (url: {target_url})"
                )

        for name in schemes:
            prepare_auth(credentials[name], ctx, http_client)
        return ctx
