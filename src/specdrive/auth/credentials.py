"""Build the credential definitions for one provider client.

:func:`build_credentials` pairs each security scheme declared by the API
description with the secret the operator configured for it, producing the
:data:`~specdrive.auth.base.CredentialDefinition` consumed by
:class:`~specdrive.auth.resolver.AuthResolver`.

Schemes the operator did not configure are simply absent from the result;
the resolver reports them only if an operation actually requires them.
"""

from __future__ import annotations

from specdrive.auth.base import (
    APIKeyHeaderAuthenticator,
    APIKeyQueryAuthenticator,
    Authenticator,
    CredentialDefinition,
    RefreshTokenAuthenticator,
)
from specdrive.config import resolve_credential
from specdrive.exceptions import ConfigurationError
from specdrive.models import ProviderConfig, SecurityScheme, SecuritySchemeKind
from specdrive.output import debug


def create_authenticator(scheme: SecurityScheme, secret: str) -> Authenticator:
    """Instantiate the authenticator variant matching ``scheme.kind``."""
    if scheme.kind == SecuritySchemeKind.API_KEY_HEADER:
        return APIKeyHeaderAuthenticator(
            scheme_name=scheme.name, key_name=scheme.param_name, key_value=secret
        )
    if scheme.kind == SecuritySchemeKind.API_KEY_QUERY:
        return APIKeyQueryAuthenticator(
            scheme_name=scheme.name, key_name=scheme.param_name, key_value=secret
        )
    if scheme.kind == SecuritySchemeKind.REFRESH_TOKEN:
        assert scheme.refresh_token_url is not None  # checked by SecurityScheme
        return RefreshTokenAuthenticator(
            scheme_name=scheme.name,
            header_name=scheme.param_name,
            refresh_token=secret,
            refresh_token_url=scheme.refresh_token_url,
        )
    raise ConfigurationError(f"unsupported security scheme kind '{scheme.kind}'")


def build_credentials(
    registry: dict[str, SecurityScheme],
    config: ProviderConfig,
) -> CredentialDefinition:
    """Resolve the operator's secrets into one authenticator per scheme.

    Args:
        registry: Security schemes declared by the API description, by name.
        config: The operator configuration; ``config.security`` maps scheme
            names to credential sources.

    Returns:
        A new dict mapping scheme name to authenticator.

    Raises:
        ConfigurationError: If the operator configured a scheme the
            description does not declare, or a credential source cannot be
            resolved.
    """
    unknown = sorted(set(config.security) - set(registry))
    if unknown:
        declared = ", ".join(sorted(registry)) or "(none)"
        raise ConfigurationError(
            f"security scheme(s) {', '.join(repr(n) for n in unknown)} configured but not "
            f"declared in the API description. Declared schemes: {declared}"
        )

    credentials: CredentialDefinition = {}
    for name, scheme in registry.items():
        source = config.security.get(name)
        if source is None:
            debug(f"No credential configured for security scheme '{name}'")
            continue
        credentials[name] = create_authenticator(scheme, resolve_credential(source))
    return credentials
