"""Request context and authenticator variants.

This module defines the two foundational types of the auth subsystem:

- :class:`RequestContext` -- the mutable, single-use accumulator of headers
  and URL that authenticators write into. A fresh instance is created for
  every HTTP call and never shared, so auth state cannot leak between calls.
- :data:`Authenticator` -- a closed tagged union of the three authenticator
  variants, discriminated by ``kind``. Each variant is a frozen pydantic
  model holding the resolved secret for one security scheme; the behaviour
  lives in :mod:`specdrive.auth.handlers`, one handler per kind.

Secrets are held as :class:`pydantic.SecretStr` so that ``repr()`` and
``model_dump()`` never expose them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from specdrive.models import SecuritySchemeKind

AUTHORIZATION_HEADER = "Authorization"


@dataclass
class RequestContext:
    """Mutable context threaded through the authenticators of one call.

    Attributes:
        url: The target URL; query-key authenticators rewrite it.
        headers: Request headers accumulated so far.
    """

    url: str
    headers: dict[str, str] = field(default_factory=dict)


class _AuthenticatorBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    scheme_name: str = Field(description="Security scheme this authenticator serves")


class APIKeyHeaderAuthenticator(_AuthenticatorBase):
    """Sends the key as ``key_name: key_value`` header."""

    kind: Literal[SecuritySchemeKind.API_KEY_HEADER] = SecuritySchemeKind.API_KEY_HEADER
    key_name: str
    key_value: SecretStr


class APIKeyQueryAuthenticator(_AuthenticatorBase):
    """Appends ``?key_name=key_value`` to the URL."""

    kind: Literal[SecuritySchemeKind.API_KEY_QUERY] = SecuritySchemeKind.API_KEY_QUERY
    key_name: str
    key_value: SecretStr


class RefreshTokenAuthenticator(_AuthenticatorBase):
    """Exchanges a refresh token for an access token on every call.

    The refresh token is POSTed in the ``header_name`` header to
    ``refresh_token_url``; the access token is read back from the
    response's ``Authorization`` header.
    """

    kind: Literal[SecuritySchemeKind.REFRESH_TOKEN] = SecuritySchemeKind.REFRESH_TOKEN
    header_name: str
    refresh_token: SecretStr
    refresh_token_url: str


Authenticator = Annotated[
    Union[APIKeyHeaderAuthenticator, APIKeyQueryAuthenticator, RefreshTokenAuthenticator],
    Field(discriminator="kind"),
]

CredentialDefinition = dict[str, Authenticator]
"""Scheme name -> authenticator carrying that scheme's resolved secret."""
