"""One handler per authenticator kind.

:func:`prepare_auth` looks the authenticator's ``kind`` up in a table that is
checked against :class:`~specdrive.models.SecuritySchemeKind` at import
time, so adding a kind without a handler fails loudly instead of at request
time.

Handlers only ever add to the :class:`~specdrive.auth.base.RequestContext`:

* **API key in header** -- sets one header; never fails.
* **API key in query** -- appends ``?name=value`` to the URL. The separator
  is always ``?`` even when the URL already carries a query string; callers
  rely on the URL ending in exactly one appended pair.
* **Refresh token** -- performs a blocking POST to the token endpoint on
  every call (no caching) and installs the returned ``Authorization`` value.
"""

from __future__ import annotations

from typing import Callable

import httpx

from specdrive.auth.base import (
    AUTHORIZATION_HEADER,
    APIKeyHeaderAuthenticator,
    APIKeyQueryAuthenticator,
    Authenticator,
    RefreshTokenAuthenticator,
    RequestContext,
)
from specdrive.exceptions import TransportError, UpstreamAuthError
from specdrive.models import SecuritySchemeKind
from specdrive.output import debug

_ACCEPTED_REFRESH_STATUS = (200, 204)


def _prepare_api_key_header(
    authenticator: APIKeyHeaderAuthenticator,
    ctx: RequestContext,
    http_client: httpx.Client,
) -> None:
    ctx.headers[authenticator.key_name] = authenticator.key_value.get_secret_value()


def _prepare_api_key_query(
    authenticator: APIKeyQueryAuthenticator,
    ctx: RequestContext,
    http_client: httpx.Client,
) -> None:
    secret = authenticator.key_value.get_secret_value()
    ctx.url = f"{ctx.url}?{authenticator.key_name}={secret}"


def _prepare_refresh_token(
    authenticator: RefreshTokenAuthenticator,
    ctx: RequestContext,
    http_client: httpx.Client,
) -> None:
    """Exchange the refresh token and install the access token.

    Raises:
        UpstreamAuthError: If the token endpoint answers anything other than
            200/204, or omits the ``Authorization`` header.
        TransportError: If the POST itself fails.
    """
    url = authenticator.refresh_token_url
    debug(
        f"Exchanging refresh token for scheme '{authenticator.scheme_name}' at {url}"
    )
    try:
        response = http_client.post(
            url,
            headers={authenticator.header_name: authenticator.refresh_token.get_secret_value()},
        )
    except httpx.HTTPError as exc:
        raise TransportError(
            f"refresh token POST to '{url}' failed: {exc}", method="POST", url=url
        ) from exc

    if response.status_code not in _ACCEPTED_REFRESH_STATUS:
        raise UpstreamAuthError(
            f"refresh token POST response '{url}' status code '{response.status_code}' "
            f"not matching expected response status code {list(_ACCEPTED_REFRESH_STATUS)}",
            token_url=url,
            status_code=response.status_code,
        )

    access_token = response.headers.get(AUTHORIZATION_HEADER)
    if not access_token:
        raise UpstreamAuthError(
            f"refresh token POST response '{url}' is missing the access token "
            f"('{AUTHORIZATION_HEADER}' header)",
            token_url=url,
            status_code=response.status_code,
        )
    ctx.headers[AUTHORIZATION_HEADER] = access_token


_Handler = Callable[..., None]

_HANDLERS: dict[SecuritySchemeKind, _Handler] = {
    SecuritySchemeKind.API_KEY_HEADER: _prepare_api_key_header,
    SecuritySchemeKind.API_KEY_QUERY: _prepare_api_key_query,
    SecuritySchemeKind.REFRESH_TOKEN: _prepare_refresh_token,
}

_missing = set(SecuritySchemeKind) - set(_HANDLERS)
if _missing:  # pragma: no cover
    raise RuntimeError(f"no auth handler for kind(s): {sorted(k.value for k in _missing)}")


def prepare_auth(
    authenticator: Authenticator,
    ctx: RequestContext,
    http_client: httpx.Client,
) -> None:
    """Apply *authenticator* to *ctx*.

    Args:
        authenticator: Any variant of :data:`~specdrive.auth.base.Authenticator`.
        ctx: The request context to mutate.
        http_client: Transport used by kinds that need a sub-request.
    """
    _HANDLERS[authenticator.kind](authenticator, ctx, http_client)
