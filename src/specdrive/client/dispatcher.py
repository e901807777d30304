"""Synchronous request dispatcher for description-driven resources.

This module provides :class:`ProviderClient`, which turns an abstract
resource operation into one HTTP call:

1. resolve the URL with :class:`~specdrive.client.url.URLResolver`;
2. resolve a fresh auth context with
   :class:`~specdrive.auth.resolver.AuthResolver`;
3. merge the operation's header parameters, valued from the operator
   configuration;
4. add the ``User-Agent`` header;
5. send the request over :class:`httpx.Client` and return the raw response
   together with the decoded payload.

Header values are never logged; only header names and whether they carried a
value. Transport failures surface as
:class:`~specdrive.exceptions.TransportError` and are not retried.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import httpx

from specdrive import __version__
from specdrive.auth.base import CredentialDefinition
from specdrive.auth.credentials import build_credentials
from specdrive.auth.resolver import AuthResolver
from specdrive.client.response import extract_response_data
from specdrive.client.url import URLResolver
from specdrive.exceptions import ConfigurationError, TransportError, UnsupportedMethodError
from specdrive.models import (
    ApiDescription,
    HTTPMethod,
    ProviderConfig,
    ResourceDescriptor,
    ResourceOperation,
)
from specdrive.output import debug

USER_AGENT_HEADER = "User-Agent"

_SUPPORTED_METHODS = (HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.GET, HTTPMethod.DELETE)


def build_user_agent() -> str:
    """Return ``specdrive/<version> (<os>/<arch>)``."""
    system = platform.system().lower() or "unknown"
    machine = platform.machine().lower() or "unknown"
    return f"specdrive/{__version__} ({system}/{machine})"


_USER_AGENT = build_user_agent()


@dataclass
class ApiResponse:
    """The raw response plus its decoded payload (``None`` for DELETE)."""

    response: httpx.Response
    payload: Any = None

    @property
    def status_code(self) -> int:
        return self.response.status_code


class ProviderClient:
    """Create, read, update and delete resources described by an API description.

    The description, the operator configuration and the credential
    definitions are fixed at construction and only read afterwards, so one
    client may serve concurrent calls. Each call builds its own request
    context.

    Use as a context manager so the underlying :class:`httpx.Client` is
    closed, or pass an externally managed ``http_client``.

    Args:
        description: The parsed API description.
        config: The operator configuration.
        credentials: Pre-built credential definitions. When ``None`` they are
            built from ``config`` with
            :func:`~specdrive.auth.credentials.build_credentials`.
        http_client: Transport to use. When ``None`` one is created from
            ``config.request``.

    Example::

        with ProviderClient(description, config) as client:
            cdn = description.get_resource("cdns_v1")
            created = client.post(cdn, {"label": "web"})
            fetched = client.get(cdn, created.payload["id"])
    """

    def __init__(
        self,
        description: ApiDescription,
        config: ProviderConfig,
        credentials: Optional[CredentialDefinition] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self._description = description
        self._config = config
        if credentials is None:
            credentials = build_credentials(description.security_schemes, config)
        self._credentials = credentials
        self._url_resolver = URLResolver(description.backend, config)
        self._auth_resolver = AuthResolver(description.global_security)
        self._owns_client = http_client is None
        if http_client is None:
            http_client = httpx.Client(
                timeout=config.request.timeout,
                verify=config.request.verify_ssl,
            )
        self._client = http_client

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> ProviderClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_client:
            self._client.close()

    # ------------------------------------------------------------------ #
    # Public operations
    # ------------------------------------------------------------------ #

    def post(
        self,
        resource: ResourceDescriptor,
        payload: Any,
        parent_ids: Sequence[str] = (),
    ) -> ApiResponse:
        """Create a resource instance with a POST to the collection URL."""
        url = self._url_resolver.resource_url(resource, parent_ids)
        operation = self._operation(resource, HTTPMethod.POST)
        return self._perform_request(HTTPMethod.POST, url, operation, payload)

    def put(
        self,
        resource: ResourceDescriptor,
        instance_id: str,
        payload: Any,
        parent_ids: Sequence[str] = (),
    ) -> ApiResponse:
        """Update one instance with a PUT to its instance URL."""
        url = self._url_resolver.resource_instance_url(resource, [*parent_ids, instance_id])
        operation = self._operation(resource, HTTPMethod.PUT)
        return self._perform_request(HTTPMethod.PUT, url, operation, payload)

    def get(
        self,
        resource: ResourceDescriptor,
        instance_id: str,
        parent_ids: Sequence[str] = (),
    ) -> ApiResponse:
        """Fetch one instance with a GET to its instance URL."""
        url = self._url_resolver.resource_instance_url(resource, [*parent_ids, instance_id])
        operation = self._operation(resource, HTTPMethod.GET)
        return self._perform_request(HTTPMethod.GET, url, operation)

    def delete(
        self,
        resource: ResourceDescriptor,
        instance_id: str,
        parent_ids: Sequence[str] = (),
    ) -> ApiResponse:
        """Delete one instance with a DELETE to its instance URL."""
        url = self._url_resolver.resource_instance_url(resource, [*parent_ids, instance_id])
        operation = self._operation(resource, HTTPMethod.DELETE)
        return self._perform_request(HTTPMethod.DELETE, url, operation)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _operation(resource: ResourceDescriptor, method: HTTPMethod) -> ResourceOperation:
        operation = resource.operations.for_method(method)
        if operation is None:
            raise ConfigurationError(
                f"resource '{resource.name}' does not declare a "
                f"{method.value.upper()} operation"
            )
        return operation

    def _perform_request(
        self,
        method: HTTPMethod,
        url: str,
        operation: ResourceOperation,
        payload: Any = None,
    ) -> ApiResponse:
        """Authenticate, decorate and send one request.

        Raises:
            UnsupportedMethodError: If *method* is not POST, PUT, GET or DELETE.
            ConfigurationError: If a required security scheme has no credential.
            UpstreamAuthError: If a refresh-token exchange is rejected.
            TransportError: If the HTTP call fails.
        """
        if method not in _SUPPORTED_METHODS:
            raise UnsupportedMethodError(f"method '{method.value.upper()}' not supported")

        ctx = self._auth_resolver.resolve(url, operation.security, self._credentials, self._client)
        for header in operation.headers:
            ctx.headers[header.name] = self._config.get_header_value(header)
        ctx.headers[USER_AGENT_HEADER] = _USER_AGENT

        verb = method.value.upper()
        debug(f"Performing {verb} {url}")
        self._log_headers_safely(ctx.headers)

        kwargs: dict[str, Any] = {"headers": ctx.headers}
        if method in (HTTPMethod.POST, HTTPMethod.PUT) and payload is not None:
            kwargs["json"] = payload

        try:
            response = self._client.request(verb, ctx.url, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(f"{verb} {url} failed: {exc}", method=verb, url=url) from exc

        debug(f"{verb} {url} -> HTTP {response.status_code}")
        if method == HTTPMethod.DELETE:
            return ApiResponse(response=response)
        return ApiResponse(response=response, payload=extract_response_data(response))

    @staticmethod
    def _log_headers_safely(headers: dict[str, str]) -> None:
        """Log header names and whether they carried a value, never the value."""
        for name, value in headers.items():
            debug(f"Request header '{name}' sent (has value: {bool(value)})")
