"""Canonical Pydantic models shared across all specdrive modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Description models** -- produced by the description extractor and treated
as read-only afterwards:
    :class:`SecuritySchemeKind`, :class:`SecurityScheme`,
    :class:`HeaderParameter`, :class:`ResourceOperation`,
    :class:`ResourceOperations`, :class:`ResourceDescriptor`,
    :class:`BackendConfiguration`, and :class:`ApiDescription`.

**Operator configuration models** -- loaded once from the operator's YAML or
JSON file by :func:`~specdrive.config.load_provider_config`:
    :class:`RequestConfig` and :class:`ProviderConfig`.

Every model is frozen: once a client is built its inputs cannot change, so
resolution stays deterministic and safe to share between threads.
"""

from __future__ import annotations

import enum
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from specdrive.exceptions import ConfigurationError

_PATH_PARAM_RE = re.compile(r"\{([^}/]+)\}")


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised in a Swagger path-item object.

    The dispatcher only sends POST, GET, PUT and DELETE; the remaining members
    exist so that descriptions mentioning them can still be represented.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"


# --- Security ---


class SecuritySchemeKind(str, enum.Enum):
    """The closed set of authentication mechanisms a description can declare."""

    API_KEY_HEADER = "apikey_header"
    API_KEY_QUERY = "apikey_query"
    REFRESH_TOKEN = "refresh_token"


class SecurityScheme(BaseModel):
    """A named security definition from the description's ``securityDefinitions``.

    ``param_name`` is the header or query key the credential travels in. For
    :attr:`SecuritySchemeKind.REFRESH_TOKEN` it is the header that carries
    the refresh token to ``refresh_token_url``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    kind: SecuritySchemeKind
    param_name: str
    refresh_token_url: Optional[str] = None

    @model_validator(mode="after")
    def _check_refresh_url(self) -> SecurityScheme:
        if self.kind == SecuritySchemeKind.REFRESH_TOKEN and not self.refresh_token_url:
            raise ValueError(
                f"security scheme '{self.name}' is a refresh token scheme "
                "but declares no refresh token URL"
            )
        return self


# --- Resources ---


class HeaderParameter(BaseModel):
    """A header an operation requires, valued from the operator configuration.

    ``config_name`` is the preferred configuration key declared in the
    description (``x-terraform-header``); when absent the header name itself
    is the lookup key.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    config_name: Optional[str] = None

    @property
    def lookup_name(self) -> str:
        return self.config_name or self.name


class ResourceOperation(BaseModel):
    """Per-verb metadata: security scheme names and required headers."""

    model_config = ConfigDict(frozen=True)

    security: tuple[str, ...] = Field(
        default=(), description="First OR-group of the operation's security"
    )
    headers: tuple[HeaderParameter, ...] = ()


class ResourceOperations(BaseModel):
    model_config = ConfigDict(frozen=True)

    post: Optional[ResourceOperation] = None
    get: Optional[ResourceOperation] = None
    put: Optional[ResourceOperation] = None
    delete: Optional[ResourceOperation] = None

    def for_method(self, method: HTTPMethod) -> Optional[ResourceOperation]:
        """Return the operation metadata for *method*, or ``None``."""
        return getattr(self, method.value, None)


class ResourceDescriptor(BaseModel):
    """Abstract metadata for one addressable entity type.

    ``path`` is the collection path template, e.g.
    ``/v1/cdns/{cdn_id}/v1/firewalls``. Placeholders are filled with parent
    ids in template order; the instance id is appended after the collection
    path.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    host_override: Optional[str] = None
    operations: ResourceOperations = Field(default_factory=ResourceOperations)

    @property
    def path_parameters(self) -> list[str]:
        return _PATH_PARAM_RE.findall(self.path)

    @property
    def is_subresource(self) -> bool:
        return bool(self.path_parameters)

    def render_path(self, ids: list[str] | tuple[str, ...]) -> str:
        """Substitute *ids* into the path template placeholders, in order.

        Raises:
            ConfigurationError: If fewer ids are given than the template has
                placeholders.
        """
        params = self.path_parameters
        if len(ids) < len(params):
            raise ConfigurationError(
                f"resource '{self.name}' path '{self.path}' requires "
                f"{len(params)} parent id(s) ({', '.join(params)}) but "
                f"{len(ids)} were provided"
            )
        values = iter(ids)
        return _PATH_PARAM_RE.sub(lambda _match: str(next(values)), self.path)


# --- Backend ---


class BackendConfiguration(BaseModel):
    """How to reach the target API: host(s), base path and URL schemes.

    When ``is_multi_region`` is set, ``regions`` maps every region the
    description declares to its concrete host and ``default_region`` must be
    one of them. Both are checked here so that a resolved region can always
    be mapped at call time.
    """

    model_config = ConfigDict(frozen=True)

    host: str = ""
    base_path: str = ""
    schemes: tuple[str, ...] = ()
    is_multi_region: bool = False
    regions: dict[str, str] = Field(default_factory=dict)
    default_region: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _default_to_first_region(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("regions") and not data.get("default_region"):
            data = {**data, "default_region": next(iter(data["regions"]))}
        return data

    @model_validator(mode="after")
    def _check_regions(self) -> BackendConfiguration:
        if not self.is_multi_region:
            return self
        if not self.regions:
            raise ValueError("multi-region backend declares no regions")
        if self.default_region not in self.regions:
            raise ValueError(
                f"default region '{self.default_region}' is not one of the "
                f"declared regions {sorted(self.regions)}"
            )
        return self

    def host_for_region(self, region: str) -> str:
        """Map *region* to its host.

        Raises:
            ConfigurationError: If the region was not declared.
        """
        host = self.regions.get(region)
        if host is None:
            available = ", ".join(self.regions) or "(none)"
            raise ConfigurationError(
                f"region '{region}' is not supported by the backend. "
                f"Available regions: {available}"
            )
        return host


class ApiDescription(BaseModel):
    """Everything the resolvers need from one API description."""

    model_config = ConfigDict(frozen=True)

    title: str = "Untitled API"
    version: str = "0.0.0"
    backend: BackendConfiguration = Field(default_factory=BackendConfiguration)
    security_schemes: dict[str, SecurityScheme] = Field(default_factory=dict)
    global_security: tuple[str, ...] = ()
    resources: dict[str, ResourceDescriptor] = Field(default_factory=dict)

    def get_resource(self, name: str) -> ResourceDescriptor:
        """Look up a resource by name.

        Raises:
            ConfigurationError: If no resource has that name.
        """
        resource = self.resources.get(name)
        if resource is None:
            available = ", ".join(sorted(self.resources)) or "(none)"
            raise ConfigurationError(
                f"resource '{name}' is not defined in the API description. "
                f"Available resources: {available}"
            )
        return resource


# --- Operator configuration ---


class RequestConfig(BaseModel):
    """HTTP transport settings applied to every call."""

    model_config = ConfigDict(frozen=True)

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class ProviderConfig(BaseModel):
    """Operator-supplied configuration, loaded once and never mutated.

    Example (YAML)::

        description: https://api.example.com/swagger.yaml
        region: dub1
        security:
          apikey_auth: env:API_KEY
          refresh_auth: file:~/.example/refresh-token
        headers:
          x_request_id: ci-run-42
        endpoints:
          cdns_v1: cdn.internal.example.com
        request:
          timeout: 10
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    description: Optional[str] = Field(
        default=None, description="URL or file path of the API description"
    )
    region: Optional[str] = None
    security: dict[str, str] = Field(
        default_factory=dict,
        description="Security scheme name -> credential source (env:VAR, file:/path, literal)",
    )
    headers: dict[str, str] = Field(
        default_factory=dict, description="Header (or preferred config) name -> value"
    )
    endpoints: dict[str, str] = Field(
        default_factory=dict, description="Resource name -> host override"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)

    def get_region(self) -> str:
        return self.region or ""

    def get_endpoint(self, resource_name: str) -> str:
        return self.endpoints.get(resource_name, "")

    def get_header_value(self, header: HeaderParameter) -> str:
        """Return the configured value for *header*, or ``""`` when unset."""
        if header.lookup_name in self.headers:
            return self.headers[header.lookup_name]
        return self.headers.get(header.name, "")
