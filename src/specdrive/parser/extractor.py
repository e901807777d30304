"""Extract backend, security and resource metadata from a Swagger 2.0 description.

This module walks a ``$ref``-resolved Swagger document and builds an
:class:`~specdrive.models.ApiDescription`. The single public entry point is
:func:`extract_description`; private helpers each handle one section:

* ``_extract_backend`` -- ``host``, ``basePath``, ``schemes`` and the
  multi-region extensions ``x-terraform-provider-multiregion-fqdn`` (a host
  template containing ``${region}``) and ``x-terraform-provider-regions``
  (comma-separated; the first region is the default).
* ``_extract_security_schemes`` -- ``securityDefinitions`` of type
  ``apiKey``. Header keys carrying ``x-terraform-refresh-token-url`` are
  refresh-token schemes.
* ``_extract_resources`` -- a resource is a collection path with a ``post``
  plus an instance path ``<collection>/{id}`` with a ``get``.

Security requirement lists may hold several OR-groups; the first group is
selected and its scheme names are kept in declaration order.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import ValidationError

from specdrive.exceptions import SpecParseError
from specdrive.models import (
    ApiDescription,
    BackendConfiguration,
    HeaderParameter,
    ResourceDescriptor,
    ResourceOperation,
    ResourceOperations,
    SecurityScheme,
    SecuritySchemeKind,
)
from specdrive.output import debug, warning
from specdrive.parser.resolver import resolve_refs

EXT_MULTIREGION_FQDN = "x-terraform-provider-multiregion-fqdn"
EXT_REGIONS = "x-terraform-provider-regions"
EXT_REFRESH_TOKEN_URL = "x-terraform-refresh-token-url"
EXT_RESOURCE_NAME = "x-terraform-resource-name"
EXT_RESOURCE_HOST = "x-terraform-resource-host"
EXT_EXCLUDE_RESOURCE = "x-terraform-exclude-resource"
EXT_HEADER = "x-terraform-header"

REGION_PLACEHOLDER = "${region}"

_VERSION_SEGMENT_RE = re.compile(r"^v\d+$")
_PARAM_SEGMENT_RE = re.compile(r"^\{[^}/]+\}$")


def extract_description(raw: dict[str, Any]) -> ApiDescription:
    """Build an :class:`~specdrive.models.ApiDescription` from a raw Swagger dict.

    Args:
        raw: The description as returned by
            :func:`~specdrive.parser.loader.load_description`.

    Raises:
        SpecParseError: If the backend or security definitions are invalid,
            or two resources end up with the same name.

    Example::

        raw = load_description("swagger.yaml")
        validate_description_version(raw)
        description = extract_description(raw)
        for name, resource in description.resources.items():
            print(name, resource.path)
    """
    spec = resolve_refs(raw)
    info = spec.get("info") or {}
    security_schemes = _extract_security_schemes(spec)
    global_security = _first_security_group(spec.get("security"))
    resources = _extract_resources(spec)

    for scheme_name in _referenced_schemes(global_security, resources):
        if scheme_name not in security_schemes:
            warning(
                f"security scheme '{scheme_name}' is referenced but not declared "
                "under securityDefinitions; calls requiring it will fail"
            )

    try:
        return ApiDescription(
            title=str(info.get("title", "Untitled API")),
            version=str(info.get("version", "0.0.0")),
            backend=_extract_backend(spec),
            security_schemes=security_schemes,
            global_security=global_security,
            resources=resources,
        )
    except ValidationError as exc:
        raise SpecParseError(f"Invalid API description: {exc}") from exc


# --- Backend ---


def _extract_backend(spec: dict[str, Any]) -> BackendConfiguration:
    host = str(spec.get("host") or "")
    base_path = str(spec.get("basePath") or "")
    schemes = tuple(str(s) for s in spec.get("schemes") or ())

    fqdn = spec.get(EXT_MULTIREGION_FQDN)
    if not fqdn:
        return BackendConfiguration(host=host, base_path=base_path, schemes=schemes)

    if REGION_PLACEHOLDER not in fqdn:
        raise SpecParseError(
            f"'{EXT_MULTIREGION_FQDN}' value '{fqdn}' must contain the "
            f"'{REGION_PLACEHOLDER}' placeholder"
        )
    regions = _parse_regions(spec.get(EXT_REGIONS))
    if not regions:
        raise SpecParseError(
            f"'{EXT_MULTIREGION_FQDN}' is set but '{EXT_REGIONS}' declares no regions"
        )

    try:
        return BackendConfiguration(
            host=host,
            base_path=base_path,
            schemes=schemes,
            is_multi_region=True,
            regions={region: fqdn.replace(REGION_PLACEHOLDER, region) for region in regions},
            default_region=regions[0],
        )
    except ValidationError as exc:
        raise SpecParseError(f"Invalid multi-region configuration: {exc}") from exc


def _parse_regions(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = [str(v) for v in value]
    return [item.strip() for item in items if item.strip()]


# --- Security ---


def _extract_security_schemes(spec: dict[str, Any]) -> dict[str, SecurityScheme]:
    """Collect the ``apiKey`` security definitions; other types are skipped."""
    schemes: dict[str, SecurityScheme] = {}
    for name, definition in (spec.get("securityDefinitions") or {}).items():
        if not isinstance(definition, dict) or definition.get("type") != "apiKey":
            debug(f"Skipping unsupported security definition '{name}'")
            continue

        location = definition.get("in")
        param_name = definition.get("name")
        if not param_name:
            raise SpecParseError(f"security definition '{name}' is missing 'name'")

        refresh_url = definition.get(EXT_REFRESH_TOKEN_URL)
        if location == "header":
            kind = (
                SecuritySchemeKind.REFRESH_TOKEN
                if refresh_url
                else SecuritySchemeKind.API_KEY_HEADER
            )
        elif location == "query":
            kind = SecuritySchemeKind.API_KEY_QUERY
            refresh_url = None
        else:
            debug(f"Skipping security definition '{name}' with unsupported location '{location}'")
            continue

        schemes[name] = SecurityScheme(
            name=name, kind=kind, param_name=param_name, refresh_token_url=refresh_url
        )
    return schemes


def _first_security_group(security: Any) -> tuple[str, ...]:
    """Return the scheme names of the first OR-group, in declaration order."""
    if not security or not isinstance(security, list):
        return ()
    first = security[0]
    if not isinstance(first, dict):
        return ()
    return tuple(first.keys())


def _referenced_schemes(
    global_security: tuple[str, ...],
    resources: dict[str, ResourceDescriptor],
) -> list[str]:
    names: list[str] = list(global_security)
    for resource in resources.values():
        for operation in (
            resource.operations.post,
            resource.operations.get,
            resource.operations.put,
            resource.operations.delete,
        ):
            if operation is not None:
                names.extend(operation.security)
    return list(dict.fromkeys(names))


# --- Resources ---


def _extract_resources(spec: dict[str, Any]) -> dict[str, ResourceDescriptor]:
    paths: dict[str, Any] = spec.get("paths") or {}
    resources: dict[str, ResourceDescriptor] = {}

    for path, item in paths.items():
        if not isinstance(item, dict) or "post" not in item:
            continue
        post = item["post"] or {}
        if post.get(EXT_EXCLUDE_RESOURCE) is True:
            debug(f"Resource at '{path}' excluded by {EXT_EXCLUDE_RESOURCE}")
            continue

        instance_item = _find_instance_item(path, paths)
        if instance_item is None or "get" not in instance_item:
            debug(f"Path '{path}' has POST but no '{path}/{{id}}' GET; not a resource")
            continue

        name = resource_name(path, post.get(EXT_RESOURCE_NAME))
        if name in resources:
            raise SpecParseError(
                f"resource name '{name}' is produced by both '{resources[name].path}' "
                f"and '{path}'"
            )

        path_params = item.get("parameters") or []
        instance_params = instance_item.get("parameters") or []
        resources[name] = ResourceDescriptor(
            name=name,
            path=path,
            host_override=post.get(EXT_RESOURCE_HOST) or item.get(EXT_RESOURCE_HOST),
            operations=ResourceOperations(
                post=_extract_operation(post, path_params),
                get=_extract_operation(instance_item.get("get"), instance_params),
                put=_extract_operation(instance_item.get("put"), instance_params),
                delete=_extract_operation(instance_item.get("delete"), instance_params),
            ),
        )
    return resources


def _find_instance_item(collection: str, paths: dict[str, Any]) -> Optional[dict[str, Any]]:
    pattern = re.compile(re.escape(collection.rstrip("/")) + r"/\{[^}/]+\}/?")
    for candidate, item in paths.items():
        if pattern.fullmatch(candidate) and isinstance(item, dict):
            return item
    return None


def _extract_operation(
    operation: Optional[dict[str, Any]],
    path_params: list[dict[str, Any]],
) -> Optional[ResourceOperation]:
    if operation is None:
        return None
    return ResourceOperation(
        security=_first_security_group(operation.get("security")),
        headers=_extract_header_parameters(path_params, operation.get("parameters") or []),
    )


def _extract_header_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> tuple[HeaderParameter, ...]:
    """Header parameters, path-level first; operation-level wins on the same name."""
    merged: dict[str, HeaderParameter] = {}
    for param in [*path_params, *op_params]:
        if not isinstance(param, dict) or param.get("in") != "header" or not param.get("name"):
            continue
        merged[param["name"]] = HeaderParameter(
            name=param["name"], config_name=param.get(EXT_HEADER)
        )
    return tuple(merged.values())


def resource_name(path: str, preferred: Optional[str] = None) -> str:
    """Derive a resource name from its collection path.

    Each non-parameter segment contributes its name, suffixed with the
    version segment that precedes it::

        /v1/cdns                   -> cdns_v1
        /v1/cdns/{id}/v1/firewalls -> cdns_v1_firewalls_v1
        /users                     -> users

    *preferred* (``x-terraform-resource-name``) replaces the base name of
    the last segment: ``/v1/cdns`` with ``cdn`` gives ``cdn_v1``.
    """
    parts: list[list[str]] = []
    pending_version: Optional[str] = None
    for segment in (s for s in path.split("/") if s):
        if _PARAM_SEGMENT_RE.match(segment):
            continue
        if _VERSION_SEGMENT_RE.match(segment):
            pending_version = segment
            continue
        parts.append([segment] if pending_version is None else [segment, pending_version])
        pending_version = None

    if not parts:
        raise SpecParseError(f"cannot derive a resource name from path '{path}'")
    if pending_version is not None and len(parts[-1]) == 1:
        parts[-1].append(pending_version)
    if preferred:
        parts[-1][0] = preferred
    return "_".join("_".join(part) for part in parts)
