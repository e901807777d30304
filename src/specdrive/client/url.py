"""Resolve the absolute URL of a resource operation.

:class:`URLResolver` combines the backend configuration, the resource
descriptor and the operator configuration, in this order:

1. host -- region-mapped host for multi-region backends (operator region,
   else the description's default region), otherwise the single host;
2. relative path -- parent ids substituted into the path template;
3. the resource's host override;
4. the operator's endpoint override for the resource (wins over 3);
5. host and path must both be non-empty;
6. scheme -- ``https`` when the backend lists it, else ``http``;
7. base path joined when it is set and not ``/``.

Instance-level URLs append ``/<last id>`` to the collection URL built from
the preceding (parent) ids.

Every failure is a :class:`~specdrive.exceptions.ConfigurationError`; the
resolver performs no I/O.
"""

from __future__ import annotations

from typing import Sequence

from specdrive.exceptions import ConfigurationError
from specdrive.models import BackendConfiguration, ProviderConfig, ResourceDescriptor
from specdrive.output import info


class URLResolver:
    """Compute collection and instance URLs for resources of one backend.

    Args:
        backend: The description's backend configuration.
        config: The operator configuration (region and endpoint overrides).
    """

    def __init__(self, backend: BackendConfiguration, config: ProviderConfig) -> None:
        self._backend = backend
        self._config = config

    def resolve_host(self) -> str:
        """Return the backend host, honouring region selection."""
        if not self._backend.is_multi_region:
            return self._backend.host
        region = self._config.get_region()
        if not region:
            region = self._backend.default_region or ""
        return self._backend.host_for_region(region)

    def resolve_scheme(self) -> str:
        return "https" if "https" in self._backend.schemes else "http"

    def resource_url(self, resource: ResourceDescriptor, ids: Sequence[str] = ()) -> str:
        """Return the collection URL of *resource*.

        Args:
            resource: The resource descriptor.
            ids: Parent ids for the path template placeholders, in template
                order. Extra trailing ids are ignored.

        Raises:
            ConfigurationError: On an unmappable region, too few ids, or an
                empty host or path.
        """
        host = self.resolve_host()
        path = resource.render_path(list(ids))

        if resource.host_override:
            info(
                f"resource '{resource.name}' is configured with host override, API calls "
                f"will be made against '{resource.host_override}' instead of '{host}'"
            )
            host = resource.host_override

        endpoint = self._config.get_endpoint(resource.name)
        if endpoint:
            info(
                f"resource '{resource.name}' is configured with endpoint override, API calls "
                f"will be made against '{endpoint}' instead of '{host}'"
            )
            host = endpoint

        if not host or not path:
            raise ConfigurationError(
                "host and path are mandatory attributes to get the resource URL - "
                f"host['{host}'], path['{path}'] (resource '{resource.name}')"
            )

        scheme = self.resolve_scheme()
        if not path.startswith("/"):
            path = f"/{path}"

        base_path = self._backend.base_path
        if base_path and base_path != "/":
            if not base_path.startswith("/"):
                base_path = f"/{base_path}"
            return f"{scheme}://{host}{base_path}{path}"
        return f"{scheme}://{host}{path}"

    def resource_instance_url(self, resource: ResourceDescriptor, ids: Sequence[str]) -> str:
        """Return the URL of one instance: collection URL plus the last id.

        Args:
            resource: The resource descriptor.
            ids: Parent ids followed by the instance id.

        Raises:
            ConfigurationError: If *ids* is empty, or on any
                :meth:`resource_url` failure.
        """
        if not ids:
            raise ConfigurationError(
                f"resource '{resource.name}' instance URL cannot be resolved without "
                "the instance id"
            )
        *parent_ids, instance_id = ids
        url = self.resource_url(resource, parent_ids)
        if url.endswith("/"):
            return f"{url}{instance_id}"
        return f"{url}/{instance_id}"
