"""specdrive -- drive HTTP API resources from a Swagger 2.0 description.

Instead of hand-written client code, specdrive reads an API description
(paths, operations, security definitions, headers) and an operator
configuration (credentials, region, endpoint overrides, header values) and
resolves every create/get/update/delete call into one authenticated HTTP
request.

Typical usage::

    from specdrive.client import ProviderClient
    from specdrive.config import load_provider_config
    from specdrive.parser import load_api_description

    config = load_provider_config()
    description = load_api_description(config.description)
    with ProviderClient(description, config) as client:
        resp = client.get(description.get_resource("cdns_v1"), "42")

Modules:
    app: Typer CLI entry point.
    models: Pydantic models shared across the package.
    config: Operator configuration loading and credential sources.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr diagnostics with Rich support.
"""

__version__ = "0.1.0"
