"""Typer application and CLI entry point for specdrive.

The root callback initialises the global
:class:`~specdrive.output.OutputManager` and records the configuration
options; every command then loads the operator configuration and the API
description lazily, so ``--help`` and ``--version`` work without either.

Commands:

* ``resources`` -- list the resources found in the description.
* ``create`` / ``get`` / ``update`` / ``delete`` -- one HTTP call per
  invocation through :class:`~specdrive.client.ProviderClient`.
* ``url`` -- print the resolved URL without sending anything.

:func:`main` is the console-script entry point declared in
``pyproject.toml``.
"""

from __future__ import annotations

import json
import signal
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterator, Optional

import typer

from specdrive import __version__
from specdrive.exceptions import ConfigurationError, SpecdriveError
from specdrive.exit_codes import EXIT_GENERIC_FAILURE

if TYPE_CHECKING:
    from specdrive.client import ProviderClient
    from specdrive.models import ApiDescription, ProviderConfig

app = typer.Typer(
    name="specdrive",
    help="Create, read, update and delete API resources described by a Swagger 2.0 document.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

_PARENT_ID_HELP = "Id of an enclosing resource, outermost first. Repeatable."
_BODY_HELP = "JSON request body, or @path to read it from a file."


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specdrive {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", help="Operator configuration file."
    ),
    description: Optional[str] = typer.Option(
        None, "--description", "-d", help="API description URL or file path."
    ),
    region: Optional[str] = typer.Option(
        None, "--region", "-r", help="Region for multi-region APIs."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command."""
    from specdrive.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["description"] = description
    ctx.obj["region"] = region


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Report a :class:`SpecdriveError` and exit with its code."""
    from specdrive.output import error

    try:
        yield
    except SpecdriveError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc


def _load(ctx: typer.Context) -> tuple[ProviderConfig, ApiDescription]:
    """Load the operator configuration and the API description it points to."""
    from specdrive.config import load_provider_config
    from specdrive.parser import load_api_description

    obj = ctx.obj or {}
    config = load_provider_config(
        obj.get("config_path"),
        region=obj.get("region"),
        description=obj.get("description"),
    )
    if not config.description:
        raise ConfigurationError(
            "No API description configured. Pass --description, set "
            "SPECDRIVE_DESCRIPTION, or add 'description' to the configuration file."
        )
    return config, load_api_description(config.description)


def _make_client(description: ApiDescription, config: ProviderConfig) -> ProviderClient:
    from specdrive.client import ProviderClient

    return ProviderClient(description, config)


def _parse_body(body: str) -> Any:
    """Parse *body* as JSON; a leading ``@`` names a file holding the JSON."""
    text = body
    if body.startswith("@"):
        try:
            text = Path(body[1:]).expanduser().read_text(encoding="utf-8")
        except OSError as exc:
            raise typer.BadParameter(f"cannot read body file {body[1:]}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"body is not valid JSON: {exc}") from exc


def _render(api_response: Any) -> None:
    from specdrive.client import check_response
    from specdrive.output import get_output

    check_response(api_response.response)
    if api_response.payload is not None:
        get_output().format_response(api_response.payload)


def _security_cell(operation: Any) -> str:
    if operation is None:
        return "-"
    return ",".join(operation.security) or "(global)"


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("resources")
def resources_command(ctx: typer.Context) -> None:
    """List the resources found in the API description."""
    from specdrive.output import get_output

    with _handle_errors():
        _, description = _load(ctx)
        rows = []
        for name, resource in sorted(description.resources.items()):
            ops = resource.operations
            rows.append([
                name,
                resource.path,
                resource.host_override or "",
                _security_cell(ops.post),
                _security_cell(ops.get),
                _security_cell(ops.put),
                _security_cell(ops.delete),
            ])
        get_output().print_table(
            ["name", "path", "host", "post", "get", "put", "delete"],
            rows,
            title=f"{description.title} {description.version}",
        )


@app.command("create")
def create_command(
    ctx: typer.Context,
    resource: str = typer.Argument(..., help="Resource name, e.g. cdns_v1."),
    body: str = typer.Option(..., "--body", "-b", help=_BODY_HELP),
    parent_id: Optional[list[str]] = typer.Option(None, "--parent-id", help=_PARENT_ID_HELP),
) -> None:
    """Create a resource instance (POST to the collection URL)."""
    payload = _parse_body(body)
    with _handle_errors():
        config, description = _load(ctx)
        target = description.get_resource(resource)
        with _make_client(description, config) as client:
            _render(client.post(target, payload, parent_id or ()))


@app.command("get")
def get_command(
    ctx: typer.Context,
    resource: str = typer.Argument(..., help="Resource name."),
    instance_id: str = typer.Argument(..., metavar="ID", help="Instance id."),
    parent_id: Optional[list[str]] = typer.Option(None, "--parent-id", help=_PARENT_ID_HELP),
) -> None:
    """Fetch one resource instance."""
    with _handle_errors():
        config, description = _load(ctx)
        target = description.get_resource(resource)
        with _make_client(description, config) as client:
            _render(client.get(target, instance_id, parent_id or ()))


@app.command("update")
def update_command(
    ctx: typer.Context,
    resource: str = typer.Argument(..., help="Resource name."),
    instance_id: str = typer.Argument(..., metavar="ID", help="Instance id."),
    body: str = typer.Option(..., "--body", "-b", help=_BODY_HELP),
    parent_id: Optional[list[str]] = typer.Option(None, "--parent-id", help=_PARENT_ID_HELP),
) -> None:
    """Update one resource instance (PUT to the instance URL)."""
    payload = _parse_body(body)
    with _handle_errors():
        config, description = _load(ctx)
        target = description.get_resource(resource)
        with _make_client(description, config) as client:
            _render(client.put(target, instance_id, payload, parent_id or ()))


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    resource: str = typer.Argument(..., help="Resource name."),
    instance_id: str = typer.Argument(..., metavar="ID", help="Instance id."),
    parent_id: Optional[list[str]] = typer.Option(None, "--parent-id", help=_PARENT_ID_HELP),
) -> None:
    """Delete one resource instance."""
    from specdrive.output import info

    with _handle_errors():
        config, description = _load(ctx)
        target = description.get_resource(resource)
        with _make_client(description, config) as client:
            _render(client.delete(target, instance_id, parent_id or ()))
        info(f"Deleted {resource} {instance_id}")


@app.command("url")
def url_command(
    ctx: typer.Context,
    resource: str = typer.Argument(..., help="Resource name."),
    instance_id: Optional[str] = typer.Argument(None, metavar="[ID]", help="Instance id."),
    parent_id: Optional[list[str]] = typer.Option(None, "--parent-id", help=_PARENT_ID_HELP),
) -> None:
    """Print the resolved URL of a resource collection or instance."""
    from specdrive.client import URLResolver
    from specdrive.output import get_output

    with _handle_errors():
        config, description = _load(ctx)
        target = description.get_resource(resource)
        resolver = URLResolver(description.backend, config)
        parents = list(parent_id or ())
        if instance_id is None:
            url = resolver.resource_url(target, parents)
        else:
            url = resolver.resource_instance_url(target, [*parents, instance_id])
        get_output().print_data(url)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``specdrive`` console script.

    :class:`~specdrive.exceptions.SpecdriveError` instances that escape a
    command cause a clean exit with the error's ``exit_code``; anything else
    is reported as an unexpected error.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from specdrive.output import error

        if isinstance(exc, SpecdriveError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
