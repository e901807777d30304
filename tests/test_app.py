"""Tests for the Typer CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest
import yaml

from specdrive import __version__
from specdrive.app import app
from specdrive.client import ProviderClient


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def workspace(isolated_config: Path, cdn_swagger_raw: dict[str, Any]) -> Path:
    """A working directory with a description and a ./specdrive.yaml."""
    (isolated_config / "swagger.json").write_text(json.dumps(cdn_swagger_raw))
    (isolated_config / "specdrive.yaml").write_text(
        yaml.safe_dump(
            {
                "description": "swagger.json",
                "security": {
                    "apikey_auth": "header-secret",
                    "query_auth": "query-secret",
                    "refresh_auth": "refresh-secret",
                },
                "headers": {"x_request_id": "req-123"},
            }
        )
    )
    return isolated_config


@pytest.fixture
def sent_requests(monkeypatch: pytest.MonkeyPatch) -> list[httpx.Request]:
    """Route every client the CLI builds through a recording MockTransport.

    Instance id ``404`` answers 404; token requests get a bearer token.
    """
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.host == "auth.example.com":
            return httpx.Response(200, headers={"Authorization": "Bearer access"})
        if request.url.path.endswith("/404"):
            return httpx.Response(404, json={"message": "no such cdn"})
        if request.method == "DELETE":
            return httpx.Response(204)
        return httpx.Response(200, json={"id": "42", "label": "web"})

    def make_client(description: Any, config: Any) -> ProviderClient:
        return ProviderClient(
            description,
            config,
            http_client=httpx.Client(transport=httpx.MockTransport(handler)),
        )

    monkeypatch.setattr("specdrive.app._make_client", make_client)
    return seen


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------


class TestGlobalOptions:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"specdrive {__version__}" in result.output

    def test_no_description_configured(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "resources"])
        assert result.exit_code == 8
        assert "No API description configured" in result.output

    def test_description_flag(
        self, cli_runner, isolated_config: Path, cdn_swagger_raw: dict[str, Any]
    ) -> None:
        path = isolated_config / "other.json"
        path.write_text(json.dumps(cdn_swagger_raw))
        result = cli_runner.invoke(
            app, ["--plain", "--description", str(path), "resources"]
        )
        assert result.exit_code == 0
        assert "cdns_v1" in result.stdout

    def test_bad_description(self, cli_runner, isolated_config: Path) -> None:
        path = isolated_config / "openapi.json"
        path.write_text(json.dumps({"openapi": "3.0.0"}))
        result = cli_runner.invoke(app, ["--no-color", "-d", str(path), "resources"])
        assert result.exit_code == 7
        assert "not supported" in result.output


# ---------------------------------------------------------------------------
# Offline commands
# ---------------------------------------------------------------------------


class TestResourcesCommand:
    def test_plain_table(self, cli_runner, workspace: Path) -> None:
        result = cli_runner.invoke(app, ["--plain", "resources"])
        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert lines[0] == "name\tpath\thost\tpost\tget\tput\tdelete"
        assert "cdns_v1\t/v1/cdns\t\t(global)\tquery_auth\t(global)\t(global)" in lines

    def test_json_table(self, cli_runner, workspace: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "--quiet", "resources"])
        assert result.exit_code == 0
        rows = json.loads(result.stdout)
        firewalls = next(r for r in rows if r["name"] == "cdns_v1_firewalls_v1")
        assert firewalls["host"] == "fw.example.com"
        assert firewalls["put"] == "-"


class TestUrlCommand:
    def test_instance_url(self, cli_runner, workspace: Path) -> None:
        result = cli_runner.invoke(app, ["--quiet", "url", "cdns_v1", "42"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "https://api.example.com/api/v1/cdns/42"

    def test_collection_url_with_parent(self, cli_runner, workspace: Path) -> None:
        result = cli_runner.invoke(
            app, ["--quiet", "url", "cdns_v1_firewalls_v1", "--parent-id", "42"]
        )
        assert result.exit_code == 0
        assert result.stdout.strip() == "https://fw.example.com/api/v1/cdns/42/v1/firewalls"

    def test_unknown_resource(self, cli_runner, workspace: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "url", "users"])
        assert result.exit_code == 8
        assert "Available resources" in result.output


# ---------------------------------------------------------------------------
# Calls
# ---------------------------------------------------------------------------


class TestCrudCommands:
    def test_get(self, cli_runner, workspace: Path, sent_requests: list[httpx.Request]) -> None:
        result = cli_runner.invoke(app, ["--json", "--quiet", "get", "cdns_v1", "42"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"id": "42", "label": "web"}
        assert str(sent_requests[0].url).endswith("/api/v1/cdns/42?api_key=query-secret")

    def test_create(self, cli_runner, workspace: Path, sent_requests: list[httpx.Request]) -> None:
        result = cli_runner.invoke(
            app, ["--json", "--quiet", "create", "cdns_v1", "--body", '{"label": "web"}']
        )
        assert result.exit_code == 0
        assert sent_requests[0].method == "POST"
        assert json.loads(sent_requests[0].content) == {"label": "web"}
        assert sent_requests[0].headers["X-API-Key"] == "header-secret"

    def test_create_body_from_file(
        self, cli_runner, workspace: Path, sent_requests: list[httpx.Request]
    ) -> None:
        (workspace / "body.json").write_text('{"label": "from-file"}')
        result = cli_runner.invoke(
            app, ["--quiet", "create", "cdns_v1", "--body", f"@{workspace / 'body.json'}"]
        )
        assert result.exit_code == 0
        assert json.loads(sent_requests[0].content) == {"label": "from-file"}

    def test_invalid_body(
        self, cli_runner, workspace: Path, sent_requests: list[httpx.Request]
    ) -> None:
        result = cli_runner.invoke(app, ["create", "cdns_v1", "--body", "{nope"])
        assert result.exit_code == 2
        assert sent_requests == []

    def test_update(self, cli_runner, workspace: Path, sent_requests: list[httpx.Request]) -> None:
        result = cli_runner.invoke(
            app, ["--quiet", "update", "cdns_v1", "42", "--body", '{"label": "x"}']
        )
        assert result.exit_code == 0
        assert sent_requests[0].method == "PUT"
        assert sent_requests[0].headers["X-Request-ID"] == "req-123"

    def test_delete(self, cli_runner, workspace: Path, sent_requests: list[httpx.Request]) -> None:
        result = cli_runner.invoke(app, ["--no-color", "delete", "cdns_v1", "42"])
        assert result.exit_code == 0
        assert sent_requests[0].method == "DELETE"
        assert "Deleted cdns_v1 42" in result.output

    def test_subresource_get(
        self, cli_runner, workspace: Path, sent_requests: list[httpx.Request]
    ) -> None:
        result = cli_runner.invoke(
            app, ["--quiet", "get", "cdns_v1_firewalls_v1", "1337", "--parent-id", "42"]
        )
        assert result.exit_code == 0
        assert [r.url.host for r in sent_requests] == ["auth.example.com", "fw.example.com"]

    def test_not_found_exit_code(
        self, cli_runner, workspace: Path, sent_requests: list[httpx.Request]
    ) -> None:
        result = cli_runner.invoke(app, ["--no-color", "get", "cdns_v1", "404"])
        assert result.exit_code == 4
        assert "no such cdn" in result.output

    def test_undeclared_verb(
        self, cli_runner, workspace: Path, sent_requests: list[httpx.Request]
    ) -> None:
        result = cli_runner.invoke(
            app, ["--no-color", "delete", "cdns_v1_firewalls_v1", "1", "--parent-id", "42"]
        )
        assert result.exit_code == 8
        assert sent_requests == []
