"""Shared test fixtures for specdrive.

Provides a representative Swagger 2.0 description, an isolated
configuration environment, output state management, and a CLI runner.
These fixtures are automatically discovered by pytest.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import pytest

from specdrive.models import ApiDescription, ProviderConfig
from specdrive.output import OutputFormat, OutputManager, reset_output, set_output


CDN_SWAGGER: dict[str, Any] = {
    "swagger": "2.0",
    "info": {"title": "CDN API", "version": "1.0.0"},
    "host": "api.example.com",
    "basePath": "/api",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "apikey_auth": {"type": "apiKey", "in": "header", "name": "X-API-Key"},
        "query_auth": {"type": "apiKey", "in": "query", "name": "api_key"},
        "refresh_auth": {
            "type": "apiKey",
            "in": "header",
            "name": "X-Refresh-Token",
            "x-terraform-refresh-token-url": "https://auth.example.com/token",
        },
        "basic_auth": {"type": "basic"},
    },
    "security": [{"apikey_auth": []}],
    "parameters": {
        "RequestId": {
            "name": "X-Request-ID",
            "in": "header",
            "type": "string",
            "x-terraform-header": "x_request_id",
        },
    },
    "paths": {
        "/v1/cdns": {
            "post": {
                "parameters": [
                    {"$ref": "#/parameters/RequestId"},
                    {"name": "body", "in": "body", "schema": {"type": "object"}},
                ],
                "responses": {"201": {"description": "created"}},
            },
        },
        "/v1/cdns/{id}": {
            "parameters": [{"name": "id", "in": "path", "type": "string", "required": True}],
            "get": {
                "security": [{"query_auth": []}],
                "responses": {"200": {"description": "ok"}},
            },
            "put": {
                "parameters": [{"$ref": "#/parameters/RequestId"}],
                "responses": {"200": {"description": "ok"}},
            },
            "delete": {"responses": {"204": {"description": "deleted"}}},
        },
        "/v1/cdns/{id}/v1/firewalls": {
            "post": {
                "x-terraform-resource-host": "fw.example.com",
                "security": [{"refresh_auth": []}],
                "responses": {"201": {"description": "created"}},
            },
        },
        "/v1/cdns/{id}/v1/firewalls/{fw_id}": {
            "get": {
                "security": [{"refresh_auth": []}],
                "responses": {"200": {"description": "ok"}},
            },
        },
        "/v1/internal": {
            "post": {"x-terraform-exclude-resource": True, "responses": {}},
        },
        "/v1/internal/{id}": {"get": {"responses": {}}},
        "/v1/actions": {"post": {"responses": {}}},
    },
}


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Install a quiet plain-text manager and reset it afterwards.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams, so a manager must never
    outlive the test that created it.
    """
    set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Description fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cdn_swagger_raw() -> dict[str, Any]:
    """A fresh copy of the CDN Swagger description as a plain dict."""
    return copy.deepcopy(CDN_SWAGGER)


@pytest.fixture
def cdn_description(cdn_swagger_raw: dict[str, Any]) -> ApiDescription:
    """The extracted CDN description."""
    from specdrive.parser.extractor import extract_description

    return extract_description(cdn_swagger_raw)


@pytest.fixture
def cdn_config() -> ProviderConfig:
    """Operator configuration with a credential for every CDN scheme."""
    return ProviderConfig(
        security={
            "apikey_auth": "header-secret",
            "query_auth": "query-secret",
            "refresh_auth": "refresh-secret",
        },
        headers={"x_request_id": "req-123"},
    )


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration lookup to a temporary directory.

    Points HOME and XDG_CONFIG_HOME into tmp_path, clears the SPECDRIVE_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for var in ["SPECDRIVE_CONFIG", "SPECDRIVE_REGION", "SPECDRIVE_DESCRIPTION"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
