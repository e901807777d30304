"""Tests for loading API descriptions from files, URLs and stdin."""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import httpx
import pytest
import yaml

from specdrive.exceptions import SpecParseError
from specdrive.parser import load_api_description
from specdrive.parser.loader import load_description, validate_description_version


class TestLoadFromFile:
    def test_json_file(self, tmp_path: Path, cdn_swagger_raw: dict[str, Any]) -> None:
        path = tmp_path / "swagger.json"
        path.write_text(json.dumps(cdn_swagger_raw))
        assert load_description(str(path)) == cdn_swagger_raw

    def test_yaml_file(self, tmp_path: Path, cdn_swagger_raw: dict[str, Any]) -> None:
        path = tmp_path / "swagger.yaml"
        path.write_text(yaml.safe_dump(cdn_swagger_raw))
        assert load_description(str(path))["host"] == "api.example.com"

    def test_unknown_extension_autodetected(self, tmp_path: Path) -> None:
        path = tmp_path / "swagger.txt"
        path.write_text("swagger: '2.0'\ninfo:\n  title: T\n")
        assert load_description(str(path))["info"]["title"] == "T"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SpecParseError, match="not found"):
            load_description(str(tmp_path / "nope.yaml"))

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("   \n")
        with pytest.raises(SpecParseError, match="empty"):
            load_description(str(path))

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(SpecParseError, match="Invalid JSON"):
            load_description(str(path))

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(SpecParseError, match="list"):
            load_description(str(path))


class TestLoadFromStdin:
    def test_reads_stdin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO('{"swagger": "2.0"}'))
        assert load_description("-") == {"swagger": "2.0"}

    def test_empty_stdin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        with pytest.raises(SpecParseError, match="stdin"):
            load_description("-")


class TestLoadFromUrl:
    def test_fetches_json(self) -> None:
        response = MagicMock()
        response.text = '{"swagger": "2.0"}'
        response.headers = {"content-type": "application/json"}
        with patch("specdrive.parser.loader.httpx.get", return_value=response) as mock_get:
            assert load_description("https://api.example.com/swagger.json") == {"swagger": "2.0"}
        mock_get.assert_called_once()

    def test_http_error(self) -> None:
        request = httpx.Request("GET", "https://api.example.com/swagger.json")
        error = httpx.HTTPStatusError(
            "boom", request=request, response=httpx.Response(500, request=request)
        )
        response = MagicMock()
        response.raise_for_status.side_effect = error
        with patch("specdrive.parser.loader.httpx.get", return_value=response):
            with pytest.raises(SpecParseError, match="HTTP 500"):
                load_description("https://api.example.com/swagger.json")

    def test_connection_error(self) -> None:
        request = httpx.Request("GET", "https://api.example.com/swagger.json")
        with patch(
            "specdrive.parser.loader.httpx.get",
            side_effect=httpx.ConnectError("refused", request=request),
        ):
            with pytest.raises(SpecParseError, match="Failed to fetch"):
                load_description("https://api.example.com/swagger.json")


class TestValidateDescriptionVersion:
    def test_swagger_2(self) -> None:
        assert validate_description_version({"swagger": "2.0"}) == "2.0"

    def test_unquoted_yaml_version(self) -> None:
        assert validate_description_version({"swagger": 2.0}) == "2.0"

    def test_openapi_3_rejected(self) -> None:
        with pytest.raises(SpecParseError, match="OpenAPI 3.0.3"):
            validate_description_version({"openapi": "3.0.3"})

    def test_missing_field(self) -> None:
        with pytest.raises(SpecParseError, match="Missing 'swagger'"):
            validate_description_version({})

    def test_other_version(self) -> None:
        with pytest.raises(SpecParseError, match="1.2"):
            validate_description_version({"swagger": "1.2"})


class TestLoadApiDescription:
    def test_end_to_end(self, tmp_path: Path, cdn_swagger_raw: dict[str, Any]) -> None:
        path = tmp_path / "swagger.json"
        path.write_text(json.dumps(cdn_swagger_raw))
        description = load_api_description(str(path))
        assert "cdns_v1" in description.resources
        assert description.global_security == ("apikey_auth",)
