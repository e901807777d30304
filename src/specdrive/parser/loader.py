"""Load API descriptions from a URL, local file, or stdin.

This module handles all I/O for fetching raw Swagger documents and converting
them into Python dictionaries. JSON and YAML are both accepted with automatic
format detection.

The two public functions are:

* :func:`load_description` -- load and parse a description from any source.
* :func:`validate_description_version` -- check the ``swagger`` version field.

After loading, the raw dict is handed to
:func:`~specdrive.parser.extractor.extract_description`.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specdrive.exceptions import SpecParseError
from specdrive.output import debug

SUPPORTED_SWAGGER_VERSION = "2.0"


def load_description(source: str) -> dict[str, Any]:
    """Load an API description from URL, file path, or stdin (``-``).

    Args:
        source: A URL (http/https), file path, or ``-`` for stdin.

    Returns:
        The parsed description as a dictionary.

    Raises:
        SpecParseError: If the source cannot be loaded or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        return _load_from_url(source)
    return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")
    return _parse_content(content, hint="")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a description over HTTP, using the content type as a format hint."""
    debug(f"Fetching API description from {url}")
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching description from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch description from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise SpecParseError(f"Description file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read description file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Description file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"
    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    JSON is tried first unless the hint says YAML; valid JSON is also valid
    YAML, but the JSON parser is stricter and gives better error messages.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            json_error = exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse description as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc
    return _require_mapping(result)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Description must be a JSON/YAML object (got {kind})")
    return result


def validate_description_version(description: dict[str, Any]) -> str:
    """Validate and return the Swagger version string.

    Raises:
        SpecParseError: For OpenAPI 3.x documents, a missing ``swagger``
            field, or any version other than ``2.0``.
    """
    if "openapi" in description:
        raise SpecParseError(
            f"OpenAPI {description['openapi']} is not supported. "
            f"Only Swagger {SUPPORTED_SWAGGER_VERSION} descriptions are supported."
        )

    version = description.get("swagger")
    if version is None:
        raise SpecParseError("Missing 'swagger' field. Is this a Swagger 2.0 document?")

    version_str = str(version)
    if version_str != SUPPORTED_SWAGGER_VERSION:
        raise SpecParseError(
            f"Unsupported Swagger version: {version_str}. "
            f"Only Swagger {SUPPORTED_SWAGGER_VERSION} is supported."
        )
    return version_str
