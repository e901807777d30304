"""Swagger parser -- load, resolve ``$ref`` pointers, and extract resources.

This sub-package turns a raw Swagger 2.0 document (JSON or YAML, local file,
remote URL or stdin) into an :class:`~specdrive.models.ApiDescription` that
the client can consume.

Typical usage::

    from specdrive.parser import load_api_description

    description = load_api_description("swagger.yaml")
    resource = description.get_resource("cdns_v1")

Sub-modules:

* :mod:`~specdrive.parser.loader` -- I/O layer plus format detection and
  Swagger version validation.
* :mod:`~specdrive.parser.resolver` -- internal ``$ref`` inlining.
* :mod:`~specdrive.parser.extractor` -- backend, security scheme and
  resource extraction.
"""

from __future__ import annotations

from specdrive.models import ApiDescription
from specdrive.parser.extractor import extract_description, resource_name
from specdrive.parser.loader import load_description, validate_description_version
from specdrive.parser.resolver import resolve_refs


def load_api_description(source: str) -> ApiDescription:
    """Load, validate and extract an API description in one step."""
    raw = load_description(source)
    validate_description_version(raw)
    return extract_description(raw)


__all__ = [
    "extract_description",
    "load_api_description",
    "load_description",
    "resolve_refs",
    "resource_name",
    "validate_description_version",
]
