"""Inline internal ``$ref`` pointers of a Swagger description.

Swagger 2.0 documents share header parameters through
``#/parameters/<name>`` and schemas through ``#/definitions/<name>``. The
extractor only needs the former, but resolving the whole tree keeps it from
special-casing where a reference may appear.

Only internal references (``#/...``) are supported. A reference that is
already being resolved higher up the stack is left in place, which keeps
self-referencing schemas finite.
"""

from __future__ import annotations

import copy
from typing import Any

from specdrive.exceptions import SpecParseError


def resolve_refs(description: dict[str, Any]) -> dict[str, Any]:
    """Return a deep copy of *description* with every ``$ref`` inlined.

    Raises:
        SpecParseError: If a reference is external or points nowhere.
    """
    root = copy.deepcopy(description)
    return _inline(root, root, frozenset())


def _lookup(ref: str, root: dict[str, Any]) -> Any:
    """Follow a JSON Pointer (RFC 6901) such as ``#/parameters/RequestId``."""
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}. Only internal references (#/...) are handled."
        )

    node: Any = root
    for raw_segment in ref[2:].split("/"):
        segment = raw_segment.replace("~1", "/").replace("~0", "~")
        if isinstance(node, dict) and segment in node:
            node = node[segment]
        elif isinstance(node, list) and segment.isdigit() and int(segment) < len(node):
            node = node[int(segment)]
        else:
            raise SpecParseError(f"Cannot resolve $ref '{ref}': '{segment}' not found")
    return node


def _inline(node: Any, root: dict[str, Any], active: frozenset[str]) -> Any:
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str):
            if ref in active:
                return node
            return _inline(_lookup(ref, root), root, active | {ref})
        return {key: _inline(value, root, active) for key, value in node.items()}
    if isinstance(node, list):
        return [_inline(item, root, active) for item in node]
    return node
