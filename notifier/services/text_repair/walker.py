# notifier/services/text_repair/walker.py
"""
Structured-payload traversal for text repair.

Decides which leaf strings of a JSON-like payload may be repaired:

- keys that name identifiers or timestamps are opaque, and so is
  everything below them
- string values shaped like a 24-hex object id or an ISO-8601 date-time
  are opaque wherever they appear
- binary blobs and non-string scalars are never inspected
"""

import re
from collections.abc import Callable, Iterator, Mapping
from typing import Any

OPAQUE_KEYS = frozenset({"id", "_id", "__v", "userId", "createdAt", "updatedAt", "deletedAt"})
OPAQUE_KEY_SUFFIXES = ("Id", "At")

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")
ISO_DATETIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T")

BINARY_TYPES = (bytes, bytearray, memoryview)


def is_opaque_key(key: Any) -> bool:
    """True for keys whose values must pass through untouched."""
    if not isinstance(key, str):
        return False
    return key in OPAQUE_KEYS or key.endswith(OPAQUE_KEY_SUFFIXES)


def is_opaque_value(value: str) -> bool:
    """True for strings that look like ids or timestamps (or are empty)."""
    if not value:
        return True
    return bool(OBJECT_ID_PATTERN.match(value) or ISO_DATETIME_PATTERN.match(value))


def walk(node: Any, repair: Callable[[str], str]) -> Any:
    """
    Return a copy of node with every eligible string passed through repair.

    Mappings keep all their keys, sequences keep their order and type
    (list or tuple), everything else is returned as is.
    """
    if isinstance(node, str):
        return node if is_opaque_value(node) else repair(node)
    if isinstance(node, BINARY_TYPES):
        return node
    if isinstance(node, Mapping):
        return {key: value if is_opaque_key(key) else walk(value, repair) for key, value in node.items()}
    if isinstance(node, list):
        return [walk(item, repair) for item in node]
    if isinstance(node, tuple):
        return tuple(walk(item, repair) for item in node)
    return node


def iter_repairable(node: Any) -> Iterator[str]:
    """Yield every string walk() would hand to repair, in traversal order."""
    if isinstance(node, str):
        if not is_opaque_value(node):
            yield node
    elif isinstance(node, BINARY_TYPES):
        return
    elif isinstance(node, Mapping):
        for key, value in node.items():
            if not is_opaque_key(key):
                yield from iter_repairable(value)
    elif isinstance(node, (list, tuple)):
        for item in node:
            yield from iter_repairable(item)
