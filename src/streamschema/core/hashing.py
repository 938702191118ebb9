"""
Canonical JSON serialization and hashing helpers for keys and records.

Provides a single canonical JSON policy and SHA-256 helpers so that
content-derived row keys are stable across runs, processes, and consumers.
This module is zero-IO and uses only the Python standard library.

Notes:
    - Canonical JSON:
        - sort_keys=True
        - separators=(",", ":")
        - ensure_ascii=False
    - Key payloads are type-tagged before serialization: every value becomes a
      ``[tag, payload]`` pair, so ``{1: "a"}`` and ``{"1": "a"}``, ``(1, 2)``
      and ``[1, 2]``, or ``Decimal("1.5")`` and ``"1.5"`` never share a digest.
    - Hashing is performed over the UTF-8 encoded canonical JSON string.
    - Used by streamschema.core.dtypes.Pointer and the runtime key factories.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Sequence
from typing import Any

__all__ = [
    "json_dumps_canonical",
    "tagged_form",
    "hash_values",
    "POINTER_DIGEST_SIZE",
]

# Hex characters kept from the SHA-256 digest for Pointer values (128 bits).
POINTER_DIGEST_SIZE: int = 32


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object.

    Returns:
        str: Canonical JSON string with sort_keys=True, compact separators,
        and ensure_ascii=False.

    Raises:
        TypeError: If obj contains values JSON cannot represent.
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def _qualname(obj: Any) -> str:
    cls = type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"


def _sorted_by_encoding(items: list[Any]) -> list[Any]:
    return sorted(items, key=json_dumps_canonical)


def tagged_form(value: Any) -> Any:
    """
    Convert a value into an unambiguous, JSON-serializable ``[tag, payload]`` tree.

    Containers are tagged by kind and converted recursively; mapping entries and
    set members are sorted by their own canonical encoding. Values of any other
    type are tagged with their qualified type name and rendered through repr().

    Examples:
        >>> tagged_form((1, "a"))
        ['tuple', [['int', 1], ['str', 'a']]]
        >>> tagged_form({1: None})
        ['dict', [[['int', 1], ['none', None]]]]
    """
    if value is None:
        return ["none", None]
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return ["bool", value]
    if isinstance(value, int):
        return ["int", int(value)]
    if isinstance(value, float):
        # NaN and infinities have no JSON literal
        return ["float", repr(float(value))]
    if isinstance(value, str):
        return ["str", str(value)]
    if isinstance(value, bytes):
        return ["bytes", value.hex()]
    if isinstance(value, list):
        return ["list", [tagged_form(v) for v in value]]
    if isinstance(value, tuple):
        return ["tuple", [tagged_form(v) for v in value]]
    if isinstance(value, dict):
        pairs = [[tagged_form(k), tagged_form(v)] for k, v in value.items()]
        return ["dict", _sorted_by_encoding(pairs)]
    if isinstance(value, (set, frozenset)):
        return [type(value).__name__, _sorted_by_encoding([tagged_form(v) for v in value])]
    return [_qualname(value), repr(value)]


def _sha256_hexdigest(s: str) -> str:
    """Compute SHA-256 hex digest of a UTF-8 string."""
    h = hashlib.sha256()
    h.update(s.encode("utf-8"))
    return h.hexdigest()


def hash_values(values: Sequence[Any]) -> str:
    """
    Hash an ordered sequence of values into a truncated hex digest.

    Order matters here: ``hash_values([1, 2]) != hash_values([2, 1])``.
    Type matters as well, since every value is tagged with its type before
    hashing: ``1``, ``1.0``, ``True`` and ``"1"`` all hash differently.

    Examples:
        >>> from streamschema.core.hashing import hash_values
        >>> hash_values([1, "a"]) == hash_values((1, "a"))
        True
        >>> hash_values([(1, 2)]) == hash_values([[1, 2]])
        False
        >>> len(hash_values([1]))
        32
    """
    try:
        payload = json_dumps_canonical([tagged_form(v) for v in values])
    except RecursionError:
        # self-referencing containers held in Any columns
        payload = json_dumps_canonical(["repr", repr(list(values))])
    return _sha256_hexdigest(payload)[:POINTER_DIGEST_SIZE]
