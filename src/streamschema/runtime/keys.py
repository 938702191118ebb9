"""
Row-key derivation.

Keyed schemas derive the key from primary-key values: the bare value for a
single-column key, a tuple in declaration order for compound keys. Unkeyed
schemas use a KeyFactory selected by ValidatorSettings.key_policy:

- HashKeyFactory ("hash", default): Pointer over the schema name and the
  typed values in declaration order. Identical records get identical keys,
  which the surrounding engine relies on for stream deduplication; distinct
  records get distinct keys.
- SequenceKeyFactory ("sequence"): monotonic integers starting at 0, unique
  for the factory's lifetime. The counter is lock-protected so one factory can
  be shared by parallel validation workers of the same stream.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from streamschema.core.constants import KEY_POLICY_HASH, KEY_POLICY_SEQUENCE
from streamschema.core.dtypes import Pointer
from streamschema.core.errors import ConfigError
from streamschema.core.schema import SchemaDescriptor
from streamschema.core.typing import RowKey

__all__ = [
    "KeyFactory",
    "HashKeyFactory",
    "SequenceKeyFactory",
    "primary_key_of",
    "make_key_factory",
]


class KeyFactory(Protocol):
    """Synthesizes a key for a record of an unkeyed schema."""

    def __call__(self, values: Mapping[str, Any]) -> RowKey: ...


def primary_key_of(values: Mapping[str, Any], pk_columns: Sequence[str]) -> RowKey:
    """
    Key from primary-key values.

    Examples:
        >>> primary_key_of({"a": 3, "b": "x"}, ["a"])
        3
        >>> primary_key_of({"a": 3, "b": "x"}, ["a", "b"])
        (3, 'x')
    """
    if len(pk_columns) == 1:
        return values[pk_columns[0]]
    return tuple(values[c] for c in pk_columns)


class HashKeyFactory:
    """Content-derived Pointer keys, stable across processes."""

    def __init__(self, descriptor: SchemaDescriptor) -> None:
        self._salt = descriptor.name or ""
        self._columns = descriptor.column_names()

    def __call__(self, values: Mapping[str, Any]) -> Pointer:
        return Pointer.from_values(self._salt, *(values[c] for c in self._columns))


class SequenceKeyFactory:
    """Monotonic integer keys, thread-safe."""

    def __init__(self, start: int = 0) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def __call__(self, values: Mapping[str, Any]) -> int:
        with self._lock:
            return next(self._counter)


def make_key_factory(policy: str, descriptor: SchemaDescriptor) -> KeyFactory:
    """Build the key factory for a key policy name."""
    if policy == KEY_POLICY_HASH:
        return HashKeyFactory(descriptor)
    if policy == KEY_POLICY_SEQUENCE:
        return SequenceKeyFactory()
    raise ConfigError(f"unknown key policy {policy!r}")
