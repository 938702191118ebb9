"""
Typed records and per-record validation results.

TypedRecord is one materialized row: column name -> coerced value, the resolved
TypeTag of each column, and the row key. ValidationResult is the tagged
success/failure value returned by SchemaValidator.validate; per-record errors
are carried, never raised, so the surrounding engine can choose to skip, log,
or halt.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from streamschema.core.dtypes import TypeTag
from streamschema.core.errors import ValidationError
from streamschema.core.typing import RawRecord, RowKey

__all__ = [
    "TypedRecord",
    "ValidationResult",
]


@dataclass(frozen=True)
class TypedRecord:
    """
    One validated row.

    Attributes:
        values (Mapping[str, Any]): Read-only column name -> coerced value, in
            schema order.
        dtypes (Mapping[str, TypeTag]): Read-only column name -> resolved tag.
        key (RowKey): Primary-key value (tuple for compound keys) or a
            synthesized key.

    Examples:
        >>> from streamschema.core.dtypes import INT
        >>> rec = TypedRecord.create({"a": 3}, {"a": INT}, key=3)
        >>> rec["a"], rec.key, dict(rec)
        (3, 3, {'a': 3})
    """

    values: Mapping[str, Any]
    dtypes: Mapping[str, TypeTag]
    key: RowKey

    @classmethod
    def create(cls, values: dict[str, Any], dtypes: Mapping[str, TypeTag], key: RowKey) -> TypedRecord:
        return cls(MappingProxyType(dict(values)), MappingProxyType(dict(dtypes)), key)

    def __getitem__(self, name: str) -> Any:
        return self.values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def keys(self) -> list[str]:
        return list(self.values)

    def as_dict(self) -> dict[str, Any]:
        return dict(self.values)


@dataclass(frozen=True)
class ValidationResult:
    """
    Tagged outcome of validating one raw record.

    Exactly one of `record` / `error` is set.

    Attributes:
        record (TypedRecord | None): The typed row on success.
        error (ValidationError | None): The failure otherwise.
        raw (RawRecord | None): The input record, kept for error reporting.
    """

    record: TypedRecord | None = None
    error: ValidationError | None = None
    raw: RawRecord | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if (self.record is None) == (self.error is None):
            raise ValueError("ValidationResult requires exactly one of record/error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_kind(self) -> str | None:
        """Error class name (e.g. "MissingFieldError"), or None on success."""
        return type(self.error).__name__ if self.error is not None else None

    def unwrap(self) -> TypedRecord:
        """Return the record or raise the carried ValidationError."""
        if self.error is not None:
            raise self.error
        assert self.record is not None
        return self.record
