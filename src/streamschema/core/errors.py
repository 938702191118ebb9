"""
Exception types raised by schema definition, per-record validation, and casts.

Provides typed exceptions for core-domain failures:
- SchemaDefinitionError for construction-time failures (duplicate columns,
  unrecognized type tags, defaults that do not fit their dtype).
- ValidationError as the umbrella for per-record failures, with the two
  concrete kinds MissingFieldError and TypeCoercionError.
- ConfigError for invalid validator settings.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Definition-time errors are fatal to the schema: no partial descriptor is
      ever returned.
    - Per-record errors are carried inside streamschema.runtime.validate
      ValidationResult objects; callers decide whether to skip, log, or halt.

Examples:
    Catch a coercion failure and inspect the offending column.

    >>> from streamschema.core.errors import TypeCoercionError, ValidationError
    >>> err = TypeCoercionError("price", expected="float", value="abc")
    >>> isinstance(err, ValidationError), err.column
    (True, 'price')
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "StreamSchemaError",
    "SchemaDefinitionError",
    "ValidationError",
    "MissingFieldError",
    "TypeCoercionError",
    "ConfigError",
]


class StreamSchemaError(Exception):
    """Base class for every error raised by streamschema."""


class SchemaDefinitionError(StreamSchemaError, ValueError):
    """Schema could not be constructed (duplicate names, bad dtype, bad default)."""


class ConfigError(StreamSchemaError, ValueError):
    """Validator settings are invalid or unsupported."""


class ValidationError(StreamSchemaError, ValueError):
    """
    Per-record validation failure.

    Attributes:
        column (str | None): Column the failure is attributed to, if any.
    """

    def __init__(self, message: str, *, column: str | None = None) -> None:
        super().__init__(message)
        self.column = column


class MissingFieldError(ValidationError):
    """A required column (non-optional, no default) is absent from the raw record."""

    def __init__(self, column: str, *, source: str | None = None) -> None:
        where = f" (looked up as {source!r})" if source and source != column else ""
        super().__init__(f"missing required column {column!r}{where}", column=column)
        self.source = source or column


class TypeCoercionError(ValidationError):
    """
    A value could not be coerced to the column's declared type.

    Attributes:
        column (str | None): Column name.
        expected (str): Rendered target type tag.
        value (Any): Offending raw value.
        row (int | None): Row index, set by column casts.
    """

    def __init__(
        self,
        column: str | None,
        *,
        expected: str,
        value: Any,
        row: int | None = None,
        reason: str | None = None,
    ) -> None:
        at = f" at row {row}" if row is not None else ""
        col = f"column {column!r}" if column is not None else "value"
        msg = (
            f"{col}{at}: cannot coerce {value!r} ({type(value).__name__}) to {expected}"
        )
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg, column=column)
        self.expected = expected
        self.value = value
        self.row = row
