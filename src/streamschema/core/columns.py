"""
Column definitions and the recognized per-column options.

A ColumnDefinition describes one column: declared type, primary-key flag,
default value, and an optional source-field name (`rename_from`) used when the
raw record spells the field differently from the schema column.

Definitions are produced in two stages:
- `column_definition(...)` returns an *unbound* definition (no name, dtype
  possibly left to a class annotation or builder tuple).
- `ColumnDefinition.bind(name, dtype)` resolves the dtype, coerces the default
  value, and returns the complete definition owned by one SchemaDescriptor.

Options arriving as plain mappings (builder tuples, config files) are parsed
by the pydantic model ColumnOptions, which forbids unknown keys.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .dtypes import TypeTag, resolve_dtype
from .errors import SchemaDefinitionError, TypeCoercionError
from .registry import DEFAULT_REGISTRY, TypeRegistry

logger = logging.getLogger(__name__)

__all__ = [
    "NO_DEFAULT",
    "ColumnOptions",
    "ColumnDefinition",
    "column_definition",
    "parse_options",
]


class _NoDefault:
    """Sentinel type for 'no default value declared' (None is a legal default)."""

    _instance: _NoDefault | None = None

    def __new__(cls) -> _NoDefault:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_DEFAULT"

    def __reduce__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()


class ColumnOptions(BaseModel):
    """
    Recognized per-column options.

    Attributes:
        dtype (Any): Type spelling accepted by resolve_dtype; None defers to the
            annotation / builder type.
        primary_key (bool): Column participates in the row key.
        default_value (Any): Value used when the field is absent.
        name_override (str | None): Field name to read from raw records.

    Raises:
        pydantic.ValidationError: On unknown keys or wrongly typed options.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    dtype: Any = None
    primary_key: bool = Field(default=False, strict=True)
    default_value: Any = NO_DEFAULT
    name_override: str | None = None

    @field_validator("name_override")
    @classmethod
    def _check_name_override(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("name_override must be a non-empty string")
        return v


def parse_options(options: Mapping[str, Any]) -> ColumnOptions:
    """
    Parse a loose options mapping into ColumnOptions.

    Raises:
        SchemaDefinitionError: If the mapping has unknown keys or bad values.
    """
    try:
        return ColumnOptions.model_validate(dict(options))
    except PydanticValidationError as exc:
        raise SchemaDefinitionError(f"invalid column options {dict(options)!r}: {exc}") from exc


@dataclass(frozen=True)
class ColumnDefinition:
    """
    One column of a schema.

    Attributes:
        name (str | None): Column name; None while unbound.
        dtype (TypeTag | None): Declared type; None while unbound and deferred.
        primary_key (bool): Part of the row key.
        default_value (Any): Value for absent fields, or NO_DEFAULT.
        rename_from (str | None): Raw-record field to read instead of `name`.

    Examples:
        >>> from streamschema.core.columns import column_definition
        >>> from streamschema.core.dtypes import FLOAT
        >>> col = column_definition(default_value=0).bind("price", FLOAT)
        >>> col.default_value, col.source_name
        (0.0, 'price')
    """

    name: str | None = None
    dtype: TypeTag | None = None
    primary_key: bool = False
    default_value: Any = NO_DEFAULT
    rename_from: str | None = None

    @property
    def has_default(self) -> bool:
        return self.default_value is not NO_DEFAULT

    @property
    def is_bound(self) -> bool:
        return self.name is not None and self.dtype is not None

    @property
    def source_name(self) -> str:
        """Field name looked up in raw records."""
        if self.rename_from is not None:
            return self.rename_from
        if self.name is None:
            raise SchemaDefinitionError("column definition is not bound to a name")
        return self.name

    @classmethod
    def from_options(cls, options: ColumnOptions) -> ColumnDefinition:
        dtype = resolve_dtype(options.dtype) if options.dtype is not None else None
        return cls(
            dtype=dtype,
            primary_key=options.primary_key,
            default_value=options.default_value,
            rename_from=options.name_override,
        )

    def bind(
        self,
        name: str,
        dtype: Any = None,
        *,
        registry: TypeRegistry = DEFAULT_REGISTRY,
    ) -> ColumnDefinition:
        """
        Return a complete definition for column `name`.

        Args:
            name (str): Column name.
            dtype (Any): Type spelling from the annotation / builder tuple. An
                explicit dtype already on this definition takes precedence.
            registry (TypeRegistry): Policy used to coerce the default value.

        Raises:
            SchemaDefinitionError: If the name is empty, no dtype is available,
                or the default value does not fit the dtype.
        """
        if not isinstance(name, str) or not name:
            raise SchemaDefinitionError(f"column name must be a non-empty string, got {name!r}")
        tag = self.dtype
        if tag is None:
            if dtype is None:
                raise SchemaDefinitionError(f"column {name!r} has no dtype")
            tag = resolve_dtype(dtype)
        default = self.default_value
        if default is not NO_DEFAULT:
            try:
                default = registry.coerce(default, tag, column=name, primary_key=self.primary_key)
            except TypeCoercionError as exc:
                raise SchemaDefinitionError(
                    f"default value {self.default_value!r} for column {name!r} "
                    f"is incompatible with dtype {tag}: {exc}"
                ) from exc
        logger.debug("bound column %s dtype=%s pk=%s", name, tag, self.primary_key)
        return replace(self, name=name, dtype=tag, default_value=default)


def column_definition(
    *,
    dtype: Any = None,
    primary_key: bool = False,
    default_value: Any = NO_DEFAULT,
    name: str | None = None,
) -> ColumnDefinition:
    """
    Build an unbound column definition.

    Args:
        dtype (Any): Optional explicit type; overrides the annotation / builder type.
        primary_key (bool): Column participates in the row key.
        default_value (Any): Value used when the field is absent.
        name (str | None): Field name to read from raw records (name override).

    Returns:
        ColumnDefinition: Unbound definition; the schema binds it to a column name.

    Raises:
        SchemaDefinitionError: On bad option values or an unrecognized dtype.
    """
    opts = parse_options(
        {
            "dtype": dtype,
            "primary_key": primary_key,
            "default_value": default_value,
            "name_override": name,
        }
    )
    return ColumnDefinition.from_options(opts)
