"""
SchemaDescriptor and the schema construction paths.

A SchemaDescriptor is an immutable, ordered set of uniquely named, bound
ColumnDefinitions plus an optional schema name. It is shared read-only by every
validation call for the lifetime of a connector/session.

Construction paths (all produce structurally equal descriptors for the same input)
- schema_builder: ordered (name, dtype[, options]) tuples.
- schema_from_dict: name -> ColumnDefinition (from column_definition()) or options mapping.
- schema_from_types: name -> dtype only.
- schema_from_class: annotated class attributes, a convenience over schema_builder.

Raises
- SchemaDefinitionError for duplicate names, unknown dtypes (including bare
  callables passed where typing.Any was meant), unknown options, and defaults
  that do not fit their dtype. No partial descriptor is ever returned.

Examples
--------
>>> from streamschema.core.schema import schema_builder, schema_from_types
>>> from streamschema.core.columns import column_definition
>>> s1 = schema_builder([("a", int, {"primary_key": True}), ("b", float)], name="t")
>>> s2 = schema_builder([("a", int, column_definition(primary_key=True)), ("b", "f64")], name="t")
>>> s1 == s2
True
>>> s1.column_names(), [str(t) for t in s1.typehints().values()]
(['a', 'b'], ['integer', 'float'])
"""

from __future__ import annotations

import logging
import typing
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from .columns import NO_DEFAULT, ColumnDefinition, column_definition, parse_options
from .dtypes import TypeTag
from .errors import SchemaDefinitionError
from .registry import DEFAULT_REGISTRY, TypeRegistry

logger = logging.getLogger(__name__)

__all__ = [
    "SchemaDescriptor",
    "ColumnSpec",
    "schema_builder",
    "schema_from_dict",
    "schema_from_types",
    "schema_from_class",
]

# (name, dtype) or (name, dtype, options); options is a ColumnDefinition, a mapping, or None.
ColumnSpec = tuple[Any, ...]


@dataclass(frozen=True)
class SchemaDescriptor:
    """
    Immutable ordered mapping of column name -> ColumnDefinition.

    Attributes:
        columns (tuple[ColumnDefinition, ...]): Bound column definitions in
            declaration order.
        name (str | None): Optional schema-level name tag.

    Raises:
        SchemaDefinitionError: If a column is unbound or a name repeats.

    Notes:
        - Equality is structural (columns and name).
        - Primary-key columns, in declaration order, form the row key; when none
          are declared the validator synthesizes one.
    """

    columns: tuple[ColumnDefinition, ...]
    name: str | None = None
    _by_name: Mapping[str, ColumnDefinition] = field(
        init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        cols = tuple(self.columns)
        by_name: dict[str, ColumnDefinition] = {}
        for col in cols:
            if not isinstance(col, ColumnDefinition) or not col.is_bound:
                raise SchemaDefinitionError(f"schema columns must be bound definitions, got {col!r}")
            assert col.name is not None
            if col.name in by_name:
                raise SchemaDefinitionError(f"column {col.name!r} declared more than once")
            by_name[col.name] = col
        object.__setattr__(self, "columns", cols)
        object.__setattr__(self, "_by_name", MappingProxyType(by_name))

    # -- mapping-like access -------------------------------------------------

    def __getitem__(self, name: str) -> ColumnDefinition:
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"schema {self.name or '<anonymous>'} has no column {name!r}") from None

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_name)

    def __len__(self) -> int:
        return len(self.columns)

    def column_names(self) -> list[str]:
        return list(self._by_name)

    def primary_key_columns(self) -> list[str]:
        """Primary-key column names in declaration order (empty when unkeyed)."""
        return [c.name for c in self.columns if c.primary_key]  # type: ignore[misc]

    def typehints(self) -> dict[str, TypeTag]:
        """Ordered mapping of column name -> resolved TypeTag."""
        return {c.name: c.dtype for c in self.columns}  # type: ignore[misc]

    def typehint(self, name: str) -> TypeTag:
        """TypeTag of a single column. Raises KeyError for unknown columns."""
        dtype = self[name].dtype
        assert dtype is not None
        return dtype

    # -- derived schemas -----------------------------------------------------

    def with_types(self, **dtypes: Any) -> SchemaDescriptor:
        """
        Return a copy with the given columns re-typed.

        Defaults are re-coerced to the new types; the primary-key flags and
        source names are kept.

        Raises:
            SchemaDefinitionError: If a column is unknown or a default no longer fits.
        """
        unknown = [n for n in dtypes if n not in self]
        if unknown:
            raise SchemaDefinitionError(f"with_types: unknown columns {unknown!r}")
        cols = []
        for col in self.columns:
            if col.name in dtypes:
                assert col.name is not None
                col = replace(col, name=None, dtype=None).bind(col.name, dtypes[col.name])
            cols.append(col)
        return SchemaDescriptor(tuple(cols), name=self.name)

    def without(self, *names: str) -> SchemaDescriptor:
        """Return a copy without the named columns."""
        unknown = [n for n in names if n not in self]
        if unknown:
            raise SchemaDefinitionError(f"without: unknown columns {unknown!r}")
        drop = set(names)
        return SchemaDescriptor(
            tuple(c for c in self.columns if c.name not in drop), name=self.name
        )

    def with_columns(self, columns: Iterable[ColumnSpec]) -> SchemaDescriptor:
        """Return a copy with extra columns appended (builder tuple format)."""
        return self | schema_builder(columns, name=self.name)

    def rename(self, name: str | None) -> SchemaDescriptor:
        """Return a copy carrying a different schema-level name tag."""
        return SchemaDescriptor(self.columns, name=name)

    def __or__(self, other: SchemaDescriptor) -> SchemaDescriptor:
        if not isinstance(other, SchemaDescriptor):
            return NotImplemented
        return SchemaDescriptor(self.columns + other.columns, name=self.name)


# -----------------------------------------------------------------------------
# Construction paths
# -----------------------------------------------------------------------------


def _unbound_from(options: Any) -> ColumnDefinition:
    if options is None:
        return ColumnDefinition()
    if isinstance(options, ColumnDefinition):
        if options.name is not None:
            # Already bound (e.g. taken from another schema): keep its settings only.
            return replace(options, name=None)
        return options
    if isinstance(options, Mapping):
        return ColumnDefinition.from_options(parse_options(options))
    raise SchemaDefinitionError(
        f"column options must be a ColumnDefinition or a mapping, got {type(options).__name__}"
    )


def schema_builder(
    columns: Iterable[ColumnSpec],
    *,
    name: str | None = None,
    registry: TypeRegistry = DEFAULT_REGISTRY,
) -> SchemaDescriptor:
    """
    Build a schema from ordered (name, dtype[, options]) tuples.

    Args:
        columns (Iterable[ColumnSpec]): Column specs in declaration order. dtype
            may be None when options carry an explicit dtype.
        name (str | None): Schema-level name tag.
        registry (TypeRegistry): Policy used to coerce default values.

    Returns:
        SchemaDescriptor: The constructed descriptor.

    Raises:
        SchemaDefinitionError: On malformed specs, duplicate names, bad dtypes,
            unknown options or incompatible defaults.
    """
    bound: list[ColumnDefinition] = []
    for spec in columns:
        if not isinstance(spec, Sequence) or isinstance(spec, str) or len(spec) not in (2, 3):
            raise SchemaDefinitionError(
                f"column spec must be (name, dtype) or (name, dtype, options), got {spec!r}"
            )
        col_name, dtype = spec[0], spec[1]
        options = spec[2] if len(spec) == 3 else None
        bound.append(_unbound_from(options).bind(col_name, dtype, registry=registry))
    desc = SchemaDescriptor(tuple(bound), name=name)
    logger.debug(
        "built schema %s with columns %s (primary key: %s)",
        name or "<anonymous>",
        desc.column_names(),
        desc.primary_key_columns() or "synthesized",
    )
    return desc


def schema_from_dict(
    columns: Mapping[str, ColumnDefinition | Mapping[str, Any]],
    *,
    name: str | None = None,
    registry: TypeRegistry = DEFAULT_REGISTRY,
) -> SchemaDescriptor:
    """
    Build a schema from a mapping of column name -> column definition.

    Each value is a ColumnDefinition carrying an explicit dtype (see
    column_definition) or an equivalent options mapping.

    Examples:
        >>> from streamschema.core.schema import schema_from_dict
        >>> from streamschema.core.columns import column_definition
        >>> s = schema_from_dict({"id": column_definition(dtype=int, primary_key=True)})
        >>> s.primary_key_columns()
        ['id']
    """
    return schema_builder(
        [(col_name, None, definition) for col_name, definition in columns.items()],
        name=name,
        registry=registry,
    )


def schema_from_types(
    types: Mapping[str, Any] | None = None,
    *,
    name: str | None = None,
    registry: TypeRegistry = DEFAULT_REGISTRY,
    **kwargs: Any,
) -> SchemaDescriptor:
    """
    Build a schema from name -> dtype only (no keys, no defaults).

    Columns may be passed as a mapping, as keyword arguments, or both; a name
    given both ways is a duplicate.
    """
    specs: list[ColumnSpec] = [(n, t) for n, t in (types or {}).items()]
    specs.extend((n, t) for n, t in kwargs.items())
    return schema_builder(specs, name=name, registry=registry)


def schema_from_class(
    cls: type,
    *,
    name: str | None = None,
    registry: TypeRegistry = DEFAULT_REGISTRY,
) -> SchemaDescriptor:
    """
    Build a schema from a class whose annotated attributes are columns.

    The annotation is the dtype; the attribute value, if any, is either a
    column_definition(...) or a plain default value. Usable as a decorator.

    Examples:
        >>> from streamschema.core.schema import schema_from_class
        >>> from streamschema.core.columns import column_definition
        >>> @schema_from_class
        ... class Orders:
        ...     order_id: int = column_definition(primary_key=True)
        ...     amount: float = 0.0
        >>> Orders.name, Orders.primary_key_columns()
        ('Orders', ['order_id'])
    """
    try:
        hints = typing.get_type_hints(cls)
    except (NameError, TypeError) as exc:
        raise SchemaDefinitionError(f"cannot resolve annotations of {cls.__name__}: {exc}") from exc
    specs: list[ColumnSpec] = []
    for attr, annotation in hints.items():
        if typing.get_origin(annotation) is typing.ClassVar:
            continue
        value = getattr(cls, attr, NO_DEFAULT)
        if isinstance(value, ColumnDefinition):
            specs.append((attr, annotation, value))
        elif value is NO_DEFAULT:
            specs.append((attr, annotation))
        else:
            specs.append((attr, annotation, column_definition(default_value=value)))
    return schema_builder(specs, name=name or cls.__name__, registry=registry)
