"""
Columnar and Polars materialization of validated records.

Purpose
- Pivot a TypedRecord stream into TypedColumns (the unit CastEngine works on).
- Materialize TypedColumns / records as Polars Series / DataFrames with dtypes
  derived from the schema's TypeTags.

Dtype mapping
- integer -> Int64, float -> Float64, string -> Utf8, boolean -> Boolean
- pointer -> Utf8 (rendered "^<digest>"), any -> Object
- optional[T] -> the mapping of T (Polars columns are nullable)

Notes
- Only this module (and the runtime package that re-exports it) imports polars;
  streamschema.core stays polars-free.
"""

from __future__ import annotations

from collections.abc import Iterable

import polars as pl

from streamschema.core.dtypes import Kind, Pointer, TypeTag
from streamschema.core.schema import SchemaDescriptor

from .cast import TypedColumn
from .records import TypedRecord

__all__ = [
    "KEY_COLUMN",
    "polars_dtype",
    "polars_schema",
    "columns_from_records",
    "to_series",
    "to_frame",
]

# Name of the optional key column added by to_frame(include_key=True).
KEY_COLUMN = "_key"

# Polars exposes dtype singletons/classes (e.g., pl.Int64); keep loosely typed across versions.
_DTYPE_MAP: dict[Kind, object] = {
    Kind.INTEGER: pl.Int64,
    Kind.FLOAT: pl.Float64,
    Kind.STRING: pl.Utf8,
    Kind.BOOLEAN: pl.Boolean,
    Kind.POINTER: pl.Utf8,
    Kind.ANY: pl.Object,
}


def polars_dtype(dtype: TypeTag) -> object:
    """Polars dtype for a TypeTag."""
    return _DTYPE_MAP[dtype.unoptionalize().kind]


def polars_schema(descriptor: SchemaDescriptor) -> dict[str, object]:
    """Ordered column name -> Polars dtype for a descriptor."""
    return {name: polars_dtype(tag) for name, tag in descriptor.typehints().items()}


def columns_from_records(
    records: Iterable[TypedRecord],
    descriptor: SchemaDescriptor,
) -> dict[str, TypedColumn]:
    """
    Pivot records into one TypedColumn per schema column, in schema order.

    Examples:
        >>> from streamschema.core import INT, schema_builder
        >>> from streamschema.runtime.validate import SchemaValidator
        >>> desc = schema_builder([("a", INT)])
        >>> v = SchemaValidator(desc)
        >>> recs = [v.validate_or_raise({"a": i}) for i in range(3)]
        >>> columns_from_records(recs, desc)["a"].values
        (0, 1, 2)
    """
    names = descriptor.column_names()
    data: dict[str, list[object]] = {n: [] for n in names}
    for rec in records:
        for n in names:
            data[n].append(rec[n])
    hints = descriptor.typehints()
    return {n: TypedColumn(n, hints[n], tuple(data[n])) for n in names}


def _polars_value(value: object) -> object:
    return str(value) if isinstance(value, Pointer) else value


def to_series(column: TypedColumn) -> pl.Series:
    """Materialize a TypedColumn as a Polars Series of the mapped dtype."""
    values = [_polars_value(v) for v in column.values]
    return pl.Series(column.name, values, dtype=polars_dtype(column.dtype))  # type: ignore[arg-type]


def to_frame(
    records: Iterable[TypedRecord],
    descriptor: SchemaDescriptor,
    *,
    include_key: bool = False,
) -> pl.DataFrame:
    """
    Materialize validated records as a Polars DataFrame.

    Args:
        records (Iterable[TypedRecord]): Records validated against `descriptor`.
        descriptor (SchemaDescriptor): Schema giving column order and dtypes.
        include_key (bool): Prepend a KEY_COLUMN holding each record's key,
            rendered with str() so compound and Pointer keys share one dtype.

    Returns:
        pl.DataFrame: One column per schema column (plus the key column).
    """
    recs = list(records)
    series = [to_series(col) for col in columns_from_records(recs, descriptor).values()]
    if include_key:
        series.insert(0, pl.Series(KEY_COLUMN, [str(r.key) for r in recs], dtype=pl.Utf8))
    return pl.DataFrame(series)
