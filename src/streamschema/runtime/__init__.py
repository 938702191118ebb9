"""
streamschema.runtime: record validation, key synthesis, casts and materialization.

## Responsibilities
- Validate raw connector records against streamschema.core descriptors into TypedRecords.
- Synthesize row keys for unkeyed schemas (content hash or thread-safe sequence).
- Count validated/rejected records through an injected MetricsSink.
- Cast and type-override typed columns; materialize records as Polars frames.

## Public API
- ValidatorSettings: coercion and key policy (env > TOML > defaults).
- SchemaValidator, validate_record: per-record validation returning ValidationResult.
- TypedRecord, ValidationResult: validated row and tagged outcome.
- TypedColumn, CastEngine, cast, apply_with_type, parse: post hoc type operations.
- CounterSink, NullSink, MetricsSink: counter sinks.
- to_frame, to_series, columns_from_records, polars_schema: Polars materialization.

## Import DAG discipline
- Depends on stdlib, pydantic (via core), polars, and streamschema.core.*.
- streamschema.core MUST NOT import this package.

## Examples
```python
from streamschema.core import INT, FLOAT, schema_builder
from streamschema.runtime import SchemaValidator, CounterSink, to_frame

desc = schema_builder([("col_a", INT, {"primary_key": True}), ("col_b", FLOAT)])
sink = CounterSink()
validator = SchemaValidator(desc, metrics=sink)
results = list(validator.validate_many([{"col_a": 1, "col_b": 2}, {"col_b": 3.5}]))
good = [r.record for r in results if r.ok]
df = to_frame(good, desc)
sink.get("records_rejected", kind="MissingFieldError")  # 1
```
"""

from __future__ import annotations

from .cast import CastEngine, TypedColumn, apply_with_type, cast, parse
from .config import ValidatorSettings
from .frames import columns_from_records, polars_schema, to_frame, to_series
from .keys import HashKeyFactory, KeyFactory, SequenceKeyFactory
from .metrics import CounterSink, MetricsSink, NullSink
from .records import TypedRecord, ValidationResult
from .validate import SchemaValidator, validate_record

__all__ = [
    "ValidatorSettings",
    "SchemaValidator",
    "validate_record",
    "TypedRecord",
    "ValidationResult",
    "KeyFactory",
    "HashKeyFactory",
    "SequenceKeyFactory",
    "MetricsSink",
    "CounterSink",
    "NullSink",
    "TypedColumn",
    "CastEngine",
    "cast",
    "apply_with_type",
    "parse",
    "columns_from_records",
    "polars_schema",
    "to_frame",
    "to_series",
]
