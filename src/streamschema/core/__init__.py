"""
Core package aggregator for streamschema contracts (type tags, coercion rules,
column definitions, schema descriptors, hashing, errors).

## Contracts
- dtypes: TypeTag closed set, Pointer, `resolve_dtype`.
- registry: TypeRegistry coercion policy.
- columns: ColumnDefinition, `column_definition`, ColumnOptions.
- schema: SchemaDescriptor and the builder / dict / types / class construction paths.
- hashing: canonical JSON and SHA-256 helpers backing Pointer and content keys.
- errors: SchemaDefinitionError, ValidationError, MissingFieldError, TypeCoercionError.

## Notes
- Zero-IO policy: stdlib + pydantic only; no polars import at this layer.
- Descriptors and registries are immutable and safe to share across threads.

## Examples
```python
from streamschema.core import INT, FLOAT, schema_builder

desc = schema_builder([("col_a", INT, {"primary_key": True}), ("col_b", FLOAT)])
{n: str(t) for n, t in desc.typehints().items()}  # {'col_a': 'integer', 'col_b': 'float'}
```
"""

from __future__ import annotations

from .columns import NO_DEFAULT, ColumnDefinition, ColumnOptions, column_definition
from .dtypes import ANY, BOOL, FLOAT, INT, POINTER, STR, Kind, Pointer, TypeTag, optional, resolve_dtype
from .errors import (
    ConfigError,
    MissingFieldError,
    SchemaDefinitionError,
    StreamSchemaError,
    TypeCoercionError,
    ValidationError,
)
from .registry import DEFAULT_REGISTRY, TypeRegistry, is_key_value
from .schema import (
    SchemaDescriptor,
    schema_builder,
    schema_from_class,
    schema_from_dict,
    schema_from_types,
)

__all__ = [
    "ANY",
    "BOOL",
    "FLOAT",
    "INT",
    "POINTER",
    "STR",
    "Kind",
    "Pointer",
    "TypeTag",
    "optional",
    "resolve_dtype",
    "NO_DEFAULT",
    "ColumnDefinition",
    "ColumnOptions",
    "column_definition",
    "DEFAULT_REGISTRY",
    "TypeRegistry",
    "is_key_value",
    "SchemaDescriptor",
    "schema_builder",
    "schema_from_class",
    "schema_from_dict",
    "schema_from_types",
    "StreamSchemaError",
    "SchemaDefinitionError",
    "ValidationError",
    "MissingFieldError",
    "TypeCoercionError",
    "ConfigError",
]
