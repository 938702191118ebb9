"""
Per-record schema validation.

Purpose
- Convert raw records (untyped mappings decoded by a connector) into
  TypedRecords according to a SchemaDescriptor, or reject them.

Source of truth (core)
- streamschema.core.schema.SchemaDescriptor describes columns/dtypes/defaults/keys.
- streamschema.core.registry.TypeRegistry holds the coercion rules.
- streamschema.core.errors provides MissingFieldError / TypeCoercionError.

Checks performed, per column in declaration order
- Resolve the raw value by `rename_from` (if set) or by the column name.
- Absent: default value, else null for Optional/Any columns, else MissingFieldError.
- Present: coerce via the registry; failure is a TypeCoercionError.
- Fields not declared in the schema are dropped silently.
- Key: primary-key values in declaration order, else a synthesized key.

Notes
- validate() never raises for bad records: it returns a ValidationResult and
  counts the outcome on the injected MetricsSink. Skip/log/halt policy belongs
  to the caller.
- No internal retries; each call is bounded by the column count.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from streamschema.core.dtypes import TypeTag
from streamschema.core.errors import MissingFieldError, ValidationError
from streamschema.core.registry import TypeRegistry
from streamschema.core.schema import SchemaDescriptor
from streamschema.core.typing import RawRecord

from .config import ValidatorSettings
from .keys import KeyFactory, make_key_factory, primary_key_of
from .metrics import RECORDS_REJECTED, RECORDS_VALIDATED, MetricsSink, NullSink
from .records import TypedRecord, ValidationResult

logger = logging.getLogger(__name__)

__all__ = [
    "SchemaValidator",
    "validate_record",
]

_ABSENT: Any = object()


class SchemaValidator:
    """
    Validates raw records against one SchemaDescriptor.

    Args:
        descriptor (SchemaDescriptor): Shared, immutable schema.
        settings (ValidatorSettings | None): Coercion and key policy; defaults
            to ValidatorSettings().
        registry (TypeRegistry | None): Overrides the registry built from settings.
        metrics (MetricsSink | None): Counter sink; defaults to NullSink.
        key_factory (KeyFactory | None): Overrides the synthesized-key factory
            (e.g. to share one SequenceKeyFactory across validators).

    Examples:
        >>> from streamschema.core import INT, FLOAT, schema_builder
        >>> desc = schema_builder([("col_a", INT, {"primary_key": True}), ("col_b", FLOAT)])
        >>> res = SchemaValidator(desc).validate({"col_a": 3, "col_b": 2, "extra": "x"})
        >>> res.ok, res.record.as_dict(), res.record.key
        (True, {'col_a': 3, 'col_b': 2.0}, 3)
    """

    def __init__(
        self,
        descriptor: SchemaDescriptor,
        *,
        settings: ValidatorSettings | None = None,
        registry: TypeRegistry | None = None,
        metrics: MetricsSink | None = None,
        key_factory: KeyFactory | None = None,
    ) -> None:
        self.descriptor = descriptor
        self.settings = settings or ValidatorSettings()
        self.registry = registry or self.settings.registry()
        self.metrics: MetricsSink = metrics or NullSink()
        self._pk_columns = descriptor.primary_key_columns()
        self._dtypes: dict[str, TypeTag] = descriptor.typehints()
        if self._pk_columns:
            self._key_factory: KeyFactory | None = None
        else:
            self._key_factory = key_factory or make_key_factory(self.settings.key_policy, descriptor)

    def _resolve(self, raw: RawRecord) -> TypedRecord:
        if not isinstance(raw, Mapping):
            raise ValidationError(f"raw record must be a mapping, got {type(raw).__name__}")
        values: dict[str, Any] = {}
        for col in self.descriptor.columns:
            assert col.name is not None and col.dtype is not None
            value = raw.get(col.source_name, _ABSENT)
            if value is _ABSENT:
                if col.has_default:
                    values[col.name] = col.default_value
                    continue
                if col.dtype.nullable:
                    value = None
                else:
                    raise MissingFieldError(col.name, source=col.source_name)
            values[col.name] = self.registry.coerce(
                value, col.dtype, column=col.name, primary_key=col.primary_key
            )
        if self._key_factory is None:
            key = primary_key_of(values, self._pk_columns)
        else:
            key = self._key_factory(values)
        return TypedRecord.create(values, self._dtypes, key)

    def validate(self, raw: RawRecord) -> ValidationResult:
        """
        Validate one raw record.

        Args:
            raw (RawRecord): Field name -> untyped value.

        Returns:
            ValidationResult: `record` on success; `error` (a ValidationError
            subclass naming the column) otherwise.
        """
        try:
            record = self._resolve(raw)
        except ValidationError as exc:
            kind = type(exc).__name__
            self.metrics.increment(RECORDS_REJECTED, kind=kind)
            logger.debug("rejected record for schema %s: %s", self.descriptor.name, exc)
            return ValidationResult(error=exc, raw=raw)
        self.metrics.increment(RECORDS_VALIDATED)
        return ValidationResult(record=record, raw=raw)

    def validate_or_raise(self, raw: RawRecord) -> TypedRecord:
        """Validate one record, raising its ValidationError on failure."""
        return self.validate(raw).unwrap()

    def validate_many(self, raws: Iterable[RawRecord]) -> Iterator[ValidationResult]:
        """Lazily validate a stream of raw records in arrival order."""
        for raw in raws:
            yield self.validate(raw)


def validate_record(
    raw: RawRecord,
    descriptor: SchemaDescriptor,
    *,
    settings: ValidatorSettings | None = None,
) -> ValidationResult:
    """
    One-shot validation with a throwaway validator.

    Notes:
        Under the "sequence" key policy every call starts a new counter, so keep
        a SchemaValidator for streams of unkeyed records.
    """
    return SchemaValidator(descriptor, settings=settings).validate(raw)
