import datetime
from typing import Any

import pytest

from streamschema.core.columns import column_definition
from streamschema.core.dtypes import ANY, FLOAT, INT, STR, optional
from streamschema.core.errors import MissingFieldError, TypeCoercionError, ValidationError
from streamschema.core.schema import schema_builder, schema_from_types
from streamschema.runtime.config import ValidatorSettings
from streamschema.runtime.validate import SchemaValidator, validate_record


def _orders():
    return schema_builder(
        [
            ("col_a", INT, {"primary_key": True}),
            ("col_b", FLOAT),
        ],
        name="orders",
    )


def test_valid_record_drops_extra_fields() -> None:
    desc = _orders()
    res = SchemaValidator(desc).validate({"col_a": 3, "col_b": 2, "unexpected": "x"})
    assert res.ok and res.error is None
    rec = res.record
    assert set(rec.keys()) == set(desc.column_names())
    assert rec.as_dict() == {"col_a": 3, "col_b": 2.0}
    assert isinstance(rec["col_b"], float)
    assert rec.key == 3
    assert dict(rec.dtypes) == {"col_a": INT, "col_b": FLOAT}


def test_string_primary_key_rejected_by_default() -> None:
    res = SchemaValidator(_orders()).validate({"col_a": "3", "col_b": 2})
    assert not res.ok
    assert isinstance(res.error, TypeCoercionError)
    assert res.error.column == "col_a"
    assert res.error_kind == "TypeCoercionError"


def test_string_primary_key_coerced_when_enabled() -> None:
    settings = ValidatorSettings(coerce_string_keys=True)
    rec = SchemaValidator(_orders(), settings=settings).validate_or_raise({"col_a": "3", "col_b": 2})
    assert rec.as_dict() == {"col_a": 3, "col_b": 2.0}
    assert rec.key == 3


def test_default_fills_missing_column() -> None:
    desc = schema_builder([("col_a", INT, {"default_value": 0}), ("col_b", STR)])
    rec = SchemaValidator(desc).validate_or_raise({"col_b": "x"})
    assert rec["col_a"] == 0


def test_optional_and_any_missing_become_null() -> None:
    desc = schema_builder([("a", optional(INT)), ("b", ANY), ("c", STR)])
    rec = SchemaValidator(desc).validate_or_raise({"c": "x"})
    assert rec["a"] is None and rec["b"] is None


def test_missing_required_column_names_it() -> None:
    res = SchemaValidator(_orders()).validate({"col_a": 1})
    assert isinstance(res.error, MissingFieldError)
    assert res.error.column == "col_b"
    assert "col_b" in str(res.error)
    with pytest.raises(MissingFieldError):
        res.unwrap()


def test_explicit_null_for_required_column_is_coercion_error() -> None:
    res = SchemaValidator(_orders()).validate({"col_a": 1, "col_b": None})
    assert isinstance(res.error, TypeCoercionError)


def test_coercion_error_details() -> None:
    res = SchemaValidator(_orders()).validate({"col_a": 1, "col_b": "2.5"})
    err = res.error
    assert isinstance(err, TypeCoercionError) and isinstance(err, ValidationError)
    assert err.column == "col_b"
    assert err.expected == "float"
    assert err.value == "2.5"
    assert "str" in str(err)


def test_rename_from_reads_source_field() -> None:
    desc = schema_builder([("col_a", INT, column_definition(name="ColumnA"))])
    validator = SchemaValidator(desc)
    assert validator.validate_or_raise({"ColumnA": 5})["col_a"] == 5
    res = validator.validate({"col_a": 5})
    assert isinstance(res.error, MissingFieldError)
    assert "ColumnA" in str(res.error)


def test_float_to_int_policy_applies_per_validator() -> None:
    desc = schema_from_types(n=int)
    assert not SchemaValidator(desc).validate({"n": 2.5}).ok
    assert SchemaValidator(desc).validate_or_raise({"n": 2.0})["n"] == 2
    truncating = SchemaValidator(desc, settings=ValidatorSettings(truncate_float_to_int=True))
    assert truncating.validate_or_raise({"n": 2.5})["n"] == 2


def test_unhashable_primary_key_value_is_rejected() -> None:
    desc = schema_builder([("k", ANY, {"primary_key": True})])
    res = SchemaValidator(desc).validate({"k": {"nested": 1}})
    assert isinstance(res.error, TypeCoercionError)
    assert res.error.column == "k"


def test_datetime_primary_key_is_accepted() -> None:
    desc = schema_builder([("ts", ANY, {"primary_key": True}), ("v", FLOAT)])
    ts = datetime.datetime(2024, 5, 1, 9, 30)
    rec = SchemaValidator(desc).validate_or_raise({"ts": ts, "v": 1})
    assert rec.key == ts
    assert rec["v"] == 1.0


def test_float_beyond_range_is_a_coercion_error() -> None:
    res = SchemaValidator(schema_from_types(x=FLOAT)).validate({"x": 10**400})
    assert not res.ok
    assert isinstance(res.error, TypeCoercionError)
    assert res.error.column == "x"
    assert "out of float range" in str(res.error)


@pytest.mark.parametrize("raw", [None, [("a", 1)], "a=1"])
def test_non_mapping_input_is_a_validation_error(raw: Any) -> None:
    res = SchemaValidator(_orders()).validate(raw)
    assert not res.ok
    assert isinstance(res.error, ValidationError)


def test_validate_many_is_lazy_and_ordered() -> None:
    validator = SchemaValidator(_orders())
    raws = iter([{"col_a": 1, "col_b": 1}, {"col_a": 2}, {"col_a": 3, "col_b": 3}])
    results = validator.validate_many(raws)
    first = next(results)
    assert first.ok and first.record.key == 1
    rest = list(results)
    assert [r.ok for r in rest] == [False, True]
    assert rest[0].raw == {"col_a": 2}


def test_validate_record_one_shot() -> None:
    assert validate_record({"col_a": 1, "col_b": 0.5}, _orders()).ok


def test_results_require_exactly_one_outcome() -> None:
    from streamschema.runtime.records import ValidationResult

    with pytest.raises(ValueError):
        ValidationResult()
