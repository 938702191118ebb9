import pytest

from streamschema.core.dtypes import ANY, BOOL, FLOAT, INT, STR, optional
from streamschema.core.errors import TypeCoercionError
from streamschema.core.registry import TypeRegistry
from streamschema.runtime.cast import CastEngine, TypedColumn, apply_with_type, cast, parse


def test_int_float_int_round_trip_is_identity() -> None:
    col = TypedColumn("n", INT, (1, 2, -3))
    as_float = cast(FLOAT, col)
    assert as_float.dtype == FLOAT
    assert all(isinstance(v, float) for v in as_float)
    assert cast(INT, as_float) == col


def test_cast_is_eager_and_names_first_offending_row() -> None:
    col = TypedColumn("x", FLOAT, (1.0, 2.5, 3.5))
    with pytest.raises(TypeCoercionError) as ei:
        cast(INT, col)
    assert ei.value.row == 1
    assert ei.value.column == "x"
    assert "row 1" in str(ei.value)
    # source column untouched
    assert col.values == (1.0, 2.5, 3.5) and col.dtype == FLOAT


def test_cast_with_truncating_engine() -> None:
    engine = CastEngine(TypeRegistry(truncate_float_to_int=True))
    assert engine.cast(INT, TypedColumn("x", FLOAT, (1.9, -1.9))).values == (1, -1)


def test_cast_does_not_parse_strings() -> None:
    with pytest.raises(TypeCoercionError):
        cast(INT, TypedColumn("s", STR, ("1",)))


def test_cast_to_optional_keeps_nulls() -> None:
    col = TypedColumn("n", optional(INT), (1, None))
    assert cast(optional(FLOAT), col).values == (1.0, None)
    with pytest.raises(TypeCoercionError):
        cast(FLOAT, col)


def test_apply_with_type_never_checks_values() -> None:
    col = TypedColumn("n", INT, (1, 2))
    out = apply_with_type(lambda v: v / 4, INT, col)
    assert out.dtype == INT
    assert out.values == (0.25, 0.5)
    assert col.values == (1, 2)


def test_apply_with_type_propagates_transform_errors() -> None:
    col = TypedColumn("n", ANY, (1, "a"))
    with pytest.raises(TypeError):
        apply_with_type(lambda v: v + 1, INT, col)


def test_apply_with_type_rejects_callable_target() -> None:
    from streamschema.core.errors import SchemaDefinitionError

    with pytest.raises(SchemaDefinitionError):
        apply_with_type(str, any, TypedColumn("n", INT, (1,)))


def test_parse_strings_explicitly() -> None:
    assert parse(INT, TypedColumn("s", STR, (" 1", "2"))).values == (1, 2)
    assert parse(FLOAT, TypedColumn("s", STR, ("1.5",))).values == (1.5,)
    assert parse(BOOL, TypedColumn("s", STR, ("yes", "False", "0"))).values == (True, False, False)
    assert parse(optional(INT), TypedColumn("s", optional(STR), ("3", None))).values == (3, None)


def test_parse_errors_name_row() -> None:
    with pytest.raises(TypeCoercionError) as ei:
        parse(INT, TypedColumn("s", STR, ("1", "x")))
    assert ei.value.row == 1
    with pytest.raises(TypeCoercionError):
        parse(STR, TypedColumn("s", STR, ("1",)))


def test_typed_column_of_resolves_dtype() -> None:
    col = TypedColumn.of("n", "int?", [1, None])
    assert col.dtype == optional(INT)
    assert len(col) == 2 and col[1] is None


def test_cast_rejects_ints_beyond_float_range() -> None:
    with pytest.raises(TypeCoercionError) as ei:
        cast(FLOAT, TypedColumn("n", INT, (1, 10**400)))
    assert ei.value.row == 1
    assert ei.value.column == "n"


@pytest.mark.parametrize("text", ["1_000", "١٢", "+-1", ""])
def test_parse_int_accepts_plain_ascii_digits_only(text: str) -> None:
    with pytest.raises(TypeCoercionError) as ei:
        parse(INT, TypedColumn("s", STR, ("7", text)))
    assert ei.value.row == 1


@pytest.mark.parametrize("text", ["1_0.5", "١.٥", "0x1p3", "1.5.2"])
def test_parse_float_accepts_plain_ascii_literals_only(text: str) -> None:
    with pytest.raises(TypeCoercionError):
        parse(FLOAT, TypedColumn("s", STR, (text,)))


def test_parse_float_literal_forms() -> None:
    col = TypedColumn("s", STR, ("-1", ".5", "2.", "1e3", "-2.5E-1", "inf"))
    assert parse(FLOAT, col).values == (-1.0, 0.5, 2.0, 1000.0, -0.25, float("inf"))
