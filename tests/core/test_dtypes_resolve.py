from typing import Any, Optional

import pytest

from streamschema.core.dtypes import (
    ANY,
    BOOL,
    FLOAT,
    INT,
    POINTER,
    STR,
    Kind,
    Pointer,
    TypeTag,
    optional,
    resolve_dtype,
)
from streamschema.core.errors import SchemaDefinitionError


@pytest.mark.parametrize(
    "spec,expected",
    [
        (int, INT),
        (float, FLOAT),
        (str, STR),
        (bool, BOOL),
        (object, ANY),
        (Any, ANY),
        (Pointer, POINTER),
        ("i64", INT),
        ("F64", FLOAT),
        ("string", STR),
        ("boolean", BOOL),
        ("pointer", POINTER),
        ("int?", optional(INT)),
        ("optional[str]", optional(STR)),
        (Optional[int], optional(INT)),
        (float | None, optional(FLOAT)),
        (INT, INT),
    ],
)
def test_resolve_dtype_spellings(spec: Any, expected: TypeTag) -> None:
    assert resolve_dtype(spec) == expected


def test_optional_normalizes_nesting() -> None:
    assert optional(optional(INT)) == optional(INT)
    assert optional(ANY) is ANY
    assert str(optional(INT)) == "optional[integer]"
    assert optional(INT).unoptionalize() == INT
    assert optional(INT).nullable and ANY.nullable and not INT.nullable


def my_parser(value: str) -> int:
    return int(value)


@pytest.mark.parametrize("bad", [any, callable, my_parser, lambda v: v, print])
def test_bare_callables_are_rejected_with_any_hint(bad: Any) -> None:
    with pytest.raises(SchemaDefinitionError) as ei:
        resolve_dtype(bad)
    assert "typing.Any" in str(ei.value)


@pytest.mark.parametrize("bad", ["decimal", list, dict, int | str, None, 3])
def test_unrecognized_types_are_rejected(bad: Any) -> None:
    with pytest.raises(SchemaDefinitionError):
        resolve_dtype(bad)


def test_type_tag_inner_invariant() -> None:
    with pytest.raises(SchemaDefinitionError):
        TypeTag(Kind.OPTIONAL)
    with pytest.raises(SchemaDefinitionError):
        TypeTag(Kind.INTEGER, INT)
