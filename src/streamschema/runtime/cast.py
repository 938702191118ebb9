"""
Post hoc type operations on already typed columns.

- cast(target, column): re-coerce every value with the TypeRegistry rules.
  Eager: the first non-coercible row aborts the cast before a new column is
  built, and the error names that row. Strings are not coerced (use parse).
- apply_with_type(transform, target, column): map `transform` over the values
  and tag the result as `target` with no runtime checks. The caller asserts
  the result type; this is the escape hatch for transforms whose result type
  cannot be inferred.
- parse(target, column): explicit string parsing for INT / FLOAT / BOOL targets.
  Only plain ASCII literals parse: "1_000" and non-ASCII digits are rejected.

All operations are pure: the source column is never modified.

Examples
--------
>>> from streamschema.core.dtypes import INT, FLOAT
>>> col = TypedColumn("n", INT, (1, 2, 3))
>>> cast(FLOAT, col).values
(1.0, 2.0, 3.0)
>>> cast(INT, cast(FLOAT, col)) == col
True
>>> apply_with_type(lambda v: v / 2, INT, col).values
(0.5, 1.0, 1.5)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from streamschema.core.dtypes import Kind, TypeTag, resolve_dtype
from streamschema.core.errors import TypeCoercionError
from streamschema.core.registry import DEFAULT_REGISTRY, TypeRegistry, parse_float_literal, parse_int_literal

logger = logging.getLogger(__name__)

__all__ = [
    "TypedColumn",
    "CastEngine",
    "cast",
    "apply_with_type",
    "parse",
]

_BOOL_LITERALS: dict[str, bool] = {
    "true": True,
    "t": True,
    "yes": True,
    "y": True,
    "1": True,
    "false": False,
    "f": False,
    "no": False,
    "n": False,
    "0": False,
}


@dataclass(frozen=True)
class TypedColumn:
    """
    An immutable named column of values tagged with one TypeTag.

    Attributes:
        name (str): Column name.
        dtype (TypeTag): Declared type of every value.
        values (tuple[Any, ...]): Values in row order.
    """

    name: str
    dtype: TypeTag
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def __getitem__(self, row: int) -> Any:
        return self.values[row]

    @classmethod
    def of(cls, name: str, dtype: Any, values: Iterable[Any]) -> TypedColumn:
        """Build a column resolving `dtype` from any accepted spelling."""
        return cls(name, resolve_dtype(dtype), tuple(values))


class CastEngine:
    """
    Cast / type-override operations bound to one coercion policy.

    Args:
        registry (TypeRegistry | None): Coercion rules (default: DEFAULT_REGISTRY).
    """

    def __init__(self, registry: TypeRegistry | None = None) -> None:
        self.registry = registry or DEFAULT_REGISTRY

    def cast(self, target_type: Any, column: TypedColumn) -> TypedColumn:
        """
        Reinterpret every value of `column` as `target_type`.

        Raises:
            TypeCoercionError: For the first non-coercible value, with `row` set.
        """
        target = resolve_dtype(target_type)
        out = []
        for row, value in enumerate(column.values):
            try:
                out.append(self.registry.coerce(value, target, column=column.name))
            except TypeCoercionError as exc:
                raise TypeCoercionError(
                    column.name, expected=str(target), value=value, row=row
                ) from exc
        logger.debug("cast column %s %s -> %s (%d rows)", column.name, column.dtype, target, len(out))
        return TypedColumn(column.name, target, tuple(out))

    def apply_with_type(
        self,
        transform: Callable[[Any], Any],
        target_type: Any,
        column: TypedColumn,
    ) -> TypedColumn:
        """
        Map `transform` over `column` and tag the result as `target_type`.

        No value is checked against `target_type`; exceptions raised by
        `transform` itself propagate unchanged.
        """
        target = resolve_dtype(target_type)
        return TypedColumn(column.name, target, tuple(transform(v) for v in column.values))

    def parse(self, target_type: Any, column: TypedColumn) -> TypedColumn:
        """
        Parse string values into INT, FLOAT or BOOL (optionally Optional).

        None is kept for Optional targets; non-string values go through the
        regular cast rules.

        Raises:
            TypeCoercionError: For the first unparseable value, with `row` set.
        """
        target = resolve_dtype(target_type)
        base = target.unoptionalize()
        if base.kind not in (Kind.INTEGER, Kind.FLOAT, Kind.BOOLEAN):
            raise TypeCoercionError(
                column.name,
                expected=str(target),
                value=column.dtype,
                reason="parse supports integer, float and boolean targets",
            )
        out = []
        for row, value in enumerate(column.values):
            try:
                if isinstance(value, str):
                    out.append(_parse_one(value, base))
                else:
                    out.append(self.registry.coerce(value, target, column=column.name))
            except (ValueError, TypeCoercionError) as exc:
                raise TypeCoercionError(
                    column.name, expected=str(target), value=value, row=row
                ) from exc
        return TypedColumn(column.name, target, tuple(out))


def _parse_one(text: str, base: TypeTag) -> Any:
    s = text.strip()
    if base.kind is Kind.INTEGER:
        return parse_int_literal(s)
    if base.kind is Kind.FLOAT:
        return parse_float_literal(s)
    try:
        return _BOOL_LITERALS[s.lower()]
    except KeyError:
        raise ValueError(f"not a boolean literal: {text!r}") from None


_DEFAULT_ENGINE = CastEngine()


def cast(target_type: Any, column: TypedColumn) -> TypedColumn:
    """Module-level cast using the default registry."""
    return _DEFAULT_ENGINE.cast(target_type, column)


def apply_with_type(transform: Callable[[Any], Any], target_type: Any, column: TypedColumn) -> TypedColumn:
    """Module-level apply_with_type (no runtime checks)."""
    return _DEFAULT_ENGINE.apply_with_type(transform, target_type, column)


def parse(target_type: Any, column: TypedColumn) -> TypedColumn:
    """Module-level parse using the default registry."""
    return _DEFAULT_ENGINE.parse(target_type, column)
