"""
Coercion and validation rules per TypeTag.

TypeRegistry maps each Kind to a coercion rule. It is a frozen value object, so
one registry can be shared by any number of validator workers.

Rules
- Integer: int (bool rejected). Integral-valued floats convert losslessly;
  non-integral floats only when truncate_float_to_int=True (truncation toward
  zero). NaN and infinities are always rejected.
- Float: float, or int widened to float (bool rejected; ints beyond float
  range are rejected rather than overflowing).
- String: str only. Boolean: bool only. Pointer: Pointer only.
- Any: pass-through, no checks.
- Optional(T): None, or whatever T accepts.
- Strings never auto-coerce, with one opt-in exception: coerce_string_keys=True
  parses numeric strings for Integer/Float primary-key columns.

Primary-key values must additionally be hashable and ordered
(see `is_key_value`).
"""

from __future__ import annotations

import math
import numbers
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .dtypes import Kind, Pointer, TypeTag
from .errors import TypeCoercionError

__all__ = [
    "TypeRegistry",
    "DEFAULT_REGISTRY",
    "is_key_value",
    "parse_int_literal",
    "parse_float_literal",
]


class _Reject(Exception):
    """Internal signal carrying a human-readable reason for a failed coercion."""


_INT_LITERAL = re.compile(r"[+-]?[0-9]+")
_FLOAT_LITERAL = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


def parse_int_literal(text: str) -> int:
    """
    Parse a plain ASCII integer literal (optional sign, digits 0-9).

    Surrounding whitespace is ignored. Underscore separators and non-ASCII
    digits, which int() would accept, are rejected.

    Raises:
        ValueError: If `text` is not an integer literal.
    """
    s = text.strip()
    if not _INT_LITERAL.fullmatch(s):
        raise ValueError(f"not an integer literal: {text!r}")
    return int(s)


def parse_float_literal(text: str) -> float:
    """
    Parse a plain ASCII decimal or exponent float literal, or inf/nan.

    Raises:
        ValueError: If `text` is not a float literal.
    """
    s = text.strip()
    if not _FLOAT_LITERAL.fullmatch(s):
        raise ValueError(f"not a float literal: {text!r}")
    return float(s)


def is_key_value(value: Any) -> bool:
    """
    Return True if `value` is usable as (part of) a row key.

    Key values are hashable and ordered: int, str, Pointer, datetime, Decimal
    and the like qualify, as do tuples of key values. None, NaN, unhashable
    values (dict, list) and values without an ordering are not key values.

    Examples:
        >>> import datetime
        >>> is_key_value(datetime.date(2024, 1, 1)), is_key_value([1])
        (True, False)
    """
    if value is None:
        return False
    if isinstance(value, tuple):
        return all(is_key_value(v) for v in value)
    try:
        hash(value)
        if value != value:  # NaN-like
            return False
        value < value  # noqa: B015
    except (TypeError, ArithmeticError):
        # ArithmeticError: decimal.InvalidOperation on signaling NaN
        return False
    return True


@dataclass(frozen=True)
class TypeRegistry:
    """
    Coercion policy shared by validators and cast engines.

    Attributes:
        truncate_float_to_int (bool): Allow lossy float -> int (default False).
        coerce_string_keys (bool): Parse numeric strings for Integer/Float
            primary-key columns (default False).

    Examples:
        >>> from streamschema.core.registry import TypeRegistry
        >>> from streamschema.core.dtypes import INT, FLOAT
        >>> reg = TypeRegistry()
        >>> reg.coerce(2, FLOAT)
        2.0
        >>> reg.coerce(4.0, INT)
        4
        >>> TypeRegistry(truncate_float_to_int=True).coerce(2.7, INT)
        2
    """

    truncate_float_to_int: bool = False
    coerce_string_keys: bool = False

    def coerce(
        self,
        value: Any,
        dtype: TypeTag,
        *,
        column: str | None = None,
        primary_key: bool = False,
    ) -> Any:
        """
        Coerce one value to `dtype`.

        Args:
            value (Any): Raw value.
            dtype (TypeTag): Target tag.
            column (str | None): Column name used in error messages.
            primary_key (bool): Apply primary-key rules (string parsing policy
                and the hashable/ordered requirement).

        Returns:
            Any: The coerced value.

        Raises:
            TypeCoercionError: If the value is not coercible.
        """
        try:
            out = self._coerce(value, dtype, primary_key)
        except _Reject as rej:
            raise TypeCoercionError(
                column, expected=str(dtype), value=value, reason=str(rej) or None
            ) from None
        if primary_key and not is_key_value(out):
            raise TypeCoercionError(
                column,
                expected=str(dtype),
                value=value,
                reason="primary key values must be hashable and ordered",
            )
        return out

    def accepts(self, value: Any, dtype: TypeTag) -> bool:
        """Return True if `value` is coercible to `dtype` under this policy."""
        try:
            self._coerce(value, dtype, False)
        except _Reject:
            return False
        return True

    # ------------------------------------------------------------------
    # rules
    # ------------------------------------------------------------------

    def _coerce(self, value: Any, dtype: TypeTag, primary_key: bool) -> Any:
        if dtype.kind is Kind.OPTIONAL:
            if value is None:
                return None
            assert dtype.inner is not None
            return self._coerce(value, dtype.inner, primary_key)
        rule = _RULES[dtype.kind]
        return rule(self, value, primary_key)

    def _to_int(self, value: Any, primary_key: bool) -> int:
        if isinstance(value, bool):
            raise _Reject("booleans are not integers")
        if isinstance(value, numbers.Integral):
            return int(value)
        if isinstance(value, numbers.Real):
            try:
                f = float(value)
            except OverflowError:
                raise _Reject("out of float range") from None
            if not math.isfinite(f):
                raise _Reject("non-finite float")
            if f.is_integer():
                return int(f)
            if self.truncate_float_to_int:
                return int(f)
            raise _Reject("would lose precision (truncate_float_to_int is disabled)")
        if isinstance(value, str) and primary_key and self.coerce_string_keys:
            try:
                return parse_int_literal(value)
            except ValueError:
                raise _Reject("string is not an integer literal") from None
        raise _Reject("")

    def _to_float(self, value: Any, primary_key: bool) -> float:
        if isinstance(value, bool):
            raise _Reject("booleans are not floats")
        if isinstance(value, numbers.Real):
            try:
                return float(value)
            except OverflowError:
                raise _Reject("out of float range") from None
        if isinstance(value, str) and primary_key and self.coerce_string_keys:
            try:
                return parse_float_literal(value)
            except ValueError:
                raise _Reject("string is not a float literal") from None
        raise _Reject("")

    def _to_str(self, value: Any, primary_key: bool) -> str:
        if isinstance(value, str):
            return value
        raise _Reject("")

    def _to_bool(self, value: Any, primary_key: bool) -> bool:
        if isinstance(value, bool):
            return value
        raise _Reject("")

    def _to_pointer(self, value: Any, primary_key: bool) -> Pointer:
        if isinstance(value, Pointer):
            return value
        raise _Reject("")

    def _to_any(self, value: Any, primary_key: bool) -> Any:
        return value


_RULES: dict[Kind, Callable[[TypeRegistry, Any, bool], Any]] = {
    Kind.INTEGER: TypeRegistry._to_int,
    Kind.FLOAT: TypeRegistry._to_float,
    Kind.STRING: TypeRegistry._to_str,
    Kind.BOOLEAN: TypeRegistry._to_bool,
    Kind.POINTER: TypeRegistry._to_pointer,
    Kind.ANY: TypeRegistry._to_any,
}

DEFAULT_REGISTRY = TypeRegistry()
