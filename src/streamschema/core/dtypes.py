"""
Type tags for streaming-table columns and the Pointer row-identifier type.

Defines the closed set of semantic column types used for validation and
coercion, plus `resolve_dtype`, which turns the spellings users write in schema
definitions (builtins, typing forms, short string names) into a TypeTag.

Responsibilities
- Define TypeTag (frozen, hashable) and the module-level singletons.
- Define Pointer, the primary-key-derived row identifier.
- Reject ambiguous dtype spellings at definition time, notably bare callables
  passed where `typing.Any` was meant.

Type set
--------
| Tag               | Python values accepted (before coercion)          |
|-------------------|---------------------------------------------------|
| INT               | int (not bool); integral float                    |
| FLOAT             | float, int (not bool)                             |
| STR               | str                                               |
| BOOL              | bool                                              |
| ANY               | everything, including None                        |
| optional(T)       | None, or whatever T accepts                       |
| POINTER           | Pointer                                           |

Examples
--------
>>> from typing import Optional
>>> from streamschema.core.dtypes import resolve_dtype, INT, optional
>>> resolve_dtype(int) == INT
True
>>> resolve_dtype(Optional[int]) == optional(INT)
True
>>> str(resolve_dtype("float?"))
'optional[float]'
"""

from __future__ import annotations

import functools
import inspect
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import SchemaDefinitionError
from .hashing import POINTER_DIGEST_SIZE, hash_values

__all__ = [
    "Kind",
    "TypeTag",
    "Pointer",
    "INT",
    "FLOAT",
    "STR",
    "BOOL",
    "ANY",
    "POINTER",
    "optional",
    "resolve_dtype",
]


class Kind(str, Enum):
    """Primitive kinds; values are the lower-case names used in messages and config."""

    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    BOOLEAN = "boolean"
    ANY = "any"
    OPTIONAL = "optional"
    POINTER = "pointer"


@dataclass(frozen=True)
class TypeTag:
    """
    Immutable semantic type of a column.

    Attributes:
        kind (Kind): Primitive kind.
        inner (TypeTag | None): Wrapped tag; set only when kind is OPTIONAL.

    Notes:
        Build optional tags with `optional()` so nesting is normalized.
    """

    kind: Kind
    inner: TypeTag | None = None

    def __post_init__(self) -> None:
        if (self.kind is Kind.OPTIONAL) != (self.inner is not None):
            raise SchemaDefinitionError(
                f"type tag {self.kind.value!r} {'requires' if self.inner is None else 'does not take'} an inner type"
            )

    def __str__(self) -> str:
        if self.inner is not None:
            return f"{self.kind.value}[{self.inner}]"
        return self.kind.value

    @property
    def is_optional(self) -> bool:
        return self.kind is Kind.OPTIONAL

    @property
    def nullable(self) -> bool:
        """True when None is an acceptable value (Optional or Any)."""
        return self.kind in (Kind.OPTIONAL, Kind.ANY)

    def unoptionalize(self) -> TypeTag:
        """Strip one Optional wrapper, if present."""
        return self.inner if self.inner is not None else self


INT = TypeTag(Kind.INTEGER)
FLOAT = TypeTag(Kind.FLOAT)
STR = TypeTag(Kind.STRING)
BOOL = TypeTag(Kind.BOOLEAN)
ANY = TypeTag(Kind.ANY)
POINTER = TypeTag(Kind.POINTER)


def optional(tag: TypeTag) -> TypeTag:
    """
    Wrap a tag as Optional, collapsing redundant nesting.

    `optional(optional(T))` is `optional(T)` and `optional(ANY)` is `ANY`.
    """
    if tag.kind in (Kind.OPTIONAL, Kind.ANY):
        return tag
    return TypeTag(Kind.OPTIONAL, tag)


@dataclass(frozen=True, order=True)
class Pointer:
    """
    Row identifier derived from primary-key values.

    Attributes:
        digest (str): Lower-case hex digest (POINTER_DIGEST_SIZE characters).

    Examples:
        >>> from streamschema.core.dtypes import Pointer
        >>> Pointer.from_values(3) == Pointer.from_values(3)
        True
        >>> str(Pointer.from_values(3)).startswith("^")
        True
    """

    digest: str

    def __post_init__(self) -> None:
        d = self.digest
        if len(d) != POINTER_DIGEST_SIZE or any(c not in "0123456789abcdef" for c in d):
            raise ValueError(f"pointer digest must be {POINTER_DIGEST_SIZE} lower hex chars, got {d!r}")

    def __str__(self) -> str:
        return f"^{self.digest}"

    @classmethod
    def from_values(cls, *values: Any) -> Pointer:
        """Derive a pointer from an ordered sequence of key values."""
        return cls(hash_values(values))


_NAMED: dict[str, TypeTag] = {
    "int": INT,
    "integer": INT,
    "i64": INT,
    "float": FLOAT,
    "f64": FLOAT,
    "str": STR,
    "string": STR,
    "bool": BOOL,
    "boolean": BOOL,
    "any": ANY,
    "pointer": POINTER,
}

_BUILTINS: dict[Any, TypeTag] = {
    int: INT,
    float: FLOAT,
    str: STR,
    bool: BOOL,
    object: ANY,
    Pointer: POINTER,
}


def _is_bare_callable(obj: Any) -> bool:
    return (
        inspect.isfunction(obj)
        or inspect.isbuiltin(obj)
        or inspect.ismethod(obj)
        or isinstance(obj, functools.partial)
    )


def _from_name(name: str) -> TypeTag:
    s = name.strip().lower()
    if s.endswith("?"):
        return optional(_from_name(s[:-1]))
    if s.startswith("optional[") and s.endswith("]"):
        return optional(_from_name(s[len("optional[") : -1]))
    try:
        return _NAMED[s]
    except KeyError:
        raise SchemaDefinitionError(
            f"unknown type name {name!r}; expected one of {sorted(_NAMED)}"
        ) from None


def _from_union(spec: Any, args: tuple[Any, ...]) -> TypeTag:
    rest = [a for a in args if a is not type(None)]
    if len(rest) == 1 and len(rest) < len(args):
        return optional(resolve_dtype(rest[0]))
    raise SchemaDefinitionError(
        f"unsupported union type {spec!r}; only Optional[T] (T | None) is allowed"
    )


def resolve_dtype(spec: Any) -> TypeTag:
    """
    Resolve a user-supplied dtype spelling into a TypeTag.

    Args:
        spec (Any): A TypeTag, a builtin (int, float, str, bool, object), Pointer,
            typing.Any, Optional[T] / T | None, or a string name such as
            "int", "f64", "string?", "optional[bool]".

    Returns:
        TypeTag: The resolved tag.

    Raises:
        SchemaDefinitionError: If the spelling is not recognized. Bare callables
            (functions, builtins such as `any` or `callable`, lambdas) are
            rejected with a pointer to `typing.Any`.
    """
    if isinstance(spec, TypeTag):
        return spec
    if spec is Any:
        return ANY
    if isinstance(spec, str):
        return _from_name(spec)
    if isinstance(spec, type) and spec in _BUILTINS:
        return _BUILTINS[spec]
    if typing.get_origin(spec) is typing.Union or isinstance(spec, types.UnionType):
        return _from_union(spec, typing.get_args(spec))
    if _is_bare_callable(spec):
        label = getattr(spec, "__name__", repr(spec))
        raise SchemaDefinitionError(
            f"callable {label!r} is not a valid column type; "
            "use typing.Any (or streamschema ANY) for an untyped column"
        )
    raise SchemaDefinitionError(f"unrecognized column type {spec!r}")
