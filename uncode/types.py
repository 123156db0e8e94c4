"""Runtime values and declarable type tags for the uncode language.

Every runtime value is an instance of one of the `Value` subclasses below.
The set is closed: Integer, Float, Boolean, String, Null, Array, Hash,
Function, Builtin (see builtin_function.py), Error and ReturnMarker.

Each value carries a secondary output slot, the `💩` member of the
language. Reading an unset slot yields the value itself (or, for a
ReturnMarker, the wrapped value).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Optional, Tuple

from .errors import ErrorKind

if TYPE_CHECKING:
    from .ast import Block, FunctionLiteral, Node
    from .environment import Environment


INTEGER = 'INTEGER'
FLOAT = 'FLOAT'
BOOLEAN = 'BOOLEAN'
STRING = 'STRING'
NULL_KIND = 'NULL'
ARRAY = 'ARRAY'
HASH = 'HASH'
FUNCTION = 'FUNCTION'
BUILTIN = 'BUILTIN'
ERROR = 'ERROR'
RETURN_VALUE = 'RETURN_VALUE'


class TypeTag(Enum):
    """Type names accepted in function headers (`def f : int -> str`)."""
    INT = 'int'
    FLOAT = 'float'
    BOOL = 'bool'
    STR = 'str'
    NULL = 'null'
    ARRAY = 'array'
    HASH = 'hash'
    OBJECT = 'object'

    @classmethod
    def of(cls, value: 'Value') -> Optional['TypeTag']:
        """Return the tag describing a runtime value, or None if no tag names it."""
        return _KIND_TO_TAG.get(value.kind)

    def accepts(self, value: 'Value') -> bool:
        if self is TypeTag.OBJECT:
            return True
        return TypeTag.of(value) is self


_KIND_TO_TAG: Dict[str, TypeTag] = {
    INTEGER: TypeTag.INT,
    FLOAT: TypeTag.FLOAT,
    BOOLEAN: TypeTag.BOOL,
    STRING: TypeTag.STR,
    NULL_KIND: TypeTag.NULL,
    ARRAY: TypeTag.ARRAY,
    HASH: TypeTag.HASH,
}


def describe_type(value: 'Value') -> str:
    """Short type name used in type-check error messages."""
    tag = TypeTag.of(value)
    if tag is not None:
        return tag.value
    return value.kind.lower()


@dataclass(eq=False)
class Value:
    kind: ClassVar[str] = 'VALUE'
    secondary: Optional['Value'] = field(default=None, init=False, repr=False, compare=False)

    def get_secondary(self) -> 'Value':
        if self.secondary is None:
            return self
        return self.secondary

    def inspect(self) -> str:
        raise NotImplementedError


@dataclass
class Integer(Value):
    kind: ClassVar[str] = INTEGER
    value: int

    def inspect(self) -> str:
        return str(self.value)


@dataclass
class Float(Value):
    kind: ClassVar[str] = FLOAT
    value: float

    def inspect(self) -> str:
        return '%g' % self.value


@dataclass
class Boolean(Value):
    kind: ClassVar[str] = BOOLEAN
    value: bool

    def inspect(self) -> str:
        return 'true' if self.value else 'false'


@dataclass
class String(Value):
    kind: ClassVar[str] = STRING
    value: str

    def inspect(self) -> str:
        return self.value


@dataclass
class Null(Value):
    kind: ClassVar[str] = NULL_KIND

    def inspect(self) -> str:
        return 'null'


NULL = Null()


@dataclass
class Array(Value):
    kind: ClassVar[str] = ARRAY
    elements: List[Value] = field(default_factory=list)

    def inspect(self) -> str:
        return '[' + ', '.join(el.inspect() for el in self.elements) + ']'


@dataclass
class Hash(Value):
    """Mapping from hashable values to values.

    `pairs` is keyed by `hash_key(key)` and stores the original key object
    alongside the value so that keys can be reproduced when inspecting.
    """
    kind: ClassVar[str] = HASH
    pairs: Dict[Tuple[str, Any], Tuple[Value, Value]] = field(default_factory=dict)

    def get(self, key: Value) -> Optional[Value]:
        entry = self.pairs.get(hash_key(key))
        return entry[1] if entry is not None else None

    def put(self, key: Value, value: Value) -> None:
        self.pairs[hash_key(key)] = (key, value)

    def inspect(self) -> str:
        items = ', '.join(f"{k.inspect()}: {v.inspect()}" for k, v in self.pairs.values())
        return '{' + items + '}'


@dataclass(eq=False)
class Function(Value):
    """A user-defined function closed over the environment it was created in."""
    kind: ClassVar[str] = FUNCTION
    parameters: List[str]
    body: 'Block' = field(repr=False)
    env: 'Environment' = field(repr=False)
    name: Optional[str] = None
    condition: Optional['Node'] = field(default=None, repr=False)
    input_type: Optional[TypeTag] = None
    return_type: Optional[TypeTag] = None
    literal: Optional['FunctionLiteral'] = field(default=None, repr=False)

    @property
    def is_conditional(self) -> bool:
        return self.condition is not None

    def inspect(self) -> str:
        return f"<function {self.name or 'anonymous'}>"


@dataclass
class Error(Value):
    kind: ClassVar[str] = ERROR
    message: str
    error_kind: ErrorKind = ErrorKind.TYPE_MISMATCH

    def inspect(self) -> str:
        return f"ERROR: {self.message}"


@dataclass
class ReturnMarker(Value):
    """Wraps the value written to `💩`; unwrapped by the caller's dispatch."""
    kind: ClassVar[str] = RETURN_VALUE
    value: Value = field(default_factory=lambda: NULL)

    def get_secondary(self) -> Value:
        if self.secondary is None:
            return self.value
        return self.secondary

    def inspect(self) -> str:
        return self.value.inspect()


def new_error(kind: ErrorKind, message: str) -> Error:
    return Error(message, kind)


def is_error(value: Optional[Value]) -> bool:
    return isinstance(value, Error)


def is_truthy(value: Value) -> bool:
    if isinstance(value, Null):
        return False
    if isinstance(value, Boolean):
        return value.value
    if isinstance(value, (Integer, Float)):
        return value.value != 0
    if isinstance(value, String):
        return value.value != ''
    if isinstance(value, Array):
        return len(value.elements) > 0
    if isinstance(value, Hash):
        return len(value.pairs) > 0
    return True


def hash_key(value: Value) -> Optional[Tuple[str, Any]]:
    """Return the dictionary key for a hashable value, else None."""
    if isinstance(value, (Integer, String, Boolean)):
        return (value.kind, value.value)
    return None


def values_equal(a: Value, b: Value) -> bool:
    """Structural equality between two values of the same kind."""
    if a.kind != b.kind:
        return False
    if isinstance(a, Array):
        return len(a.elements) == len(b.elements) and all(
            values_equal(x, y) for x, y in zip(a.elements, b.elements))
    if isinstance(a, Hash):
        if a.pairs.keys() != b.pairs.keys():
            return False
        return all(values_equal(v, b.pairs[k][1]) for k, (_, v) in a.pairs.items())
    if isinstance(a, (Integer, Float, Boolean, String)):
        return a.value == b.value
    if isinstance(a, Null):
        return True
    return a is b


def to_python(value: Value) -> Any:
    """Convert a runtime value to plain Python data."""
    if isinstance(value, ReturnMarker):
        return to_python(value.value)
    if isinstance(value, (Integer, Float, Boolean, String)):
        return value.value
    if isinstance(value, Null):
        return None
    if isinstance(value, Array):
        return [to_python(el) for el in value.elements]
    if isinstance(value, Hash):
        return {to_python(k): to_python(v) for k, v in value.pairs.values()}
    return value


def int_div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def int_mod(a: int, b: int) -> int:
    """Remainder with the sign of the dividend, so that a == b * int_div(a, b) + int_mod(a, b)."""
    return a - b * int_div(a, b)


def make_range(start: Value, end: Value) -> Value:
    """Inclusive range between two integers or two single-character strings."""
    if isinstance(start, Integer) and isinstance(end, Integer):
        step = 1 if start.value <= end.value else -1
        return Array([Integer(i) for i in range(start.value, end.value + step, step)])
    if (isinstance(start, String) and isinstance(end, String)
            and len(start.value) == 1 and len(end.value) == 1):
        lo, hi = ord(start.value), ord(end.value)
        step = 1 if lo <= hi else -1
        return Array([String(chr(i)) for i in range(lo, hi + step, step)])
    return new_error(
        ErrorKind.TYPE_MISMATCH,
        f"range bounds must be integers or single characters: {start.kind}..{end.kind}",
    )
