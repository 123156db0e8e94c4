"""Arithmetic builtins.

Integer operations follow the language's operator semantics: division
truncates toward zero and the remainder takes the sign of the dividend.
Float pairs are accepted where the operation makes sense; mixing integers
and floats is a type mismatch, as it is for the infix operators.
"""

from typing import Callable, List

from ..builtin_function import BuiltinRegistry
from ..errors import ErrorKind
from ..types import Array, Float, Integer, String, Value, describe_type, int_div, int_mod, new_error
from .args import expect, type_error


def _numeric_pair(name: str, args: List[Value], int_op: Callable[[int, int], int],
                  float_op: Callable[[float, float], float]) -> Value:
    a, b = args
    if isinstance(a, Integer) and isinstance(b, Integer):
        return Integer(int_op(a.value, b.value))
    if isinstance(a, Float) and isinstance(b, Float):
        return Float(float_op(a.value, b.value))
    return type_error(f"{name}: expected two integers or two floats, got {describe_type(a)} and {describe_type(b)}")


def _is_zero(value: Value) -> bool:
    return isinstance(value, (Integer, Float)) and value.value == 0


def register_math_builtins(registry: BuiltinRegistry) -> None:

    @registry.define('add', 1, 2)
    def std_add(args: List[Value]) -> Value:
        if len(args) == 1:
            err = expect('add', args, 0, (Integer, Float, String), 'a number or a string')
            return err if err is not None else args[0]
        left, right = args
        if isinstance(left, String):
            return String(left.value + right.inspect())
        return _numeric_pair('add', args, lambda x, y: x + y, lambda x, y: x + y)

    @registry.define('sub', 2, 2)
    def std_sub(args: List[Value]) -> Value:
        return _numeric_pair('sub', args, lambda x, y: x - y, lambda x, y: x - y)

    @registry.define('mul', 2, 2)
    def std_mul(args: List[Value]) -> Value:
        return _numeric_pair('mul', args, lambda x, y: x * y, lambda x, y: x * y)

    @registry.define('div', 2, 2)
    def std_div(args: List[Value]) -> Value:
        if type(args[0]) is type(args[1]) and _is_zero(args[1]):
            return new_error(ErrorKind.DIVISION_BY_ZERO, f"division by zero: {args[0].inspect()} / 0")
        return _numeric_pair('div', args, int_div, lambda x, y: x / y)

    @registry.define('mod', 2, 2)
    def std_mod(args: List[Value]) -> Value:
        for i in range(2):
            err = expect('mod', args, i, Integer, 'an integer')
            if err is not None:
                return err
        if args[1].value == 0:
            return new_error(ErrorKind.DIVISION_BY_ZERO, f"division by zero: {args[0].value} % 0")
        return Integer(int_mod(args[0].value, args[1].value))

    @registry.define('pow', 2, 2)
    def std_pow(args: List[Value]) -> Value:
        for i in range(2):
            err = expect('pow', args, i, Integer, 'an integer')
            if err is not None:
                return err
        if args[1].value < 0:
            return type_error(f"pow: exponent must not be negative, got {args[1].value}")
        return Integer(args[0].value ** args[1].value)

    @registry.define('sum', 1, 1)
    def std_sum(args: List[Value]) -> Value:
        err = expect('sum', args, 0, Array, 'an array')
        if err is not None:
            return err
        total = 0
        for el in args[0].elements:
            if not isinstance(el, Integer):
                return type_error(f"sum: elements must be integers, got {describe_type(el)}")
            total += el.value
        return Integer(total)
