from typing import Callable, List, Optional

from ..builtin_function import BuiltinFunction, BuiltinRegistry
from ..types import NULL, Array, Function, String, Value, is_error, is_truthy, make_range
from .args import expect, type_error

Apply = Callable[[Value, List[Value]], Value]


def _expect_callable(name: str, value: Value) -> Optional[Value]:
    if isinstance(value, (Function, BuiltinFunction)):
        return None
    return type_error(f"{name}: argument 2 must be a function, got {value.kind}")


def register_array_builtins(registry: BuiltinRegistry) -> None:

    @registry.define('join', 1, 2)
    def std_join(args: List[Value]) -> Value:
        err = expect('join', args, 0, Array, 'an array')
        if err is None and len(args) == 2:
            err = expect('join', args, 1, String, 'a string')
        if err is not None:
            return err
        sep = args[1].value if len(args) == 2 else ''
        return String(sep.join(el.inspect() for el in args[0].elements))

    @registry.define('map', 2, 2, higher_order=True)
    def std_map(args: List[Value], apply: Apply) -> Value:
        source, fn = args
        err = _expect_callable('map', fn)
        if err is not None:
            return err
        if not isinstance(source, Array):
            return apply(fn, [source])
        results = []
        for el in source.elements:
            result = apply(fn, [el])
            if is_error(result):
                return result
            results.append(result)
        return Array(results)

    @registry.define('filter', 2, 2, higher_order=True)
    def std_filter(args: List[Value], apply: Apply) -> Value:
        source, fn = args
        err = _expect_callable('filter', fn)
        if err is not None:
            return err
        elements = source.elements if isinstance(source, Array) else [source]
        kept = []
        for el in elements:
            result = apply(fn, [el])
            if is_error(result):
                return result
            if is_truthy(result):
                kept.append(el)
        if not isinstance(source, Array):
            return kept[0] if kept else NULL
        return Array(kept)

    @registry.define('range', 2, 2)
    def std_range(args: List[Value]) -> Value:
        return make_range(args[0], args[1])

    @registry.define('first', 1, 1)
    def std_first(args: List[Value]) -> Value:
        err = expect('first', args, 0, Array, 'an array')
        if err is not None:
            return err
        return args[0].elements[0] if args[0].elements else NULL

    @registry.define('last', 1, 1)
    def std_last(args: List[Value]) -> Value:
        err = expect('last', args, 0, Array, 'an array')
        if err is not None:
            return err
        return args[0].elements[-1] if args[0].elements else NULL

    @registry.define('rest', 1, 1)
    def std_rest(args: List[Value]) -> Value:
        err = expect('rest', args, 0, Array, 'an array')
        if err is not None:
            return err
        return Array(list(args[0].elements[1:]))

    @registry.define('push', 2, 2)
    def std_push(args: List[Value]) -> Value:
        err = expect('push', args, 0, Array, 'an array')
        if err is not None:
            return err
        return Array(list(args[0].elements) + [args[1]])

    @registry.define('reverse', 1, 1)
    def std_reverse(args: List[Value]) -> Value:
        arg = args[0]
        if isinstance(arg, String):
            return String(arg.value[::-1])
        err = expect('reverse', args, 0, Array, 'an array or a string')
        if err is not None:
            return err
        return Array(list(reversed(arg.elements)))
