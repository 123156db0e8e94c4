from typing import List

from ..builtin_function import BuiltinRegistry
from ..types import Array, Boolean, Hash, Integer, String, Value, values_equal
from .args import expect


def register_string_builtins(registry: BuiltinRegistry) -> None:

    @registry.define('to_string', 1, 1)
    def std_to_string(args: List[Value]) -> Value:
        return String(args[0].inspect())

    @registry.define('length', 1, 1)
    def std_length(args: List[Value]) -> Value:
        arg = args[0]
        if isinstance(arg, String):
            return Integer(len(arg.value))
        if isinstance(arg, Array):
            return Integer(len(arg.elements))
        if isinstance(arg, Hash):
            return Integer(len(arg.pairs))
        return expect('length', args, 0, (String, Array, Hash), 'a string, array or hash')

    registry.alias('len', 'length')

    @registry.define('split', 2, 2)
    def std_split(args: List[Value]) -> Value:
        for i in range(2):
            err = expect('split', args, i, String, 'a string')
            if err is not None:
                return err
        text, sep = args[0].value, args[1].value
        parts = list(text) if sep == '' else text.split(sep)
        return Array([String(p) for p in parts])

    @registry.define('substring', 2, 3)
    def std_substring(args: List[Value]) -> Value:
        err = expect('substring', args, 0, String, 'a string')
        for i in range(1, len(args)):
            err = err or expect('substring', args, i, Integer, 'an integer')
        if err is not None:
            return err
        text = args[0].value
        start = min(max(args[1].value, 0), len(text))
        end = len(text) if len(args) == 2 else min(max(args[2].value, start), len(text))
        return String(text[start:end])

    @registry.define('to_upper', 1, 1)
    def std_to_upper(args: List[Value]) -> Value:
        err = expect('to_upper', args, 0, String, 'a string')
        return err if err is not None else String(args[0].value.upper())

    @registry.define('to_lower', 1, 1)
    def std_to_lower(args: List[Value]) -> Value:
        err = expect('to_lower', args, 0, String, 'a string')
        return err if err is not None else String(args[0].value.lower())

    @registry.define('contains', 2, 2)
    def std_contains(args: List[Value]) -> Value:
        haystack, needle = args
        if isinstance(haystack, Array):
            return Boolean(any(values_equal(el, needle) for el in haystack.elements))
        err = expect('contains', args, 0, (String, Array), 'a string or array')
        err = err or expect('contains', args, 1, String, 'a string')
        if err is not None:
            return err
        return Boolean(needle.value in haystack.value)

    @registry.define('starts_with', 2, 2)
    def std_starts_with(args: List[Value]) -> Value:
        err = expect('starts_with', args, 0, String, 'a string') or expect('starts_with', args, 1, String, 'a string')
        return err if err is not None else Boolean(args[0].value.startswith(args[1].value))

    @registry.define('ends_with', 2, 2)
    def std_ends_with(args: List[Value]) -> Value:
        err = expect('ends_with', args, 0, String, 'a string') or expect('ends_with', args, 1, String, 'a string')
        return err if err is not None else Boolean(args[0].value.endswith(args[1].value))
