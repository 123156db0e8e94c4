from typing import List

from ..builtin_function import BuiltinRegistry
from ..types import Boolean, String, Value, is_truthy, values_equal


def register_core_builtins(registry: BuiltinRegistry) -> None:

    @registry.define('eq', 2, 2)
    def std_eq(args: List[Value]) -> Value:
        return Boolean(values_equal(args[0], args[1]))

    @registry.define('not', 1, 1)
    def std_not(args: List[Value]) -> Value:
        return Boolean(not is_truthy(args[0]))

    @registry.define('typeof', 1, 1)
    def std_typeof(args: List[Value]) -> Value:
        return String(args[0].kind)
