from ..builtin_function import BuiltinRegistry
from .arrays import register_array_builtins
from .core import register_core_builtins
from .io import register_io_builtins
from .math import register_math_builtins
from .strings import register_string_builtins


def populate_builtins(registry: BuiltinRegistry) -> BuiltinRegistry:
    """Fill `registry` with the standard builtins and return it."""
    register_io_builtins(registry)
    register_math_builtins(registry)
    register_string_builtins(registry)
    register_array_builtins(registry)
    register_core_builtins(registry)
    return registry
