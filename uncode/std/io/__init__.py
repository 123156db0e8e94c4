from typing import List

from .basic_io import BasicIO
from ...builtin_function import BuiltinRegistry
from ...types import NULL, String, Value
from ..args import expect


def register_io_builtins(registry: BuiltinRegistry) -> None:
    basic_io = BasicIO()

    @registry.define('print', 0)
    def std_print(args: List[Value]) -> Value:
        for arg in args:
            print(arg.inspect())
        return args[0] if args else NULL

    registry.alias('show', 'print')

    @registry.define('read_file', 1, 1)
    def std_read_file(args: List[Value]) -> Value:
        err = expect('read_file', args, 0, String, 'a string')
        if err is not None:
            return err
        return basic_io.read_file(args[0].value)

    @registry.define('write_file', 2, 2)
    def std_write_file(args: List[Value]) -> Value:
        err = expect('write_file', args, 0, String, 'a string')
        if err is not None:
            return err
        data = args[1].value if isinstance(args[1], String) else args[1].inspect()
        return basic_io.write_file(args[0].value, data)

    @registry.define('file_exists', 1, 1)
    def std_file_exists(args: List[Value]) -> Value:
        err = expect('file_exists', args, 0, String, 'a string')
        if err is not None:
            return err
        return basic_io.file_exists(args[0].value)
