from typing import List, Optional, Tuple, Type, Union

from ..errors import ErrorKind
from ..types import Error, Value, describe_type, new_error


def type_error(message: str) -> Error:
    return new_error(ErrorKind.TYPE_MISMATCH, message)


def expect(name: str, args: List[Value], index: int,
           cls: Union[Type[Value], Tuple[Type[Value], ...]], what: str) -> Optional[Error]:
    """Return a TypeMismatch error if args[index] is not an instance of `cls`."""
    arg = args[index]
    if isinstance(arg, cls):
        return None
    return type_error(f"{name}: argument {index + 1} must be {what}, got {describe_type(arg)}")
