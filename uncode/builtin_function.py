from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, Iterator, List, Optional

from .errors import ErrorKind
from .logger import get_logger, trace
from .types import BUILTIN, Value, new_error

log = get_logger('builtin')


@dataclass(eq=False)
class BuiltinFunction(Value):
    """A host function callable from uncode code.

    `fn` receives the evaluated argument list. Higher-order builtins (map,
    filter) also receive an `apply(callee, args)` callback that invokes a
    Function or Builtin value through the dispatcher.
    """
    kind: ClassVar[str] = BUILTIN
    name: str
    fn: Callable[..., Value] = field(repr=False)
    min_args: int = 0
    max_args: Optional[int] = None
    higher_order: bool = False

    def check_arity(self, count: int) -> Optional[Value]:
        if count < self.min_args or (self.max_args is not None and count > self.max_args):
            if self.max_args == self.min_args:
                expected = str(self.min_args)
            elif self.max_args is None:
                expected = f"at least {self.min_args}"
            else:
                expected = f"{self.min_args} to {self.max_args}"
            return new_error(
                ErrorKind.ARITY_MISMATCH,
                f"wrong number of arguments for {self.name}: expected {expected}, got {count}",
            )
        return None

    def call(self, args: List[Value], apply: Optional[Callable[[Value, List[Value]], Value]] = None) -> Value:
        err = self.check_arity(len(args))
        if err is not None:
            return err
        trace(log, 'call %s(%s)', self.name, ', '.join(a.inspect() for a in args))
        if self.higher_order:
            return self.fn(args, apply)
        return self.fn(args)

    def inspect(self) -> str:
        return f"<builtin {self.name}>"

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"


class BuiltinRegistry:
    """Name-keyed table of builtins, filled once when an interpreter starts.

    Hosts may register additional names or override existing ones before
    evaluation begins.
    """
    def __init__(self):
        self._table: Dict[str, BuiltinFunction] = {}

    def register(self, builtin: BuiltinFunction) -> BuiltinFunction:
        self._table[builtin.name] = builtin
        return builtin

    def define(self, name: str, min_args: int = 0, max_args: Optional[int] = None,
               higher_order: bool = False) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of `register`."""
        def decorator(fn):
            self.register(BuiltinFunction(name, fn, min_args, max_args, higher_order))
            return fn
        return decorator

    def alias(self, alias: str, name: str) -> None:
        original = self._table[name]
        self.register(BuiltinFunction(alias, original.fn, original.min_args,
                                      original.max_args, original.higher_order))

    def get(self, name: str) -> Optional[BuiltinFunction]:
        return self._table.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._table

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)
