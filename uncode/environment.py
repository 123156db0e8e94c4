from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .types import Function, Value


@dataclass
class DispatchGroup:
    """All functions registered under one declared name in one scope.

    Conditional variants are kept in registration order; at most one
    default variant exists. Entries are identified by the function literal
    that produced them, so re-registering a literal never adds a duplicate.
    """
    name: str
    conditionals: List[Function] = field(default_factory=list)
    default: Optional[Function] = None

    def candidates(self) -> List[Function]:
        result = list(self.conditionals)
        if self.default is not None:
            result.append(self.default)
        return result

    def find(self, literal) -> Optional[Function]:
        for fn in self.candidates():
            if literal is not None and fn.literal is literal:
                return fn
        return None

    def add(self, fn: Function) -> bool:
        """Add a variant; returns False when its literal is already present."""
        if self.find(fn.literal) is not None:
            return False
        if fn.is_conditional:
            self.conditionals.append(fn)
        else:
            self.default = fn
        return True

    def replace(self, fn: Function) -> bool:
        """Swap in a fresh closure for an already-registered literal."""
        if fn.is_conditional:
            for i, existing in enumerate(self.conditionals):
                if existing.literal is fn.literal:
                    self.conditionals[i] = fn
                    return True
            return False
        if self.default is not None and self.default.literal is fn.literal:
            self.default = fn
            return True
        return False

    def keys(self) -> List[str]:
        """Describe the group with the `name#n` / `name#default` notation used in logs."""
        keys = [f"{self.name}#{i}" for i in range(len(self.conditionals))]
        if self.default is not None:
            keys.append(f"{self.name}#default")
        return keys


class Environment:
    """A lexical scope: variable bindings, dispatch groups and a parent link."""
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Value] = {}
        self.functions: Dict[str, DispatchGroup] = {}

    def get(self, name: str) -> Optional[Value]:
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                return env.values[name]
            env = env.parent
        return None

    def has(self, name: str) -> bool:
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                return True
            env = env.parent
        return False

    def declare(self, name: str, value: Value) -> Value:
        """Bind `name` in this scope, shadowing any outer binding."""
        self.values[name] = value
        return value

    def set(self, name: str, value: Value) -> Value:
        """Rebind `name` where it is already defined, else define it here."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                env.values[name] = value
                return value
            env = env.parent
        self.values[name] = value
        return value

    def child(self) -> 'Environment':
        return Environment(parent=self)

    # Dispatch groups

    def group(self, name: str) -> Optional[DispatchGroup]:
        """Nearest non-empty dispatch group for `name`."""
        env: Optional[Environment] = self
        while env is not None:
            grp = env.functions.get(name)
            if grp is not None and (grp.conditionals or grp.default is not None):
                return grp
            env = env.parent
        return None

    def register_function(self, fn: Function) -> bool:
        """Register a named function in this scope's dispatch group.

        A default variant always takes over the bare name. A conditional
        variant takes the bare name only while no default exists. Returns
        False if the function's literal was already registered here.
        """
        name = fn.name
        grp = self.functions.get(name)
        if grp is None:
            grp = self.functions[name] = DispatchGroup(name)
        if not grp.add(fn):
            return False
        if not fn.is_conditional or grp.default is None:
            self.values[name] = fn
        return True

    def refresh_function(self, fn: Function) -> bool:
        """Update the closure of an already-registered literal, wherever it lives.

        Returns False if no enclosing scope holds the literal.
        """
        env: Optional[Environment] = self
        while env is not None:
            grp = env.functions.get(fn.name)
            if grp is not None and grp.replace(fn):
                bound = env.values.get(fn.name)
                if isinstance(bound, Function) and bound.literal is fn.literal:
                    env.values[fn.name] = fn
                return True
            env = env.parent
        return False

    def get_all_functions_by_name(self, name: str) -> List[Function]:
        """Candidates for `name`: conditionals in declaration order, then the default."""
        grp = self.group(name)
        if grp is None:
            return []
        seen = set()
        result: List[Function] = []
        for fn in grp.candidates():
            key = id(fn.literal) if fn.literal is not None else id(fn)
            if key in seen:
                continue
            seen.add(key)
            result.append(fn)
        return result
