"""Hoisting of named function declarations.

Before a program runs, every named function literal in it is registered in
the root environment's dispatch groups so that functions can be called
before their definition appears in the source, at the top level or nested
in blocks, bodies, arguments and conditions alike.
"""

from __future__ import annotations

from typing import Set

from .ast import FunctionLiteral, Node, Program, iter_child_nodes
from .environment import Environment
from .logger import get_logger, trace
from .types import Function

log = get_logger('eval')


def make_function(literal: FunctionLiteral, env: Environment) -> Function:
    return Function(
        parameters=list(literal.parameters),
        body=literal.body,
        env=env,
        name=literal.name,
        condition=literal.condition,
        input_type=literal.input_type,
        return_type=literal.return_type,
        literal=literal,
    )


class _Preregistration:
    def __init__(self, env: Environment):
        self.env = env
        self.processed: Set[int] = set()
        self.registered = 0

    def register(self, literal: FunctionLiteral) -> None:
        if id(literal) in self.processed:
            return
        self.processed.add(id(literal))
        if self.env.register_function(make_function(literal, self.env)):
            self.registered += 1
            log.debug('pre-registered %s at %d:%d (%s)', literal.name, literal.line, literal.column,
                      ', '.join(self.env.functions[literal.name].keys()))
        else:
            trace(log, 'skipped %s: already registered', literal.name)

    def walk(self, node: Node) -> None:
        if isinstance(node, FunctionLiteral) and node.name:
            self.register(node)
        for child in iter_child_nodes(node):
            self.walk(child)


def preregister_functions(program: Program, env: Environment) -> int:
    """Register every named function literal in `program` into `env`.

    The first pass hoists top-level declarations; the second walks all
    nested constructs for the rest. Literals already held by a dispatch
    group are left alone, so running this twice on the same environment
    changes nothing. Returns the number of newly registered functions.
    """
    hoist = _Preregistration(env)
    for stmt in program.statements:
        if isinstance(stmt, FunctionLiteral) and stmt.name:
            hoist.register(stmt)
    for stmt in program.statements:
        hoist.walk(stmt)
    log.debug('pre-registration done: %d new function(s)', hoist.registered)
    return hoist.registered
