"""Abstract Syntax Tree (AST) definitions for the uncode language.

The parser produces these dataclasses and the evaluator walks them. Every
construct is an expression except `case`, which is only meaningful as a
statement inside a block.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Iterator, List, Optional, Tuple

from .types import TypeTag


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Program(Node):
    statements: List[Node]


@dataclass
class Block(Node):
    statements: List[Node]


# Literals


@dataclass
class IntegerLiteral(Node):
    value: int


@dataclass
class FloatLiteral(Node):
    value: float


@dataclass
class StringLiteral(Node):
    value: str


@dataclass
class BooleanLiteral(Node):
    value: bool


@dataclass
class NullLiteral(Node):
    pass


@dataclass
class PipeValue(Node):
    """The `🍕` literal."""
    pass


@dataclass
class SecondaryOutput(Node):
    """The `💩` literal."""
    pass


@dataclass
class ArrayLiteral(Node):
    elements: List[Node]


@dataclass
class RangeLiteral(Node):
    """`[start..end]`, inclusive at both ends."""
    start: Node
    end: Node


@dataclass
class HashLiteral(Node):
    pairs: List[Tuple[Node, Node]]


@dataclass
class Identifier(Node):
    name: str


# Operators


@dataclass
class PrefixExpression(Node):
    operator: str
    right: Node


@dataclass
class InfixExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass
class PipelineExpression(Node):
    operator: str  # one of |>, |, +>, ?>
    left: Node
    right: Node


@dataclass
class AssignExpression(Node):
    """`value >> target` or `target = value`; target is an Identifier or SecondaryOutput."""
    target: Node
    value: Node


@dataclass
class SliceIndex(Node):
    start: Optional[Node]
    end: Optional[Node]


@dataclass
class IndexExpression(Node):
    target: Node
    index: Node  # an expression or a SliceIndex


@dataclass
class PropertyAccess(Node):
    target: Node
    name: str


@dataclass
class CallExpression(Node):
    function: Node
    arguments: List[Node]


@dataclass(eq=False)
class FunctionLiteral(Node):
    name: Optional[str]
    parameters: List[str]
    body: Block
    condition: Optional[Node] = None
    input_type: Optional[TypeTag] = None
    return_type: Optional[TypeTag] = None
    line: int = 0
    column: int = 0


@dataclass
class IfExpression(Node):
    condition: Node
    consequence: Block
    alternative: Optional[Node] = None  # Block or IfExpression


@dataclass
class CaseStatement(Node):
    condition: Optional[Node]  # None for `case default`
    body: Node


def iter_child_nodes(node: Node) -> Iterator[Node]:
    """Yield the direct child nodes of `node` in field order."""
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, (list, tuple)):
            for item in value:
                if isinstance(item, Node):
                    yield item
                elif isinstance(item, tuple):
                    yield from (part for part in item if isinstance(part, Node))
