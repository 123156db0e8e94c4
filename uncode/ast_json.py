"""JSON serialization/deserialization for the uncode AST.

This module converts between AST dataclasses and plain Python dict/list
structures suitable for JSON encoding. Every node becomes a dict with a
`type` entry naming its class plus one entry per dataclass field, so a
dumped program round-trips through `ast_from_obj`.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict, Type

from . import ast
from .types import TypeTag

NODE_TYPES: Dict[str, Type[ast.Node]] = {
    cls.__name__: cls
    for cls in vars(ast).values()
    if isinstance(cls, type) and issubclass(cls, ast.Node) and cls is not ast.Node
}


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None or isinstance(node, (int, float, str, bool)):
        return node

    if isinstance(node, TypeTag):
        return {"__type__": "TypeTag", "value": node.value}
    if isinstance(node, (list, tuple)):
        return [ast_to_obj(item) for item in node]
    if isinstance(node, ast.Node):
        obj: Dict[str, Any] = {"type": type(node).__name__}
        for f in fields(node):
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (int, float, str, bool)):
        return obj
    if isinstance(obj, list):
        return [ast_from_obj(item) for item in obj]
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    if obj.get("__type__") == "TypeTag":
        return TypeTag(obj["value"])
    t = obj.get("type")
    cls = NODE_TYPES.get(t)
    if cls is None:
        raise ValueError(f"Unknown AST node type: {t}")
    kwargs = {f.name: ast_from_obj(obj[f.name]) for f in fields(cls) if f.name in obj}
    if cls is ast.HashLiteral:
        kwargs["pairs"] = [tuple(pair) for pair in kwargs.get("pairs", [])]
    return cls(**kwargs)
