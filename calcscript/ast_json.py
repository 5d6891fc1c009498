"""JSON serialization/deserialization for calcscript AST.

This module converts between AST dataclasses and plain Python dict/list
structures suitable for JSON encoding. Every node is tagged with its
class name under the "type" key.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import (
    Block,
    Assignment,
    Return,
    ExpressionStatement,
    FunctionDecl,
    If,
    While,
    Empty,
    Variable,
    FloatLiteral,
    IntLiteral,
    BoolLiteral,
    FunctionCall,
)


def ast_to_obj(node: Any) -> Any:
    if isinstance(node, Block):
        return {"type": "Block", "statements": [ast_to_obj(s) for s in node.statements]}
    if isinstance(node, Assignment):
        return {"type": "Assignment", "id": node.id, "value": ast_to_obj(node.value)}
    if isinstance(node, Return):
        return {"type": "Return", "value": ast_to_obj(node.value)}
    if isinstance(node, ExpressionStatement):
        return {"type": "ExpressionStatement", "value": ast_to_obj(node.value)}
    if isinstance(node, FunctionDecl):
        return {
            "type": "FunctionDecl",
            "name": node.name,
            "params": list(node.params),
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, If):
        return {
            "type": "If",
            "conditions": [ast_to_obj(c) for c in node.conditions],
            "branches": [ast_to_obj(b) for b in node.branches],
        }
    if isinstance(node, While):
        return {"type": "While", "condition": ast_to_obj(node.condition), "body": ast_to_obj(node.body)}
    if isinstance(node, Empty):
        return {"type": "Empty"}
    if isinstance(node, Variable):
        return {"type": "Variable", "name": node.name}
    if isinstance(node, FloatLiteral):
        return {"type": "FloatLiteral", "value": node.value}
    if isinstance(node, IntLiteral):
        return {"type": "IntLiteral", "value": node.value}
    if isinstance(node, BoolLiteral):
        return {"type": "BoolLiteral", "value": node.value}
    if isinstance(node, FunctionCall):
        return {"type": "FunctionCall", "callee": node.callee, "arguments": [ast_to_obj(a) for a in node.arguments]}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Dict[str, Any]) -> Any:
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Block":
        return Block(tuple(ast_from_obj(s) for s in obj["statements"]))
    if t == "Assignment":
        return Assignment(id=obj["id"], value=ast_from_obj(obj["value"]))
    if t == "Return":
        return Return(ast_from_obj(obj["value"]))
    if t == "ExpressionStatement":
        return ExpressionStatement(ast_from_obj(obj["value"]))
    if t == "FunctionDecl":
        return FunctionDecl(
            name=obj["name"],
            params=tuple(obj["params"]),
            body=ast_from_obj(obj["body"]),
        )
    if t == "If":
        return If(
            conditions=tuple(ast_from_obj(c) for c in obj["conditions"]),
            branches=tuple(ast_from_obj(b) for b in obj["branches"]),
        )
    if t == "While":
        return While(condition=ast_from_obj(obj["condition"]), body=ast_from_obj(obj["body"]))
    if t == "Empty":
        return Empty()
    if t == "Variable":
        return Variable(obj["name"])
    if t == "FloatLiteral":
        return FloatLiteral(float(obj["value"]))
    if t == "IntLiteral":
        return IntLiteral(int(obj["value"]))
    if t == "BoolLiteral":
        return BoolLiteral(bool(obj["value"]))
    if t == "FunctionCall":
        return FunctionCall(callee=obj["callee"], arguments=tuple(ast_from_obj(a) for a in obj["arguments"]))

    raise ValueError(f"Unknown AST node type: {t}")
