"""Abstract Syntax Tree (AST) definitions for calcscript.

The parser builds these nodes once and nothing mutates them afterwards,
so every node is a frozen dataclass and every sequence is a tuple. Two
parses of the same text compare equal.

There is no binary-expression node: `a + b` is a `FunctionCall` whose
callee is the operator symbol `+`. The evaluator resolves operators and
user functions through the same scope lookup.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""
    pass


# Expression-position nodes

@dataclass(frozen=True)
class Variable(Node):
    name: str


@dataclass(frozen=True)
class FloatLiteral(Node):
    value: float


@dataclass(frozen=True)
class IntLiteral(Node):
    value: int


@dataclass(frozen=True)
class BoolLiteral(Node):
    value: bool


@dataclass(frozen=True)
class FunctionCall(Node):
    callee: str  # function name or operator symbol
    arguments: Tuple['Value', ...] = ()


Value = Union[Variable, FloatLiteral, IntLiteral, BoolLiteral, FunctionCall]


# Statements

@dataclass(frozen=True)
class Block(Node):
    statements: Tuple['Statement', ...] = ()


@dataclass(frozen=True)
class Assignment(Node):
    id: str
    value: Value


@dataclass(frozen=True)
class Return(Node):
    value: Value


@dataclass(frozen=True)
class ExpressionStatement(Node):
    value: Value


@dataclass(frozen=True)
class FunctionDecl(Node):
    name: str
    params: Tuple[str, ...]
    body: Block


@dataclass(frozen=True)
class If(Node):
    # conditions[i] selects branches[i]; an else branch is paired with BoolLiteral(True)
    conditions: Tuple[Value, ...]
    branches: Tuple[Block, ...]

    def __post_init__(self):
        if len(self.conditions) != len(self.branches):
            raise ValueError('If requires one branch per condition')


@dataclass(frozen=True)
class While(Node):
    condition: Value
    body: Block


@dataclass(frozen=True)
class Empty(Node):
    """A bare `;`. Dropped by the parser, never seen by the evaluator."""
    pass


Statement = Union[Assignment, Return, ExpressionStatement, FunctionDecl, If, While, Empty]
