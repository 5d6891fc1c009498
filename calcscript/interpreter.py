"""Evaluator for calcscript.

Walks a parsed `Block` against a chain of `Scope` objects.

Scoping rules:

* `if` and `while` bodies run in the scope they appear in. Assignments
  inside them change that scope.
* A call to a user function runs the body in a fresh scope whose parent
  is the scope of the *call site*, not the scope the function was
  declared in. Function values capture nothing, so a function body can
  read any variable visible where it is called (dynamic scoping).
* Built-in operations (`+ - * /` and `print`) live in a root scope
  below the program's global scope. Operators reach them through the
  same lookup as user functions because the parser turns `a + b` into
  a call of `+`.
"""

from __future__ import annotations

import sys
from typing import Any, List, Optional, TextIO

from .ast import (
    Block, Assignment, Return, ExpressionStatement, FunctionDecl, If, While,
    Empty, Variable, FloatLiteral, IntLiteral, BoolLiteral, FunctionCall, Node,
)
from .builtin_function import BuiltinFunction, call_native, default_builtins
from .environment import Scope
from .errors import CalcError, ReturnSignal
from .parser import parse_program
from .types import ErrorVal, FunctionValue, Void, is_truthy, to_string, type_name

# Each calcscript call nests about seven Python frames and each operator two
RECURSION_LIMIT = 6000


class Interpreter:
    """Core interpreter that executes a calcscript AST."""
    def __init__(self, debug_level: int = 0, debug_file: Optional[str] = None, out: Optional[TextIO] = None):
        self.root_scope = Scope()
        self.global_scope = Scope(parent=self.root_scope)
        self.out = out
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 and debug_file else None
        self.load_builtins()

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    def load_builtins(self):
        for builtin in default_builtins():
            self.root_scope.set(builtin.name, builtin)

    # Public API
    def run(self, program: Block, scope: Optional[Scope] = None) -> Any:
        """Evaluate a program and return its result value.

        The result is the value of a top-level `return`, otherwise `Void`.
        """
        if scope is None:
            scope = self.global_scope
        old_limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(old_limit, RECURSION_LIMIT))
        try:
            return self.evaluate_block(program, scope, new_scope=False)
        except RecursionError:
            raise CalcError(ErrorVal('RecursionError', 'maximum recursion depth exceeded')) from None
        finally:
            sys.setrecursionlimit(old_limit)
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None

    def evaluate_block(self, block: Block, scope: Scope, new_scope: bool, bindings: Optional[dict] = None) -> Any:
        if new_scope:
            scope = Scope(parent=scope)
        for name, value in (bindings or {}).items():
            scope.set(name, value)
        result = self.execute_block(block, scope)
        if isinstance(result, ReturnSignal):
            return result.value
        return Void

    def execute_block(self, block: Block, scope: Scope) -> Optional[ReturnSignal]:
        for stmt in block.statements:
            result = self.execute(stmt, scope)
            # propagate return signals
            if isinstance(result, ReturnSignal):
                return result
        return None

    def execute(self, node: Node, scope: Scope) -> Optional[ReturnSignal]:
        if isinstance(node, Assignment):
            value = self.evaluate(node.value, scope)
            scope.set(node.id, value)
            if self.debug_level >= 2:
                self.debug(f"assign {node.id}: {type_name(value)} = {to_string(value)}")
            return None
        if isinstance(node, ExpressionStatement):
            self.evaluate(node.value, scope)
            return None
        if isinstance(node, Return):
            return ReturnSignal(self.evaluate(node.value, scope))
        if isinstance(node, FunctionDecl):
            scope.set(node.name, FunctionValue(node))
            if self.debug_level >= 1:
                self.debug(f"define function {node.name}({', '.join(node.params)})")
            return None
        if isinstance(node, If):
            for cond, branch in zip(node.conditions, node.branches):
                value = self.evaluate(cond, scope)
                truthy = is_truthy(value)
                if self.debug_level >= 3:
                    self.debug(f"if condition {to_string(value)} -> {truthy}")
                if truthy:
                    return self.execute_block(branch, scope)
            return None
        if isinstance(node, While):
            while True:
                value = self.evaluate(node.condition, scope)
                truthy = is_truthy(value)
                if self.debug_level >= 3:
                    self.debug(f"while condition {to_string(value)} -> {truthy}")
                if not truthy:
                    return None
                res = self.execute_block(node.body, scope)
                if isinstance(res, ReturnSignal):
                    return res
        if isinstance(node, Empty):
            return None
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def evaluate(self, node: Node, scope: Scope) -> Any:
        if isinstance(node, IntLiteral):
            return node.value
        if isinstance(node, FloatLiteral):
            return node.value
        if isinstance(node, BoolLiteral):
            return 1 if node.value else 0
        if isinstance(node, Variable):
            value = scope.get(node.name)
            if self.debug_level >= 4:
                self.debug(f"lookup {node.name} -> {to_string(value)}")
            return value
        if isinstance(node, FunctionCall):
            return self.call(node, scope)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def call(self, node: FunctionCall, scope: Scope) -> Any:
        func = scope.get(node.callee)
        if self.debug_level >= 4:
            self.debug(f"call {node.callee} with {len(node.arguments)} argument(s)")
        args = [self.evaluate(arg, scope) for arg in node.arguments]
        if isinstance(func, BuiltinFunction):
            return call_native(func.op, args, self.out)
        if isinstance(func, FunctionValue):
            return self.call_function(func, args, scope)
        raise CalcError(ErrorVal('TypeError', f'{node.callee} is not a function or built-in function'))

    def call_function(self, func: FunctionValue, args: List[Any], caller_scope: Scope) -> Any:
        params = func.decl.params
        if len(args) != len(params):
            raise CalcError(ErrorVal('TypeError', f"{func.name} expects {len(params)} arguments, got {len(args)}"))
        # The call scope hangs off the caller's scope, not the declaration's
        return self.evaluate_block(func.decl.body, caller_scope, new_scope=True, bindings=dict(zip(params, args)))


def run_program(source: str, debug_level: int = 0, out: Optional[TextIO] = None) -> Any:
    """Convenience function to parse and run a calcscript program from source text."""
    program = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level, out=out)
    return interpreter.run(program)


def run_file(file_path: str, debug_level: int = 0) -> Interpreter:
    """Parse and run a calcscript file, returning the interpreter instance."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    program = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level)
    interpreter.run(program)
    return interpreter
