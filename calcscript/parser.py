"""Parser for calcscript.

A recursive-descent parser with one method per grammar rule:

    block          := statement*
    statement      := assignment ';' | return ';' | expression ';'
                    | func_decl | if_stmt | while_stmt | ';'
    assignment     := IDENT '=' expression
    return         := 'return' expression
    func_decl      := 'fn' IDENT '(' (IDENT (',' IDENT)*)? ')' '{' block '}'
    if_stmt        := 'if' expression '{' block '}'
                      ('elif' expression '{' block '}')*
                      ('else' '{' block '}')?
    while_stmt     := 'while' expression '{' block '}'
    expression     := addition
    addition       := multiplication (('+'|'-') multiplication)*
    multiplication := value (('*'|'/') value)*
    value          := func_call | '(' expression ')' | FLOAT | INT | IDENT
    func_call      := IDENT '(' (expression (',' expression)*)? ')'

Every rule method takes an offset into the source and returns either
`(node, new_offset)` or `None`. `None` is a soft mismatch: the caller
simply tries its next alternative from the offset it still holds. Once a
construct is committed (after `fn`, `if`, `while`, an opening bracket)
a missing piece raises `ParseError`.

No token list is built. Tokens are pulled from the stateless tokenizer
on demand and memoised per offset, so backtracking re-reads tokens from
the cache instead of rescanning the text.

The `parse_program` function is the public entry point and returns the
`Block` for the whole source text.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from lark import Token

from .ast import (
    Block, Assignment, Return, ExpressionStatement, FunctionDecl, If, While,
    Empty, Variable, FloatLiteral, IntLiteral, BoolLiteral, FunctionCall, Node,
)
from .errors import ParseError
from .lexer import next_token, line_col
from .types import fits_int32

Match = Optional[Tuple[Node, int]]

ADDITIVE_OPS = ('+', '-')
MULTIPLICATIVE_OPS = ('*', '/')


class Parser:
    def __init__(self, text: str):
        self.text = text
        self._tokens: Dict[int, Tuple[Token, int]] = {}

    def error(self, message: str, pos: int) -> ParseError:
        line, column = line_col(self.text, pos)
        return ParseError(message, pos, line, column)

    # Token access

    def peek(self, pos: int) -> Tuple[Token, int]:
        cached = self._tokens.get(pos)
        if cached is None:
            cached = next_token(self.text, pos)
            self._tokens[pos] = cached
        return cached

    def eat(self, pos: int, type_: str, value: Optional[str] = None) -> Optional[int]:
        token, end = self.peek(pos)
        if token.type != type_:
            return None
        if value is not None and token.value != value:
            return None
        return end

    def eat_keyword(self, pos: int, keyword: str) -> Optional[int]:
        return self.eat(pos, 'KEYWORD', keyword)

    def eat_operator(self, pos: int, operator: str) -> Optional[int]:
        return self.eat(pos, 'OPERATOR', operator)

    def eat_semicolon(self, pos: int) -> Optional[int]:
        return self.eat(pos, 'SEMICOLON')

    def expect_operator(self, pos: int, operator: str, context: str) -> int:
        end = self.eat_operator(pos, operator)
        if end is None:
            token, _ = self.peek(pos)
            found = token.value or 'end of input'
            raise self.error(f"expected '{operator}' {context}, found {found!r}", pos)
        return end

    def identifier(self, pos: int) -> Optional[Tuple[str, int]]:
        token, end = self.peek(pos)
        if token.type == 'IDENT':
            return str(token), end
        return None

    # Program structure

    def parse_program(self, pos: int = 0) -> Block:
        block, pos = self.parse_block(pos)
        token, _ = self.peek(pos)
        if token.type != 'EOF':
            raise self.error(f"unexpected {token.value!r}", token.start_pos)
        return block

    def parse_block(self, pos: int) -> Tuple[Block, int]:
        statements: List[Node] = []
        while True:
            result = self.parse_statement(pos)
            if result is None:
                break
            stmt, pos = result
            if not isinstance(stmt, Empty):
                statements.append(stmt)
        return Block(tuple(statements)), pos

    def parse_braced_block(self, pos: int, context: str) -> Tuple[Block, int]:
        pos = self.expect_operator(pos, '{', f'after {context}')
        block, pos = self.parse_block(pos)
        pos = self.expect_operator(pos, '}', f'to close {context}')
        return block, pos

    def parse_statement(self, pos: int) -> Match:
        for rule, wrap in (
            (self.parse_assignment, None),
            (self.parse_return, None),
            (self.parse_expression, ExpressionStatement),
        ):
            result = rule(pos)
            if result is not None:
                node, end = result
                end = self.eat_semicolon(end)
                if end is not None:
                    return (wrap(node) if wrap else node), end
        for rule in (self.parse_func_decl, self.parse_if, self.parse_while):
            result = rule(pos)
            if result is not None:
                return result
        end = self.eat_semicolon(pos)
        if end is not None:
            return Empty(), end
        return None

    def parse_assignment(self, pos: int) -> Match:
        ident = self.identifier(pos)
        if ident is None:
            return None
        name, pos = ident
        pos = self.eat_operator(pos, '=')
        if pos is None:
            return None
        result = self.parse_expression(pos)
        if result is None:
            return None
        value, pos = result
        return Assignment(name, value), pos

    def parse_return(self, pos: int) -> Match:
        pos = self.eat_keyword(pos, 'return')
        if pos is None:
            return None
        result = self.parse_expression(pos)
        if result is None:
            return None
        value, pos = result
        return Return(value), pos

    def parse_func_decl(self, pos: int) -> Match:
        pos = self.eat_keyword(pos, 'fn')
        if pos is None:
            return None
        ident = self.identifier(pos)
        if ident is None:
            raise self.error("expected identifier after 'fn'", pos)
        name, pos = ident
        pos = self.expect_operator(pos, '(', f'after fn {name}')
        params: List[str] = []
        end = self.eat_operator(pos, ')')
        if end is None:
            while True:
                ident = self.identifier(pos)
                if ident is None:
                    raise self.error(f"expected parameter name in declaration of {name}", pos)
                param, pos = ident
                params.append(param)
                end = self.eat_operator(pos, ',')
                if end is not None:
                    pos = end
                    continue
                end = self.eat_operator(pos, ')')
                if end is None:
                    raise self.error(f"expected ',' or ')' in parameters of {name}", pos)
                break
        body, pos = self.parse_braced_block(end, f'fn {name}(...)')
        return FunctionDecl(name, tuple(params), body), pos

    def parse_if(self, pos: int) -> Match:
        pos = self.eat_keyword(pos, 'if')
        if pos is None:
            return None
        conditions: List[Node] = []
        branches: List[Block] = []
        keyword = 'if'
        while True:
            result = self.parse_expression(pos)
            if result is None:
                raise self.error(f"expected condition after '{keyword}'", pos)
            cond, pos = result
            block, pos = self.parse_braced_block(pos, f'{keyword} condition')
            conditions.append(cond)
            branches.append(block)
            end = self.eat_keyword(pos, 'elif')
            if end is None:
                break
            pos = end
            keyword = 'elif'
        end = self.eat_keyword(pos, 'else')
        if end is not None:
            # else is the branch whose condition is always true
            block, pos = self.parse_braced_block(end, "'else'")
            conditions.append(BoolLiteral(True))
            branches.append(block)
        return If(tuple(conditions), tuple(branches)), pos

    def parse_while(self, pos: int) -> Match:
        pos = self.eat_keyword(pos, 'while')
        if pos is None:
            return None
        result = self.parse_expression(pos)
        if result is None:
            raise self.error("expected condition after 'while'", pos)
        cond, pos = result
        body, pos = self.parse_braced_block(pos, 'while condition')
        return While(cond, body), pos

    # Expressions

    def parse_expression(self, pos: int) -> Match:
        return self.parse_addition(pos)

    def parse_addition(self, pos: int) -> Match:
        return self.parse_binary(pos, ADDITIVE_OPS, self.parse_multiplication)

    def parse_multiplication(self, pos: int) -> Match:
        return self.parse_binary(pos, MULTIPLICATIVE_OPS, self.parse_value)

    def parse_binary(self, pos: int, operators: Tuple[str, ...], operand: Callable[[int], Match]) -> Match:
        """Left-associative chain of `operand (op operand)*`.

        Each operator becomes a call whose callee is the operator symbol.
        """
        result = operand(pos)
        if result is None:
            return None
        left, pos = result
        while True:
            token, end = self.peek(pos)
            if token.type != 'OPERATOR' or token.value not in operators:
                return left, pos
            result = operand(end)
            if result is None:
                raise self.error(f"expected an expression after '{token.value}'", end)
            right, pos = result
            left = FunctionCall(str(token), (left, right))

    def parse_value(self, pos: int) -> Match:
        result = self.parse_call(pos)
        if result is not None:
            return result
        end = self.eat_operator(pos, '(')
        if end is not None:
            result = self.parse_expression(end)
            if result is None:
                return None
            value, end = result
            end = self.expect_operator(end, ')', 'to close parenthesis')
            return value, end
        token, end = self.peek(pos)
        if token.type == 'FLOAT':
            return FloatLiteral(float(token.value)), end
        if token.type == 'INT':
            value = int(token.value)
            if not fits_int32(value):
                raise self.error(f"integer literal {token.value} out of range", pos)
            return IntLiteral(value), end
        if token.type == 'IDENT':
            return Variable(str(token)), end
        return None

    def parse_call(self, pos: int) -> Match:
        ident = self.identifier(pos)
        if ident is None:
            return None
        name, pos = ident
        pos = self.eat_operator(pos, '(')
        if pos is None:
            return None
        args: List[Node] = []
        end = self.eat_operator(pos, ')')
        if end is not None:
            return FunctionCall(name, ()), end
        while True:
            result = self.parse_expression(pos)
            if result is None:
                raise self.error(f"expected an argument in call to {name}", pos)
            arg, pos = result
            args.append(arg)
            end = self.eat_operator(pos, ',')
            if end is not None:
                pos = end
                continue
            end = self.eat_operator(pos, ')')
            if end is None:
                raise self.error(f"expected ',' or ')' in call to {name}", pos)
            return FunctionCall(name, tuple(args)), end


def parse_program(source: str, offset: int = 0) -> Block:
    """Parse calcscript source text into a `Block`.

    Raises `ParseError` if a construct is left incomplete or if text
    remains after the last statement.
    """
    try:
        return Parser(source).parse_program(offset)
    except RecursionError:
        line, column = line_col(source, offset)
        raise ParseError("program nested too deeply", offset, line, column) from None
