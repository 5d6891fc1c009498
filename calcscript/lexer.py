"""Tokenizer for calcscript.

`next_token(text, offset)` is a pure function: it skips whitespace,
recognizes exactly one token and returns it together with the offset
just past it. The parser backtracks by calling it again at an earlier
offset, so it keeps no state between calls.

Tokens are `lark.Token` objects. `token.type` is one of EOF, SEMICOLON,
KEYWORD, OPERATOR, IDENT, INT, FLOAT or ERROR; the token text is the
string value itself.
"""

from __future__ import annotations

import logging
from typing import Tuple

from lark import Token

logger = logging.getLogger("calcscript.lexer")
logger.addHandler(logging.NullHandler())


KEYWORDS = (
    'for', 'if', 'while', 'loop', 'until', 'return', 'continue', 'break',
    'to', 'downto', 'fn', 'else', 'elif',
)

# Two-character operators come before their one-character prefixes
OPERATORS = (
    '+', '->', '-', '**', '*', '/', '=', '[', ']', '(', ')', '{', '}', ',',
)

WHITESPACE = ' \t\r\n'


def is_digit(c: str) -> bool:
    return '0' <= c <= '9'


def is_ident_start(c: str) -> bool:
    return c == '_' or ('a' <= c <= 'z') or ('A' <= c <= 'Z')


def is_ident_char(c: str) -> bool:
    return is_ident_start(c) or is_digit(c)


def line_col(text: str, offset: int) -> Tuple[int, int]:
    """Return the 1-based (line, column) of `offset` in `text`."""
    line = text.count('\n', 0, offset) + 1
    column = offset - (text.rfind('\n', 0, offset) + 1) + 1
    return line, column


def _make(text: str, type_: str, value: str, start: int, end: int) -> Token:
    line, column = line_col(text, start)
    return Token(type_, value, start_pos=start, line=line, column=column, end_pos=end)


def _scan_number(text: str, pos: int) -> Tuple[str, int, bool]:
    length = len(text)
    whole = []
    fraction = []
    dot = False
    while pos < length:
        c = text[pos]
        if is_digit(c):
            (fraction if dot else whole).append(c)
        elif c == '.':
            if dot:
                line, column = line_col(text, pos)
                logger.warning("repeated dots in the same number at offset %d (line %d, column %d)", pos, line, column)
            dot = True
        else:
            break
        pos += 1
    if not dot:
        return ''.join(whole), pos, False
    return ''.join(whole) + '.' + (''.join(fraction) or '0'), pos, True


def next_token(text: str, offset: int) -> Tuple[Token, int]:
    """Return the token starting at or after `offset` and the offset after it."""
    length = len(text)
    pos = offset
    while pos < length and text[pos] in WHITESPACE:
        pos += 1
    if pos >= length:
        return _make(text, 'EOF', '', pos, pos), pos
    c = text[pos]
    if c == ';':
        return _make(text, 'SEMICOLON', ';', pos, pos + 1), pos + 1
    # Keywords only match as whole words
    if is_ident_start(c):
        end = pos + 1
        while end < length and is_ident_char(text[end]):
            end += 1
        word = text[pos:end]
        type_ = 'KEYWORD' if word in KEYWORDS else 'IDENT'
        return _make(text, type_, word, pos, end), end
    for op in OPERATORS:
        if text.startswith(op, pos):
            end = pos + len(op)
            return _make(text, 'OPERATOR', op, pos, end), end
    if is_digit(c):
        value, end, is_float = _scan_number(text, pos)
        return _make(text, 'FLOAT' if is_float else 'INT', value, pos, end), end
    return _make(text, 'ERROR', c, pos, pos + 1), pos + 1
