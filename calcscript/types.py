"""Runtime value definitions and helpers for calcscript.

The evaluator works with these runtime kinds:

* `int`   -- signed 32-bit integer (`Int`)
* `float` -- IEEE double (`Float`)
* `FunctionValue` -- a user function declaration, stored by value
* `BuiltinFunction` -- a native operation (see `builtin_function`)
* `Void` -- absence of a value

Plain Python `int` and `float` carry the two numeric kinds; the other
kinds are small classes defined here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import math
from decimal import Decimal

from .ast import FunctionDecl


INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1


class VoidVal:
    """Marker object for the calcscript `Void` value."""
    def __repr__(self) -> str:
        return 'Void'


Void = VoidVal()


@dataclass
class ErrorVal:
    """Name and message of a calcscript runtime or syntax error."""
    name: str
    message: str

    def __repr__(self) -> str:
        return f"Error(name={self.name!r}, message={self.message!r})"


@dataclass
class FunctionValue:
    """A user-defined function.

    Holds the declaration only. There is no captured environment: a call
    runs the body in a scope chained to the caller's scope.
    """
    decl: FunctionDecl

    @property
    def name(self) -> str:
        return self.decl.name

    def __repr__(self) -> str:
        return f"<fn {self.decl.name}>"


def fits_int32(value: int) -> bool:
    return INT_MIN <= value <= INT_MAX


def type_name(value: Any) -> str:
    """Return the calcscript kind name of a runtime value."""
    if isinstance(value, bool):
        return 'Int'
    if isinstance(value, int):
        return 'Int'
    if isinstance(value, float):
        return 'Float'
    if isinstance(value, VoidVal):
        return 'Void'
    if isinstance(value, FunctionValue):
        return 'Function'
    # local import: builtin_function imports this module
    from .builtin_function import BuiltinFunction
    if isinstance(value, BuiltinFunction):
        return 'Builtin'
    return type(value).__name__


def format_float(value: float) -> str:
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'inf' if value > 0 else '-inf'
    # shortest round-trip digits, written out without an exponent
    text = format(Decimal(repr(value)), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def to_string(value: Any) -> str:
    """Convert a runtime value to the text `print` writes."""
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_float(value)
    if isinstance(value, VoidVal):
        return 'void'
    return repr(value)


def is_truthy(value: Any) -> bool:
    # Void and numeric zero are false; everything else, functions included, is true
    if isinstance(value, VoidVal):
        return False
    if isinstance(value, (int, float)):
        return value != 0
    return True
