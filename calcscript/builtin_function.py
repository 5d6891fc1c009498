from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, TextIO
import math
import sys

from calcscript.errors import CalcError
from calcscript.types import ErrorVal, Void, fits_int32, to_string, type_name


class NativeOp(Enum):
    """Closed set of native operations bound in the root scope."""
    ADD = '+'
    SUB = '-'
    MUL = '*'
    DIV = '/'
    PRINT = 'print'


ARITHMETIC_OPS = (NativeOp.ADD, NativeOp.SUB, NativeOp.MUL, NativeOp.DIV)


@dataclass(frozen=True)
class BuiltinFunction:
    name: str
    op: NativeOp

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"


def default_builtins() -> List[BuiltinFunction]:
    return [BuiltinFunction(op.value, op) for op in NativeOp]


def _check_int(name: str, value: int) -> int:
    if not fits_int32(value):
        raise CalcError(ErrorVal('OverflowError', f'integer overflow in {name}'))
    return value


def _int_div(a: int, b: int) -> int:
    if b == 0:
        raise CalcError(ErrorVal('ZeroDivisionError', 'integer division by zero'))
    # truncate toward zero
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _float_div(a: float, b: float) -> float:
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def apply_arithmetic(op: NativeOp, a: Any, b: Any) -> Any:
    if isinstance(a, float) and isinstance(b, float):
        if op is NativeOp.ADD:
            return a + b
        if op is NativeOp.SUB:
            return a - b
        if op is NativeOp.MUL:
            return a * b
        return _float_div(a, b)
    if isinstance(a, int) and isinstance(b, int) and not isinstance(a, bool) and not isinstance(b, bool):
        if op is NativeOp.ADD:
            return _check_int(op.value, a + b)
        if op is NativeOp.SUB:
            return _check_int(op.value, a - b)
        if op is NativeOp.MUL:
            return _check_int(op.value, a * b)
        return _check_int(op.value, _int_div(a, b))
    raise CalcError(ErrorVal('TypeError', f'unsupported {op.value} for {type_name(a)} and {type_name(b)}'))


def call_native(op: NativeOp, args: List[Any], out: Optional[TextIO] = None) -> Any:
    """Run a native operation on already evaluated arguments."""
    if op in ARITHMETIC_OPS:
        if len(args) != 2:
            raise CalcError(ErrorVal('TypeError', f'{op.value} expects 2 arguments, got {len(args)}'))
        return apply_arithmetic(op, args[0], args[1])
    if op is NativeOp.PRINT:
        stream = out if out is not None else sys.stdout
        print(' '.join(to_string(a) for a in args), file=stream)
        return Void
    raise CalcError(ErrorVal('TypeError', f'unknown native operation {op!r}'))
