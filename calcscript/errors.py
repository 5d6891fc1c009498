from typing import Any, Optional

from calcscript.types import ErrorVal


class CalcError(Exception):
    """Exception type used to propagate fatal calcscript errors."""
    def __init__(self, err: ErrorVal):
        super().__init__(f"{err.name}: {err.message}")
        self.err = err


class ParseError(CalcError):
    """A committed grammar construct could not be completed."""
    def __init__(self, message: str, pos: int, line: Optional[int] = None, column: Optional[int] = None):
        where = f"offset {pos}"
        if line is not None:
            where += f" (line {line}, column {column})"
        super().__init__(ErrorVal('SyntaxError', f"{message} at {where}"))
        self.pos = pos
        self.line = line
        self.column = column


class ReturnSignal:
    """Internal marker carrying the value of a `return` out of nested blocks."""
    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"
