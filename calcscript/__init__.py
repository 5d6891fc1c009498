# calcscript language package
# This package provides a parser and a tree-walking evaluator for calcscript.
from .parser import parse_program
from .interpreter import run_program, run_file, Interpreter
from .errors import CalcError, ParseError

__all__ = [
    'parse_program',
    'run_program',
    'run_file',
    'Interpreter',
    'CalcError',
    'ParseError',
]
