"""CLI entry point for the calcscript interpreter.

Usage:
    python -m calcscript [-v|-vv|-vvv|-vvvv] [-o OUTPUT] [-i FILE | program_file]
    python -m calcscript [-v...] --emit-ast <program_file>
    python -m calcscript [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  -i FILE       Program file to execute (same as the positional argument)
  -o OUTPUT     Write print output to OUTPUT instead of stdout
  --emit-ast    Parse the given program file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Without a program file the source is read from stdin. Debug information
is written to `debug.txt` in the current directory when verbosity is
greater than zero.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .ast_json import ast_to_obj, ast_from_obj
from .errors import CalcError
from .interpreter import Interpreter
from .parser import parse_program


def read_source(path: str | None) -> str:
    if path is None:
        return sys.stdin.read()
    program_file = Path(path)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        return f.read()


def execute(program, args) -> None:
    out = open(args.output, 'w', encoding='utf-8') if args.output else None
    interpreter = Interpreter(debug_level=args.v, debug_file='debug.txt', out=out)
    try:
        interpreter.run(program)
    finally:
        if out is not None:
            out.close()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="calcscript interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('-i', '--input', metavar='FILE', help='program file to execute')
    parser.add_argument('-o', '--output', metavar='FILE', help='write print output to FILE')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='PROGRAM_FILE', help='emit AST JSON for the given program file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='program file to execute (default: stdin)')
    args = parser.parse_args(argv)
    if args.input and args.program:
        parser.error('give the program file either with -i or as an argument, not both')

    logging.basicConfig(level=logging.DEBUG if args.v >= 4 else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s', stream=sys.stderr)

    try:
        # Emit AST mode
        if args.emit_ast:
            program_file = Path(args.emit_ast)
            program = parse_program(read_source(args.emit_ast))
            obj = ast_to_obj(program)
            out_path = program_file.with_name(program_file.name + '.ast.json')
            with open(out_path, 'w', encoding='utf-8') as out:
                json.dump(obj, out, ensure_ascii=False, indent=2)
            print(str(out_path))
            return

        # Execute from AST JSON
        if args.ast:
            ast_path = Path(args.ast)
            if not ast_path.exists():
                print(f"Error: file {ast_path} not found", file=sys.stderr)
                sys.exit(1)
            with open(ast_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            execute(ast_from_obj(data), args)
            return

        # Default: execute source file or stdin
        execute(parse_program(read_source(args.input or args.program)), args)
    except CalcError as e:
        sys.stdout.flush()
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        sys.stdout.flush()
        print(f"Runtime error: {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
