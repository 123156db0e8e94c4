"""CLI entry point for the uncode interpreter.

Usage:
    python -m uncode [-v|-vv|-vvv|-vvvv] <program_file>
    python -m uncode [-v...] --emit-ast <program_file>
    python -m uncode [-v...] --ast <ast_json_file>

Options:
  -v                        Increase log verbosity (WARN, INFO, DEBUG, TRACE)
  --log-level LEVEL         Set the log level directly (OFF, ERROR, WARN, INFO, DEBUG, TRACE)
  --log-file PATH           Write logs to PATH instead of stderr
  --component-level C=L     Override the level of one component (repeatable)
  --show-conditions         Log every dispatch condition and its result
  --emit-ast                Parse the given program and emit an AST JSON file
  --ast                     Execute a previously emitted AST JSON file

Program files must use the `.poo` or `.💩` extension.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .ast_json import ast_from_obj, ast_to_obj
from .config import Config, parse_component_level
from .errors import LexerError, ParseError, UncodeError
from .interpreter import Interpreter
from .logger import COMPONENTS, LEVELS, shutdown_logging, verbosity_to_level
from .parser import parse_program
from .types import is_error

PROGRAM_SUFFIXES = ('.poo', '.💩')


def build_config(args: argparse.Namespace) -> Config:
    level = args.log_level or verbosity_to_level(args.v) or 'OFF'
    component_levels = dict(args.component_level or [])
    return Config(
        log_level=level,
        component_levels=component_levels,
        log_file=args.log_file,
        show_conditions=args.show_conditions,
    )


def _component_level(text: str):
    try:
        return parse_component_level(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _read_program(path_text: str) -> str:
    program_file = Path(path_text)
    if not program_file.name.endswith(PROGRAM_SUFFIXES):
        print(f"Error: {program_file} is not an uncode program (expected {' or '.join(PROGRAM_SUFFIXES)})",
              file=sys.stderr)
        sys.exit(1)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        return f.read()


def _parse_or_exit(source: str):
    try:
        return parse_program(source)
    except LexerError as e:
        print(f"Parse error:\n  {e}", file=sys.stderr)
        sys.exit(1)
    except ParseError as e:
        print("Parse error:", file=sys.stderr)
        for message in e.errors:
            print(f"  {message}", file=sys.stderr)
        sys.exit(1)


def _execute(ast_program, config: Config) -> None:
    interpreter = Interpreter(config)
    try:
        result = interpreter.run(ast_program)
    except UncodeError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        shutdown_logging()
    if is_error(result):
        print(f"Runtime error: {result.inspect()}", file=sys.stderr)
        sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog='uncode', description="uncode language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase log verbosity (can be repeated)')
    parser.add_argument('--log-level', type=str.upper, choices=list(LEVELS), help='set the log level')
    parser.add_argument('--log-file', metavar='PATH', help='write logs to PATH instead of stderr')
    parser.add_argument('--component-level', metavar='COMPONENT=LEVEL', action='append', type=_component_level,
                        help=f"override one component's level ({', '.join(COMPONENTS)})")
    parser.add_argument('--show-conditions', action='store_true', help='log dispatch conditions and their results')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='PROGRAM_FILE', help='emit AST JSON for the given program')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='uncode program file (.poo or .💩) to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        source = _read_program(args.emit_ast)
        ast_program = _parse_or_exit(source)
        out_path = Path(args.emit_ast + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(ast_to_obj(ast_program), out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    config = build_config(args)

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        _execute(ast_from_obj(data), config)
        return

    # Default: execute source file
    if not args.program:
        parser.error('missing program file; or use --emit-ast/--ast')
    source = _read_program(args.program)
    _execute(_parse_or_exit(source), config)


if __name__ == '__main__':
    main()
