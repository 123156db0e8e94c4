# uncode language package
# This package provides a lexer, parser and tree-walking interpreter for uncode.
from .errors import ErrorKind, LexerError, ParseError, UncodeError, UncodeRuntimeError
from .interpreter import Interpreter, run_program
from .parser import parse_program, tokenize

__all__ = [
    'run_program',
    'parse_program',
    'tokenize',
    'Interpreter',
    'ErrorKind',
    'UncodeError',
    'LexerError',
    'ParseError',
    'UncodeRuntimeError',
]
