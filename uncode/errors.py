from enum import Enum
from typing import List


class ErrorKind(Enum):
    """Categories of language-level errors carried by Error values."""
    UNDEFINED_PIPE_VALUE = 'UndefinedPipeValue'
    UNDEFINED_IDENTIFIER = 'UndefinedIdentifier'
    UNDEFINED_FUNCTION = 'UndefinedFunction'
    NO_MATCHING_CONDITIONAL_FUNCTION = 'NoMatchingConditionalFunction'
    TYPE_MISMATCH = 'TypeMismatch'
    UNKNOWN_OPERATOR = 'UnknownOperator'
    UNSUPPORTED_INDEX_TARGET = 'UnsupportedIndexTarget'
    INPUT_TYPE_MISMATCH = 'InputTypeMismatch'
    RETURN_TYPE_MISMATCH = 'ReturnTypeMismatch'
    INDEX_OUT_OF_RANGE = 'IndexOutOfRange'
    DIVISION_BY_ZERO = 'DivisionByZero'
    INVALID_PIPELINE_TARGET = 'InvalidPipelineTarget'
    ARITY_MISMATCH = 'ArityMismatch'
    IO_FAILURE = 'IOFailure'


class UncodeError(Exception):
    """Base class for host-level failures raised by the interpreter."""


class LexerError(UncodeError):
    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message)
        self.line = line
        self.column = column


class ParseError(UncodeError):
    """All syntax errors found in one source text."""
    def __init__(self, errors: List[str]):
        super().__init__('\n'.join(errors))
        self.errors = errors


class UncodeRuntimeError(UncodeError):
    """Raised when a program evaluates to an Error and the caller asked for exceptions."""
    def __init__(self, error):
        super().__init__(error.message)
        self.error = error
