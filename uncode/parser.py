"""Lexer and parser for the uncode language.

Parsing is a two-stage pipeline:

1. **Preprocessing**: newlines that logically terminate statements are
   replaced with semicolons, `//` comments are stripped and a semicolon is
   placed before every closing brace. The grammar can then require a `;`
   after each statement. String literals are left untouched.

2. **Parsing**: the preprocessed text is fed to a Lark LALR parser and the
   parse tree is turned into the dataclass AST of `uncode.ast` by
   `ASTTransformer`. Syntax errors are collected with Lark's error recovery
   and raised together as a single `ParseError`.

`tokenize` exposes the lexer on its own; `parse_program` is the entry point
used by the interpreter.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from lark import Lark, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken, VisitError

from .ast import (
    Program, Block, IntegerLiteral, FloatLiteral, StringLiteral, BooleanLiteral,
    NullLiteral, PipeValue, SecondaryOutput, ArrayLiteral, RangeLiteral, HashLiteral,
    Identifier, PrefixExpression, InfixExpression, PipelineExpression,
    AssignExpression, SliceIndex, IndexExpression, PropertyAccess, CallExpression,
    FunctionLiteral, IfExpression, CaseStatement,
)
from .errors import LexerError, ParseError
from .logger import get_logger, trace
from .types import TypeTag

lexer_log = get_logger('lexer')
parser_log = get_logger('parser')

MAX_PARSE_ERRORS = 20

###############################################################################
# Preprocessing
###############################################################################

# A newline after one of these characters never ends a statement.
_OPEN_ENDINGS = set(';{,:([+-*/%=<>|&!')

# A line starting with one of these continues the previous statement.
_CONTINUATIONS = ('|>', '||', '|', '+>', '?>', '>>', '&&', "'s", '.')


def _last_significant(chars: List[str]) -> str:
    j = len(chars) - 1
    while j >= 0 and chars[j].isspace():
        j -= 1
    return chars[j] if j >= 0 else ''


def _continues(source: str, i: int) -> bool:
    """True if the text after position `i` continues the current statement."""
    j = i
    while j < len(source) and source[j].isspace():
        j += 1
    rest = source[j:j + 5]
    if rest.startswith(_CONTINUATIONS):
        return True
    if rest.startswith('else'):
        after = source[j + 4:j + 5]
        return not (after.isalnum() or after == '_')
    return False


def preprocess(source: str) -> str:
    """Normalize statement terminators.

    Newlines outside of parentheses, brackets and strings become `;` unless
    the line ends in an operator or opening delimiter, or the next line
    starts with a continuation such as `|>` or `else`. Newlines themselves
    are kept so that token line numbers match the source.
    """
    result: List[str] = []
    depth = 0  # nesting depth for () and []
    i = 0
    length = len(source)
    in_string = False
    escape = False
    while i < length:
        c = source[i]
        if in_string:
            result.append(c)
            if escape:
                escape = False
            elif c == '\\':
                escape = True
            elif c == '"':
                in_string = False
            i += 1
            continue
        if c == '/' and i + 1 < length and source[i + 1] == '/':
            while i < length and source[i] != '\n':
                i += 1
            continue
        if c == '"':
            in_string = True
        elif c in '([':
            depth += 1
        elif c in ')]':
            if depth > 0:
                depth -= 1
        elif c == '}':
            if _last_significant(result) not in ('', ';', '{'):
                result.append(';')
        elif c == '\n':
            prev = _last_significant(result)
            if depth == 0 and prev and prev not in _OPEN_ENDINGS and not _continues(source, i + 1):
                result.append(';')
        result.append(c)
        i += 1
    if _last_significant(result) not in ('', ';'):
        result.append(';')
    return ''.join(result)


###############################################################################
# Grammar
###############################################################################

UNCODE_GRAMMAR = r"""
    ?start: program
    program: statement*

    ?statement: case_stmt
              | expression ";"
              | ";"                                     -> empty_stmt

    case_stmt: "case" "default" ":" expression ";"      -> case_default
             | "case" expression ":" expression ";"

    block: "{" statement* "}"

    // Expressions, lowest precedence first
    ?expression: assignment

    ?assignment: pipeline
               | NAME "=" assignment                    -> assign_name
               | assignment WRITE NAME                  -> write_name
               | assignment WRITE POO                   -> write_poo

    ?pipeline: logic_or
             | pipeline (PIPE | MAP_PIPE | FILTER_PIPE | PAR_PIPE) pipe_target -> pipe_expr

    ?pipe_target: NAME pipe_arg*                        -> pipe_name
                | NAME "(" [arguments] ")"              -> pipe_call
                | literal
                | PIZZA                                 -> pizza
                | array
                | range
                | "(" expression ")"
                | function_literal

    ?pipe_arg: simple_atom

    ?logic_or: logic_and
             | logic_or OR logic_and                    -> infix
    ?logic_and: equality
              | logic_and AND equality                  -> infix
    ?equality: comparison
             | equality (EQ | NE) comparison            -> infix
    ?comparison: sum
               | comparison (LT | GT | LE | GE) sum     -> infix
    ?sum: product
        | sum (PLUS | MINUS) product                    -> infix
    ?product: prefix
            | product (STAR | SLASH | PERCENT) prefix   -> infix
    ?prefix: (MINUS | BANG | NOT) prefix                -> prefix_op
           | postfix

    ?postfix: atom
            | postfix "(" [arguments] ")"               -> call
            | postfix "[" index_spec "]"                -> index
            | postfix (DOT | POSS) member               -> property

    ?member: NAME | POO

    ?index_spec: expression
               | [expression] RANGE [expression]        -> slice

    ?atom: simple_atom
         | POO                                          -> poo
         | "(" expression ")"
         | hash
         | function_literal
         | if_expr

    ?simple_atom: literal
                | NAME                                  -> ident
                | PIZZA                                 -> pizza
                | array
                | range

    ?literal: INT                                       -> int_lit
            | FLOAT                                     -> float_lit
            | STRING                                    -> string_lit
            | "true"                                    -> true_lit
            | "false"                                   -> false_lit
            | NULL                                      -> null_lit

    array: "[" [expression ("," expression)*] "]"
    range: "[" expression RANGE expression "]"
    hash: "{" [pair ("," pair)*] ";"? "}"
    pair: expression ":" expression
    arguments: expression ("," expression)*

    if_expr: "if" expression block ["else" (block | if_expr)]

    function_literal: "def" fn_head [condition] [type_sig] block
    fn_head: NAME NAME                                  -> head_name_param
           | NAME [param_list]                          -> head_named
           | [param_list]                               -> head_anon
    param_list: "(" [NAME ("," NAME)*] ")"
    condition: "if" expression
    type_sig: ":" type_name [ARROW type_name]           -> type_in_out
            | ARROW type_name                           -> type_out
    type_name: NAME | NULL

    // Tokens
    PIPE: "|>"
    MAP_PIPE: "+>"
    FILTER_PIPE: "?>"
    PAR_PIPE: "|"
    WRITE: ">>"
    OR: "||"
    AND: "&&"
    EQ: "=="
    NE: "!="
    LE: "<="
    GE: ">="
    LT: "<"
    GT: ">"
    PLUS: "+"
    MINUS: "-"
    STAR: "*"
    SLASH: "/"
    PERCENT: "%"
    BANG: "!"
    NOT: "not"
    NULL: "null"
    RANGE: ".."
    DOT: "."
    POSS: "'s"
    ARROW: "->"
    PIZZA: "🍕"
    POO: "💩"

    NAME: /[^\W\d]\w*/
    FLOAT.2: /\d+\.\d+/
    INT: /\d+/
    STRING: /"(?:[^"\\]|\\.)*"/s

    %ignore /\s+/
"""


UNCODE_PARSER = Lark(
    UNCODE_GRAMMAR,
    parser='lalr',
    lexer='basic',
    propagate_positions=True,
    maybe_placeholders=True,
)


###############################################################################
# Tokenizer
###############################################################################

@dataclass
class Token:
    type: str
    value: str
    line: int
    column: int


def tokenize(source: str) -> List[Token]:
    """Lex `source` into a flat token list ending with an EOF token."""
    text = preprocess(source)
    tokens: List[Token] = []
    try:
        for tok in UNCODE_PARSER.lex(text):
            tokens.append(Token(tok.type, str(tok), tok.line, tok.column))
            trace(lexer_log, 'token %s %r at %d:%d', tok.type, str(tok), tok.line, tok.column)
    except UnexpectedCharacters as err:
        raise LexerError(
            f"line {err.line}, column {err.column}: unexpected character {err.char!r}",
            err.line, err.column,
        ) from err
    line = text.count('\n') + 1
    column = len(text) - text.rfind('\n')
    tokens.append(Token('EOF', '', line, column))
    return tokens


###############################################################################
# AST construction
###############################################################################

_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '\\': '\\', '"': '"', "'": "'", '0': '\0'}
_ESCAPE_RE = re.compile(r'\\(.)', re.S)


def unescape(text: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(0)), text)


class ASTTransformer(Transformer):
    """Transforms the raw parse tree into an AST."""

    def program(self, items):
        return Program([s for s in items if s is not None])

    def block(self, items):
        return Block([s for s in items if s is not None])

    def empty_stmt(self, items):
        return None

    def case_stmt(self, items):
        return CaseStatement(items[0], items[1])

    def case_default(self, items):
        return CaseStatement(None, items[0])

    # Assignment and pipelines

    def assign_name(self, items):
        name, value = items
        return AssignExpression(Identifier(str(name)), value)

    def write_name(self, items):
        value, _, name = items
        return AssignExpression(Identifier(str(name)), value)

    def write_poo(self, items):
        return AssignExpression(SecondaryOutput(), items[0])

    def pipe_expr(self, items):
        left, op, right = items
        return PipelineExpression(str(op), left, right)

    def pipe_name(self, items):
        name = Identifier(str(items[0]))
        if len(items) == 1:
            return name
        return CallExpression(name, list(items[1:]))

    def pipe_call(self, items):
        return CallExpression(Identifier(str(items[0])), items[1] or [])

    # Operators

    def infix(self, items):
        left, op, right = items
        return InfixExpression(str(op), left, right)

    def prefix_op(self, items):
        op, right = items
        operator = '!' if str(op) == 'not' else str(op)
        return PrefixExpression(operator, right)

    def call(self, items):
        return CallExpression(items[0], items[1] or [])

    def index(self, items):
        return IndexExpression(items[0], items[1])

    def slice(self, items):
        start, _, end = items
        return SliceIndex(start, end)

    def property(self, items):
        target, _, member = items
        return PropertyAccess(target, str(member))

    def arguments(self, items):
        return list(items)

    # Atoms

    def ident(self, items):
        return Identifier(str(items[0]))

    def pizza(self, items):
        return PipeValue()

    def poo(self, items):
        return SecondaryOutput()

    def int_lit(self, items):
        return IntegerLiteral(int(items[0]))

    def float_lit(self, items):
        return FloatLiteral(float(items[0]))

    def string_lit(self, items):
        return StringLiteral(unescape(str(items[0])[1:-1]))

    def true_lit(self, items):
        return BooleanLiteral(True)

    def false_lit(self, items):
        return BooleanLiteral(False)

    def null_lit(self, items):
        return NullLiteral()

    def array(self, items):
        return ArrayLiteral([el for el in items if el is not None])

    def range(self, items):
        start, _, end = items
        return RangeLiteral(start, end)

    def hash(self, items):
        return HashLiteral([pair for pair in items if pair is not None])

    def pair(self, items):
        return (items[0], items[1])

    def if_expr(self, items):
        condition, consequence, alternative = items
        return IfExpression(condition, consequence, alternative)

    # Functions

    @v_args(meta=True)
    def function_literal(self, meta, items):
        head, condition, type_sig, body = items
        name, params = head
        input_type, return_type = type_sig or (None, None)
        line = getattr(meta, 'line', 0) if not meta.empty else 0
        column = getattr(meta, 'column', 0) if not meta.empty else 0
        return FunctionLiteral(name, params, body, condition, input_type, return_type, line, column)

    def head_name_param(self, items):
        return str(items[0]), [str(items[1])]

    def head_named(self, items):
        return str(items[0]), items[1] or []

    def head_anon(self, items):
        return None, items[0] or []

    def param_list(self, items):
        return [str(name) for name in items if name is not None]

    def condition(self, items):
        return items[0]

    def type_in_out(self, items):
        input_type, _, return_type = items
        return input_type, return_type

    def type_out(self, items):
        return None, items[1]

    def type_name(self, items):
        token = items[0]
        try:
            return TypeTag(str(token))
        except ValueError:
            raise ParseError([f"line {token.line}, column {token.column}: unknown type name {str(token)!r}"])


def describe_error(err: UnexpectedInput) -> str:
    if isinstance(err, UnexpectedCharacters):
        return f"line {err.line}, column {err.column}: unexpected character {err.char!r}"
    if isinstance(err, UnexpectedToken):
        if err.token.type == '$END':
            return 'unexpected end of input'
        expected = ', '.join(sorted(err.expected)[:8])
        return f"line {err.line}, column {err.column}: unexpected {str(err.token)!r} (expected {expected})"
    return str(err)


def parse_program(source: str) -> Program:
    """Parse uncode source text into a `Program`.

    Raises ParseError listing every syntax error Lark could recover from.
    """
    text = preprocess(source)
    errors: List[UnexpectedInput] = []

    def collect(err: UnexpectedInput) -> bool:
        errors.append(err)
        parser_log.debug('syntax error: %s', describe_error(err))
        return len(errors) < MAX_PARSE_ERRORS

    tree = None
    try:
        tree = UNCODE_PARSER.parse(text, on_error=collect)
    except UnexpectedInput as err:
        if not any(e is err for e in errors):
            errors.append(err)
    if errors:
        # recovery at end of input can report the same error more than once
        raise ParseError(list(dict.fromkeys(describe_error(e) for e in errors)))
    try:
        program = ASTTransformer().transform(tree)
    except VisitError as err:
        if isinstance(err.orig_exc, ParseError):
            raise err.orig_exc from None
        raise
    parser_log.debug('parsed %d top-level statements', len(program.statements))
    return program
