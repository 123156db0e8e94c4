"""Expression and statement evaluation.

`Evaluator.evaluate` walks the AST produced by `uncode.parser` and returns a
runtime `Value` for every node. Language-level failures are returned as
`Error` values and propagate unchanged through every handler; no exception
crosses this boundary in normal operation. Pipelines and named-function
dispatch live in `uncode.pipeline`.
"""

from __future__ import annotations

from typing import List, Optional

from .ast import (
    Node, Program, Block, IntegerLiteral, FloatLiteral, StringLiteral, BooleanLiteral,
    NullLiteral, PipeValue, SecondaryOutput, ArrayLiteral, RangeLiteral, HashLiteral,
    Identifier, PrefixExpression, InfixExpression, PipelineExpression,
    AssignExpression, SliceIndex, IndexExpression, PropertyAccess, CallExpression,
    FunctionLiteral, IfExpression, CaseStatement,
)
from .builtin_function import BuiltinRegistry
from .config import Config
from .environment import Environment
from .errors import ErrorKind
from .logger import get_logger, trace
from .pipeline import PIPE_VALUE, Dispatcher
from .preregister import make_function
from .types import (
    NULL, Array, Boolean, Error, Float, Hash, Integer, ReturnMarker, String, Value,
    hash_key, int_div, int_mod, is_error, is_truthy, make_range, new_error, values_equal,
)

log = get_logger('eval')

_COMPARISONS = {
    '<': lambda a, b: a < b,
    '>': lambda a, b: a > b,
    '<=': lambda a, b: a <= b,
    '>=': lambda a, b: a >= b,
}


class Evaluator:
    """Tree-walking evaluator for uncode programs."""
    def __init__(self, builtins: BuiltinRegistry, config: Optional[Config] = None):
        self.builtins = builtins
        self.config = config or Config()
        self.dispatcher = Dispatcher(self)

    def evaluate(self, node: Node, env: Environment) -> Value:
        trace(log, 'evaluate %s', type(node).__name__)
        if isinstance(node, Program):
            return self.eval_program(node, env)
        if isinstance(node, Block):
            return self.eval_block(node, env)
        if isinstance(node, IntegerLiteral):
            return Integer(node.value)
        if isinstance(node, FloatLiteral):
            return Float(node.value)
        if isinstance(node, StringLiteral):
            return String(node.value)
        if isinstance(node, BooleanLiteral):
            return Boolean(node.value)
        if isinstance(node, NullLiteral):
            return NULL
        if isinstance(node, PipeValue):
            value = env.get(PIPE_VALUE)
            if value is None:
                return new_error(ErrorKind.UNDEFINED_PIPE_VALUE,
                                 f"pipe value {PIPE_VALUE} is not defined outside a pipeline or function")
            return value
        if isinstance(node, SecondaryOutput):
            return ReturnMarker(NULL)
        if isinstance(node, Identifier):
            return self.eval_identifier(node, env)
        if isinstance(node, ArrayLiteral):
            elements = self.eval_expressions(node.elements, env)
            if isinstance(elements, Error):
                return elements
            return Array(elements)
        if isinstance(node, RangeLiteral):
            start = self.evaluate(node.start, env)
            if is_error(start):
                return start
            end = self.evaluate(node.end, env)
            if is_error(end):
                return end
            return make_range(start, end)
        if isinstance(node, HashLiteral):
            return self.eval_hash(node, env)
        if isinstance(node, PrefixExpression):
            right = self.evaluate(node.right, env)
            if is_error(right):
                return right
            return self.eval_prefix(node.operator, right)
        if isinstance(node, InfixExpression):
            left = self.evaluate(node.left, env)
            if is_error(left):
                return left
            right = self.evaluate(node.right, env)
            if is_error(right):
                return right
            return self.eval_infix(node.operator, left, right)
        if isinstance(node, PipelineExpression):
            return self.dispatcher.evaluate_pipeline(node, env)
        if isinstance(node, AssignExpression):
            return self.eval_assign(node, env)
        if isinstance(node, IndexExpression):
            return self.eval_index(node, env)
        if isinstance(node, PropertyAccess):
            return self.eval_property(node, env)
        if isinstance(node, CallExpression):
            return self.eval_call(node, env)
        if isinstance(node, FunctionLiteral):
            return self.eval_function_literal(node, env)
        if isinstance(node, IfExpression):
            return self.eval_if(node, env)
        if isinstance(node, CaseStatement):
            return self.eval_case(node, env)
        raise TypeError(f"cannot evaluate node {type(node).__name__}")

    # Statements

    def eval_program(self, program: Program, env: Environment) -> Value:
        result: Value = NULL
        for stmt in program.statements:
            result = self.evaluate(stmt, env)
            if isinstance(result, ReturnMarker):
                # no enclosing function to return from
                result = result.value
            if isinstance(result, Error):
                return result
        return result

    def eval_block(self, block: Block, env: Environment) -> Value:
        block_env = env.child()
        result: Value = NULL
        for stmt in block.statements:
            result = self.evaluate(stmt, block_env)
            if isinstance(result, (Error, ReturnMarker)):
                return result
        return result

    def eval_expressions(self, nodes: List[Node], env: Environment):
        """Evaluate nodes left to right; returns the first Error instead of a list."""
        values: List[Value] = []
        for node in nodes:
            value = self.evaluate(node, env)
            if is_error(value):
                return value
            values.append(value)
        return values

    def eval_if(self, node: IfExpression, env: Environment) -> Value:
        condition = self.evaluate(node.condition, env)
        if is_error(condition):
            return condition
        if is_truthy(condition):
            return self.eval_block(node.consequence, env)
        if node.alternative is None:
            return NULL
        return self.evaluate(node.alternative, env)

    def eval_case(self, node: CaseStatement, env: Environment) -> Value:
        if node.condition is not None:
            condition = self.evaluate(node.condition, env)
            if is_error(condition):
                return condition
            if not is_truthy(condition):
                return NULL
        value = self.evaluate(node.body, env)
        if isinstance(value, (Error, ReturnMarker)):
            return value
        return ReturnMarker(value)

    def eval_assign(self, node: AssignExpression, env: Environment) -> Value:
        value = self.evaluate(node.value, env)
        if isinstance(value, (Error, ReturnMarker)):
            return value
        if isinstance(node.target, SecondaryOutput):
            return ReturnMarker(value)
        env.set(node.target.name, value)
        trace(log, 'assign %s = %s', node.target.name, value.inspect())
        return value

    # Expressions

    def eval_identifier(self, node: Identifier, env: Environment) -> Value:
        value = env.get(node.name)
        if value is not None:
            return value
        builtin = self.builtins.get(node.name)
        if builtin is not None:
            return builtin
        return new_error(ErrorKind.UNDEFINED_IDENTIFIER, f"undefined identifier: {node.name}")

    def eval_hash(self, node: HashLiteral, env: Environment) -> Value:
        result = Hash()
        for key_node, value_node in node.pairs:
            key = self.evaluate(key_node, env)
            if is_error(key):
                return key
            if hash_key(key) is None:
                return new_error(ErrorKind.TYPE_MISMATCH, f"unusable as hash key: {key.kind}")
            value = self.evaluate(value_node, env)
            if is_error(value):
                return value
            result.put(key, value)
        return result

    def eval_function_literal(self, node: FunctionLiteral, env: Environment) -> Value:
        fn = make_function(node, env)
        if node.name:
            if env.refresh_function(fn):
                trace(log, 'refreshed closure of %s', node.name)
            else:
                env.register_function(fn)
                log.debug('registered %s (%s)', node.name, ', '.join(env.functions[node.name].keys()))
        return fn

    def eval_prefix(self, operator: str, right: Value) -> Value:
        if operator == '!':
            return Boolean(not is_truthy(right))
        if operator == '-':
            if isinstance(right, Integer):
                return Integer(-right.value)
            return new_error(ErrorKind.TYPE_MISMATCH, f"type mismatch: -{right.kind}")
        return new_error(ErrorKind.UNKNOWN_OPERATOR, f"unknown operator: {operator}{right.kind}")

    def eval_infix(self, operator: str, left: Value, right: Value) -> Value:
        if left.kind != right.kind:
            return new_error(ErrorKind.TYPE_MISMATCH, f"type mismatch: {left.kind} {operator} {right.kind}")
        if operator == '==':
            return Boolean(values_equal(left, right))
        if operator == '!=':
            return Boolean(not values_equal(left, right))
        if isinstance(left, Integer):
            return self._integer_infix(operator, left.value, right.value)
        if isinstance(left, Float):
            return self._float_infix(operator, left.value, right.value)
        if isinstance(left, String):
            if operator == '+':
                return String(left.value + right.value)
            if operator in _COMPARISONS:
                return Boolean(_COMPARISONS[operator](left.value, right.value))
        if isinstance(left, Boolean):
            if operator == '&&':
                return Boolean(left.value and right.value)
            if operator == '||':
                return Boolean(left.value or right.value)
        return self._unknown_operator(operator, left, right)

    def _integer_infix(self, operator: str, a: int, b: int) -> Value:
        if operator == '+':
            return Integer(a + b)
        if operator == '-':
            return Integer(a - b)
        if operator == '*':
            return Integer(a * b)
        if operator in ('/', '%'):
            if b == 0:
                return new_error(ErrorKind.DIVISION_BY_ZERO, f"division by zero: {a} {operator} 0")
            return Integer(int_div(a, b) if operator == '/' else int_mod(a, b))
        if operator in _COMPARISONS:
            return Boolean(_COMPARISONS[operator](a, b))
        return self._unknown_operator(operator, Integer(a), Integer(b))

    def _float_infix(self, operator: str, a: float, b: float) -> Value:
        if operator == '+':
            return Float(a + b)
        if operator == '-':
            return Float(a - b)
        if operator == '*':
            return Float(a * b)
        if operator == '/':
            if b == 0.0:
                return new_error(ErrorKind.DIVISION_BY_ZERO, f"division by zero: {Float(a).inspect()} / 0")
            return Float(a / b)
        if operator in _COMPARISONS:
            return Boolean(_COMPARISONS[operator](a, b))
        return self._unknown_operator(operator, Float(a), Float(b))

    @staticmethod
    def _unknown_operator(operator: str, left: Value, right: Value) -> Error:
        return new_error(ErrorKind.UNKNOWN_OPERATOR, f"unknown operator: {left.kind} {operator} {right.kind}")

    # Indexing

    def eval_index(self, node: IndexExpression, env: Environment) -> Value:
        target = self.evaluate(node.target, env)
        if is_error(target):
            return target
        if isinstance(node.index, SliceIndex):
            return self._eval_slice(target, node.index, env)
        index = self.evaluate(node.index, env)
        if is_error(index):
            return index
        if isinstance(target, Hash):
            if hash_key(index) is None:
                return new_error(ErrorKind.TYPE_MISMATCH, f"unusable as hash key: {index.kind}")
            value = target.get(index)
            return value if value is not None else NULL
        if not isinstance(target, (Array, String)):
            return new_error(ErrorKind.UNSUPPORTED_INDEX_TARGET, f"index operator not supported: {target.kind}")
        if not isinstance(index, Integer):
            return new_error(ErrorKind.TYPE_MISMATCH, f"index must be an integer, got {index.kind}")
        items = target.elements if isinstance(target, Array) else target.value
        position = index.value + len(items) if index.value < 0 else index.value
        if position < 0 or position >= len(items):
            return new_error(ErrorKind.INDEX_OUT_OF_RANGE, f"index out of range: {index.value} (length {len(items)})")
        if isinstance(target, Array):
            return items[position]
        return String(items[position])

    def _eval_slice(self, target: Value, bounds_node: SliceIndex, env: Environment) -> Value:
        if not isinstance(target, (Array, String)):
            return new_error(ErrorKind.UNSUPPORTED_INDEX_TARGET, f"index operator not supported: {target.kind}")
        items = target.elements if isinstance(target, Array) else target.value
        length = len(items)
        bounds = []
        for bound, default in ((bounds_node.start, 0), (bounds_node.end, length)):
            if bound is None:
                bounds.append(default)
                continue
            value = self.evaluate(bound, env)
            if is_error(value):
                return value
            if not isinstance(value, Integer):
                return new_error(ErrorKind.TYPE_MISMATCH, f"slice bound must be an integer, got {value.kind}")
            position = value.value + length if value.value < 0 else value.value
            if position < 0 or position > length:
                return new_error(ErrorKind.INDEX_OUT_OF_RANGE,
                                 f"slice bound out of range: {value.value} (length {length})")
            bounds.append(position)
        start, end = bounds
        if isinstance(target, Array):
            return Array(list(items[start:end]))
        return String(items[start:end])

    # Properties and calls

    def eval_property(self, node: PropertyAccess, env: Environment) -> Value:
        target = self.evaluate(node.target, env)
        if is_error(target):
            return target
        if node.name == '💩':
            return target.get_secondary()
        if isinstance(target, Hash):
            value = target.get(String(node.name))
            return value if value is not None else NULL
        return self.dispatcher.pipe_named(target, node.name, [], env)

    def eval_call(self, node: CallExpression, env: Environment) -> Value:
        callee_node = node.function
        if isinstance(callee_node, PropertyAccess) and callee_node.name != '💩':
            target = self.evaluate(callee_node.target, env)
            if is_error(target):
                return target
            if isinstance(target, Hash):
                member = target.get(String(callee_node.name))
                if member is not None:
                    args = self.eval_expressions(node.arguments, env)
                    if isinstance(args, Error):
                        return args
                    return self.dispatcher.invoke_value(member, args, env, from_pipeline=False)
            return self.dispatcher.pipe_named(target, callee_node.name, node.arguments, env)
        args = self.eval_expressions(node.arguments, env)
        if isinstance(args, Error):
            return args
        if isinstance(callee_node, Identifier):
            return self.dispatcher.apply_named(callee_node.name, args, env, from_pipeline=False)
        callee = self.evaluate(callee_node, env)
        if is_error(callee):
            return callee
        return self.dispatcher.invoke_value(callee, args, env, from_pipeline=False)
