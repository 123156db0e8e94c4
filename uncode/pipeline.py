"""Pipelines and named-function dispatch.

A pipeline step `left |> target` evaluates `left`, binds it to the pipe
value `🍕` in a scope of its own and applies `target` to it. `+>` maps a
target over an array, `?>` filters an array by it, and `|` pipes only when
its right side is callable, acting as a boolean or otherwise.

Named calls go through `Dispatcher.apply_named`. Builtins win; otherwise
the dispatch group of the name supplies candidates, the first conditional
whose condition holds for the pipe value is invoked, and the default
variant is the fallback.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from .ast import CallExpression, FunctionLiteral, Identifier, Node, PipelineExpression
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import ErrorKind
from .logger import get_logger, trace
from .types import (
    NULL, Array, Boolean, Error, Function, Null, ReturnMarker, Value,
    describe_type, is_error, is_truthy, new_error,
)

if TYPE_CHECKING:
    from .evaluator import Evaluator

log = get_logger('eval')

PIPE_VALUE = '🍕'


class Dispatcher:
    def __init__(self, evaluator: 'Evaluator'):
        self.evaluator = evaluator
        self.builtins = evaluator.builtins

    ###########################################################################
    # Pipelines
    ###########################################################################

    def evaluate_pipeline(self, node: PipelineExpression, env: Environment) -> Value:
        left = self.evaluator.evaluate(node.left, env)
        if is_error(left):
            return left
        op = node.operator
        trace(log, 'pipeline %s %s %s', left.inspect(), op, type(node.right).__name__)
        if op == '+>':
            return self.map_values(left, node.right, env)
        if op == '?>':
            return self.filter_values(left, node.right, env)
        if op == '|' and not self.is_callable_target(node.right, env):
            right = self.evaluator.evaluate(node.right, env)
            if is_error(right):
                return right
            if isinstance(left, Boolean) and isinstance(right, Boolean):
                return left if is_truthy(left) else right
            return self.evaluator.eval_infix(op, left, right)
        return self.pipe_into(left, node.right, env)

    def is_callable_target(self, node: Node, env: Environment) -> bool:
        if isinstance(node, (CallExpression, FunctionLiteral)):
            return True
        if isinstance(node, Identifier):
            if node.name in self.builtins or env.group(node.name) is not None:
                return True
            return isinstance(env.get(node.name), (Function, BuiltinFunction))
        return False

    def pipe_into(self, value: Value, target: Node, env: Environment) -> Value:
        """Apply one pipeline target to `value` in a scope where `🍕` is `value`."""
        if isinstance(target, Identifier):
            return self.pipe_named(value, target.name, [], env)
        if isinstance(target, CallExpression):
            if isinstance(target.function, Identifier):
                return self.pipe_named(value, target.function.name, target.arguments, env)
            step_env = self._step_env(value, env)
            callee = self.evaluator.evaluate(target.function, step_env)
            if is_error(callee):
                return callee
            args = self.evaluator.eval_expressions(target.arguments, step_env)
            if isinstance(args, Error):
                return args
            return self.invoke_value(callee, [value] + args, step_env, from_pipeline=True)
        if isinstance(target, FunctionLiteral):
            step_env = self._step_env(value, env)
            fn = self.evaluator.evaluate(target, step_env)
            return self.invoke_value(fn, [value], step_env, from_pipeline=True)
        return new_error(ErrorKind.INVALID_PIPELINE_TARGET, f"invalid pipeline target: {type(target).__name__}")

    def pipe_named(self, value: Value, name: str, arg_nodes: List[Node], env: Environment) -> Value:
        """`value |> name(arg, ...)`: extra arguments are evaluated with `🍕` bound."""
        step_env = self._step_env(value, env)
        args = self.evaluator.eval_expressions(arg_nodes, step_env)
        if isinstance(args, Error):
            return args
        return self.apply_named(name, [value] + args, step_env, from_pipeline=True)

    @staticmethod
    def _step_env(value: Value, env: Environment) -> Environment:
        step_env = env.child()
        if not isinstance(value, Null):
            step_env.declare(PIPE_VALUE, value)
        return step_env

    def map_values(self, value: Value, target: Node, env: Environment) -> Value:
        if not isinstance(value, Array):
            return self.pipe_into(value, target, env)
        results: List[Value] = []
        for element in value.elements:
            result = self.pipe_into(element, target, env)
            if is_error(result):
                return result
            results.append(result)
        return Array(results)

    def filter_values(self, value: Value, target: Node, env: Environment) -> Value:
        elements = value.elements if isinstance(value, Array) else [value]
        kept: List[Value] = []
        for element in elements:
            result = self.pipe_into(element, target, env)
            if is_error(result):
                return result
            if is_truthy(result):
                kept.append(element)
        if not isinstance(value, Array):
            return kept[0] if kept else NULL
        return Array(kept)

    ###########################################################################
    # Dispatch
    ###########################################################################

    def apply_named(self, name: str, args: List[Value], env: Environment, from_pipeline: bool) -> Value:
        builtin = self.builtins.get(name)
        if builtin is not None:
            log.debug('dispatch %s -> builtin', name)
            return builtin.call(args, self.apply_value)
        candidates = env.get_all_functions_by_name(name)
        bound = env.get(name)
        if isinstance(bound, (Function, BuiltinFunction)) and not _is_member(bound, candidates):
            # a plain variable holding a function shadows the dispatch group
            log.debug('dispatch %s -> bound %s', name, bound.inspect())
            return self.invoke_value(bound, args, env, from_pipeline)
        if not candidates:
            if bound is not None:
                return new_error(ErrorKind.TYPE_MISMATCH, f"not a function: {bound.kind}")
            return new_error(ErrorKind.UNDEFINED_FUNCTION, f"undefined function: {name}")
        return self.dispatch(name, candidates, args, env, from_pipeline)

    def dispatch(self, name: str, candidates: List[Function], args: List[Value],
                 env: Environment, from_pipeline: bool) -> Value:
        if len(candidates) == 1:
            log.debug('dispatch %s -> single candidate', name)
            return self.invoke(candidates[0], args, from_pipeline)
        selected = self.select_candidate(name, candidates, args, env)
        if isinstance(selected, Error):
            return selected
        return self.invoke(selected, args, from_pipeline)

    def select_candidate(self, name: str, candidates: List[Function], args: List[Value], env: Environment):
        """Pick the first conditional whose condition holds, else the default.

        Returns the chosen Function or an Error value.
        """
        default: Optional[Function] = None
        index = 0
        for fn in candidates:
            if not fn.is_conditional:
                default = fn
                continue
            cond_env = env.child()
            if args:
                cond_env.declare(PIPE_VALUE, args[0])
            result = self.evaluator.evaluate(fn.condition, cond_env)
            if is_error(result):
                log.debug('condition %s#%d failed: %s', name, index, result.message)
                return result
            matched = is_truthy(result)
            self._log_condition(name, index, args, matched)
            if matched:
                log.debug('dispatch %s -> %s#%d', name, name, index)
                return fn
            index += 1
        if default is not None:
            log.debug('dispatch %s -> %s#default', name, name)
            return default
        return new_error(ErrorKind.NO_MATCHING_CONDITIONAL_FUNCTION, f"no matching conditional function: {name}")

    def _log_condition(self, name: str, index: int, args: List[Value], matched: bool) -> None:
        subject = args[0].inspect() if args else 'null'
        if self.evaluator.config.show_conditions:
            log.info('condition %s#%d with %s %s = %s', name, index, PIPE_VALUE, subject, matched)
        else:
            trace(log, 'condition %s#%d with %s %s = %s', name, index, PIPE_VALUE, subject, matched)

    def invoke_value(self, callee: Value, args: List[Value], env: Environment, from_pipeline: bool) -> Value:
        if isinstance(callee, BuiltinFunction):
            return callee.call(args, self.apply_value)
        if isinstance(callee, Function):
            if callee.name and callee.name not in self.builtins:
                candidates = env.get_all_functions_by_name(callee.name)
                if len(candidates) > 1 and _is_member(callee, candidates):
                    return self.dispatch(callee.name, candidates, args, env, from_pipeline)
            return self.invoke(callee, args, from_pipeline)
        return new_error(ErrorKind.TYPE_MISMATCH, f"not a function: {callee.kind}")

    def apply_value(self, callee: Value, args: List[Value]) -> Value:
        """Callback handed to higher-order builtins: apply `callee` as a pipeline step."""
        env = callee.env if isinstance(callee, Function) else Environment()
        return self.invoke_value(callee, args, env, from_pipeline=True)

    def invoke(self, fn: Function, args: List[Value], from_pipeline: bool) -> Value:
        name = fn.name or 'anonymous'
        subject = args[0] if args else NULL
        if fn.input_type is not None and not fn.input_type.accepts(subject):
            return new_error(
                ErrorKind.INPUT_TYPE_MISMATCH,
                f"input type mismatch for {name}: expected {fn.input_type.value}, got {describe_type(subject)}",
            )
        explicit = list(args[1:]) if from_pipeline else list(args)
        if from_pipeline and not explicit and args:
            explicit = [args[0]]
        if fn.parameters and len(explicit) != len(fn.parameters):
            return new_error(
                ErrorKind.ARITY_MISMATCH,
                f"wrong number of arguments for {name}: expected {len(fn.parameters)}, got {len(explicit)}",
            )
        if not fn.parameters and len(explicit) > 1:
            return new_error(
                ErrorKind.ARITY_MISMATCH,
                f"wrong number of arguments for {name}: expected at most 1, got {len(explicit)}",
            )
        call_env = fn.env.child()
        if args:
            call_env.declare(PIPE_VALUE, args[0])
        for param, value in zip(fn.parameters, explicit):
            call_env.declare(param, value)
        trace(log, 'invoke %s with %s', name, ', '.join(a.inspect() for a in args))
        result = self.evaluator.eval_block(fn.body, call_env)
        if isinstance(result, ReturnMarker):
            result = result.value
        if is_error(result):
            return result
        if fn.return_type is not None and not fn.return_type.accepts(result):
            return new_error(
                ErrorKind.RETURN_TYPE_MISMATCH,
                f"return type mismatch for {name}: expected {fn.return_type.value}, got {describe_type(result)}",
            )
        return result


def _is_member(fn: Value, candidates: List[Function]) -> bool:
    literal = getattr(fn, 'literal', None)
    return any(c is fn or (literal is not None and c.literal is literal) for c in candidates)
