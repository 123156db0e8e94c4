"""Interpreter facade for the uncode language.

Ties the pieces together: the builtin registry is populated once, named
functions are hoisted into the global environment and the program is
evaluated. See `uncode.parser` for the front end and `uncode.evaluator`
for evaluation rules.
"""

from __future__ import annotations

import sys
import threading
from typing import Optional

from .ast import Program
from .builtin_function import BuiltinRegistry
from .config import Config
from .environment import Environment
from .errors import UncodeError, UncodeRuntimeError
from .evaluator import Evaluator
from .logger import configure_logging, get_logger
from .parser import parse_program
from .preregister import preregister_functions
from .std import populate_builtins
from .types import Value, is_error

log = get_logger('runtime')

# Each uncode call level costs about a dozen Python frames.
RECURSION_LIMIT = 100_000
EVAL_STACK_SIZE = 512 * 1024 * 1024


class Interpreter:
    """Runs parsed uncode programs against a persistent global environment."""
    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        if self.config.logging_enabled:
            configure_logging(self.config)
        self.builtins = populate_builtins(BuiltinRegistry())
        self.global_env = Environment()
        self.evaluator = Evaluator(self.builtins, self.config)

    # Public API
    def run(self, program: Program, raise_on_error: Optional[bool] = None) -> Value:
        if raise_on_error is None:
            raise_on_error = self.config.raise_on_error
        log.info('program start: %d statement(s)', len(program.statements))
        preregister_functions(program, self.global_env)
        try:
            result = self._evaluate_deep(program)
        except RecursionError:
            log.error('maximum recursion depth exceeded')
            raise UncodeError('maximum recursion depth exceeded') from None
        if is_error(result):
            log.error('runtime error: %s', result.message)
            if raise_on_error:
                raise UncodeRuntimeError(result)
        log.info('program end: %s', result.inspect())
        return result

    def _evaluate_deep(self, program: Program) -> Value:
        """Evaluate on a worker thread with a large stack and recursion limit.

        Exceptions raised during evaluation are re-raised in the caller.
        """
        outcome = {}

        def target():
            try:
                outcome['result'] = self.evaluator.evaluate(program, self.global_env)
            except BaseException as e:
                outcome['error'] = e

        old_limit = sys.getrecursionlimit()
        old_stack = threading.stack_size(EVAL_STACK_SIZE)
        sys.setrecursionlimit(max(old_limit, RECURSION_LIMIT))
        try:
            worker = threading.Thread(target=target, name='uncode-eval')
            worker.start()
            worker.join()
        finally:
            threading.stack_size(old_stack)
            sys.setrecursionlimit(old_limit)
        if 'error' in outcome:
            raise outcome['error']
        return outcome['result']

    def run_source(self, source: str, raise_on_error: Optional[bool] = None) -> Value:
        return self.run(parse_program(source), raise_on_error)


def run_program(source: str, config: Optional[Config] = None) -> Value:
    """Convenience function to parse and run an uncode program from source."""
    ast_program = parse_program(source)
    interpreter = Interpreter(config)
    return interpreter.run(ast_program)
