"""Leveled diagnostics for the interpreter.

Each component logs through its own standard-library logger
(`uncode.lexer`, `uncode.parser`, `uncode.eval`, `uncode.runtime`,
`uncode.builtin`). Nothing is emitted until `configure_logging` installs a
handler; the evaluator writes diagnostics and otherwise ignores the sink.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .config import Config

TRACE = 5
logging.addLevelName(TRACE, 'TRACE')

OFF = logging.CRITICAL + 10

COMPONENTS = ('lexer', 'parser', 'eval', 'runtime', 'builtin')

LEVELS = {
    'OFF': OFF,
    'ERROR': logging.ERROR,
    'WARN': logging.WARNING,
    'INFO': logging.INFO,
    'DEBUG': logging.DEBUG,
    'TRACE': TRACE,
}

LOG_FORMAT = '%(levelname)s [%(name)s] %(message)s'

ROOT_LOGGER = 'uncode'

logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())

_handler: Optional[logging.Handler] = None


def get_logger(component: str) -> logging.Logger:
    return logging.getLogger(f'{ROOT_LOGGER}.{component}')


def trace(logger: logging.Logger, msg: str, *args) -> None:
    if logger.isEnabledFor(TRACE):
        logger.log(TRACE, msg, *args)


def parse_level(name: str) -> int:
    try:
        return LEVELS[name.upper()]
    except KeyError:
        raise ValueError(f"unknown log level {name!r}; expected one of {', '.join(LEVELS)}")


def verbosity_to_level(count: int) -> Optional[str]:
    """Map the number of -v flags to a level name (None for zero)."""
    if count <= 0:
        return None
    return ('WARN', 'INFO', 'DEBUG', 'TRACE')[min(count, 4) - 1]


def configure_logging(config: 'Config') -> logging.Handler:
    """Install the single uncode handler according to `config`.

    Calling this again replaces the previous handler and resets component
    overrides.
    """
    global _handler
    root = logging.getLogger(ROOT_LOGGER)
    if _handler is not None:
        root.removeHandler(_handler)
        _handler.close()
    if config.log_file:
        handler: logging.Handler = logging.FileHandler(config.log_file, mode='w', encoding='utf-8')
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(parse_level(config.log_level))
    root.propagate = False
    for component in COMPONENTS:
        get_logger(component).setLevel(logging.NOTSET)
    for component, level in config.component_levels.items():
        get_logger(component).setLevel(parse_level(level))
    if config.show_conditions and 'eval' not in config.component_levels:
        # condition results are logged at INFO
        get_logger('eval').setLevel(min(root.level, logging.INFO))
    _handler = handler
    return handler


def shutdown_logging() -> None:
    """Remove the uncode handler and restore default logger settings."""
    global _handler
    root = logging.getLogger(ROOT_LOGGER)
    if _handler is not None:
        root.removeHandler(_handler)
        _handler.close()
        _handler = None
    root.setLevel(logging.NOTSET)
    root.propagate = True
    for component in COMPONENTS:
        get_logger(component).setLevel(logging.NOTSET)
