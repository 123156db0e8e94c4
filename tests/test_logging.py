import logging

import pytest

from uncode.config import Config, parse_component_level
from uncode.interpreter import Interpreter
from uncode.logger import TRACE, parse_level, shutdown_logging, verbosity_to_level


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    shutdown_logging()


@pytest.mark.parametrize('count, level', [(0, None), (1, 'WARN'), (2, 'INFO'), (3, 'DEBUG'), (4, 'TRACE'), (9, 'TRACE')])
def test_verbosity_to_level(count, level):
    assert verbosity_to_level(count) == level


def test_parse_level():
    assert parse_level('warn') == logging.WARNING
    assert parse_level('TRACE') == TRACE
    with pytest.raises(ValueError):
        parse_level('loud')


def test_config_validation():
    assert Config(log_level='debug').log_level == 'DEBUG'
    assert Config(component_levels={'eval': 'debug'}).component_levels == {'eval': 'DEBUG'}
    with pytest.raises(ValueError):
        Config(log_level='bogus')
    with pytest.raises(ValueError):
        Config(component_levels={'gpu': 'INFO'})


def test_parse_component_level():
    assert parse_component_level('Eval=trace') == ('eval', 'TRACE')
    for text in ('eval', 'eval=', 'gpu=INFO', 'eval=LOUD'):
        with pytest.raises(ValueError):
            parse_component_level(text)


def test_logging_enabled():
    assert not Config().logging_enabled
    assert Config(log_level='INFO').logging_enabled
    assert Config(show_conditions=True).logging_enabled
    assert not Config(component_levels={'eval': 'OFF'}).logging_enabled
    assert Config(component_levels={'builtin': 'TRACE'}).logging_enabled


def test_component_override_traces_builtin_calls(capsys):
    interp = Interpreter(Config(component_levels={'builtin': 'TRACE'}))
    interp.run_source('print(1)')
    err = capsys.readouterr().err
    assert 'TRACE [uncode.builtin] call print(1)' in err
    assert '[uncode.eval]' not in err


def test_show_conditions_logs_each_condition(capsys):
    interp = Interpreter(Config(show_conditions=True))
    interp.run_source('def f if 🍕 > 10 { "big" }\ndef f { "small" }\n5 |> f')
    err = capsys.readouterr().err
    assert 'INFO [uncode.eval] condition f#0 with 🍕 5 = False' in err


def test_silent_by_default(capsys):
    Interpreter().run_source('1 |> def { 🍕 }')
    assert capsys.readouterr().err == ''
