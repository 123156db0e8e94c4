import json

import pytest

from uncode.ast import FunctionLiteral, HashLiteral, IntegerLiteral, Program
from uncode.ast_json import ast_from_obj, ast_to_obj
from uncode.interpreter import Interpreter
from uncode.parser import parse_program
from uncode.types import TypeTag, to_python

SOURCE = '''
def label if 🍕 > 1 : int -> str { "many" }
def label : int -> str { "one" }
h = {"k": [1..3]}
[1, 2] +> label |> join(",") >> out
out + (h["k"][-1..] |> to_string)
'''


def test_nodes_carry_their_class_name():
    obj = ast_to_obj(parse_program('1'))
    assert obj == {'type': 'Program', 'statements': [{'type': 'IntegerLiteral', 'value': 1}]}


def test_type_tags_are_tagged():
    obj = ast_to_obj(parse_program('def f : int { 1 }'))
    fn = obj['statements'][0]
    assert fn['input_type'] == {'__type__': 'TypeTag', 'value': 'int'}
    assert fn['return_type'] is None


def test_round_trip_through_json():
    program = parse_program(SOURCE)
    restored = ast_from_obj(json.loads(json.dumps(ast_to_obj(program), ensure_ascii=False)))
    assert isinstance(restored, Program)
    fn = restored.statements[0]
    assert isinstance(fn, FunctionLiteral)
    assert fn.input_type is TypeTag.INT and fn.return_type is TypeTag.STR
    assert fn.line == program.statements[0].line
    pairs = restored.statements[2].value
    assert isinstance(pairs, HashLiteral)
    assert isinstance(pairs.pairs[0], tuple)


def test_reloaded_program_runs_the_same():
    program = parse_program(SOURCE)
    restored = ast_from_obj(ast_to_obj(program))
    original = to_python(Interpreter().run(program))
    assert original == "one,many[3]"
    assert to_python(Interpreter().run(restored)) == original


def test_unknown_node_type():
    with pytest.raises(ValueError):
        ast_from_obj({'type': 'Teleport'})


def test_invalid_objects():
    with pytest.raises(TypeError):
        ast_from_obj(object())
    with pytest.raises(TypeError):
        ast_to_obj({1, 2})


def test_primitives_pass_through():
    assert ast_from_obj({'type': 'IntegerLiteral', 'value': 7}) == IntegerLiteral(7)
    assert ast_to_obj(None) is None
