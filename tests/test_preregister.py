from uncode.environment import Environment
from uncode.interpreter import Interpreter
from uncode.parser import parse_program
from uncode.preregister import preregister_functions
from uncode.types import Function, to_python

SOURCE = '''
def f if 🍕 > 10 { "big" }
def f { "small" }
def f if 🍕 < 0 { "negative" }
def outer {
    def inner { 🍕 + 1 }
    inner(🍕)
}
'''


def test_top_level_forward_reference(capsys):
    Interpreter().run(parse_program('greet("world") |> print\ndef greet(name) { "hello, " + name }'))
    assert capsys.readouterr().out.strip() == 'hello, world'


def test_nested_definitions_are_reachable_before_they_run():
    source = '''
3 |> inner
def helpers {
    def inner { 🍕 * 2 }
}
'''
    assert to_python(Interpreter().run(parse_program(source))) == 6


def test_preregister_counts_registrations():
    env = Environment()
    program = parse_program(SOURCE)
    assert preregister_functions(program, env) == 5
    assert set(env.functions) == {'f', 'outer', 'inner'}


def test_preregister_is_idempotent():
    env = Environment()
    program = parse_program(SOURCE)
    preregister_functions(program, env)
    before = env.get_all_functions_by_name('f')
    assert preregister_functions(program, env) == 0
    after = env.get_all_functions_by_name('f')
    assert len(after) == 3
    assert all(a is b for a, b in zip(before, after))


def test_candidates_are_ordered_with_the_default_last():
    env = Environment()
    preregister_functions(parse_program(SOURCE), env)
    candidates = env.get_all_functions_by_name('f')
    assert [fn.is_conditional for fn in candidates] == [True, True, False]
    assert env.functions['f'].keys() == ['f#0', 'f#1', 'f#default']


def test_bare_name_is_bound_to_the_default():
    env = Environment()
    preregister_functions(parse_program(SOURCE), env)
    bound = env.get('f')
    assert isinstance(bound, Function)
    assert not bound.is_conditional


def test_conditional_only_group_binds_the_latest_variant():
    env = Environment()
    preregister_functions(parse_program('def g if 🍕 { 1 }\ndef g if !🍕 { 2 }'), env)
    assert env.get('g') is env.get_all_functions_by_name('g')[-1]


def test_evaluating_a_definition_does_not_duplicate_it():
    interp = Interpreter()
    interp.run(parse_program(SOURCE))
    assert len(interp.global_env.get_all_functions_by_name('f')) == 3
    assert interp.global_env.functions['f'].keys() == ['f#0', 'f#1', 'f#default']


def test_nested_function_sees_its_enclosing_call():
    source = '''
def make(n) {
    def scaled { 🍕 * n }
    5 |> scaled
}
make(3)
'''
    assert to_python(Interpreter().run(parse_program(source))) == 15
