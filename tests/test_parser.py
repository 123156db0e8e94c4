import pytest

from uncode.ast import (
    ArrayLiteral, AssignExpression, Block, BooleanLiteral, CallExpression, CaseStatement,
    FunctionLiteral, HashLiteral, Identifier, IfExpression, IndexExpression, InfixExpression,
    IntegerLiteral, PipeValue, PipelineExpression, PrefixExpression, PropertyAccess, RangeLiteral,
    SecondaryOutput, SliceIndex, StringLiteral,
)
from uncode.errors import ParseError
from uncode.parser import parse_program
from uncode.types import TypeTag


def parse_one(source):
    program = parse_program(source)
    assert len(program.statements) == 1
    return program.statements[0]


def test_operator_precedence():
    assert parse_one('1 + 2 * 3') == InfixExpression(
        '+', IntegerLiteral(1), InfixExpression('*', IntegerLiteral(2), IntegerLiteral(3)))
    assert parse_one('a || b && c') == InfixExpression(
        '||', Identifier('a'), InfixExpression('&&', Identifier('b'), Identifier('c')))


def test_prefix_not_is_bang():
    assert parse_one('not x') == PrefixExpression('!', Identifier('x'))
    assert parse_one('-2') == PrefixExpression('-', IntegerLiteral(2))


def test_pipelines_are_left_associative():
    assert parse_one('x |> f |> g') == PipelineExpression(
        '|>', PipelineExpression('|>', Identifier('x'), Identifier('f')), Identifier('g'))


def test_pipeline_binds_looser_than_arithmetic():
    assert parse_one('a + 1 +> f') == PipelineExpression(
        '+>', InfixExpression('+', Identifier('a'), IntegerLiteral(1)), Identifier('f'))


def test_pipeline_call_targets():
    assert parse_one('x |> add(1)') == PipelineExpression(
        '|>', Identifier('x'), CallExpression(Identifier('add'), [IntegerLiteral(1)]))
    assert parse_one('x |> add 1 y') == PipelineExpression(
        '|>', Identifier('x'), CallExpression(Identifier('add'), [IntegerLiteral(1), Identifier('y')]))


def test_parallel_pipe():
    assert parse_one('true | false') == PipelineExpression('|', BooleanLiteral(True), BooleanLiteral(False))


def test_write_and_assign():
    assert parse_one('1 + 2 >> total') == AssignExpression(
        Identifier('total'), InfixExpression('+', IntegerLiteral(1), IntegerLiteral(2)))
    assert parse_one('🍕 >> 💩') == AssignExpression(SecondaryOutput(), PipeValue())
    assert parse_one('x = y = 3') == AssignExpression(
        Identifier('x'), AssignExpression(Identifier('y'), IntegerLiteral(3)))


def test_function_literal_with_condition_and_types():
    fn = parse_one('def f(a, b) if 🍕 > 0 : int -> str { a }')
    assert isinstance(fn, FunctionLiteral)
    assert fn.name == 'f'
    assert fn.parameters == ['a', 'b']
    assert fn.condition == InfixExpression('>', PipeValue(), IntegerLiteral(0))
    assert fn.input_type is TypeTag.INT
    assert fn.return_type is TypeTag.STR
    assert fn.body == Block([Identifier('a')])
    assert fn.line == 1


def test_function_literal_forms():
    fn = parse_one('def double x { x * 2 }')
    assert (fn.name, fn.parameters) == ('double', ['x'])
    fn = parse_one('def only -> bool { true }')
    assert fn.return_type is TypeTag.BOOL and fn.input_type is None
    assign = parse_one('f = def { 🍕 }')
    assert isinstance(assign.value, FunctionLiteral)
    assert assign.value.name is None
    assert assign.value.parameters == []


def test_unknown_type_name_is_a_parse_error():
    with pytest.raises(ParseError) as excinfo:
        parse_program('def f : integer { 1 }')
    assert 'unknown type name' in excinfo.value.errors[0]


def test_index_and_slices():
    assert parse_one('a[-2..]') == IndexExpression(
        Identifier('a'), SliceIndex(PrefixExpression('-', IntegerLiteral(2)), None))
    assert parse_one('a[..]') == IndexExpression(Identifier('a'), SliceIndex(None, None))
    assert parse_one('a[0]') == IndexExpression(Identifier('a'), IntegerLiteral(0))


def test_arrays_ranges_and_hashes():
    assert parse_one('[1, 2]') == ArrayLiteral([IntegerLiteral(1), IntegerLiteral(2)])
    assert parse_one('[]') == ArrayLiteral([])
    assert parse_one('[1..3]') == RangeLiteral(IntegerLiteral(1), IntegerLiteral(3))
    assert parse_one('{"a": 1, "b": 2}') == HashLiteral([
        (StringLiteral('a'), IntegerLiteral(1)),
        (StringLiteral('b'), IntegerLiteral(2)),
    ])


def test_property_access_and_method_calls():
    assert parse_one("p's name") == PropertyAccess(Identifier('p'), 'name')
    assert parse_one('p.💩') == PropertyAccess(Identifier('p'), '💩')
    assert parse_one('"a,b".split(",")') == CallExpression(
        PropertyAccess(StringLiteral('a,b'), 'split'), [StringLiteral(',')])


def test_case_statements():
    fn = parse_one('def g {\n  case 🍕 > 1: "big"\n  case default: "small"\n}')
    assert fn.body.statements == [
        CaseStatement(InfixExpression('>', PipeValue(), IntegerLiteral(1)), StringLiteral('big')),
        CaseStatement(None, StringLiteral('small')),
    ]


def test_if_else_chain():
    assert parse_one('if a { 1 } else if b { 2 } else { 3 }') == IfExpression(
        Identifier('a'),
        Block([IntegerLiteral(1)]),
        IfExpression(Identifier('b'), Block([IntegerLiteral(2)]), Block([IntegerLiteral(3)])),
    )


def test_string_escapes():
    assert parse_one(r'"a\nb\t\"c\""') == StringLiteral('a\nb\t"c"')


def test_multiline_program():
    program = parse_program('x = 1\n\n// comment\ny = x\n  |> f\n')
    assert len(program.statements) == 2
    assert isinstance(program.statements[1].value, PipelineExpression)


def test_syntax_errors_are_collected():
    with pytest.raises(ParseError) as excinfo:
        parse_program('x = ')
    assert excinfo.value.errors
    assert str(excinfo.value).startswith(excinfo.value.errors[0])
