from pathlib import Path

import pytest

from uncode.interpreter import Interpreter
from uncode.parser import parse_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'

EXPECTED = {
    'fizzbuzz.poo': ['1', '2', 'Fizz', '4', 'Buzz', 'Fizz', '7', '8', 'Fizz', 'Buzz',
                     '11', 'Fizz', '13', '14', 'FizzBuzz'],
    'map_filter.poo': ['4, 8', '[2, 4, 6]'],
    'slices.poo': ['[4, 5]', '[1, 2, 3]', '5', 'nc'],
    'forward_refs.poo': ['hello, world', '40'],
    'grades.poo': ['A B C'],
    'hashes.poo': ['Ada', '2', 'SHOUT', 'a b c', '[2, 1, 3]'],
}


@pytest.mark.parametrize('name', sorted(EXPECTED))
def test_example_program(name, capsys):
    with open(EXAMPLES / name, 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out.splitlines() == EXPECTED[name]


def test_every_example_has_expected_output():
    assert sorted(p.name for p in EXAMPLES.glob('*.poo')) == sorted(EXPECTED)
