import pytest

from uncode.errors import LexerError
from uncode.parser import preprocess, tokenize


def test_newlines_become_semicolons():
    assert preprocess('x = 1\ny = 2') == 'x = 1;\ny = 2;'


def test_pipeline_continuation_lines_are_joined():
    assert preprocess('[1, 2]\n  |> print') == '[1, 2]\n  |> print;'


def test_comments_are_stripped_and_blocks_closed():
    assert preprocess('def f { 🍕 } // trailing\n') == 'def f { 🍕 ;} ;\n'


def test_comment_markers_inside_strings_are_kept():
    assert preprocess('"a // b"\n') == '"a // b";\n'


def test_no_semicolon_inside_parentheses_or_after_operators():
    assert preprocess('f(1,\n2)') == 'f(1,\n2);'
    assert preprocess('x = 1 +\n2') == 'x = 1 +\n2;'


def test_else_on_next_line_continues_if():
    out = preprocess('if x {\n1\n}\nelse {\n2\n}')
    assert out == 'if x {\n1;\n}\nelse {\n2;\n};'


def test_tokenize_pipe_value_and_secondary_output():
    tokens = tokenize('🍕 |> f >> 💩')
    assert [t.type for t in tokens] == ['PIZZA', 'PIPE', 'NAME', 'WRITE', 'POO', 'SEMICOLON', 'EOF']
    assert tokens[2].value == 'f'


def test_tokenize_pipe_operators():
    tokens = tokenize('xs +> f ?> g | h || k')
    types = [t.type for t in tokens]
    assert types == ['NAME', 'MAP_PIPE', 'NAME', 'FILTER_PIPE', 'NAME', 'PAR_PIPE', 'NAME', 'OR', 'NAME',
                     'SEMICOLON', 'EOF']


def test_tokenize_numbers_and_ranges():
    tokens = tokenize('3.14 42 1..3')
    assert [t.type for t in tokens] == ['FLOAT', 'INT', 'INT', 'RANGE', 'INT', 'SEMICOLON', 'EOF']
    assert tokens[0].value == '3.14'


def test_tokenize_keywords_and_names():
    tokens = tokenize('def not null nothing')
    assert [t.type for t in tokens][:4] == ['DEF', 'NOT', 'NULL', 'NAME']


def test_tokenize_unicode_identifiers_and_strings():
    tokens = tokenize('größe = "a\\"b"')
    assert tokens[0].type == 'NAME'
    assert tokens[0].value == 'größe'
    assert tokens[2].type == 'STRING'
    assert tokens[2].value == '"a\\"b"'


def test_token_positions():
    tokens = tokenize('x\n  y')
    assert (tokens[0].line, tokens[0].column) == (1, 1)
    y = [t for t in tokens if t.value == 'y'][0]
    assert (y.line, y.column) == (2, 3)


def test_eof_token_is_last():
    tokens = tokenize('')
    assert [t.type for t in tokens] == ['EOF']


def test_unexpected_character_raises_lexer_error():
    with pytest.raises(LexerError) as excinfo:
        tokenize('x = 1 @ 2')
    assert excinfo.value.line == 1
    assert "'@'" in str(excinfo.value)
