import json

import pytest

from uncode.__main__ import main

PROGRAM = '''
def greet(name) { "hi " + name }
"ada" |> greet |> print
'''


@pytest.fixture
def program(tmp_path):
    path = tmp_path / 'greet.poo'
    path.write_text(PROGRAM, encoding='utf-8')
    return path


def test_runs_a_program(program, capsys):
    main([str(program)])
    captured = capsys.readouterr()
    assert captured.out.strip() == 'hi ada'
    assert captured.err == ''


def test_accepts_poo_emoji_extension(tmp_path, capsys):
    path = tmp_path / 'prog.💩'
    path.write_text('1 + 2 |> print', encoding='utf-8')
    main([str(path)])
    assert capsys.readouterr().out.strip() == '3'


def test_rejects_other_extensions(tmp_path, capsys):
    path = tmp_path / 'prog.txt'
    path.write_text('1', encoding='utf-8')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    assert 'is not an uncode program' in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / 'absent.poo')])
    assert excinfo.value.code == 1
    assert 'Error: file' in capsys.readouterr().err


def test_runtime_error_exits_nonzero(tmp_path, capsys):
    path = tmp_path / 'boom.poo'
    path.write_text('1 / 0', encoding='utf-8')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.strip() == 'Runtime error: ERROR: division by zero: 1 / 0'


def test_parse_error_exits_nonzero(tmp_path, capsys):
    path = tmp_path / 'broken.poo'
    path.write_text('x = ', encoding='utf-8')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith('Parse error:')


def test_emit_ast_then_run_it(program, capsys):
    main(['--emit-ast', str(program)])
    out_path = capsys.readouterr().out.strip()
    assert out_path == str(program) + '.ast.json'
    with open(out_path, 'r', encoding='utf-8') as f:
        assert json.load(f)['type'] == 'Program'
    main(['--ast', out_path])
    assert capsys.readouterr().out.strip() == 'hi ada'


def test_missing_program_argument(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2


def test_verbose_logging_goes_to_stderr(program, capsys):
    main(['-vvv', str(program)])
    captured = capsys.readouterr()
    assert captured.out.strip() == 'hi ada'
    assert '[uncode.eval]' in captured.err
    assert 'INFO [uncode.runtime] program start' in captured.err


def test_log_file(program, tmp_path, capsys):
    log_path = tmp_path / 'run.log'
    main(['--log-level', 'debug', '--log-file', str(log_path), str(program)])
    assert capsys.readouterr().err == ''
    assert 'DEBUG [uncode.eval]' in log_path.read_text(encoding='utf-8')


def test_bad_component_level(program, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(['--component-level', 'gpu=TRACE', str(program)])
    assert excinfo.value.code == 2
    assert 'unknown component' in capsys.readouterr().err
