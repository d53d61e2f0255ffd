## tinyforth — CLI integration tests

import os, sys
import subprocess
from pathlib import Path

import click
import pytest

from tinyforth.__main__ import _parse_dev_tokens


def run_cli(*cli_args: str | Path, env: dict | None = None) -> subprocess.CompletedProcess:
    args = [sys.executable, "-m", "tinyforth", "--plain"]
    args.extend(str(arg) for arg in cli_args)
    merged_env = os.environ.copy()
    merged_env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(repo_root() / "src"), merged_env.get("PYTHONPATH")]))
    if env:
        merged_env.update(env)
    return subprocess.run(args, capture_output=True, text=True, env=merged_env)


def run_cli_input(stdin: str, *cli_args: str | Path) -> subprocess.CompletedProcess:
    args = [sys.executable, "-m", "tinyforth", "--plain"]
    args.extend(str(arg) for arg in cli_args)
    merged_env = os.environ.copy()
    merged_env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(repo_root() / "src"), merged_env.get("PYTHONPATH")]))
    return subprocess.run(args, input=stdin, capture_output=True, text=True, env=merged_env)


def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _strip_output_lines(output: str) -> list[str]:
    return [line.rstrip() for line in output.splitlines() if line.strip()]


def test_cli_run_file_executes_program(tmp_path: Path):
    program = tmp_path / "count.fs"
    program.write_text(": count 5 0 DO I . LOOP ;\ncount\n", encoding='utf-8')

    result = run_cli(program)

    assert result.returncode == 0
    assert _strip_output_lines(result.stdout) == ["0 1 2 3 4"]


def test_cli_run_file_error_stops_with_location(tmp_path: Path):
    program = tmp_path / "broken.fs"
    program.write_text("1 .\n6 0 /\n2 .\n", encoding='utf-8')

    result = run_cli(program)

    assert result.returncode == 1
    out = result.stdout
    assert "ERROR. division by zero" in out
    assert "line 2" in out
    assert out.rstrip().endswith("line 2")


def test_cli_ignore_continues_after_errors(tmp_path: Path):
    program = tmp_path / "broken.fs"
    program.write_text("nope\n2 .\n", encoding='utf-8')

    result = run_cli("--ignore", program)

    assert result.returncode == 1
    assert "ERROR. unknown word nope" in result.stdout
    assert "2 " in result.stdout


def test_cli_unterminated_definition_at_end_of_file(tmp_path: Path):
    program = tmp_path / "open.fs"
    program.write_text(": foo 1\n", encoding='utf-8')

    result = run_cli(program)

    assert result.returncode == 1
    assert "unterminated definition" in result.stdout


def test_cli_inline_commands_share_one_session():
    result = run_cli("-c", ": sq 2 2 * ;", "-c", "sq .")

    assert result.returncode == 0
    assert _strip_output_lines(result.stdout) == ["4"]


def test_cli_stdin_is_read_as_a_file():
    result = run_cli_input("72 EMIT 105 EMIT\n")

    assert result.returncode == 0
    assert result.stdout.strip() == "Hi"


def test_cli_repl_shows_stack_and_output():
    result = run_cli_input("1 2\n+ .\nBYE\n", "--repl")

    assert result.returncode == 0
    assert "[ 1 2 ]" in result.stdout
    assert "3 " in result.stdout


def test_cli_stats(tmp_path: Path):
    program = tmp_path / "add.fs"
    program.write_text("1 2 + .\n", encoding='utf-8')

    result = run_cli("--stats", program)

    assert result.returncode == 0
    assert "STATISTICS." in result.stdout


def test_cli_emit_of_surrogate_reports_error():
    result = run_cli_input("55296 EMIT 1 .\n")

    assert result.returncode == 1
    assert "ERROR. EMIT: invalid character code 55296" in result.stdout
    assert "Traceback" not in result.stdout + result.stderr


def test_dev_tokens_keep_their_order(tmp_path: Path):
    program = tmp_path / "lib.fth"
    program.write_text(": k 1 ;\n", encoding='utf-8')

    assert _parse_dev_tokens([str(program), "-c", "k .", "--command=CR", "-r"]) == [
        ('file', program), ('command', "k ."), ('command', "CR"), ('repl', None)]
    for tokens in (["-c"], ["--", "x"], [str(tmp_path / "missing.fs")], [str(tmp_path / "notes.txt")]):
        with pytest.raises(click.BadParameter):
            _parse_dev_tokens(tokens)
