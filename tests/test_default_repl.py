"""
Test that running 'wetodo' without arguments launches the REPL.
"""

import os
import subprocess
import sys


def run_wetodo(tmp_path, *args, input=None):
    env = dict(os.environ, HOME=str(tmp_path), USERPROFILE=str(tmp_path))
    return subprocess.run(
        [sys.executable, "-m", "wetodo", *args],
        input=input,
        capture_output=True,
        text=True,
        encoding='utf-8',
        errors='replace',
        env=env,
    )


def test_default_launches_repl(tmp_path):
    """Running the CLI without a command starts the REPL."""
    result = run_wetodo(tmp_path, input="exit\n")

    assert "WeToDo REPL" in result.stdout, f"Expected REPL welcome message, got: {result.stdout}"
    assert "Goodbye!" in result.stdout, f"Expected goodbye message, got: {result.stdout}"
    assert result.returncode == 0, f"Expected exit code 0, got: {result.returncode}"


def test_repl_session_writes_list(tmp_path):
    """Commands typed in the REPL end up in the list file."""
    result = run_wetodo(tmp_path, input="new Groceries\nadd Milk\nexit\n")
    assert result.returncode == 0, result.stderr

    files = list((tmp_path / ".wetodo" / "lists").glob("*.list"))
    assert len(files) == 1
    lines = files[0].read_text(encoding="utf-8").split("\n")
    assert lines[0] == "Groceries"
    assert lines[1] == "local:0"
    assert lines[2].endswith(" CREATE local:0 check|Milk")


def test_eof_ends_repl(tmp_path):
    result = run_wetodo(tmp_path, input="")

    assert "Goodbye!" in result.stdout
    assert result.returncode == 0


def test_commands_still_work(tmp_path):
    """Regular commands still work."""
    result = run_wetodo(tmp_path, "version")

    assert "WeToDo v" in result.stdout, f"Expected version output, got: {result.stdout}"
    assert result.returncode == 0, f"Expected exit code 0, got: {result.returncode}"
