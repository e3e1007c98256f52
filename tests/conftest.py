"""Shared pytest configuration and fixtures for tests."""

import sys
import io
from pathlib import Path

import pytest

# Fix Windows console encoding
if sys.platform == "win32":
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from wetodo.core import storage  # noqa: E402
from wetodo.core.models import Modification  # noqa: E402
from wetodo.core.todolist import TodoList  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path, monkeypatch):
    """Point list storage at a fresh temp directory for every test."""
    data_dir = tmp_path / ".wetodo"
    monkeypatch.setattr(storage, "DATA_DIR", data_dir)
    monkeypatch.setattr(storage, "LISTS_DIR", data_dir / "lists")
    return data_dir / "lists"


@pytest.fixture
def mod():
    """Build a modification: mod(time, "CREATE", "check|Milk", user="local:0")."""
    def _mod(time, command, data, user="local:0"):
        return Modification(time=time, command=command, user=user, data=data)
    return _mod


@pytest.fixture
def replay(mod):
    """Build a list by adding and applying records one by one, like live edits."""
    def _replay(*records, title="Groceries"):
        todo_list = TodoList(title=title, users=["local:0"])
        for time, command, data in records:
            todo_list.add_modification(mod(time, command, data))
            todo_list.apply_last()
        return todo_list
    return _replay
