"""
FILE: wetodo/cli/commands/__init__.py
PURPOSE: CLI command modules
"""

# Export all command handlers for easy importing
from .lists import (
    new,
    lists,
    show,
    title,
    clear,
    fav,
    share,
    delete,
    log,
)
from .entries import (
    add,
    check,
    rename,
    desc,
    move,
    rm,
    history,
)
from .system import (
    version,
    help,
    repl,
)

__all__ = [
    "new",
    "lists",
    "show",
    "title",
    "clear",
    "fav",
    "share",
    "delete",
    "log",
    "add",
    "check",
    "rename",
    "desc",
    "move",
    "rm",
    "history",
    "version",
    "help",
    "repl",
]
