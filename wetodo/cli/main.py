"""
FILE: wetodo/cli/main.py
PURPOSE: Typer-based CLI for one-shot list commands
EXPORTS:
  - app (Typer application)
  - main() (entry point)
  - state (CLIState: acting user, user directory)
  - console / error_console (Rich consoles)
  - open_list(reference) -> TodoList (exits on failure)
  - exit_with_error(error) -> NoReturn
  - Lists: new, lists, show, title, clear, fav, share, delete, log
  - Entries: add, check, rename, desc, move, rm, history
  - System: version, help, repl
DEPENDENCIES:
  - typer (CLI framework)
  - rich (formatted output)
  - wetodo.core.service (business logic)
  - wetodo.core.users (UserDirectory)
  - wetodo.observability (logging setup)
  - wetodo.repl (interactive mode)
NOTES:
  - Running "wetodo" with no command launches the REPL
  - --user picks the acting user for every recorded change (default local:0)
  - Most commands support --json and --raw flags
  - Error messages go to stderr
  - Exit codes: 0=success, 1=error
"""

import sys
from dataclasses import dataclass, field
from typing import NoReturn

# Fix Windows console encoding for Unicode characters
if sys.platform == "win32":
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

import typer
from rich.console import Console
from rich.markup import escape

from .. import __version__
from ..core import service
from ..core.constants import DEFAULT_USER
from ..core.exceptions import InvalidInputError, WeToDoError
from ..core.todolist import TodoList
from ..core.users import User, UserDirectory
from ..observability import setup_logging

# Typer app setup
app = typer.Typer(
    name="wetodo",
    help="Collaborative to-do lists rebuilt from an append-only log",
    add_completion=False,
)

# Rich console for formatted output
console = Console()
error_console = Console(stderr=True)


@dataclass
class CLIState:
    """
    Options shared by every command of one invocation.

    Attributes:
        user: Acting user recorded on every modification
        directory: Resolves user ids to display names
    """
    user: str = DEFAULT_USER
    directory: UserDirectory = field(default_factory=UserDirectory)


state = CLIState()


def exit_with_error(error: Exception) -> NoReturn:
    """Print an error to stderr and exit with code 1."""
    error_console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False)
    raise typer.Exit(1)


def open_list(reference: str) -> TodoList:
    """Find a list by id, id prefix or title, exiting with an error if that fails."""
    try:
        return service.find_list(reference)
    except WeToDoError as e:
        exit_with_error(e)


@app.callback(invoke_without_command=True)
def default_command(
    ctx: typer.Context,
    user: str = typer.Option(DEFAULT_USER, "--user", "-u", help="Acting user as provider:id"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """
    Default callback - sets global options, launches REPL when no command is given.
    """
    setup_logging("DEBUG" if verbose else "WARNING")

    try:
        state.user = User(user).id
    except InvalidInputError as e:
        exit_with_error(e)

    if ctx.invoked_subcommand is None:
        # No command specified, launch REPL
        from ..repl import main as repl_main
        try:
            repl_main(user=state.user, directory=state.directory)
        except Exception as e:
            error_console.print(f"[red]Error starting REPL:[/red] {e}")
            raise typer.Exit(1)


# Import command modules to register commands with app
# Commands are decorated with @app.command() in their modules
from .commands import (  # noqa: E402
    # List commands
    new,
    lists,
    show,
    title,
    clear,
    fav,
    share,
    delete,
    log,
    # Entry commands
    add,
    check,
    rename,
    desc,
    move,
    rm,
    history,
    # System commands
    version,
    help,
    repl,
)


def main():
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
