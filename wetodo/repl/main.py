"""
FILE: wetodo/repl/main.py
PURPOSE: Interactive REPL over one active list with prompt-toolkit
EXPORTS:
  - main(user, directory) - Entry point for REPL mode
  - run_repl() - Main REPL loop
  - execute_command(result) -> bool
  - REPLContext / repl_context (session state)
DEPENDENCIES:
  - prompt_toolkit (REPL interface, history, completion)
  - rich (formatted output)
  - wetodo.core.service (business logic)
  - wetodo.repl.parser (command parsing)
  - wetodo.repl.completer (autocomplete)
NOTES:
  - Uses prompt_toolkit for readline-like features
  - Command history automatic with PromptSession
  - Bottom toolbar shows the active list's open/total entries
  - Ctrl+D or "exit"/"quit" to exit
  - Calls service layer directly (not CLI layer)
  - The active list is reloaded from storage before each command
"""

import sys
from dataclasses import dataclass, field
from typing import Optional

# Fix Windows console encoding for Unicode characters
# Only wrap if not already wrapped to prevent issues
if sys.platform == "win32":
    import io
    if not isinstance(sys.stdout, io.TextIOWrapper) or sys.stdout.encoding != 'utf-8':
        try:
            sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
        except (AttributeError, ValueError):
            pass  # Already wrapped or unavailable
    if not isinstance(sys.stderr, io.TextIOWrapper) or sys.stderr.encoding != 'utf-8':
        try:
            sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')
        except (AttributeError, ValueError):
            pass  # Already wrapped or unavailable

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console
from rich.markup import escape

from ..core import service
from ..core.constants import DEFAULT_USER, ENTRY_CHECK
from ..core.todolist import TodoList
from ..core.users import UserDirectory
from .completer import create_completer
from .parser import ParseResult, parse_command


# Rich console for formatted output
console = Console()


# --- REPL Context (Persistent State) ---


@dataclass
class REPLContext:
    """
    Persistent context for the REPL session.

    Attributes:
        user: Acting user recorded on every modification
        directory: Resolves user ids to display names
        active_list: List that entry commands work on (None until 'use' or 'new')
    """
    user: str = DEFAULT_USER
    directory: UserDirectory = field(default_factory=UserDirectory)
    active_list: Optional[TodoList] = None

    def get_prompt(self) -> str:
        """
        Generate prompt string based on current context.

        Returns:
            Prompt like "wetodo> " or "wetodo:[Groceries]> "
        """
        if self.active_list:
            return f"wetodo:[{self.active_list.title}]> "
        return "wetodo> "

    def refresh(self) -> Optional[TodoList]:
        """
        Reload the active list from storage.

        Picks up changes written by other processes; drops the selection
        when the list was deleted meanwhile.
        """
        if self.active_list is not None:
            self.active_list = service.get_list(self.active_list.uuid)
        return self.active_list

    def require_list(self) -> Optional[TodoList]:
        """Active list, or None after printing how to select one."""
        todo_list = self.refresh()
        if todo_list is None:
            console.print("[red]Error:[/red] No active list")
            console.print("[dim]Select one with: use <list>  or create one with: new <title>[/dim]")
        return todo_list


# Global REPL context (persists during session, resets on restart)
repl_context = REPLContext()


def format_prompt() -> HTML:
    """
    Create formatted prompt text with the active list in cyan.
    """
    if repl_context.active_list:
        title = repl_context.active_list.title
        title = title.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        return HTML(f"<b>wetodo:[<cyan>{title}</cyan>]&gt; </b>")
    return HTML("<b>wetodo&gt; </b>")


def get_bottom_toolbar() -> HTML:
    """
    Create bottom toolbar showing the active list's entry counts.
    """
    todo_list = repl_context.active_list
    if todo_list is None:
        text = "No active list | 'use <list>' to pick one, 'help' for commands"
    else:
        entries = todo_list.entries
        open_count = sum(1 for e in entries if e.type == ENTRY_CHECK and not e.checked)
        kind = "shared" if todo_list.is_shared() else "personal"
        text = f"{open_count} open | {len(entries)} entries | {kind}"

    text = text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    return HTML(f"<style bg='#444444' fg='#ffffff'> {text} </style>")


# Import command handlers from command modules
from .commands import (  # noqa: E402
    # List handlers
    handle_use_command,
    handle_lists_command,
    handle_new_command,
    handle_show_command,
    handle_title_command,
    handle_clear_command,
    handle_fav_command,
    handle_share_command,
    handle_delete_command,
    handle_log_command,
    # Entry handlers
    handle_add_command,
    handle_check_command,
    handle_rename_command,
    handle_desc_command,
    handle_move_command,
    handle_rm_command,
    handle_history_command,
    # System handlers
    handle_help_command,
)


def execute_command(result: ParseResult) -> bool:
    """
    Execute a parsed command.

    Args:
        result: Parsed command from parser

    Returns:
        True to continue REPL loop, False to exit
    """
    command = result.command.lower()

    if command in ("exit", "quit"):
        console.print("[dim]Goodbye![/dim]")
        return False

    # Just Enter pressed
    if not command:
        return True

    handlers = {
        "use": handle_use_command,
        "lists": handle_lists_command,
        "new": handle_new_command,
        "show": handle_show_command,
        "ls": handle_show_command,
        "title": handle_title_command,
        "clear": handle_clear_command,
        "fav": handle_fav_command,
        "share": handle_share_command,
        "delete": handle_delete_command,
        "log": handle_log_command,
        "add": handle_add_command,
        "check": handle_check_command,
        "rename": handle_rename_command,
        "desc": handle_desc_command,
        "move": handle_move_command,
        "rm": handle_rm_command,
        "history": handle_history_command,
        "help": handle_help_command,
    }

    handler = handlers.get(command)
    if handler:
        handler(result)
        # Add whitespace after command output for readability
        console.print()
    else:
        console.print(f"[red]Unknown command:[/red] {escape(command)}")
        console.print("[dim]Type 'help' for available commands[/dim]")
        console.print()

    return True


def run_repl() -> None:
    """
    Main REPL loop.

    Sets up prompt_toolkit session with:
    - Command history (in-memory, not persisted)
    - Autocomplete (commands, list titles, entry IDs, entry types)
    - Prompt showing the active list

    Exits on:
    - Ctrl+D (EOFError)
    - "exit" or "quit" commands
    """
    # In piped/test environments, skip prompt_toolkit entirely
    has_tty = sys.stdin.isatty() and sys.stdout.isatty()

    session = None
    use_simple_input = not has_tty

    if has_tty:
        try:
            session = PromptSession(
                history=InMemoryHistory(),
                completer=create_completer(lambda: repl_context.active_list),
                complete_while_typing=True,
                bottom_toolbar=get_bottom_toolbar,
            )
        except Exception as e:
            console.print(f"[yellow]Warning:[/yellow] Running in simple input mode: {e}")
            use_simple_input = True

    console.print("[bold cyan]WeToDo REPL[/bold cyan] - Type 'help' for commands, 'exit' to quit")
    if use_simple_input:
        console.print("[dim](Running in simple mode - no autocomplete)[/dim]")
    console.print()

    while True:
        try:
            if use_simple_input or session is None:
                user_input = input(repl_context.get_prompt())
            else:
                user_input = session.prompt(format_prompt())

            if not execute_command(parse_command(user_input)):
                break

        except KeyboardInterrupt:
            console.print("[dim]^C (Press Ctrl+D or type 'exit' to quit)[/dim]")
            continue
        except EOFError:
            console.print()
            console.print("[dim]Goodbye![/dim]")
            break
        except Exception as e:
            # Unexpected error - show but don't crash
            console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
            console.print_exception()


def main(user: str = DEFAULT_USER, directory: Optional[UserDirectory] = None) -> None:
    """
    Entry point for REPL mode.

    Called when user runs: wetodo  or  wetodo repl
    """
    repl_context.user = user
    if directory is not None:
        repl_context.directory = directory

    try:
        run_repl()
    except Exception as e:
        console.print(f"[red]Fatal error:[/red] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main()
