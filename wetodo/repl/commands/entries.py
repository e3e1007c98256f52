"""
FILE: wetodo/repl/commands/entries.py
PURPOSE: Entry command handlers for REPL (add, check, rename, desc, move, rm, history)
"""

from typing import Optional

from rich.markup import escape

from ..main import console, repl_context
from ..parser import ParseResult
from .lists import ask_confirmation
from ...core import service
from ...core.constants import DEFAULT_ENTRY_TYPE
from ...core.exceptions import WeToDoError
from ...formatting import create_changes_table, parse_entry_ids


def _entry_id(result: ParseResult, usage: str) -> Optional[int]:
    """First positional arg as an entry ID, None after printing usage."""
    if not result.args:
        console.print("[red]Error:[/red] Entry ID required")
        console.print(f"[dim]Usage: {usage}[/dim]")
        return None
    try:
        return int(result.args[0])
    except ValueError:
        console.print(f"[red]Error:[/red] Invalid entry ID: {escape(result.args[0])}")
        return None


def handle_add_command(result: ParseResult) -> None:
    """
    Handle 'add' command - add an entry to the active list.

    Usage:
        add Milk
        add "Oat milk" --type check
        add Dairy --type rule
    """
    todo_list = repl_context.require_list()
    if todo_list is None:
        return

    if not result.args:
        console.print("[red]Error:[/red] Entry title required")
        console.print("[dim]Usage: add <title> [--type check|note|rule][/dim]")
        return

    entry_type = result.flag("type", DEFAULT_ENTRY_TYPE)
    try:
        entry = service.add_entry(todo_list, result.text(), user=repl_context.user, entry_type=entry_type)
    except WeToDoError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return

    console.print(f"[green]✓ Added [bold]#{entry.id}[/bold]:[/green] {escape(entry.title)}")


def handle_check_command(result: ParseResult) -> None:
    """
    Handle 'check' command - toggle one or more check entries.

    Usage:
        check 0
        check 0,2,3
    """
    todo_list = repl_context.require_list()
    if todo_list is None:
        return

    if not result.args:
        console.print("[red]Error:[/red] Entry ID(s) required")
        console.print("[dim]Usage: check <id>[,<id>...][/dim]")
        return

    try:
        entry_ids = parse_entry_ids(result.args[0])
    except ValueError:
        console.print(f"[red]Error:[/red] Invalid entry ID(s): {escape(result.args[0])}")
        return

    for entry_id in entry_ids:
        try:
            entry = service.check_entry(todo_list, entry_id, user=repl_context.user)
        except WeToDoError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            continue

        if entry.checked:
            console.print(f"[green]✓[/green] Checked: {escape(entry.title)}")
        else:
            console.print(f"[yellow]○[/yellow] Unchecked: {escape(entry.title)}")


def handle_rename_command(result: ParseResult) -> None:
    """
    Handle 'rename' command - change an entry's title.

    Usage:
        rename 3 Oat milk
    """
    todo_list = repl_context.require_list()
    if todo_list is None:
        return

    entry_id = _entry_id(result, "rename <id> <new title>")
    if entry_id is None:
        return

    title = " ".join(result.args[1:])
    try:
        entry = service.rename_entry(todo_list, entry_id, title, user=repl_context.user)
    except WeToDoError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return

    console.print(f"[blue]✎[/blue] Renamed entry {entry.id}: {escape(entry.title)}")


def handle_desc_command(result: ParseResult) -> None:
    """
    Handle 'desc' command - set or clear an entry's description.

    Usage:
        desc 3 From the farm shop
        desc 3              # Clears the description
    """
    todo_list = repl_context.require_list()
    if todo_list is None:
        return

    entry_id = _entry_id(result, "desc <id> \\[text]")
    if entry_id is None:
        return

    try:
        entry = service.describe_entry(todo_list, entry_id, " ".join(result.args[1:]), user=repl_context.user)
    except WeToDoError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return

    if entry.description:
        console.print(f"[blue]✎[/blue] Updated description for entry {entry.id}: {escape(entry.title)}")
    else:
        console.print(f"[blue]✎[/blue] Cleared description for entry {entry.id}: {escape(entry.title)}")


def handle_move_command(result: ParseResult) -> None:
    """
    Handle 'move' command - move an entry to a position (0 = top).

    Usage:
        move 3 0
    """
    todo_list = repl_context.require_list()
    if todo_list is None:
        return

    entry_id = _entry_id(result, "move <id> <position>")
    if entry_id is None:
        return

    if len(result.args) < 2:
        console.print("[red]Error:[/red] Position required")
        console.print("[dim]Usage: move <id> <position>[/dim]")
        return

    try:
        position = int(result.args[1])
    except ValueError:
        console.print(f"[red]Error:[/red] Invalid position: {escape(result.args[1])}")
        return

    try:
        entry = service.relocate_entry(todo_list, entry_id, position, user=repl_context.user)
    except WeToDoError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return

    index = todo_list.get_entry_index_from_id(entry.id)
    console.print(f"[blue]↕[/blue] Entry {entry.id} is now at position {index}: {escape(entry.title)}")


def handle_rm_command(result: ParseResult) -> None:
    """
    Handle 'rm' command - delete entries.

    Confirms before deleting multiple entries unless --yes is given.

    Usage:
        rm 2
        rm 1,2,5
    """
    todo_list = repl_context.require_list()
    if todo_list is None:
        return

    if not result.args:
        console.print("[red]Error:[/red] Entry ID(s) required")
        console.print("[dim]Usage: rm <id>[,<id>...][/dim]")
        return

    try:
        entry_ids = parse_entry_ids(result.args[0])
    except ValueError:
        console.print(f"[red]Error:[/red] Invalid entry ID(s): {escape(result.args[0])}")
        return

    if len(entry_ids) > 1 and not result.flags.get("yes"):
        if not ask_confirmation(f"Delete {len(entry_ids)} entries?"):
            console.print("[yellow]Cancelled[/yellow]")
            return

    for entry_id in entry_ids:
        try:
            entry = service.delete_entry(todo_list, entry_id, user=repl_context.user)
        except WeToDoError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            continue
        console.print(f"[red]✗[/red] Deleted entry {entry.id}: {escape(entry.title)}")


def handle_history_command(result: ParseResult) -> None:
    """
    Handle 'history' command - show who changed an entry and when.

    Usage:
        history 3
    """
    todo_list = repl_context.require_list()
    if todo_list is None:
        return

    entry_id = _entry_id(result, "history <id>")
    if entry_id is None:
        return

    try:
        changes = service.entry_history(todo_list, entry_id)
    except WeToDoError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return

    title = escape(todo_list.get_entry_by_id(entry_id).title)
    console.print(create_changes_table(changes, repl_context.directory, title=title))
