"""
FILE: wetodo/cli/commands/entries.py
PURPOSE: Entry commands (add, check, rename, desc, move, rm, history)
"""

import json
from typing import Optional

import typer
from rich.markup import escape

from ..main import app, console, error_console, state, open_list, exit_with_error
from ...core import service
from ...core.constants import DEFAULT_ENTRY_TYPE
from ...core.exceptions import EntryNotFoundError, WeToDoError
from ...formatting import EntryFormatter, create_changes_table


@app.command()
def add(
    list_ref: str = typer.Argument(..., help="List id, id prefix or title"),
    title: str = typer.Argument(..., help="Entry title"),
    entry_type: str = typer.Option(DEFAULT_ENTRY_TYPE, "--type", "-t", help="Entry type: check, note or rule"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Add an entry to a list.

    Example:
        wetodo add Groceries "Milk"
        wetodo add Groceries "Dairy" --type rule
    """
    todo_list = open_list(list_ref)

    try:
        entry = service.add_entry(todo_list, title, user=state.user, entry_type=entry_type)
    except WeToDoError as e:
        exit_with_error(e)

    if json_output:
        typer.echo(entry.to_json())
    elif raw:
        typer.echo(f"{entry.id}: {entry.title}")
    else:
        console.print(f"[green]✓ Added [bold]#{entry.id}[/bold]:[/green] {escape(entry.title)}")


@app.command()
def check(
    list_ref: str = typer.Argument(..., help="List id, id prefix or title"),
    entry_ids: str = typer.Argument(..., help="Entry ID(s) to toggle (comma-separated)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Toggle one or more check entries.

    Example:
        wetodo check Groceries 0
        wetodo check Groceries 0,2,3
    """
    todo_list = open_list(list_ref)

    toggled = []
    errors = []

    for id_str in [part.strip() for part in entry_ids.split(",") if part.strip()]:
        try:
            toggled.append(service.check_entry(todo_list, int(id_str), user=state.user))
        except ValueError:
            errors.append(f"Invalid entry ID: {id_str}")
        except WeToDoError as e:
            errors.append(str(e))

    if json_output:
        typer.echo(EntryFormatter.to_json_array(toggled))
    elif raw:
        for entry in toggled:
            typer.echo(f"{'Checked' if entry.checked else 'Unchecked'}: {entry.title}")
    else:
        for entry in toggled:
            if entry.checked:
                console.print(f"[green]✓[/green] Checked: {escape(entry.title)}")
            else:
                console.print(f"[yellow]○[/yellow] Unchecked: {escape(entry.title)}")

    if errors:
        for error in errors:
            error_console.print(f"[red]Error:[/red] {escape(error)}")
        if not toggled:
            raise typer.Exit(1)


@app.command()
def rename(
    list_ref: str = typer.Argument(..., help="List id, id prefix or title"),
    entry_id: int = typer.Argument(..., help="Entry ID to rename"),
    new_title: str = typer.Argument(..., help="New entry title"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Change an entry's title.

    Example:
        wetodo rename Groceries 0 "Oat milk"
    """
    todo_list = open_list(list_ref)

    try:
        entry = service.rename_entry(todo_list, entry_id, new_title, user=state.user)
    except WeToDoError as e:
        exit_with_error(e)

    if json_output:
        typer.echo(entry.to_json())
    elif raw:
        typer.echo(f"Renamed entry {entry.id}: {entry.title}")
    else:
        console.print(f"[blue]✎[/blue] Renamed entry {entry.id}: {escape(entry.title)}")


@app.command()
def desc(
    list_ref: str = typer.Argument(..., help="List id, id prefix or title"),
    entry_id: int = typer.Argument(..., help="Entry ID to describe"),
    text: Optional[str] = typer.Argument(None, help="New description (opens $EDITOR when omitted)"),
    clear_text: bool = typer.Option(False, "--clear", help="Remove the description"),
):
    """
    Set an entry's description.

    Without TEXT the current description opens in your default text editor.
    Save and close the editor to update it.

    Example:
        wetodo desc Groceries 0 "From the farm shop"
        wetodo desc Groceries 0
        wetodo desc Groceries 0 --clear
    """
    todo_list = open_list(list_ref)
    entry = todo_list.get_entry_by_id(entry_id)
    if entry is None:
        exit_with_error(EntryNotFoundError(entry_id))

    if clear_text:
        text = ""
    elif text is None:
        edited = typer.edit(entry.description_text or "", extension=".txt")
        if edited is None:
            console.print("[yellow]Editor was closed without saving[/yellow]")
            raise typer.Exit(0)
        text = edited

    try:
        entry = service.describe_entry(todo_list, entry_id, text, user=state.user)
    except WeToDoError as e:
        exit_with_error(e)

    if entry.description:
        console.print(f"[blue]✎[/blue] Updated description for entry {entry.id}: {escape(entry.title)}")
    else:
        console.print(f"[blue]✎[/blue] Cleared description for entry {entry.id}: {escape(entry.title)}")


@app.command()
def move(
    list_ref: str = typer.Argument(..., help="List id, id prefix or title"),
    entry_id: int = typer.Argument(..., help="Entry ID to move"),
    position: int = typer.Argument(..., help="Target position (0 = top)"),
):
    """
    Move an entry to another position in the list.

    Positions past the end move the entry to the bottom.

    Example:
        wetodo move Groceries 3 0
    """
    todo_list = open_list(list_ref)

    try:
        entry = service.relocate_entry(todo_list, entry_id, position, user=state.user)
    except WeToDoError as e:
        exit_with_error(e)

    index = todo_list.get_entry_index_from_id(entry.id)
    console.print(f"[blue]↕[/blue] Entry {entry.id} is now at position {index}: {escape(entry.title)}")


@app.command()
def rm(
    list_ref: str = typer.Argument(..., help="List id, id prefix or title"),
    entry_ids: str = typer.Argument(..., help="Entry ID(s) to delete (comma-separated)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompt"),
):
    """
    Delete one or more entries.

    Confirms before deleting multiple entries (use -y to skip).

    Example:
        wetodo rm Groceries 2
        wetodo rm Groceries 1,2,5 --yes
    """
    todo_list = open_list(list_ref)

    errors = []
    valid_ids = []
    for id_str in [part.strip() for part in entry_ids.split(",") if part.strip()]:
        try:
            entry_id = int(id_str)
        except ValueError:
            errors.append(f"Invalid entry ID: {id_str}")
            continue
        if todo_list.get_entry_by_id(entry_id) is None:
            errors.append(f"Entry {entry_id} not found")
        else:
            valid_ids.append(entry_id)

    if not valid_ids:
        for error in errors:
            error_console.print(f"[red]Error:[/red] {escape(error)}")
        raise typer.Exit(1)

    if not yes and len(valid_ids) > 1:
        console.print(f"[yellow]About to delete {len(valid_ids)} entries[/yellow]")
        if not typer.confirm("Continue?", default=False):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    deleted = []
    for entry_id in valid_ids:
        try:
            deleted.append(service.delete_entry(todo_list, entry_id, user=state.user))
        except WeToDoError as e:
            errors.append(f"Error deleting entry {entry_id}: {e}")

    if json_output:
        typer.echo(json.dumps([{"id": e.id, "title": e.title} for e in deleted], indent=2))
    elif raw:
        for entry in deleted:
            typer.echo(f"Deleted entry {entry.id}: {entry.title}")
    else:
        for entry in deleted:
            console.print(f"[red]✗[/red] Deleted entry {entry.id}: {escape(entry.title)}")

    if errors:
        for error in errors:
            error_console.print(f"[red]Error:[/red] {escape(error)}")
        if not deleted:
            raise typer.Exit(1)


@app.command()
def history(
    list_ref: str = typer.Argument(..., help="List id, id prefix or title"),
    entry_id: int = typer.Argument(..., help="Entry ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show who changed an entry and when, newest first.

    Example:
        wetodo history Groceries 0
    """
    todo_list = open_list(list_ref)

    try:
        changes = service.entry_history(todo_list, entry_id)
    except WeToDoError as e:
        exit_with_error(e)

    if json_output:
        typer.echo(json.dumps([c.to_dict() for c in changes], indent=2))
        return

    entry = todo_list.get_entry_by_id(entry_id)
    console.print(create_changes_table(changes, state.directory, title=escape(entry.title)))
