"""
FILE: wetodo/cli/commands/lists.py
PURPOSE: List-level commands (new, lists, show, title, clear, fav, share, delete, log)
"""

import json

import typer
from rich.markup import escape

from ..main import app, console, state, open_list, exit_with_error
from ...core import service
from ...core.exceptions import WeToDoError
from ...formatting import EntryFormatter, ListFormatter, create_log_table


@app.command()
def new(
    title: str = typer.Argument(..., help="List title"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Create a new, empty list owned by the acting user.

    Example:
        wetodo new "Groceries"
        wetodo --user local:1 new "Trip"
    """
    try:
        todo_list = service.create_list(title, user=state.user)

        if json_output:
            typer.echo(todo_list.to_json())
        elif raw:
            typer.echo(f"{todo_list.uuid} {todo_list.title}")
        else:
            console.print(
                f"[green]✓ Created list[/green] [bold]{escape(todo_list.title)}[/bold] "
                f"[dim]({todo_list.uuid[:8]})[/dim]"
            )

    except WeToDoError as e:
        exit_with_error(e)


@app.command()
def lists(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Show all lists, favorites first, then most recently changed.

    Example:
        wetodo lists
        wetodo lists --json
    """
    try:
        all_lists = service.list_lists()

        if json_output:
            typer.echo(ListFormatter.to_json_array(all_lists))
            return
        if raw:
            for line in ListFormatter.to_raw_lines(all_lists):
                typer.echo(line)
            return

        if not all_lists:
            console.print("[dim]No lists yet. Create one with: wetodo new \"Title\"[/dim]")
            return

        personal = [l for l in all_lists if not l.is_shared()]
        shared = [l for l in all_lists if l.is_shared()]

        if personal:
            console.print(ListFormatter.create_table(personal, title="Personal"))
        if shared:
            console.print(ListFormatter.create_table(shared, title="Shared"))
        console.print(f"\n[dim]Total: {len(all_lists)} list(s)[/dim]")

    except WeToDoError as e:
        exit_with_error(e)


@app.command()
def show(
    list_ref: str = typer.Argument(..., help="List id, id prefix or title"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Show a list's entries in order.

    Example:
        wetodo show Groceries
        wetodo show 3f2a --raw
    """
    todo_list = open_list(list_ref)
    entries = todo_list.entries

    if json_output:
        typer.echo(todo_list.to_json())
        return
    if raw:
        for line in EntryFormatter.to_raw_lines(entries):
            typer.echo(line)
        return

    heading = escape(todo_list.title)
    if todo_list.is_favorite:
        heading = f"★ {heading}"

    if not entries:
        console.print(f"[bold]{heading}[/bold]")
        console.print("[dim]No entries yet[/dim]")
    else:
        console.print(EntryFormatter.create_table(entries, title=heading))

    names = [escape(state.directory.display_name(u)) for u in todo_list.users]
    console.print(f"[dim]Users: {', '.join(names) or '-'}[/dim]")


@app.command()
def title(
    list_ref: str = typer.Argument(..., help="List id, id prefix or title"),
    new_title: str = typer.Argument(..., help="New list title"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Rename a list.

    Example:
        wetodo title Groceries "Weekly groceries"
    """
    todo_list = open_list(list_ref)
    old_title = todo_list.title

    try:
        service.rename_list(todo_list, new_title, user=state.user)
    except WeToDoError as e:
        exit_with_error(e)

    if json_output:
        typer.echo(json.dumps({"uuid": todo_list.uuid, "title": todo_list.title}, indent=2))
    elif raw:
        typer.echo(f"Renamed list: {todo_list.title}")
    else:
        console.print(
            f"[blue]✎[/blue] Renamed list {escape(old_title)} → [bold]{escape(todo_list.title)}[/bold]"
        )


@app.command()
def clear(
    list_ref: str = typer.Argument(..., help="List id, id prefix or title"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompt"),
):
    """
    Remove every entry and compact the list's history.

    The history before the clear is dropped from the file for good.

    Example:
        wetodo clear Groceries
        wetodo clear Groceries --yes
    """
    todo_list = open_list(list_ref)

    if not yes:
        console.print(
            f"[yellow]About to clear {todo_list.entry_count} entr"
            f"{'y' if todo_list.entry_count == 1 else 'ies'} and the history of "
            f"{escape(todo_list.title)}[/yellow]"
        )
        if not typer.confirm("Continue?", default=False):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    try:
        service.clear_list(todo_list, user=state.user)
    except WeToDoError as e:
        exit_with_error(e)

    console.print(f"[green]✓ Cleared[/green] {escape(todo_list.title)}")


@app.command()
def fav(
    list_ref: str = typer.Argument(..., help="List id, id prefix or title"),
    off: bool = typer.Option(False, "--off", help="Remove the favorite flag instead"),
):
    """
    Mark a list as favorite (shown first), or unmark it with --off.

    Example:
        wetodo fav Groceries
        wetodo fav Groceries --off
    """
    todo_list = open_list(list_ref)

    try:
        service.set_favorite(todo_list, not off)
    except WeToDoError as e:
        exit_with_error(e)

    if off:
        console.print(f"[dim]☆ {escape(todo_list.title)} is no longer a favorite[/dim]")
    else:
        console.print(f"[yellow]★[/yellow] {escape(todo_list.title)} is a favorite")


@app.command()
def share(
    list_ref: str = typer.Argument(..., help="List id, id prefix or title"),
    user_id: str = typer.Argument(..., help="User to add, as provider:id"),
):
    """
    Add a user to a list.

    Example:
        wetodo share Groceries local:2
    """
    todo_list = open_list(list_ref)

    try:
        added = service.share_list(todo_list, user_id)
    except WeToDoError as e:
        exit_with_error(e)

    name = escape(state.directory.display_name(user_id))
    if added:
        console.print(f"[green]✓ Shared[/green] {escape(todo_list.title)} with {name}")
    else:
        console.print(f"[yellow]{name} already has {escape(todo_list.title)}[/yellow]")


@app.command()
def delete(
    list_ref: str = typer.Argument(..., help="List id, id prefix or title"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompt"),
):
    """
    Delete a list permanently.

    Example:
        wetodo delete Groceries
        wetodo delete 3f2a --yes
    """
    todo_list = open_list(list_ref)

    if not yes:
        response = typer.confirm(f"Delete list '{todo_list.title}'?", default=False)
        if not response:
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    try:
        service.delete_list(todo_list.uuid)
    except WeToDoError as e:
        exit_with_error(e)

    console.print(f"[red]✗[/red] Deleted list {escape(todo_list.title)}")


@app.command()
def log(
    list_ref: str = typer.Argument(..., help="List id, id prefix or title"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Stored log lines as-is"),
):
    """
    Show a list's modification log, oldest first.

    --raw prints the records exactly as they are stored.

    Example:
        wetodo log Groceries
        wetodo log Groceries --raw
    """
    todo_list = open_list(list_ref)
    modifications = todo_list.modifications

    if json_output:
        typer.echo(json.dumps([m.to_dict() for m in modifications], indent=2))
        return
    if raw:
        for modification in modifications:
            typer.echo(modification.to_line())
        return

    if not modifications:
        console.print("[dim]No modifications yet[/dim]")
        return

    console.print(create_log_table(modifications, state.directory, title=escape(todo_list.title)))
    console.print(f"\n[dim]Total: {len(modifications)} record(s)[/dim]")
