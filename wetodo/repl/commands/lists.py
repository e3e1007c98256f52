"""
FILE: wetodo/repl/commands/lists.py
PURPOSE: List command handlers for REPL (use, lists, new, show, title, clear, fav, share, delete, log)
"""

from rich.markup import escape

from ..main import console, repl_context
from ..parser import ParseResult
from ...core import service
from ...core.exceptions import ListNotFoundError, WeToDoError
from ...formatting import EntryFormatter, ListFormatter, create_log_table


# Helper function
def ask_confirmation(message: str) -> bool:
    """Ask user for confirmation (y/n)."""
    response = input(f"{message} (y/n): ").strip().lower()
    return response in ('y', 'yes')


def handle_use_command(result: ParseResult) -> None:
    """
    Handle 'use' command - select the active list.

    Usage:
        use                 # Show the active list
        use Groceries       # Work on Groceries
        use 3f2a            # By id prefix
        use none            # Drop the selection
    """
    if not result.args:
        todo_list = repl_context.refresh()
        if todo_list:
            console.print(f"Active list: [cyan]{escape(todo_list.title)}[/cyan] [dim]({todo_list.uuid[:8]})[/dim]")
        else:
            console.print("[dim]No active list[/dim]")
        return

    reference = result.text()

    if reference.lower() in ("none", "clear", "."):
        repl_context.active_list = None
        console.print("✓ Cleared active list")
        return

    try:
        todo_list = service.find_list(reference)
    except ListNotFoundError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        titles = [l.title for l in service.list_lists()]
        if titles:
            console.print("\n[dim]Available lists:[/dim]")
            for title in titles:
                console.print(f"  - {escape(title)}")
        return
    except WeToDoError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return

    repl_context.active_list = todo_list
    console.print(f"✓ Now using list: [cyan]{escape(todo_list.title)}[/cyan]")


def handle_lists_command(result: ParseResult) -> None:
    """
    Handle 'lists' command - show all lists.

    Usage:
        lists
    """
    try:
        all_lists = service.list_lists()
    except WeToDoError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return

    if not all_lists:
        console.print("[dim]No lists yet. Create one with: new <title>[/dim]")
        return

    personal = [l for l in all_lists if not l.is_shared()]
    shared = [l for l in all_lists if l.is_shared()]
    if personal:
        console.print(ListFormatter.create_table(personal, title="Personal"))
    if shared:
        console.print(ListFormatter.create_table(shared, title="Shared"))


def handle_new_command(result: ParseResult) -> None:
    """
    Handle 'new' command - create a list and make it active.

    Usage:
        new Groceries
        new "Summer trip"
    """
    if not result.args:
        console.print("[red]Error:[/red] List title required")
        console.print("[dim]Usage: new <title>[/dim]")
        return

    try:
        todo_list = service.create_list(result.text(), user=repl_context.user)
    except WeToDoError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return

    repl_context.active_list = todo_list
    console.print(f"[green]✓ Created list[/green] [cyan]{escape(todo_list.title)}[/cyan] [dim](now active)[/dim]")


def handle_show_command(result: ParseResult) -> None:
    """
    Handle 'show' command - show entries of the active or a named list.

    Usage:
        show
        show Groceries
    """
    if result.args:
        try:
            todo_list = service.find_list(result.text())
        except WeToDoError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            return
    else:
        todo_list = repl_context.require_list()
        if todo_list is None:
            return

    heading = escape(todo_list.title)
    if todo_list.is_favorite:
        heading = f"★ {heading}"

    entries = todo_list.entries
    if not entries:
        console.print(f"[bold]{heading}[/bold]")
        console.print("[dim]No entries yet. Add one with: add <title>[/dim]")
    else:
        console.print(EntryFormatter.create_table(entries, title=heading))

    names = [escape(repl_context.directory.display_name(u)) for u in todo_list.users]
    console.print(f"[dim]Users: {', '.join(names) or '-'}[/dim]")


def handle_title_command(result: ParseResult) -> None:
    """
    Handle 'title' command - rename the active list.

    Usage:
        title Weekly groceries
    """
    todo_list = repl_context.require_list()
    if todo_list is None:
        return

    if not result.args:
        console.print("[red]Error:[/red] New title required")
        console.print("[dim]Usage: title <new title>[/dim]")
        return

    try:
        service.rename_list(todo_list, result.text(), user=repl_context.user)
    except WeToDoError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return

    console.print(f"[blue]✎[/blue] Renamed list to [cyan]{escape(todo_list.title)}[/cyan]")


def handle_clear_command(result: ParseResult) -> None:
    """
    Handle 'clear' command - remove all entries and compact the history.

    Usage:
        clear
        clear --yes
    """
    todo_list = repl_context.require_list()
    if todo_list is None:
        return

    if not result.flags.get("yes"):
        if not ask_confirmation(f"Clear {todo_list.entry_count} entries and the history of '{todo_list.title}'?"):
            console.print("[yellow]Cancelled[/yellow]")
            return

    try:
        service.clear_list(todo_list, user=repl_context.user)
    except WeToDoError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return

    console.print(f"[green]✓ Cleared[/green] {escape(todo_list.title)}")


def handle_fav_command(result: ParseResult) -> None:
    """
    Handle 'fav' command - flag the active list as favorite.

    Usage:
        fav
        fav --off
    """
    todo_list = repl_context.require_list()
    if todo_list is None:
        return

    off = bool(result.flags.get("off"))
    try:
        service.set_favorite(todo_list, not off)
    except WeToDoError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return

    if off:
        console.print(f"[dim]☆ {escape(todo_list.title)} is no longer a favorite[/dim]")
    else:
        console.print(f"[yellow]★[/yellow] {escape(todo_list.title)} is a favorite")


def handle_share_command(result: ParseResult) -> None:
    """
    Handle 'share' command - add a user to the active list.

    Usage:
        share local:2
    """
    todo_list = repl_context.require_list()
    if todo_list is None:
        return

    if not result.args:
        console.print("[red]Error:[/red] User required")
        console.print("[dim]Usage: share <provider:id>[/dim]")
        return

    user_id = result.args[0]
    try:
        added = service.share_list(todo_list, user_id)
    except WeToDoError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return

    name = escape(repl_context.directory.display_name(user_id))
    if added:
        console.print(f"[green]✓ Shared[/green] {escape(todo_list.title)} with {name}")
    else:
        console.print(f"[yellow]{name} already has {escape(todo_list.title)}[/yellow]")


def handle_delete_command(result: ParseResult) -> None:
    """
    Handle 'delete' command - delete the active or a named list.

    Always confirms unless --yes is given.

    Usage:
        delete
        delete Groceries
        delete Groceries --yes
    """
    if result.args:
        try:
            todo_list = service.find_list(result.text())
        except WeToDoError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            return
    else:
        todo_list = repl_context.require_list()
        if todo_list is None:
            return

    if not result.flags.get("yes"):
        if not ask_confirmation(f"Delete list '{todo_list.title}'?"):
            console.print("[yellow]Cancelled[/yellow]")
            return

    try:
        service.delete_list(todo_list.uuid)
    except WeToDoError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return

    if repl_context.active_list and repl_context.active_list.uuid == todo_list.uuid:
        repl_context.active_list = None
    console.print(f"[red]✗[/red] Deleted list {escape(todo_list.title)}")


def handle_log_command(result: ParseResult) -> None:
    """
    Handle 'log' command - show the active list's modification log.

    Usage:
        log
        log --raw           # Stored lines as-is
    """
    todo_list = repl_context.require_list()
    if todo_list is None:
        return

    modifications = todo_list.modifications
    if not modifications:
        console.print("[dim]No modifications yet[/dim]")
        return

    if result.flags.get("raw"):
        for modification in modifications:
            console.print(modification.to_line(), markup=False, highlight=False)
        return

    console.print(create_log_table(modifications, repl_context.directory, title=escape(todo_list.title)))
