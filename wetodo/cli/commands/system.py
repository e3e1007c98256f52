"""
FILE: wetodo/cli/commands/system.py
PURPOSE: System commands (version, help, repl)
"""

import typer

# Import shared objects from main module
# These will be available after main.py imports this module
from ..main import app, console, error_console, state, __version__


@app.command()
def version():
    """Show WeToDo version."""
    console.print(f"WeToDo v{__version__}")


@app.command()
def help():
    """Show available commands and usage."""
    console.print("\n[bold cyan]WeToDo[/bold cyan] - Collaborative to-do lists\n")
    console.print(f"[dim]Version {__version__}[/dim]\n")

    console.print("[bold]Usage:[/bold]")
    console.print("  wetodo \\[options] \\[command] \\[args]")
    console.print("  wetodo                    [dim]# Launch interactive REPL (default)[/dim]\n")

    console.print("[bold]Commands:[/bold]")

    commands = [
        ("new", "Create a list", 'wetodo new "Title"'),
        ("lists", "Show all lists", "wetodo lists"),
        ("show", "Show a list's entries", "wetodo show <list>"),
        ("add", "Add an entry", 'wetodo add <list> "Title" \\[--type check|note|rule]'),
        ("check", "Toggle check entries", "wetodo check <list> <id(s)>"),
        ("rename", "Rename an entry", 'wetodo rename <list> <id> "New title"'),
        ("desc", "Set an entry's description", 'wetodo desc <list> <id> \\["Text"]'),
        ("move", "Move an entry", "wetodo move <list> <id> <position>"),
        ("rm", "Delete entries", "wetodo rm <list> <id(s)>"),
        ("history", "Show an entry's changes", "wetodo history <list> <id>"),
        ("title", "Rename a list", 'wetodo title <list> "New title"'),
        ("clear", "Remove all entries and history", "wetodo clear <list>"),
        ("fav", "Mark a list as favorite", "wetodo fav <list> \\[--off]"),
        ("share", "Add a user to a list", "wetodo share <list> <provider:id>"),
        ("delete", "Delete a list", "wetodo delete <list>"),
        ("log", "Show a list's modification log", "wetodo log <list> \\[--raw]"),
        ("repl", "Launch interactive REPL", "wetodo repl"),
        ("version", "Show version", "wetodo version"),
        ("help", "Show this help message", "wetodo help"),
    ]

    for cmd, desc, example in commands:
        console.print(f"  [green]{cmd:8}[/green] {desc}")
        console.print(f"           [dim]{example}[/dim]\n")

    console.print("[bold]Global Options:[/bold]")
    console.print("  [yellow]--user, -u[/yellow]     Acting user as provider:id (default local:0)")
    console.print("  [yellow]--verbose, -v[/yellow]  Show debug logging\n")

    console.print("[bold]Command Options:[/bold]")
    console.print("  [yellow]--json[/yellow]    Output as JSON (for scripting)")
    console.print("  [yellow]--raw[/yellow]     Plain text output (no colors)")
    console.print("  [yellow]--help[/yellow]    Show detailed help for a command\n")

    console.print("[dim]<list> is a list id, a unique id prefix (4+ characters) or a title.[/dim]\n")


@app.command()
def repl():
    """
    Launch interactive REPL mode.

    The REPL provides:
    - Command history (up/down arrows)
    - Autocomplete (Tab key)
    - An active list selected with 'use'
    - Exit with Ctrl+D or type 'exit'

    Example:
        wetodo repl
        wetodo --user local:1 repl
    """
    # Import here to avoid loading REPL dependencies for one-shot commands
    from ...repl import main as repl_main

    try:
        repl_main(user=state.user, directory=state.directory)
    except Exception as e:
        error_console.print(f"[red]Error starting REPL:[/red] {e}")
        raise typer.Exit(1)
