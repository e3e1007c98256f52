"""
FILE: wetodo/repl/commands/system.py
PURPOSE: System command handlers for REPL
"""

from ..main import console
from ..parser import ParseResult


def handle_help_command(result: ParseResult) -> None:
    """
    Handle 'help' command - show available commands.

    Args:
        result: Parsed command (unused)
    """
    help_text = """
[bold cyan]Lists:[/bold cyan]

  [cyan]use <list>[/cyan]                 Select the active list (title, id or id prefix)
  [cyan]use none[/cyan]                   Drop the active list
  [cyan]lists[/cyan]                      Show all lists
  [cyan]new <title>[/cyan]                Create a list and make it active
  [cyan]show \\[<list>][/cyan]              Show entries of the active or a named list
  [cyan]title <new title>[/cyan]          Rename the active list
  [cyan]fav \\[--off][/cyan]                Mark the active list as favorite
  [cyan]share <provider:id>[/cyan]        Add a user to the active list
  [cyan]clear \\[--yes][/cyan]              Remove all entries and compact the history
  [cyan]delete \\[<list>] \\[--yes][/cyan]    Delete the active or a named list
  [cyan]log \\[--raw][/cyan]                Show the modification log

[bold cyan]Entries (active list):[/bold cyan]

  [cyan]add <title> \\[--type <type>][/cyan] Add an entry (check, note or rule)
  [cyan]check <id>\\[,<id>...][/cyan]       Toggle check entries
  [cyan]rename <id> <title>[/cyan]        Rename an entry
  [cyan]desc <id> \\[text][/cyan]           Set the description (empty clears it)
  [cyan]move <id> <position>[/cyan]       Move an entry (0 = top)
  [cyan]rm <id>\\[,<id>...][/cyan]          Delete entries
  [cyan]history <id>[/cyan]               Show who changed an entry and when

[bold cyan]Session:[/bold cyan]

  [cyan]help[/cyan]                       Show this help
  [cyan]exit[/cyan] or [cyan]quit[/cyan]              Exit REPL

[bold cyan]Examples:[/bold cyan]

  [dim]new Groceries
  add Milk
  add Dairy --type rule
  add "Oat milk"
  check 0,2
  move 2 0
  desc 0 From the farm shop
  share local:2
  use none[/dim]
"""
    console.print(help_text)
