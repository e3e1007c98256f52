"""
FILE: wetodo/formatting.py
PURPOSE: Shared formatting utilities for CLI and REPL output
EXPORTS:
  - EntryFormatter: Tables, JSON and raw lines for a list's entries
  - ListFormatter: Tables, JSON and raw lines for lists
  - create_changes_table(changes, directory) -> Table
  - create_log_table(modifications, directory) -> Table
  - format_relative(dt, now) -> str
  - parse_entry_ids(id_string) -> List[int]
DEPENDENCIES:
  - rich (for table formatting)
  - json (for JSON serialization)
  - datetime (relative times)
  - wetodo.core.models (Entry, Change, Modification)
  - wetodo.core.todolist (TodoList)
  - wetodo.core.users (UserDirectory, for display names)
NOTES:
  - Centralized formatting logic for consistency
  - Used by both CLI and REPL
  - User names resolved through an injected UserDirectory, raw ids otherwise
"""

import json
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from rich.markup import escape
from rich.table import Table

from .core.constants import (
    CHANGE_CHECK,
    CHANGE_CREATE,
    CHANGE_EDIT,
    CHANGE_RELOCATE,
    CHANGE_UNCHECK,
    ENTRY_CHECK,
    ENTRY_RULE,
)
from .core.models import Change, Entry, Modification
from .core.todolist import TodoList
from .core.users import UserDirectory


CHANGE_ICONS = {
    CHANGE_CREATE: "+",
    CHANGE_CHECK: "✓",
    CHANGE_UNCHECK: "−",
    CHANGE_EDIT: "✎",
    CHANGE_RELOCATE: "↕",
}


def _user_name(user_id: str, directory: Optional[UserDirectory]) -> str:
    if directory is None:
        return user_id
    return directory.display_name(user_id)


def format_relative(dt: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Format an aware datetime as a relative string.

    Returns:
        "just now", "5 minutes ago", "3 hours ago", "yesterday",
        "4 days ago", "Jan 15" or "Jan 15, 2024"; "-" for None
    """
    if dt is None:
        return "-"

    now = now or datetime.now(timezone.utc)
    seconds = (now - dt).total_seconds()

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        minutes = int(seconds / 60)
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    if seconds < 86400:
        hours = int(seconds / 3600)
        return f"{hours} hour{'s' if hours != 1 else ''} ago"

    if dt.date() == now.date() - timedelta(days=1):
        return "yesterday"

    days = int(seconds / 86400)
    if days < 7:
        return f"{days} day{'s' if days != 1 else ''} ago"

    if dt.year == now.year:
        return dt.strftime("%b %d")
    return dt.strftime("%b %d, %Y")


class EntryFormatter:
    """Centralized entry display formatting."""

    @staticmethod
    def marker(entry: Entry) -> str:
        """Leading marker: [x]/[ ] for check entries, - for notes, = for rules."""
        if entry.type == ENTRY_CHECK:
            return "[x]" if entry.checked else "[ ]"
        if entry.type == ENTRY_RULE:
            return "="
        return "-"

    @staticmethod
    def create_table(entries: List[Entry], title: str = "Entries") -> Table:
        """
        Create Rich table for entries, in list order.

        Args:
            entries: Entries to display
            title: Table title

        Returns:
            Rich Table object ready for display
        """
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("#", style="dim", width=4, no_wrap=True)
        table.add_column("ID", style="cyan", width=5, no_wrap=True)
        table.add_column("", width=3, no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Changes", style="magenta", width=8, justify="right")

        for position, entry in enumerate(entries):
            if entry.type == ENTRY_RULE:
                title_cell = f"[dim]── {escape(entry.title)} ──[/dim]"
            elif entry.checked:
                title_cell = f"[green strike]{escape(entry.title)}[/green strike]"
            else:
                title_cell = escape(entry.title)

            if entry.description:
                title_cell += f"\n[dim]{escape(entry.description_text)}[/dim]"

            table.add_row(
                str(position),
                str(entry.id),
                escape(EntryFormatter.marker(entry)),
                title_cell,
                str(len(entry.changes)),
            )

        return table

    @staticmethod
    def to_json_array(entries: List[Entry]) -> str:
        """Convert entries to a JSON array string."""
        return json.dumps([entry.to_dict() for entry in entries], indent=2)

    @staticmethod
    def to_raw_lines(entries: List[Entry]) -> List[str]:
        """One plain text line per entry: '<id>: <marker> <title>'."""
        return [f"{entry.id}: {EntryFormatter.marker(entry)} {entry.title}" for entry in entries]


class ListFormatter:
    """Centralized list display formatting."""

    @staticmethod
    def kind(todo_list: TodoList) -> str:
        return "Shared" if todo_list.is_shared() else "Personal"

    @staticmethod
    def create_table(lists: List[TodoList], title: str = "Lists") -> Table:
        """
        Create Rich table for lists.

        Returns:
            Rich Table with short id, title (★ for favorites), kind,
            open/total entry counts and last change
        """
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", width=8, no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Kind", style="magenta", width=8)
        table.add_column("Open", style="yellow", width=9, justify="right")
        table.add_column("Updated", style="dim")

        for todo_list in lists:
            entries = todo_list.entries
            open_count = sum(1 for e in entries if e.type == ENTRY_CHECK and not e.checked)
            title = escape(todo_list.title)
            if todo_list.is_favorite:
                title = f"★ {title}"

            table.add_row(
                todo_list.uuid[:8],
                title,
                ListFormatter.kind(todo_list),
                f"{open_count}/{len(entries)}",
                format_relative(todo_list.update_time),
            )

        return table

    @staticmethod
    def to_json_dict(todo_list: TodoList) -> dict:
        """Summary dict for list overviews (no entries)."""
        update_time = todo_list.update_time
        return {
            "uuid": todo_list.uuid,
            "title": todo_list.title,
            "favorite": todo_list.is_favorite,
            "users": todo_list.users,
            "shared": todo_list.is_shared(),
            "entries": todo_list.entry_count,
            "updated_at": update_time.isoformat() if update_time else None,
        }

    @staticmethod
    def to_json_array(lists: List[TodoList]) -> str:
        return json.dumps([ListFormatter.to_json_dict(l) for l in lists], indent=2)

    @staticmethod
    def to_raw_lines(lists: List[TodoList]) -> List[str]:
        lines = []
        for todo_list in lists:
            star = "*" if todo_list.is_favorite else " "
            lines.append(f"{todo_list.uuid} {star} {todo_list.title}")
        return lines


def create_changes_table(
    changes: List[Change],
    directory: Optional[UserDirectory] = None,
    title: str = "History",
) -> Table:
    """Newest-first table of an entry's change records."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("", width=2, no_wrap=True)
    table.add_column("What", style="magenta", width=9)
    table.add_column("Who", style="yellow")
    table.add_column("When", style="dim")

    for change in reversed(changes):
        table.add_row(
            CHANGE_ICONS.get(change.kind, "?"),
            change.kind,
            _user_name(change.user, directory),
            format_relative(change.timestamp),
        )

    return table


def create_log_table(
    modifications: List[Modification],
    directory: Optional[UserDirectory] = None,
    title: str = "Log",
) -> Table:
    """Oldest-first table of a list's modification log."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4, no_wrap=True)
    table.add_column("Time", style="dim", no_wrap=True)
    table.add_column("Command", style="magenta", no_wrap=True)
    table.add_column("User", style="yellow")
    table.add_column("Data", style="white")

    for index, modification in enumerate(modifications):
        table.add_row(
            str(index),
            modification.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
            modification.command,
            _user_name(modification.user, directory),
            escape(modification.data),
        )

    return table


def parse_entry_ids(id_string: str) -> List[int]:
    """
    Parse comma-separated entry IDs.

    Args:
        id_string: Comma-separated string of IDs (e.g., "1,2,3")

    Returns:
        List of integers

    Raises:
        ValueError: If any ID is not a valid integer
    """
    ids = [part.strip() for part in id_string.split(",")]
    return [int(part) for part in ids if part]
