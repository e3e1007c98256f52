"""
FILE: wetodo/core/service.py
PURPOSE: Business logic layer turning user intents into list modifications
EXPORTS:
  - create_list(title, user) -> TodoList
  - load_lists() -> List[TodoList]
  - list_lists() -> List[TodoList]
  - get_list(uuid) -> Optional[TodoList]
  - find_list(reference) -> TodoList
  - delete_list(uuid) -> None
  - add_entry(todo_list, title, user, entry_type) -> Entry
  - check_entry(todo_list, entry_id, user) -> Entry
  - rename_entry(todo_list, entry_id, title, user) -> Entry
  - describe_entry(todo_list, entry_id, description, user) -> Entry
  - relocate_entry(todo_list, entry_id, position, user) -> Entry
  - delete_entry(todo_list, entry_id, user) -> Entry
  - rename_list(todo_list, title, user) -> TodoList
  - clear_list(todo_list, user) -> TodoList
  - set_favorite(todo_list, favorite) -> TodoList
  - share_list(todo_list, user) -> bool
  - entry_history(todo_list, entry_id) -> List[Change]
DEPENDENCIES:
  - wetodo.core.todolist (TodoList, parse_list)
  - wetodo.core.models (Modification, Entry, Change)
  - wetodo.core.storage (flat-file persistence)
  - wetodo.core.users (User, for id validation)
  - wetodo.core.exceptions (InvalidInputError, EntryNotFoundError, ListNotFoundError, ...)
NOTES:
  - All functions validate input and raise descriptive errors
  - Every entry change goes through TodoList.modify_and_save (log + apply + save)
  - No file access of its own (use storage layer)
  - New records are never stamped older than the newest one in the log
"""

import logging
from typing import List, Optional

from . import storage
from .constants import (
    CLEAR_PAYLOAD,
    DEFAULT_ENTRY_TYPE,
    DEFAULT_USER,
    ENTRY_TYPES,
    ESCAPED_NEWLINE,
    FAVORITE_MARKER,
    FIELD_SEPARATOR,
    Command,
)
from .exceptions import (
    EntryNotFoundError,
    InvalidInputError,
    ListNotFoundError,
    MalformedListError,
)
from .models import Change, Entry, Modification, now_ms
from .todolist import TodoList, parse_list
from .users import User


logger = logging.getLogger(__name__)

# Shortest uuid prefix accepted as a list reference
MIN_UUID_PREFIX = 4


# --- Validation helpers ---


def _validate_user(user: str) -> str:
    """Raise InvalidInputError unless user looks like provider:number."""
    return User(user).id


def _clean_title(title: str, what: str = "Entry") -> str:
    """
    Trim and validate a title.

    Raises:
        InvalidInputError: If empty after trimming or spanning several lines
    """
    title = (title or "").strip()
    if not title:
        raise InvalidInputError(f"{what} title cannot be empty")
    if "\n" in title or "\r" in title:
        raise InvalidInputError(f"{what} title must be a single line")
    return title


def _clean_list_title(title: str) -> str:
    title = _clean_title(title, "List")
    if title.endswith(FAVORITE_MARKER):
        raise InvalidInputError(f"List title cannot end with '{FAVORITE_MARKER}'")
    return title


def _require_entry(todo_list: TodoList, entry_id: int) -> Entry:
    entry = todo_list.get_entry_by_id(entry_id)
    if entry is None:
        raise EntryNotFoundError(entry_id)
    return entry


def _record(todo_list: TodoList, command: Command, user: str, data: str) -> Modification:
    """Build a modification for todo_list and run it through modify_and_save."""
    time = now_ms()
    modifications = todo_list.modifications
    if modifications and modifications[-1].time > time:
        # Keep local edits at the end of the log despite clock skew
        time = modifications[-1].time

    modification = Modification.create(command, _validate_user(user), data, time=time)
    todo_list.modify_and_save(modification)
    return modification


# --- List operations ---


def create_list(title: str, user: str = DEFAULT_USER) -> TodoList:
    """
    Create and save a new, empty list.

    Args:
        title: List title (required, single line, no trailing '*')
        user: Creator, becomes the first (owner) user

    Returns:
        Newly created TodoList

    Raises:
        InvalidInputError: If title or user is invalid
    """
    todo_list = TodoList(title=_clean_list_title(title), users=[_validate_user(user)])
    storage.save_list(todo_list)
    return todo_list


def load_lists() -> List[TodoList]:
    """
    Load every stored list.

    Lists without a readable title line are skipped with a warning, lists
    with bad log lines load with whatever replays.
    """
    lists = []
    for uuid, text in storage.read_all_list_texts():
        try:
            lists.append(parse_list(uuid, text))
        except MalformedListError as e:
            logger.warning("Skipping unreadable list: %s", e)
    return lists


def list_lists() -> List[TodoList]:
    """
    All lists for display: favorites first, then most recently changed.
    """
    lists = load_lists()
    lists.sort(key=lambda l: l.update_time.timestamp() if l.update_time else 0.0, reverse=True)
    lists.sort(key=lambda l: not l.is_favorite)
    return lists


def get_list(uuid: str) -> Optional[TodoList]:
    """
    Fetch a list by uuid.

    Returns:
        TodoList if stored, None otherwise
    """
    text = storage.read_list_text(uuid)
    if text is None:
        return None
    return parse_list(uuid, text)


def find_list(reference: str) -> TodoList:
    """
    Find a list by uuid, uuid prefix or title (case-insensitive).

    Raises:
        ListNotFoundError: If nothing matches
        InvalidInputError: If the reference matches several lists
    """
    reference = (reference or "").strip()
    if not reference:
        raise InvalidInputError("List reference cannot be empty")

    lists = load_lists()

    for todo_list in lists:
        if todo_list.uuid == reference:
            return todo_list

    if len(reference) >= MIN_UUID_PREFIX:
        by_prefix = [l for l in lists if l.uuid.startswith(reference)]
        if len(by_prefix) == 1:
            return by_prefix[0]

    by_title = [l for l in lists if l.title.lower() == reference.lower()]
    if len(by_title) == 1:
        return by_title[0]
    if len(by_title) > 1:
        candidates = ", ".join(l.uuid[:8] for l in by_title)
        raise InvalidInputError(
            f"Several lists are titled '{reference}': {candidates}. Use the id instead."
        )

    raise ListNotFoundError(reference)


def delete_list(uuid: str) -> None:
    """
    Delete a stored list permanently.

    Raises:
        ListNotFoundError: If the list doesn't exist
    """
    storage.delete_list(uuid)


def rename_list(todo_list: TodoList, title: str, user: str = DEFAULT_USER) -> TodoList:
    """Rename a list through a LISTRENAME record."""
    _record(todo_list, Command.LISTRENAME, user, _clean_list_title(title))
    return todo_list


def clear_list(todo_list: TodoList, user: str = DEFAULT_USER) -> TodoList:
    """
    Wipe every entry and compact the log down to a single CLEAR record.

    Notes:
        Irreversible: the history before the CLEAR is gone from the file
    """
    _record(todo_list, Command.CLEAR, user, CLEAR_PAYLOAD)
    return todo_list


def set_favorite(todo_list: TodoList, favorite: bool = True) -> TodoList:
    """Flag or unflag a list as favorite and save it (not a log record)."""
    todo_list.is_favorite = favorite
    storage.save_list(todo_list)
    return todo_list


def share_list(todo_list: TodoList, user: str) -> bool:
    """
    Add a participant to a list and save it.

    Returns:
        False if the user already takes part
    """
    added = todo_list.add_user(_validate_user(user))
    if added:
        storage.save_list(todo_list)
    return added


# --- Entry operations ---


def add_entry(
    todo_list: TodoList,
    title: str,
    user: str = DEFAULT_USER,
    entry_type: str = DEFAULT_ENTRY_TYPE,
) -> Entry:
    """
    Add an entry to a list through a CREATE record.

    Args:
        todo_list: List to add to
        title: Entry title (required, single line)
        user: Acting user
        entry_type: One of note, check, rule (defaults to check)

    Returns:
        The new Entry

    Raises:
        InvalidInputError: If title, type or user is invalid
    """
    entry_type = (entry_type or "").strip().lower()
    if entry_type not in ENTRY_TYPES:
        raise InvalidInputError(
            f"Invalid entry type '{entry_type}'. Must be one of: {', '.join(ENTRY_TYPES)}"
        )

    title = _clean_title(title)
    _record(todo_list, Command.CREATE, user, f"{entry_type}{FIELD_SEPARATOR}{title}")

    return _require_entry(todo_list, todo_list.current_index - 1)


def check_entry(todo_list: TodoList, entry_id: int, user: str = DEFAULT_USER) -> Entry:
    """
    Toggle a check entry.

    Raises:
        EntryNotFoundError: If entry_id isn't live
        InvalidInputError: If the entry isn't a check entry
    """
    entry = _require_entry(todo_list, entry_id)
    if not entry.is_checkable:
        raise InvalidInputError(f"Entry {entry_id} is a {entry.type}, only check entries can be checked")

    _record(todo_list, Command.CHECK, user, str(entry_id))
    return entry


def rename_entry(todo_list: TodoList, entry_id: int, title: str, user: str = DEFAULT_USER) -> Entry:
    """Change an entry's title through a RENAME record."""
    entry = _require_entry(todo_list, entry_id)
    _record(todo_list, Command.RENAME, user, f"{entry_id}{FIELD_SEPARATOR}{_clean_title(title)}")
    return entry


def describe_entry(
    todo_list: TodoList,
    entry_id: int,
    description: Optional[str],
    user: str = DEFAULT_USER,
) -> Entry:
    """
    Set or clear an entry's description through a CHANGEDESC record.

    Notes:
        Newlines are stored escaped, the log is line based
        Empty or whitespace-only descriptions clear it
    """
    entry = _require_entry(todo_list, entry_id)

    text = (description or "").replace("\r\n", "\n").strip()
    text = text.replace("\n", ESCAPED_NEWLINE)
    _record(todo_list, Command.CHANGEDESC, user, f"{entry_id}{FIELD_SEPARATOR}{text}")
    return entry


def relocate_entry(todo_list: TodoList, entry_id: int, position: int, user: str = DEFAULT_USER) -> Entry:
    """
    Move an entry to a position through a RELOCATE record.

    Args:
        position: Target position among live entries, counted before the move;
            positions past the end move the entry to the end

    Raises:
        InvalidInputError: If position is negative
    """
    entry = _require_entry(todo_list, entry_id)
    if position < 0:
        raise InvalidInputError("Position cannot be negative")

    _record(todo_list, Command.RELOCATE, user, f"{entry_id}{FIELD_SEPARATOR}{position}")
    return entry


def delete_entry(todo_list: TodoList, entry_id: int, user: str = DEFAULT_USER) -> Entry:
    """
    Delete an entry through a DELETE record.

    Returns:
        The removed Entry

    Raises:
        EntryNotFoundError: If entry_id isn't live
    """
    entry = _require_entry(todo_list, entry_id)
    _record(todo_list, Command.DELETE, user, str(entry_id))
    return entry


def entry_history(todo_list: TodoList, entry_id: int) -> List[Change]:
    """Change records of an entry, oldest first."""
    return list(_require_entry(todo_list, entry_id).changes)
