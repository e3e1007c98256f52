"""
FILE: wetodo/core/todolist.py
PURPOSE: The list aggregate: ordered modification log, derived entries, replay
EXPORTS:
  - TodoList (class)
  - parse_list(uuid, text) -> TodoList
DEPENDENCIES:
  - logging (stdlib)
  - uuid (stdlib)
  - json (stdlib)
  - wetodo.core.models (Modification, Entry)
  - wetodo.core.storage (save_list, for modify_and_save)
  - wetodo.core.exceptions (ModificationNotFoundError, MalformedListError, ...)
NOTES:
  - Entries are never stored: they are always the fold of the log from empty
  - The log is kept sorted by time after every insertion (stable sort)
  - apply_from() logs and skips records whose handler fails
  - modify_and_save() never persists a new record whose handler failed
  - apply()/apply_last() let handler errors propagate to the caller
  - Text format: title line ("*" suffix = favorite), users line, one log line each
"""

import json
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

from . import storage
from .constants import FAVORITE_MARKER, USER_SEPARATOR
from .exceptions import (
    MalformedListError,
    MalformedModificationError,
    ModificationNotFoundError,
    WeToDoError,
)
from .models import Entry, Modification


logger = logging.getLogger(__name__)


def _split_favorite(title: str) -> Tuple[str, bool]:
    """Strip a trailing favorite marker from a title."""
    if title.endswith(FAVORITE_MARKER):
        return title[: -len(FAVORITE_MARKER)], True
    return title, False


class TodoList:
    """
    A list whose entries are derived by replaying its modification log.

    Attributes:
        uuid: Stable identity (generated when not supplied)
        title: Display title, never including the favorite marker
        is_favorite: Favorite flag, persisted as a "*" suffix on the title line
        current_index: Next entry id to hand out
    """

    def __init__(
        self,
        title: str = "",
        users: Optional[Iterable[str]] = None,
        uuid: Optional[str] = None,
        is_favorite: bool = False,
    ):
        title, marked = _split_favorite(title)

        self.uuid = uuid or str(uuid4())
        self.title = title
        self.is_favorite = is_favorite or marked
        self.current_index = 0

        self._users: List[str] = []
        self._modifications: List[Modification] = []
        self._entries: List[Entry] = []

        for user in users or ():
            self.add_user(user)

    # --- Read access ---

    @property
    def users(self) -> List[str]:
        return list(self._users)

    @property
    def modifications(self) -> List[Modification]:
        return list(self._modifications)

    @property
    def entries(self) -> List[Entry]:
        return list(self._entries)

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    @property
    def update_time(self) -> Optional[datetime]:
        """Time of the newest log record, None for an empty log."""
        if not self._modifications:
            return None
        return self._modifications[-1].timestamp

    def is_shared(self) -> bool:
        """True if more than one user takes part in this list."""
        return len(self._users) > 1

    def get_entry_by_id(self, entry_id: int) -> Optional[Entry]:
        """Live entry with the given id, None if absent (e.g. deleted)."""
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    find_entry_by_id = get_entry_by_id

    def get_entry_index_from_id(self, entry_id: int) -> int:
        """Current position of the entry with the given id, -1 if absent."""
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return index
        return -1

    # --- List metadata ---

    def add_user(self, user: str) -> bool:
        """Add a participant. Returns False if already present."""
        if user in self._users:
            return False
        self._users.append(user)
        return True

    def set_title(self, title: str) -> None:
        # The favorite marker lives on the title line, never in the title
        self.title, _ = _split_favorite(title)

    # --- Mutation capability used by command handlers ---

    def allocate_id(self) -> int:
        entry_id = self.current_index
        self.current_index += 1
        return entry_id

    def reserve_id(self, entry_id: int) -> None:
        """Make sure entry_id is never handed out again."""
        self.current_index = max(self.current_index, entry_id + 1)

    def insert_entry(self, entry: Entry, index: Optional[int] = None) -> None:
        if index is None:
            self._entries.append(entry)
        else:
            self._entries.insert(index, entry)

    def remove_entry_at(self, index: int) -> Entry:
        return self._entries.pop(index)

    def move_entry(self, source: int, target: int) -> None:
        entry = self._entries.pop(source)
        self._entries.insert(target, entry)

    def prune_modifications(self, predicate: Callable[[Modification], bool]) -> List[Modification]:
        """Drop every log record matching predicate, returning the dropped ones."""
        pruned = []
        index = 0
        while index < len(self._modifications):
            if predicate(self._modifications[index]):
                pruned.append(self._modifications.pop(index))
                # stay on this index, the next record slid into it
                continue
            index += 1
        return pruned

    def truncate_before(self, modification: Modification) -> List[Modification]:
        """Drop every log record older than modification."""
        position = self._position_of(modification)
        if position <= 0:
            return []
        dropped = self._modifications[:position]
        del self._modifications[:position]
        return dropped

    def clear_entries(self) -> None:
        """Forget every entry and start ids over."""
        self._entries.clear()
        self.current_index = 0

    # --- Log and replay ---

    def add_modification(self, modification: Modification) -> None:
        """Append to the log and keep it sorted by time. Entries are untouched."""
        if not isinstance(modification, Modification):
            raise TypeError(f"Expected Modification, got {type(modification).__name__}")

        self._modifications.append(modification)
        self._sort()

    def apply(self, index: int) -> None:
        """
        Apply the log record at index.

        Raises:
            ModificationNotFoundError: If there is no record at index
            WeToDoError: Whatever the command's handler raises
        """
        if index < 0 or index >= len(self._modifications):
            raise ModificationNotFoundError(index)

        self._modifications[index].apply(self)

    def apply_last(self) -> None:
        """Apply the newest log record (the one just recorded)."""
        self.apply(len(self._modifications) - 1)

    def apply_from(self, start: int = 0) -> int:
        """
        Apply every record from start onward, in log order.

        A record whose handler fails is logged and skipped, replay carries on.
        Handlers may prune or truncate the log mid-pass, so the cursor follows
        the record it just applied rather than a fixed index.

        Returns:
            Number of records that failed to apply
        """
        return len(self._replay(start))

    def reset(self) -> int:
        """Rebuild entries from scratch by replaying the whole log."""
        return len(self._rebuild())

    def modify_and_save(self, modification: Modification) -> None:
        """
        Record a new modification, apply it and persist the list.

        A record whose handler fails is taken back out of the log and the
        error propagates, nothing is written. A record older than the newest
        one in the log triggers a full replay so entries stay the fold of the
        log; if the new record fails during that replay it is withdrawn the
        same way.

        Raises:
            WeToDoError: Handler failure for the new record
            StorageError: The list couldn't be written (in-memory state is kept)
        """
        self.add_modification(modification)

        if self._modifications[-1] is modification:
            try:
                self.apply_last()
            except WeToDoError:
                self._withdraw(modification)
                raise
        else:
            logger.debug("List %s: late record '%s', replaying", self.uuid, modification)
            for failed, error in self._rebuild():
                if failed is modification:
                    self._withdraw(modification)
                    self._rebuild()
                    raise error

        storage.save_list(self)

    def resolve_users(self, directory) -> list:
        """Futures resolving every participant's display data."""
        return [directory.resolve(user) for user in self._users]

    # --- Serialization ---

    @classmethod
    def parse(cls, uuid: str, text: str) -> "TodoList":
        """
        Rebuild a list from its persisted text.

        Unreadable or unknown log lines are skipped with a warning. The log
        needn't be sorted on disk. Entries come from a full replay.

        Raises:
            MalformedListError: If there's no title line at all
        """
        lines = [line.rstrip("\r") for line in text.split("\n")]
        if not text or not _split_favorite(lines[0])[0]:
            raise MalformedListError(uuid, "missing title line")

        users = lines[1].split(USER_SEPARATOR) if len(lines) > 1 else []
        todo_list = cls(title=lines[0], users=[u for u in users if u], uuid=uuid)

        for line_number, line in enumerate(lines[2:], start=3):
            if not line.strip():
                continue
            try:
                todo_list._modifications.append(Modification.parse(line))
            except MalformedModificationError as e:
                logger.warning("List %s, line %d: skipped: %s", uuid, line_number, e)

        todo_list._sort()
        todo_list.reset()
        return todo_list

    def to_text(self) -> str:
        title_line = self.title + (FAVORITE_MARKER if self.is_favorite else "")
        lines = [title_line, USER_SEPARATOR.join(self._users)]
        lines.extend(modification.to_line() for modification in self._modifications)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_text()

    def __repr__(self) -> str:
        return f"<TodoList {self.uuid} {self.title!r} ({len(self._modifications)} records)>"

    def to_dict(self) -> Dict[str, Any]:
        update_time = self.update_time
        return {
            "uuid": self.uuid,
            "title": self.title,
            "favorite": self.is_favorite,
            "users": self.users,
            "shared": self.is_shared(),
            "updated_at": update_time.isoformat() if update_time else None,
            "entries": [entry.to_dict() for entry in self._entries],
        }

    def to_json(self) -> str:
        """Serialize list state to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    # --- Internals ---

    def _sort(self) -> None:
        # list.sort is stable: equal timestamps keep insertion order
        self._modifications.sort(key=lambda modification: modification.time)

    def _position_of(self, modification: Modification, hint: int = -1) -> int:
        """Index of this exact record object in the log, -1 if gone."""
        if 0 <= hint < len(self._modifications) and self._modifications[hint] is modification:
            return hint
        for index, candidate in enumerate(self._modifications):
            if candidate is modification:
                return index
        return -1

    def _replay(self, start: int) -> List[Tuple[Modification, Exception]]:
        """Apply records from start onward, returning the ones that failed."""
        failures = []
        index = start
        while index < len(self._modifications):
            modification = self._modifications[index]
            try:
                modification.apply(self)
            except WeToDoError as e:
                failures.append((modification, e))
                logger.warning("List %s: skipped '%s': %s", self.uuid, modification, e)
            except Exception as e:
                failures.append((modification, e))
                logger.exception("List %s: handler crashed on '%s'", self.uuid, modification)
            position = self._position_of(modification, hint=index)
            index = position + 1 if position >= 0 else index
        return failures

    def _rebuild(self) -> List[Tuple[Modification, Exception]]:
        self._entries.clear()
        self.current_index = 0
        return self._replay(0)

    def _withdraw(self, modification: Modification) -> None:
        position = self._position_of(modification)
        if position >= 0:
            del self._modifications[position]


def parse_list(uuid: str, text: str) -> TodoList:
    """Parse persisted list text (see TodoList.parse)."""
    return TodoList.parse(uuid, text)
