"""
FILE: wetodo/core/handlers.py
PURPOSE: Command registry and the state transition for every log command
EXPORTS:
  - ListState (Protocol): mutation capability handlers receive
  - CommandHandler (base class)
  - CreateCommandHandler, DeleteCommandHandler, CheckCommandHandler,
    RenameCommandHandler, ChangeDescCommandHandler, RelocateCommandHandler,
    ListRenameCommandHandler, ClearCommandHandler
  - HANDLERS: command name -> handler instance
  - lookup(command) -> CommandHandler
DEPENDENCIES:
  - logging (stdlib)
  - typing (Protocol, type hints)
  - wetodo.core.models (Entry, Modification)
  - wetodo.core.constants (Command, change kinds)
  - wetodo.core.exceptions (UnknownCommandError, EntryNotFoundError, MalformedModificationError)
NOTES:
  - Registry is static, built once at import, keyed by uppercase command name
  - Handlers only mutate a list through the ListState methods
  - Id-addressed handlers raise EntryNotFoundError for ids that aren't live
"""

import logging
from typing import Callable, Dict, List, Optional, Protocol

from .constants import (
    CHANGE_CHECK,
    CHANGE_EDIT,
    CHANGE_RELOCATE,
    CHANGE_UNCHECK,
    FIELD_SEPARATOR,
    Command,
)
from .exceptions import (
    EntryNotFoundError,
    MalformedModificationError,
    UnknownCommandError,
)
from .models import Entry, Modification


logger = logging.getLogger(__name__)


class ListState(Protocol):
    """Operations a handler may use to change a list."""

    current_index: int

    @property
    def entry_count(self) -> int: ...

    def allocate_id(self) -> int: ...

    def reserve_id(self, entry_id: int) -> None: ...

    def insert_entry(self, entry: Entry, index: Optional[int] = None) -> None: ...

    def remove_entry_at(self, index: int) -> Entry: ...

    def move_entry(self, source: int, target: int) -> None: ...

    def find_entry_by_id(self, entry_id: int) -> Optional[Entry]: ...

    def get_entry_index_from_id(self, entry_id: int) -> int: ...

    def set_title(self, title: str) -> None: ...

    def prune_modifications(self, predicate: Callable[[Modification], bool]) -> List[Modification]: ...

    def truncate_before(self, modification: Modification) -> List[Modification]: ...

    def clear_entries(self) -> None: ...


class CommandHandler:
    """Base handler: one command name, one state transition."""

    def __init__(self, command: Command):
        self.command = command.value

    def handle(self, modification: Modification, todo_list: ListState) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.command}>"


def _parse_entry_id(modification: Modification, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise MalformedModificationError(
            f"{modification.command} expects an entry id, got {raw!r}",
            line=modification.to_line(),
        )


def _split_field(modification: Modification) -> tuple:
    """Split "<head>|<tail>", rejecting payloads without the separator."""
    head, sep, tail = modification.data.partition(FIELD_SEPARATOR)
    if not sep:
        raise MalformedModificationError(
            f"{modification.command} expects '<field>|<value>', got {modification.data!r}",
            line=modification.to_line(),
        )
    return head, tail


def _require_entry(todo_list: ListState, entry_id: int) -> Entry:
    entry = todo_list.find_entry_by_id(entry_id)
    if entry is None:
        raise EntryNotFoundError(entry_id)
    return entry


class CreateCommandHandler(CommandHandler):
    """CREATE <type>|<title>: allocate and append a new entry."""

    def __init__(self):
        super().__init__(Command.CREATE)

    def handle(self, modification, todo_list):
        entry_type, title = _split_field(modification)
        if not entry_type or not title:
            raise MalformedModificationError(
                f"CREATE expects '<type>|<title>', got {modification.data!r}",
                line=modification.to_line(),
            )

        entry = Entry.from_modification(todo_list.allocate_id(), entry_type, title, modification)
        todo_list.insert_entry(entry)


class DeleteCommandHandler(CommandHandler):
    """
    DELETE <entryId>: remove the entry and prune its dead log records.

    Every other id-addressed record aimed at the entry is pruned from the log.
    The entry's CREATE record is pruned too when the entry holds the highest
    allocated id, so replaying the shorter log hands out the same ids. When a
    replayed DELETE finds its id at or above the counter, its CREATE was
    pruned earlier: the id is reserved and nothing else happens.
    """

    def __init__(self):
        super().__init__(Command.DELETE)

    def handle(self, modification, todo_list):
        head, _ = modification.split_data()
        entry_id = _parse_entry_id(modification, head)

        index = todo_list.get_entry_index_from_id(entry_id)
        if index < 0:
            if entry_id >= todo_list.current_index:
                todo_list.reserve_id(entry_id)
                return
            raise EntryNotFoundError(entry_id)

        newest = entry_id == todo_list.current_index - 1
        entry = todo_list.remove_entry_at(index)
        creator = entry.created_by if newest else None

        pruned = todo_list.prune_modifications(
            lambda mod: mod is not modification
            and (mod.targets(entry_id) or (creator is not None and mod is creator))
        )
        if pruned:
            logger.debug("DELETE %s pruned %d log record(s)", entry_id, len(pruned))


class CheckCommandHandler(CommandHandler):
    """CHECK <entryId>: toggle the checked state."""

    def __init__(self):
        super().__init__(Command.CHECK)

    def handle(self, modification, todo_list):
        head, _ = modification.split_data()
        entry = _require_entry(todo_list, _parse_entry_id(modification, head))

        entry.checked = not entry.checked
        entry.record(modification, CHANGE_CHECK if entry.checked else CHANGE_UNCHECK)


class RenameCommandHandler(CommandHandler):
    """RENAME <entryId>|<title>"""

    def __init__(self):
        super().__init__(Command.RENAME)

    def handle(self, modification, todo_list):
        head, title = _split_field(modification)
        entry = _require_entry(todo_list, _parse_entry_id(modification, head))
        if not title:
            raise MalformedModificationError("RENAME needs a title", line=modification.to_line())

        entry.title = title
        entry.record(modification, CHANGE_EDIT)


class ChangeDescCommandHandler(CommandHandler):
    """CHANGEDESC <entryId>|<description>, empty clears it."""

    def __init__(self):
        super().__init__(Command.CHANGEDESC)

    def handle(self, modification, todo_list):
        head, description = _split_field(modification)
        entry = _require_entry(todo_list, _parse_entry_id(modification, head))

        entry.description = description or None
        entry.record(modification, CHANGE_EDIT)


class RelocateCommandHandler(CommandHandler):
    """
    RELOCATE <entryId>|<targetIndex>: move an entry to a position.

    The target is a position among live entries, counted before the entry
    is taken out. Targets past the end clamp to the end. Unparseable or
    negative payloads and moves onto the current position do nothing.
    """

    def __init__(self):
        super().__init__(Command.RELOCATE)

    def handle(self, modification, todo_list):
        head, sep, tail = modification.data.partition(FIELD_SEPARATOR)
        try:
            entry_id = int(head)
            target = int(tail) if sep else None
        except ValueError:
            target = None
        if target is None or target < 0:
            logger.debug("Ignoring malformed RELOCATE payload %r", modification.data)
            return

        source = todo_list.get_entry_index_from_id(entry_id)
        if source < 0:
            raise EntryNotFoundError(entry_id)

        target = min(target, todo_list.entry_count)
        if target > source:
            # Removing the source shifts everything after it down by one
            target -= 1
        if target == source:
            return

        todo_list.move_entry(source, target)
        _require_entry(todo_list, entry_id).record(modification, CHANGE_RELOCATE)


class ListRenameCommandHandler(CommandHandler):
    """LISTRENAME <title>: rename the list itself."""

    def __init__(self):
        super().__init__(Command.LISTRENAME)

    def handle(self, modification, todo_list):
        todo_list.set_title(modification.data)


class ClearCommandHandler(CommandHandler):
    """
    CLEAR: compact the log down to this record.

    Every record older than the CLEAR is dropped together with all entries,
    and the id counter starts over. A CLEAR that is already the oldest
    record changes nothing.
    """

    def __init__(self):
        super().__init__(Command.CLEAR)

    def handle(self, modification, todo_list):
        dropped = todo_list.truncate_before(modification)
        if not dropped:
            return

        todo_list.clear_entries()
        logger.debug("CLEAR dropped %d log record(s)", len(dropped))


HANDLERS: Dict[str, CommandHandler] = {
    handler.command: handler
    for handler in (
        CreateCommandHandler(),
        DeleteCommandHandler(),
        CheckCommandHandler(),
        RenameCommandHandler(),
        ChangeDescCommandHandler(),
        RelocateCommandHandler(),
        ListRenameCommandHandler(),
        ClearCommandHandler(),
    )
}


def lookup(command: str) -> CommandHandler:
    """
    Find the handler for a command name.

    Raises:
        UnknownCommandError: If no handler is registered under that name
    """
    handler = HANDLERS.get(command) if isinstance(command, str) else None
    if handler is None:
        raise UnknownCommandError(str(command))
    return handler
