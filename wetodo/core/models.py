"""
FILE: wetodo/core/models.py
PURPOSE: Domain models for the list log and its derived entries
EXPORTS:
  - Modification (frozen dataclass): one line of a list's log
  - Change (frozen dataclass): one record of an entry's audit trail
  - Entry (dataclass): a note, check item or rule inside a list
  - now_ms() -> int
DEPENDENCIES:
  - dataclasses (stdlib)
  - json (stdlib)
  - re (stdlib)
  - datetime (stdlib)
  - wetodo.core.handlers (command registry, imported lazily)
NOTES:
  - Modification round-trips exactly to "<epoch-ms> <COMMAND> <user> <data>"
  - Modification validates its command against the registry on construction
  - Entries are only ever mutated by command handlers
  - All models have to_json() for serialization
"""

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .constants import (
    CHANGE_CREATE,
    ENTRY_CHECK,
    ESCAPED_NEWLINE,
    FIELD_SEPARATOR,
    ID_ADDRESSED_COMMANDS,
)
from .exceptions import MalformedModificationError


# timestamp COMMAND provider:uid data
# ex: 123456789 CREATE local:0 check|Example Checklist Item
MODIFICATION_PATTERN = re.compile(r"([0-9]+) ([A-Z_]+) ([a-z]+:\d+) (.+)")
USER_PATTERN = re.compile(r"[a-z]+:\d+")


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


@dataclass(frozen=True)
class Modification:
    """
    One immutable, timestamped, user-attributed command in a list's log.

    Attributes:
        time: Epoch milliseconds, the source of the log's total order
        command: Uppercase command name, must be known to the registry
        user: Acting user as "<provider>:<id>"
        data: Command payload, grammar depends on the command

    Raises:
        UnknownCommandError: If command isn't registered
        MalformedModificationError: If any other field can't be written to a log line
    """

    time: int
    command: str
    user: str
    data: str

    def __post_init__(self):
        # Import here to avoid circular dependency (handlers build Entries)
        from .handlers import lookup

        # Command members are written to the log as their plain token
        object.__setattr__(self, "command", getattr(self.command, "value", self.command))

        if isinstance(self.time, bool) or not isinstance(self.time, int) or self.time < 0:
            raise MalformedModificationError(f"Bad timestamp: {self.time!r}")
        if not isinstance(self.user, str) or not USER_PATTERN.fullmatch(self.user):
            raise MalformedModificationError(f"Bad user id: {self.user!r}")
        if not isinstance(self.data, str) or not self.data or "\n" in self.data or "\r" in self.data:
            raise MalformedModificationError(f"Bad payload for {self.command}: {self.data!r}")

        lookup(self.command)

    @classmethod
    def parse(cls, line: str) -> "Modification":
        """
        Parse one log line.

        Raises:
            MalformedModificationError: Line doesn't match the log grammar
            UnknownCommandError: Line names a command the registry doesn't know
        """
        match = MODIFICATION_PATTERN.fullmatch(line)
        if not match:
            raise MalformedModificationError(f"Bad entry line: {line!r}", line=line)

        return cls(
            time=int(match.group(1)),
            command=match.group(2),
            user=match.group(3),
            data=match.group(4),
        )

    @classmethod
    def create(
        cls,
        command: str,
        user: str,
        data: str,
        time: Optional[int] = None,
    ) -> "Modification":
        """Build a new modification, stamped now unless a time is given."""
        return cls(
            time=now_ms() if time is None else time,
            command=command,
            user=user,
            data=data,
        )

    @property
    def handler(self):
        """The registry handler for this command."""
        from .handlers import lookup

        return lookup(self.command)

    @property
    def timestamp(self) -> datetime:
        """Time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.time / 1000, tz=timezone.utc)

    @property
    def target_id(self) -> Optional[int]:
        """Entry id this command addresses, None for whole-list commands."""
        if self.command not in ID_ADDRESSED_COMMANDS:
            return None
        head, _ = self.split_data()
        try:
            return int(head)
        except ValueError:
            return None

    def split_data(self) -> Tuple[str, str]:
        """Split "<field>|<rest>" on the first separator."""
        head, _, tail = self.data.partition(FIELD_SEPARATOR)
        return head, tail

    def targets(self, entry_id: int) -> bool:
        """True if this is an id-addressed command aimed at entry_id."""
        if self.command not in ID_ADDRESSED_COMMANDS:
            return False
        key = str(entry_id)
        return self.data == key or self.data.startswith(key + FIELD_SEPARATOR)

    def apply(self, target) -> None:
        """Run this command's state transition against the owning list."""
        self.handler.handle(self, target)

    def resolve_user(self, directory):
        """
        Resolve display data for the acting user.

        Returns:
            concurrent.futures.Future completed with the user's data
            (or with the resolution error)
        """
        return directory.resolve(self.user)

    def to_line(self) -> str:
        """Serialize back into the canonical log line."""
        return f"{self.time} {self.command} {self.user} {self.data}"

    def __str__(self) -> str:
        return self.to_line()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "command": self.command,
            "user": self.user,
            "data": self.data,
        }

    def to_json(self) -> str:
        """Serialize modification to JSON string."""
        return json.dumps(self.to_dict(), indent=2)


@dataclass(frozen=True)
class Change:
    """One record of an entry's audit trail."""

    time: int
    user: str
    kind: str

    @classmethod
    def from_modification(cls, modification: Modification, kind: str) -> "Change":
        return cls(time=modification.time, user=modification.user, kind=kind)

    @property
    def timestamp(self) -> datetime:
        return datetime.fromtimestamp(self.time / 1000, tz=timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {"time": self.time, "user": self.user, "kind": self.kind}


@dataclass
class Entry:
    """A task, note or rule inside a list, addressed by a stable id."""

    id: int
    type: str
    title: str
    description: Optional[str] = None
    checked: bool = False
    changes: List[Change] = field(default_factory=list)
    created_by: Optional[Modification] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_modification(cls, entry_id: int, entry_type: str, title: str,
                          modification: Modification) -> "Entry":
        """Build an entry for a CREATE record, seeding its change history."""
        entry = cls(id=entry_id, type=entry_type, title=title, created_by=modification)
        entry.record(modification, CHANGE_CREATE)
        return entry

    @property
    def is_checkable(self) -> bool:
        return self.type == ENTRY_CHECK

    @property
    def description_text(self) -> Optional[str]:
        """Description with escaped newlines expanded."""
        if self.description is None:
            return None
        return self.description.replace(ESCAPED_NEWLINE, "\n")

    def record(self, modification: Modification, kind: str) -> Change:
        change = Change.from_modification(modification, kind)
        self.changes.append(change)
        return change

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "checked": self.checked,
            "changes": [change.to_dict() for change in self.changes],
        }

    def to_json(self) -> str:
        """Serialize entry to JSON string."""
        return json.dumps(self.to_dict(), indent=2)
