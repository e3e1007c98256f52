"""
FILE: wetodo/core/constants.py
PURPOSE: Constants used throughout the application
EXPORTS:
  - Command: Closed set of log command names
  - ID_ADDRESSED_COMMANDS: Commands whose payload starts with an entry id
  - ENTRY_TYPES / ENTRY_NOTE / ENTRY_CHECK / ENTRY_RULE: Entry kinds
  - CHANGE_*: Kinds of entry change records
  - FAVORITE_MARKER, USER_SEPARATOR, FIELD_SEPARATOR: File format markers
  - DEFAULT_USER, DEFAULT_ENTRY_TYPE, CLEAR_PAYLOAD
DEPENDENCIES:
  - enum (stdlib)
NOTES:
  - Single source of truth for command names and entry types
  - Command values are the exact tokens written to the log
"""

from enum import Enum


class Command(str, Enum):
    """Every command a list log may contain."""

    CREATE = "CREATE"
    DELETE = "DELETE"
    CHECK = "CHECK"
    RENAME = "RENAME"
    CHANGEDESC = "CHANGEDESC"
    RELOCATE = "RELOCATE"
    LISTRENAME = "LISTRENAME"
    CLEAR = "CLEAR"


# Commands whose data is "<entryId>" or "<entryId>|<field>"
ID_ADDRESSED_COMMANDS = (
    Command.DELETE.value,
    Command.CHECK.value,
    Command.RENAME.value,
    Command.CHANGEDESC.value,
    Command.RELOCATE.value,
)

# Entry types
ENTRY_NOTE = "note"
ENTRY_CHECK = "check"
ENTRY_RULE = "rule"
ENTRY_TYPES = (ENTRY_NOTE, ENTRY_CHECK, ENTRY_RULE)
DEFAULT_ENTRY_TYPE = ENTRY_CHECK

# Entry change kinds
CHANGE_CREATE = "CREATE"
CHANGE_CHECK = "CHECK"
CHANGE_UNCHECK = "UNCHECK"
CHANGE_EDIT = "EDIT"
CHANGE_RELOCATE = "RELOCATE"

# File format
FAVORITE_MARKER = "*"
USER_SEPARATOR = " "
FIELD_SEPARATOR = "|"
ESCAPED_NEWLINE = "\\n"
LIST_FILE_SUFFIX = ".list"

# The log grammar needs a non-empty payload, CLEAR carries no data of its own
CLEAR_PAYLOAD = "-"

# Default acting user (first local profile)
DEFAULT_USER = "local:0"
