"""
FILE: wetodo/core/exceptions.py
PURPOSE: Custom exception classes for error handling
EXPORTS:
  - WeToDoError (base exception)
  - MalformedModificationError
  - UnknownCommandError
  - MalformedListError
  - EntryNotFoundError
  - ModificationNotFoundError
  - ListNotFoundError
  - InvalidInputError
  - StorageError
  - UserNotFoundError
  - UnknownProviderError
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - All exceptions inherit from WeToDoError for easy catching
  - Exceptions include context (ids, lines, codes) for helpful error messages
  - Core raises these, CLI and REPL catch and display
"""

from typing import Optional


class WeToDoError(Exception):
    """Base exception for all WeToDo errors."""
    pass


class MalformedModificationError(WeToDoError):
    """A log line or modification payload doesn't match its grammar."""

    def __init__(self, message: str, line: Optional[str] = None):
        self.line = line
        super().__init__(message)


class UnknownCommandError(MalformedModificationError):
    """Command name isn't in the registry."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Unknown command: {command}")


class MalformedListError(WeToDoError):
    """Persisted list text can't be read at all."""

    def __init__(self, uuid: str, message: str):
        self.uuid = uuid
        super().__init__(f"List {uuid}: {message}")


class EntryNotFoundError(WeToDoError):
    """Entry with given id isn't live in the list."""

    def __init__(self, entry_id: int):
        self.entry_id = entry_id
        super().__init__(f"Entry {entry_id} not found")


class ModificationNotFoundError(WeToDoError):
    """No modification at the given log index."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"No modification at index {index}")


class ListNotFoundError(WeToDoError):
    """List with given uuid (or reference) doesn't exist."""

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"List {reference} not found")


class InvalidInputError(WeToDoError):
    """Input validation failed."""

    def __init__(self, message: str):
        super().__init__(message)


class StorageError(WeToDoError):
    """Reading or writing a persisted list failed."""

    def __init__(self, code: str, message: str):
        self.code = code
        super().__init__(f"{code}: {message}")


class UserNotFoundError(WeToDoError):
    """Provider knows nothing about the given user."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Unknown user: {user_id}")


class UnknownProviderError(WeToDoError):
    """No resolver registered for a user id's provider."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"Unknown provider: {provider}")
