"""
FILE: wetodo/repl/completer.py
PURPOSE: Autocomplete logic for REPL commands and arguments
EXPORTS:
  - WeToDoCompleter (Completer for command/arg completion)
  - create_completer(active_list) -> WeToDoCompleter
DEPENDENCIES:
  - prompt_toolkit.completion (Completer, Completion)
  - wetodo.core.service (for dynamic list title completion)
NOTES:
  - Suggests command names when at start of line
  - Suggests list titles after "use" and "show"
  - Suggests entry IDs of the active list for id commands
  - Suggests entry types after --type
  - Suggests flags after commands (--type, --off, --yes, --raw)
  - Case-insensitive matching
"""

import logging
from typing import Callable, Iterable, Optional

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from ..core.constants import ENTRY_TYPES
from ..core.exceptions import WeToDoError
from ..core.todolist import TodoList


logger = logging.getLogger(__name__)


class WeToDoCompleter(Completer):
    """
    Custom completer for the WeToDo REPL.

    Provides context-aware autocomplete:
    - Command names at start of input
    - List titles after list-selecting commands
    - Entry IDs (with titles) after entry commands
    - Entry types after --type
    """

    COMMANDS = [
        "use", "lists", "new", "show", "add", "check", "rename", "desc", "move",
        "rm", "history", "title", "clear", "fav", "share", "delete", "log",
        "help", "exit", "quit",
    ]

    # Commands whose first argument is a list title
    LIST_COMMANDS = {"use", "show"}

    # Commands whose first argument is an entry ID of the active list
    ENTRY_COMMANDS = {"check", "rename", "desc", "move", "rm", "history"}

    COMMAND_FLAGS = {
        "add": ["--type"],
        "fav": ["--off"],
        "clear": ["--yes"],
        "delete": ["--yes"],
        "rm": ["--yes"],
        "log": ["--raw"],
    }

    def __init__(self, active_list: Optional[Callable[[], Optional[TodoList]]] = None):
        """
        Args:
            active_list: Returns the REPL's active list, for entry ID suggestions
        """
        self._active_list = active_list or (lambda: None)

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        """
        Generate completions based on current input.

        Logic:
            1. If at start or only whitespace -> suggest commands
            2. If after --type -> suggest entry types
            3. If first arg of a list command -> suggest list titles
            4. If first arg of an entry command -> suggest entry IDs
            5. If typing a flag or after a space -> suggest flags
        """
        text_before_cursor = document.text_before_cursor
        words = text_before_cursor.split()
        at_new_word = text_before_cursor.endswith(" ")

        if not words or (not at_new_word and len(words) == 1):
            word = words[0] if words else ""
            yield from self._complete_commands(word)
            return

        command = words[0].lower()
        word = "" if at_new_word else words[-1]

        # Value of --type, either right after it or while typing it
        if (at_new_word and words[-1] == "--type") or (
            not at_new_word and len(words) >= 2 and words[-2] == "--type"
        ):
            yield from self._complete_entry_types(word)
            return

        first_arg = (at_new_word and len(words) == 1) or (not at_new_word and len(words) == 2)

        if command in self.LIST_COMMANDS and first_arg and not word.startswith("--"):
            yield from self._complete_list_titles(word)
            return

        if command in self.ENTRY_COMMANDS and first_arg and not word.startswith("--"):
            yield from self._complete_entry_ids(word)
            return

        if not word.startswith("--") and not at_new_word:
            return

        yield from self._complete_flags(command, word)

    def _complete_commands(self, word: str) -> Iterable[Completion]:
        word_lower = word.lower()
        for command in self.COMMANDS:
            if command.startswith(word_lower):
                yield Completion(
                    command,
                    start_position=-len(word),
                    display=command,
                    display_meta=self._get_command_description(command),
                )

    def _complete_flags(self, command: str, word: str) -> Iterable[Completion]:
        word_lower = word.lower()
        for flag in self.COMMAND_FLAGS.get(command, []):
            if flag.startswith(word_lower):
                yield Completion(flag, start_position=-len(word), display=flag)

    def _complete_entry_types(self, word: str) -> Iterable[Completion]:
        word_lower = word.lower()
        for entry_type in ENTRY_TYPES:
            if entry_type.startswith(word_lower):
                yield Completion(entry_type, start_position=-len(word), display=entry_type)

    def _complete_list_titles(self, word: str) -> Iterable[Completion]:
        """
        Complete list titles, quoting titles that contain spaces.

        Handles partial matches even when the user is typing inside quotes.
        """
        # Import here to avoid loading storage for plain command completion
        from ..core import service

        word_stripped = word.strip('"').strip("'")
        word_lower = word_stripped.lower()

        try:
            lists = service.list_lists()
        except WeToDoError as e:
            logger.debug("List completion unavailable: %s", e)
            return

        for todo_list in lists:
            if todo_list.title.lower().startswith(word_lower):
                text = f'"{todo_list.title}"' if " " in todo_list.title else todo_list.title
                yield Completion(
                    text,
                    start_position=-len(word),
                    display=text,
                    display_meta=f"{todo_list.entry_count} entries",
                )

    def _complete_entry_ids(self, word: str) -> Iterable[Completion]:
        """Complete entry IDs of the active list with their titles as labels."""
        todo_list = self._active_list()
        if todo_list is None:
            return

        for entry in todo_list.entries:
            id_str = str(entry.id)
            if id_str.startswith(word):
                title = entry.title if len(entry.title) <= 40 else entry.title[:37] + "..."
                yield Completion(
                    id_str,
                    start_position=-len(word),
                    display=id_str,
                    display_meta=title,
                )

    @staticmethod
    def _get_command_description(command: str) -> str:
        """Get description for a command (shown in autocomplete menu)."""
        descriptions = {
            "use": "Select the active list",
            "lists": "Show all lists",
            "new": "Create a list and use it",
            "show": "Show entries",
            "add": "Add an entry",
            "check": "Toggle check entries",
            "rename": "Rename an entry",
            "desc": "Set an entry's description",
            "move": "Move an entry",
            "rm": "Delete entries",
            "history": "Show an entry's changes",
            "title": "Rename the active list",
            "clear": "Remove all entries and history",
            "fav": "Mark the active list as favorite",
            "share": "Add a user to the active list",
            "delete": "Delete the active list",
            "log": "Show the modification log",
            "help": "Show available commands",
            "exit": "Exit REPL",
            "quit": "Exit REPL",
        }
        return descriptions.get(command, "")


def create_completer(active_list: Optional[Callable[[], Optional[TodoList]]] = None) -> WeToDoCompleter:
    """
    Create and return a WeToDoCompleter instance.

    Usage:
        completer = create_completer(lambda: repl_context.active_list)
        session = PromptSession(completer=completer)
    """
    return WeToDoCompleter(active_list)
