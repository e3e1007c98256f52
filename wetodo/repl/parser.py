"""
FILE: wetodo/repl/parser.py
PURPOSE: Parse user input into commands and arguments for REPL
EXPORTS:
  - ParseResult (dataclass for parsed commands)
  - parse_command(input_str) -> ParseResult
DEPENDENCIES:
  - shlex (for shell-like parsing with quotes)
  - dataclasses (for ParseResult)
NOTES:
  - Handles quoted strings: add "entry with spaces"
  - Supports flags: --type note, --off, --yes
  - Preserves argument order for positional args
  - Case-insensitive command names
"""

import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Optional


# Flags that never take a value, so the next token stays positional
BOOLEAN_FLAGS = {"off", "yes", "raw", "json"}


@dataclass
class ParseResult:
    """
    Result of parsing a REPL command.

    Attributes:
        command: The command name (e.g., "add", "check", "use")
        args: Positional arguments (e.g., ["Milk"])
        flags: Flag arguments as dict (e.g., {"type": "note", "off": True})
        raw_input: Original input string
    """
    command: str
    args: List[str] = field(default_factory=list)
    flags: Dict[str, str | bool] = field(default_factory=dict)
    raw_input: str = ""

    def text(self) -> str:
        """Positional args joined back into one string (titles, descriptions)."""
        return " ".join(self.args)

    def flag(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Value of a value flag, default when absent or given without a value."""
        value = self.flags.get(name)
        if value is None or value is True:
            return default
        return value


def parse_command(input_str: str) -> ParseResult:
    """
    Parse REPL input into command, args, and flags.

    Examples:
        >>> parse_command("add Buy milk")
        ParseResult(command="add", args=["Buy", "milk"], flags={})

        >>> parse_command('add "Entry with spaces" --type note')
        ParseResult(command="add", args=["Entry with spaces"], flags={"type": "note"})

        >>> parse_command("fav --off")
        ParseResult(command="fav", args=[], flags={"off": True})

    Args:
        input_str: Raw user input from REPL prompt

    Returns:
        ParseResult with command, args, and flags extracted

    Notes:
        - Command is always the first token (case-insensitive)
        - Flags start with -- (e.g., --type, --off)
        - Known boolean flags never consume the next token
        - Other flags take the next token as value unless it is another flag
        - Quoted strings are treated as single args
        - Empty input returns command="" with no args/flags
    """
    input_str = input_str.strip()
    if not input_str:
        return ParseResult(command="", args=[], flags={}, raw_input=input_str)

    try:
        tokens = shlex.split(input_str)
    except ValueError:
        # Unclosed quote: fall back to a plain split
        tokens = input_str.split()

    if not tokens:
        return ParseResult(command="", args=[], flags={}, raw_input=input_str)

    command = tokens[0].lower()

    args = []
    flags = {}
    i = 1

    while i < len(tokens):
        token = tokens[i]

        if token.startswith("--") and len(token) > 2:
            flag_name = token[2:].lower()

            if (
                flag_name not in BOOLEAN_FLAGS
                and i + 1 < len(tokens)
                and not tokens[i + 1].startswith("--")
            ):
                flags[flag_name] = tokens[i + 1]
                i += 2
            else:
                flags[flag_name] = True
                i += 1
        else:
            args.append(token)
            i += 1

    return ParseResult(
        command=command,
        args=args,
        flags=flags,
        raw_input=input_str
    )
