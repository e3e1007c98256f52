"""
FILE: wetodo/repl/__init__.py
PURPOSE: REPL package for interactive list editing
EXPORTS:
  - main() (from repl.main)
DEPENDENCIES:
  - prompt_toolkit (REPL interface)
  - rich (formatted output)
  - wetodo.core.service (business logic)
NOTES:
  - Entry point for interactive mode
  - Provides autocomplete and command history
"""

from .main import main

__all__ = ["main"]
