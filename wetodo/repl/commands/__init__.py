"""
FILE: wetodo/repl/commands/__init__.py
PURPOSE: REPL command handler modules
"""

# Export all command handlers for easy importing
from .lists import (
    handle_use_command,
    handle_lists_command,
    handle_new_command,
    handle_show_command,
    handle_title_command,
    handle_clear_command,
    handle_fav_command,
    handle_share_command,
    handle_delete_command,
    handle_log_command,
)
from .entries import (
    handle_add_command,
    handle_check_command,
    handle_rename_command,
    handle_desc_command,
    handle_move_command,
    handle_rm_command,
    handle_history_command,
)
from .system import (
    handle_help_command,
)

__all__ = [
    "handle_use_command",
    "handle_lists_command",
    "handle_new_command",
    "handle_show_command",
    "handle_title_command",
    "handle_clear_command",
    "handle_fav_command",
    "handle_share_command",
    "handle_delete_command",
    "handle_log_command",
    "handle_add_command",
    "handle_check_command",
    "handle_rename_command",
    "handle_desc_command",
    "handle_move_command",
    "handle_rm_command",
    "handle_history_command",
    "handle_help_command",
]
