"""Framework-agnostic helpers — command parsing, cursor persistence, logging.

This package is framework-agnostic. It must NEVER import from ``bot/`` or ``sdk/``.
"""

from core.commands import command_length, parse_command, text_without_command
from core.cursor_store import CursorStore
from core.logger import SimpleBotLogger

__all__ = [
    "command_length",
    "parse_command",
    "text_without_command",
    "CursorStore",
    "SimpleBotLogger",
]
