"""Telegram bot application layer — façade, command routing, keyboards, polling.

This package may import from ``core/`` and ``sdk/`` only.
"""

from bot.events import EventHandler
from bot.keyboard import KeyboardButton, KeyboardLayout, flat, grid, row, to_inline_markup
from bot.poller import FastLongPoll
from bot.registry import CommandEntry, CommandRegistry
from bot.simple_bot import SimpleBot, SimplePollBot

__all__ = [
    # Façade
    "SimpleBot",
    "SimplePollBot",
    # Dispatch
    "EventHandler",
    "CommandEntry",
    "CommandRegistry",
    "FastLongPoll",
    # Keyboards
    "KeyboardButton",
    "KeyboardLayout",
    "flat",
    "grid",
    "row",
    "to_inline_markup",
]
