"""Command registry — the command token → handler mapping owned by one bot.

Unlike a module-level registry, every :class:`~bot.simple_bot.SimpleBot`
owns its own :class:`CommandRegistry`, so two bots in one process never see
each other's commands.

Design:
- ``CommandHandler`` is the callable shape every handler has: it receives
  the :class:`~sdk.models.Message` that carried the command.
- ``CommandEntry`` keeps the handler together with the description that is
  published in the client's command menu.
- Registration is expected to happen during setup, before polling starts;
  the registry is only read while updates are dispatched.
"""

from __future__ import annotations

import dataclasses
from typing import Callable

from sdk.models import BotCommand, Message

# ── Handler type ─────────────────────────────────────────────────────────────

CommandHandler = Callable[[Message], None]


# ── Registry entry ───────────────────────────────────────────────────────────

@dataclasses.dataclass(frozen=True, slots=True)
class CommandEntry:
    """Metadata for a single registered command."""
    command: str              # bare token, e.g. "start"
    handler: CommandHandler
    description: str = ""     # empty: dispatchable but not published


# ── Registry ─────────────────────────────────────────────────────────────────

class CommandRegistry:
    """Map of command tokens to handlers.

    Usage::

        commands = CommandRegistry()

        @commands.command("ping", description="Check the bot is alive")
        def handle_ping(message: Message) -> None: ...

        commands.dispatch("ping", message)
    """

    def __init__(self) -> None:
        self._entries: dict[str, CommandEntry] = {}

    def register(self, command: str, handler: CommandHandler, description: str = "") -> None:
        """Bind *handler* to *command*, replacing any previous registration.

        Re-registering keeps the command's original position in the menu.
        """
        self._entries[command] = CommandEntry(command, handler, description or "")

    def command(self, command: str, description: str = "") -> Callable[[CommandHandler], CommandHandler]:
        """Decorator form of :meth:`register`."""
        def decorator(func: CommandHandler) -> CommandHandler:
            self.register(command, func, description)
            return func
        return decorator

    # ── lookup helpers ───────────────────────────────────────────────────

    def get(self, command: str) -> CommandEntry | None:
        """Return the entry for *command*, or ``None``."""
        return self._entries.get(command)

    def entries(self) -> dict[str, CommandEntry]:
        """Return a copy of all registered commands."""
        return dict(self._entries)

    def __contains__(self, command: object) -> bool:
        return command in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def descriptions(self) -> list[BotCommand]:
        """Return the published command menu: entries with a description."""
        return [
            BotCommand(command=entry.command, description=entry.description)
            for entry in self._entries.values()
            if entry.description
        ]

    def dispatch(self, command: str, message: Message) -> bool:
        """Invoke the handler registered for *command* with *message*.

        Returns ``True`` if a handler was found and called, ``False`` for an
        unregistered command.  Exceptions raised by the handler propagate.
        """
        entry = self._entries.get(command)
        if entry is None:
            return False
        entry.handler(message)
        return True
