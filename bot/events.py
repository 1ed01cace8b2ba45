"""Update dispatcher — routes one Telegram update to the registered listeners.

Routing rules for :meth:`EventHandler.handle_update`:

- ``callback_query`` → callback-query listeners
- ``my_chat_member`` → my-chat-member listeners (the bot was added,
  promoted, kicked, ...)
- ``message`` whose text starts with ``/`` → unknown-command listeners
  (command resolution is left to the bot's command registry)
- any other ``message`` → non-command listeners

Other update kinds are skipped.  Listener exceptions propagate to the
caller; the polling loop decides what to do with them.
"""

from typing import Callable

from core.commands import COMMAND_PREFIX
from core.logger import SimpleBotLogger
from sdk.models import CallbackQuery, ChatMemberUpdated, Message, Update

logger = SimpleBotLogger.get_logger()

MessageListener = Callable[[Message], None]
CallbackQueryListener = Callable[[CallbackQuery], None]
ChatMemberListener = Callable[[ChatMemberUpdated], None]


class EventHandler:
    """Listener lists per event kind plus the routing in :meth:`handle_update`."""

    def __init__(self) -> None:
        self._unknown_command: list[MessageListener] = []
        self._non_command_message: list[MessageListener] = []
        self._callback_query: list[CallbackQueryListener] = []
        self._my_chat_member: list[ChatMemberListener] = []

    # ── registration ─────────────────────────────────────────────────────

    def on_unknown_command(self, listener: MessageListener) -> None:
        self._unknown_command.append(listener)

    def on_non_command_message(self, listener: MessageListener) -> None:
        self._non_command_message.append(listener)

    def on_callback_query(self, listener: CallbackQueryListener) -> None:
        self._callback_query.append(listener)

    def on_my_chat_member(self, listener: ChatMemberListener) -> None:
        self._my_chat_member.append(listener)

    # ── dispatch ─────────────────────────────────────────────────────────

    def handle_update(self, update: Update) -> None:
        """Deliver *update* to the listeners of its event kind."""
        update_id = update.update_id

        if update.callback_query:
            logger.debug("Dispatching callback_query", extra={"update_id": update_id})
            for listener in self._callback_query:
                listener(update.callback_query)
            return

        if update.my_chat_member:
            logger.debug("Dispatching my_chat_member", extra={"update_id": update_id})
            for listener in self._my_chat_member:
                listener(update.my_chat_member)
            return

        message = update.message
        if message is None:
            logger.debug("Update has no handled payload — skipping", extra={"update_id": update_id})
            return

        text = message.text or ""
        if text.startswith(COMMAND_PREFIX):
            listeners = self._unknown_command
        else:
            listeners = self._non_command_message

        for listener in listeners:
            listener(message)
