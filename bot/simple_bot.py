"""SimpleBot — convenience façade over :class:`~sdk.client.BotApiClient`.

Adds what every small bot ends up writing by hand:

- slash-command routing through an owned :class:`~bot.registry.CommandRegistry`
- message send / edit / delete helpers that fill in reply-to, forum topic,
  parse mode and link-preview settings
- inline keyboards built from :mod:`bot.keyboard` layouts
- a long-poll entry point (:meth:`SimpleBot.long_poll`)

None of the message helpers raise on API failures: the failure is logged
(with the chat's username or title when it can be resolved) and the helper
returns ``None`` / ``False``.
"""

import threading
from typing import Callable, Optional, Union

import requests
from pydantic import ValidationError

from core.commands import parse_command, text_without_command
from core.logger import SimpleBotLogger
from sdk.client import BotApiClient, PhotoInput
from sdk.exceptions import APIException, classify_error
from sdk.models import (
    CallbackQuery,
    Chat,
    ChatMemberUpdated,
    InlineKeyboardMarkup,
    LinkPreviewOptions,
    Message,
    ReplyParameters,
)
from bot.events import EventHandler
from bot.keyboard import KeyboardLayout, to_inline_markup
from bot.poller import FastLongPoll
from bot.registry import CommandHandler, CommandRegistry

logger = SimpleBotLogger.get_logger()

# Failures of a single API call.  These are logged, never raised.
API_ERRORS = (APIException, requests.RequestException, ValidationError)

LogHandler = Callable[[str], None]

DEFAULT_API_URL = "https://api.telegram.org"


def _topic_of(message: Message) -> Optional[int]:
    """Return the forum topic *message* belongs to, if any."""
    return message.message_thread_id if message.is_topic_message else None


class SimpleBot:
    """One bot: transport, event dispatch, command registry and helpers.

    Args:
        client: Bot API transport.
        parse_mode: Parse mode used for every sent or edited text
            (``"HTML"``, ``"MarkdownV2"``, ...); ``None`` sends plain text.
        disable_web_page_preview: Suppress link previews in sent messages.
        username: The bot's username.  Fetched with ``getMe`` when omitted;
            needed to accept ``/command@username`` in group chats.
    """

    def __init__(
        self,
        client: BotApiClient,
        parse_mode: Optional[str] = None,
        disable_web_page_preview: bool = True,
        username: Optional[str] = None,
    ) -> None:
        self.client = client
        self.events = EventHandler()
        self.commands = CommandRegistry()
        self.parse_mode = parse_mode
        self.disable_web_page_preview = disable_web_page_preview
        self._log_handler: Optional[LogHandler] = None

        self.events.on_unknown_command(self._handle_command)

        self.username = username
        if self.username is None:
            try:
                self.username = self.client.get_me().username
            except API_ERRORS as exc:
                self._report("Failed to get bot identity", exc)

    @classmethod
    def from_token(cls, token: str, api_url: str = DEFAULT_API_URL, **kwargs) -> "SimpleBot":
        """Build a bot talking to ``<api_url>/bot<token>``."""
        return cls(BotApiClient(f"{api_url.rstrip('/')}/bot{token}"), **kwargs)

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def on_log(self, handler: Optional[LogHandler]) -> None:
        """Install a callback receiving every failure line as plain text."""
        self._log_handler = handler

    def log(self, message: str, **extra: object) -> None:
        """Write *message* to the project log and to the installed callback.

        Never raises: a failing callback is itself only logged.
        """
        logger.warning(message, extra=extra)
        if self._log_handler is None:
            return
        try:
            self._log_handler(message)
        except Exception as exc:
            logger.error("Log callback failed", extra={"error": str(exc)})

    def _report(self, action: str, exc: BaseException, chat: Optional[str] = None, **extra: object) -> None:
        """Log a failed operation with its error kind and chat label."""
        detail = action
        if chat is not None:
            detail += f" in chat '{chat}'"
        detail += f": {exc}"
        self.log(detail, error=str(exc), error_kind=classify_error(exc), **extra)

    def _chat_label(self, chat_id: Union[int, str], chat: Optional[Chat] = None) -> str:
        """Return the chat's username or title, falling back to its id."""
        if chat is None:
            try:
                chat = self.client.get_chat(chat_id)
            except API_ERRORS:
                return str(chat_id)
        return chat.username or chat.title or str(chat_id)

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def _link_preview(self) -> LinkPreviewOptions:
        return LinkPreviewOptions(is_disabled=self.disable_web_page_preview)

    @staticmethod
    def _reply_parameters(chat_id: Union[int, str], reply_to: Optional[int]) -> Optional[ReplyParameters]:
        if not reply_to:
            return None
        return ReplyParameters(message_id=reply_to, chat_id=chat_id)

    def send_message(
        self,
        chat_id: Union[int, str],
        text: str,
        topic: Optional[int] = None,
        reply_to: Optional[int] = None,
        reply_markup: Optional[InlineKeyboardMarkup] = None,
    ) -> Optional[Message]:
        """Send *text* to *chat_id*, optionally into a forum *topic* and as a reply.

        Returns the sent message, or ``None`` when nothing was sent.
        """
        if not text:
            self.log("Can't send empty messages", chat_id=chat_id)
            return None

        try:
            return self.client.send_message(
                chat_id,
                text,
                message_thread_id=topic or None,
                parse_mode=self.parse_mode,
                link_preview_options=self._link_preview(),
                reply_parameters=self._reply_parameters(chat_id, reply_to),
                reply_markup=reply_markup,
            )
        except API_ERRORS as exc:
            self._report("Failed to send message", exc, chat=self._chat_label(chat_id), chat_id=chat_id)
        return None

    def send_keyboard(
        self,
        chat_id: Union[int, str],
        text: str,
        keyboard: KeyboardLayout,
        topic: Optional[int] = None,
        reply_to: Optional[int] = None,
    ) -> Optional[Message]:
        """Send *text* with an inline *keyboard* attached."""
        return self.send_message(chat_id, text, topic, reply_to, to_inline_markup(keyboard))

    def respond(
        self,
        source: Optional[Message],
        text: str,
        reply: bool = False,
        keyboard: Optional[KeyboardLayout] = None,
    ) -> Optional[Message]:
        """Send *text* to the chat (and topic) *source* came from.

        With ``reply=True`` the new message quotes *source*.
        """
        if source is None:
            self.log("Can't respond to a missing message")
            return None
        return self.send_message(
            source.chat.id,
            text,
            topic=_topic_of(source),
            reply_to=source.message_id if reply else None,
            reply_markup=to_inline_markup(keyboard),
        )

    def reply(self, source: Optional[Message], text: str, keyboard: Optional[KeyboardLayout] = None) -> Optional[Message]:
        """Answer *source* with a quoting reply."""
        return self.respond(source, text, reply=True, keyboard=keyboard)

    def send_photo(
        self,
        chat_id: Union[int, str],
        photo: PhotoInput,
        caption: str = "",
        topic: Optional[int] = None,
        reply_to: Optional[int] = None,
    ) -> Optional[Message]:
        """Send *photo* (file_id, URL, bytes or binary file) with an optional caption."""
        try:
            return self.client.send_photo(
                chat_id,
                photo,
                caption=caption or None,
                message_thread_id=topic or None,
                parse_mode=self.parse_mode,
                reply_parameters=self._reply_parameters(chat_id, reply_to),
            )
        except API_ERRORS as exc:
            self._report("Failed to send photo", exc, chat=self._chat_label(chat_id), chat_id=chat_id)
        return None

    def respond_photo(self, source: Optional[Message], photo: PhotoInput, caption: str = "", reply: bool = False) -> Optional[Message]:
        """Send *photo* to the chat (and topic) *source* came from."""
        if source is None:
            self.log("Can't respond to a missing message")
            return None
        return self.send_photo(
            source.chat.id,
            photo,
            caption,
            topic=_topic_of(source),
            reply_to=source.message_id if reply else None,
        )

    def reply_photo(self, source: Optional[Message], photo: PhotoInput, caption: str = "") -> Optional[Message]:
        """Answer *source* with a photo quoting it."""
        return self.respond_photo(source, photo, caption, reply=True)

    # ------------------------------------------------------------------
    # Editing and deleting
    # ------------------------------------------------------------------

    def edit_message(
        self,
        message: Optional[Message],
        text: str = "",
        keyboard: Optional[KeyboardLayout] = None,
    ) -> Optional[Message]:
        """Change the text and/or inline keyboard of *message*.

        The text is only edited when *text* is non-empty and differs from the
        current one; otherwise just the keyboard is replaced.  An empty or
        missing *keyboard* removes the current one.
        """
        return self._edit(message, text, to_inline_markup(keyboard))

    def _edit(self, message: Optional[Message], text: str, markup: Optional[InlineKeyboardMarkup]) -> Optional[Message]:
        if message is None:
            self.log("Can't edit a missing message")
            return None

        chat = message.chat
        try:
            if text and message.text != text:
                result = self.client.edit_message_text(
                    text,
                    chat_id=chat.id,
                    message_id=message.message_id,
                    parse_mode=self.parse_mode,
                    link_preview_options=self._link_preview(),
                    reply_markup=markup,
                )
            else:
                result = self.client.edit_message_reply_markup(
                    chat_id=chat.id,
                    message_id=message.message_id,
                    reply_markup=markup,
                )
        except API_ERRORS as exc:
            self._report(
                "Failed to edit message", exc,
                chat=self._chat_label(chat.id, chat), chat_id=chat.id, message_id=message.message_id,
            )
            return None
        return result if isinstance(result, Message) else None

    def remove_keyboard(self, message: Optional[Message]) -> Optional[Message]:
        """Strip the inline keyboard from *message*, keeping its text."""
        if message is None or message.reply_markup is None:
            return None
        return self._edit(message, message.text or "", None)

    def ensure_message(
        self,
        existing: Optional[Message],
        chat_id: Union[int, str],
        text: str,
        topic: Optional[int] = None,
        keyboard: Optional[KeyboardLayout] = None,
    ) -> Optional[Message]:
        """Edit *existing* into *text*, or send a new message when there is none.

        Useful for "status" messages that are updated in place.
        """
        markup = to_inline_markup(keyboard)
        if existing is None:
            return self.send_message(chat_id, text, topic, reply_markup=markup)
        return self._edit(existing, text, markup)

    def ensure_keyboard(
        self,
        existing: Optional[Message],
        chat_id: Union[int, str],
        text: str,
        keyboard: KeyboardLayout,
        topic: Optional[int] = None,
    ) -> Optional[Message]:
        """Like :meth:`ensure_message` with a mandatory keyboard."""
        return self.ensure_message(existing, chat_id, text, topic, keyboard)

    def delete_message(self, message: Optional[Message]) -> bool:
        """Delete *message*.  Returns ``True`` when Telegram confirmed it."""
        if message is None:
            return False

        chat = message.chat
        try:
            return self.client.delete_message(chat.id, message.message_id)
        except API_ERRORS as exc:
            self._report(
                f"Failed to delete message {message.message_id}", exc,
                chat=self._chat_label(chat.id, chat), chat_id=chat.id, message_id=message.message_id,
            )
        return False

    def answer_callback_query(self, callback_query_id: str, text: str = "") -> bool:
        """Acknowledge a button press, optionally showing *text* as a toast."""
        try:
            return self.client.answer_callback_query(callback_query_id, text or None)
        except API_ERRORS as exc:
            self._report(f"Failed to answer callback query {callback_query_id}", exc, callback_query_id=callback_query_id)
        return False

    # ------------------------------------------------------------------
    # Commands and events
    # ------------------------------------------------------------------

    def on_command(self, command: str, handler: CommandHandler, description: str = "") -> None:
        """Route ``/command`` to *handler*.

        Commands with a *description* are published by
        :meth:`update_command_descriptions`; the others work but stay hidden.
        """
        self.commands.register(command, handler, description)

    def command(self, command: str, description: str = "") -> Callable[[CommandHandler], CommandHandler]:
        """Decorator form of :meth:`on_command`."""
        return self.commands.command(command, description)

    def update_command_descriptions(self) -> bool:
        """Publish the described commands as the bot's command menu."""
        try:
            return self.client.set_my_commands(self.commands.descriptions())
        except API_ERRORS as exc:
            self._report("Failed to set bot commands", exc)
        return False

    def on_non_command_message(self, handler: Callable[[Message], None]) -> None:
        self.events.on_non_command_message(handler)

    def on_callback_query(self, handler: Callable[[CallbackQuery], None]) -> None:
        self.events.on_callback_query(handler)

    def on_my_chat_member(self, handler: Callable[[ChatMemberUpdated], None]) -> None:
        self.events.on_my_chat_member(handler)

    def parse_command(self, message: Message) -> Optional[str]:
        """Return the command *message* invokes on this bot, or ``None``."""
        return parse_command(message.text, self.username)

    @staticmethod
    def text_without_command(message: Message) -> str:
        """Return the text following the command, e.g. the arguments."""
        return text_without_command(message.text)

    def _handle_command(self, message: Message) -> None:
        command = self.parse_command(message)
        if not command:
            return

        try:
            self.commands.dispatch(command, message)
        except Exception as exc:
            self.log(
                f"Caught exception on '{command}' command: {exc}",
                command=command, chat_id=message.chat.id, error=str(exc), error_kind=classify_error(exc),
            )

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def clear_old_updates(self) -> None:
        """Confirm every pending update so none of them is delivered later."""
        try:
            self.client.get_updates(offset=-1, limit=1, timeout=0)
        except API_ERRORS as exc:
            self._report("Failed to clear old updates", exc)

    def long_poll(self, stop_event: Optional[threading.Event] = None, **poll_options) -> None:
        """Block, fetching and dispatching updates until *stop_event* is set.

        *poll_options* are passed to :class:`~bot.poller.FastLongPoll`.
        """
        FastLongPoll(self.client, self.events, **poll_options).run(stop_event)


class SimplePollBot(SimpleBot):
    """A :class:`SimpleBot` that owns its :class:`FastLongPoll`.

    Lets the caller drive polling one iteration at a time, e.g. interleaved
    with other periodic work on the same thread.
    """

    def __init__(self, client: BotApiClient, limit: int = 100, timeout: int = 10, **kwargs) -> None:
        poll_options = {
            key: kwargs.pop(key)
            for key in ("allowed_updates", "start_mode", "cursor_store", "retry_delay", "max_retry_delay")
            if key in kwargs
        }
        super().__init__(client, **kwargs)
        self.poller = FastLongPoll(self.client, self.events, limit=limit, timeout=timeout, **poll_options)

    def long_poll_iteration(self) -> int:
        """Run one fetch-and-dispatch cycle.  Failures are logged, not raised.

        Returns the number of updates fetched (``0`` after a failure).
        """
        try:
            return self.poller.poll_once()
        except Exception as exc:
            self._report("Long poll iteration failed", exc, next_update_id=self.poller.next_update_id)
        return 0

    def long_poll(self, stop_event: Optional[threading.Event] = None) -> None:  # type: ignore[override]
        """Run the owned poller until *stop_event* is set."""
        self.poller.run(stop_event)
