"""Demo bot wiring SimpleBot to the settings in :mod:`config`.

Commands:

- ``/start`` — greeting
- ``/help`` — list of published commands
- ``/echo <text>`` — repeats the text after the command
- ``/menu`` — inline keyboard; pressing a button edits the menu message
- ``/ping`` — unpublished, still answers
"""

import signal
import threading

from config import (
    ALLOWED_UPDATES,
    BASE_URL,
    BOT_TOKEN,
    CURSOR_PATH,
    DISABLE_WEB_PAGE_PREVIEW,
    MAX_RETRY_DELAY,
    PARSE_MODE,
    POLL_LIMIT,
    POLL_TIMEOUT,
    RETRY_DELAY,
    START_MODE,
)
from core.cursor_store import CursorStore
from core.logger import SimpleBotLogger
from sdk.client import BotApiClient
from sdk.models import CallbackQuery, ChatMemberUpdated, Message
from bot.keyboard import grid
from bot.simple_bot import SimpleBot

logger = SimpleBotLogger.get_logger()

MENU_ITEMS = ["Coffee", "Tea", "Juice", "Water", "Lemonade"]
MENU_KEY_PREFIX = "menu:"


def build_bot(client: BotApiClient) -> SimpleBot:
    """Create the demo bot and register its commands and listeners."""
    bot = SimpleBot(client, parse_mode=PARSE_MODE, disable_web_page_preview=DISABLE_WEB_PAGE_PREVIEW)

    @bot.command("start", description="Say hello")
    def handle_start(message: Message) -> None:
        name = message.from_field.first_name if message.from_field else "there"
        bot.respond(message, f"Hello, {name}! Send /help to see what I can do.")

    @bot.command("help", description="List available commands")
    def handle_help(message: Message) -> None:
        lines = [f"/{entry.command} — {entry.description}" for entry in bot.commands.descriptions()]
        bot.respond(message, "\n".join(lines) or "No commands available.")

    @bot.command("echo", description="Repeat the text after the command")
    def handle_echo(message: Message) -> None:
        text = bot.text_without_command(message).strip()
        bot.reply(message, text or "Usage: /echo <text>")

    @bot.command("menu", description="Pick a drink")
    def handle_menu(message: Message) -> None:
        bot.respond(message, "What would you like?", keyboard=grid(MENU_ITEMS, 2, lambda text: MENU_KEY_PREFIX + text))

    bot.on_command("ping", lambda message: bot.respond(message, "pong"))

    def handle_callback(query: CallbackQuery) -> None:
        data = query.data or ""
        if not data.startswith(MENU_KEY_PREFIX):
            bot.answer_callback_query(query.id)
            return
        choice = data[len(MENU_KEY_PREFIX):]
        bot.answer_callback_query(query.id, f"You picked {choice}")
        bot.edit_message(query.message, f"Enjoy your {choice}!")

    def handle_membership(update: ChatMemberUpdated) -> None:
        logger.info(
            "Bot membership changed",
            extra={"chat_id": update.chat.id, "old_status": update.old_chat_member.status, "new_status": update.new_chat_member.status},
        )

    def handle_text(message: Message) -> None:
        logger.debug("Non-command message", extra={"chat_id": message.chat.id, "text_preview": (message.text or "")[:80]})

    bot.on_callback_query(handle_callback)
    bot.on_my_chat_member(handle_membership)
    bot.on_non_command_message(handle_text)
    return bot


def main() -> None:
    if not BOT_TOKEN:
        raise EnvironmentError("BOT_TOKEN environment variable is not set or is empty.")

    bot = build_bot(BotApiClient(BASE_URL))
    bot.update_command_descriptions()

    stop_event = threading.Event()
    signal.signal(signal.SIGTERM, lambda signum, frame: stop_event.set())

    logger.info("SimpleBot is running. Polling for updates...", extra={"username": bot.username})
    try:
        bot.long_poll(
            stop_event,
            limit=POLL_LIMIT,
            timeout=POLL_TIMEOUT,
            allowed_updates=ALLOWED_UPDATES,
            start_mode=START_MODE,
            cursor_store=CursorStore(CURSOR_PATH),
            retry_delay=RETRY_DELAY,
            max_retry_delay=MAX_RETRY_DELAY,
        )
    except KeyboardInterrupt:
        logger.info("Interrupted — shutting down")


if __name__ == "__main__":
    main()
