"""Builders for the SDK models used across the test modules."""

from sdk.models import CallbackQuery, Chat, InlineKeyboardMarkup, Message, Update, User


def make_message(
    text: str | None,
    chat_id: int = 1000,
    message_id: int = 1,
    user_id: int = 42,
    thread_id: int | None = None,
    reply_markup: InlineKeyboardMarkup | None = None,
    chat_type: str = "private",
) -> Message:
    """Build a minimal Message model."""
    return Message(
        message_id=message_id,
        date=0,
        chat=Chat(id=chat_id, type=chat_type),
        from_field=User(id=user_id, is_bot=False, first_name=f"User{user_id}"),
        text=text,
        message_thread_id=thread_id,
        is_topic_message=True if thread_id is not None else None,
        reply_markup=reply_markup,
    )


def make_update(update_id: int, text: str | None = "hello", chat_id: int = 1000) -> Update:
    """Build an Update carrying a text message."""
    return Update(update_id=update_id, message=make_message(text, chat_id=chat_id, message_id=update_id))


def make_callback_update(update_id: int, data: str, cb_id: str = "cb1") -> Update:
    """Build an Update carrying a callback query from an inline button."""
    return Update(
        update_id=update_id,
        callback_query=CallbackQuery(
            id=cb_id,
            from_field=User(id=42, is_bot=False, first_name="User42"),
            chat_instance="test",
            message=make_message("menu", message_id=10),
            data=data,
        ),
    )
