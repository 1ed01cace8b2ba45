"""BotApiClient -- service layer over the Telegram Bot API endpoints SimpleBot uses.

Methods accept plain values or Pydantic models and return the validated
``result`` of each call.  HTTP calls use the ``requests`` library.

Failures are never swallowed here: a platform rejection raises
:class:`~sdk.exceptions.APIException`, a transport failure raises
:class:`requests.RequestException`.  Catching and logging is the job of the
bot layer.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Union

import requests
from pydantic import BaseModel

from sdk.exceptions import APIException
from sdk.models import (
    BotCommand,
    Chat,
    InlineKeyboardMarkup,
    LinkPreviewOptions,
    Message,
    ReplyParameters,
    Update,
    User,
)

# A photo is either a file_id / URL known to Telegram or raw content to upload.
PhotoInput = Union[str, bytes, Any]


def _dump(value: Any) -> Any:
    """Convert Pydantic models (and lists of them) to JSON-ready structures."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    if isinstance(value, list):
        return [_dump(item) for item in value]
    return value


class BotApiClient:
    """Client-side service layer for the Telegram Bot API.

    Each public method corresponds to one Bot API endpoint.  Responses are
    validated with the models from :mod:`sdk.models`.
    """

    _DEFAULT_TIMEOUT: int = 10

    def __init__(self, base_url: str, timeout: int = _DEFAULT_TIMEOUT) -> None:
        """Create a new client bound to *base_url*.

        Args:
            base_url: Full Bot API base URL (e.g. ``https://api.telegram.org/bot<token>``).
            timeout: Read timeout in seconds for every request.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def timeout(self) -> int:
        """Read timeout in seconds; long polling raises it above the poll duration."""
        return self._timeout

    @timeout.setter
    def timeout(self, value: int) -> None:
        self._timeout = value

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    def _post(
        self,
        endpoint: str,
        payload: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send a POST request and return the parsed JSON body.

        With *files* the request is sent as multipart form data; nested
        fields are JSON-encoded as the Bot API expects.

        Raises:
            APIException: If the status code is not 2xx or the body says ``ok: false``.
            requests.RequestException: On transport-level failures.
        """
        url = f"{self._base_url}/{endpoint.lstrip('/')}"
        payload = {key: _dump(value) for key, value in (payload or {}).items()}
        if files:
            form = {
                key: json.dumps(value) if isinstance(value, (dict, list)) else value
                for key, value in payload.items()
            }
            response = requests.post(url, data=form, files=files, timeout=self._timeout)
        else:
            response = requests.post(url, json=payload, timeout=self._timeout)
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not response.ok or body.get("ok") is False:
            raise APIException(response.status_code, body)
        return body

    def _call(self, endpoint: str, payload: Optional[Dict[str, Any]] = None, files: Optional[Dict[str, Any]] = None) -> Any:
        """Like :meth:`_post` but return only the ``result`` field."""
        return self._post(endpoint, payload, files).get("result")

    @staticmethod
    def _message_or_true(result: Any) -> Union[Message, bool]:
        # Edits of inline messages return True instead of the edited Message.
        if isinstance(result, dict):
            return Message.model_validate(result)
        return bool(result)

    # ------------------------------------------------------------------
    #  Endpoints
    # ------------------------------------------------------------------

    def get_updates(self, offset: Optional[int] = None, limit: Optional[int] = 100, timeout: Optional[int] = 0, allowed_updates: Optional[List[str]] = None) -> List[Update]:
        """Receive incoming updates using long polling.

        A negative *offset* returns updates from the end of the queue and
        forgets all earlier ones.
        """
        payload: Dict[str, Any] = {}
        if offset is not None:
            payload["offset"] = offset
        if limit is not None:
            payload["limit"] = limit
        if timeout is not None:
            payload["timeout"] = timeout
        if allowed_updates is not None:
            payload["allowed_updates"] = allowed_updates
        result = self._call("getUpdates", payload) or []
        return [Update.model_validate(item) for item in result]

    def get_me(self) -> User:
        """Return basic information about the bot."""
        return User.model_validate(self._call("getMe"))

    def get_chat(self, chat_id: Union[int, str]) -> Chat:
        """Return up-to-date information about a chat."""
        return Chat.model_validate(self._call("getChat", {"chat_id": chat_id}))

    def send_message(self, chat_id: Union[int, str], text: str, message_thread_id: Optional[int] = None, parse_mode: Optional[str] = None, link_preview_options: Optional[LinkPreviewOptions] = None, disable_notification: Optional[bool] = None, reply_parameters: Optional[ReplyParameters] = None, reply_markup: Optional[InlineKeyboardMarkup] = None) -> Message:
        """Send a text message. On success, the sent Message is returned."""
        payload: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if message_thread_id is not None:
            payload["message_thread_id"] = message_thread_id
        if parse_mode is not None:
            payload["parse_mode"] = parse_mode
        if link_preview_options is not None:
            payload["link_preview_options"] = link_preview_options
        if disable_notification is not None:
            payload["disable_notification"] = disable_notification
        if reply_parameters is not None:
            payload["reply_parameters"] = reply_parameters
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        return Message.model_validate(self._call("sendMessage", payload))

    def send_photo(self, chat_id: Union[int, str], photo: PhotoInput, caption: Optional[str] = None, message_thread_id: Optional[int] = None, parse_mode: Optional[str] = None, reply_parameters: Optional[ReplyParameters] = None, reply_markup: Optional[InlineKeyboardMarkup] = None) -> Message:
        """Send a photo by file_id, URL, raw bytes or an open binary file."""
        payload: Dict[str, Any] = {"chat_id": chat_id}
        files: Optional[Dict[str, Any]] = None
        if isinstance(photo, str):
            payload["photo"] = photo
        else:
            files = {"photo": photo}
        if caption:
            payload["caption"] = caption
        if message_thread_id is not None:
            payload["message_thread_id"] = message_thread_id
        if parse_mode is not None:
            payload["parse_mode"] = parse_mode
        if reply_parameters is not None:
            payload["reply_parameters"] = reply_parameters
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        return Message.model_validate(self._call("sendPhoto", payload, files))

    def edit_message_text(self, text: str, chat_id: Optional[Union[int, str]] = None, message_id: Optional[int] = None, inline_message_id: Optional[str] = None, parse_mode: Optional[str] = None, link_preview_options: Optional[LinkPreviewOptions] = None, reply_markup: Optional[InlineKeyboardMarkup] = None) -> Union[Message, bool]:
        """Edit the text of a message."""
        payload: Dict[str, Any] = {"text": text}
        if chat_id is not None:
            payload["chat_id"] = chat_id
        if message_id is not None:
            payload["message_id"] = message_id
        if inline_message_id is not None:
            payload["inline_message_id"] = inline_message_id
        if parse_mode is not None:
            payload["parse_mode"] = parse_mode
        if link_preview_options is not None:
            payload["link_preview_options"] = link_preview_options
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        return self._message_or_true(self._call("editMessageText", payload))

    def edit_message_reply_markup(self, chat_id: Optional[Union[int, str]] = None, message_id: Optional[int] = None, inline_message_id: Optional[str] = None, reply_markup: Optional[InlineKeyboardMarkup] = None) -> Union[Message, bool]:
        """Edit only the inline keyboard of a message; no markup removes it."""
        payload: Dict[str, Any] = {}
        if chat_id is not None:
            payload["chat_id"] = chat_id
        if message_id is not None:
            payload["message_id"] = message_id
        if inline_message_id is not None:
            payload["inline_message_id"] = inline_message_id
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        return self._message_or_true(self._call("editMessageReplyMarkup", payload))

    def delete_message(self, chat_id: Union[int, str], message_id: int) -> bool:
        """Delete a message, including service messages."""
        return bool(self._call("deleteMessage", {"chat_id": chat_id, "message_id": message_id}))

    def answer_callback_query(self, callback_query_id: str, text: Optional[str] = None, show_alert: Optional[bool] = None) -> bool:
        """Acknowledge a callback query so the client stops showing a spinner."""
        payload: Dict[str, Any] = {"callback_query_id": callback_query_id}
        if text:
            payload["text"] = text
        if show_alert is not None:
            payload["show_alert"] = show_alert
        return bool(self._call("answerCallbackQuery", payload))

    def set_my_commands(self, commands: List[BotCommand]) -> bool:
        """Replace the list of the bot's commands shown in the client menu."""
        return bool(self._call("setMyCommands", {"commands": commands}))

    def get_my_commands(self) -> List[BotCommand]:
        """Return the bot's current command menu."""
        return [BotCommand.model_validate(item) for item in self._call("getMyCommands") or []]
