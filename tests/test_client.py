"""Tests for BotApiClient and APIException."""

import json
import sys
import os
from unittest.mock import patch, MagicMock

import pytest
import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sdk.client import BotApiClient
from sdk.exceptions import APIException, classify_error
from sdk.models import BotCommand, InlineKeyboardButton, InlineKeyboardMarkup, Message, ReplyParameters, Update


def _response(body: dict, ok: bool = True, status_code: int = 200) -> MagicMock:
    mock_resp = MagicMock()
    mock_resp.ok = ok
    mock_resp.status_code = status_code
    mock_resp.json.return_value = body
    return mock_resp


MESSAGE = {"message_id": 7, "date": 0, "chat": {"id": 42, "type": "private"}, "text": "hello"}


# ── APIException ─────────────────────────────────────────────────────────────


class TestAPIException:
    """Validate the exception class."""

    def test_attributes(self) -> None:
        exc = APIException(403, {"description": "Forbidden"})
        assert exc.status_code == 403
        assert exc.response_body == {"description": "Forbidden"}
        assert exc.error_code == 403
        assert "403" in str(exc)
        assert "Forbidden" in str(exc)

    def test_default_body(self) -> None:
        exc = APIException(500)
        assert exc.response_body == {}
        assert "Unknown error" in str(exc)

    def test_retry_after(self) -> None:
        exc = APIException(429, {"error_code": 429, "description": "Too Many Requests", "parameters": {"retry_after": 12}})
        assert exc.retry_after == 12

    def test_classify_error(self) -> None:
        assert classify_error(APIException(400)) == "platform"
        assert classify_error(requests.ConnectionError("x")) == "transport"
        assert classify_error(KeyError("x")) == "internal"


# ── BotApiClient construction ────────────────────────────────────────────────


class TestClientInit:
    """Validate client initialisation."""

    def test_base_url_strip(self) -> None:
        c = BotApiClient("https://api.example.com/bot123/")
        assert c._base_url == "https://api.example.com/bot123"

    def test_default_timeout(self) -> None:
        c = BotApiClient("https://api.example.com")
        assert c.timeout == 10

    def test_timeout_settable(self) -> None:
        c = BotApiClient("https://api.example.com")
        c.timeout = 45
        assert c._timeout == 45


# ── _post helper ─────────────────────────────────────────────────────────────


class TestPostHelper:
    """Validate the internal _post method."""

    @patch("sdk.client.requests.post")
    def test_success(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": {}})

        c = BotApiClient("https://api.example.com", timeout=30)
        result = c._post("getMe")
        assert result == {"ok": True, "result": {}}
        assert mock_post.call_args.kwargs["timeout"] == 30

    @patch("sdk.client.requests.post")
    def test_api_error_raises(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": False, "description": "Unauthorized"}, ok=False, status_code=401)

        c = BotApiClient("https://api.example.com")
        with pytest.raises(APIException) as exc_info:
            c._post("getMe")
        assert exc_info.value.status_code == 401

    @patch("sdk.client.requests.post")
    def test_ok_false_in_2xx_raises(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": False, "error_code": 400, "description": "Bad Request"})

        c = BotApiClient("https://api.example.com")
        with pytest.raises(APIException) as exc_info:
            c._post("sendMessage", {"chat_id": 1, "text": "x"})
        assert exc_info.value.error_code == 400

    @patch("sdk.client.requests.post")
    def test_json_decode_failure(self, mock_post: MagicMock) -> None:
        """If the response body is not JSON, body defaults to {}."""
        mock_resp = _response({})
        mock_resp.json.side_effect = ValueError("No JSON")
        mock_post.return_value = mock_resp

        c = BotApiClient("https://api.example.com")
        assert c._post("getMe") == {}

    @patch("sdk.client.requests.post")
    def test_network_error_propagates(self, mock_post: MagicMock) -> None:
        mock_post.side_effect = requests.ConnectionError("offline")

        c = BotApiClient("https://api.example.com")
        with pytest.raises(requests.ConnectionError):
            c._post("getMe")

    @patch("sdk.client.requests.post")
    def test_models_serialised(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": MESSAGE})
        markup = InlineKeyboardMarkup(inline_keyboard=[[InlineKeyboardButton(text="a", callback_data="1")]])

        BotApiClient("https://api.example.com").send_message(42, "hello", reply_markup=markup)

        payload = mock_post.call_args.kwargs["json"]
        assert payload["reply_markup"] == {"inline_keyboard": [[{"text": "a", "callback_data": "1"}]]}


# ── Endpoint methods ─────────────────────────────────────────────────────────


class TestEndpointMethods:
    """Spot-check endpoint wrappers and their result models."""

    @patch("sdk.client.requests.post")
    def test_get_me(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": {"id": 1, "is_bot": True, "first_name": "Bot", "username": "my_bot"}})

        user = BotApiClient("https://api.example.com").get_me()
        assert user.username == "my_bot"
        assert mock_post.call_args.args[0] == "https://api.example.com/getMe"

    @patch("sdk.client.requests.post")
    def test_get_updates(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": [{"update_id": 5, "message": MESSAGE}, {"update_id": 6}]})

        updates = BotApiClient("https://api.example.com").get_updates(offset=5, limit=10, timeout=20, allowed_updates=["message"])

        assert [u.update_id for u in updates] == [5, 6]
        assert isinstance(updates[0], Update)
        assert updates[0].message.text == "hello"
        assert mock_post.call_args.kwargs["json"] == {"offset": 5, "limit": 10, "timeout": 20, "allowed_updates": ["message"]}

    @patch("sdk.client.requests.post")
    def test_send_message(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": MESSAGE})

        result = BotApiClient("https://api.example.com").send_message(
            chat_id=42, text="hello", message_thread_id=3, reply_parameters=ReplyParameters(message_id=9),
        )

        assert isinstance(result, Message)
        payload = mock_post.call_args.kwargs["json"]
        assert payload["chat_id"] == 42
        assert payload["text"] == "hello"
        assert payload["message_thread_id"] == 3
        assert payload["reply_parameters"] == {"message_id": 9}
        assert "parse_mode" not in payload

    @patch("sdk.client.requests.post")
    def test_send_photo_upload_is_multipart(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": MESSAGE})

        BotApiClient("https://api.example.com").send_photo(
            42, b"\x89PNG", caption="cat", reply_parameters=ReplyParameters(message_id=9),
        )

        kwargs = mock_post.call_args.kwargs
        assert kwargs["files"] == {"photo": b"\x89PNG"}
        assert kwargs["data"]["caption"] == "cat"
        assert json.loads(kwargs["data"]["reply_parameters"]) == {"message_id": 9}

    @patch("sdk.client.requests.post")
    def test_send_photo_by_file_id_is_json(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": MESSAGE})

        BotApiClient("https://api.example.com").send_photo(42, "AgACAgIAAx")

        assert mock_post.call_args.kwargs["json"]["photo"] == "AgACAgIAAx"

    @patch("sdk.client.requests.post")
    def test_edit_inline_message_returns_true(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": True})

        result = BotApiClient("https://api.example.com").edit_message_text("new", inline_message_id="abc")
        assert result is True

    @patch("sdk.client.requests.post")
    def test_edit_reply_markup_returns_message(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": MESSAGE})

        result = BotApiClient("https://api.example.com").edit_message_reply_markup(chat_id=42, message_id=7)
        assert isinstance(result, Message)
        assert "reply_markup" not in mock_post.call_args.kwargs["json"]

    @patch("sdk.client.requests.post")
    def test_set_my_commands(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": True})

        ok = BotApiClient("https://api.example.com").set_my_commands([BotCommand(command="start", description="Hi")])

        assert ok is True
        assert mock_post.call_args.kwargs["json"] == {"commands": [{"command": "start", "description": "Hi"}]}

    @patch("sdk.client.requests.post")
    def test_get_chat(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": {"id": -100, "type": "supergroup", "title": "Team"}})

        chat = BotApiClient("https://api.example.com").get_chat(-100)
        assert chat.title == "Team"

    @patch("sdk.client.requests.post")
    def test_delete_message(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": True})

        assert BotApiClient("https://api.example.com").delete_message(42, 7) is True
        assert mock_post.call_args.kwargs["json"] == {"chat_id": 42, "message_id": 7}
