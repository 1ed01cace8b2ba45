"""Tests for slash-command parsing."""

import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.commands import command_length, parse_command, text_without_command

BOT = "my_bot"


# ── command_length ───────────────────────────────────────────────────────────


class TestCommandLength:
    """Validate the command-region scan."""

    def test_whole_text_is_command(self) -> None:
        assert command_length("/start") == 6

    def test_stops_at_space(self) -> None:
        assert command_length("/echo hello") == 5

    def test_stops_at_newline(self) -> None:
        assert command_length("/echo\nhello") == 5

    def test_punctuation_is_part_of_region(self) -> None:
        assert command_length("/start@my_bot rest") == 13

    @pytest.mark.parametrize("text", ["", None, "start", " /start", "/", "/ start"])
    def test_no_command(self, text) -> None:
        assert command_length(text) == 0


# ── parse_command ────────────────────────────────────────────────────────────


class TestParseCommand:
    """Validate token extraction and rejection rules."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("/start", "start"),
            ("/start hello world", "start"),
            ("/Start", "Start"),
            ("/get_latest", "get_latest"),
            ("/cmd2", "cmd2"),
            ("/start@my_bot", "start"),
            ("/start@my_bot with args", "start"),
        ],
    )
    def test_valid_commands(self, text, expected) -> None:
        assert parse_command(text, BOT) == expected

    def test_case_is_preserved(self) -> None:
        assert parse_command("/HeLp", BOT) == "HeLp"

    def test_non_ascii_character_ends_command(self) -> None:
        assert parse_command("/start² now", BOT) == "start"
        assert command_length("/starté") == len("/start")

    @pytest.mark.parametrize("text", ["", None, "hello /start", "start", "/", "/ start", "/привет", "/²"])
    def test_not_a_command(self, text) -> None:
        assert parse_command(text, BOT) is None

    def test_other_bot_suffix_rejected(self) -> None:
        assert parse_command("/start@other_bot", BOT) is None

    def test_bot_suffix_is_case_sensitive(self) -> None:
        assert parse_command("/start@My_Bot", BOT) is None

    def test_suffix_rejected_when_username_unknown(self) -> None:
        assert parse_command("/start@my_bot", None) is None

    def test_unsuffixed_command_without_username(self) -> None:
        assert parse_command("/start", None) == "start"

    def test_empty_name_before_suffix(self) -> None:
        assert parse_command("/@my_bot", BOT) is None


# ── text_without_command ─────────────────────────────────────────────────────


class TestTextWithoutCommand:
    """Validate argument extraction."""

    def test_returns_remainder_with_separator(self) -> None:
        assert text_without_command("/echo hello world") == " hello world"

    def test_command_only_is_empty(self) -> None:
        assert text_without_command("/echo") == ""

    def test_no_command_is_empty(self) -> None:
        assert text_without_command("just text") == ""

    def test_none_is_empty(self) -> None:
        assert text_without_command(None) == ""
