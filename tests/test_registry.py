"""Tests for the command registry."""

import sys
import os
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from bot.registry import CommandRegistry
from helpers import make_message


class TestDispatch:
    """Validate lookup and invocation."""

    def test_unregistered_command_is_noop(self) -> None:
        registry = CommandRegistry()
        assert registry.dispatch("nope", make_message("/nope")) is False

    def test_registered_command_invoked_once(self) -> None:
        registry = CommandRegistry()
        handler = MagicMock()
        other = MagicMock()
        registry.register("start", handler)
        registry.register("help", other)

        message = make_message("/start")
        assert registry.dispatch("start", message) is True
        handler.assert_called_once_with(message)
        other.assert_not_called()

    def test_last_registration_wins(self) -> None:
        registry = CommandRegistry()
        first, second = MagicMock(), MagicMock()
        registry.register("start", first)
        registry.register("start", second)

        registry.dispatch("start", make_message("/start"))
        first.assert_not_called()
        second.assert_called_once()
        assert len(registry) == 1

    def test_lookup_is_case_sensitive(self) -> None:
        registry = CommandRegistry()
        handler = MagicMock()
        registry.register("start", handler)
        assert registry.dispatch("Start", make_message("/Start")) is False
        handler.assert_not_called()

    def test_handler_exception_propagates(self) -> None:
        registry = CommandRegistry()
        registry.register("boom", MagicMock(side_effect=RuntimeError("bad")))
        with pytest.raises(RuntimeError):
            registry.dispatch("boom", make_message("/boom"))

    def test_decorator_registers(self) -> None:
        registry = CommandRegistry()

        @registry.command("ping", description="Ping")
        def handle_ping(message) -> None:
            pass

        assert "ping" in registry
        assert registry.get("ping").handler is handle_ping
        assert registry.get("ping").description == "Ping"


class TestDescriptions:
    """Validate the published command menu."""

    def test_only_described_commands_published(self) -> None:
        registry = CommandRegistry()
        registry.register("start", MagicMock(), "Say hello")
        registry.register("secret", MagicMock())

        published = registry.descriptions()
        assert [(c.command, c.description) for c in published] == [("start", "Say hello")]

    def test_publish_then_unpublish(self) -> None:
        registry = CommandRegistry()
        handler = MagicMock()
        registry.register("start", handler, "Say hello")
        assert [c.command for c in registry.descriptions()] == ["start"]

        registry.register("start", handler, "")
        assert registry.descriptions() == []
        assert registry.dispatch("start", make_message("/start")) is True
        handler.assert_called_once()

    def test_registration_order_kept(self) -> None:
        registry = CommandRegistry()
        for name in ("b", "a", "c"):
            registry.register(name, MagicMock(), f"cmd {name}")
        registry.register("b", MagicMock(), "again")
        assert [c.command for c in registry.descriptions()] == ["b", "a", "c"]

    def test_entries_is_a_copy(self) -> None:
        registry = CommandRegistry()
        registry.register("start", MagicMock())
        registry.entries().clear()
        assert "start" in registry
