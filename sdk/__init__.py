"""Minimal Telegram Bot API SDK — Pydantic models, service client, and exceptions.

The :class:`BotApiClient` wraps the endpoints the bot layer needs with
synchronous methods that raise on failure.

Usage::

    from sdk import BotApiClient, APIException
    from sdk.models import Message, Update
"""

from sdk.client import BotApiClient
from sdk.exceptions import APIException

__all__ = [
    "BotApiClient",
    "APIException",
]
