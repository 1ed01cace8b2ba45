"""Slash-command parsing for raw message text.

A command region starts with ``/`` and runs over ASCII letters, digits and
punctuation until the first other character (usually a space or newline).
The region may carry a ``@botname`` suffix, in which case the command is
only meant for the bot with that exact username.

Examples::

    >>> parse_command("/start", "my_bot")
    'start'
    >>> parse_command("/start@my_bot hello", "my_bot")
    'start'
    >>> parse_command("/start@other_bot", "my_bot") is None
    True
    >>> text_without_command("/echo hello world")
    ' hello world'
"""

import string

COMMAND_PREFIX = "/"
BOT_NAME_SEPARATOR = "@"

_PUNCTUATION = frozenset(string.punctuation)


def _is_command_char(char: str) -> bool:
    return (char.isascii() and char.isalnum()) or char in _PUNCTUATION


def command_length(text: str | None) -> int:
    """Return the length of the command region at the start of *text*.

    Returns ``0`` when *text* does not start with a command, including a
    lone ``/``.
    """
    if not text or not text.startswith(COMMAND_PREFIX):
        return 0

    for index, char in enumerate(text):
        if not _is_command_char(char):
            length = index
            break
    else:
        length = len(text)

    # "/" alone (or "/" followed directly by whitespace) is not a command.
    if length <= len(COMMAND_PREFIX):
        return 0
    return length


def parse_command(text: str | None, username: str | None) -> str | None:
    """Return the bare command token in *text*, or ``None``.

    The token has the ``/`` prefix and any ``@botname`` suffix removed.  A
    suffix naming a different bot than *username* (compared case-sensitively)
    means the command is addressed to someone else.
    """
    length = command_length(text)
    if not length:
        return None

    region = text[:length]
    name, separator, bot_name = region.partition(BOT_NAME_SEPARATOR)
    if separator and bot_name != username:
        return None

    command = name[len(COMMAND_PREFIX):]
    if not command or " " in command:
        return None
    return command


def text_without_command(text: str | None) -> str:
    """Return whatever follows the command region of *text*.

    The separator after the command is kept as-is.  Text without a command,
    or a command with nothing after it, yields an empty string.
    """
    length = command_length(text)
    if not length:
        return ""
    return text[length:]
