"""Inline keyboard layouts.

A layout is a list of rows, each row a list of :class:`KeyboardButton`.
Layouts are plain data until :func:`to_inline_markup` turns them into the
wire model, dropping disabled buttons and empty rows on the way.
"""

import dataclasses
from typing import Callable, Iterable, Optional

from sdk.models import InlineKeyboardButton, InlineKeyboardMarkup


@dataclasses.dataclass(slots=True)
class KeyboardButton:
    """One button of a layout."""
    text: str
    callback_data: Optional[str] = None
    enabled: bool = True


KeyboardLayout = list[list[KeyboardButton]]


def row(texts: Iterable[str]) -> list[KeyboardButton]:
    """Return a single row of enabled buttons without callback payloads."""
    return [KeyboardButton(text) for text in texts]


def flat(texts: Iterable[str]) -> KeyboardLayout:
    """Return a layout with one row holding every text."""
    return [row(texts)]


def grid(texts: Iterable[str], row_size: int, make_key: Callable[[str], str]) -> KeyboardLayout:
    """Arrange *texts* ``row_size`` per row, row-major.

    Each button's callback payload is ``make_key(text)``.  The last row may
    be shorter.  A non-positive *row_size* or no texts gives an empty layout.

    Example::

        >>> [[b.text for b in r] for r in grid("abcde", 2, str.upper)]
        [['a', 'b'], ['c', 'd'], ['e']]
    """
    texts = list(texts)
    if row_size <= 0 or not texts:
        return []

    return [
        [KeyboardButton(text, make_key(text)) for text in texts[start:start + row_size]]
        for start in range(0, len(texts), row_size)
    ]


def to_inline_markup(layout: Optional[KeyboardLayout]) -> Optional[InlineKeyboardMarkup]:
    """Convert *layout* to an :class:`InlineKeyboardMarkup`, or ``None``.

    ``None`` means "no keyboard": it is returned for an empty layout and for
    a layout in which every button is disabled.
    """
    if not layout:
        return None

    rows: list[list[InlineKeyboardButton]] = []
    for buttons in layout:
        wire_row = [
            InlineKeyboardButton(text=button.text, callback_data=button.callback_data)
            for button in buttons
            if button.enabled
        ]
        if wire_row:
            rows.append(wire_row)

    if not rows:
        return None
    return InlineKeyboardMarkup(inline_keyboard=rows)
