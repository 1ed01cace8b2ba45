"""Fast long-poll loop.

:class:`FastLongPoll` replaces the usual "poll from wherever the server
left off" loop with one that starts at the newest update: on
initialisation it asks Telegram for the single most recent update and moves
the cursor past it, so a backlog that piled up while the bot was offline is
never replayed.  With ``start_mode="resume"`` and a
:class:`~core.cursor_store.CursorStore`, the cursor saved by the previous
run is used instead.

After that the loop alternates between one long-poll fetch and the
synchronous dispatch of every update in the batch.  The cursor moves past
each update *before* that update is dispatched, so an exception in the
middle of a batch never causes earlier updates to be fetched again.
"""

import threading
from typing import Optional

from core.cursor_store import CursorStore
from core.logger import SimpleBotLogger
from sdk.client import BotApiClient
from sdk.exceptions import classify_error
from bot.events import EventHandler

logger = SimpleBotLogger.get_logger()

START_DISCARD = "discard"
START_RESUME = "resume"
START_MODES = (START_DISCARD, START_RESUME)

# Seconds added to the long-poll duration for the transport read timeout.
READ_TIMEOUT_MARGIN = 5


class FastLongPoll:
    """Cursor-owning long-poll loop feeding an :class:`EventHandler`.

    Args:
        client: Bot API transport.
        events: Dispatcher every fetched update is handed to.
        limit: Maximum number of updates per fetch (1–100).
        timeout: Long-poll duration in seconds.
        allowed_updates: Update kinds to receive; ``None`` keeps the server default.
        start_mode: ``"discard"`` skips the backlog, ``"resume"`` continues
            from the cursor stored in *cursor_store*.
        cursor_store: Where the cursor is persisted after every iteration.
        retry_delay: First pause after a failed iteration; doubles on every
            consecutive failure.  ``0`` retries immediately.
        max_retry_delay: Upper bound for the pause.
    """

    def __init__(
        self,
        client: BotApiClient,
        events: EventHandler,
        limit: int = 100,
        timeout: int = 10,
        allowed_updates: Optional[list[str]] = None,
        start_mode: str = START_DISCARD,
        cursor_store: Optional[CursorStore] = None,
        retry_delay: float = 1.0,
        max_retry_delay: float = 30.0,
    ) -> None:
        if start_mode not in START_MODES:
            raise ValueError(f"Unknown start mode {start_mode!r}, expected one of {START_MODES}")
        if start_mode == START_RESUME and cursor_store is None:
            raise ValueError("start_mode='resume' needs a cursor_store")

        self._client = client
        self._events = events
        self._limit = limit
        self._timeout = timeout
        self._allowed_updates = allowed_updates
        self._start_mode = start_mode
        self._cursor_store = cursor_store
        self._retry_delay = retry_delay
        self._max_retry_delay = max_retry_delay

        self.next_update_id: int = 0
        self.initialized: bool = False
        self._saved_update_id: Optional[int] = None

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Position the cursor and prepare the transport for long polling."""
        if self._client.timeout < self._timeout + READ_TIMEOUT_MARGIN:
            self._client.timeout = self._timeout + READ_TIMEOUT_MARGIN

        if self._start_mode == START_RESUME:
            stored = self._cursor_store.load()
            if stored is not None:
                self.next_update_id = max(self.next_update_id, stored)
                self._saved_update_id = stored
                self.initialized = True
                logger.info("Resuming from stored cursor", extra={"next_update_id": self.next_update_id})
                return
            logger.info("No stored cursor — discarding backlog instead")

        # offset=-1 returns only the newest pending update and confirms all older ones.
        for update in self._client.get_updates(offset=-1, limit=1, timeout=0):
            if update.update_id >= self.next_update_id:
                self.next_update_id = update.update_id + 1

        self.initialized = True
        logger.info("Backlog discarded", extra={"next_update_id": self.next_update_id})

    def poll_once(self) -> int:
        """Fetch one batch and dispatch it.  Returns the number of updates fetched.

        Exceptions from the transport or from dispatch propagate; the cursor
        keeps whatever progress was made before the failure.
        """
        if not self.initialized:
            self.initialize()

        updates = self._client.get_updates(
            offset=self.next_update_id,
            limit=self._limit,
            timeout=self._timeout,
            allowed_updates=self._allowed_updates,
        )
        if updates:
            logger.debug("Received updates", extra={"count": len(updates), "offset": self.next_update_id})

        try:
            for update in sorted(updates, key=lambda item: item.update_id):
                if update.update_id < self.next_update_id:
                    logger.debug("Skipping already processed update", extra={"update_id": update.update_id})
                    continue
                self.next_update_id = update.update_id + 1
                self._events.handle_update(update)
        finally:
            self._persist_cursor()

        return len(updates)

    def run(self, stop_event: Optional[threading.Event] = None) -> None:
        """Poll until *stop_event* is set.

        Every failure is logged and the iteration retried; consecutive
        failures back off exponentially up to ``max_retry_delay``.  Setting
        *stop_event* also interrupts a pending back-off pause.
        """
        stop_event = stop_event or threading.Event()
        failures = 0

        logger.info("Long polling started", extra={"limit": self._limit, "timeout": self._timeout, "start_mode": self._start_mode})
        while not stop_event.is_set():
            try:
                self.poll_once()
                failures = 0
            except Exception as exc:
                failures += 1
                delay = self.retry_delay_for(failures)
                logger.error(
                    "Long poll iteration failed",
                    extra={
                        "error": str(exc),
                        "error_kind": classify_error(exc),
                        "next_update_id": self.next_update_id,
                        "consecutive_failures": failures,
                        "retry_in": delay,
                    },
                )
                if delay:
                    stop_event.wait(delay)
        logger.info("Long polling stopped", extra={"next_update_id": self.next_update_id})

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def retry_delay_for(self, failures: int) -> float:
        """Return the pause before retrying after *failures* consecutive failures."""
        if failures <= 0 or self._retry_delay <= 0:
            return 0.0
        return min(self._retry_delay * 2 ** min(failures - 1, 16), self._max_retry_delay)

    def _persist_cursor(self) -> None:
        if self._cursor_store is None or self._saved_update_id == self.next_update_id:
            return
        self._cursor_store.save(self.next_update_id)
        self._saved_update_id = self.next_update_id
