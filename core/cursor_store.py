import json
import os
import tempfile

from core.logger import SimpleBotLogger

logger = SimpleBotLogger.get_logger()


class CursorStore:
    """Polling cursor persisted to a local JSON flat-file.

    The file holds a single object ``{"next_update_id": <int>}``.  Writes go
    through a temporary file and :func:`os.replace` so a crash mid-write
    never leaves a truncated file behind.
    """

    def __init__(self, path: str = "data/cursor.json") -> None:
        self.path = path

    def load(self) -> int | None:
        """Return the stored cursor, or ``None`` when nothing usable is stored."""
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.info("No stored polling cursor", extra={"cursor_path": self.path})
            return None
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Unreadable cursor file, ignoring", extra={"cursor_path": self.path, "error": str(exc)})
            return None

        cursor = data.get("next_update_id") if isinstance(data, dict) else None
        if not isinstance(cursor, int) or isinstance(cursor, bool):
            logger.warning("Cursor file has no valid next_update_id", extra={"cursor_path": self.path})
            return None

        logger.info("Loaded polling cursor", extra={"cursor_path": self.path, "next_update_id": cursor})
        return cursor

    def save(self, cursor: int) -> None:
        """Write *cursor* to disk atomically."""
        dir_name = os.path.dirname(self.path) or "."
        os.makedirs(dir_name, exist_ok=True)
        try:
            with tempfile.NamedTemporaryFile(
                "w", dir=dir_name, delete=False, suffix=".tmp"
            ) as tmp:
                json.dump({"next_update_id": cursor}, tmp)
                tmp_path = tmp.name
            os.replace(tmp_path, self.path)
            logger.debug("Persisted polling cursor", extra={"cursor_path": self.path, "next_update_id": cursor})
        except OSError as exc:
            logger.error("Failed to persist polling cursor", extra={"cursor_path": self.path, "error": str(exc)})
            raise
