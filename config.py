"""Application configuration — environment variables and derived constants.

Loads the bot token and polling settings from the environment via
``python-dotenv``.  All values are resolved at import time so other modules
can ``from config import …`` without repeated lookups.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import os

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv

# ── Environment bootstrap ────────────────────────────────────────────────────
load_dotenv()

# ── core (after load_dotenv so LOG_DIR from .env is honoured) ────────────────
from core.logger import SimpleBotLogger  # noqa: E402

logger = SimpleBotLogger.get_logger()


# ── Helper functions (private) ───────────────────────────────────────────────


def _int_env(name: str, default: int) -> int:
    """Read an integer variable, falling back to *default* on bad input."""
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("Invalid integer in environment, using default", extra={"variable": name, "value": raw, "default": default})
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _list_env(name: str) -> list[str] | None:
    """Parse a comma-separated list; unset or empty means ``None``."""
    raw = os.environ.get(name)
    if not raw:
        return None
    items = [item.strip() for item in raw.split(",") if item.strip()]
    return items or None


def _choice_env(name: str, choices: tuple[str, ...], default: str) -> str:
    """Read a lowercase keyword, falling back to *default* when not in *choices*."""
    raw = (os.environ.get(name) or default).strip().lower()
    if raw not in choices:
        logger.warning("Unknown value in environment, using default", extra={"variable": name, "value": raw, "default": default})
        return default
    return raw


# ── Public constants ─────────────────────────────────────────────────────────

BOT_TOKEN: str | None = os.environ.get("BOT_TOKEN")
API_URL: str = os.environ.get("API_URL", "https://api.telegram.org").rstrip("/")
BASE_URL: str = f"{API_URL}/bot{BOT_TOKEN or ''}"

POLL_LIMIT: int = _int_env("POLL_LIMIT", 100)
POLL_TIMEOUT: int = _int_env("POLL_TIMEOUT", 10)
ALLOWED_UPDATES: list[str] | None = _list_env("ALLOWED_UPDATES")
_START_MODES = ("discard", "resume")
START_MODE: str = _choice_env("START_MODE", _START_MODES, "discard")
CURSOR_PATH: str = os.environ.get("CURSOR_PATH", "data/cursor.json")
RETRY_DELAY: int = _int_env("RETRY_DELAY", 1)
MAX_RETRY_DELAY: int = _int_env("MAX_RETRY_DELAY", 30)

PARSE_MODE: str | None = os.environ.get("PARSE_MODE") or None
DISABLE_WEB_PAGE_PREVIEW: bool = _bool_env("DISABLE_WEB_PAGE_PREVIEW", True)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
if LOG_LEVEL not in _LOG_LEVELS:
    logger.warning("Unknown LOG_LEVEL, using INFO", extra={"value": LOG_LEVEL})
    LOG_LEVEL = "INFO"
SimpleBotLogger.set_level(LOG_LEVEL)


# ── Startup diagnostics ─────────────────────────────────────────────────────

if BOT_TOKEN:
    logger.info("Config loaded — BOT_TOKEN is set, BASE_URL ready")
else:
    logger.warning("Config loaded — BOT_TOKEN is NOT set")

logger.info(
    "Polling settings",
    extra={"poll_limit": POLL_LIMIT, "poll_timeout": POLL_TIMEOUT, "start_mode": START_MODE, "allowed_updates": ALLOWED_UPDATES},
)
