"""Root conftest — sets env vars BEFORE any project module is imported.

``core.logger`` opens its rotating file handler on first use, so the log
directory is pointed away from the working tree before collection.
"""

import os
import sys

os.environ["LOG_DIR"] = ""
os.environ.setdefault("BOT_TOKEN", "123456:TEST")

# Ensure the project root is importable.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
