from __future__ import annotations
from pathlib import Path
import logging
import os

from .formatting import FORMATTERS

logger = logging.getLogger(__name__)

DEFAULT_BLOB_KEY = "blogs"
DEFAULT_LOCALE = "th-TH"


def db_path() -> Path:
    env_path = os.getenv("BLOGPAD_DB_PATH")
    path = Path(env_path) if env_path else Path.home() / ".blogpad" / "blogpad.db"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path

def blob_key() -> str:
    return os.getenv("BLOGPAD_BLOB_KEY") or DEFAULT_BLOB_KEY

def locale() -> str:
    value = os.getenv("BLOGPAD_LOCALE") or DEFAULT_LOCALE
    if value not in FORMATTERS:
        logger.warning("Unsupported BLOGPAD_LOCALE '%s'; using %s", value, DEFAULT_LOCALE)
        return DEFAULT_LOCALE
    return value

def log_level() -> str:
    return (os.getenv("BLOGPAD_LOG_LEVEL") or "WARNING").upper()
