"""Persisted user settings and runtime configuration."""
import logging
import os
from typing import Optional

from studydeck.db import get_connection

DEFAULT_USER_ID = "local"
DEFAULT_LOG_LEVEL = "WARNING"


def parse_log_level(value: Optional[str]) -> str:
    """Level name for logging, WARNING for anything logging doesn't know."""
    level = (value or DEFAULT_LOG_LEVEL).strip().upper()
    return level if isinstance(logging.getLevelName(level), int) else DEFAULT_LOG_LEVEL


LOG_LEVEL = parse_log_level(os.environ.get("STUDYDECK_LOG_LEVEL"))


def get_setting(db_path: str, key: str, default: Optional[str] = None) -> Optional[str]:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def get_user_id(db_path: str) -> str:
    return get_setting(db_path, "user_id", DEFAULT_USER_ID)
