"""Persistence of completed day units."""
import json
import sqlite3

from loguru import logger

from vocab_drill.constants import PROGRESS_KEY
from vocab_drill.db import get_connection


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    try:
        row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    finally:
        conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    try:
        conn.execute(
            "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
            (key, value, value),
        )
        conn.commit()
    finally:
        conn.close()


def delete_setting(db_path: str, key: str) -> None:
    conn = get_connection(db_path)
    try:
        conn.execute("DELETE FROM user_settings WHERE key = ?", (key,))
        conn.commit()
    finally:
        conn.close()


class ProgressStore:
    """Completed day-unit identifiers kept as a JSON list in user_settings.

    Every operation fails soft: read problems give an empty set and write
    problems are only logged, so a broken store never interrupts a drill.
    """

    def __init__(self, db_path: str, key: str = PROGRESS_KEY):
        self.db_path = db_path
        self.key = key

    def load(self) -> set[str]:
        try:
            raw = get_setting(self.db_path, self.key)
        except (sqlite3.Error, OSError) as e:
            logger.warning(f"Could not load progress: {e}")
            return set()
        if raw is None:
            return set()
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Ignoring malformed progress data: {e}")
            return set()
        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            logger.warning("Ignoring progress data that is not a list of strings")
            return set()
        return set(data)

    def save(self, completed: set[str]) -> None:
        try:
            set_setting(self.db_path, self.key, json.dumps(sorted(completed)))
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Could not save progress: {e}")

    def clear(self) -> None:
        try:
            delete_setting(self.db_path, self.key)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Could not clear progress: {e}")
