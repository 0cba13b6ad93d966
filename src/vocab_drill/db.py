"""Database initialization and connection management."""
import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = str(Path.home() / ".vocab_drill" / "drill.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS topics (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    position INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS terms (
    topic_id TEXT NOT NULL REFERENCES topics(id),
    id INTEGER NOT NULL,
    position INTEGER NOT NULL,
    text TEXT NOT NULL,
    category TEXT NOT NULL DEFAULT '',
    meaning TEXT NOT NULL,
    PRIMARY KEY (topic_id, id)
);

CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
