"""Seed the database with the bundled vocabulary topics."""
import json
from pathlib import Path
from vocab_drill.db import get_connection

CONTENT_DIR = Path(__file__).parent / "content"


def is_seeded(db_path: str) -> bool:
    """Check whether the database already holds any topics."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM topics").fetchone()[0]
    conn.close()
    return count > 0


def load_bundled_topics() -> list[dict]:
    data = json.loads((CONTENT_DIR / "vocab.json").read_text(encoding="utf-8"))
    return data["topics"]


def insert_topic(conn, topic_id: str, name: str, terms: list[dict]) -> None:
    """Insert one topic and its terms in list order.

    Terms are dicts using either the bundled keys (term/type/definition) or
    the model names (text/category/meaning).
    """
    position = conn.execute("SELECT COALESCE(MAX(position), 0) + 1 FROM topics").fetchone()[0]
    conn.execute(
        "INSERT OR IGNORE INTO topics (id, name, position) VALUES (?, ?, ?)",
        (topic_id, name, position),
    )
    for idx, term in enumerate(terms):
        conn.execute(
            """INSERT OR IGNORE INTO terms (topic_id, id, position, text, category, meaning)
            VALUES (?, ?, ?, ?, ?, ?)""",
            (
                topic_id,
                term.get("id", idx + 1),
                idx,
                term.get("term", term.get("text")),
                term.get("type", term.get("category", "")),
                term.get("definition", term.get("meaning")),
            ),
        )


def seed_topics(db_path: str, topics: list[dict] | None = None) -> None:
    """Insert topics (the bundled set by default). Existing rows are left alone."""
    if topics is None:
        topics = load_bundled_topics()
    conn = get_connection(db_path)
    for topic in topics:
        insert_topic(conn, topic["id"], topic.get("name", topic["id"]), topic["terms"])
    conn.commit()
    conn.close()


def seed_all(db_path: str) -> None:
    """Seed the bundled content. Safe to call on every start."""
    if is_seeded(db_path):
        return
    seed_topics(db_path)
