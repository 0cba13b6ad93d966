"""Read-only access to topics and their day units."""
import math

from vocab_drill.constants import WORDS_PER_DAY
from vocab_drill.db import get_connection
from vocab_drill.models import Term, Topic


class VocabSource:
    """Topics and terms stored in the drill database, sliced into day units."""

    def __init__(self, db_path: str, words_per_day: int = WORDS_PER_DAY):
        if words_per_day <= 0:
            raise ValueError("words_per_day must be positive")
        self.db_path = db_path
        self.words_per_day = words_per_day

    def list_topics(self) -> list[Topic]:
        conn = get_connection(self.db_path)
        rows = conn.execute(
            """SELECT t.id, t.name, COUNT(w.id) AS term_count
            FROM topics t
            LEFT JOIN terms w ON w.topic_id = t.id
            GROUP BY t.id
            ORDER BY t.position"""
        ).fetchall()
        conn.close()
        return [Topic(id=r["id"], name=r["name"], term_count=r["term_count"]) for r in rows]

    def get_topic(self, topic_id: str) -> Topic | None:
        conn = get_connection(self.db_path)
        row = conn.execute(
            """SELECT t.id, t.name, COUNT(w.id) AS term_count
            FROM topics t
            LEFT JOIN terms w ON w.topic_id = t.id
            WHERE t.id = ?
            GROUP BY t.id""",
            (topic_id,),
        ).fetchone()
        conn.close()
        if row is None:
            return None
        return Topic(id=row["id"], name=row["name"], term_count=row["term_count"])

    def days_in(self, topic: Topic) -> int:
        return math.ceil(topic.term_count / self.words_per_day)

    def day_unit_count(self, topic_id: str) -> int:
        topic = self.get_topic(topic_id)
        if topic is None:
            return 0
        return self.days_in(topic)

    def get_day_unit(self, topic_id: str, day_number: int) -> list[Term]:
        """Terms for one day, in list order. Out-of-range days give an empty list."""
        if day_number < 1:
            return []
        conn = get_connection(self.db_path)
        rows = conn.execute(
            """SELECT id, text, category, meaning FROM terms
            WHERE topic_id = ?
            ORDER BY position
            LIMIT ? OFFSET ?""",
            (topic_id, self.words_per_day, (day_number - 1) * self.words_per_day),
        ).fetchall()
        conn.close()
        return [
            Term(id=r["id"], text=r["text"], meaning=r["meaning"], category=r["category"])
            for r in rows
        ]
