import heapq
import itertools

import pytest

from vocab_drill.db import init_db
from vocab_drill.progress import ProgressStore
from vocab_drill.seed import seed_topics
from vocab_drill.session import SessionStateMachine
from vocab_drill.vocab import VocabSource


class ManualHandle:
    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """call_later() on a fake clock that only moves when advance() is called."""

    def __init__(self):
        self.now = 0.0
        self._queue = []
        self._seq = itertools.count()

    def call_later(self, delay, callback):
        handle = ManualHandle()
        heapq.heappush(self._queue, (self.now + delay, next(self._seq), handle, callback))
        return handle

    def advance(self, seconds):
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, handle, callback = heapq.heappop(self._queue)
            self.now = when
            if not handle.cancelled:
                callback()
        self.now = target

    @property
    def pending(self):
        return sum(1 for *_, handle, _cb in self._queue if not handle.cancelled)


def make_terms(count, prefix="word"):
    return [
        {"id": i, "term": f"{prefix}{i}", "type": "n", "definition": f"meaning of {prefix}{i}"}
        for i in range(1, count + 1)
    ]


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_drill.db")
    return db_path


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def drill_db(tmp_db):
    """Database with a 5-word, a 2-word and a 12-word topic."""
    init_db(tmp_db)
    seed_topics(tmp_db, [
        {"id": "five", "name": "Five", "terms": make_terms(5)},
        {"id": "two", "name": "Two", "terms": make_terms(2, prefix="pair")},
        {"id": "twelve", "name": "Twelve", "terms": make_terms(12, prefix="dozen")},
    ])
    return tmp_db


@pytest.fixture
def machine(drill_db, scheduler):
    return SessionStateMachine(
        VocabSource(drill_db, words_per_day=5),
        ProgressStore(drill_db),
        scheduler,
        thinking_time=10,
        settle_delay=1.5,
    )
