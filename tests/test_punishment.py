import pytest

from vocab_drill.models import PunishmentEntry, Term
from vocab_drill.punishment import EmptyQueue, PunishmentQueue, escalate, new_entry


def term(n):
    return Term(id=n, text=f"w{n}", meaning=f"m{n}")


def test_new_entry_counts():
    e = new_entry(term(1))
    assert e.required_count == 20
    assert e.current_count == 0


def test_escalate_adds_ten_and_resets():
    e = PunishmentEntry(term=term(1), required_count=20, current_count=20)
    up = escalate(e)
    assert up.required_count == 30
    assert up.current_count == 0
    assert escalate(up).required_count == 40


def test_fifo_order():
    q = PunishmentQueue()
    for n in (1, 2, 3):
        q.push(new_entry(term(n)))
    assert q.size() == 3
    assert [e.term.id for e in q] == [1, 2, 3]
    assert q.pop_head().term.id == 1
    assert q.peek_head().term.id == 2
    assert len(q) == 2


def test_replace_head_keeps_position():
    q = PunishmentQueue()
    q.push(new_entry(term(1)))
    q.push(new_entry(term(2)))
    q.replace_head(escalate(q.peek_head()))
    assert q.size() == 2
    assert q.peek_head().term.id == 1
    assert q.peek_head().required_count == 30
    assert [e.term.id for e in q] == [1, 2]


def test_replace_head_only_updates_counts():
    q = PunishmentQueue()
    q.push(new_entry(term(1)))
    q.replace_head(PunishmentEntry(term=term(9), required_count=5, current_count=2))
    head = q.peek_head()
    assert head.term.id == 1
    assert (head.required_count, head.current_count) == (5, 2)


def test_duplicate_term_rejected():
    q = PunishmentQueue()
    q.push(new_entry(term(1)))
    with pytest.raises(ValueError):
        q.push(new_entry(term(1)))
    assert q.size() == 1


@pytest.mark.parametrize("op", ["peek_head", "pop_head"])
def test_head_operations_on_empty_queue(op):
    with pytest.raises(EmptyQueue):
        getattr(PunishmentQueue(), op)()


def test_replace_head_on_empty_queue():
    with pytest.raises(EmptyQueue):
        PunishmentQueue().replace_head(new_entry(term(1)))


def test_empty_queue_is_lookup_error():
    assert issubclass(EmptyQueue, LookupError)


def test_clear():
    q = PunishmentQueue()
    q.push(new_entry(term(1)))
    q.clear()
    assert q.size() == 0


def test_iteration_is_read_only_snapshot():
    q = PunishmentQueue()
    q.push(new_entry(term(1)))
    snapshot = list(q)
    q.pop_head()
    assert len(snapshot) == 1
