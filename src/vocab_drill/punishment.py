"""Retry queue for missed terms."""
from dataclasses import replace

from vocab_drill.constants import PUNISHMENT_BASE, PUNISHMENT_STEP
from vocab_drill.models import PunishmentEntry, Term


class EmptyQueue(LookupError):
    """A head operation was called on an empty punishment queue."""


def new_entry(term: Term) -> PunishmentEntry:
    return PunishmentEntry(term=term, required_count=PUNISHMENT_BASE, current_count=0)


def escalate(entry: PunishmentEntry) -> PunishmentEntry:
    """Entry after a failed retest: more copies required, count starts over."""
    return replace(entry, required_count=entry.required_count + PUNISHMENT_STEP, current_count=0)


class PunishmentQueue:
    """FIFO of punishment entries.

    The head is the entry being worked on. It only leaves the queue through
    pop_head(); a failed retest updates it in place with replace_head().
    """

    def __init__(self):
        self._entries: list[PunishmentEntry] = []

    def push(self, entry: PunishmentEntry) -> None:
        if any(e.term == entry.term for e in self._entries):
            raise ValueError(f"'{entry.term.text}' is already queued")
        self._entries.append(entry)

    def peek_head(self) -> PunishmentEntry:
        if not self._entries:
            raise EmptyQueue("punishment queue is empty")
        return self._entries[0]

    def pop_head(self) -> PunishmentEntry:
        if not self._entries:
            raise EmptyQueue("punishment queue is empty")
        return self._entries.pop(0)

    def replace_head(self, entry: PunishmentEntry) -> None:
        if not self._entries:
            raise EmptyQueue("punishment queue is empty")
        self._entries[0] = replace(
            self._entries[0],
            required_count=entry.required_count,
            current_count=entry.current_count,
        )

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(self._entries))
