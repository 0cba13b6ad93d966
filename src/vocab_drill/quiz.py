"""Answer grading for timed prompts and copy-out drills."""
from vocab_drill.models import PunishmentEntry, Term


def normalize(text: str) -> str:
    return text.strip().lower()


def grade_answer(term: Term, answer: str | None) -> bool:
    """True when the answer names the term, ignoring case and surrounding spaces.

    A timeout is graded with answer=None and is always wrong.
    """
    if answer is None:
        return False
    return normalize(answer) == term.text.lower()


def matches_copy_out(entry: PunishmentEntry, line: str) -> bool:
    return normalize(line) == entry.expected_text.lower()


def score_percent(score: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round((score / total) * 100, 1)
