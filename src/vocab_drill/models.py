"""Data classes for the drill domain model."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Mode(str, Enum):
    SELECT = "select"
    PLAN = "plan"
    STUDY = "study"
    QUIZ = "quiz"
    RESULT = "result"
    PUNISHMENT = "punishment"
    RETEST = "retest"


TIMED_MODES = (Mode.QUIZ, Mode.RETEST)


class Grade(str, Enum):
    NONE = "none"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class Term:
    id: int
    text: str
    meaning: str
    category: str = ""


@dataclass(frozen=True)
class Topic:
    id: str
    name: str
    term_count: int = 0


@dataclass(frozen=True)
class DayUnit:
    topic_id: str
    day_number: int
    terms: tuple = ()

    @property
    def key(self) -> str:
        return day_key(self.topic_id, self.day_number)


@dataclass(frozen=True)
class PunishmentEntry:
    term: Term
    required_count: int
    current_count: int = 0

    @property
    def expected_text(self) -> str:
        """The exact line the learner has to copy out."""
        return f"{self.term.text} - {self.term.meaning}"

    @property
    def is_complete(self) -> bool:
        return self.current_count >= self.required_count


@dataclass
class SessionState:
    mode: Mode = Mode.SELECT
    topic_id: Optional[str] = None
    day_unit: Optional[DayUnit] = None
    cursor: int = 0
    score: int = 0
    time_remaining: int = 0
    last_grade: Grade = Grade.NONE
    answer: str = ""
    flipped: bool = False

    @property
    def terms(self) -> tuple:
        return self.day_unit.terms if self.day_unit else ()


@dataclass(frozen=True)
class Submit:
    answer: str


@dataclass(frozen=True)
class Tick:
    prompt_id: int
    remaining: int


@dataclass(frozen=True)
class Timeout:
    prompt_id: int


@dataclass(frozen=True)
class SettleElapsed:
    prompt_id: int


@dataclass
class DayStatus:
    day_number: int
    word_count: int
    completed: bool = False
    locked: bool = False


def day_key(topic_id: str, day_number: int) -> str:
    """Identifier stored in the completed set for one day unit."""
    return f"{topic_id}-{day_number}"
