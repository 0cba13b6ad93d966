"""Session state machine: study, quiz, punishment and retest for one day unit."""
from collections import deque
from dataclasses import replace
from typing import Callable, Optional

from loguru import logger

from vocab_drill.constants import SETTLE_DELAY, THINKING_TIME
from vocab_drill.models import (
    DayStatus, DayUnit, Grade, Mode, PunishmentEntry, SessionState, SettleElapsed,
    Submit, Term, Tick, TIMED_MODES, Timeout, day_key,
)
from vocab_drill.progress import ProgressStore
from vocab_drill.punishment import PunishmentQueue, escalate, new_entry
from vocab_drill.quiz import grade_answer, matches_copy_out
from vocab_drill.timer import AnswerTimer, Scheduler
from vocab_drill.vocab import VocabSource


class SessionStateMachine:
    """Owns the session state and applies every transition to it.

    Learner input and scheduled callbacks both arrive as events through
    dispatch(), which handles them one at a time. Timed prompts are numbered;
    a Tick, Timeout or SettleElapsed armed for an earlier prompt is dropped.
    """

    def __init__(
        self,
        source: VocabSource,
        store: ProgressStore,
        scheduler: Scheduler,
        thinking_time: int = THINKING_TIME,
        settle_delay: float = SETTLE_DELAY,
        state: Optional[SessionState] = None,
    ):
        self.source = source
        self.store = store
        self.scheduler = scheduler
        self.thinking_time = thinking_time
        self.settle_delay = settle_delay
        self.state = state if state is not None else SessionState()
        self.queue = PunishmentQueue()
        self.completed: set[str] = store.load()
        self.timer = AnswerTimer(
            scheduler,
            on_timeout=self._on_timer_timeout,
            on_tick=self._on_timer_tick,
            duration=thinking_time,
        )
        self._prompt_id = 0
        self._settle_handle = None
        self._pending: deque = deque()
        self._dispatching = False
        self._listeners: list[Callable[[SessionState], None]] = []

    # --- Listeners ---

    def subscribe(self, listener: Callable[[SessionState], None]) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self.state)

    # --- Queries ---

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def current_term(self) -> Term | None:
        mode = self.state.mode
        if mode in (Mode.STUDY, Mode.QUIZ):
            terms = self.state.terms
            return terms[self.state.cursor] if self.state.cursor < len(terms) else None
        if mode in (Mode.PUNISHMENT, Mode.RETEST) and self.queue.size() > 0:
            return self.queue.peek_head().term
        return None

    @property
    def punishment_entry(self) -> PunishmentEntry | None:
        return self.queue.peek_head() if self.queue.size() > 0 else None

    @property
    def grading_locked(self) -> bool:
        return self.state.last_grade is not Grade.NONE

    def is_completed(self, day_number: int, topic_id: str | None = None) -> bool:
        return day_key(topic_id or self.state.topic_id, day_number) in self.completed

    def is_unlocked(self, day_number: int, topic_id: str | None = None) -> bool:
        if day_number == 1:
            return True
        return self.is_completed(day_number - 1, topic_id)

    def day_statuses(self, topic_id: str | None = None) -> list[DayStatus]:
        topic_id = topic_id or self.state.topic_id
        topic = self.source.get_topic(topic_id)
        if topic is None:
            return []
        per_day = self.source.words_per_day
        statuses = []
        for day in range(1, self.source.days_in(topic) + 1):
            statuses.append(DayStatus(
                day_number=day,
                word_count=min(day * per_day, topic.term_count) - (day - 1) * per_day,
                completed=self.is_completed(day, topic_id),
                locked=not self.is_unlocked(day, topic_id),
            ))
        return statuses

    # --- Topic and day selection ---

    def select_topic(self, topic_id: str) -> bool:
        if self.source.get_topic(topic_id) is None:
            logger.debug(f"Rejected unknown topic {topic_id!r}")
            return False
        self._teardown()
        self.state = SessionState(mode=Mode.PLAN, topic_id=topic_id)
        logger.debug(f"Topic {topic_id!r} selected")
        self._notify()
        return True

    def back_to_topics(self) -> None:
        self._teardown()
        self.state = SessionState(mode=Mode.SELECT)
        self._notify()

    def start_day(self, day_number: int) -> bool:
        """Load a day unit and begin studying it.

        Returns False, leaving everything untouched, when the day is out of
        range or still locked.
        """
        topic_id = self.state.topic_id
        if self.state.mode is not Mode.PLAN or topic_id is None:
            return False
        if not 1 <= day_number <= self.source.day_unit_count(topic_id):
            logger.debug(f"Rejected out-of-range day {day_number} for {topic_id!r}")
            return False
        if not self.is_unlocked(day_number):
            logger.debug(f"Rejected locked day {day_number} for {topic_id!r}")
            return False
        terms = tuple(self.source.get_day_unit(topic_id, day_number))
        self._teardown()
        self.queue.clear()
        self.state = SessionState(
            mode=Mode.STUDY,
            topic_id=topic_id,
            day_unit=DayUnit(topic_id=topic_id, day_number=day_number, terms=terms),
            time_remaining=self.thinking_time,
        )
        logger.debug(f"Day {day_number} of {topic_id!r} started with {len(terms)} terms")
        self._notify()
        return True

    # --- Study ---

    def flip_card(self) -> None:
        if self.state.mode is Mode.STUDY:
            self.state.flipped = not self.state.flipped
            self._notify()

    def next_card(self) -> None:
        if self.state.mode is not Mode.STUDY:
            return
        if self.state.cursor < len(self.state.terms) - 1:
            self.state.cursor += 1
            self.state.flipped = False
            self._notify()
        else:
            self._begin_quiz()

    def previous_card(self) -> None:
        if self.state.mode is not Mode.STUDY:
            return
        self.state.cursor = max(self.state.cursor - 1, 0)
        self.state.flipped = False
        self._notify()

    def _begin_quiz(self) -> None:
        self.queue.clear()
        self.state.mode = Mode.QUIZ
        self.state.cursor = 0
        self.state.score = 0
        self.state.flipped = False
        logger.debug("Quiz started")
        if not self.state.terms:
            self._enter_result()
            return
        self._prepare_prompt()
        self._notify()

    # --- Result ---

    def accept_result(self) -> bool:
        if self.state.mode is not Mode.RESULT:
            return False
        if self.queue.size() == 0:
            self._commit_day()
            self._enter_plan()
        else:
            self._enter_punishment()
        self._notify()
        return True

    # --- Events ---

    def submit(self, answer: str) -> None:
        self.dispatch(Submit(answer))

    def dispatch(self, event) -> None:
        self._pending.append(event)
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                self._handle(self._pending.popleft())
        finally:
            self._dispatching = False
            # events queued behind a handler that raised are dropped
            self._pending.clear()

    def _handle(self, event) -> None:
        mode = self.state.mode
        if isinstance(event, Submit):
            if mode in TIMED_MODES:
                if self.grading_locked:
                    return
                self._grade(event.answer)
            elif mode is Mode.PUNISHMENT:
                self._copy_out(event.answer)
        elif isinstance(event, Tick):
            if event.prompt_id == self._prompt_id and mode in TIMED_MODES and not self.grading_locked:
                self.state.time_remaining = event.remaining
                self._notify()
        elif isinstance(event, Timeout):
            if event.prompt_id == self._prompt_id and mode in TIMED_MODES and not self.grading_locked:
                logger.debug(f"Prompt {event.prompt_id} timed out")
                self._grade(None)
        elif isinstance(event, SettleElapsed):
            if event.prompt_id == self._prompt_id and mode in TIMED_MODES and self.grading_locked:
                self._settle_handle = None
                self._settle()
        else:
            raise TypeError(f"Unknown event: {event!r}")

    def _on_timer_tick(self, remaining: int) -> None:
        self.dispatch(Tick(self._prompt_id, remaining))

    def _on_timer_timeout(self) -> None:
        self.dispatch(Timeout(self._prompt_id))

    # --- Grading ---

    def _prepare_prompt(self) -> None:
        self._prompt_id += 1
        self.state.answer = ""
        self.state.last_grade = Grade.NONE
        self.state.time_remaining = self.thinking_time
        self.timer.start()

    def _grade(self, answer: str | None) -> None:
        self.timer.stop()
        term = self.current_term
        correct = grade_answer(term, answer)
        self.state.answer = answer or ""
        self.state.last_grade = Grade.CORRECT if correct else Grade.INCORRECT
        if self.state.mode is Mode.QUIZ:
            if correct:
                self.state.score += 1
            else:
                self.queue.push(new_entry(term))
        logger.debug(f"{self.state.mode.value}: '{term.text}' graded {self.state.last_grade.value}")
        prompt_id = self._prompt_id
        self._settle_handle = self.scheduler.call_later(
            self.settle_delay, lambda: self.dispatch(SettleElapsed(prompt_id))
        )
        self._notify()

    def _settle(self) -> None:
        if self.state.mode is Mode.QUIZ:
            if self.state.cursor < len(self.state.terms) - 1:
                self.state.cursor += 1
                self._prepare_prompt()
                self._notify()
            else:
                self._enter_result()
            return
        # retest
        if self.state.last_grade is Grade.CORRECT:
            passed = self.queue.pop_head()
            logger.debug(f"'{passed.term.text}' passed its retest")
            if self.queue.size() > 0:
                self._enter_punishment()
            else:
                self._commit_day()
                self._enter_plan()
        else:
            self.queue.replace_head(escalate(self.queue.peek_head()))
            logger.debug(
                f"'{self.queue.peek_head().term.text}' failed its retest, "
                f"now {self.queue.peek_head().required_count} copies"
            )
            self._enter_punishment()
        self._notify()

    # --- Punishment ---

    def _enter_punishment(self) -> None:
        self.timer.stop()
        head = self.queue.peek_head()
        self.queue.replace_head(replace(head, current_count=0))
        self.state.mode = Mode.PUNISHMENT
        self.state.answer = ""
        self.state.last_grade = Grade.NONE
        logger.debug(f"Punishment for '{head.term.text}': {head.required_count} copies")

    def _copy_out(self, line: str) -> None:
        entry = self.queue.peek_head()
        self.state.answer = ""
        if matches_copy_out(entry, line):
            entry = replace(entry, current_count=entry.current_count + 1)
            self.queue.replace_head(entry)
            if entry.is_complete:
                self.state.mode = Mode.RETEST
                self._prepare_prompt()
                logger.debug(f"Retest for '{entry.term.text}'")
        self._notify()

    # --- Leaving ---

    def _enter_result(self) -> None:
        self.timer.stop()
        self.state.mode = Mode.RESULT
        self.state.answer = ""
        self.state.last_grade = Grade.NONE
        logger.debug(f"Result: {self.state.score}/{len(self.state.terms)}, {self.queue.size()} to punish")
        self._notify()

    def _enter_plan(self) -> None:
        self._teardown()
        self.queue.clear()
        self.state = SessionState(mode=Mode.PLAN, topic_id=self.state.topic_id)

    def _commit_day(self) -> None:
        key = self.state.day_unit.key
        if key not in self.completed:
            self.completed.add(key)
            logger.debug(f"Day {key} completed")
        # always saved; the stored copy may be behind after a failed write
        self.store.save(self.completed)

    def leave_session(self) -> None:
        """Abandon the current day and return to the plan without committing."""
        if self.state.mode in (Mode.SELECT, Mode.PLAN):
            return
        self._enter_plan()
        self._notify()

    def reset_progress(self) -> None:
        self.completed.clear()
        self.store.clear()
        self._notify()

    def _teardown(self) -> None:
        self.timer.stop()
        if self._settle_handle is not None:
            self._settle_handle.cancel()
            self._settle_handle = None
        # invalidate anything already queued for the old prompt
        self._prompt_id += 1
