"""Interactive CLI application."""
import asyncio
import sys
from contextlib import suppress
from pathlib import Path

from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from vocab_drill.constants import SETTLE_DELAY, THINKING_TIME, WORDS_PER_DAY
from vocab_drill.db import init_db, DEFAULT_DB_PATH
from vocab_drill.importer import import_file
from vocab_drill.models import Grade, Mode, SessionState, TIMED_MODES
from vocab_drill.progress import ProgressStore
from vocab_drill.quiz import score_percent
from vocab_drill.seed import seed_all, is_seeded
from vocab_drill.session import SessionStateMachine
from vocab_drill.vocab import VocabSource

console = Console()

EXIT_WORDS = ("q", "menu")
DRILL_MODES = (Mode.QUIZ, Mode.PUNISHMENT, Mode.RETEST)
COUNTDOWN_MARKS = (5, 3, 2, 1)
POLL_INTERVAL = 0.05


class SessionExitRequested(Exception):
    """Raised when the learner asks to leave the current day."""


class LineReader:
    """Reads typed lines on a worker thread so timers keep running on the loop.

    At most one read is in flight. A read still waiting when a drill ends
    stays pending and answers the next prompt, so stdin never has two readers.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.loop = loop
        self._future = None

    @property
    def pending(self) -> bool:
        return self._future is not None

    def next_line(self) -> asyncio.Future:
        if self._future is None:
            self._future = self.loop.run_in_executor(None, console.input, "> ")
        return self._future

    def take(self) -> str:
        future, self._future = self._future, None
        return future.result()

    def wait(self) -> str:
        """Block outside the loop until the pending line arrives."""
        self.loop.run_until_complete(asyncio.wait({self.next_line()}))
        return self.take()

    def discard_ready(self) -> None:
        """Drop a line that has already arrived but was never handled."""
        if self._future is not None and self._future.done():
            self._future = None


def ask(prompt: str, reader: LineReader | None = None, **kwargs) -> str:
    if reader is not None and reader.pending:
        console.print(prompt, end=" ")
        return reader.wait() or kwargs.get("default", "")
    return Prompt.ask(prompt, **kwargs)


def session_prompt(prompt: str, reader: LineReader | None = None, **kwargs) -> str:
    answer = ask(prompt, reader, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def configure_logging(level: str = "WARNING") -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )


def show_welcome():
    console.print(Panel(
        "[bold]Vocab Drill[/bold]\n[dim]Study, quiz, and copy out what you miss[/dim]",
        title="Welcome", border_style="blue",
    ))


# --- Drill rendering ---


class DrillView:
    """Prints quiz, punishment and retest screens as the session changes.

    Ticks only print at a few countdown marks so the terminal stays readable.
    """

    def __init__(self, machine: SessionStateMachine):
        self.machine = machine
        self._last = None

    def __call__(self, state: SessionState) -> None:
        if state.mode not in DRILL_MODES:
            self._last = None
            return
        entry = self.machine.punishment_entry
        signature = (
            state.mode, state.cursor, state.last_grade,
            entry.current_count if entry else None,
            entry.required_count if entry else None,
        )
        if signature != self._last:
            self._last = signature
            self.render(state)
        elif state.mode in TIMED_MODES and state.time_remaining in COUNTDOWN_MARKS:
            console.print(f"  [red]{state.time_remaining}s left[/red]")

    def render(self, state: SessionState) -> None:
        term = self.machine.current_term
        if term is None:
            return
        if state.last_grade is Grade.CORRECT:
            console.print("[green]Correct![/green]")
            return
        if state.last_grade is Grade.INCORRECT:
            shown = escape(state.answer) if state.answer else "(no answer)"
            console.print(f"[red]Incorrect.[/red] You wrote {shown}. Answer: [green]{term.text}[/green]")
            return
        if state.mode is Mode.QUIZ:
            total = len(state.terms)
            console.print(Panel(
                f"{term.meaning}\n[dim]({term.category})[/dim]" if term.category else term.meaning,
                title=f"Question {state.cursor + 1}/{total} — {state.time_remaining}s",
                border_style="cyan",
            ))
        elif state.mode is Mode.RETEST:
            console.print(Panel(
                term.meaning,
                title=f"Retest — {state.time_remaining}s",
                border_style="dark_orange",
            ))
        else:
            entry = self.machine.punishment_entry
            console.print(
                f"[yellow]Copy out[/yellow] [bold]{entry.expected_text}[/bold] "
                f"[dim]({entry.current_count}/{entry.required_count})[/dim]"
            )


async def run_drill(machine: SessionStateMachine, reader: LineReader) -> None:
    """Feed typed lines to the machine until it leaves quiz/punishment/retest.

    Returns as soon as the mode changes, even with a read still waiting; that
    read then answers whichever screen comes next.
    """
    while machine.mode in DRILL_MODES:
        line_future = reader.next_line()
        while not line_future.done():
            if machine.mode not in DRILL_MODES:
                return
            await asyncio.wait({line_future}, timeout=POLL_INTERVAL)
        line = reader.take()
        if line.strip().lower() in EXIT_WORDS:
            machine.leave_session()
            return
        if machine.mode not in DRILL_MODES:
            return
        before = machine.punishment_entry if machine.mode is Mode.PUNISHMENT else None
        machine.submit(line)
        if before is not None and machine.punishment_entry == before:
            console.print("[red]Not quite. Copy it exactly.[/red]")
        while machine.grading_locked and machine.mode in TIMED_MODES:
            await asyncio.sleep(POLL_INTERVAL)


def drive_drill(loop: asyncio.AbstractEventLoop, machine: SessionStateMachine, reader: LineReader) -> None:
    """Run one drill to completion. Ctrl-C cancels it and abandons the day."""
    drill = loop.create_task(run_drill(machine, reader))
    try:
        loop.run_until_complete(drill)
    except KeyboardInterrupt:
        drill.cancel()
        with suppress(asyncio.CancelledError):
            loop.run_until_complete(drill)
        # a line typed before Ctrl-C was meant for the drill
        reader.discard_ready()
        machine.leave_session()
        raise


# --- Screens ---


def cmd_select(machine: SessionStateMachine, db_path: str, reader: LineReader | None = None) -> bool:
    """Topic menu. Returns False when the learner quits."""
    topics = machine.source.list_topics()
    table = Table(title="Topics")
    table.add_column("#", justify="right")
    table.add_column("Topic", style="cyan")
    table.add_column("Words", justify="right")
    table.add_column("Days", justify="right")
    for i, topic in enumerate(topics, 1):
        statuses = machine.day_statuses(topic.id)
        done = sum(1 for s in statuses if s.completed)
        table.add_row(str(i), topic.name, str(topic.term_count), f"{done}/{len(statuses)}")
    console.print(table)
    console.print("[dim]Pick a number, or: import, reset, quit[/dim]")
    choice = ask("\n[bold]>[/bold]", reader).strip().lower()
    if choice in ("quit", "exit", "q"):
        return False
    if choice == "import":
        cmd_import(db_path)
    elif choice == "reset":
        cmd_reset(machine)
    elif choice.isdigit() and 1 <= int(choice) <= len(topics):
        machine.select_topic(topics[int(choice) - 1].id)
    else:
        console.print("[red]Unknown command. Try again.[/red]")
    return True


def cmd_plan(machine: SessionStateMachine, reader: LineReader | None = None) -> None:
    topic = machine.source.get_topic(machine.state.topic_id)
    table = Table(title=f"{topic.name} — {topic.term_count} words")
    table.add_column("Day", justify="right")
    table.add_column("Words", justify="right")
    table.add_column("Status")
    for status in machine.day_statuses():
        if status.completed:
            label = "[green]Done[/green]"
        elif status.locked:
            label = "[dim]Locked[/dim]"
        else:
            label = "[cyan]Open[/cyan]"
        table.add_row(str(status.day_number), str(status.word_count), label)
    console.print(table)
    choice = ask("Day number (or 'back')", reader).strip().lower()
    if choice in ("back", "b", "q"):
        machine.back_to_topics()
    elif choice.isdigit():
        if not machine.start_day(int(choice)):
            console.print(f"[red]Day {choice} is not available yet.[/red]")
    else:
        console.print("[red]Unknown command. Try again.[/red]")


def run_study(machine: SessionStateMachine, reader: LineReader | None = None) -> None:
    state = machine.state
    term = machine.current_term
    if term is None:
        machine.next_card()
        return
    title = f"Day {state.day_unit.day_number}: {state.cursor + 1}/{len(state.terms)}"
    if state.flipped:
        console.print(Panel(term.meaning, title=title, border_style="green"))
    else:
        body = f"[bold]{term.text}[/bold]" + (f"\n[dim]{term.category}[/dim]" if term.category else "")
        console.print(Panel(body, title=title, border_style="cyan"))
    last = state.cursor == len(state.terms) - 1
    hint = "Enter=start quiz" if last else "Enter=next"
    try:
        choice = session_prompt(f"[dim]{hint}, f=flip, b=back, q=leave[/dim]", reader, default="").strip().lower()
    except SessionExitRequested:
        machine.leave_session()
        return
    if choice == "f":
        machine.flip_card()
    elif choice == "b":
        machine.previous_card()
    else:
        if last:
            console.print(f"\n[bold]Quiz[/bold] — type the word for each definition ({THINKING_TIME}s each)\n")
        machine.next_card()


def cmd_result(machine: SessionStateMachine, reader: LineReader | None = None) -> None:
    state = machine.state
    total = len(state.terms)
    console.print(
        f"\n[bold]Score: {state.score}/{total} ({score_percent(state.score, total):.0f}%)[/bold]"
    )
    try:
        if machine.queue.size() == 0:
            session_prompt("[green]All correct![/green] Press Enter to finish the day", reader, default="")
        else:
            table = Table(title="Punishment queue")
            table.add_column("Word", style="red")
            table.add_column("Copies", justify="right")
            for entry in machine.queue:
                table.add_row(entry.term.text, str(entry.required_count))
            console.print(table)
            session_prompt("Press Enter to accept your punishment", reader, default="")
    except SessionExitRequested:
        machine.leave_session()
        return
    was_punished = machine.queue.size() > 0
    machine.accept_result()
    if not was_punished:
        console.print("[green]Day complete![/green]")


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_file(db_path, file_path)
    console.print(f"[green]Imported {result['name']} ({result['term_count']} words)[/green]")


def cmd_reset(machine: SessionStateMachine):
    confirm = Prompt.ask("Erase all progress? This cannot be undone", choices=["y", "n"], default="n")
    if confirm == "y":
        machine.reset_progress()
        console.print("[yellow]Progress cleared.[/yellow]")


def main():
    configure_logging()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    first_run = not is_seeded(db_path)
    if first_run:
        console.print("[dim]Setting up for first use...[/dim]")
    seed_all(db_path)

    loop = asyncio.new_event_loop()
    machine = SessionStateMachine(
        VocabSource(db_path, words_per_day=WORDS_PER_DAY),
        ProgressStore(db_path),
        scheduler=loop,
        settle_delay=SETTLE_DELAY,
    )
    reader = LineReader(loop)
    machine.subscribe(DrillView(machine))

    show_welcome()

    try:
        while True:
            try:
                mode = machine.mode
                if mode is Mode.SELECT:
                    if not cmd_select(machine, db_path, reader):
                        console.print("[dim]See you tomorrow![/dim]")
                        break
                elif mode is Mode.PLAN:
                    cmd_plan(machine, reader)
                elif mode is Mode.STUDY:
                    run_study(machine, reader)
                elif mode in DRILL_MODES:
                    drive_drill(loop, machine, reader)
                elif mode is Mode.RESULT:
                    cmd_result(machine, reader)
            except KeyboardInterrupt:
                machine.leave_session()
                console.print("\n[dim]Use 'quit' to exit.[/dim]")
            except Exception as e:
                logger.opt(exception=e).debug("Command failed")
                console.print(f"[red]Error: {e}[/red]")
    finally:
        loop.close()


if __name__ == "__main__":
    main()
