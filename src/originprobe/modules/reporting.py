"""Result sinks that receive scan progress and matches."""

from typing import Protocol

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    ProgressColumn,
    Task,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.text import Text

from .models import MatchRecord


class ResultSink(Protocol):
    """Receiver for coordinator events."""

    def on_progress(self, completed: int, total: int, matched: int) -> None:
        """Throttled progress tick."""
        ...

    def on_match(self, record: MatchRecord) -> None:
        """Called once per accepted qualifying outcome."""
        ...


class NullSink:
    """Sink that ignores every event."""

    def on_progress(self, completed: int, total: int, matched: int) -> None:
        return None

    def on_match(self, record: MatchRecord) -> None:
        return None


class CollectingSink:
    """Sink that keeps every event in memory."""

    def __init__(self) -> None:
        self.progress: list[tuple[int, int, int]] = []
        self.matches: list[MatchRecord] = []

    def on_progress(self, completed: int, total: int, matched: int) -> None:
        self.progress.append((completed, total, matched))

    def on_match(self, record: MatchRecord) -> None:
        self.matches.append(record)


class _RateColumn(ProgressColumn):
    """Probes completed per second."""

    def render(self, task: Task) -> Text:
        speed = task.finished_speed or task.speed or 0
        return Text(f"{speed:,.0f} IPs/sec", style="progress.data.speed")


class RichResultSink:
    """Progress bar plus FOUND lines on a rich Console.

    Use as a context manager so the live progress display is torn down even
    when the scan fails.
    """

    def __init__(self, console: Console, description: str = "Scanning", stop_on_find: bool = True):
        self.console = console
        self.stop_on_find = stop_on_find
        self.progress = Progress(
            TimeElapsedColumn(),
            BarColumn(bar_width=40, style="blue", complete_style="cyan"),
            MofNCompleteColumn(),
            TaskProgressColumn(),
            TextColumn("|"),
            _RateColumn(),
            TextColumn("| ETA:"),
            TimeRemainingColumn(),
            console=console,
            transient=True,
        )
        self.description = description
        self._task: TaskID | None = None

    def __enter__(self) -> "RichResultSink":
        self.progress.start()
        self._task = self.progress.add_task(self.description, total=None)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.progress.stop()

    def on_progress(self, completed: int, total: int, matched: int) -> None:
        if self._task is None:
            return
        self.progress.update(self._task, completed=completed, total=total)

    def on_match(self, record: MatchRecord) -> None:
        self.console.print(
            f"\n[bold green]✓ FOUND:[/] [bold yellow]{record.address}[/] - {record.describe()}"
        )
        if self.stop_on_find:
            self.console.print(
                "\n[bright_yellow]⚠[/] Backend IP found! Stopping scan immediately...\n"
            )
