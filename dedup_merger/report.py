"""Reporting of errors, duplicates and conflicts found during a merge."""

import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional

from .models import EventKind, ReportEvent

ERROR_LOG_NAME = "errors"
DUPLICATE_LOG_NAME = "duplicates"
CONFLICT_LOG_NAME = "conflicts"


def format_exception_detail(exc: BaseException) -> str:
    """Render an exception and its traceback as text."""
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip()


def already_exists_message(path, existing_path) -> str:
    """Message shared by duplicate and conflict events."""
    return f"{path} already exists in {existing_path}"


def make_time_mark(now: Optional[datetime] = None) -> str:
    """Time mark used to make log file names unique per run."""
    now = now or datetime.now()
    return now.strftime("%Y-%m-%d-%H-%M-%S-") + f"{now.microsecond // 1000:03d}"


class ReportSink:
    """
    Receiver of merge events.

    Subclasses implement ``record``; the helpers build the events.
    """

    def record(self, event: ReportEvent) -> None:
        raise NotImplementedError

    def error(self, message: str, detail: Optional[str] = None,
              path: Optional[Path] = None) -> None:
        self.record(ReportEvent(
            kind=EventKind.ERROR,
            message=message,
            path=str(path) if path is not None else None,
            detail=detail,
        ))

    def duplicate(self, path: Path, existing_path: Path) -> None:
        self.record(ReportEvent(
            kind=EventKind.DUPLICATE,
            message=already_exists_message(path, existing_path),
            path=str(path),
            existing_path=str(existing_path),
        ))

    def conflict(self, path: Path, existing_path: Path) -> None:
        self.record(ReportEvent(
            kind=EventKind.CONFLICT,
            message=already_exists_message(path, existing_path),
            path=str(path),
            existing_path=str(existing_path),
        ))


class MemoryReportSink(ReportSink):
    """Keeps every event in memory."""

    def __init__(self):
        self.events: list[ReportEvent] = []

    def record(self, event: ReportEvent) -> None:
        self.events.append(event)

    def _of_kind(self, kind: EventKind) -> list[ReportEvent]:
        return [e for e in self.events if e.kind is kind]

    @property
    def errors(self) -> list[ReportEvent]:
        return self._of_kind(EventKind.ERROR)

    @property
    def duplicates(self) -> list[ReportEvent]:
        return self._of_kind(EventKind.DUPLICATE)

    @property
    def conflicts(self) -> list[ReportEvent]:
        return self._of_kind(EventKind.CONFLICT)


class FileReportSink(ReportSink):
    """
    Appends events to timestamped text files, one line per event.

    Each stream gets its own file in ``log_root``:
    ``errors-<mark>.txt``, ``duplicates-<mark>.txt`` and
    ``conflicts-<mark>.txt``. Files are only created once a first event of
    their kind is recorded. Events are echoed to the console unless
    ``show_console`` is false.
    """

    def __init__(self, log_root: Path, show_console: bool = True,
                 time_mark: Optional[str] = None, encoding: str = "utf-8"):
        self.log_root = Path(log_root)
        self.show_console = show_console
        self.encoding = encoding
        self.time_mark = time_mark or make_time_mark()
        self.counts = {kind: 0 for kind in EventKind}

    def log_path(self, kind: EventKind) -> Path:
        names = {
            EventKind.ERROR: ERROR_LOG_NAME,
            EventKind.DUPLICATE: DUPLICATE_LOG_NAME,
            EventKind.CONFLICT: CONFLICT_LOG_NAME,
        }
        return self.log_root / f"{names[kind]}-{self.time_mark}.txt"

    def record(self, event: ReportEvent) -> None:
        self.counts[event.kind] += 1
        timestamp = datetime.now().isoformat(timespec="seconds")
        lines = [f"{timestamp} {event.message}"]
        if event.detail:
            lines.extend(event.detail.splitlines())

        try:
            self.log_root.mkdir(parents=True, exist_ok=True)
            with open(self.log_path(event.kind), "a", encoding=self.encoding) as f:
                f.write("\n".join(lines) + "\n")
        except OSError as e:
            # The log itself is unwritable; the console is all that is left.
            print(f"Could not write to log {self.log_path(event.kind)}: {e}", file=sys.stderr)

        if self.show_console:
            stream = sys.stderr if event.kind is EventKind.ERROR else sys.stdout
            print(event.message, file=stream)
            if event.detail and event.kind is EventKind.ERROR:
                print(f"  {event.detail.splitlines()[-1]}", file=stream)

    def written_logs(self) -> list[Path]:
        """Log files that received at least one event."""
        return [self.log_path(kind) for kind in EventKind if self.counts[kind]]
