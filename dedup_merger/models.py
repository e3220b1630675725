"""Data models for dedup merger."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class EventKind(Enum):
    """Streams a report event can belong to."""
    ERROR = "error"
    DUPLICATE = "duplicate"
    CONFLICT = "conflict"


class MergePhase(Enum):
    """States of a merge run."""
    VALIDATING = "validating"
    ANALYZING_SOURCES = "analyzing_sources"
    MERGING_FOLDER = "merging_folder"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class FileRecord:
    """A file path paired with the fingerprint of its content."""
    path: Path
    fingerprint: str

    def relative_to(self, root: Path) -> Path:
        return self.path.relative_to(root)


@dataclass
class ReportEvent:
    """Something worth recording during a merge run."""
    kind: EventKind
    message: str
    path: Optional[str] = None
    existing_path: Optional[str] = None
    detail: Optional[str] = None


@dataclass
class FoldResult:
    """Outcome of folding one source catalog into the destination."""
    source: Path
    copied: list[Path] = field(default_factory=list)
    conflicts: int = 0
    collisions: int = 0
    copy_errors: list = field(default_factory=list)


@dataclass
class MergeSummary:
    """Counters for a complete merge run."""
    destination: Path
    sources: int = 0
    scanned: int = 0
    unique: int = 0
    duplicates: int = 0
    conflicts: int = 0
    copied: int = 0
    collisions: int = 0
    scan_errors: int = 0
    copy_errors: int = 0
    elapsed: float = 0.0

    @property
    def skipped(self) -> int:
        """Unique files that were not copied."""
        return self.conflicts + self.collisions + self.copy_errors
