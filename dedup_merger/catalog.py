"""Per-folder content catalog."""

import logging
import os
from pathlib import Path
from typing import Callable, Iterator, Optional

from tqdm import tqdm

from .errors import FingerprintError
from .fingerprint import DEFAULT_ALGORITHM, fingerprint
from .models import FileRecord
from .report import ReportSink, format_exception_detail

logger = logging.getLogger(__name__)


class ScanError:
    """Record of a file that failed to scan."""

    def __init__(self, relative_path: str, absolute_path: str, error: str):
        self.relative_path = relative_path
        self.absolute_path = absolute_path
        self.error = error


def _sorted_entries(
    folder: Path,
    on_error: Optional[Callable[[Path, OSError], None]]
) -> list[os.DirEntry]:
    """List a directory's entries sorted by name, or [] if it cannot be read."""
    try:
        with os.scandir(folder) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as e:
        if on_error is not None:
            on_error(Path(folder), e)
        return []


def iter_files(
    root: Path,
    on_error: Optional[Callable[[Path, OSError], None]] = None
) -> Iterator[Path]:
    """
    Yield every regular file under ``root`` in pre-order.

    Entries of a directory are visited in sorted name order, so the same
    tree always produces the same sequence. Symlinks, directories and
    special files are not yielded, and symlinked directories are not
    followed. Directories that cannot be listed are passed to ``on_error``
    and skipped. Open directories are kept on an explicit stack rather than
    the call stack, so any depth can be walked.
    """
    stack = [iter(_sorted_entries(root, on_error))]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        try:
            if entry.is_symlink():
                continue
            if entry.is_dir(follow_symlinks=False):
                stack.append(iter(_sorted_entries(Path(entry.path), on_error)))
            elif entry.is_file(follow_symlinks=False):
                yield Path(entry.path)
        except OSError as e:
            if on_error is not None:
                on_error(Path(entry.path), e)


class FolderCatalog:
    """
    Index of one folder's files keyed by content fingerprint.

    The first file seen with a given fingerprint is its canonical holder and
    is never replaced; later files with the same fingerprint are duplicates.
    Every visited file, duplicate or not, is kept in the path lookup.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self._by_fingerprint: dict[str, FileRecord] = {}
        self._by_path: dict[Path, str] = {}
        self.errors: list[ScanError] = []

    def __len__(self) -> int:
        return len(self._by_path)

    def __repr__(self) -> str:
        return (f"FolderCatalog({str(self.root)!r}, files={len(self._by_path)}, "
                f"unique={len(self._by_fingerprint)})")

    def add_record(self, path: Path, fp: str) -> Optional[Path]:
        """
        Add a file to the catalog.

        Returns:
            None if ``fp`` is new to this folder, otherwise the path of the
            file already holding that content.
        """
        path = Path(path)
        existing = self._by_fingerprint.get(fp)
        if existing is None:
            self._by_fingerprint[fp] = FileRecord(path, fp)
        self._by_path[path] = fp
        return existing.path if existing is not None else None

    def contains(self, fp: str) -> Optional[Path]:
        """Return the canonical path holding ``fp``, or None."""
        record = self._by_fingerprint.get(fp)
        return record.path if record is not None else None

    def fingerprint_of(self, path: Path) -> Optional[str]:
        """Fingerprint of any visited file, duplicates included."""
        return self._by_path.get(Path(path))

    def unique_entries(self) -> list[FileRecord]:
        """Canonical holders, in the order they were first seen."""
        return list(self._by_fingerprint.values())

    def duplicates(self) -> list[tuple[Path, Path]]:
        """(duplicate path, canonical path) pairs, in visit order."""
        pairs = []
        for path, fp in self._by_path.items():
            canonical = self._by_fingerprint[fp].path
            if path != canonical:
                pairs.append((path, canonical))
        return pairs

    @classmethod
    def build(
        cls,
        root: Path,
        sink: ReportSink,
        algorithm: str = DEFAULT_ALGORITHM,
        desc: str = "Scanning",
        show_progress: bool = True
    ) -> "FolderCatalog":
        """
        Walk ``root`` and catalog every regular file in it.

        Same-folder duplicates are reported to ``sink`` as duplicate events.
        Files that cannot be fingerprinted are reported as errors and left
        out of the catalog.
        """
        catalog = cls(Path(root).resolve())

        def on_walk_error(path: Path, error: OSError) -> None:
            catalog._record_error(path, error, sink, f"Error reading {path}")

        # First, collect all file paths
        all_files = list(iter_files(catalog.root, on_walk_error))

        # Then process with progress bar
        with tqdm(all_files, desc=desc, unit="file", disable=not show_progress) as pbar:
            for path in pbar:
                try:
                    fp = fingerprint(path, algorithm)
                except FingerprintError as e:
                    catalog._record_error(path, e.cause, sink, str(e))
                    continue

                logger.debug("%s : %s", path, fp)
                existing = catalog.add_record(path, fp)
                if existing is not None:
                    sink.duplicate(path, existing)

        return catalog

    def _record_error(self, path: Path, error: OSError, sink: ReportSink,
                      message: str) -> None:
        try:
            rel_path = path.relative_to(self.root).as_posix()
        except ValueError:
            rel_path = str(path)
        self.errors.append(ScanError(rel_path, str(path), str(error)))
        sink.error(message, detail=format_exception_detail(error), path=path)
