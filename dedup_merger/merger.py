"""Core merge logic."""

import logging
import os
import shutil
import time
from pathlib import Path
from typing import Sequence

from .catalog import FolderCatalog
from .errors import ValidationError
from .fingerprint import DEFAULT_ALGORITHM, long_path
from .models import FoldResult, MergePhase, MergeSummary
from .report import ReportSink, format_exception_detail
from .validation import (
    check_algorithm,
    check_destination,
    check_log_dir,
    check_overlap,
    check_sources,
)

logger = logging.getLogger(__name__)


class CopyError:
    """Record of a file that failed to copy."""

    def __init__(self, relative_path: str, src_path: str, dst_path: str, error: str,
                 detail: str | None = None):
        self.relative_path = relative_path
        self.src_path = src_path
        self.dst_path = dst_path
        self.error = error
        self.detail = detail


def copy_file(src: Path, dst: Path) -> None:
    """
    Copy a file's content, creating parent directories if needed.

    The destination is opened in exclusive mode: FileExistsError is raised
    rather than overwriting an existing file. A partially written copy is
    removed.
    """
    # Use long path format on Windows
    dst_long = long_path(dst)
    os.makedirs(os.path.dirname(dst_long), exist_ok=True)
    with open(long_path(src), 'rb') as fsrc, open(dst_long, 'xb') as fdst:
        try:
            shutil.copyfileobj(fsrc, fdst)
        except OSError:
            fdst.close()
            os.remove(dst_long)
            raise


def safe_copy_file(src: Path, dst: Path, relative_path: str) -> CopyError | None:
    """
    Copy a file safely, returning a CopyError if the copy fails.
    Returns None on success.
    """
    try:
        copy_file(src, dst)
        return None
    except (OSError, shutil.Error) as e:
        return CopyError(relative_path, str(src), str(dst), str(e),
                         detail=format_exception_detail(e))


def _banner(title: str) -> None:
    """Print a section title between two rules."""
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


class MergeEngine:
    """
    Merges source folders into a destination without duplicating content.

    Sources are folded into the destination one at a time, in the order
    given. Before each fold the destination is cataloged again from disk, so
    content copied by an earlier source counts as already present for every
    later one. Content already in the destination is reported as a conflict
    and never copied again; nothing in the destination is ever overwritten.
    """

    def __init__(
        self,
        sink: ReportSink,
        algorithm: str = DEFAULT_ALGORITHM,
        show_progress: bool = True
    ):
        self.sink = sink
        self.algorithm = algorithm
        self.show_progress = show_progress
        self.phase: MergePhase | None = None
        self.current_folder: int | None = None

    def validate(
        self,
        sources: Sequence[Path],
        destination: Path,
        log_dir: Path | None = None
    ) -> tuple[list[Path], Path]:
        """
        Check the hash algorithm, sources, destination and log directory.

        The destination is created if missing, once every other check passed.
        """
        self.phase = MergePhase.VALIDATING
        try:
            check_algorithm(self.algorithm)
            checked_sources = check_sources(sources)
            check_overlap(checked_sources, destination)
            if log_dir is not None:
                check_log_dir(log_dir, checked_sources, destination)
            checked_destination = check_destination(destination)
        except ValidationError:
            self.phase = MergePhase.FAILED
            raise
        for folder in checked_sources:
            print(f"Checked {folder}")
        print(f"Checked {checked_destination}")
        return checked_sources, checked_destination

    def analyze_folder(self, folder: Path, desc: str = "Scanning") -> FolderCatalog:
        """Build a catalog of ``folder`` with this engine's hash and progress settings."""
        return FolderCatalog.build(
            folder, self.sink,
            algorithm=self.algorithm,
            desc=desc,
            show_progress=self.show_progress
        )

    def analyze_sources(self, sources: Sequence[Path]) -> list[FolderCatalog]:
        """Catalog every source folder, preserving their order."""
        self.phase = MergePhase.ANALYZING_SOURCES
        catalogs = []
        for i, folder in enumerate(sources, start=1):
            print(f"\nScanning folder {i}: {folder}")
            catalog = self.analyze_folder(folder, f"Scanning folder {i}")
            catalogs.append(catalog)
            print(f"  {len(catalog)} files, {len(catalog.unique_entries())} unique")
            if catalog.errors:
                print(f"  Warning: {len(catalog.errors)} files could not be scanned")
        return catalogs

    def merge_folder(
        self,
        catalog: FolderCatalog,
        destination_catalog: FolderCatalog,
        destination: Path
    ) -> FoldResult:
        """
        Fold one analyzed source into the destination.

        ``destination_catalog`` must reflect the destination's current
        content on disk.
        """
        result = FoldResult(source=catalog.root)

        for record in catalog.unique_entries():
            existing = destination_catalog.contains(record.fingerprint)
            if existing is not None:
                self.sink.conflict(record.path, existing)
                result.conflicts += 1
                continue

            relative_path = record.relative_to(catalog.root)
            target = destination / relative_path
            if os.path.lexists(target):
                self.sink.error(
                    f"Cannot copy file {record.path} to destination: "
                    f"{target} already exists with different content",
                    path=record.path
                )
                result.collisions += 1
                continue

            error = safe_copy_file(record.path, target, relative_path.as_posix())
            if error:
                self.sink.error(
                    f"Cannot copy file {record.path} to destination",
                    detail=error.detail,
                    path=record.path
                )
                result.copy_errors.append(error)
            else:
                logger.debug("Copied %s -> %s", record.path, target)
                result.copied.append(target)

        return result

    def run(
        self,
        sources: Sequence[Path],
        destination: Path,
        log_dir: Path | None = None
    ) -> MergeSummary:
        """
        Merge ``sources`` into ``destination``.

        ``log_dir`` is where the report sink writes, if anywhere; it may not
        lie inside the destination or a source.

        Raises:
            ValidationError: if the hash algorithm, a source, the destination
                or the log directory is unusable. No file has been touched in
                that case.
        """
        started = time.monotonic()
        sources, destination = self.validate(sources, destination, log_dir)
        summary = MergeSummary(destination=destination, sources=len(sources))

        # =====================================================================
        # PHASE 1: Analyze every source folder
        # =====================================================================
        _banner("PHASE 1: Analyzing source folders")
        print(f"Using {self.algorithm} for file hashing")
        catalogs = self.analyze_sources(sources)

        for catalog in catalogs:
            summary.scanned += len(catalog)
            summary.unique += len(catalog.unique_entries())
            summary.duplicates += len(catalog.duplicates())
            summary.scan_errors += len(catalog.errors)

        # =====================================================================
        # PHASE 2: Fold each source into the destination, in order
        # =====================================================================
        _banner("PHASE 2: Merging folders into destination")

        for i, catalog in enumerate(catalogs, start=1):
            self.phase = MergePhase.MERGING_FOLDER
            self.current_folder = i
            print(f"\n[{i}/{len(catalogs)}] Merging {catalog.root}")

            # The previous fold changed the destination on disk
            destination_catalog = self.analyze_folder(destination, "Scanning destination")
            summary.scan_errors += len(destination_catalog.errors)

            result = self.merge_folder(catalog, destination_catalog, destination)
            summary.copied += len(result.copied)
            summary.conflicts += result.conflicts
            summary.collisions += result.collisions
            summary.copy_errors += len(result.copy_errors)

            print(f"  Copied: {len(result.copied)}, conflicts: {result.conflicts}")
            if result.collisions:
                print(f"  Warning: {result.collisions} files skipped, "
                      f"their path is taken by different content")
            if result.copy_errors:
                print(f"  Warning: {len(result.copy_errors)} files could not be copied")

        self.phase = MergePhase.DONE
        self.current_folder = None
        summary.elapsed = time.monotonic() - started
        print_summary(summary)
        return summary


def print_summary(summary: MergeSummary) -> None:
    """Print the end-of-run report."""
    _banner("MERGE COMPLETE!")
    print(f"Output folder: {summary.destination}")
    print(f"Source folders: {summary.sources}")
    print(f"Files scanned: {summary.scanned}")
    print(f"  - Unique within their folder: {summary.unique}")
    print(f"  - Duplicates within their folder: {summary.duplicates}")
    print(f"Files copied: {summary.copied}")
    print(f"  - Conflicts (content already in destination): {summary.conflicts}")
    if summary.collisions:
        print(f"  - Path collisions (skipped): {summary.collisions}")
    if summary.copy_errors:
        print(f"  - Copy errors (skipped): {summary.copy_errors}")
    print(f"Files not copied: {summary.skipped}")
    if summary.scan_errors:
        print(f"Files that could not be scanned: {summary.scan_errors}")
    print(f"Elapsed: {summary.elapsed:.1f}s")
