"""Checks run before any file is touched."""

from pathlib import Path
from typing import Iterable

from .errors import ValidationError
from .fingerprint import new_hasher


def check_sources(sources: Iterable[Path]) -> list[Path]:
    """Check that every source exists and is a directory."""
    checked = []
    for folder in sources:
        folder = Path(folder)
        if not folder.exists():
            raise ValidationError(f"Folder {folder} does not exist", folder)
        if not folder.is_dir():
            raise ValidationError(f"{folder} is not a directory", folder)
        checked.append(folder.resolve())
    if not checked:
        raise ValidationError("No source folder given")
    return checked


def check_destination(destination: Path) -> Path:
    """
    Check the destination, creating it if it does not exist yet.

    An existing destination must be an empty directory.
    """
    destination = Path(destination)
    if destination.exists():
        if not destination.is_dir():
            raise ValidationError(f"{destination} is not a directory", destination)
        if any(destination.iterdir()):
            raise ValidationError(f"{destination} is not empty", destination)
    else:
        try:
            destination.mkdir(parents=True)
        except OSError as e:
            raise ValidationError(
                f"Destination folder {destination.absolute()} does not exist "
                f"and cannot be created: {e}",
                destination
            ) from e
    return destination.resolve()


def _is_within(path: Path, parent: Path) -> bool:
    return path == parent or parent in path.parents


def check_overlap(sources: Iterable[Path], destination: Path) -> None:
    """Refuse a destination that is a source, or nested with one."""
    destination = Path(destination).resolve()
    for folder in sources:
        folder = Path(folder).resolve()
        if _is_within(destination, folder):
            raise ValidationError(
                f"Destination {destination} is inside source folder {folder}", destination
            )
        if _is_within(folder, destination):
            raise ValidationError(
                f"Source folder {folder} is inside destination {destination}", folder
            )


def check_algorithm(algorithm: str) -> None:
    """Check that ``algorithm`` names a supported hash."""
    try:
        new_hasher(algorithm)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def check_log_dir(log_dir: Path, sources: Iterable[Path], destination: Path) -> None:
    """Refuse a log directory inside the destination or inside a source."""
    log_dir = Path(log_dir).resolve()
    destination = Path(destination).resolve()
    if _is_within(log_dir, destination):
        raise ValidationError(
            f"Log directory {log_dir} is inside destination {destination}", log_dir
        )
    for folder in sources:
        folder = Path(folder).resolve()
        if _is_within(log_dir, folder):
            raise ValidationError(
                f"Log directory {log_dir} is inside source folder {folder}", log_dir
            )
