"""Exceptions raised by dedup merger."""

from pathlib import Path


class MergerError(Exception):
    """Base class for dedup merger errors."""


class ValidationError(MergerError):
    """A source or the destination is unusable; the run cannot start."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path


class FingerprintError(MergerError):
    """A file could not be read while computing its fingerprint."""

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"Error hashing file {path}: {cause}")
        self.path = path
        self.cause = cause
