"""Content fingerprinting of single files."""

import hashlib
import os
from pathlib import Path

import xxhash

from .errors import FingerprintError

DEFAULT_ALGORITHM = "sha256"

HASH_ALGORITHMS = {
    "sha256": hashlib.sha256,
    "sha512": hashlib.sha512,
    "blake2b": hashlib.blake2b,
    "xxh64": xxhash.xxh64,
    "xxh128": xxhash.xxh128,
}


def long_path(path: Path) -> str:
    """Convert path to long path format on Windows to handle paths > 260 chars."""
    path_str = str(Path(path).resolve())
    if os.name == 'nt' and not path_str.startswith('\\\\?\\'):
        return '\\\\?\\' + path_str
    return path_str


def new_hasher(algorithm: str = DEFAULT_ALGORITHM):
    """Return a fresh hash object for ``algorithm``."""
    try:
        return HASH_ALGORITHMS[algorithm]()
    except KeyError:
        raise ValueError(
            f"Unknown hash algorithm: {algorithm!r} "
            f"(choose from {', '.join(HASH_ALGORITHMS)})"
        ) from None


def compute_file_hash(
    file_path: Path,
    algorithm: str = DEFAULT_ALGORITHM,
    chunk_size: int = 65536
) -> str:
    """Compute the hex digest of a file's content.

    OSError from opening or reading the file propagates unchanged.
    """
    hasher = new_hasher(algorithm)
    with open(long_path(file_path), 'rb') as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)
    return hasher.hexdigest()


def fingerprint(
    file_path: Path,
    algorithm: str = DEFAULT_ALGORITHM,
    chunk_size: int = 65536
) -> str:
    """
    Return the content fingerprint of a regular file.

    The result only depends on the bytes of the file, so identical content
    gets the same fingerprint whatever its name, location or timestamps.

    Raises:
        FingerprintError: if the file cannot be read (permission denied,
            file vanished, device error).
    """
    try:
        return compute_file_hash(file_path, algorithm, chunk_size)
    except OSError as e:
        raise FingerprintError(Path(file_path), e) from e
