"""Shared test fixtures."""

import tempfile
from pathlib import Path

import pytest

from dedup_merger.models import FileRecord
from dedup_merger.report import MemoryReportSink


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def memory_sink():
    return MemoryReportSink()


@pytest.fixture
def sample_sources(temp_dir):
    """Two sources sharing content, and a destination that does not exist yet."""
    source1 = temp_dir / "source1"
    source2 = temp_dir / "source2"
    output = temp_dir / "output"

    source1.mkdir()
    source2.mkdir()

    # Same content twice in source1
    (source1 / "a.txt").write_text("hello")
    (source1 / "b.txt").write_text("hello")

    # source2 repeats source1's content and adds its own
    (source2 / "c.txt").write_text("hello")
    (source2 / "d.txt").write_text("world")

    return source1, source2, output


@pytest.fixture
def nested_source(temp_dir):
    """A source with nested folders and one duplicate deep inside."""
    folder = temp_dir / "nested"
    (folder / "docs" / "old").mkdir(parents=True)
    (folder / "photos").mkdir()

    (folder / "readme.txt").write_text("read me")
    (folder / "docs" / "report.txt").write_text("quarterly report")
    (folder / "docs" / "old" / "report-copy.txt").write_text("quarterly report")
    (folder / "photos" / "cat.jpg").write_bytes(bytes(range(256)))

    return folder


@pytest.fixture
def sample_file_record(temp_dir):
    return FileRecord(temp_dir / "sub" / "file.txt", "abc123def456")
