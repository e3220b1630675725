"""Tests for dedup_merger.cli module."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from dedup_merger.cli import build_parser, configure_logging, main, parse_args, split_paths


class TestParseArgs:
    """Tests for parse_args function."""

    def test_parse_paths(self):
        args = parse_args(["folder1", "folder2", "folder3", "output"])

        assert args.paths == [Path("folder1"), Path("folder2"), Path("folder3"), Path("output")]

    def test_defaults(self):
        args = parse_args(["f1", "f2", "out"])

        assert args.algorithm == "sha256"
        assert args.log_dir is None
        assert args.quiet is False
        assert args.no_progress is False
        assert args.verbose is False

    def test_hash_option(self):
        args = parse_args(["--hash", "xxh128", "f1", "f2", "out"])
        assert args.algorithm == "xxh128"

    def test_unknown_hash_rejected(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--hash", "crc32", "f1", "f2", "out"])
        assert exc_info.value.code == 2

    def test_log_dir_short_flag(self):
        args = parse_args(["-l", "logs", "f1", "f2", "out"])
        assert args.log_dir == Path("logs")

    def test_flags(self):
        args = parse_args(["-q", "--no-progress", "-v", "f1", "f2", "out"])

        assert args.quiet is True
        assert args.no_progress is True
        assert args.verbose is True


class TestSplitPaths:
    """Tests for split_paths function."""

    def test_last_path_is_destination(self):
        sources, destination = split_paths(
            build_parser(), [Path("a"), Path("b"), Path("c"), Path("dest")]
        )

        assert sources == [Path("a"), Path("b"), Path("c")]
        assert destination == Path("dest")

    def test_single_source(self):
        sources, destination = split_paths(build_parser(), [Path("a"), Path("b"), Path("dest")])

        assert sources == [Path("a"), Path("b")]
        assert destination == Path("dest")

    @pytest.mark.parametrize("paths", [[], [Path("only")]])
    def test_too_few_paths_prints_usage(self, paths, capsys):
        with pytest.raises(SystemExit) as exc_info:
            split_paths(build_parser(), paths)

        assert exc_info.value.code == 2
        assert "usage:" in capsys.readouterr().out

    def test_two_paths_is_missing_destination(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            split_paths(build_parser(), [Path("a"), Path("b")])

        assert exc_info.value.code == 2
        assert "Missing destination" in capsys.readouterr().out


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_verbose_level(self):
        with patch("dedup_merger.cli.logging.basicConfig") as basic_config:
            configure_logging(True)
        assert basic_config.call_args.kwargs["level"] == logging.DEBUG

    def test_default_level(self):
        with patch("dedup_merger.cli.logging.basicConfig") as basic_config:
            configure_logging(False)
        assert basic_config.call_args.kwargs["level"] == logging.WARNING


class TestMain:
    """Tests for main function."""

    def test_main_success(self, sample_sources, temp_dir, capsys):
        source1, source2, output = sample_sources
        log_dir = temp_dir / "logs"

        main([str(source1), str(source2), str(output),
              "--log-dir", str(log_dir), "--no-progress"])

        assert sorted(p.name for p in output.iterdir()) == ["a.txt", "d.txt"]
        assert len(list(log_dir.glob("duplicates-*.txt"))) == 1
        assert len(list(log_dir.glob("conflicts-*.txt"))) == 1
        assert list(log_dir.glob("errors-*.txt")) == []

        out = capsys.readouterr().out
        assert "DEDUP MERGER" in out
        assert "Log saved to:" in out

    def test_main_logs_next_to_destination_by_default(self, sample_sources, temp_dir):
        source1, source2, output = sample_sources

        main([str(source1), str(source2), str(output), "--no-progress", "--quiet"])

        assert len(list(temp_dir.glob("conflicts-*.txt"))) == 1

    def test_main_quiet(self, sample_sources, temp_dir, capsys):
        source1, source2, output = sample_sources

        main([str(source1), str(source2), str(output), "-q", "--no-progress",
              "--log-dir", str(temp_dir / "logs")])

        assert "already exists in" not in capsys.readouterr().out

    def test_main_invalid_folder(self, temp_dir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([str(temp_dir / "nonexistent"), str(temp_dir), str(temp_dir / "out")])

        assert exc_info.value.code == 1
        assert "Error: " in capsys.readouterr().out

    def test_main_non_empty_output(self, sample_sources):
        source1, source2, output = sample_sources
        output.mkdir()
        (output / "existing.txt").write_text("existing")

        with pytest.raises(SystemExit) as exc_info:
            main([str(source1), str(source2), str(output)])

        assert exc_info.value.code == 1
        assert [p.name for p in output.iterdir()] == ["existing.txt"]

    def test_main_log_dir_inside_destination(self, sample_sources, capsys):
        source1, source2, output = sample_sources

        with pytest.raises(SystemExit) as exc_info:
            main([str(source1), str(source2), str(output), "-q", "--no-progress",
                  "--log-dir", str(output / "logs")])

        assert exc_info.value.code == 1
        assert "Log directory" in capsys.readouterr().out
        assert not output.exists()

    def test_main_log_dir_inside_source(self, sample_sources):
        source1, source2, output = sample_sources

        with pytest.raises(SystemExit) as exc_info:
            main([str(source1), str(source2), str(output), "-q", "--no-progress",
                  "--log-dir", str(source2)])

        assert exc_info.value.code == 1
        assert sorted(p.name for p in source2.iterdir()) == ["c.txt", "d.txt"]

    def test_main_missing_destination(self, sample_sources):
        source1, source2, _ = sample_sources

        with pytest.raises(SystemExit) as exc_info:
            main([str(source1), str(source2)])

        assert exc_info.value.code == 2

    def test_main_keyboard_interrupt(self, sample_sources, capsys):
        source1, source2, output = sample_sources

        with patch("dedup_merger.cli.MergeEngine.run", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                main([str(source1), str(source2), str(output)])

        assert exc_info.value.code == 1
        assert "Interrupted!" in capsys.readouterr().out
