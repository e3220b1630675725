"""Tests for dedup_merger.__main__ module."""

import sys
from unittest.mock import patch


class TestMainModule:
    """Tests for __main__.py entry point."""

    def test_main_module_runs(self, sample_sources):
        source1, source2, output = sample_sources

        with patch.object(
            sys, "argv",
            ["prog", str(source1), str(source2), str(output), "--no-progress", "--quiet"]
        ):
            from dedup_merger.__main__ import main
            main()

        assert (output / "a.txt").exists()
        assert (output / "d.txt").exists()

    def test_main_module_importable(self):
        """Test that __main__ can be imported."""
        import dedup_merger.__main__ as main_module
        assert hasattr(main_module, "main")
