"""Tests for dotenv_merge.__main__ module."""

import sys
from unittest.mock import patch


class TestMainModule:
    """Tests for __main__.py entry point."""

    def test_main_module_runs(self, sample_files):
        template, destination = sample_files

        with patch.object(sys, "argv", ["prog", str(template), str(destination), "-a"]):
            from dotenv_merge.__main__ import main
            main()

        assert "FEATURE_FLAG=enabled" in destination.read_text()

    def test_main_module_importable(self):
        """Test that __main__ can be imported."""
        import dotenv_merge.__main__ as main_module
        assert hasattr(main_module, "main")
