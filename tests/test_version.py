"""Tests for version module."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from richdoc import __version__ as package_version
from richdoc.__main__ import main
from richdoc._version import (
    __version__,
    get_full_version_string,
    get_git_info,
    get_version,
)


class TestVersionModule:
    """Tests for version module functions."""

    def test_version_format(self) -> None:
        """Version should follow semver pattern."""
        parts = __version__.split(".")
        assert len(parts) >= 2
        assert all(p.isdigit() for p in parts[:2])

    def test_package_exports_version(self) -> None:
        assert package_version == __version__

    def test_get_version_returns_version(self) -> None:
        assert get_version() == __version__

    def test_get_git_info_returns_dict(self) -> None:
        """get_git_info should return dict with sha and dirty keys."""
        info = get_git_info()
        assert "sha" in info
        assert "dirty" in info

    def test_get_full_version_string_starts_with_name(self) -> None:
        version_str = get_full_version_string()
        assert version_str.startswith("richdoc ")
        assert __version__ in version_str

    def test_full_version_string_without_git(self, monkeypatch) -> None:
        monkeypatch.setattr("richdoc._version.get_git_info", lambda: {"sha": None, "dirty": None})
        assert get_full_version_string() == f"richdoc {__version__}"

    def test_full_version_string_with_dirty_checkout(self, monkeypatch) -> None:
        monkeypatch.setattr("richdoc._version.get_git_info", lambda: {"sha": "abc1234", "dirty": "true"})
        assert get_full_version_string() == f"richdoc {__version__} (abc1234, dirty)"


class TestVersionCLI:
    """Tests for --version CLI flag."""

    def test_version_flag_returns_zero(self) -> None:
        """--version should return exit code 0."""
        assert main(["--version"]) == 0

    def test_short_version_flag_returns_zero(self) -> None:
        """-V should return exit code 0."""
        assert main(["-V"]) == 0

    def test_version_flag_prints_version(self, capsys) -> None:
        main(["--version"])
        captured = capsys.readouterr()
        assert "richdoc" in captured.out
        assert __version__ in captured.out

    def test_version_via_subprocess(self) -> None:
        """Version should work when invoked via subprocess."""
        result = subprocess.run(
            [sys.executable, "-m", "richdoc", "--version"],
            capture_output=True,
            text=True,
            cwd=Path(__file__).parent.parent,
        )
        assert result.returncode == 0
        assert "richdoc" in result.stdout
        assert __version__ in result.stdout
