"""Tests for richdoc configuration management."""

from pathlib import Path

import pytest

from richdoc.config import MarkdownConfig, NormalizeConfig, RichdocConfig, load_config
from richdoc.editor.nodes import NodeKind


def write_config(workspace: Path, content: str) -> None:
    config_dir = workspace / ".richdoc"
    config_dir.mkdir()
    (config_dir / "config.toml").write_text(content)


class TestNormalizeConfig:
    """Tests for NormalizeConfig dataclass."""

    def test_default_values(self):
        config = NormalizeConfig()
        assert config.pass_limit_factor == 2
        assert config.continuation_separators == ["code_block"]
        assert config.separator_kinds == frozenset({NodeKind.CODE_BLOCK})

    def test_rejects_unknown_separator(self):
        with pytest.raises(ValueError, match="banana"):
            NormalizeConfig(continuation_separators=["banana"])

    def test_rejects_non_positive_factor(self):
        with pytest.raises(ValueError, match="pass_limit_factor"):
            NormalizeConfig(pass_limit_factor=0)


class TestMarkdownConfig:
    """Tests for MarkdownConfig dataclass."""

    def test_default_values(self):
        config = MarkdownConfig()
        assert config.bullet == "-"
        assert config.lint_disable == ["md033"]

    def test_rejects_unknown_bullet(self):
        with pytest.raises(ValueError, match="bullet"):
            MarkdownConfig(bullet="x")


class TestRichdocConfig:
    """Tests for building components from configuration."""

    def test_build_normalizer(self):
        config = RichdocConfig(
            normalize=NormalizeConfig(pass_limit_factor=3, continuation_separators=["code_block", "paragraph"])
        )

        normalizer = config.build_normalizer()

        assert normalizer.pass_limit_factor == 3
        assert normalizer.continuation_separators == {NodeKind.CODE_BLOCK, NodeKind.PARAGRAPH}

    def test_build_codec_uses_bullet(self):
        config = RichdocConfig(markdown=MarkdownConfig(bullet="+"))

        assert config.build_codec().renderer.bullet == "+"

    def test_build_codec_flag_overrides_config(self):
        config = RichdocConfig(markdown=MarkdownConfig(bullet="+"))

        assert config.build_codec(bullet="*").renderer.bullet == "*"

    def test_build_formatter(self):
        config = RichdocConfig(markdown=MarkdownConfig(lint_disable=["md033"]))

        assert config.build_formatter().disabled_rules == ["md033"]


class TestLoadConfig:
    """Tests for load_config function."""

    def test_no_config_file(self, temp_workspace: Path):
        """Returns defaults when no config file exists."""
        config = load_config(temp_workspace)

        assert config == RichdocConfig()

    def test_full_config(self, temp_workspace: Path):
        write_config(
            temp_workspace,
            """\
[normalize]
pass_limit_factor = 4
continuation_separators = ["code_block", "table"]

[markdown]
bullet = "*"
lint_disable = ["md033", "md041"]
""",
        )

        config = load_config(temp_workspace)

        assert config.normalize.pass_limit_factor == 4
        assert config.normalize.separator_kinds == {NodeKind.CODE_BLOCK, NodeKind.TABLE}
        assert config.markdown.bullet == "*"
        assert config.markdown.lint_disable == ["md033", "md041"]

    def test_partial_config(self, temp_workspace: Path):
        """Missing keys fall back to defaults."""
        write_config(temp_workspace, '[markdown]\nbullet = "+"\n')

        config = load_config(temp_workspace)

        assert config.markdown.bullet == "+"
        assert config.markdown.lint_disable == ["md033"]
        assert config.normalize == NormalizeConfig()

    def test_invalid_value(self, temp_workspace: Path):
        write_config(temp_workspace, "[normalize]\npass_limit_factor = -1\n")

        with pytest.raises(ValueError):
            load_config(temp_workspace)
