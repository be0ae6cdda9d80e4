"""richdoc configuration management.

Loads configuration from .richdoc/config.toml if present, with sensible
defaults. Configuration hierarchy (highest priority first):
1. Command-line flags
2. Repo-level config (.richdoc/config.toml)
3. Defaults
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .editor.nodes import NodeKind
from .editor.normalize import DEFAULT_PASS_LIMIT_FACTOR, Normalizer
from .markdown.codec import MarkdownCodec
from .markdown.formatter import MarkdownFormatter
from .markdown.renderer import BULLETS

CONFIG_DIR = ".richdoc"
CONFIG_FILE = "config.toml"
DEFAULT_LINT_DISABLE = ["md033"]


@dataclass
class NormalizeConfig:
    """Configuration for the structural normalizer."""

    pass_limit_factor: int = DEFAULT_PASS_LIMIT_FACTOR
    continuation_separators: list[str] = field(default_factory=lambda: ["code_block"])

    def __post_init__(self) -> None:
        if not isinstance(self.pass_limit_factor, int) or self.pass_limit_factor < 1:
            raise ValueError(f"pass_limit_factor must be a positive integer, got {self.pass_limit_factor!r}")
        known = {kind.value for kind in NodeKind}
        unknown = [name for name in self.continuation_separators if name not in known]
        if unknown:
            raise ValueError(f"Unknown continuation separator(s): {', '.join(unknown)}")

    @property
    def separator_kinds(self) -> frozenset[NodeKind]:
        return frozenset(NodeKind(name) for name in self.continuation_separators)


@dataclass
class MarkdownConfig:
    """Configuration for Markdown output and lint."""

    bullet: str = "-"
    # Column layouts are inline HTML
    lint_disable: list[str] = field(default_factory=lambda: list(DEFAULT_LINT_DISABLE))

    def __post_init__(self) -> None:
        if self.bullet not in BULLETS:
            raise ValueError(f"bullet must be one of {BULLETS}, got {self.bullet!r}")


@dataclass
class RichdocConfig:
    """richdoc configuration."""

    normalize: NormalizeConfig = field(default_factory=NormalizeConfig)
    markdown: MarkdownConfig = field(default_factory=MarkdownConfig)

    def build_normalizer(self) -> Normalizer:
        return Normalizer(
            pass_limit_factor=self.normalize.pass_limit_factor,
            continuation_separators=self.normalize.separator_kinds,
        )

    def build_codec(self, *, bullet: str | None = None) -> MarkdownCodec:
        """Build a codec, letting an explicit bullet override the config."""
        return MarkdownCodec(bullet=bullet or self.markdown.bullet)

    def build_formatter(self) -> MarkdownFormatter:
        return MarkdownFormatter(disabled_rules=self.markdown.lint_disable)


def load_config(workspace: Path) -> RichdocConfig:
    """Load configuration from .richdoc/config.toml if it exists.

    Args:
        workspace: Path to the workspace/repository root.

    Returns:
        RichdocConfig with values from config file or defaults.

    Raises:
        ValueError: If the file holds invalid values.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    config_path = workspace / CONFIG_DIR / CONFIG_FILE

    if not config_path.exists():
        return RichdocConfig()

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    normalize_data = data.get("normalize", {})
    markdown_data = data.get("markdown", {})

    normalize = NormalizeConfig(
        pass_limit_factor=normalize_data.get("pass_limit_factor", DEFAULT_PASS_LIMIT_FACTOR),
        continuation_separators=list(normalize_data.get("continuation_separators", ["code_block"])),
    )

    markdown = MarkdownConfig(
        bullet=markdown_data.get("bullet", "-"),
        lint_disable=list(markdown_data.get("lint_disable", DEFAULT_LINT_DISABLE)),
    )

    return RichdocConfig(normalize=normalize, markdown=markdown)
