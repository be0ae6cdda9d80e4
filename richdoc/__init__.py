"""richdoc: rich document trees with structural normalization and Markdown persistence."""

from ._version import __version__

__all__ = ["__version__"]
