"""CLI entry point for richdoc.

Usage:
    python -m richdoc normalize notes.md             # Repair structure and rewrite in place
    python -m richdoc normalize notes.md --check     # Exit 1 if the file would change
    python -m richdoc validate notes.md              # List structural violations
    python -m richdoc lint notes.md                  # Lint the normalized Markdown
    python -m richdoc convert notes.md --to json     # Markdown to editor JSON

Or via the installed command:
    richdoc normalize value.json --json              # Normalize an editor JSON value
    richdoc convert value.json --to markdown -o out.md
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import tomllib
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from richdoc._version import get_full_version_string
from richdoc.config import RichdocConfig, load_config
from richdoc.editor.nodes import Document
from richdoc.editor.value import from_value, to_value
from richdoc.markdown.codec import MarkdownCodec
from richdoc.markdown.renderer import BULLETS

# Load environment variables
load_dotenv()

console = Console()
err_console = Console(stderr=True)

LOG_LEVEL_ENV = "RICHDOC_LOG_LEVEL"

logger = logging.getLogger(__name__)


class InputError(Exception):
    """Raised when an input file cannot be read or decoded."""


def configure_logging(level: str | None = None) -> None:
    """Route log records to stderr through rich.

    Args:
        level: Level name; defaults to $RICHDOC_LOG_LEVEL, then WARNING
    """
    level_name = (level or os.getenv(LOG_LEVEL_ENV) or "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def is_json_input(path: Path, force_json: bool) -> bool:
    return force_json or path.suffix.lower() == ".json"


def load_document(path: Path, codec: MarkdownCodec, *, as_json: bool) -> tuple[Document, str]:
    """Read a Markdown file or editor JSON value into a tree.

    Returns:
        Tuple of (document, original file text)

    Raises:
        InputError: If the file is missing or cannot be decoded
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise InputError(f"File not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"Could not read {path}: {e}") from e

    if not as_json:
        return codec.deserialize(text), text

    try:
        return from_value(json.loads(text)), text
    except json.JSONDecodeError as e:
        raise InputError(f"Invalid JSON in {path}: {e}") from e
    except ValidationError as e:
        raise InputError(f"Invalid editor value in {path}: {e.error_count()} error(s)\n{e}") from e


def dump_document(document: Document, codec: MarkdownCodec, *, as_json: bool) -> str:
    if as_json:
        return json.dumps(to_value(document), indent=2, ensure_ascii=False) + "\n"
    return codec.serialize(document)


def write_output(text: str, output: Path | None) -> None:
    if output is None:
        sys.stdout.write(text)
    else:
        output.write_text(text, encoding="utf-8")


def run_normalize(
    path: Path, config: RichdocConfig, codec: MarkdownCodec, *, as_json: bool, check: bool, output: Path | None
) -> int:
    """Normalize a file, writing it back unless checking.

    Returns:
        Exit code (0 for success, 1 when --check finds pending changes)
    """
    document, original = load_document(path, codec, as_json=as_json)
    result = config.build_normalizer().run(document)
    rendered = dump_document(result.document, codec, as_json=as_json)

    # JSON formatting differences are not structural changes
    needs_change = result.changed if as_json else rendered != original

    for fix in result.fixes:
        console.print(f"[dim]  • rule {fix.rule} at {'/'.join(map(str, fix.path)) or 'root'}: {fix.detail}[/]")
    if not result.converged:
        console.print("[yellow]![/] Normalization stopped before reaching a fixpoint")

    if check:
        if needs_change:
            console.print(f"[yellow]![/] {path} needs normalization")
            return 1
        console.print(f"[green]✓[/] {path} is normalized")
        return 0

    target = output or path
    if needs_change or output is not None:
        target.write_text(rendered, encoding="utf-8")
        console.print(f"[green]✓[/] Wrote {target} ({len(result.fixes)} fix(es))")
    else:
        console.print(f"[green]✓[/] {path} already normalized")
    return 0


def run_validate(path: Path, config: RichdocConfig, codec: MarkdownCodec, *, as_json: bool) -> int:
    """Report structural violations of a file's tree.

    Returns:
        Exit code (0 if valid, 1 if violations were found)
    """
    document, _ = load_document(path, codec, as_json=as_json)
    result = config.build_normalizer().validate(document)

    if result.valid:
        console.print(f"[green]✓[/] {path}: no structural violations")
        return 0

    console.print(f"[bold]Structural violations[/] in {escape(str(path))}")
    table = Table()
    table.add_column("Rule", style="bold")
    table.add_column("Path")
    table.add_column("Node")
    table.add_column("Detail")
    for violation in result.violations:
        location = "/".join(map(str, violation.path)) or "root"
        table.add_row(violation.rule, location, violation.node_kind, violation.detail)
    console.print(table)
    for recommendation in result.recommendations:
        console.print(f"[dim]{recommendation}[/]")
    return 1


def run_lint(path: Path, config: RichdocConfig, codec: MarkdownCodec, *, as_json: bool) -> int:
    """Lint the Markdown a file normalizes to.

    Returns:
        Exit code (0 if clean, 1 if issues were found)
    """
    document, _ = load_document(path, codec, as_json=as_json)
    markdown = codec.serialize(config.build_normalizer().normalize(document))
    result = config.build_formatter().lint(markdown)

    if not result.has_issues:
        console.print(f"[green]✓[/] {path}: no lint issues")
        return 0

    for issue in result.issues:
        console.print(f"[yellow]{escape(str(path))}:{escape(issue.format())}[/]")
    console.print(f"[bold]{len(result.issues)} issue(s)[/]")
    return 1


def run_convert(path: Path, config: RichdocConfig, codec: MarkdownCodec, *, to: str, output: Path | None) -> int:
    """Convert between Markdown and editor JSON, normalizing on the way."""
    document, _ = load_document(path, codec, as_json=is_json_input(path, False))
    document = config.build_normalizer().normalize(document)
    write_output(dump_document(document, codec, as_json=to == "json"), output)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="richdoc",
        description="richdoc - Rich document tree normalization and Markdown persistence",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  richdoc normalize notes.md             Repair structure and rewrite the file
  richdoc normalize notes.md --check     Exit 1 if the file would change
  richdoc validate value.json            List structural violations
  richdoc lint notes.md                  Lint the normalized Markdown
  richdoc convert notes.md --to json     Convert Markdown to editor JSON

Configuration:
  Create .richdoc/config.toml in your repo to customize behavior:
    [normalize]
    pass_limit_factor = 2
    continuation_separators = ["code_block"]

    [markdown]
    bullet = "-"
    lint_disable = ["md033"]

Set RICHDOC_LOG_LEVEL=DEBUG to see every repair as it is applied.
""",
    )
    parser.add_argument("--version", "-V", action="store_true", help="Show version and exit")
    parser.add_argument(
        "--workspace",
        "-w",
        type=Path,
        default=None,
        help="Workspace directory holding .richdoc/config.toml (defaults to git root)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"Log level (defaults to ${LOG_LEVEL_ENV} or WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command")

    normalize_parser = subparsers.add_parser("normalize", help="Repair document structure")
    normalize_parser.add_argument("file", type=Path, help="Markdown file or editor JSON value")
    normalize_parser.add_argument(
        "--check", action="store_true", help="Only report; exit 1 when changes are needed"
    )
    normalize_parser.add_argument(
        "--output", "-o", type=Path, default=None, help="Write here instead of in place"
    )
    normalize_parser.add_argument("--json", action="store_true", help="Treat the file as an editor JSON value")
    normalize_parser.add_argument("--bullet", choices=BULLETS, default=None, help="Bullet marker for output")

    validate_parser = subparsers.add_parser("validate", help="List structural violations")
    validate_parser.add_argument("file", type=Path, help="Markdown file or editor JSON value")
    validate_parser.add_argument("--json", action="store_true", help="Treat the file as an editor JSON value")

    lint_parser = subparsers.add_parser("lint", help="Lint the normalized Markdown of a file")
    lint_parser.add_argument("file", type=Path, help="Markdown file or editor JSON value")
    lint_parser.add_argument("--json", action="store_true", help="Treat the file as an editor JSON value")

    convert_parser = subparsers.add_parser("convert", help="Convert between Markdown and editor JSON")
    convert_parser.add_argument("file", type=Path, help="Input file (.json is read as an editor value)")
    convert_parser.add_argument("--to", choices=("markdown", "json"), required=True, help="Output format")
    convert_parser.add_argument("--output", "-o", type=Path, default=None, help="Output file (default: stdout)")
    convert_parser.add_argument("--bullet", choices=BULLETS, default=None, help="Bullet marker for output")

    args = parser.parse_args(argv)

    if args.version:
        console.print(get_full_version_string(), highlight=False)
        return 0
    if args.command is None:
        parser.print_help()
        return 2

    configure_logging(args.log_level)

    path: Path = args.file.resolve()
    workspace = args.workspace.resolve() if args.workspace else find_git_root(path.parent)

    try:
        config = load_config(workspace)
    except (ValueError, tomllib.TOMLDecodeError) as e:
        err_console.print(f"[red]Error:[/] Invalid configuration in {workspace}: {escape(str(e))}")
        return 1
    codec = config.build_codec(bullet=getattr(args, "bullet", None))
    logger.debug("Workspace %s, config %s", workspace, config)

    try:
        if args.command == "normalize":
            return run_normalize(
                path, config, codec, as_json=is_json_input(path, args.json), check=args.check, output=args.output
            )
        if args.command == "validate":
            return run_validate(path, config, codec, as_json=is_json_input(path, args.json))
        if args.command == "lint":
            return run_lint(path, config, codec, as_json=is_json_input(path, args.json))
        return run_convert(path, config, codec, to=args.to, output=args.output)
    except InputError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}", highlight=False)
        return 1


def find_git_root(start_path: Path) -> Path:
    """Find the git repository root from a starting path.

    Args:
        start_path: Directory to start searching from

    Returns:
        Path to the git root, or start_path if not found
    """
    current = start_path.resolve()
    while current != current.parent:
        if (current / ".git").exists():
            return current
        current = current.parent
    return start_path


if __name__ == "__main__":
    sys.exit(main())
