"""Markdown lint using pymarkdownlnt."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pymarkdown.api import PyMarkdownApi

logger = logging.getLogger(__name__)


@dataclass
class LintIssue:
    """A single markdown lint issue."""

    line: int
    column: int
    rule_id: str
    rule_name: str
    message: str
    extra_info: str | None = None

    def format(self) -> str:
        text = f"{self.line}:{self.column} {self.rule_id} ({self.rule_name}) {self.message}"
        if self.extra_info:
            text += f" [{self.extra_info}]"
        return text


@dataclass
class LintResult:
    """Result of linting a markdown document."""

    issues: list[LintIssue]

    @property
    def has_issues(self) -> bool:
        """Return True if there are any lint issues."""
        return len(self.issues) > 0


class MarkdownFormatter:
    """Lints serialized markdown with pymarkdownlnt.

    Rules listed in ``disabled_rules`` (ids like ``md033`` or names like
    ``no-inline-html``) are switched off before scanning. Column layouts are
    inline HTML, so the default configuration disables ``md033``.
    """

    def __init__(self, disabled_rules: list[str] | None = None):
        self._api = PyMarkdownApi()
        self.disabled_rules = list(disabled_rules or [])
        for rule in self.disabled_rules:
            self._api.disable_rule_by_identifier(rule.lower())

    def lint(self, content: str) -> LintResult:
        """Scan content for markdown issues.

        Args:
            content: Markdown content to lint.

        Returns:
            LintResult with list of issues found.
        """
        if not content:
            return LintResult(issues=[])

        result = self._api.scan_string(content)
        issues = [
            LintIssue(
                line=failure.line_number,
                column=failure.column_number,
                rule_id=failure.rule_id,
                rule_name=failure.rule_name,
                message=failure.rule_description,
                extra_info=failure.extra_error_information or None,
            )
            for failure in result.scan_failures
        ]
        logger.debug("Lint found %d issue(s)", len(issues))
        return LintResult(issues=issues)
