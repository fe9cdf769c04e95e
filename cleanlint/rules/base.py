"""Rule protocol and the shared finding constructor."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from cleanlint.config import LintSettings
from cleanlint.loader import SourceUnit
from cleanlint.result import Finding
from cleanlint.severity import Severity


class Rule(Protocol):
    """Protocol implemented by all rule evaluators.

    Evaluators are stateless: the same ``SourceUnit`` and settings always
    produce the same findings.
    """

    id: str
    description: str
    default_severity: Severity

    def evaluate(self, unit: SourceUnit, settings: LintSettings) -> Sequence[Finding]:
        """Analyze ``unit`` and return zero or more findings."""


def make_finding(
    rule: Rule,
    unit: SourceUnit,
    node: object,
    message: str,
    settings: LintSettings,
    severity: Optional[Severity] = None,
) -> Finding:
    """Build a finding located at ``node``.

    ``node`` is an AST node or any object with ``line``/``column`` attributes;
    ``severity`` defaults to the rule's configured severity.
    """

    line = getattr(node, "lineno", None) or getattr(node, "line", 1)
    column = getattr(node, "col_offset", None)
    if column is None:
        column = getattr(node, "column", 0)
    return Finding(
        rule_id=rule.id,
        severity=severity or settings.severity_for(rule.id, rule.default_severity),
        line=line,
        column=column,
        end_line=getattr(node, "end_lineno", None) or line,
        end_column=getattr(node, "end_col_offset", None) or column,
        message=message,
        path=unit.path,
    )
