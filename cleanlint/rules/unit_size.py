"""Flag functions that are too long or branch too much to have a single responsibility."""

from __future__ import annotations

from typing import List

from cleanlint.config import LintSettings
from cleanlint.loader import SourceUnit
from cleanlint.result import Finding
from cleanlint.severity import Severity

from .base import make_finding


class FunctionSizeRule:
    """Compare each logical unit's statement and branch counts against the limits."""

    id = "function-size"
    description = "Functions whose statement count or branch count exceeds the configured maximum"
    default_severity = Severity.INFO

    def evaluate(self, unit: SourceUnit, settings: LintSettings) -> List[Finding]:
        findings: List[Finding] = []
        for logical in unit.units:
            if logical.statement_count > settings.max_unit_statements:
                findings.append(
                    make_finding(
                        self,
                        unit,
                        logical.node,
                        f"{logical.kind.capitalize()} '{logical.qualname}' has {logical.statement_count} statements "
                        f"(max {settings.max_unit_statements}); split it into smaller functions",
                        settings,
                    )
                )
            if logical.branch_count > settings.max_branch_count:
                findings.append(
                    make_finding(
                        self,
                        unit,
                        logical.node,
                        f"{logical.kind.capitalize()} '{logical.qualname}' has {logical.branch_count} branches "
                        f"(max {settings.max_branch_count}); extract the decisions into helpers",
                        settings,
                    )
                )
        return findings
