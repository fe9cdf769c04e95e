"""Flag deeply nested functions that guard clauses and early returns would flatten."""

from __future__ import annotations

from typing import List

from cleanlint.config import LintSettings
from cleanlint.loader import SourceUnit
from cleanlint.result import Finding
from cleanlint.severity import Severity

from .base import make_finding


class NestingDepthRule:
    id = "nesting-depth"
    description = "Functions whose block nesting exceeds the configured depth"
    default_severity = Severity.INFO

    def evaluate(self, unit: SourceUnit, settings: LintSettings) -> List[Finding]:
        return [
            make_finding(
                self,
                unit,
                logical.node,
                f"{logical.kind.capitalize()} '{logical.qualname}' nests blocks {logical.nesting_depth} levels deep "
                f"(max {settings.max_nesting_depth}); return early to flatten it",
                settings,
            )
            for logical in unit.units
            if logical.nesting_depth > settings.max_nesting_depth
        ]
