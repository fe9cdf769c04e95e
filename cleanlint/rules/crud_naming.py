"""Detect mixed verbs for the same CRUD operation (get_user next to fetch_order)."""

from __future__ import annotations

import re
from collections import Counter
from typing import List, Optional, Sequence

from cleanlint.config import LintSettings
from cleanlint.loader import LogicalUnit, SourceUnit
from cleanlint.result import Finding
from cleanlint.severity import Severity

from .base import make_finding

WORD_PATTERN = re.compile(r"[A-Z]?[a-z0-9]+|[A-Z]+(?![a-z])")


class CrudNamingRule:
    """Majority vote per operation; outliers are warnings, ties are reported once at info."""

    id = "crud-naming"
    description = "Functions that use a different verb than the file's dominant one for the same operation"
    default_severity = Severity.WARNING

    def evaluate(self, unit: SourceUnit, settings: LintSettings) -> List[Finding]:
        findings: List[Finding] = []
        for operation, verbs in settings.crud_verb_groups:
            members = _members(unit.units, verbs)
            counts = Counter(verb for verb, _ in members)
            if len(counts) < 2:
                continue
            findings.extend(self._evaluate_group(unit, settings, operation, members, counts))
        return findings

    def _evaluate_group(
        self,
        unit: SourceUnit,
        settings: LintSettings,
        operation: str,
        members: List[tuple],
        counts: Counter,
    ) -> List[Finding]:
        top = max(counts.values())
        # Insertion order of the counter follows source order, which keeps ties deterministic.
        leaders = [verb for verb, count in counts.items() if count == top]
        leader_text = " or ".join(f"'{verb}'" for verb in leaders)
        findings: List[Finding] = []

        if len(leaders) > 1:
            tally = ", ".join(f"{verb} ({counts[verb]})" for verb in leaders)
            first = next(logical for verb, logical in members if verb in leaders)
            findings.append(
                make_finding(
                    self,
                    unit,
                    first.node,
                    f"Ambiguous verb for {operation} operations: {tally} are used equally; pick one",
                    settings,
                    severity=Severity.INFO,
                )
            )

        for verb, logical in members:
            if verb in leaders:
                continue
            findings.append(
                make_finding(
                    self,
                    unit,
                    logical.node,
                    f"'{logical.name}' uses '{verb}' for a {operation} operation while this file "
                    f"mostly uses {leader_text}",
                    settings,
                )
            )
        return findings


def _members(units: Sequence[LogicalUnit], verbs: Sequence[str]) -> List[tuple]:
    wanted = set(verbs)
    members = []
    for logical in units:
        verb = leading_verb(logical.name)
        if verb in wanted:
            members.append((verb, logical))
    return members


def leading_verb(name: str) -> Optional[str]:
    """Return the lowercase first word of ``name`` when more words follow it.

    ``get_user`` and ``getUser`` both yield ``"get"``; a bare ``get`` yields ``None``.
    """

    words = WORD_PATTERN.findall(name.strip("_"))
    if len(words) < 2:
        return None
    return words[0].lower()
