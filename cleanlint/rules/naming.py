"""Naming clarity checks: too-short identifiers and mixed casing of the same name."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Set, Tuple

from cleanlint.config import LintSettings
from cleanlint.loader import Identifier, SourceUnit
from cleanlint.result import Finding
from cleanlint.severity import Severity

from .base import make_finding

SNAKE_CASE = re.compile(r"_*[a-z][a-z0-9]*(?:_[a-z0-9]+)+_*")
CAMEL_CASE = re.compile(r"_*[a-z][a-z0-9]*(?:[A-Z][a-z0-9]*)+")

# Names bound by imports follow the imported library's conventions.
IGNORED_KINDS = {"import"}


class NamingLengthRule:
    """Flag identifiers too short to say what they hold."""

    id = "naming-length"
    description = "Identifiers shorter than the configured minimum length outside the allow-list"
    default_severity = Severity.WARNING

    def evaluate(self, unit: SourceUnit, settings: LintSettings) -> List[Finding]:
        allowed = set(settings.allowed_short_names)
        reported: Set[str] = set()
        findings: List[Finding] = []
        for identifier in unit.identifiers:
            name = identifier.name
            if identifier.kind in IGNORED_KINDS or name in allowed or name in reported:
                continue
            meaningful = name.strip("_")
            if not meaningful or len(meaningful) >= settings.min_identifier_length:
                continue
            reported.add(name)
            findings.append(
                make_finding(
                    self,
                    unit,
                    identifier,
                    f"{identifier.kind.capitalize()} name '{name}' is shorter than "
                    f"{settings.min_identifier_length} characters; use a descriptive name",
                    settings,
                )
            )
        return findings


class NamingConsistencyRule:
    """Flag the same name written in both snake_case and camelCase."""

    id = "naming-consistency"
    description = "Semantically identical identifiers spelled with mixed snake_case and camelCase"
    default_severity = Severity.WARNING

    def evaluate(self, unit: SourceUnit, settings: LintSettings) -> List[Finding]:
        first_seen: Dict[str, Tuple[str, Identifier]] = {}
        reported: Set[str] = set()
        findings: List[Finding] = []
        for identifier in unit.identifiers:
            if identifier.kind in IGNORED_KINDS:
                continue
            style = casing_style(identifier.name)
            if style is None:
                continue
            key = normalize(identifier.name)
            if key not in first_seen:
                first_seen[key] = (style, identifier)
                continue
            original_style, original = first_seen[key]
            if style == original_style or identifier.name in reported:
                continue
            reported.add(identifier.name)
            findings.append(
                make_finding(
                    self,
                    unit,
                    identifier,
                    f"'{identifier.name}' uses {style} but '{original.name}' (line {original.line}) "
                    f"uses {original_style}; keep one naming convention",
                    settings,
                )
            )
        return findings


def casing_style(name: str) -> Optional[str]:
    """Return ``"snake_case"``, ``"camelCase"`` or ``None`` for anything else."""

    if SNAKE_CASE.fullmatch(name):
        return "snake_case"
    if CAMEL_CASE.fullmatch(name):
        return "camelCase"
    return None


def normalize(name: str) -> str:
    return name.replace("_", "").lower()
