"""Severity definitions for lint findings."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Enumerate the supported severity levels for findings."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Return an integer ranking to drive exit code decisions."""

        ordering = {
            Severity.ERROR: 2,
            Severity.WARNING: 1,
            Severity.INFO: 0,
        }
        return ordering[self]

    def at_least(self, other: "Severity") -> bool:
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: object) -> "Severity":
        """Accept ``"warning"``, ``"WARNING"`` or a ``Severity`` member."""

        if isinstance(value, Severity):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value == text:
                return member
        choices = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown severity '{value}' (expected one of: {choices})")
