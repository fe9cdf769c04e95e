"""Error taxonomy shared by the loader, registry, engine and config layers."""

from __future__ import annotations

from typing import Optional


class CleanLintError(Exception):
    """Base class for every error raised by cleanlint."""


class ReadError(CleanLintError):
    """Raised when a source file cannot be read or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


class ParseError(CleanLintError):
    """Raised when source text cannot be decomposed into logical units."""

    def __init__(self, path: str, reason: str, line: Optional[int] = None, column: Optional[int] = None) -> None:
        location = f"{path}:{line}" if line else path
        super().__init__(f"Cannot parse {location}: {reason}")
        self.path = path
        self.reason = reason
        self.line = line
        self.column = column


class ConfigError(CleanLintError, ValueError):
    """Raised for invalid thresholds, patterns or rule selections."""


class DuplicateRuleError(CleanLintError):
    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Rule '{rule_id}' is already registered")
        self.rule_id = rule_id


class UnknownRuleError(CleanLintError, KeyError):
    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Rule '{rule_id}' is not registered")
        self.rule_id = rule_id

    def __str__(self) -> str:
        return self.args[0]


class RegistryFrozenError(CleanLintError):
    """Raised when registering a rule after the registry was frozen."""


class RuleCrashError(CleanLintError):
    """Raised (or synthesized by the engine) when a rule evaluator fails."""

    def __init__(self, rule_id: str, message: str) -> None:
        super().__init__(f"Rule '{rule_id}' crashed: {message}")
        self.rule_id = rule_id
        self.message = message
