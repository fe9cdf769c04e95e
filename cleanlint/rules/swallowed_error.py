"""Detect ``except`` blocks that swallow the error they caught."""

from __future__ import annotations

import ast
import re
from typing import Iterator, List, Optional

from cleanlint.config import LintSettings
from cleanlint.loader import SourceUnit
from cleanlint.result import Finding
from cleanlint.severity import Severity
from cleanlint.utils.code import iter_scope, terminal_name

from .base import make_finding

WORD_PATTERN = re.compile(r"[A-Z]?[a-z0-9]+|[A-Z]+(?![a-z])")
ERROR_WORDS = {"err", "error", "errors", "exc", "exception", "fail", "failed", "failure"}


class SwallowedErrorRule:
    """Flag handlers that neither re-raise nor return an error, and do nothing but log."""

    id = "swallowed-error"
    description = "Except blocks that are empty or only log the error without re-raising or returning it"
    default_severity = Severity.ERROR

    def evaluate(self, unit: SourceUnit, settings: LintSettings) -> List[Finding]:
        findings: List[Finding] = []
        for node in ast.walk(unit.tree):
            if not isinstance(node, ast.ExceptHandler):
                continue
            message = self._classify(node, settings)
            if message:
                findings.append(make_finding(self, unit, node, message, settings))
        return findings

    def _classify(self, handler: ast.ExceptHandler, settings: LintSettings) -> Optional[str]:
        nodes = list(_iter_handler(handler))
        if any(isinstance(node, ast.Raise) for node in nodes):
            return None
        if any(isinstance(node, ast.Return) and _returns_error(node, handler.name) for node in nodes):
            return None

        statements = [statement for statement in handler.body if not _is_filler(statement)]
        caught = _caught_label(handler)
        if not statements:
            return f"Empty handler for {caught} silently swallows the error; handle it, re-raise or return it"
        if len(statements) == 1 and _is_logging_call(statements[0], settings):
            call = terminal_name(statements[0].value)
            return (
                f"Handler for {caught} only calls '{call}()' and carries on; "
                "re-raise or return an error value after logging"
            )
        return None


def _iter_handler(handler: ast.ExceptHandler) -> Iterator[ast.AST]:
    for statement in handler.body:
        yield statement
        yield from iter_scope(statement)


def _is_filler(statement: ast.stmt) -> bool:
    if isinstance(statement, ast.Pass):
        return True
    if isinstance(statement, ast.Return):
        return statement.value is None or (isinstance(statement.value, ast.Constant) and statement.value.value is None)
    return isinstance(statement, ast.Expr) and isinstance(statement.value, ast.Constant)


def _is_logging_call(statement: ast.stmt, settings: LintSettings) -> bool:
    if not isinstance(statement, ast.Expr) or not isinstance(statement.value, ast.Call):
        return False
    return settings.logging_calls.matches(terminal_name(statement.value))


def _returns_error(node: ast.Return, bound_name: Optional[str]) -> bool:
    value = node.value
    if value is None or (isinstance(value, ast.Constant) and value.value is None):
        return False
    if isinstance(value, ast.Constant) and value.value is False:
        return True
    for child in ast.walk(value):
        if isinstance(child, ast.Name) and (child.id == bound_name or _mentions_error(child.id)):
            return True
        if isinstance(child, ast.Attribute) and _mentions_error(child.attr):
            return True
        if isinstance(child, ast.Constant) and isinstance(child.value, str) and child.value.lower() in {"error", "failed"}:
            return True
    return False


def _mentions_error(name: str) -> bool:
    return any(word.lower() in ERROR_WORDS for word in WORD_PATTERN.findall(name))


def _caught_label(handler: ast.ExceptHandler) -> str:
    if handler.type is None:
        return "bare except"
    return f"'{ast.unparse(handler.type)}'"
