"""Detect string-built values passed to query or command sinks.

This is a structural proxy for injection risk rather than a taint analysis:
a value counts as "string-built" when it is an f-string with placeholders, a
``+`` chain mixing string literals with dynamic parts, ``"..." % args`` or
``"...".format(...)``. Values flow through plain local assignments within
one scope (the module, a class body, a function or a lambda); anything more
indirect is not followed.
"""

from __future__ import annotations

import ast
from typing import Dict, Iterator, List, Optional

from cleanlint.config import LintSettings
from cleanlint.loader import SourceUnit
from cleanlint.result import Finding
from cleanlint.severity import Severity
from cleanlint.utils.code import SCOPE_NODES, iter_scope, terminal_name

from .base import make_finding

QUERY_KEYWORDS = {"sql", "query", "statement", "stmt", "command", "cmd"}


class UnsafeQueryRule:
    """Flag concatenated or interpolated strings reaching query/command calls."""

    id = "unsafe-query"
    description = "String concatenation or interpolation passed to a query or command call"
    default_severity = Severity.ERROR

    def evaluate(self, unit: SourceUnit, settings: LintSettings) -> List[Finding]:
        findings: List[Finding] = []
        for scope in _iter_scopes(unit.tree):
            findings.extend(self._scan_scope(unit, scope, settings))
        return findings

    # ------------------------------------------------------------------
    # Scope analysis
    # ------------------------------------------------------------------
    def _scan_scope(self, unit: SourceUnit, scope: ast.AST, settings: LintSettings) -> List[Finding]:
        built: Dict[str, int] = {}
        literal_names = set()
        findings: List[Finding] = []

        for node in iter_scope(scope):
            if isinstance(node, (ast.Assign, ast.AnnAssign)):
                _track_assignment(node, built, literal_names)
            elif isinstance(node, ast.AugAssign):
                _track_augmented(node, built, literal_names)
            elif isinstance(node, ast.Call) and settings.injection_sinks.matches(terminal_name(node)):
                finding = self._check_call(unit, node, built, settings)
                if finding is not None:
                    findings.append(finding)
        return findings

    def _check_call(
        self,
        unit: SourceUnit,
        call: ast.Call,
        built: Dict[str, int],
        settings: LintSettings,
    ) -> Optional[Finding]:
        sink = terminal_name(call)
        for argument in _query_arguments(call):
            if is_string_built(argument):
                message = (
                    f"String built by concatenation or interpolation is passed to '{sink}()'; "
                    "use a parameterized query or argument list instead"
                )
                return make_finding(self, unit, argument, message, settings)
            if isinstance(argument, ast.Name) and argument.id in built:
                message = (
                    f"'{argument.id}' (built from strings on line {built[argument.id]}) is passed to "
                    f"'{sink}()'; use a parameterized query or argument list instead"
                )
                return make_finding(self, unit, argument, message, settings)
        return None


def _iter_scopes(tree: ast.Module) -> Iterator[ast.AST]:
    yield tree
    for node in ast.walk(tree):
        if isinstance(node, SCOPE_NODES):
            yield node


def _query_arguments(call: ast.Call) -> List[ast.AST]:
    arguments: List[ast.AST] = list(call.args[:1])
    arguments.extend(keyword.value for keyword in call.keywords if keyword.arg in QUERY_KEYWORDS)
    return arguments


def _single_target(node: ast.AST) -> Optional[str]:
    targets = node.targets if isinstance(node, ast.Assign) else [node.target]
    if len(targets) == 1 and isinstance(targets[0], ast.Name):
        return targets[0].id
    return None


def _track_assignment(node: ast.AST, built: Dict[str, int], literal_names: set) -> None:
    name = _single_target(node)
    if name is None or node.value is None:
        return
    built.pop(name, None)
    literal_names.discard(name)
    if is_string_built(node.value):
        built[name] = node.lineno
    elif _is_string_literal(node.value):
        literal_names.add(name)


def _track_augmented(node: ast.AugAssign, built: Dict[str, int], literal_names: set) -> None:
    if not isinstance(node.target, ast.Name) or not isinstance(node.op, ast.Add):
        return
    name = node.target.id
    if is_string_built(node.value):
        built.setdefault(name, node.lineno)
    elif name in literal_names and not isinstance(node.value, ast.Constant):
        built.setdefault(name, node.lineno)


# ----------------------------------------------------------------------
# Expression classification
# ----------------------------------------------------------------------
def is_string_built(node: ast.AST) -> bool:
    """Return True when ``node`` assembles a string from literal and dynamic parts."""

    if isinstance(node, ast.JoinedStr):
        return any(isinstance(part, ast.FormattedValue) for part in node.values)
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.Add):
        leaves = _concat_leaves(node)
        has_literal = any(_is_string_literal(leaf) for leaf in leaves)
        has_dynamic = any(not _is_static(leaf) for leaf in leaves)
        return has_literal and has_dynamic
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.Mod):
        return _is_string_literal(node.left) and not isinstance(node.right, ast.Constant)
    if isinstance(node, ast.Call) and isinstance(node.func, ast.Attribute) and node.func.attr == "format":
        return _is_string_literal(node.func.value) and bool(node.args or node.keywords)
    return False


def _concat_leaves(node: ast.BinOp) -> List[ast.AST]:
    leaves: List[ast.AST] = []
    stack: List[ast.AST] = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, ast.BinOp) and isinstance(current.op, ast.Add):
            stack.append(current.right)
            stack.append(current.left)
        else:
            leaves.append(current)
    return leaves


def _is_static(node: ast.AST) -> bool:
    if isinstance(node, ast.JoinedStr):
        return not any(isinstance(part, ast.FormattedValue) for part in node.values)
    return isinstance(node, ast.Constant)


def _is_string_literal(node: ast.AST) -> bool:
    if isinstance(node, ast.Constant):
        return isinstance(node.value, str)
    return isinstance(node, ast.JoinedStr)
