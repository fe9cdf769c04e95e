"""Detect loops that await asynchronous work one item at a time."""

from __future__ import annotations

import ast
from typing import Dict, List, Optional, Tuple

from cleanlint.config import LintSettings
from cleanlint.loader import SourceUnit
from cleanlint.result import Finding
from cleanlint.severity import Severity
from cleanlint.utils.code import SCOPE_NODES, terminal_name

from .base import make_finding

LOOP_NODES = (ast.For, ast.AsyncFor, ast.While)
WITH_NODES = (ast.With, ast.AsyncWith)


class BlockingLoopRule:
    """Flag loop bodies that await (or call async-marked operations) without batching.

    A loop counts as guarded when it iterates over a batching helper, sits in
    a ``with`` block whose context manager matches the batching markers (a
    semaphore, a rate limiter), or the asynchronous call is itself wrapped in
    a batching call such as ``asyncio.gather``.
    """

    id = "blocking-loop"
    description = "Loops that invoke asynchronous operations sequentially without batching or a concurrency limit"
    default_severity = Severity.INFO

    def evaluate(self, unit: SourceUnit, settings: LintSettings) -> List[Finding]:
        flagged: Dict[int, Tuple[ast.AST, str]] = {}
        # Iterative walk carrying (node, innermost unguarded loop, guarded flag).
        stack: List[Tuple[ast.AST, Optional[ast.AST], bool]] = [(unit.tree, None, False)]
        while stack:
            node, loop, guarded = stack.pop()
            if loop is not None and not guarded and id(loop) not in flagged:
                operation = _async_operation(node, settings)
                if operation:
                    flagged[id(loop)] = (loop, operation)
            for child, child_loop, child_guarded in self._children(node, loop, guarded, settings):
                stack.append((child, child_loop, child_guarded))

        findings = [
            make_finding(
                self,
                unit,
                loop,
                f"Loop runs '{operation}' one item at a time; batch the calls or bound concurrency "
                "(asyncio.gather with a semaphore)",
                settings,
            )
            for loop, operation in flagged.values()
        ]
        findings.sort(key=lambda finding: finding.sort_key)
        return findings

    def _children(
        self,
        node: ast.AST,
        loop: Optional[ast.AST],
        guarded: bool,
        settings: LintSettings,
    ) -> List[Tuple[ast.AST, Optional[ast.AST], bool]]:
        if isinstance(node, SCOPE_NODES):
            return [(child, None, False) for child in ast.iter_child_nodes(node)]

        if isinstance(node, LOOP_NODES):
            iterates_batches = isinstance(node, (ast.For, ast.AsyncFor)) and _mentions_marker(node.iter, settings)
            body_guarded = guarded or iterates_batches
            header = [node.iter, node.target] if isinstance(node, (ast.For, ast.AsyncFor)) else [node.test]
            children = [(child, loop, guarded) for child in header]
            children.extend((child, node, body_guarded) for child in node.body)
            children.extend((child, loop, guarded) for child in node.orelse)
            return children

        if isinstance(node, WITH_NODES):
            limited = any(_mentions_marker(item.context_expr, settings) for item in node.items)
            children = [(item, loop, guarded) for item in node.items]
            children.extend((child, loop, guarded or limited) for child in node.body)
            return children

        if isinstance(node, ast.Call) and settings.batching_markers.matches(terminal_name(node)):
            return [(child, loop, True) for child in ast.iter_child_nodes(node)]

        return [(child, loop, guarded) for child in ast.iter_child_nodes(node)]


def _async_operation(node: ast.AST, settings: LintSettings) -> Optional[str]:
    """Return the name of the asynchronous operation ``node`` performs, if any."""

    if isinstance(node, ast.Await):
        value = node.value
        if isinstance(value, ast.Call) and settings.batching_markers.matches(terminal_name(value)):
            return None
        return terminal_name(value) or "awaitable"
    if isinstance(node, ast.Call):
        name = terminal_name(node)
        if settings.async_markers.matches(name):
            return name
    return None


def _mentions_marker(node: ast.AST, settings: LintSettings) -> bool:
    return any(
        settings.batching_markers.matches(terminal_name(child))
        for child in ast.walk(node)
        if isinstance(child, (ast.Name, ast.Attribute, ast.Call))
    )
