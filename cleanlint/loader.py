"""Turn source files into immutable structural views for the rules."""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import ParseError, ReadError
from .logging import get_logger
from .utils.code import SCOPE_NODES, iter_scope
from .utils.fileio import read_text_file

logger = get_logger("loader")

FUNCTION_NODES = (ast.FunctionDef, ast.AsyncFunctionDef)
BLOCK_NODES = (ast.If, ast.For, ast.AsyncFor, ast.While, ast.With, ast.AsyncWith, ast.Try) + tuple(
    node for node in (getattr(ast, "TryStar", None), getattr(ast, "Match", None)) if node is not None
)
LOOP_BRANCH_NODES = (ast.If, ast.IfExp, ast.For, ast.AsyncFor, ast.While, ast.ExceptHandler)
MATCH_CASE = getattr(ast, "match_case", None)


@dataclass(frozen=True)
class Identifier:
    """A name bound somewhere in the source."""

    name: str
    kind: str
    line: int
    column: int


@dataclass(frozen=True)
class LogicalUnit:
    """A function or method together with its size and complexity metrics."""

    name: str
    qualname: str
    kind: str
    is_async: bool
    line: int
    column: int
    end_line: int
    end_column: int
    statement_count: int
    branch_count: int
    nesting_depth: int
    node: ast.AST = field(repr=False, compare=False)


@dataclass(frozen=True)
class SourceUnit:
    """Parsed, structural representation of one analyzed file."""

    path: str
    text: str
    units: Tuple[LogicalUnit, ...]
    identifiers: Tuple[Identifier, ...]
    tree: ast.Module = field(repr=False, compare=False)


def load(path: Path | str) -> SourceUnit:
    """Read ``path`` and build its ``SourceUnit``.

    Raises ``ReadError`` when the file cannot be read as UTF-8 text and
    ``ParseError`` when it is not valid Python.
    """

    source_path = Path(path)
    try:
        text = read_text_file(source_path)
    except UnicodeDecodeError as exc:
        raise ReadError(str(source_path), f"not valid UTF-8 ({exc.reason})") from exc
    except OSError as exc:
        raise ReadError(str(source_path), exc.strerror or str(exc)) from exc
    logger.debug("Loaded %s (%d bytes)", source_path, len(text))
    return parse_source(text, str(source_path))


def parse_source(text: str, path: str = "<string>") -> SourceUnit:
    """Build a ``SourceUnit`` from in-memory text."""

    if text.startswith("\ufeff"):
        text = text[1:]
    try:
        tree = ast.parse(text, filename=path)
    except SyntaxError as exc:
        column = exc.offset - 1 if exc.offset else None
        raise ParseError(path, exc.msg or "invalid syntax", exc.lineno, column) from exc
    except ValueError as exc:
        raise ParseError(path, str(exc)) from exc
    except (RecursionError, MemoryError) as exc:
        raise ParseError(path, "expression nesting exceeds the parser limits") from exc

    return SourceUnit(
        path=path,
        text=text,
        units=tuple(_collect_units(tree)),
        identifiers=tuple(_collect_identifiers(tree)),
        tree=tree,
    )


# ----------------------------------------------------------------------
# Logical units
# ----------------------------------------------------------------------
def _collect_units(tree: ast.Module) -> List[LogicalUnit]:
    units: List[LogicalUnit] = []
    # (node, qualname prefix, directly inside a class body)
    stack: List[Tuple[ast.AST, str, bool]] = [(tree, "", False)]
    while stack:
        node, prefix, in_class = stack.pop()
        for child in ast.iter_child_nodes(node):
            if isinstance(child, FUNCTION_NODES):
                qualname = f"{prefix}{child.name}"
                units.append(_build_unit(child, qualname, in_class))
                stack.append((child, f"{qualname}.", False))
            elif isinstance(child, ast.ClassDef):
                stack.append((child, f"{prefix}{child.name}.", True))
            else:
                stack.append((child, prefix, in_class))
    units.sort(key=lambda unit: (unit.line, unit.column))
    return units


def _build_unit(node: ast.AST, qualname: str, in_class: bool) -> LogicalUnit:
    return LogicalUnit(
        name=node.name,
        qualname=qualname,
        kind="method" if in_class else "function",
        is_async=isinstance(node, ast.AsyncFunctionDef),
        line=node.lineno,
        column=node.col_offset,
        end_line=getattr(node, "end_lineno", None) or node.lineno,
        end_column=getattr(node, "end_col_offset", None) or node.col_offset,
        statement_count=count_statements(node),
        branch_count=count_branches(node),
        nesting_depth=nesting_depth(node.body),
        node=node,
    )


def count_statements(node: ast.AST) -> int:
    """Count statements in a function body; nested definitions count once."""

    return sum(1 for child in iter_scope(node) if isinstance(child, ast.stmt))


def count_branches(node: ast.AST) -> int:
    """Count conditional and loop entries in a function body."""

    branches = 0
    for child in iter_scope(node):
        if isinstance(child, LOOP_BRANCH_NODES):
            branches += 1
        elif isinstance(child, ast.comprehension):
            branches += 1 + len(child.ifs)
        elif isinstance(child, ast.BoolOp):
            branches += len(child.values) - 1
        elif MATCH_CASE is not None and isinstance(child, MATCH_CASE):
            branches += 1
    return branches


def nesting_depth(statements: List[ast.stmt], current: int = 0) -> int:
    """Return the deepest block nesting below ``statements``.

    ``elif`` chains stay at the depth of their leading ``if``.
    """

    deepest = current
    for statement in statements:
        if isinstance(statement, SCOPE_NODES) or not isinstance(statement, BLOCK_NODES):
            continue
        level = current + 1
        deepest = max(deepest, level)
        for block in _child_blocks(statement):
            deepest = max(deepest, nesting_depth(block, level))
        if isinstance(statement, ast.If) and _is_elif(statement):
            deepest = max(deepest, nesting_depth(statement.orelse, current))
    return deepest


def _child_blocks(statement: ast.stmt) -> List[List[ast.stmt]]:
    blocks = [statement.body]
    orelse = getattr(statement, "orelse", None)
    if orelse and not (isinstance(statement, ast.If) and _is_elif(statement)):
        blocks.append(orelse)
    finalbody = getattr(statement, "finalbody", None)
    if finalbody:
        blocks.append(finalbody)
    for handler in getattr(statement, "handlers", None) or ():
        blocks.append(handler.body)
    for case in getattr(statement, "cases", None) or ():
        blocks.append(case.body)
    return blocks


def _is_elif(statement: ast.If) -> bool:
    return len(statement.orelse) == 1 and isinstance(statement.orelse[0], ast.If)


# ----------------------------------------------------------------------
# Identifiers
# ----------------------------------------------------------------------
def _collect_identifiers(tree: ast.Module) -> List[Identifier]:
    loop_targets = set()
    for node in ast.walk(tree):
        if isinstance(node, (ast.For, ast.AsyncFor, ast.comprehension)):
            for target in ast.walk(node.target):
                loop_targets.add(id(target))

    identifiers: List[Identifier] = []
    for node in ast.walk(tree):
        found = _identifier_for(node, loop_targets)
        if found is not None:
            identifiers.append(found)
        elif isinstance(node, (ast.Import, ast.ImportFrom)):
            for alias in node.names:
                bound = alias.asname or alias.name.split(".")[0]
                if bound != "*":
                    identifiers.append(Identifier(bound, "import", node.lineno, node.col_offset))

    identifiers.sort(key=lambda item: (item.line, item.column, item.name))
    return identifiers


def _identifier_for(node: ast.AST, loop_targets: set) -> Optional[Identifier]:
    if isinstance(node, FUNCTION_NODES):
        return Identifier(node.name, "function", node.lineno, node.col_offset)
    if isinstance(node, ast.ClassDef):
        return Identifier(node.name, "class", node.lineno, node.col_offset)
    if isinstance(node, ast.arg):
        return Identifier(node.arg, "parameter", node.lineno, node.col_offset)
    if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Store):
        kind = "loop-variable" if id(node) in loop_targets else "variable"
        return Identifier(node.id, kind, node.lineno, node.col_offset)
    if isinstance(node, ast.ExceptHandler) and node.name:
        return Identifier(node.name, "exception", node.lineno, node.col_offset)
    return None
