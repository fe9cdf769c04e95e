"""Source code helper utilities."""

from __future__ import annotations

import ast
import fnmatch
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Generator, Iterable, Optional, Pattern, Tuple


def iter_code_files(
    root_paths: Iterable[str],
    extensions: Tuple[str, ...] = (".py",),
    exclude: Tuple[str, ...] = (),
) -> Generator[Path, None, None]:
    """Yield code files beneath the provided paths in a stable order.

    Plain files are yielded as given, regardless of extension. Directories
    are walked recursively; ``exclude`` holds glob patterns matched against
    the POSIX form of each candidate path.
    """

    seen = set()
    for root in root_paths:
        root_path = Path(root)
        if root_path.is_dir():
            candidates = sorted(path for path in root_path.rglob("*") if path.suffix in extensions and path.is_file())
        else:
            candidates = [root_path]
        for path in candidates:
            if _is_excluded(path, exclude) or path in seen:
                continue
            seen.add(path)
            yield path


def _is_excluded(path: Path, exclude: Tuple[str, ...]) -> bool:
    posix = path.as_posix()
    return any(fnmatch.fnmatch(posix, pattern) or fnmatch.fnmatch(path.name, pattern) for pattern in exclude)


@dataclass(frozen=True)
class NamePatterns:
    """Case-insensitive set of regular expressions matched against whole names."""

    patterns: Tuple[Pattern[str], ...] = ()

    @classmethod
    def compile(cls, sources: Iterable[str]) -> "NamePatterns":
        compiled = []
        for source in sources:
            try:
                compiled.append(re.compile(source, re.IGNORECASE))
            except re.error as exc:
                raise ValueError(f"{source!r}: {exc}") from exc
        return cls(tuple(compiled))

    def matches(self, name: Optional[str]) -> bool:
        if not name:
            return False
        return any(pattern.fullmatch(name) for pattern in self.patterns)


def terminal_name(node: ast.AST) -> Optional[str]:
    """Return the last segment of a name, attribute or call target."""

    if isinstance(node, ast.Call):
        node = node.func
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def iter_scope(node: ast.AST) -> Generator[ast.AST, None, None]:
    """Walk ``node``'s descendants without entering nested functions, lambdas or classes."""

    stack = list(reversed(list(ast.iter_child_nodes(node))))
    while stack:
        child = stack.pop()
        yield child
        if isinstance(child, SCOPE_NODES):
            continue
        stack.extend(reversed(list(ast.iter_child_nodes(child))))


SCOPE_NODES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda, ast.ClassDef)
