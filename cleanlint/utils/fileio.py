"""Basic file IO helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def read_yaml_file(path: Path) -> Any:
    """Return the parsed YAML if the file exists, otherwise ``None``.

    An empty document also yields ``None``.
    """

    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def read_text_file(path: Path) -> str:
    """Return the file contents as UTF-8 text.

    Unlike the YAML reader this does not tolerate a missing file: callers
    translate ``OSError`` and ``UnicodeDecodeError`` into their own errors.
    """

    with path.open("r", encoding="utf-8") as handle:
        return handle.read()
