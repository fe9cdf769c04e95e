"""Logger hierarchy for cleanlint; console and optional file output."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple

ROOT_LOGGER = "cleanlint"
CONSOLE_FORMAT = "[cleanlint] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``cleanlint.<name>``, or the root cleanlint logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def configure_logging(*, verbose: bool = False, log_file: Path | str | None = None) -> logging.Logger:
    """Route cleanlint records to stderr and, when given, to ``log_file``.

    Calling it again replaces the handlers from the previous call, so one
    process can run the CLI many times (the test suite does).
    """
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.propagate = False

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    sinks: List[Tuple[logging.Handler, str]] = [(logging.StreamHandler(), CONSOLE_FORMAT)]
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        sinks.append((logging.FileHandler(log_path, encoding="utf-8"), FILE_FORMAT))

    for handler, fmt in sinks:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)
    return root


__all__ = ["configure_logging", "get_logger"]
