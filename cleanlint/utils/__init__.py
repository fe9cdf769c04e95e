"""Utility helpers for cleanlint."""

from .code import NamePatterns, iter_code_files, iter_scope, terminal_name
from .fileio import read_text_file, read_yaml_file

__all__ = [
    "NamePatterns",
    "iter_code_files",
    "iter_scope",
    "read_text_file",
    "read_yaml_file",
    "terminal_name",
]
