"""Configuration loading for cleanlint (.cleanlint.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from .errors import ConfigError
from .severity import Severity
from .utils.code import NamePatterns
from .utils.fileio import read_yaml_file

DEFAULT_CONFIG_FILENAME = ".cleanlint.yml"

DEFAULT_CRUD_VERB_GROUPS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("read", ("get", "fetch", "retrieve", "read")),
    ("create", ("create", "add", "insert", "new")),
    ("update", ("update", "modify", "edit")),
    ("delete", ("delete", "remove", "destroy", "erase")),
)


@dataclass(frozen=True)
class LintSettings:
    """Immutable thresholds and patterns handed to every rule evaluation."""

    min_identifier_length: int = 2
    allowed_short_names: Tuple[str, ...] = ("_", "i", "j", "k", "n", "x", "y", "z")
    max_unit_statements: int = 40
    max_branch_count: int = 10
    max_nesting_depth: int = 4
    injection_sink_patterns: Tuple[str, ...] = (
        r"query",
        r"execute(many|script)?",
        r"raw",
        r"system",
        r"popen",
        r"run_query",
    )
    async_marker_patterns: Tuple[str, ...] = (r"async_\w+", r"\w+_?async")
    batching_marker_patterns: Tuple[str, ...] = (
        r"\w*batch\w*",
        r"\w*chunk\w*",
        r"\w*semaphore\w*",
        r"sem",
        r"\w*limiter\w*",
        r"\w*throttle\w*",
        r"gather",
        r"islice",
    )
    logging_call_patterns: Tuple[str, ...] = (
        r"log",
        r"print",
        r"debug",
        r"info",
        r"warn(ing)?",
        r"error",
        r"exception",
        r"critical",
        r"fatal",
    )
    crud_verb_groups: Tuple[Tuple[str, Tuple[str, ...]], ...] = DEFAULT_CRUD_VERB_GROUPS
    enabled_rules: Optional[Tuple[str, ...]] = None
    severity_overrides: Tuple[Tuple[str, Severity], ...] = ()
    fail_on: Severity = Severity.ERROR
    extensions: Tuple[str, ...] = (".py",)
    exclude_paths: Tuple[str, ...] = ()
    jobs: int = 1

    injection_sinks: NamePatterns = field(init=False, repr=False, compare=False)
    async_markers: NamePatterns = field(init=False, repr=False, compare=False)
    batching_markers: NamePatterns = field(init=False, repr=False, compare=False)
    logging_calls: NamePatterns = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for name in ("min_identifier_length", "max_unit_statements", "max_branch_count", "max_nesting_depth", "jobs"):
            _require_positive_int(name, getattr(self, name))

        try:
            object.__setattr__(self, "fail_on", Severity.parse(self.fail_on))
            overrides = tuple((str(rule_id), Severity.parse(level)) for rule_id, level in self.severity_overrides)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        object.__setattr__(self, "severity_overrides", overrides)

        compiled = {
            "injection_sinks": "injection_sink_patterns",
            "async_markers": "async_marker_patterns",
            "batching_markers": "batching_marker_patterns",
            "logging_calls": "logging_call_patterns",
        }
        for target, source in compiled.items():
            try:
                object.__setattr__(self, target, NamePatterns.compile(getattr(self, source)))
            except ValueError as exc:
                raise ConfigError(f"Invalid pattern in '{source}': {exc}") from exc

        for operation, verbs in self.crud_verb_groups:
            if not verbs or any(not str(verb).strip() for verb in verbs):
                raise ConfigError(f"crud_verb_groups['{operation}'] must list non-empty verbs")

    def severity_for(self, rule_id: str, default: Severity) -> Severity:
        for overridden, level in self.severity_overrides:
            if overridden == rule_id:
                return level
        return default

    def with_overrides(self, **changes: Any) -> "LintSettings":
        """Return a copy with CLI-level overrides applied and re-validated."""

        applied = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **applied)


def load_settings(path: Path) -> LintSettings:
    """Load settings from a YAML file; a missing file yields the defaults."""

    try:
        data = read_yaml_file(path)
    except (yaml.YAMLError, OSError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc
    if data is None:
        return LintSettings()
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the root")
    return settings_from_mapping(data)


def settings_from_mapping(raw: Mapping[str, Any]) -> LintSettings:
    known = {item.name for item in fields(LintSettings) if item.init}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    values: Dict[str, Any] = {}
    for key, value in raw.items():
        if value is None:
            continue
        if key in {
            "allowed_short_names",
            "injection_sink_patterns",
            "async_marker_patterns",
            "batching_marker_patterns",
            "logging_call_patterns",
            "extensions",
            "exclude_paths",
            "enabled_rules",
        }:
            values[key] = tuple(_ensure_string_list(key, value))
        elif key == "crud_verb_groups":
            values[key] = _as_verb_groups(value)
        elif key == "severity_overrides":
            values[key] = tuple(_as_mapping(key, value).items())
        else:
            values[key] = value
    return LintSettings(**values)


def _require_positive_int(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"'{name}' must be an integer, got {value!r}")
    if value < 1:
        raise ConfigError(f"'{name}' must be at least 1, got {value}")


def _ensure_string_list(name: str, value: object) -> List[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)):
        raise ConfigError(f"'{name}' must be a list of strings")
    return [str(item) for item in value]


def _as_mapping(name: str, value: object) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return {str(key): item for key, item in value.items()}


def _as_verb_groups(value: object) -> Tuple[Tuple[str, Tuple[str, ...]], ...]:
    groups = _as_mapping("crud_verb_groups", value)
    return tuple(
        (operation, tuple(verb.lower() for verb in _ensure_string_list(f"crud_verb_groups.{operation}", verbs)))
        for operation, verbs in groups.items()
    )
