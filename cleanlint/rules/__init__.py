"""Rule registry for cleanlint."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from cleanlint.errors import ConfigError, DuplicateRuleError, RegistryFrozenError, UnknownRuleError
from cleanlint.logging import get_logger

from .base import Rule, make_finding
from .blocking_loop import BlockingLoopRule
from .crud_naming import CrudNamingRule
from .naming import NamingConsistencyRule, NamingLengthRule
from .nesting import NestingDepthRule
from .swallowed_error import SwallowedErrorRule
from .unit_size import FunctionSizeRule
from .unsafe_query import UnsafeQueryRule

logger = get_logger("rules")

_ENTRY_POINT_GROUP = "cleanlint.rules"

_BUILTIN_FACTORIES: Tuple[Callable[[], Rule], ...] = (
    NamingLengthRule,
    NamingConsistencyRule,
    FunctionSizeRule,
    NestingDepthRule,
    CrudNamingRule,
    UnsafeQueryRule,
    SwallowedErrorRule,
    BlockingLoopRule,
)


class RuleRegistry:
    """Ordered catalog of rule evaluators keyed by rule id.

    Registration order is the evaluation order. Once ``freeze`` is called the
    registry is read-only and may be shared between worker threads.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: Dict[str, Rule] = {}
        self._frozen = False
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> Rule:
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register '{rule.id}': registry is frozen")
        if rule.id in self._rules:
            raise DuplicateRuleError(rule.id)
        self._rules[rule.id] = rule
        logger.debug("Registered rule %s (%s)", rule.id, type(rule).__name__)
        return rule

    def get(self, rule_id: str) -> Optional[Rule]:
        return self._rules.get(rule_id)

    def require(self, rule_id: str) -> Rule:
        """Get a rule by id, raising ``UnknownRuleError`` if it is missing."""
        rule = self._rules.get(rule_id)
        if rule is None:
            raise UnknownRuleError(rule_id)
        return rule

    def all(self) -> Tuple[Rule, ...]:
        return tuple(self._rules.values())

    def ids(self) -> List[str]:
        return list(self._rules)

    def freeze(self) -> "RuleRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __len__(self) -> int:
        return len(self._rules)


def builtin_rules() -> List[Rule]:
    return [factory() for factory in _BUILTIN_FACTORIES]


def default_registry(include_plugins: bool = True) -> RuleRegistry:
    """Return a frozen registry holding the built-in rules and any plugins.

    A plugin that fails to load, does not look like a rule or reuses an
    existing rule id raises ``ConfigError``.
    """

    registry = RuleRegistry(builtin_rules())
    if include_plugins:
        for entry in _iter_entry_points():
            try:
                loaded = entry.load()
            except Exception as exc:
                raise ConfigError(f"Failed to load rule entry point '{entry.name}': {exc}") from exc
            try:
                registry.register(_coerce_rule(loaded))
            except (DuplicateRuleError, TypeError) as exc:
                raise ConfigError(f"Rule entry point '{entry.name}' is invalid: {exc}") from exc
            logger.debug("Loaded rule plugin %s", entry.name)
    return registry.freeze()


def _coerce_rule(obj: object) -> Rule:
    candidate = obj() if isinstance(obj, type) or (callable(obj) and not hasattr(obj, "evaluate")) else obj
    if not all(hasattr(candidate, attr) for attr in ("id", "description", "default_severity", "evaluate")):
        raise TypeError("a rule must provide id, description, default_severity and evaluate()")
    return candidate  # type: ignore[return-value]


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    entry_points = metadata.entry_points()
    if hasattr(entry_points, "select"):
        return entry_points.select(group=_ENTRY_POINT_GROUP)
    return entry_points.get(_ENTRY_POINT_GROUP, [])  # type: ignore[return-value]


__all__ = [
    "Rule",
    "RuleRegistry",
    "builtin_rules",
    "default_registry",
    "make_finding",
]
