import pytest

import cleanlint.rules
from cleanlint.errors import ConfigError, DuplicateRuleError, RegistryFrozenError, UnknownRuleError
from cleanlint.rules import RuleRegistry, builtin_rules, default_registry
from cleanlint.severity import Severity


class StubRule:
    description = "stub"
    default_severity = Severity.INFO

    def __init__(self, rule_id: str) -> None:
        self.id = rule_id

    def evaluate(self, unit, settings):
        return []


class PluginRule:
    id = "plugin-rule"
    description = "rule shipped by a plugin"
    default_severity = Severity.WARNING

    def evaluate(self, unit, settings):
        return []


class EntryPoint:
    def __init__(self, name, target=None, error=None):
        self.name = name
        self.target = target
        self.error = error

    def load(self):
        if self.error is not None:
            raise self.error
        return self.target


def test_registry_keeps_registration_order():
    registry = RuleRegistry([StubRule("b"), StubRule("a")])
    registry.register(StubRule("c"))

    assert registry.ids() == ["b", "a", "c"]
    assert [rule.id for rule in registry.all()] == ["b", "a", "c"]


def test_duplicate_rule_id_is_rejected():
    registry = RuleRegistry([StubRule("naming")])

    with pytest.raises(DuplicateRuleError):
        registry.register(StubRule("naming"))


def test_get_returns_none_for_unknown_rule():
    registry = RuleRegistry([StubRule("naming")])

    assert registry.get("naming").id == "naming"
    assert registry.get("missing") is None
    with pytest.raises(UnknownRuleError):
        registry.require("missing")


def test_frozen_registry_rejects_registration():
    registry = RuleRegistry([StubRule("naming")]).freeze()

    assert registry.frozen
    with pytest.raises(RegistryFrozenError):
        registry.register(StubRule("other"))


def test_default_registry_holds_builtin_rules():
    registry = default_registry(include_plugins=False)

    assert registry.frozen
    assert registry.ids() == [rule.id for rule in builtin_rules()]
    assert {
        "naming-length",
        "naming-consistency",
        "function-size",
        "nesting-depth",
        "crud-naming",
        "unsafe-query",
        "swallowed-error",
        "blocking-loop",
    } == set(registry.ids())


def test_builtin_default_severities():
    severities = {rule.id: rule.default_severity for rule in builtin_rules()}

    assert severities["naming-length"] == Severity.WARNING
    assert severities["naming-consistency"] == Severity.WARNING
    assert severities["crud-naming"] == Severity.WARNING
    assert severities["unsafe-query"] == Severity.ERROR
    assert severities["swallowed-error"] == Severity.ERROR
    assert severities["function-size"] == Severity.INFO
    assert severities["nesting-depth"] == Severity.INFO
    assert severities["blocking-loop"] == Severity.INFO


def test_entry_point_rules_are_registered_after_builtins(monkeypatch):
    monkeypatch.setattr(cleanlint.rules, "_iter_entry_points", lambda: [EntryPoint("extra", PluginRule)])

    registry = default_registry()

    assert registry.ids()[-1] == "plugin-rule"
    assert isinstance(registry.require("plugin-rule"), PluginRule)


def test_entry_point_instances_are_used_as_is(monkeypatch):
    instance = PluginRule()
    monkeypatch.setattr(cleanlint.rules, "_iter_entry_points", lambda: [EntryPoint("extra", instance)])

    assert default_registry().require("plugin-rule") is instance


def test_entry_point_reusing_builtin_id_is_a_config_error(monkeypatch):
    monkeypatch.setattr(
        cleanlint.rules,
        "_iter_entry_points",
        lambda: [EntryPoint("shadow", StubRule("naming-length"))],
    )

    with pytest.raises(ConfigError) as excinfo:
        default_registry()

    assert isinstance(excinfo.value.__cause__, DuplicateRuleError)


def test_entry_point_that_fails_to_import_is_a_config_error(monkeypatch):
    monkeypatch.setattr(
        cleanlint.rules,
        "_iter_entry_points",
        lambda: [EntryPoint("broken", error=ImportError("no module named 'missing_plugin'"))],
    )

    with pytest.raises(ConfigError, match="broken"):
        default_registry()


def test_entry_point_without_rule_attributes_is_a_config_error(monkeypatch):
    monkeypatch.setattr(cleanlint.rules, "_iter_entry_points", lambda: [EntryPoint("odd", object())])

    with pytest.raises(ConfigError, match="odd"):
        default_registry()


def test_plugins_are_skipped_when_disabled(monkeypatch):
    monkeypatch.setattr(cleanlint.rules, "_iter_entry_points", lambda: [EntryPoint("extra", PluginRule)])

    assert "plugin-rule" not in default_registry(include_plugins=False)
