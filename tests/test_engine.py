import json
import threading

import pytest

from cleanlint.config import LintSettings
from cleanlint.engine import analyze, analyze_path, analyze_paths, collect_files, select_rules
from cleanlint.errors import ConfigError, RuleCrashError
from cleanlint.rules import RuleRegistry, builtin_rules
from cleanlint.severity import Severity

MESSY_SOURCE = """
def get_user(db, q):
    return db.query("SELECT * FROM users WHERE id = " + q)


def fetch_order(db, order_id):
    try:
        return db.query("SELECT * FROM orders WHERE id = ?", [order_id])
    except Exception as error:
        log(error)


def get_invoice(db, invoice_id):
    return db.query("SELECT * FROM invoices WHERE id = ?", [invoice_id])
"""


class CrashingRule:
    id = "always-crashes"
    description = "raises on every unit"
    default_severity = Severity.WARNING

    def evaluate(self, unit, settings):
        raise RuleCrashError(self.id, "evaluator defect")


class BrokenRule:
    id = "broken"
    description = "raises an unexpected exception"
    default_severity = Severity.INFO

    def evaluate(self, unit, settings):
        return [1 / 0]


def _registry(*extra):
    return RuleRegistry([*builtin_rules(), *extra]).freeze()


def test_findings_are_sorted_by_line_column_and_rule(make_unit):
    report = analyze(make_unit(MESSY_SOURCE), LintSettings(), _registry())

    keys = [(finding.line, finding.column, finding.rule_id) for finding in report.findings]
    assert keys == sorted(keys)
    assert {finding.rule_id for finding in report.findings} >= {
        "naming-length",
        "unsafe-query",
        "swallowed-error",
        "crud-naming",
    }


def test_analysis_is_deterministic(make_unit):
    first = analyze(make_unit(MESSY_SOURCE), LintSettings(), _registry())
    second = analyze(make_unit(MESSY_SOURCE), LintSettings(), _registry())

    assert first == second
    assert json.dumps(first.to_dict()) == json.dumps(second.to_dict())


def test_summary_counts_by_severity(make_unit):
    report = analyze(make_unit(MESSY_SOURCE), LintSettings(), _registry())

    assert report.summary.error == 2
    assert report.summary.total == len(report.findings)
    assert not report.passed(Severity.ERROR)


def test_crashing_rule_is_isolated(make_unit):
    unit = make_unit(MESSY_SOURCE)
    baseline = analyze(unit, LintSettings(), _registry())

    report = analyze(unit, LintSettings(), _registry(CrashingRule(), BrokenRule()))

    crashes = [finding for finding in report.findings if finding.rule_id in {"always-crashes", "broken"}]
    assert len(crashes) == 2
    assert all(finding.severity == Severity.ERROR for finding in crashes)
    assert any("evaluator defect" in finding.message for finding in crashes)
    assert any("ZeroDivisionError" in finding.message for finding in crashes)
    assert set(baseline.findings) <= set(report.findings)
    assert len(report.findings) == len(baseline.findings) + 2


def test_enabled_rules_limit_the_run(make_unit):
    settings = LintSettings(enabled_rules=("unsafe-query",))

    report = analyze(make_unit(MESSY_SOURCE), settings, _registry())

    assert {finding.rule_id for finding in report.findings} == {"unsafe-query"}


def test_empty_registry_runs_no_rules(make_unit, tmp_path):
    empty = RuleRegistry().freeze()

    report = analyze(make_unit("q = 1\n"), LintSettings(), empty)

    assert report.findings == ()

    source = tmp_path / "short.py"
    source.write_text("q = 1\n", encoding="utf-8")
    run = analyze_paths([source], LintSettings(), empty)

    assert run.findings == []


def test_unknown_enabled_rule_is_a_config_error(make_unit):
    with pytest.raises(ConfigError):
        select_rules(_registry(), ("no-such-rule",))


def test_severity_override_changes_reported_severity(make_unit):
    settings = LintSettings(severity_overrides=(("naming-length", "error"),))

    report = analyze(make_unit("q = 1\n"), settings, _registry())

    assert report.findings[0].severity == Severity.ERROR


def test_unreadable_file_becomes_single_error_finding(tmp_path):
    report = analyze_path(tmp_path / "missing.py", LintSettings(), _registry())

    assert len(report.findings) == 1
    assert report.findings[0].rule_id is None
    assert report.findings[0].severity == Severity.ERROR


def test_unparsable_file_becomes_single_error_finding(tmp_path):
    source = tmp_path / "broken.py"
    source.write_text("value = (1, 2\n", encoding="utf-8")

    report = analyze_path(source, LintSettings(), _registry())

    assert len(report.findings) == 1
    assert report.findings[0].rule_id is None
    assert report.findings[0].line == 1
    assert "Cannot parse" in report.findings[0].message


def test_analyze_paths_keeps_input_order_in_parallel(tmp_path):
    paths = []
    for index in range(6):
        path = tmp_path / f"module_{index}.py"
        path.write_text(f"value_{index} = {index}\n", encoding="utf-8")
        paths.append(path)

    serial = analyze_paths(paths, LintSettings(), _registry(), jobs=1)
    parallel = analyze_paths(paths, LintSettings(), _registry(), jobs=4)

    assert [report.path for report in parallel.reports] == [str(path) for path in paths]
    assert serial.reports == parallel.reports
    assert not parallel.cancelled


def test_cancellation_is_checked_between_units(tmp_path):
    paths = []
    for index in range(3):
        path = tmp_path / f"module_{index}.py"
        path.write_text("value = 1\n", encoding="utf-8")
        paths.append(path)
    cancel = threading.Event()
    cancel.set()

    run = analyze_paths(paths, LintSettings(), _registry(), cancel_event=cancel)

    assert run.cancelled
    assert run.reports == ()


def test_collect_files_walks_directories_and_applies_excludes(tmp_path):
    (tmp_path / "pkg").mkdir()
    (tmp_path / "pkg" / "b.py").write_text("", encoding="utf-8")
    (tmp_path / "pkg" / "a.py").write_text("", encoding="utf-8")
    (tmp_path / "pkg" / "notes.txt").write_text("", encoding="utf-8")
    (tmp_path / "pkg" / "test_a.py").write_text("", encoding="utf-8")

    files = collect_files([str(tmp_path)], LintSettings(exclude_paths=("test_*",)))

    assert [path.name for path in files] == ["a.py", "b.py"]


def test_run_exit_code_follows_fail_on(tmp_path):
    source = tmp_path / "module.py"
    source.write_text("q = 1\n", encoding="utf-8")

    run = analyze_paths([source], LintSettings(), _registry())

    assert run.exit_code(Severity.ERROR) == 0
    assert run.exit_code(Severity.WARNING) == 1
