"""Run registered rules over source units and collect the findings into reports."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import LintSettings
from .errors import ConfigError, ParseError, ReadError, RuleCrashError
from .loader import SourceUnit, load
from .logging import get_logger
from .result import Finding, LintRun, Report
from .rules import Rule, RuleRegistry, default_registry
from .severity import Severity
from .utils.code import iter_code_files

logger = get_logger("engine")


def select_rules(registry: RuleRegistry, enabled: Optional[Sequence[str]]) -> Tuple[Rule, ...]:
    """Return the enabled rules in registration order.

    ``enabled=None`` selects every registered rule; unknown ids raise ``ConfigError``.
    """

    if enabled is None:
        return registry.all()
    unknown = sorted(rule_id for rule_id in set(enabled) if rule_id not in registry)
    if unknown:
        raise ConfigError(f"Unknown rules requested: {', '.join(unknown)}")
    wanted = set(enabled)
    return tuple(rule for rule in registry.all() if rule.id in wanted)


def analyze(
    unit: SourceUnit,
    settings: Optional[LintSettings] = None,
    registry: Optional[RuleRegistry] = None,
) -> Report:
    """Evaluate every enabled rule against ``unit`` and return its report.

    A rule that raises is isolated: its failure becomes a single error
    finding tagged with the rule id and the remaining rules still run.
    """

    settings = settings or LintSettings()
    if registry is None:
        registry = default_registry()
    buffers: List[List[Finding]] = []
    for rule in select_rules(registry, settings.enabled_rules):
        buffers.append(_run_rule(rule, unit, settings))
    return Report.build(unit.path, buffers)


def _run_rule(rule: Rule, unit: SourceUnit, settings: LintSettings) -> List[Finding]:
    try:
        return list(rule.evaluate(unit, settings))
    except RuleCrashError as exc:
        crash = exc
    except Exception as exc:
        logger.debug("Rule %s raised on %s", rule.id, unit.path, exc_info=True)
        crash = RuleCrashError(rule.id, f"{type(exc).__name__}: {exc}")
    logger.warning("Rule %s crashed on %s: %s", rule.id, unit.path, crash.message)
    return [
        Finding(
            rule_id=rule.id,
            severity=Severity.ERROR,
            line=1,
            column=0,
            message=f"Rule crashed: {crash.message}",
            path=unit.path,
        )
    ]


def analyze_path(
    path: Path | str,
    settings: Optional[LintSettings] = None,
    registry: Optional[RuleRegistry] = None,
) -> Report:
    """Load and analyze one file; load failures become a rule-less error finding."""

    try:
        unit = load(path)
    except ParseError as exc:
        logger.debug("Parse failure for %s: %s", path, exc)
        return _failure_report(str(path), str(exc), exc.line or 1, exc.column or 0)
    except ReadError as exc:
        logger.debug("Read failure for %s: %s", path, exc)
        return _failure_report(str(path), str(exc), 1, 0)
    return analyze(unit, settings, registry)


def _failure_report(path: str, message: str, line: int, column: int) -> Report:
    failure = Finding(
        rule_id=None,
        severity=Severity.ERROR,
        line=line,
        column=column,
        message=message,
        path=path,
    )
    return Report.build(path, [[failure]])


def collect_files(targets: Iterable[str], settings: Optional[LintSettings] = None) -> List[Path]:
    """Expand files and directories into the sorted list of files to lint."""

    settings = settings or LintSettings()
    return list(iter_code_files(targets, settings.extensions, settings.exclude_paths))


def analyze_paths(
    paths: Iterable[Path | str],
    settings: Optional[LintSettings] = None,
    registry: Optional[RuleRegistry] = None,
    *,
    jobs: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> LintRun:
    """Analyze many files, optionally on a thread pool.

    Reports keep the input order. ``cancel_event`` is checked before each
    file; files not started when it is set are skipped and the run is marked
    as cancelled.
    """

    settings = settings or LintSettings()
    if registry is None:
        registry = default_registry()
    select_rules(registry, settings.enabled_rules)
    files = list(paths)
    workers = jobs or settings.jobs

    def run_one(path: Path | str) -> Optional[Report]:
        if cancel_event is not None and cancel_event.is_set():
            return None
        logger.debug("Analyzing %s", path)
        return analyze_path(path, settings, registry)

    if workers <= 1:
        results: List[Optional[Report]] = []
        for path in files:
            report = run_one(path)
            if report is None:
                break
            results.append(report)
        cancelled = len(results) < len(files)
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(run_one, files))
        cancelled = any(report is None for report in results)

    reports = tuple(report for report in results if report is not None)
    logger.info("Analyzed %d of %d files", len(reports), len(files))
    return LintRun(reports=reports, cancelled=cancelled)
