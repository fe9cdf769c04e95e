"""Core result data structures for lint runs."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .severity import Severity

SEVERITY_ORDER: Sequence[Severity] = (
    Severity.ERROR,
    Severity.WARNING,
    Severity.INFO,
)


@dataclass(frozen=True)
class Finding:
    """Capture a single rule violation.

    ``rule_id`` is ``None`` only for top-level failures such as an unreadable
    or unparsable file.
    """

    rule_id: Optional[str]
    severity: Severity
    line: int
    column: int
    message: str
    end_line: Optional[int] = None
    end_column: Optional[int] = None
    path: str = ""

    @property
    def sort_key(self) -> Tuple[int, int, str]:
        return (self.line, self.column, self.rule_id or "")

    def to_dict(self) -> Dict[str, object]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


@dataclass(frozen=True)
class Summary:
    """Aggregate finding counts by severity."""

    error: int = 0
    warning: int = 0
    info: int = 0

    @classmethod
    def from_findings(cls, findings: Iterable[Finding]) -> "Summary":
        counts = {severity: 0 for severity in SEVERITY_ORDER}
        for finding in findings:
            counts[finding.severity] += 1
        return cls(
            error=counts[Severity.ERROR],
            warning=counts[Severity.WARNING],
            info=counts[Severity.INFO],
        )

    @classmethod
    def combine(cls, summaries: Iterable["Summary"]) -> "Summary":
        error = warning = info = 0
        for summary in summaries:
            error += summary.error
            warning += summary.warning
            info += summary.info
        return cls(error=error, warning=warning, info=info)

    def count(self, severity: Severity) -> int:
        return getattr(self, severity.value)

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    def as_rows(self) -> List[Tuple[str, int]]:
        """Return severity/count pairs ordered for reporting."""

        return [(severity.value, self.count(severity)) for severity in SEVERITY_ORDER]

    @property
    def total(self) -> int:
        return sum(self.count(severity) for severity in SEVERITY_ORDER)

    def reaches(self, threshold: Severity) -> bool:
        """Return True when any counted finding is at or above ``threshold``."""

        return any(self.count(severity) > 0 for severity in SEVERITY_ORDER if severity.at_least(threshold))


@dataclass(frozen=True)
class Report:
    """Findings for one source unit, sorted by ``(line, column, rule_id)``."""

    path: str
    findings: Tuple[Finding, ...] = ()
    summary: Summary = field(default_factory=Summary)

    @classmethod
    def build(cls, path: str, buffers: Iterable[Iterable[Finding]]) -> "Report":
        """Merge per-rule buffers into one ordered, frozen report."""

        merged = sorted(
            (finding for buffer in buffers for finding in buffer),
            key=lambda finding: finding.sort_key,
        )
        return cls(path=path, findings=tuple(merged), summary=Summary.from_findings(merged))

    def passed(self, fail_on: Severity = Severity.ERROR) -> bool:
        return not self.summary.reaches(fail_on)

    def to_dict(self) -> Dict[str, object]:
        return {
            "path": self.path,
            "summary": self.summary.to_dict(),
            "findings": [finding.to_dict() for finding in self.findings],
        }


@dataclass(frozen=True)
class LintRun:
    """Bundle the per-file reports of a multi-file run."""

    reports: Tuple[Report, ...] = ()
    cancelled: bool = False

    @property
    def summary(self) -> Summary:
        return Summary.combine(report.summary for report in self.reports)

    @property
    def findings(self) -> List[Finding]:
        return [finding for report in self.reports for finding in report.findings]

    def passed(self, fail_on: Severity = Severity.ERROR) -> bool:
        return not self.summary.reaches(fail_on)

    def exit_code(self, fail_on: Severity = Severity.ERROR) -> int:
        return 0 if self.passed(fail_on) else 1

    def to_dict(self, fail_on: Severity = Severity.ERROR) -> Dict[str, object]:
        return {
            "summary": self.summary.to_dict(),
            "files": [
                {"path": report.path, "summary": report.summary.to_dict()} for report in self.reports
            ],
            "findings": [finding.to_dict() for finding in self.findings],
            "passed": self.passed(fail_on),
            "cancelled": self.cancelled,
        }

    def top_findings(self, limit: int = 5) -> List[Finding]:
        """Return findings ordered by severity ranking."""

        severity_rank = {severity: idx for idx, severity in enumerate(SEVERITY_ORDER)}
        ordered = sorted(
            self.findings,
            key=lambda finding: (severity_rank[finding.severity], finding.path, finding.sort_key),
        )
        return ordered[:limit]


def format_summary_table(run: LintRun, fail_on: Severity = Severity.ERROR, max_findings: int = 5) -> str:
    """Create a human-readable summary table for console output."""

    lines: List[str] = []
    lines.append("Lint Summary")
    lines.append("=" * 60)
    header = f"{'File':<36} | {'Error':>5} | {'Warn':>5} | {'Info':>5}"
    lines.append(header)
    lines.append("-" * len(header))
    for report in run.reports:
        counts = report.summary
        lines.append(f"{_shorten(report.path, 36):<36} | {counts.error:>5} | {counts.warning:>5} | {counts.info:>5}")
    lines.append("-" * len(header))
    total = run.summary
    lines.append(f"{'TOTAL':<36} | {total.error:>5} | {total.warning:>5} | {total.info:>5}")
    lines.append("-" * len(header))
    status = "PASS" if run.passed(fail_on) else "FAIL"
    lines.append(f"Status    : {status} (fail-on {fail_on.value})")
    lines.append(f"Findings  : {total.total}")
    if run.cancelled:
        lines.append("Cancelled : run stopped before all files were analyzed")

    findings = run.top_findings(max_findings)
    if findings:
        lines.append("")
        lines.append("Top Findings")
        lines.append("-" * 60)
        for finding in findings:
            rule = finding.rule_id or "load"
            lines.append(f"[{finding.severity.value}] {rule}: {finding.message}")
            lines.append(f"  Location: {finding.path}:{finding.line}:{finding.column}")
    return "\n".join(lines)


def _shorten(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return "..." + text[-(width - 3):]
