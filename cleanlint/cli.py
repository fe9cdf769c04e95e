"""Command-line entry point for cleanlint."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import List

from .config import DEFAULT_CONFIG_FILENAME, LintSettings, load_settings
from .engine import analyze_paths, collect_files, select_rules
from .errors import ConfigError
from .logging import configure_logging, get_logger
from .result import LintRun, format_summary_table
from .rules import RuleRegistry, default_registry
from .severity import Severity

DEFAULT_TARGETS = (".",)

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cleanlint",
        description="Check source code against mechanically checkable clean-code principles",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        help="Files or directories to lint (directories are walked for matching files).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to a YAML configuration file (defaults to ./{DEFAULT_CONFIG_FILENAME} when present).",
    )
    parser.add_argument(
        "--enable",
        dest="enabled_rules",
        action="append",
        default=None,
        help="Rule id to run (repeatable); overrides 'enabled_rules' from the config.",
    )
    parser.add_argument(
        "--fail-on",
        choices=[severity.value for severity in Severity],
        default=None,
        help="Minimum severity that makes the exit status non-zero.",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Console output format (defaults to text).",
    )
    parser.add_argument(
        "--out",
        "--output",
        dest="output_path",
        type=str,
        default=None,
        help="Path to write the JSON report (e.g., artifacts/lint.json).",
    )
    parser.add_argument(
        "--jobs",
        "-j",
        type=int,
        default=None,
        help="Number of files analyzed in parallel.",
    )
    parser.add_argument(
        "--list-rules",
        action="store_true",
        help="List the registered rules and exit.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log records to this file.",
    )
    return parser


def load_cli_settings(args: argparse.Namespace) -> LintSettings:
    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
    else:
        config_path = Path(DEFAULT_CONFIG_FILENAME)
    settings = load_settings(config_path)
    return settings.with_overrides(
        enabled_rules=tuple(args.enabled_rules) if args.enabled_rules else None,
        fail_on=args.fail_on,
        jobs=args.jobs,
    )


def list_rules(registry: RuleRegistry, settings: LintSettings) -> None:
    for rule in registry.all():
        severity = settings.severity_for(rule.id, rule.default_severity)
        print(f"{rule.id:<20} {severity.value:<8} {rule.description}")


def write_output(run: LintRun, output_path: str | None, report_format: str, fail_on: Severity) -> None:
    payload = json.dumps(run.to_dict(fail_on), indent=2)

    if report_format == "json" and not output_path:
        print(payload)
        return

    print(format_summary_table(run, fail_on))
    if output_path:
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(payload, encoding="utf-8")
        print(f"\nReport written to {output_path}")


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        settings = load_cli_settings(args)
        registry = default_registry()
        select_rules(registry, settings.enabled_rules)
    except ConfigError as exc:
        parser.exit(2, f"cleanlint: configuration error: {exc}\n")

    if args.list_rules:
        list_rules(registry, settings)
        return 0

    files = collect_files(args.paths or list(DEFAULT_TARGETS), settings)
    logger.debug("Collected %d files", len(files))
    run = analyze_paths(files, settings, registry)
    write_output(run, args.output_path, args.format, settings.fail_on)
    return run.exit_code(settings.fail_on)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
