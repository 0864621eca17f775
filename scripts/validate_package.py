#!/usr/bin/env -S uv run --script --quiet
# /// script
# requires-python = ">=3.11"
# dependencies = [
#   "jsonschema>=4.20.0",
#   "pyyaml>=6.0.0",
#   "referencing>=0.28.0",
#   "rich>=13.0.0",
# ]
# ///
"""
Pre-flight validation of a plugin package before it is packaged or consumed.

Two phases run over a fixed checklist:

Manifest (Phase A):
- Every listed file must exist under the base directory
- Every file must be readable UTF-8 text
- Every file must pass the structural heuristics (balanced braces and
  parentheses, a complete class block, required using directive)

Features (Phase B):
- The primary file must contain every required API marker

This is a heuristic gate, not a compiler: nothing is parsed or executed and
no file is modified.

Usage:
    ./scripts/validate_package.py                          # Built-in checklist
    ./scripts/validate_package.py --checklist plugin.yaml  # Custom checklist
    ./scripts/validate_package.py --base-dir ../StatForge  # Other package root

Exit codes:
    0 - All checks passed
    1 - One or more checks failed (or the checklist itself is invalid)
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from pathlib import Path
from typing import NoReturn

from rich.console import Console
from rich.markup import escape

# Add scripts directory to path for importing sibling modules
SCRIPT_DIR = Path(__file__).parent
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

# Import sibling modules (no relative imports)
from feature_checks import feature_presence  # noqa: E402
from package_checklist import (  # noqa: E402
    DEFAULT_CHECKLIST,
    Checklist,
    ChecklistError,
    FeatureExpectation,
    StructureRules,
    load_checklist,
)
from syntax_checks import (  # noqa: E402
    SourceReadError,
    check_syntax,
    read_failure,
    read_source,
    source_exists,
)

REPO_ROOT = Path(__file__).resolve().parent.parent

console = Console(soft_wrap=True, emoji=False)


class DebugConsole:
    """Debug output on stderr so the report on stdout is unaffected."""

    enabled = False
    console = Console(stderr=True, soft_wrap=True, highlight=False, emoji=False)

    @classmethod
    def debug(cls, msg: str) -> None:
        """Print debug message only when debug mode is enabled."""
        if not cls.enabled:
            return

        cls.console.print(f"[dim]\\[DEBUG] {escape(msg)}[/dim]")

    @classmethod
    def debug_dict(cls, label: str, data: dict[str, object]) -> None:
        """Pretty print a dict in debug mode."""
        if not cls.enabled:
            return

        cls.console.print(f"[dim]\\[DEBUG] {escape(label)}:[/dim]")
        for key, value in data.items():
            cls.console.print(f"[dim]        {escape(key)}: {escape(str(value))}[/dim]")


class FileStatus(Enum):
    OK = "ok"
    DEFECTS = "defects"
    MISSING = "missing"
    UNREADABLE = "unreadable"


@dataclass
class ValidationResult:
    """Outcome of the manifest checks for one file."""

    path: str
    status: FileStatus
    defects: list[str] = field(default_factory=list)
    content: str | None = field(default=None, repr=False)

    @property
    def clean(self) -> bool:
        return self.status is FileStatus.OK


@dataclass
class OverallResult:
    """Outcome of a full validation run.

    ``features`` is empty and ``features_checked`` is False when the primary
    file was missing or unreadable; no feature outcomes are invented then.
    """

    checklist: Checklist
    file_results: list[ValidationResult]
    features: list[tuple[FeatureExpectation, bool]]
    features_checked: bool

    def files_with_status(self, status: FileStatus) -> list[str]:
        return [r.path for r in self.file_results if r.status is status]

    @property
    def missing_features(self) -> list[str]:
        return [expectation.label for expectation, present in self.features if not present]

    @property
    def all_good(self) -> bool:
        return (
            all(r.clean for r in self.file_results)
            and self.features_checked
            and not self.missing_features
        )


def validate_file(base_dir: Path, relative_path: str, rules: StructureRules) -> ValidationResult:
    """Run the manifest checks for a single entry."""
    full_path = base_dir / relative_path

    try:
        if not source_exists(full_path):
            DebugConsole.debug(f"{relative_path}: not found at {full_path}")
            return ValidationResult(relative_path, FileStatus.MISSING)
        content = read_source(full_path)
    except SourceReadError as e:
        DebugConsole.debug(f"{relative_path}: {e}")
        return ValidationResult(relative_path, FileStatus.UNREADABLE, [read_failure(e)])

    defects = check_syntax(content, rules)
    status = FileStatus.DEFECTS if defects else FileStatus.OK
    DebugConsole.debug(f"{relative_path}: {len(content)} chars, {len(defects)} defect(s)")
    return ValidationResult(relative_path, status, defects, content)


def run_validation(checklist: Checklist, base_dir: Path) -> OverallResult:
    """Run the manifest phase then the feature phase.

    Args:
        checklist: Files, primary file, feature markers and rules to apply
        base_dir: Directory the manifest paths are relative to

    Returns:
        OverallResult with per-file and per-feature outcomes
    """
    DebugConsole.debug_dict(
        "Validation run",
        {
            "checklist": checklist.name,
            "base_dir": base_dir,
            "files": len(checklist.manifest),
            "features": len(checklist.features),
        },
    )

    file_results = [
        validate_file(base_dir, entry, checklist.rules) for entry in checklist.manifest
    ]

    primary = next(r for r in file_results if r.path == checklist.primary_file)
    if primary.content is None:
        DebugConsole.debug(f"Skipping feature checks: {primary.path} is {primary.status.value}")
        return OverallResult(checklist, file_results, [], features_checked=False)

    features = feature_presence(primary.content, checklist.features)
    return OverallResult(checklist, file_results, features, features_checked=True)


def count_failures(result: OverallResult) -> dict[str, int]:
    """Count failures by kind, in report order."""
    return {
        "missing file(s)": len(result.files_with_status(FileStatus.MISSING)),
        "unreadable file(s)": len(result.files_with_status(FileStatus.UNREADABLE)),
        "file(s) with syntax issues": len(result.files_with_status(FileStatus.DEFECTS)),
        "missing feature(s)": len(result.missing_features),
    }


def calculate_exit_code(result: OverallResult) -> int:
    return 0 if result.all_good else 1


def render_report(result: OverallResult, out: Console) -> None:
    """Print the human-readable report for a validation run."""
    checklist = result.checklist
    # Checklist text is user supplied; print :codes: literally
    emit = partial(out.print, emoji=False)

    emit(f"[bold cyan]🔍 Validating {escape(checklist.name)} implementation...[/bold cyan]")
    emit()

    for file_result in result.file_results:
        path = escape(file_result.path)
        if file_result.status is FileStatus.OK:
            emit(f"[green]✅ {path}[/green]")
        elif file_result.status is FileStatus.MISSING:
            emit(f"[red]❌ Missing file: {path}[/red]")
        else:
            heading = (
                "Unreadable file"
                if file_result.status is FileStatus.UNREADABLE
                else "Syntax issues in"
            )
            emit(f"[red]❌ {heading} {path}:[/red]")
            for defect in file_result.defects:
                emit(f"[red]   - {escape(defect)}[/red]")

    emit()
    emit("[bold cyan]🧪 Checking core API features...[/bold cyan]")

    if not result.features_checked:
        emit(
            f"[red]❌ Feature checks skipped: primary file "
            f"{escape(checklist.primary_file)} is unavailable[/red]"
        )
    for expectation, present in result.features:
        label = escape(expectation.label)
        if present:
            emit(f"[green]✅ {label}[/green]")
        else:
            emit(f"[red]❌ Missing {label}[/red]")

    emit()

    if result.all_good:
        emit(
            f"[bold green]🎉 All validation checks passed! "
            f"✨ {escape(checklist.name)} implementation looks good![/bold green]"
        )
    else:
        summary = ", ".join(
            f"{count} {kind}" for kind, count in count_failures(result).items() if count
        )
        if not result.features_checked:
            summary = f"{summary}, feature checks skipped"
        emit(f"[bold red]💥 Some validation checks failed: {summary}[/bold red]")


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit status 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        description="Pre-flight validation of a plugin package",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0 - All checks passed
  1 - One or more checks failed

Examples:
  ./scripts/validate_package.py                          # Built-in checklist
  ./scripts/validate_package.py --checklist plugin.yaml  # Custom checklist
        """,
    )
    parser.add_argument(
        "--checklist",
        type=Path,
        help="YAML checklist to use instead of the built-in one",
    )
    parser.add_argument(
        "--base-dir",
        type=Path,
        help=f"Directory the manifest paths are relative to (default: {REPO_ROOT})",
    )
    parser.add_argument("--debug", action="store_true", help="Print diagnostics to stderr")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the pre-flight validation."""
    args = build_parser().parse_args(argv)
    DebugConsole.enabled = args.debug

    checklist = DEFAULT_CHECKLIST
    if args.checklist is not None:
        try:
            checklist = load_checklist(args.checklist)
        except ChecklistError as e:
            console.print("[bold red]Checklist Errors:[/bold red]\n")
            for error in e.errors:
                console.print(f"  [red]• {escape(error)}[/red]")
            console.print()
            console.print("[bold red]💥 Validation not run: invalid checklist[/bold red]")
            return 1

    base_dir = args.base_dir.resolve() if args.base_dir is not None else REPO_ROOT

    result = run_validation(checklist, base_dir)
    render_report(result, console)
    return calculate_exit_code(result)


if __name__ == "__main__":
    sys.exit(main())
