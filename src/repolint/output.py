"""Result formatters: Rich console, JSON, SARIF 2.1.0."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.markup import escape

from repolint import __version__
from repolint.models import SEVERITY_ERROR, result_to_dict

if TYPE_CHECKING:
    from rich.console import Console

    from repolint.models import CheckResult

FORMAT_CONSOLE = "console"
FORMAT_JSON = "json"
FORMAT_SARIF = "sarif"
OUTPUT_FORMATS: tuple[str, ...] = (FORMAT_CONSOLE, FORMAT_JSON, FORMAT_SARIF)

SARIF_SCHEMA = "https://json.schemastore.org/sarif-2.1.0.json"
SARIF_VERSION = "2.1.0"
TOOL_NAME = "repolint"


def render_console(result: CheckResult, console: Console) -> None:
    """Render a CheckResult using Rich console output.

    Example::

        ✗ src/Utils
          expected kebab-case (naming)
          actual: Utils
          suggestion: utils

        1 error, 0 warnings (42 files checked, 3.1ms)
    """
    summary = result.summary
    if not result.violations:
        console.print(
            f"[green]✓ No issues found[/green] "
            f"({summary.files_checked} files checked, {summary.duration_ms:.1f}ms)"
        )
        return

    for v in result.violations:
        if v.severity == SEVERITY_ERROR:
            console.print(f"[red]✗ {escape(v.path)}[/red]", highlight=False)
        else:
            console.print(f"[yellow]! {escape(v.path)}[/yellow]", highlight=False)
        console.print(f"  {escape(v.message)} [dim]({v.rule})[/dim]", highlight=False)
        if v.expected is not None:
            console.print(f"  [dim]expected:[/dim] {escape(v.expected)}", highlight=False)
        if v.actual is not None:
            console.print(f"  [dim]actual:[/dim] {escape(v.actual)}", highlight=False)
        if v.suggestions:
            console.print(f"  [dim]suggestion:[/dim] {escape(v.suggestions[0])}", highlight=False)
        console.print()

    error_word = "error" if summary.errors == 1 else "errors"
    warning_word = "warning" if summary.warnings == 1 else "warnings"
    colour = "red" if summary.errors else "yellow"
    console.print(
        f"[{colour}]{summary.errors} {error_word}, {summary.warnings} {warning_word}[/{colour}] "
        f"({summary.files_checked} files checked, {summary.duration_ms:.1f}ms)"
    )


def format_json(result: CheckResult) -> str:
    """Format a CheckResult as JSON with ``violations`` and ``summary`` keys."""
    return json.dumps(result_to_dict(result), indent=2)


def format_sarif(result: CheckResult) -> str:
    """Format a CheckResult as a SARIF 2.1.0 log with one run."""
    rule_ids: list[str] = []
    for v in result.violations:
        if v.rule not in rule_ids:
            rule_ids.append(v.rule)

    results: list[dict[str, Any]] = []
    for v in result.violations:
        message = v.message
        if v.expected is not None:
            message += f" (expected: {v.expected})"
        entry: dict[str, Any] = {
            "ruleId": v.rule,
            "ruleIndex": rule_ids.index(v.rule),
            "level": "error" if v.severity == SEVERITY_ERROR else "warning",
            "message": {"text": message},
            "locations": [
                {
                    "physicalLocation": {
                        "artifactLocation": {"uri": v.path, "uriBaseId": "%SRCROOT%"}
                    }
                }
            ],
        }
        if v.suggestions:
            entry["properties"] = {"suggestions": list(v.suggestions)}
        results.append(entry)

    document = {
        "$schema": SARIF_SCHEMA,
        "version": SARIF_VERSION,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": TOOL_NAME,
                        "version": __version__,
                        "rules": [
                            {"id": rule_id, "shortDescription": {"text": f"{rule_id} rule"}}
                            for rule_id in rule_ids
                        ],
                    }
                },
                "results": results,
            }
        ],
    }
    return json.dumps(document, indent=2)


def format_result(result: CheckResult, fmt: str) -> str:
    """Text form of *result* for the machine-readable formats."""
    if fmt == FORMAT_SARIF:
        return format_sarif(result)
    return format_json(result)
