"""Core value types: scanned entries, violations, and check results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
VALID_SEVERITIES: frozenset[str] = frozenset({SEVERITY_ERROR, SEVERITY_WARNING})

MODE_STRICT = "strict"
MODE_WARN = "warn"
VALID_MODES: frozenset[str] = frozenset({MODE_STRICT, MODE_WARN})

RULE_FORBID_PATHS = "forbid_paths"
RULE_FORBID_NAMES = "forbid_names"
RULE_DEPENDENCIES = "dependencies"
RULE_MIRROR = "mirror"
RULE_WHEN = "when"
RULE_LAYOUT = "layout"
RULE_NAMING = "naming"
RULE_MATCH = "match"

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileEntry:
    """One filesystem node discovered by the scanner."""

    path: str  # absolute path
    relative_path: str  # forward slashes, no trailing slash
    is_directory: bool
    is_symlink: bool
    depth: int
    size: int | None = None
    mtime_ms: float | None = None


@dataclass(frozen=True)
class Violation:
    """A single structural deviation."""

    path: str
    rule: str
    message: str
    severity: str  # "error" | "warning"
    expected: str | None = None
    actual: str | None = None
    suggestions: tuple[str, ...] = ()


@dataclass(frozen=True)
class CheckSummary:
    """Aggregate counts for one check run."""

    total: int = 0
    errors: int = 0
    warnings: int = 0
    files_checked: int = 0
    duration_ms: float = 0.0


@dataclass(frozen=True)
class CheckResult:
    """Ordered violations plus summary for one check run."""

    violations: tuple[Violation, ...] = ()
    summary: CheckSummary = field(default_factory=CheckSummary)

    @property
    def has_errors(self) -> bool:
        return self.summary.errors > 0


# ---------------------------------------------------------------------------
# Construction / serialization helpers
# ---------------------------------------------------------------------------


def build_result(
    violations: list[Violation], *, files_checked: int, duration_ms: float
) -> CheckResult:
    """Freeze *violations* into a :class:`CheckResult` with computed summary."""
    errors = sum(1 for v in violations if v.severity == SEVERITY_ERROR)
    warnings = sum(1 for v in violations if v.severity == SEVERITY_WARNING)
    return CheckResult(
        violations=tuple(violations),
        summary=CheckSummary(
            total=len(violations),
            errors=errors,
            warnings=warnings,
            files_checked=files_checked,
            duration_ms=round(duration_ms, 2),
        ),
    )


def merge_results(results: list[CheckResult]) -> CheckResult:
    """Merge per-workspace results: concatenate violations, sum counts, max duration."""
    violations: list[Violation] = []
    for r in results:
        violations.extend(r.violations)
    return CheckResult(
        violations=tuple(violations),
        summary=CheckSummary(
            total=sum(r.summary.total for r in results),
            errors=sum(r.summary.errors for r in results),
            warnings=sum(r.summary.warnings for r in results),
            files_checked=sum(r.summary.files_checked for r in results),
            duration_ms=max((r.summary.duration_ms for r in results), default=0.0),
        ),
    )


def violation_to_dict(violation: Violation) -> dict[str, Any]:
    """Serialize a Violation, omitting unset optional fields."""
    data: dict[str, Any] = {
        "path": violation.path,
        "rule": violation.rule,
        "message": violation.message,
        "severity": violation.severity,
    }
    if violation.expected is not None:
        data["expected"] = violation.expected
    if violation.actual is not None:
        data["actual"] = violation.actual
    if violation.suggestions:
        data["suggestions"] = list(violation.suggestions)
    return data


def result_to_dict(result: CheckResult) -> dict[str, Any]:
    """Serialize a CheckResult to a JSON-compatible dict."""
    return {
        "violations": [violation_to_dict(v) for v in result.violations],
        "summary": asdict(result.summary),
    }


def result_from_dict(data: dict[str, Any]) -> CheckResult:
    """Inverse of :func:`result_to_dict`.

    Raises ``KeyError`` / ``TypeError`` when *data* is not a serialized result.
    """
    violations = tuple(
        Violation(
            path=str(v["path"]),
            rule=str(v["rule"]),
            message=str(v["message"]),
            severity=str(v["severity"]),
            expected=v.get("expected"),
            actual=v.get("actual"),
            suggestions=tuple(v.get("suggestions", ())),
        )
        for v in data["violations"]
    )
    summary_data = data["summary"]
    summary = CheckSummary(
        total=int(summary_data["total"]),
        errors=int(summary_data["errors"]),
        warnings=int(summary_data["warnings"]),
        files_checked=int(summary_data["files_checked"]),
        duration_ms=float(summary_data["duration_ms"]),
    )
    return CheckResult(violations=violations, summary=summary)
