"""Mutable state shared by the structural checks of one run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from repolint.core.matcher import MatcherCache, normalize_path
from repolint.models import MODE_STRICT, SEVERITY_ERROR, SEVERITY_WARNING, Violation

if TYPE_CHECKING:
    from repolint.config.schema import Config
    from repolint.models import FileEntry


@dataclass
class Snapshot:
    """Point-in-time copy of the rollback-able parts of a :class:`CheckContext`."""

    violation_count: int
    matched: frozenset[str]


@dataclass
class CheckContext:
    """Entries, lookup sets, accumulated violations and the matched set.

    Exactly one context exists per check.  Only the layout check writes to
    ``matched``; the other checks only append violations.
    """

    config: Config
    entries: tuple[FileEntry, ...]
    cache: MatcherCache = field(default_factory=MatcherCache)
    files: frozenset[str] = field(init=False)
    dirs: frozenset[str] = field(init=False)
    violations: list[Violation] = field(default_factory=list, init=False)
    matched: set[str] = field(default_factory=set, init=False)

    def __post_init__(self) -> None:
        self.files = frozenset(e.relative_path for e in self.entries if not e.is_directory)
        self.dirs = frozenset(e.relative_path for e in self.entries if e.is_directory)

    # -- severity / reporting --------------------------------------------------

    @property
    def severity(self) -> str:
        return SEVERITY_ERROR if self.config.mode == MODE_STRICT else SEVERITY_WARNING

    def add_violation(
        self,
        path: str,
        rule: str,
        message: str,
        *,
        expected: str | None = None,
        actual: str | None = None,
        suggestions: tuple[str, ...] = (),
    ) -> None:
        """Record a violation whose severity follows the configured mode."""
        self.violations.append(
            Violation(path, rule, message, self.severity, expected, actual, suggestions)
        )

    def add_warning(self, path: str, rule: str, message: str) -> None:
        """Record a diagnostic that is a warning regardless of mode."""
        self.violations.append(Violation(path, rule, message, SEVERITY_WARNING))

    # -- matched set -----------------------------------------------------------

    def mark_matched(self, path: str) -> None:
        self.matched.add(path)

    def is_matched(self, path: str) -> bool:
        return path in self.matched

    # -- speculative checking ----------------------------------------------------

    def snapshot(self) -> Snapshot:
        return Snapshot(len(self.violations), frozenset(self.matched))

    def restore(self, snap: Snapshot) -> None:
        """Drop every violation and matched path recorded after *snap*."""
        del self.violations[snap.violation_count :]
        self.matched = set(snap.matched)

    # -- lookups -----------------------------------------------------------------

    def matches(self, path: str, pattern: str) -> bool:
        return self.cache.get(pattern)(normalize_path(path))

    def matches_any(self, path: str, patterns: tuple[str, ...] | list[str]) -> bool:
        if not patterns:
            return False
        normalized = normalize_path(path)
        return any(self.cache.get(p)(normalized) for p in patterns)
