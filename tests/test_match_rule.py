"""Tests for repolint.rules.match: pattern-scoped directory contracts."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from repolint.config.loader import parse_config
from repolint.rules import check
from repolint.rules.match import build_tree

if TYPE_CHECKING:
    from collections.abc import Callable

    from repolint.models import CheckResult, FileEntry


def _run(
    match: list[dict[str, Any]], entries: list[FileEntry], *, mode: str = "warn"
) -> CheckResult:
    return check(parse_config({"mode": mode, "rules": {"match": match}}), entries)


def _tuples(result: CheckResult) -> list[tuple[str, str]]:
    return [(v.path, v.message) for v in result.violations]


class TestBuildTree:
    def test_files_and_implied_directories(
        self, make_entries: Callable[..., list[FileEntry]]
    ) -> None:
        root = build_tree(make_entries("src/a/index.ts", "README.md"))
        assert root.files == ["README.md"]
        src = root.children["src"]
        assert src.path == "src"
        assert src.children["a"].files == ["index.ts"]
        assert src.children["a"].entry_names() == ["index.ts"]


class TestRequire:
    def test_missing_required_entry(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        entries = make_entries("src/features/auth/index.ts", "src/features/billing/api.ts")
        result = _run([{"pattern": "src/features/*", "require": ["index.ts"]}], entries)
        assert _tuples(result) == [("src/features/billing", "missing required entry: index.ts")]
        assert result.violations[0].rule == "match"

    def test_exclude_skips_directories(
        self, make_entries: Callable[..., list[FileEntry]]
    ) -> None:
        entries = make_entries("src/features/auth/index.ts", "src/features/billing/api.ts")
        rule = {
            "pattern": "src/features/*",
            "require": ["index.ts"],
            "exclude": ["src/features/billing"],
        }
        assert _run([rule], entries).violations == ()

    def test_glob_requirement(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        entries = make_entries("pkgs/a/README.md", "pkgs/b/readme.txt")
        result = _run([{"pattern": "pkgs/*", "require": ["README*"]}], entries)
        assert _tuples(result) == [("pkgs/b", "missing required entry: README*")]


class TestStrictAndForbid:
    def test_strict_allows_required_and_allowed(
        self, make_entries: Callable[..., list[FileEntry]]
    ) -> None:
        entries = make_entries("mods/auth/index.ts", "mods/auth/util.ts", "mods/auth/notes.md")
        rule = {"pattern": "mods/*", "strict": True, "require": ["index.ts"], "allow": ["*.ts"]}
        result = _run([rule], entries)
        assert _tuples(result) == [
            ("mods/auth/notes.md", "entry not allowed by strict match rule")
        ]

    def test_strict_without_allowed_patterns(
        self, make_entries: Callable[..., list[FileEntry]]
    ) -> None:
        result = _run([{"pattern": "mods/*", "strict": True}], make_entries("mods/auth/x.ts"))
        assert _tuples(result) == [
            ("mods/auth/x.ts", "entry not allowed (strict mode with no allowed patterns)")
        ]

    def test_forbid(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        entries = make_entries("mods/auth/index.ts", "mods/auth/index.test.ts")
        result = _run([{"pattern": "mods/*", "forbid": ["*.test.ts"]}], entries)
        assert _tuples(result) == [
            ("mods/auth/index.test.ts", "forbidden entry in matched directory")
        ]


class TestCase:
    def test_directory_case(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        entries = make_entries("src/features/MyFeature/", "src/features/billing/")
        result = _run([{"pattern": "src/features/*", "case": "kebab"}], entries)
        [violation] = result.violations
        assert violation.path == "src/features/MyFeature"
        assert violation.message == "directory name must be kebab-case"
        assert violation.suggestions == ("my-feature",)

    def test_child_case(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        entries = make_entries("components/Button.tsx", "components/card.tsx")
        result = _run([{"pattern": "components", "child_case": "pascal"}], entries)
        assert _tuples(result) == [("components/card.tsx", "name must be PascalCase")]


class TestDiagnostics:
    def test_unmatched_pattern_warns_at_root(
        self, make_entries: Callable[..., list[FileEntry]]
    ) -> None:
        rule = {"pattern": "nope/*", "require": ["x"]}
        result = _run([rule], make_entries("a.ts"), mode="strict")
        assert _tuples(result) == [(".", 'match pattern "nope/*" did not match any directories')]
        assert result.violations[0].severity == "warning"
        assert not result.has_errors

    def test_empty_pattern_warns(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        result = _run([{"pattern": "  "}], make_entries("a.ts"))
        assert _tuples(result) == [(".", "match rule has empty pattern - skipping")]

    def test_duplicate_findings_reported_once(
        self, make_entries: Callable[..., list[FileEntry]]
    ) -> None:
        rule = {"pattern": "mods/*", "require": ["index.ts"]}
        result = _run([rule, dict(rule)], make_entries("mods/auth/x.ts"))
        assert len(result.violations) == 1
