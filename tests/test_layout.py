"""Tests for repolint.rules.layout: expected-structure tree evaluation."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

from repolint.config.loader import parse_config
from repolint.core.scanner import ScanOptions, scan
from repolint.rules import check

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from repolint.models import CheckResult, FileEntry


def _run(data: dict[str, Any], entries: list[FileEntry]) -> CheckResult:
    return check(parse_config(data), entries)


def _tuples(result: CheckResult) -> list[tuple[str, str, str]]:
    return [(v.path, v.rule, v.message) for v in result.violations]


# ---------------------------------------------------------------------------
# Files and directories
# ---------------------------------------------------------------------------


class TestFilesAndDirs:
    def test_required_file_missing(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        data = {"layout": {"type": "dir", "children": {"package.json": {"required": True}}}}
        result = _run(data, make_entries("README.md"))
        assert _tuples(result) == [("package.json", "layout", "required file is missing")]
        assert result.violations[0].severity == "warning"

    def test_required_file_present(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        data = {"layout": {"type": "dir", "children": {"package.json": {"required": True}}}}
        assert _run(data, make_entries("package.json")).violations == ()

    def test_required_directory_missing_is_error_in_strict_mode(
        self, make_entries: Callable[..., list[FileEntry]]
    ) -> None:
        data = {
            "mode": "strict",
            "layout": {"type": "dir", "children": {"src": {"type": "dir", "required": True}}},
        }
        result = _run(data, make_entries())
        assert _tuples(result) == [("src", "layout", "required directory is missing")]
        assert result.violations[0].severity == "error"
        assert result.has_errors

    def test_optional_missing_entries_are_silent(
        self, make_entries: Callable[..., list[FileEntry]]
    ) -> None:
        data = {
            "layout": {
                "type": "dir",
                "children": {".env": {"optional": True}, "docs": {"type": "dir"}},
            }
        }
        assert _run(data, make_entries("README.md")).violations == ()

    def test_file_case_checked(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        data = {
            "layout": {
                "type": "dir",
                "children": {"src": {"type": "dir", "children": {"MyFile.ts": {"case": "kebab"}}}},
            }
        }
        result = _run(data, make_entries("src/MyFile.ts"))
        [violation] = result.violations
        assert violation.path == "src/MyFile.ts"
        assert violation.rule == "naming"
        assert violation.message == "expected kebab-case"
        assert violation.actual == "MyFile.ts"
        assert violation.suggestions == ("my-file.ts",)


class TestStrict:
    def test_strict_mode_reports_unexpected_file(
        self, make_entries: Callable[..., list[FileEntry]]
    ) -> None:
        data = {"mode": "strict", "layout": {"type": "dir", "children": {"package.json": None}}}
        result = _run(data, make_entries("package.json", "unexpected.ts"))
        assert _tuples(result) == [
            ("unexpected.ts", "layout", "unexpected file (not defined in layout)")
        ]
        assert result.summary.errors == 1

    def test_warn_mode_has_no_sweep(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        data = {"layout": {"type": "dir", "children": {"package.json": None}}}
        assert _run(data, make_entries("package.json", "unexpected.ts")).violations == ()

    def test_strict_directory_reports_unlisted_children(
        self, make_entries: Callable[..., list[FileEntry]]
    ) -> None:
        data = {"layout": {"type": "dir", "strict": True, "children": {"src": {"type": "dir"}}}}
        result = _run(data, make_entries("src/x.ts", "extra.txt"))
        assert _tuples(result) == [("extra.txt", "layout", '"extra.txt" is not allowed in root')]

    def test_sweep_skips_ignore_paths(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        data = {
            "mode": "strict",
            "layout": {"type": "dir", "children": {"package.json": None}},
            "rules": {"ignore_paths": ["*.md"]},
        }
        assert _run(data, make_entries("package.json", "NOTES.md")).violations == ()


# ---------------------------------------------------------------------------
# Dynamic nodes
# ---------------------------------------------------------------------------


class TestParam:
    def test_param_checks_case_of_each_child(
        self, make_entries: Callable[..., list[FileEntry]]
    ) -> None:
        component = {"type": "param", "case": "pascal", "child": {"type": "dir"}}
        data = {
            "layout": {
                "type": "dir",
                "children": {"components": {"type": "dir", "children": {"$component": component}}},
            }
        }
        result = _run(data, make_entries("components/Button/", "components/my-card/"))
        [violation] = result.violations
        assert violation.path == "components/my-card"
        assert violation.rule == "naming"
        assert violation.suggestions == ("MyCard",)

    def test_param_pattern_filters_children(
        self, make_entries: Callable[..., list[FileEntry]]
    ) -> None:
        data = {
            "mode": "strict",
            "layout": {
                "type": "dir",
                "children": {"$route": {"type": "param", "pattern": "\\[*\\]"}},
            },
        }
        result = _run(data, make_entries("[id]", "plain"))
        assert _tuples(result) == [("plain", "layout", "unexpected file (not defined in layout)")]


class TestMany:
    @staticmethod
    def _layout(**bounds: int) -> dict[str, Any]:
        return {
            "layout": {
                "type": "dir",
                "children": {
                    "src": {"type": "dir", "children": {"$mods": {"type": "many", **bounds}}}
                },
            }
        }

    def test_below_minimum(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        result = _run(self._layout(min=2, max=2), make_entries("src/a.ts"))
        assert _tuples(result) == [("src", "layout", "below minimum count: 1 < 2")]

    def test_above_maximum(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        result = _run(self._layout(max=2), make_entries("src/a.ts", "src/b.ts", "src/c.ts"))
        assert _tuples(result) == [("src", "layout", "exceeded maximum count: 3 > 2")]

    def test_within_bounds(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        result = _run(self._layout(min=1, max=3), make_entries("src/a.ts", "src/b.ts"))
        assert result.violations == ()

    def test_pattern_limits_what_counts(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        data = {
            "layout": {
                "type": "dir",
                "children": {"$hooks": {"type": "many", "pattern": "use*.ts", "max": 1}},
            }
        }
        result = _run(data, make_entries("useA.ts", "useB.ts", "other.ts"))
        assert _tuples(result) == [("", "layout", "exceeded maximum count: 2 > 1")]


class TestRecursive:
    def test_case_applies_at_every_level(
        self, make_entries: Callable[..., list[FileEntry]]
    ) -> None:
        data = {
            "mode": "strict",
            "layout": {
                "type": "dir",
                "children": {"docs": {"type": "recursive", "case": "kebab"}},
            },
        }
        entries = make_entries("docs/guide/intro.md", "docs/BadName/x.md")
        result = _run(data, entries)
        assert [(v.path, v.rule) for v in result.violations] == [("docs/BadName", "naming")]

    def test_max_depth_stops_descent(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        data = {
            "mode": "strict",
            "layout": {
                "type": "dir",
                "children": {"docs": {"type": "recursive", "max_depth": 0}},
            },
        }
        result = _run(data, make_entries("docs/a/b.md"))
        assert _tuples(result) == [
            ("docs/a/b.md", "layout", "unexpected file (not defined in layout)")
        ]


class TestEither:
    @staticmethod
    def _layout(*, optional: bool = False) -> dict[str, Any]:
        return {
            "layout": {
                "type": "dir",
                "children": {
                    "config": {
                        "type": "either",
                        "optional": optional,
                        "variants": [{"required": True}, {"type": "dir"}],
                    }
                },
            }
        }

    def test_failed_variant_is_rolled_back(
        self, make_entries: Callable[..., list[FileEntry]]
    ) -> None:
        result = _run(self._layout(), make_entries("config/main.ts"))
        assert result.violations == ()

    def test_first_variant_wins(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        result = _run(self._layout(), make_entries("config"))
        assert result.violations == ()

    def test_no_variant_matches(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        result = _run(self._layout(), make_entries("other.txt"))
        assert _tuples(result) == [("config", "layout", "none of the expected variants matched")]

    def test_directory_variant_after_file_variant(
        self, make_entries: Callable[..., list[FileEntry]]
    ) -> None:
        variants = [
            {"type": "file", "required": True},
            {"type": "dir", "children": {"index.ts": None}},
        ]
        pkg = {"type": "either", "variants": variants}
        data = {"mode": "strict", "layout": {"type": "dir", "children": {"pkg": pkg}}}
        result = _run(data, make_entries("pkg/index.ts"))
        assert result.violations == ()

    def test_optional_either_is_silent(self, make_entries: Callable[..., list[FileEntry]]) -> None:
        assert _run(self._layout(optional=True), make_entries("other.txt")).violations == ()


class TestSymlinkedDirectories:
    def test_unfollowed_link_satisfies_directory_node(
        self, tmp_project: Path, write_tree: Callable[..., Path]
    ) -> None:
        write_tree(tmp_project, "real/a.txt")
        os.symlink(tmp_project / "real", tmp_project / "link")
        data = {
            "mode": "strict",
            "layout": {
                "type": "dir",
                "children": {
                    "real": {"type": "recursive"},
                    "link": {"type": "dir", "required": True},
                },
            },
        }
        result = _run(data, scan(ScanOptions(root=str(tmp_project))))
        assert result.violations == ()
