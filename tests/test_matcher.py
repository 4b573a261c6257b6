"""Tests for repolint.core.matcher: glob semantics, normalization, caching."""

from __future__ import annotations

import pytest

from repolint.core.matcher import (
    MatcherCache,
    PatternError,
    create_matcher,
    expand_braces,
    get_basename,
    get_depth,
    get_parent,
    join_path,
    matches,
    matches_any,
    normalize_path,
    normalize_pattern,
)

# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


class TestNormalizePath:
    def test_backslashes_become_slashes(self) -> None:
        assert normalize_path("src\\lib\\a.ts") == "src/lib/a.ts"

    def test_slash_runs_collapse(self) -> None:
        assert normalize_path("a//b///c") == "a/b/c"

    def test_trailing_slash_stripped(self) -> None:
        assert normalize_path("src/") == "src"

    def test_leading_slash_preserved(self) -> None:
        assert normalize_path("/abs/path/") == "/abs/path"
        assert normalize_path("/") == "/"

    def test_unicode_composed(self) -> None:
        decomposed = "café.txt"
        assert normalize_path(decomposed) == "café.txt"

    def test_pattern_keeps_escapes(self) -> None:
        assert normalize_pattern("\\[*\\]") == "\\[*\\]"

    def test_pattern_backslash_separator(self) -> None:
        assert normalize_pattern("src\\lib\\a.ts") == "src/lib/a.ts"


# ---------------------------------------------------------------------------
# Wildcards
# ---------------------------------------------------------------------------


class TestWildcards:
    def test_star_stays_in_segment(self) -> None:
        assert matches("src/a.ts", "src/*.ts")
        assert not matches("src/sub/a.ts", "src/*.ts")

    def test_globstar_matches_zero_segments(self) -> None:
        assert matches("a/b", "a/**/b")
        assert matches("src/a.ts", "src/**/*.ts")

    def test_globstar_matches_many_segments(self) -> None:
        assert matches("a/x/y/z/b", "a/**/b")
        assert matches("src/x/y/a.ts", "src/**/*.ts")

    def test_trailing_globstar_includes_directory_itself(self) -> None:
        assert matches("node_modules", "node_modules/**")
        assert matches("node_modules/pkg/index.js", "node_modules/**")
        assert not matches("node_modules_old", "node_modules/**")

    def test_question_mark_single_char(self) -> None:
        assert matches("ab.ts", "a?.ts")
        assert not matches("abc.ts", "a?.ts")
        assert not matches("a/.ts", "a?.ts")

    def test_character_classes(self) -> None:
        assert matches("a.ts", "[abc].ts")
        assert not matches("d.ts", "[abc].ts")
        assert matches("d.ts", "[!abc].ts")
        assert matches("d.ts", "[^abc].ts")

    def test_dotfiles_not_special(self) -> None:
        assert matches(".env", "*")
        assert matches("config/.eslintrc.json", "**/*.json")

    def test_negation(self) -> None:
        assert matches("a.ts", "!*.js")
        assert not matches("a.js", "!*.js")

    def test_escaped_metacharacters_are_literal(self) -> None:
        assert matches("[id]", "\\[*\\]")
        assert matches("app/[slug]", "\\[*\\]")
        assert not matches("id", "\\[*\\]")

    def test_absolute_and_relative_differ(self) -> None:
        assert not matches("/src/a.ts", "src/*.ts")

    def test_unicode_forms_match(self) -> None:
        assert matches("café.txt", "café.txt")
        assert matches("café.txt", "café.txt")

    def test_empty_pattern_matches_only_empty_path(self) -> None:
        assert matches("", "")
        assert not matches("a", "")


class TestBasenamePatterns:
    @pytest.mark.parametrize("path", ["debug.log", "src/debug.log", "a/b/c/debug.log"])
    def test_glob_basename_matches_at_any_depth(self, path: str) -> None:
        assert matches(path, "*.log")

    def test_literal_name_matches_exact_path_only(self) -> None:
        assert matches("package.json", "package.json")
        assert not matches("packages/a/package.json", "package.json")


# ---------------------------------------------------------------------------
# Braces
# ---------------------------------------------------------------------------


class TestBraces:
    def test_expand_single_group(self) -> None:
        assert expand_braces("*.{ts,tsx}") == ["*.ts", "*.tsx"]

    def test_expand_sequential_groups(self) -> None:
        assert expand_braces("{a,b}/{c,d}") == ["a/c", "a/d", "b/c", "b/d"]

    def test_unclosed_brace_is_literal(self) -> None:
        assert expand_braces("{a,b") == ["{a,b"]

    def test_nested_braces_rejected(self) -> None:
        with pytest.raises(PatternError, match="nested braces"):
            expand_braces("{a,{b,c}}")

    def test_nested_braces_fail_when_matching(self) -> None:
        with pytest.raises(PatternError):
            matches("a", "{a,{b,c}}", MatcherCache())

    def test_inverted_class_range_raises_pattern_error(self) -> None:
        with pytest.raises(PatternError, match="invalid pattern"):
            matches("a", "[z-a]*", MatcherCache())

    def test_brace_match(self) -> None:
        assert matches("src/a.tsx", "*.{ts,tsx}")
        assert matches("lib/x.ts", "{src,lib}/*.ts")
        assert not matches("a.js", "*.{ts,tsx}")


# ---------------------------------------------------------------------------
# Cache and helpers
# ---------------------------------------------------------------------------


class TestMatcherCache:
    def test_reuses_compiled_pattern(self) -> None:
        cache = MatcherCache()
        assert cache.get("*.ts") is cache.get("*.ts")
        assert len(cache) == 1

    def test_equivalent_patterns_share_entry(self) -> None:
        cache = MatcherCache()
        cache.get("src/")
        cache.get("src")
        assert len(cache) == 1

    def test_evicts_oldest_when_full(self) -> None:
        cache = MatcherCache(max_size=10)
        first = cache.get("p0/*")
        for i in range(1, 11):
            cache.get(f"p{i}/*")
        assert len(cache) == 10
        assert cache.get("p0/*") is not first

    def test_clear(self) -> None:
        cache = MatcherCache()
        cache.get("*.ts")
        cache.clear()
        assert len(cache) == 0


class TestCreateMatcher:
    def test_any_of_patterns(self) -> None:
        is_ts = create_matcher(["*.ts", "*.tsx"], MatcherCache())
        assert is_ts("src/file.ts")
        assert is_ts("file.tsx")
        assert not is_ts("src/file.js")

    def test_single_string_pattern(self) -> None:
        assert create_matcher("src/**")("src/a/b")

    def test_empty_list_matches_nothing(self) -> None:
        assert not create_matcher([])("anything")

    def test_input_paths_are_normalized(self) -> None:
        assert create_matcher(["src/*.ts"])("src\\a.ts")

    def test_matches_any(self) -> None:
        assert matches_any("a/b.md", ["*.ts", "*.md"])
        assert not matches_any("a/b.md", [])


class TestPathHelpers:
    def test_basename(self) -> None:
        assert get_basename("src/a.ts") == "a.ts"
        assert get_basename("a.ts") == "a.ts"

    def test_parent(self) -> None:
        assert get_parent("src/lib/a.ts") == "src/lib"
        assert get_parent("a.ts") == ""

    def test_depth(self) -> None:
        assert get_depth("") == 0
        assert get_depth("a") == 1
        assert get_depth("a/b/c") == 3

    def test_join_skips_empty(self) -> None:
        assert join_path("", "a", "", "b") == "a/b"
        assert join_path("") == ""
