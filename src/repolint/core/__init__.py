"""Core utilities: glob matcher, case styles, filesystem scanner."""

from repolint.core.case import case_name, is_hidden, suggest_case, validate_case
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
    normalize_unicode,
)
from repolint.core.scanner import ScanOptions, parse_gitignore, scan, workspace_dirs

__all__ = [
    "MatcherCache",
    "PatternError",
    "ScanOptions",
    "case_name",
    "create_matcher",
    "expand_braces",
    "get_basename",
    "get_depth",
    "get_parent",
    "is_hidden",
    "join_path",
    "matches",
    "matches_any",
    "normalize_path",
    "normalize_unicode",
    "parse_gitignore",
    "scan",
    "suggest_case",
    "validate_case",
    "workspace_dirs",
]
