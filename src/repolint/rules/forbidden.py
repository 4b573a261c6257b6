"""Forbidden path patterns and forbidden basenames."""

from __future__ import annotations

from typing import TYPE_CHECKING

from repolint.core.matcher import get_basename
from repolint.models import RULE_FORBID_NAMES, RULE_FORBID_PATHS

if TYPE_CHECKING:
    from repolint.rules.context import CheckContext


def check_forbid_paths(ctx: CheckContext) -> None:
    patterns = ctx.config.rules.forbid_paths
    if not patterns:
        return
    for entry in ctx.entries:
        if ctx.matches_any(entry.relative_path, patterns):
            ctx.add_violation(
                entry.relative_path, RULE_FORBID_PATHS, "path matches forbidden pattern"
            )


def check_forbid_names(ctx: CheckContext) -> None:
    """Exact basename comparison; no glob expansion."""
    names = set(ctx.config.rules.forbid_names)
    if not names:
        return
    for entry in ctx.entries:
        basename = get_basename(entry.relative_path)
        if basename in names:
            ctx.add_violation(
                entry.relative_path, RULE_FORBID_NAMES, f'filename "{basename}" is forbidden'
            )
