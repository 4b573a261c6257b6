"""Companion-file requirements: ``source pattern -> required pattern(s)``."""

from __future__ import annotations

from typing import TYPE_CHECKING

from repolint.models import RULE_DEPENDENCIES

if TYPE_CHECKING:
    from repolint.rules.context import CheckContext


def check_dependencies(ctx: CheckContext) -> None:
    """Report each required pattern with no match while its source pattern has one.

    The violation path is the source pattern itself, not an individual file.
    """
    for source, targets in ctx.config.rules.dependencies.items():
        if not any(ctx.matches(e.relative_path, source) for e in ctx.entries):
            continue
        for target in targets:
            if any(ctx.matches(e.relative_path, target) for e in ctx.entries):
                continue
            ctx.add_violation(
                source,
                RULE_DEPENDENCIES,
                f'files matching "{source}" require "{target}" to exist',
            )
