"""Conditional requirements: a trigger file demands sibling files."""

from __future__ import annotations

from typing import TYPE_CHECKING

from repolint.core.matcher import join_path
from repolint.models import RULE_WHEN

if TYPE_CHECKING:
    from repolint.rules.context import CheckContext


def check_when(ctx: CheckContext) -> None:
    when = ctx.config.rules.when
    if not when:
        return
    # the root directory is never a scanned entry but can hold triggers too
    for directory in ["", *sorted(ctx.dirs)]:
        for trigger, condition in when.items():
            trigger_path = join_path(directory, trigger)
            if trigger_path not in ctx.files:
                continue
            for required in condition.requires:
                required_path = join_path(directory, required)
                if required_path not in ctx.files:
                    ctx.add_violation(
                        trigger_path,
                        RULE_WHEN,
                        f'"{trigger}" requires "{required}" to exist',
                        expected=required_path,
                    )
