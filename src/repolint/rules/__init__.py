"""Structural rule engine: ``check(config, entries) -> CheckResult``."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from repolint.core.matcher import MatcherCache, matches_any
from repolint.models import build_result
from repolint.rules.context import CheckContext
from repolint.rules.dependencies import check_dependencies
from repolint.rules.forbidden import check_forbid_names, check_forbid_paths
from repolint.rules.layout import check_layout
from repolint.rules.match import check_match
from repolint.rules.mirror import check_mirror
from repolint.rules.when import check_when

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from repolint.config.schema import Config
    from repolint.models import CheckResult, FileEntry

logger = logging.getLogger(__name__)

# Layout comes last: it alone fills the matched set its strict sweep reads.
CHECKS: tuple[Callable[[CheckContext], None], ...] = (
    check_forbid_paths,
    check_forbid_names,
    check_dependencies,
    check_mirror,
    check_when,
    check_match,
    check_layout,
)


def check(
    config: Config, entries: Sequence[FileEntry], *, cache: MatcherCache | None = None
) -> CheckResult:
    """Run every structural check over *entries* and return the result.

    Entries matching ``rules.ignore_paths`` are invisible to all checks but
    still count towards ``files_checked``.  Never raises for a validated
    config.
    """
    start = time.perf_counter()
    cache = cache if cache is not None else MatcherCache()

    ignore_paths = config.rules.ignore_paths
    visible = tuple(e for e in entries if not matches_any(e.relative_path, ignore_paths, cache))

    ctx = CheckContext(config=config, entries=visible, cache=cache)
    for run in CHECKS:
        run(ctx)

    duration_ms = (time.perf_counter() - start) * 1000
    logger.debug(
        "Checked %d entries (%d ignored): %d violations in %.1fms",
        len(entries),
        len(entries) - len(visible),
        len(ctx.violations),
        duration_ms,
    )
    return build_result(ctx.violations, files_checked=len(entries), duration_ms=duration_ms)


__all__ = ["CHECKS", "CheckContext", "check"]
