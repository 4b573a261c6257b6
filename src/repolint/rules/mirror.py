"""Mirrored file pairs: every source file needs a counterpart under the target tree.

Wildcards in the source pattern capture path segments, which are
substituted into the target pattern's wildcards in order::

    source: src/*.ts         src/util.ts
    target: tests/*.test.ts  -> tests/util.test.ts

With ``pattern: "*.ts -> *.spec.ts"`` the captured basename has its suffix
rewritten instead.  Patterns whose wildcards cannot be paired one-to-one are
skipped for the files concerned.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from repolint.core.matcher import join_path, matches, normalize_pattern
from repolint.models import RULE_MIRROR

if TYPE_CHECKING:
    from repolint.config.schema import MirrorRule
    from repolint.rules.context import CheckContext

logger = logging.getLogger(__name__)

_ARROW = "->"


@dataclass(frozen=True)
class _Capture:
    whole: str  # the full matched segment(s)
    stars: tuple[str, ...]  # text matched by each ``*`` in a partial segment


def _partial_regex(part: str) -> re.Pattern[str]:
    return re.compile("^" + "(.*)".join(re.escape(p) for p in part.split("*")) + "$")


def extract_captures(path: str, pattern: str) -> list[_Capture] | None:
    """Return the wildcard captures of *path* against *pattern*, or None on mismatch."""
    path_parts = path.split("/")
    normalized = normalize_pattern(pattern)
    implicit = "/" not in normalized and "*" in normalized
    if implicit:
        # basename pattern; the implied directory prefix is not a capture
        normalized = f"**/{normalized}"
    pattern_parts = normalized.split("/")
    captures: list[_Capture] = []
    idx = 0
    for pos, part in enumerate(pattern_parts):
        if part == "**":
            remaining = len(pattern_parts) - pos - 1
            consumed = len(path_parts) - remaining - idx
            if consumed < 0:
                return None
            captures.append(_Capture("/".join(path_parts[idx : idx + consumed]), ()))
            idx += consumed
            continue
        if idx >= len(path_parts):
            return None
        segment = path_parts[idx]
        idx += 1
        if part == "*":
            captures.append(_Capture(segment, (segment,)))
        elif "*" in part:
            hit = _partial_regex(part).match(segment)
            if hit is None:
                return None
            captures.append(_Capture(segment, hit.groups()))
        elif any(ch in part for ch in "?[{"):
            if not matches(segment, part):
                return None
        elif segment != part:
            return None
    if idx != len(path_parts):
        return None
    return captures[1:] if implicit else captures


def _swap_suffix(name: str, rewrite: str) -> str:
    source, _, target = rewrite.partition(_ARROW)
    from_suffix = source.strip().replace("*", "")
    to_suffix = target.strip().replace("*", "")
    if from_suffix and name.endswith(from_suffix):
        return name[: -len(from_suffix)] + to_suffix
    return name


def build_target_path(path: str, rule: MirrorRule) -> str | None:
    """Map a source file *path* to the mirrored path required by *rule*."""
    captures = extract_captures(path, rule.source)
    if captures is None:
        return None

    out: list[str] = []
    remaining = iter(captures)
    for part in normalize_pattern(rule.target).split("/"):
        if "*" not in part:
            out.append(part)
            continue
        capture = next(remaining, None)
        if capture is None:
            logger.debug("Mirror target %s has more wildcards than %s", rule.target, rule.source)
            return None
        if part in ("*", "**"):
            out.append(capture.whole)
        elif rule.pattern and _ARROW in rule.pattern:
            out.append(_swap_suffix(capture.whole, rule.pattern))
        else:
            stars = capture.stars or (capture.whole,)
            pieces = part.split("*")
            if len(pieces) - 1 != len(stars):
                logger.debug("Cannot pair wildcards of %s with %s", rule.target, rule.source)
                return None
            built = pieces[0]
            for star, piece in zip(stars, pieces[1:]):
                built += star + piece
            out.append(built)
    return join_path(*out)


def check_mirror(ctx: CheckContext) -> None:
    for rule in ctx.config.rules.mirror:
        for entry in ctx.entries:
            if entry.is_directory or not ctx.matches(entry.relative_path, rule.source):
                continue
            target = build_target_path(entry.relative_path, rule)
            if target is not None and target not in ctx.files:
                ctx.add_violation(
                    entry.relative_path,
                    RULE_MIRROR,
                    f"missing mirrored file: {target}",
                    expected=target,
                )
