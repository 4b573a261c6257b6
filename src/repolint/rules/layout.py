"""Layout validation: interpret the expected-structure tree against the entries.

Every ``_check_*`` function returns whether its node matched something at
the given path.  Dynamic nodes (param, many, recursive) receive the
*parent* path and scan its direct children; literal nodes receive their
own path.

The layout check is the only writer of the matched set and runs after all
other checks, so the strict-mode sweep at the end sees every path the tree
accounted for.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from repolint.config.schema import (
    DirNode,
    EitherNode,
    FileNode,
    ManyNode,
    ParamNode,
    RecursiveNode,
    is_meta_key,
)
from repolint.core.case import case_name, suggest_case, validate_case
from repolint.core.matcher import get_basename, join_path
from repolint.models import MODE_STRICT, RULE_LAYOUT, RULE_NAMING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from repolint.config.schema import LayoutNode
    from repolint.rules.context import CheckContext


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _child_names(ctx: CheckContext, parent: str) -> Iterator[str]:
    """Yield each distinct direct-child name under *parent*, in entry order."""
    prefix = f"{parent}/" if parent else ""
    seen: set[str] = set()
    for entry in ctx.entries:
        rel = entry.relative_path
        if not rel.startswith(prefix):
            continue
        name = rel[len(prefix) :].split("/", 1)[0]
        if name and name not in seen:
            seen.add(name)
            yield name


def _check_case(ctx: CheckContext, path: str, name: str, style: str | None) -> None:
    if style and not validate_case(name, style):
        ctx.add_violation(
            path,
            RULE_NAMING,
            f"expected {case_name(style)}",
            expected=case_name(style),
            actual=name,
            suggestions=(suggest_case(name, style),),
        )


def _name_fits(ctx: CheckContext, name: str, pattern: str | None) -> bool:
    return pattern is None or ctx.matches(name, pattern)


# ---------------------------------------------------------------------------
# Node checks
# ---------------------------------------------------------------------------


def check_node(ctx: CheckContext, node: LayoutNode, path: str) -> bool:
    """Dispatch on the node kind."""
    if isinstance(node, DirNode):
        return _check_dir(ctx, node, path)
    if isinstance(node, ParamNode):
        return _check_param(ctx, node, path)
    if isinstance(node, ManyNode):
        return _check_many(ctx, node, path)
    if isinstance(node, RecursiveNode):
        return _check_recursive(ctx, node, path, 0)
    if isinstance(node, EitherNode):
        return _check_either(ctx, node, path)
    return _check_file(ctx, node, path)


def _check_file(ctx: CheckContext, node: FileNode, path: str) -> bool:
    if path in ctx.files:
        ctx.mark_matched(path)
        basename = get_basename(path)
        if node.pattern and not ctx.matches(basename, node.pattern):
            ctx.add_violation(path, RULE_LAYOUT, f'file does not match pattern "{node.pattern}"')
        _check_case(ctx, path, basename, node.case)
        return True

    if node.required:
        ctx.add_violation(path, RULE_LAYOUT, "required file is missing")
    return False


def _check_dir(ctx: CheckContext, node: DirNode, path: str) -> bool:
    if path != "" and path not in ctx.dirs:
        if node.required:
            ctx.add_violation(path, RULE_LAYOUT, "required directory is missing")
        return False

    if path:
        ctx.mark_matched(path)

    for key, child in node.children.items():
        # meta keys scan the siblings of this directory's own path
        check_node(ctx, child, path if is_meta_key(key) else join_path(path, key))

    if node.strict:
        literal = {k for k in node.children if not is_meta_key(k)}
        prefix = f"{path}/" if path else ""
        for entry in ctx.entries:
            rel = entry.relative_path
            if not rel.startswith(prefix):
                continue
            first = rel[len(prefix) :].split("/", 1)[0]
            if first and first not in literal and not ctx.is_matched(rel):
                ctx.add_violation(rel, RULE_LAYOUT, f'"{first}" is not allowed in {path or "root"}')
                ctx.mark_matched(rel)
    return True


def _check_param(ctx: CheckContext, node: ParamNode, parent: str) -> bool:
    found = False
    for name in _child_names(ctx, parent):
        full = join_path(parent, name)
        if ctx.is_matched(full):
            continue
        # case is reported even when the pattern then skips the entry
        _check_case(ctx, full, name, node.case)
        if not _name_fits(ctx, name, node.pattern):
            continue
        if node.child is not None:
            check_node(ctx, node.child, full)
        ctx.mark_matched(full)
        found = True
    return found


def _check_many(ctx: CheckContext, node: ManyNode, parent: str) -> bool:
    count = 0
    for name in _child_names(ctx, parent):
        full = join_path(parent, name)
        if ctx.is_matched(full) or not _name_fits(ctx, name, node.pattern):
            continue
        _check_case(ctx, full, name, node.case)
        if node.child is not None:
            check_node(ctx, node.child, full)
        else:
            ctx.mark_matched(full)
        count += 1

    if node.max_count is not None and count > node.max_count:
        ctx.add_violation(
            parent, RULE_LAYOUT, f"exceeded maximum count: {count} > {node.max_count}"
        )
    if node.min_count is not None and count < node.min_count:
        ctx.add_violation(
            parent, RULE_LAYOUT, f"below minimum count: {count} < {node.min_count}"
        )
    return count > 0


def _check_recursive(ctx: CheckContext, node: RecursiveNode, parent: str, depth: int) -> bool:
    if node.max_depth is not None and depth > node.max_depth:
        return False
    if parent and parent in ctx.dirs:
        ctx.mark_matched(parent)

    found = False
    for name in _child_names(ctx, parent):
        full = join_path(parent, name)
        if ctx.is_matched(full):
            continue
        _check_case(ctx, full, name, node.case)
        if node.child is not None:
            check_node(ctx, node.child, full)
        ctx.mark_matched(full)
        found = True
        if full in ctx.dirs:
            _check_recursive(ctx, node, full, depth + 1)
    return found


def _check_either(ctx: CheckContext, node: EitherNode, path: str) -> bool:
    for variant in node.variants:
        snap = ctx.snapshot()
        if check_node(ctx, variant, path):
            return True
        ctx.restore(snap)

    if not node.optional:
        ctx.add_violation(path, RULE_LAYOUT, "none of the expected variants matched")
    return False


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def check_layout(ctx: CheckContext) -> None:
    layout = ctx.config.layout
    if layout is None:
        return

    check_node(ctx, layout, "")

    if ctx.config.mode != MODE_STRICT:
        return
    ignore_paths = ctx.config.rules.ignore_paths
    for entry in ctx.entries:
        rel = entry.relative_path
        if not ctx.is_matched(rel) and not ctx.matches_any(rel, ignore_paths):
            ctx.add_violation(rel, RULE_LAYOUT, "unexpected file (not defined in layout)")
