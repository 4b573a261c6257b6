"""Pattern-scoped directory contracts (``rules.match``).

The directory tree is built once per check from the flat entry list; each
rule then walks it breadth-first to find the directories its pattern
selects.  Violations are deduplicated across rules on
``(path, rule, message)``.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from repolint.core.case import case_name, suggest_case, validate_case
from repolint.core.matcher import join_path, normalize_unicode
from repolint.models import RULE_MATCH

if TYPE_CHECKING:
    from repolint.config.schema import MatchRule
    from repolint.models import FileEntry
    from repolint.rules.context import CheckContext

logger = logging.getLogger(__name__)

_ROOT_PATH = "."


@dataclass
class DirTree:
    """One directory in the match tree: subdirectories by name plus file names."""

    path: str
    name: str
    children: dict[str, DirTree] = field(default_factory=dict)
    files: list[str] = field(default_factory=list)

    def entry_names(self) -> list[str]:
        return [*self.files, *self.children]


def build_tree(entries: tuple[FileEntry, ...] | list[FileEntry]) -> DirTree:
    """Build a :class:`DirTree` in one pass; intermediate directories are implied."""
    root = DirTree("", "")
    index: dict[str, DirTree] = {"": root}

    def _dir(path: str) -> DirTree:
        node = index.get(path)
        if node is not None:
            return node
        current = root
        prefix = ""
        for part in path.split("/"):
            prefix = join_path(prefix, part)
            child = current.children.get(part)
            if child is None:
                child = DirTree(prefix, part)
                current.children[part] = child
                index[prefix] = child
            current = child
        return current

    for entry in entries:
        rel = normalize_unicode(entry.relative_path)
        if entry.is_directory:
            _dir(rel)
        else:
            parent, _, name = rel.rpartition("/")
            _dir(parent).files.append(name)
    return root


def collect_matching_dirs(ctx: CheckContext, root: DirTree, rule: MatchRule) -> list[DirTree]:
    found: list[DirTree] = []
    queue: deque[DirTree] = deque([root])
    while queue:
        node = queue.popleft()
        if (
            node.path
            and ctx.matches(node.path, rule.pattern)
            and not ctx.matches_any(node.path, rule.exclude)
        ):
            found.append(node)
        queue.extend(node.children.values())
    return found


class _Reporter:
    def __init__(self, ctx: CheckContext) -> None:
        self._ctx = ctx
        self._seen: set[tuple[str, str, str]] = set()

    def report(
        self,
        path: str,
        message: str,
        *,
        expected: str | None = None,
        actual: str | None = None,
        suggestions: tuple[str, ...] = (),
    ) -> None:
        key = (path, RULE_MATCH, message)
        if key in self._seen:
            return
        self._seen.add(key)
        self._ctx.add_violation(
            path, RULE_MATCH, message, expected=expected, actual=actual, suggestions=suggestions
        )


def _check_dir(ctx: CheckContext, rule: MatchRule, node: DirTree, reporter: _Reporter) -> None:
    names = node.entry_names()

    # the directory's own name and its children's names are separate checks
    if rule.case and node.name and not validate_case(node.name, rule.case):
        reporter.report(
            node.path,
            f"directory name must be {case_name(rule.case)}",
            expected=case_name(rule.case),
            actual=node.name,
            suggestions=(suggest_case(node.name, rule.case),),
        )

    if rule.child_case:
        for name in names:
            if not validate_case(name, rule.child_case):
                reporter.report(
                    join_path(node.path, name),
                    f"name must be {case_name(rule.child_case)}",
                    expected=case_name(rule.child_case),
                    actual=name,
                    suggestions=(suggest_case(name, rule.child_case),),
                )

    for required in rule.require:
        if not any(ctx.matches(name, required) for name in names):
            reporter.report(node.path, f"missing required entry: {required}")

    if rule.forbid:
        for name in names:
            if ctx.matches_any(name, rule.forbid):
                reporter.report(join_path(node.path, name), "forbidden entry in matched directory")

    if rule.strict:
        allowed = (*rule.require, *rule.allow)
        for name in names:
            if not allowed:
                reporter.report(
                    join_path(node.path, name),
                    "entry not allowed (strict mode with no allowed patterns)",
                )
            elif not ctx.matches_any(name, allowed):
                reporter.report(
                    join_path(node.path, name), "entry not allowed by strict match rule"
                )


def check_match(ctx: CheckContext) -> None:
    rules = ctx.config.rules.match
    if not rules:
        return

    valid: list[MatchRule] = []
    for rule in rules:
        if not rule.pattern.strip():
            logger.debug("Skipping match rule with empty pattern")
            ctx.add_warning(_ROOT_PATH, RULE_MATCH, "match rule has empty pattern - skipping")
        else:
            valid.append(rule)
    if not valid:
        return

    root = build_tree(ctx.entries)
    reporter = _Reporter(ctx)
    for rule in valid:
        dirs = collect_matching_dirs(ctx, root, rule)
        if not dirs:
            logger.debug("Match pattern %r did not match any directories", rule.pattern)
            ctx.add_warning(
                _ROOT_PATH,
                RULE_MATCH,
                f'match pattern "{rule.pattern}" did not match any directories',
            )
            continue
        for node in dirs:
            _check_dir(ctx, rule, node, reporter)
