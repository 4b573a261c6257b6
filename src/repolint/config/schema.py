"""Configuration value types: layout tree, rule set, scan tuning, config root."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from repolint.models import MODE_WARN

# ---------------------------------------------------------------------------
# Layout tree
# ---------------------------------------------------------------------------

META_PREFIX = "$"

KIND_FILE = "file"
KIND_DIR = "dir"
KIND_PARAM = "param"
KIND_MANY = "many"
KIND_RECURSIVE = "recursive"
KIND_EITHER = "either"
VALID_KINDS: frozenset[str] = frozenset(
    {KIND_FILE, KIND_DIR, KIND_PARAM, KIND_MANY, KIND_RECURSIVE, KIND_EITHER}
)


@dataclass(frozen=True)
class _NodeBase:
    kind: ClassVar[str]

    pattern: str | None = None
    case: str | None = None
    optional: bool = False
    required: bool = False


@dataclass(frozen=True)
class FileNode(_NodeBase):
    """A single expected file at a fixed path."""

    kind: ClassVar[str] = KIND_FILE


@dataclass(frozen=True)
class DirNode(_NodeBase):
    """A directory with literal and ``$``-prefixed meta children."""

    kind: ClassVar[str] = KIND_DIR

    children: dict[str, LayoutNode] = field(default_factory=dict)
    strict: bool = False


@dataclass(frozen=True)
class ParamNode(_NodeBase):
    """Dynamic segment: every unmatched direct child of the parent."""

    kind: ClassVar[str] = KIND_PARAM

    child: LayoutNode | None = None


@dataclass(frozen=True)
class ManyNode(_NodeBase):
    """Repeated entries with optional count bounds."""

    kind: ClassVar[str] = KIND_MANY

    child: LayoutNode | None = None
    min_count: int | None = None
    max_count: int | None = None


@dataclass(frozen=True)
class RecursiveNode(_NodeBase):
    """Arbitrarily nested directories sharing one definition."""

    kind: ClassVar[str] = KIND_RECURSIVE

    child: LayoutNode | None = None
    max_depth: int | None = None


@dataclass(frozen=True)
class EitherNode(_NodeBase):
    """Ordered alternatives; the first matching variant wins."""

    kind: ClassVar[str] = KIND_EITHER

    variants: tuple[LayoutNode, ...] = ()


LayoutNode = FileNode | DirNode | ParamNode | ManyNode | RecursiveNode | EitherNode


def is_meta_key(name: str) -> bool:
    """Meta child keys (``$files``) match dynamically instead of by name."""
    return name.startswith(META_PREFIX)


def layout_to_dict(node: LayoutNode) -> dict[str, Any]:
    """Serialize a layout node back to its configuration shape."""
    data: dict[str, Any] = {"type": node.kind}
    if node.pattern is not None:
        data["pattern"] = node.pattern
    if node.case is not None:
        data["case"] = node.case
    if node.optional:
        data["optional"] = True
    if node.required:
        data["required"] = True

    if isinstance(node, DirNode):
        if node.strict:
            data["strict"] = True
        if node.children:
            data["children"] = {k: layout_to_dict(v) for k, v in node.children.items()}
    elif isinstance(node, (ParamNode, ManyNode, RecursiveNode)):
        if node.child is not None:
            data["child"] = layout_to_dict(node.child)
        if isinstance(node, ManyNode):
            if node.min_count is not None:
                data["min"] = node.min_count
            if node.max_count is not None:
                data["max"] = node.max_count
        if isinstance(node, RecursiveNode) and node.max_depth is not None:
            data["max_depth"] = node.max_depth
    elif isinstance(node, EitherNode):
        data["variants"] = [layout_to_dict(v) for v in node.variants]
    return data


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MirrorRule:
    """Every file matching *source* needs a counterpart under *target*.

    *pattern* optionally rewrites the file suffix (``"*.ts -> *.test.ts"``).
    """

    source: str
    target: str
    pattern: str | None = None


@dataclass(frozen=True)
class WhenRule:
    """Sibling files required whenever the trigger file exists."""

    requires: tuple[str, ...] = ()


@dataclass(frozen=True)
class MatchRule:
    """Structure contract applied to every directory matching *pattern*."""

    pattern: str
    exclude: tuple[str, ...] = ()
    require: tuple[str, ...] = ()
    allow: tuple[str, ...] = ()
    forbid: tuple[str, ...] = ()
    strict: bool = False
    case: str | None = None  # the matched directory's own name
    child_case: str | None = None  # names of its direct children


@dataclass(frozen=True)
class Rules:
    """Cross-cutting structural rules."""

    forbid_paths: tuple[str, ...] = ()
    forbid_names: tuple[str, ...] = ()
    ignore_paths: tuple[str, ...] = ()
    dependencies: dict[str, tuple[str, ...]] = field(default_factory=dict)
    mirror: tuple[MirrorRule, ...] = ()
    when: dict[str, WhenRule] = field(default_factory=dict)
    match: tuple[MatchRule, ...] = ()


RULE_GROUPS: tuple[str, ...] = (
    "forbid_paths",
    "forbid_names",
    "ignore_paths",
    "dependencies",
    "mirror",
    "when",
    "match",
)


def rule_group_to_data(rules: Rules, name: str) -> Any:
    """Return the JSON-compatible value of one rule group, or None if empty/unknown."""
    if name not in RULE_GROUPS:
        return None
    value = getattr(rules, name)
    if not value:
        return None
    if name == "dependencies":
        return {k: list(v) for k, v in value.items()}
    if name == "mirror":
        return [
            {
                "source": m.source,
                "target": m.target,
                **({"pattern": m.pattern} if m.pattern else {}),
            }
            for m in value
        ]
    if name == "when":
        return {k: {"requires": list(w.requires)} for k, w in value.items()}
    if name == "match":
        out: list[dict[str, Any]] = []
        for m in value:
            item: dict[str, Any] = {"pattern": m.pattern}
            for key in ("exclude", "require", "allow", "forbid"):
                if getattr(m, key):
                    item[key] = list(getattr(m, key))
            if m.strict:
                item["strict"] = True
            if m.case:
                item["case"] = m.case
            if m.child_case:
                item["child_case"] = m.child_case
            out.append(item)
        return out
    return list(value)


# ---------------------------------------------------------------------------
# Scan tuning and root config
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScanSettings:
    """Scanner bounds from configuration; ``None`` means "use the default"."""

    max_depth: int | None = None
    max_files: int | None = None
    follow_symlinks: bool | None = None
    timeout_ms: int | None = None
    concurrency: int | None = None


@dataclass(frozen=True)
class Config:
    """A fully loaded, merged and validated configuration."""

    mode: str = MODE_WARN
    ignore: tuple[str, ...] = ()
    use_gitignore: bool | None = None
    layout: LayoutNode | None = None
    rules: Rules = field(default_factory=Rules)
    scan: ScanSettings = field(default_factory=ScanSettings)
    workspaces: tuple[str, ...] = ()
    extends: str | None = None
    preset: str | None = None
