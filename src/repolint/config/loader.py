"""Configuration discovery, YAML loading, ``extends``/preset merging and validation."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from repolint.config.presets import PRESETS, get_preset
from repolint.config.schema import (
    KIND_DIR,
    KIND_EITHER,
    KIND_FILE,
    KIND_MANY,
    KIND_PARAM,
    KIND_RECURSIVE,
    VALID_KINDS,
    Config,
    DirNode,
    EitherNode,
    FileNode,
    LayoutNode,
    ManyNode,
    MatchRule,
    MirrorRule,
    ParamNode,
    RecursiveNode,
    Rules,
    ScanSettings,
    WhenRule,
)
from repolint.core.case import VALID_CASES
from repolint.core.matcher import compile_pattern
from repolint.errors import (
    CircularExtendsError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
    PathTraversalError,
)
from repolint.models import MODE_WARN, VALID_MODES

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES: tuple[str, ...] = (
    "repolint.config.yaml",
    "repolint.config.yml",
    ".repolint.yaml",
    ".repolint.yml",
)

_REPO_MARKERS: tuple[str, ...] = (".git", "pyproject.toml", "package.json")
_ROOT_PREFIX = "@/"

_TOP_LEVEL_KEYS = frozenset(
    {
        "mode",
        "ignore",
        "use_gitignore",
        "layout",
        "rules",
        "scan",
        "workspaces",
        "extends",
        "preset",
    }
)
_RULE_KEYS = frozenset(
    {"forbid_paths", "forbid_names", "ignore_paths", "dependencies", "mirror", "when", "match"}
)
_SCAN_KEYS = frozenset({"max_depth", "max_files", "follow_symlinks", "timeout_ms", "concurrency"})
_NODE_KEYS = frozenset(
    {
        "type",
        "pattern",
        "case",
        "optional",
        "required",
        "children",
        "strict",
        "child",
        "min",
        "max",
        "max_depth",
        "variants",
    }
)
_MATCH_KEYS = frozenset(
    {"pattern", "exclude", "require", "allow", "forbid", "strict", "case", "child_case"}
)
_MIRROR_KEYS = frozenset({"source", "target", "pattern"})

_LIST_RULES = ("forbid_paths", "forbid_names", "ignore_paths", "mirror", "match")
_MAP_RULES = ("dependencies", "when")


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def find_config(directory: Path) -> Path | None:
    """Return the first known config file inside *directory*, or None."""
    for name in CONFIG_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def find_repo_root(start: Path) -> Path:
    """Walk up from *start* to the nearest directory holding a repository marker.

    Falls back to *start* itself when no marker is found.
    """
    start = start.resolve()
    for directory in (start, *start.parents):
        if any((directory / marker).exists() for marker in _REPO_MARKERS):
            return directory
    return start


# ---------------------------------------------------------------------------
# Field helpers (raise ValueError with the offending key path)
# ---------------------------------------------------------------------------


def _check_keys(data: dict[str, Any], allowed: frozenset[str], where: str) -> None:
    unknown = sorted(str(k) for k in data if k not in allowed)
    if unknown:
        msg = f"{where}: unknown key(s) {unknown}, expected one of {sorted(allowed)}"
        raise ValueError(msg)


def _get_bool(data: dict[str, Any], key: str, where: str) -> bool | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        msg = f"{where}.{key}: must be a boolean, got {value!r}"
        raise ValueError(msg)
    return value


def _get_int(data: dict[str, Any], key: str, where: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{where}.{key}: must be an integer, got {value!r}"
        raise ValueError(msg)
    return value


def _check_pattern(pattern: str, where: str) -> str:
    try:
        compile_pattern(pattern)
    except ValueError as exc:
        msg = f"{where}: {exc}"
        raise ValueError(msg) from exc
    return pattern


def _get_str(data: dict[str, Any], key: str, where: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        msg = f"{where}.{key}: must be a string, got {value!r}"
        raise ValueError(msg)
    return value


def _str_list(value: Any, where: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        msg = f"{where}: must be a list of strings"
        raise ValueError(msg)
    items: list[str] = []
    for idx, item in enumerate(value):
        if not isinstance(item, str):
            msg = f"{where}[{idx}]: must be a string, got {item!r}"
            raise ValueError(msg)
        items.append(_check_pattern(item, f"{where}[{idx}]"))
    return tuple(items)


def _get_case(data: dict[str, Any], key: str, where: str) -> str | None:
    value = _get_str(data, key, where)
    if value is not None and value not in VALID_CASES:
        msg = f"{where}.{key}: invalid case '{value}', must be one of {sorted(VALID_CASES)}"
        raise ValueError(msg)
    return value


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


def parse_layout_node(data: Any, where: str = "layout") -> LayoutNode:
    """Build a typed layout node from its mapping form.

    ``None`` (a bare ``name:`` key in YAML) is a plain file node.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = f"{where}: layout node must be a mapping"
        raise ValueError(msg)
    _check_keys(data, _NODE_KEYS, where)

    kind = data.get("type", KIND_FILE)
    if not isinstance(kind, str) or kind not in VALID_KINDS:
        msg = f"{where}: invalid type '{kind}', must be one of {sorted(VALID_KINDS)}"
        raise ValueError(msg)

    pattern = _get_str(data, "pattern", where)
    if pattern is not None:
        _check_pattern(pattern, f"{where}.pattern")
    common: dict[str, Any] = {
        "pattern": pattern,
        "case": _get_case(data, "case", where),
        "optional": bool(_get_bool(data, "optional", where)),
        "required": bool(_get_bool(data, "required", where)),
    }

    def _child() -> LayoutNode | None:
        if "child" not in data:
            return None
        return parse_layout_node(data["child"], f"{where}.child")

    if kind == KIND_FILE:
        return FileNode(**common)

    if kind == KIND_DIR:
        raw_children = data.get("children") or {}
        if not isinstance(raw_children, dict):
            msg = f"{where}.children: must be a mapping"
            raise ValueError(msg)
        children = {
            str(name): parse_layout_node(child, f"{where}.children.{name}")
            for name, child in raw_children.items()
        }
        return DirNode(
            **common, children=children, strict=bool(_get_bool(data, "strict", where))
        )

    if kind == KIND_PARAM:
        return ParamNode(**common, child=_child())

    if kind == KIND_MANY:
        min_count = _get_int(data, "min", where)
        max_count = _get_int(data, "max", where)
        if min_count is not None and max_count is not None and min_count > max_count:
            msg = f"{where}: min ({min_count}) must not exceed max ({max_count})"
            raise ValueError(msg)
        return ManyNode(**common, child=_child(), min_count=min_count, max_count=max_count)

    if kind == KIND_RECURSIVE:
        return RecursiveNode(**common, child=_child(), max_depth=_get_int(data, "max_depth", where))

    # KIND_EITHER
    raw_variants = data.get("variants")
    if not isinstance(raw_variants, list) or not raw_variants:
        msg = f"{where}.variants: must be a non-empty list"
        raise ValueError(msg)
    variants = tuple(
        parse_layout_node(v, f"{where}.variants[{idx}]") for idx, v in enumerate(raw_variants)
    )
    return EitherNode(**common, variants=variants)


# ---------------------------------------------------------------------------
# Rules / scan
# ---------------------------------------------------------------------------


def _parse_rules(data: Any) -> Rules:
    if data is None:
        return Rules()
    if not isinstance(data, dict):
        msg = "rules: must be a mapping"
        raise ValueError(msg)
    _check_keys(data, _RULE_KEYS, "rules")

    dependencies: dict[str, tuple[str, ...]] = {}
    raw_deps = data.get("dependencies") or {}
    if not isinstance(raw_deps, dict):
        msg = "rules.dependencies: must be a mapping of pattern to required pattern(s)"
        raise ValueError(msg)
    for source, targets in raw_deps.items():
        where = f"rules.dependencies.{source}"
        _check_pattern(str(source), where)
        dependencies[str(source)] = _str_list(targets, where)

    mirror: list[MirrorRule] = []
    raw_mirror = data.get("mirror") or []
    if not isinstance(raw_mirror, list):
        msg = "rules.mirror: must be a list"
        raise ValueError(msg)
    for idx, item in enumerate(raw_mirror):
        where = f"rules.mirror[{idx}]"
        if not isinstance(item, dict):
            msg = f"{where}: must be a mapping"
            raise ValueError(msg)
        _check_keys(item, _MIRROR_KEYS, where)
        source = _get_str(item, "source", where)
        target = _get_str(item, "target", where)
        if not source or not target:
            msg = f"{where}: 'source' and 'target' are required"
            raise ValueError(msg)
        mirror.append(
            MirrorRule(
                source=_check_pattern(source, f"{where}.source"),
                target=_check_pattern(target, f"{where}.target"),
                pattern=_get_str(item, "pattern", where),
            )
        )

    when: dict[str, WhenRule] = {}
    raw_when = data.get("when") or {}
    if not isinstance(raw_when, dict):
        msg = "rules.when: must be a mapping of trigger to {requires: [...]}"
        raise ValueError(msg)
    for trigger, body in raw_when.items():
        where = f"rules.when.{trigger}"
        if not isinstance(body, dict):
            msg = f"{where}: must be a mapping"
            raise ValueError(msg)
        _check_keys(body, frozenset({"requires"}), where)
        when[str(trigger)] = WhenRule(requires=_str_list(body.get("requires"), f"{where}.requires"))

    match: list[MatchRule] = []
    raw_match = data.get("match") or []
    if not isinstance(raw_match, list):
        msg = "rules.match: must be a list"
        raise ValueError(msg)
    for idx, item in enumerate(raw_match):
        where = f"rules.match[{idx}]"
        if not isinstance(item, dict):
            msg = f"{where}: must be a mapping"
            raise ValueError(msg)
        _check_keys(item, _MATCH_KEYS, where)
        pattern = _get_str(item, "pattern", where)
        if pattern is None:
            msg = f"{where}: missing required 'pattern' field"
            raise ValueError(msg)
        match.append(
            MatchRule(
                pattern=_check_pattern(pattern, f"{where}.pattern"),
                exclude=_str_list(item.get("exclude"), f"{where}.exclude"),
                require=_str_list(item.get("require"), f"{where}.require"),
                allow=_str_list(item.get("allow"), f"{where}.allow"),
                forbid=_str_list(item.get("forbid"), f"{where}.forbid"),
                strict=bool(_get_bool(item, "strict", where)),
                case=_get_case(item, "case", where),
                child_case=_get_case(item, "child_case", where),
            )
        )

    return Rules(
        forbid_paths=_str_list(data.get("forbid_paths"), "rules.forbid_paths"),
        forbid_names=_str_list(data.get("forbid_names"), "rules.forbid_names"),
        ignore_paths=_str_list(data.get("ignore_paths"), "rules.ignore_paths"),
        dependencies=dependencies,
        mirror=tuple(mirror),
        when=when,
        match=tuple(match),
    )


def _parse_scan(data: Any) -> ScanSettings:
    if data is None:
        return ScanSettings()
    if not isinstance(data, dict):
        msg = "scan: must be a mapping"
        raise ValueError(msg)
    _check_keys(data, _SCAN_KEYS, "scan")
    return ScanSettings(
        max_depth=_get_int(data, "max_depth", "scan"),
        max_files=_get_int(data, "max_files", "scan"),
        follow_symlinks=_get_bool(data, "follow_symlinks", "scan"),
        timeout_ms=_get_int(data, "timeout_ms", "scan"),
        concurrency=_get_int(data, "concurrency", "scan"),
    )


def _parse(data: dict[str, Any]) -> Config:
    mode = data.get("mode", MODE_WARN)
    if not isinstance(mode, str) or mode not in VALID_MODES:
        msg = f"mode: invalid mode '{mode}', must be one of {sorted(VALID_MODES)}"
        raise ValueError(msg)

    preset = _get_str(data, "preset", "config")
    if preset is not None and preset not in PRESETS:
        msg = f"preset: unknown preset '{preset}', must be one of {sorted(PRESETS)}"
        raise ValueError(msg)

    layout = data.get("layout")
    return Config(
        mode=mode,
        ignore=_str_list(data.get("ignore"), "ignore"),
        use_gitignore=_get_bool(data, "use_gitignore", "config"),
        layout=parse_layout_node(layout) if layout is not None else None,
        rules=_parse_rules(data.get("rules")),
        scan=_parse_scan(data.get("scan")),
        workspaces=_str_list(data.get("workspaces"), "workspaces"),
        extends=_get_str(data, "extends", "config"),
        preset=preset,
    )


def parse_config(data: Any, path: str = "<config>") -> Config:
    """Validate an already-merged raw mapping and return a :class:`Config`.

    Raises :class:`ConfigValidationError` listing every unknown top-level
    key, or the first schema error found below the top level.
    """
    if not isinstance(data, dict):
        raise ConfigValidationError(path, ["Config must be a YAML mapping"])
    unknown = sorted(str(k) for k in data if k not in _TOP_LEVEL_KEYS)
    if unknown:
        raise ConfigValidationError(path, [f"Unknown top-level key '{k}'" for k in unknown])
    try:
        return _parse(data)
    except ValueError as exc:
        raise ConfigValidationError(path, [str(exc)]) from exc


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------


def merge_raw(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge two raw config mappings.

    Lists concatenate (base first), mappings merge with the override
    winning per key, scalars take the override when it sets them.
    """
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if value is None:
            continue
        if key == "ignore" and isinstance(value, list) and isinstance(base.get(key), list):
            merged[key] = [*base[key], *value]
        elif key == "rules" and isinstance(value, dict) and isinstance(base.get(key), dict):
            rules: dict[str, Any] = dict(base[key])
            for rule_key, rule_value in value.items():
                current = rules.get(rule_key)
                if rule_key in _LIST_RULES and isinstance(current, list):
                    rules[rule_key] = [*current, *(rule_value or [])]
                elif rule_key in _MAP_RULES and isinstance(current, dict):
                    rules[rule_key] = {**current, **(rule_value or {})}
                else:
                    rules[rule_key] = rule_value
            merged[key] = rules
        elif key == "scan" and isinstance(value, dict) and isinstance(base.get(key), dict):
            merged[key] = {**base[key], **value}
        else:
            merged[key] = value
    return merged


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _resolve_extends(extends: str, config_path: Path, repo_root: Path) -> Path:
    if extends.startswith(_ROOT_PREFIX):
        base_dir = repo_root
        relative = extends[len(_ROOT_PREFIX) :]
    else:
        base_dir = config_path.parent
        relative = extends
    if os.path.isabs(relative):
        raise PathTraversalError(extends, str(repo_root))
    resolved = (base_dir / relative).resolve()
    if resolved != repo_root and repo_root not in resolved.parents:
        raise PathTraversalError(extends, str(repo_root))
    return resolved


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigNotFoundError(str(path)) from exc
    except OSError as exc:
        raise ConfigParseError(str(path), exc) from exc

    if not text.strip():
        raise ConfigValidationError(str(path), ["Config file is empty"])
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigParseError(str(path), exc) from exc

    if data is None:
        raise ConfigValidationError(str(path), ["Config file contains no settings"])
    if not isinstance(data, dict):
        raise ConfigValidationError(str(path), ["Config must be a YAML mapping"])
    return data


def _load_raw(path: Path, repo_root: Path, chain: list[str]) -> dict[str, Any]:
    key = str(path)
    if key in chain:
        raise CircularExtendsError(key, chain)

    data = _read_yaml(path)
    unknown = sorted(str(k) for k in data if k not in _TOP_LEVEL_KEYS)
    if unknown:
        raise ConfigValidationError(key, [f"Unknown top-level key '{k}'" for k in unknown])

    base: dict[str, Any] = {}
    preset_name = data.get("preset")
    if preset_name is not None:
        preset = get_preset(str(preset_name))
        if preset is None:
            msg = f"preset: unknown preset '{preset_name}', must be one of {sorted(PRESETS)}"
            raise ConfigValidationError(key, [msg])
        logger.debug("Applying preset %s to %s", preset_name, path)
        base = preset

    extends = data.get("extends")
    if extends is not None:
        if not isinstance(extends, str) or not extends:
            raise ConfigValidationError(key, ["extends: must be a non-empty string"])
        parent_path = _resolve_extends(extends, path, repo_root)
        logger.debug("%s extends %s", path, parent_path)
        base = merge_raw(base, _load_raw(parent_path, repo_root, [*chain, key]))

    return merge_raw(base, data) if base else data


def load_config(path: Path, repo_root: Path | None = None) -> Config:
    """Load, resolve and validate the configuration file at *path*.

    ``extends`` chains and ``preset`` are merged beneath the file's own
    settings.  *repo_root* bounds ``extends`` resolution; it defaults to the
    repository containing *path*.

    Raises a :class:`~repolint.errors.ConfigError` subclass on any failure.
    """
    path = path.resolve()
    root = (repo_root or find_repo_root(path.parent)).resolve()
    raw = _load_raw(path, root, [])
    config = parse_config(raw, str(path))
    logger.debug("Loaded config %s (mode=%s)", path, config.mode)
    return config
