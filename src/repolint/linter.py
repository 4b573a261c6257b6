"""Check orchestrator: locate config, scan, consult cache, check, merge workspaces."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from repolint.cache import CACHE_DIR, compute_file_hash, read_cache, write_cache
from repolint.config.loader import find_config, load_config
from repolint.core.scanner import (
    DEFAULT_CONCURRENCY,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_FILES,
    DEFAULT_TIMEOUT_MS,
    ScanOptions,
    resolve_scope,
    scan,
    workspace_dirs,
)
from repolint.errors import ConfigNotFoundError
from repolint.models import CheckResult, merge_results
from repolint.rules import check

if TYPE_CHECKING:
    from repolint.config.schema import Config

logger = logging.getLogger(__name__)

DEFAULT_WORKSPACE_CONCURRENCY = 4


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScanOverrides:
    """Command-line scan settings; ``None`` defers to the config file."""

    max_depth: int | None = None
    max_files: int | None = None
    timeout_ms: int | None = None
    concurrency: int | None = None
    follow_symlinks: bool | None = None
    use_gitignore: bool | None = None


@dataclass(frozen=True)
class _Target:
    root: Path
    config_path: Path


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _positive(value: int | None) -> int | None:
    return value if value is not None and value > 0 else None


def _pick(override: int | None, configured: int | None, default: int) -> int:
    if override is not None:
        return override
    configured = _positive(configured)
    return configured if configured is not None else default


def scan_options(
    root: Path, config: Config, scope: str | None, overrides: ScanOverrides
) -> ScanOptions:
    """Resolve scanner settings: overrides first, then positive config values, then defaults."""
    settings = config.scan
    use_gitignore = overrides.use_gitignore
    if use_gitignore is None:
        use_gitignore = config.use_gitignore if config.use_gitignore is not None else True
    follow = overrides.follow_symlinks
    if follow is None:
        follow = bool(settings.follow_symlinks)
    return ScanOptions(
        root=str(root),
        ignore=(*config.ignore, f"{CACHE_DIR}/**"),
        scope=scope,
        use_gitignore=use_gitignore,
        max_depth=_pick(overrides.max_depth, settings.max_depth, DEFAULT_MAX_DEPTH),
        max_files=_pick(overrides.max_files, settings.max_files, DEFAULT_MAX_FILES),
        follow_symlinks=follow,
        timeout_ms=_pick(overrides.timeout_ms, settings.timeout_ms, DEFAULT_TIMEOUT_MS),
        concurrency=_pick(overrides.concurrency, settings.concurrency, DEFAULT_CONCURRENCY),
    )


def workspace_concurrency(config: Config, overrides: ScanOverrides) -> int:
    """Workspaces checked at once: override, then positive ``scan.concurrency``, then 4."""
    return _pick(
        _positive(overrides.concurrency), config.scan.concurrency, DEFAULT_WORKSPACE_CONCURRENCY
    )


def _check_target(
    target: _Target, scope: str | None, use_cache: bool, overrides: ScanOverrides
) -> CheckResult:
    config = load_config(target.config_path)
    options = scan_options(target.root, config, scope, overrides)
    entries = scan(options)

    config_content = target.config_path.read_text(encoding="utf-8")
    file_hash = compute_file_hash(entries)
    if use_cache:
        cached = read_cache(target.root, config_content, file_hash)
        if cached is not None:
            return cached

    result = check(config, entries)
    if use_cache:
        write_cache(target.root, config_content, file_hash, len(entries), result)
    return result


def _targets(root: Path, config_path: Path, config: Config) -> list[_Target]:
    if not config.workspaces:
        return [_Target(root, config_path)]

    dirs = [Path(d) for d in workspace_dirs(str(root), config.workspaces)]
    own = [(d, find_config(d)) for d in dirs]
    with_config = [_Target(d, p) for d, p in own if p is not None]
    if with_config:
        logger.debug("Checking %d workspaces with their own config", len(with_config))
        return with_config
    logger.debug("Checking %d workspaces with the root config", len(dirs))
    return [_Target(d, config_path) for d in dirs]


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def run_check(
    root: Path,
    *,
    config_path: Path | None = None,
    scope: str | None = None,
    use_cache: bool = True,
    overrides: ScanOverrides | None = None,
) -> CheckResult:
    """Locate the config, scan and check the tree, and return the merged result.

    Parameters
    ----------
    root:
        Directory searched for a config file when *config_path* is omitted.
    config_path:
        Explicit config file; the scan root is the directory holding it.
    scope:
        Sub-path (relative to the scan root) limiting the walk.
    use_cache:
        Consult and refresh the on-disk result cache.
    overrides:
        Scan settings that take precedence over the config file.

    Raises
    ------
    ConfigError
        When no config exists or it cannot be loaded.
    PathTraversalError
        When *scope* escapes the scan root.
    ScanError
        When the scan fails or exceeds one of its bounds.
    """
    overrides = overrides or ScanOverrides()
    root = root.resolve()
    found = config_path.resolve() if config_path is not None else find_config(root)
    if found is None:
        raise ConfigNotFoundError(str(root))

    scan_root = found.parent
    if scope:
        resolve_scope(str(scan_root), scope)

    root_config = load_config(found)
    targets = _targets(scan_root, found, root_config)
    if len(targets) == 1 and targets[0].root == scan_root:
        return _check_target(targets[0], scope, use_cache, overrides)
    if not targets:
        return merge_results([])

    workers = workspace_concurrency(root_config, overrides)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="repolint-ws") as pool:
        results = list(
            pool.map(lambda t: _check_target(t, scope, use_cache, overrides), targets)
        )
    return merge_results(results)
