"""Filesystem scanner: bounded, cycle-safe, partially parallel directory walk.

The walk is driven by a coordinator loop that feeds directory tasks into a
``ThreadPoolExecutor``.  Each task reads exactly one directory and returns
its entries plus the subdirectory tasks it discovered; workers never wait on
one another, so the pool size is a hard bound on concurrent directory reads.

Shared state between workers is limited to the running entry counter and the
set of visited symlink targets, both guarded by one lock, plus a
``threading.Event`` used as the cancellation token.  Any failure or timeout
sets the token, cancels queued tasks and discards partial results.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field

from repolint.core.matcher import (
    MatcherCache,
    PatternError,
    compile_pattern,
    create_matcher,
    get_depth,
    join_path,
    normalize_path,
    normalize_unicode,
)
from repolint.errors import (
    FileSystemError,
    MaxDepthExceededError,
    MaxFilesExceededError,
    PathTraversalError,
    ScanError,
    ScanTimeoutError,
    SymlinkLoopError,
)
from repolint.models import FileEntry

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_MAX_DEPTH = 100
DEFAULT_MAX_FILES = 100_000
DEFAULT_CONCURRENCY = 10
DEFAULT_TIMEOUT_MS = 30_000

IGNORE_FILE_NAME = ".gitignore"

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScanOptions:
    """Inputs for one :func:`scan` call."""

    root: str
    ignore: tuple[str, ...] = ()
    scope: str | None = None
    use_gitignore: bool = True
    max_depth: int = DEFAULT_MAX_DEPTH
    max_files: int = DEFAULT_MAX_FILES
    follow_symlinks: bool = False
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    concurrency: int = DEFAULT_CONCURRENCY


@dataclass(frozen=True)
class _DirTask:
    path: str  # absolute
    rel: str  # relative to the scan root
    depth: int
    patterns: tuple[str, ...]  # ignore patterns inherited from ancestors


@dataclass
class _ScanState:
    root: str
    max_depth: int
    max_files: int
    follow_symlinks: bool
    use_gitignore: bool
    cache: MatcherCache = field(default_factory=MatcherCache)
    cancel: threading.Event = field(default_factory=threading.Event)
    file_count: int = 0
    visited: set[str] = field(default_factory=set)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def count_entry(self) -> None:
        with self.lock:
            if self.file_count >= self.max_files:
                raise MaxFilesExceededError(self.root, self.file_count + 1, self.max_files)
            self.file_count += 1

    def visit_target(self, link: str, target: str) -> None:
        with self.lock:
            if target in self.visited:
                raise SymlinkLoopError(self.root, link, target)
            self.visited.add(target)


# ---------------------------------------------------------------------------
# Ignore files
# ---------------------------------------------------------------------------


def parse_gitignore(content: str, base_rel: str) -> list[str]:
    """Translate ignore-file lines into glob patterns scoped to *base_rel*.

    - blank lines and ``#`` comments are skipped, as are ``!`` negations
    - ``name`` becomes ``base/**/name``; ``a/b`` or ``/a`` becomes ``base/a/b``
    - ``dir/`` additionally yields ``base/**/dir/**`` so its contents match
    - lines that do not compile as globs (``[z-a]``) are dropped
    """
    patterns: list[str] = []
    for raw in content.splitlines():
        line = raw.rstrip()
        if not line or line.startswith("#") or line.startswith("!"):
            continue

        line = line.replace("\\#", "#")

        directory_only = line.endswith("/")
        if directory_only:
            line = line[:-1]
        if not line:
            continue

        anchored = line.startswith("/") or "/" in line
        line = line.lstrip("/")

        pattern = join_path(base_rel, line) if anchored else join_path(base_rel, "**", line)
        try:
            compile_pattern(pattern)
        except PatternError as exc:
            logger.debug("Skipping ignore line %r: %s", raw, exc)
            continue
        patterns.append(pattern)
        if directory_only:
            patterns.append(f"{pattern}/**")
    return patterns


def _read_gitignore(directory: str, base_rel: str) -> list[str]:
    ignore_path = os.path.join(directory, IGNORE_FILE_NAME)
    try:
        with open(ignore_path, encoding="utf-8", errors="replace") as fh:
            content = fh.read()
    except FileNotFoundError:
        return []
    except OSError as exc:
        logger.debug("Could not read %s: %s", ignore_path, exc)
        return []
    return parse_gitignore(content, base_rel)


# ---------------------------------------------------------------------------
# Directory visit (runs inside a worker)
# ---------------------------------------------------------------------------


def _file_meta(entry: os.DirEntry[str]) -> tuple[int | None, float | None]:
    try:
        st = entry.stat()
    except OSError:
        logger.debug("Could not stat %s", entry.path)
        return None, None
    return st.st_size, st.st_mtime_ns / 1_000_000


def _scan_directory(task: _DirTask, state: _ScanState) -> tuple[list[FileEntry], list[_DirTask]]:
    if state.cancel.is_set():
        return [], []

    inherited = create_matcher(task.patterns, state.cache)
    if task.rel and inherited(task.rel):
        return [], []

    patterns = task.patterns
    if state.use_gitignore:
        patterns = patterns + tuple(_read_gitignore(task.path, task.rel))
    is_ignored = inherited if patterns == task.patterns else create_matcher(patterns, state.cache)

    try:
        with os.scandir(task.path) as it:
            dir_entries = sorted(it, key=lambda e: e.name)
    except (FileNotFoundError, PermissionError) as exc:
        logger.debug("Treating unreadable directory as empty: %s (%s)", task.path, exc)
        return [], []
    except OSError as exc:
        raise FileSystemError(task.path, "scandir", exc) from exc

    entries: list[FileEntry] = []
    subdirs: list[_DirTask] = []
    depth = task.depth + 1

    for dir_entry in dir_entries:
        if "\0" in dir_entry.name:
            continue
        rel = join_path(task.rel, normalize_unicode(dir_entry.name))
        if is_ignored(rel):
            continue

        state.count_entry()
        full_path = dir_entry.path

        is_dir = False
        if dir_entry.is_symlink():
            # unfollowed and broken links are directory-shaped leaves
            if not state.follow_symlinks:
                entries.append(FileEntry(full_path, rel, True, True, depth))
                continue
            try:
                target = os.path.realpath(full_path, strict=True)
            except OSError:
                logger.debug("Broken symlink: %s", full_path)
                entries.append(FileEntry(full_path, rel, True, True, depth))
                continue
            if not os.path.isdir(target):
                size, mtime_ms = _file_meta(dir_entry)
                entries.append(FileEntry(full_path, rel, False, True, depth, size, mtime_ms))
                continue
            state.visit_target(full_path, target)
            is_dir = True
        elif dir_entry.is_dir(follow_symlinks=False):
            is_dir = True
        elif not dir_entry.is_file(follow_symlinks=False):
            continue  # sockets, fifos, devices

        if is_dir:
            entries.append(FileEntry(full_path, rel, True, dir_entry.is_symlink(), depth))
            if task.depth >= state.max_depth:
                raise MaxDepthExceededError(state.root, full_path, depth, state.max_depth)
            subdirs.append(_DirTask(full_path, rel, depth, patterns))
        else:
            size, mtime_ms = _file_meta(dir_entry)
            entries.append(FileEntry(full_path, rel, False, False, depth, size, mtime_ms))

    return entries, subdirs


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve_scope(root: str, scope: str | None) -> tuple[str, str]:
    """Return ``(start_dir, start_rel)`` for an optional *scope* sub-path."""
    if not scope:
        return root, ""
    start_dir = os.path.normpath(os.path.join(root, scope))
    rel = os.path.relpath(start_dir, root)
    if rel == os.pardir or rel.startswith(os.pardir + os.sep) or os.path.isabs(rel):
        raise PathTraversalError(scope, root)
    start_rel = "" if rel == os.curdir else normalize_path(rel)
    return start_dir, start_rel


def _scope_entries(root: str, start_rel: str) -> list[FileEntry]:
    """Directory entries for the ancestors of a scoped walk (``a``, ``a/b``)."""
    entries: list[FileEntry] = []
    if not start_rel:
        return entries
    prefix = ""
    for depth, segment in enumerate(start_rel.split("/"), start=1):
        prefix = join_path(prefix, segment)
        full_path = os.path.join(root, *prefix.split("/"))
        entries.append(FileEntry(full_path, prefix, True, False, depth))
    return entries


def scan(options: ScanOptions) -> list[FileEntry]:
    """Walk ``options.root`` and return every non-ignored entry.

    The result is sorted by relative path, but callers must not depend on
    ordering.

    Raises
    ------
    PathTraversalError
        When ``options.scope`` escapes the root.
    MaxDepthExceededError, MaxFilesExceededError, SymlinkLoopError
        When a bound is exceeded or a followed symlink cycles.
    ScanTimeoutError
        When the walk does not finish within ``options.timeout_ms``.
    ScanError
        When an unrecoverable filesystem error occurs (``cause`` holds the
        underlying :class:`~repolint.errors.FileSystemError`).
    """
    root = os.path.abspath(os.fspath(options.root))
    start_dir, start_rel = resolve_scope(root, options.scope)

    state = _ScanState(
        root=root,
        max_depth=options.max_depth,
        max_files=options.max_files,
        follow_symlinks=options.follow_symlinks,
        use_gitignore=options.use_gitignore,
    )
    state.visited.add(os.path.realpath(root))
    state.visited.add(os.path.realpath(start_dir))

    start = time.monotonic()
    deadline = start + options.timeout_ms / 1000
    results: list[FileEntry] = _scope_entries(root, start_rel)
    first = _DirTask(start_dir, start_rel, get_depth(start_rel), tuple(options.ignore))

    pool = ThreadPoolExecutor(
        max_workers=max(1, options.concurrency), thread_name_prefix="repolint-scan"
    )
    failed = False
    try:
        pending: set[Future[tuple[list[FileEntry], list[_DirTask]]]] = {
            pool.submit(_scan_directory, first, state)
        }
        while pending:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ScanTimeoutError(root, options.timeout_ms)
            done, pending = wait(pending, timeout=remaining, return_when=FIRST_COMPLETED)
            for future in done:
                entries, subdirs = future.result()
                results.extend(entries)
                for task in subdirs:
                    pending.add(pool.submit(_scan_directory, task, state))
    except FileSystemError as exc:
        failed = True
        raise ScanError(root, exc) from exc
    except BaseException:
        failed = True
        raise
    finally:
        if failed:
            state.cancel.set()
        pool.shutdown(wait=not failed, cancel_futures=True)

    results.sort(key=lambda e: e.relative_path)
    logger.debug(
        "Scanned %d entries under %s in %.1fms",
        len(results),
        start_dir,
        (time.monotonic() - start) * 1000,
    )
    return results


def workspace_dirs(root: str, patterns: list[str] | tuple[str, ...]) -> list[str]:
    """Return absolute paths of directories under *root* matching workspace *patterns*.

    Patterns are one or two segments deep (``packages/*``, ``apps/web``).
    """
    matcher = create_matcher(patterns)
    found: set[str] = set()

    def _child_dirs(directory: str) -> list[str]:
        try:
            with os.scandir(directory) as it:
                return sorted(e.name for e in it if e.is_dir())
        except OSError:
            return []

    for name in _child_dirs(root):
        if matcher(name):
            found.add(os.path.join(root, name))

    for pattern in patterns:
        if "/" not in pattern:
            continue
        base = pattern.split("/", 1)[0]
        if not base or any(ch in base for ch in "*?[{"):
            continue
        for name in _child_dirs(os.path.join(root, base)):
            if matcher(f"{base}/{name}"):
                found.add(os.path.join(root, base, name))

    return sorted(found)
