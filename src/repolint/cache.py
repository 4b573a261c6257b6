"""On-disk result cache keyed by (root, config content, entry fingerprint)."""

from __future__ import annotations

import contextlib
import hashlib
import json
import logging
import os
import shutil
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from repolint.models import CheckResult, result_from_dict, result_to_dict

if TYPE_CHECKING:
    from collections.abc import Iterable

    from repolint.models import FileEntry

logger = logging.getLogger(__name__)

CACHE_DIR = ".repolint-cache"
CACHE_FILE = "cache.json"
CACHE_VERSION = "2"
DEFAULT_TTL_SECONDS = 60 * 60


@dataclass(frozen=True)
class CacheStats:
    """Summary of the cache file for ``repolint cache`` style reporting."""

    path: str
    size_bytes: int
    files_count: int
    age_seconds: float


def _hash_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]


def cache_path(root: Path) -> Path:
    return root / CACHE_DIR / CACHE_FILE


def compute_file_hash(entries: Iterable[FileEntry]) -> str:
    """Order-independent fingerprint of an entry list.

    One ``relative_path:kind:size:mtime`` line per entry (``kind`` is ``D``
    or ``F``), sorted, hashed with SHA-256 and truncated to 16 hex chars.
    """
    lines = sorted(
        f"{e.relative_path}:{'D' if e.is_directory else 'F'}:{e.size or 0}:{e.mtime_ms or 0}"
        for e in entries
    )
    return _hash_text("\n".join(lines))


def read_cache(
    root: Path,
    config_content: str,
    file_hash: str,
    *,
    max_age_seconds: float = DEFAULT_TTL_SECONDS,
) -> CheckResult | None:
    """Return the cached result when every key component still matches.

    Any read or decode failure is a miss.
    """
    path = cache_path(root)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if (
            data.get("version") != CACHE_VERSION
            or data.get("root") != str(root)
            or data.get("config_hash") != _hash_text(config_content)
            or data.get("file_hash") != file_hash
        ):
            logger.debug("Cache miss for %s: key mismatch", root)
            return None
        if time.time() - float(data["timestamp"]) > max_age_seconds:
            logger.debug("Cache miss for %s: entry expired", root)
            return None
        result = result_from_dict(data["result"])
    except FileNotFoundError:
        return None
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
        logger.debug("Ignoring unreadable cache %s: %s", path, exc)
        return None
    logger.debug("Cache hit for %s", root)
    return result


def write_cache(
    root: Path,
    config_content: str,
    file_hash: str,
    files_count: int,
    result: CheckResult,
) -> None:
    """Persist *result* atomically. Failures are logged and otherwise ignored."""
    path = cache_path(root)
    record: dict[str, Any] = {
        "version": CACHE_VERSION,
        "root": str(root),
        "config_hash": _hash_text(config_content),
        "file_hash": file_hash,
        "files_count": files_count,
        "result": result_to_dict(result),
        "timestamp": time.time(),
    }
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".cache-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(record, fh)
            os.replace(tmp_name, path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise
    except OSError as exc:
        logger.debug("Could not write cache %s: %s", path, exc)


def clear_cache(root: Path) -> bool:
    """Remove the cache directory. Returns True if something was removed."""
    directory = root / CACHE_DIR
    if not directory.exists():
        return False
    try:
        shutil.rmtree(directory)
    except OSError as exc:
        logger.debug("Could not clear cache %s: %s", directory, exc)
        return False
    return True


def cache_stats(root: Path) -> CacheStats | None:
    """Describe the current cache file, or None when there is no readable cache."""
    path = cache_path(root)
    try:
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw)
        return CacheStats(
            path=str(path),
            size_bytes=len(raw.encode("utf-8")),
            files_count=int(data.get("files_count", 0)),
            age_seconds=max(0.0, time.time() - float(data["timestamp"])),
        )
    except FileNotFoundError:
        return None
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
        logger.debug("Ignoring unreadable cache %s: %s", path, exc)
        return None
