"""Glob matching over normalized relative paths.

Pattern semantics:

- ``*`` matches within one path segment and never crosses ``/``.
- ``**`` as a whole segment matches zero or more segments (``a/**/b``
  matches ``a/b``).
- ``?`` matches one character, ``[...]`` is a character class
  (``[!...]`` / ``[^...]`` negate), ``{a,b}`` expands to alternatives.
  Nested braces raise :class:`PatternError`.
- A pattern without ``/`` that contains a glob metacharacter is a
  basename pattern and matches at any depth (``*.log`` behaves like
  ``**/*.log``).  A literal name such as ``package.json`` only matches the
  exact relative path.
- Dotfiles are not special.  A leading ``!`` negates the pattern.
- A backslash before a metacharacter escapes it; any other backslash is
  treated as a Windows path separator.

Compiled predicates are memoized in a :class:`MatcherCache`.  Callers that
run concurrently pass their own instance; :data:`default_cache` serves
one-off lookups.
"""

from __future__ import annotations

import re
import threading
import unicodedata
from collections.abc import Callable, Sequence

Matcher = Callable[[str], bool]

_GLOB_CHARS = frozenset("*?[{")
_ESCAPABLE = frozenset("*?[]{}!,\\")
_SLASH_RUN_RE = re.compile(r"/{2,}")

DEFAULT_CACHE_SIZE = 1000


class PatternError(ValueError):
    """Raised for glob patterns that cannot be compiled unambiguously."""


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize_unicode(text: str) -> str:
    """Return *text* in NFC so composed and decomposed forms compare equal."""
    return unicodedata.normalize("NFC", text)


def _collapse(text: str) -> str:
    text = _SLASH_RUN_RE.sub("/", text)
    if len(text) > 1:
        text = text.rstrip("/")
    return text


def normalize_path(path: str) -> str:
    """Normalize a path for matching.

    Backslashes become ``/``, slash runs collapse, trailing slashes are
    dropped and Unicode is composed.  A leading ``/`` is preserved.
    """
    return _collapse(normalize_unicode(path).replace("\\", "/"))


def normalize_pattern(pattern: str) -> str:
    """Normalize a glob pattern the way :func:`normalize_path` normalizes paths.

    Backslash escapes of metacharacters survive; other backslashes are
    separators.
    """
    pattern = normalize_unicode(pattern)
    out: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "\\":
            nxt = pattern[i + 1] if i + 1 < n else ""
            if nxt in _ESCAPABLE and nxt:
                out.append(ch + nxt)
                i += 2
                continue
            out.append("/")
        else:
            out.append(ch)
        i += 1
    return _collapse("".join(out))


# ---------------------------------------------------------------------------
# Brace expansion
# ---------------------------------------------------------------------------


def _split_unescaped(text: str, sep: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            current.append(text[i : i + 2])
            i += 2
            continue
        if ch == sep:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    parts.append("".join(current))
    return parts


def _find_unescaped(text: str, target: str, start: int = 0) -> int:
    i = start
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == target:
            return i
        i += 1
    return -1


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` groups into separate patterns.

    Several sequential groups are supported (``{a,b}/{c,d}`` yields four
    patterns); a group inside another group raises :class:`PatternError`.
    An unclosed ``{`` is kept literally.
    """
    open_idx = _find_unescaped(pattern, "{")
    if open_idx < 0:
        return [pattern]

    i = open_idx + 1
    close_idx = -1
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "{":
            msg = f"nested braces are not supported in pattern {pattern!r}"
            raise PatternError(msg)
        if ch == "}":
            close_idx = i
            break
        i += 1
    if close_idx < 0:
        return [pattern]

    prefix = pattern[:open_idx]
    options = _split_unescaped(pattern[open_idx + 1 : close_idx], ",")
    tails = expand_braces(pattern[close_idx + 1 :])
    return [prefix + option + tail for option in options for tail in tails]


# ---------------------------------------------------------------------------
# Translation
# ---------------------------------------------------------------------------


def _has_glob(pattern: str) -> bool:
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\":
            i += 2
            continue
        if ch in _GLOB_CHARS:
            return True
        i += 1
    return False


def _translate_segment(segment: str) -> str:
    out: list[str] = []
    i = 0
    n = len(segment)
    while i < n:
        ch = segment[i]
        if ch == "\\" and i + 1 < n:
            out.append(re.escape(segment[i + 1]))
            i += 2
            continue
        if ch == "*":
            while i < n and segment[i] == "*":
                i += 1
            out.append("[^/]*")
            continue
        if ch == "?":
            out.append("[^/]")
        elif ch == "[":
            j = i + 1
            if j < n and segment[j] in "!^":
                j += 1
            if j < n and segment[j] == "]":
                j += 1
            while j < n and segment[j] != "]":
                j += 1
            if j >= n:
                out.append(re.escape(ch))
            else:
                body = segment[i + 1 : j].replace("\\", "\\\\")
                if body[0] in "!^":
                    out.append(f"[^/{body[1:]}]")
                else:
                    out.append(f"[{body}]")
                i = j
        else:
            out.append(re.escape(ch))
        i += 1
    return "".join(out)


def _translate(pattern: str) -> str:
    segments: list[str] = []
    for seg in pattern.split("/"):
        if seg == "**" and segments and segments[-1] == "**":
            continue
        segments.append(seg)

    parts: list[str] = []
    for idx, seg in enumerate(segments):
        last = idx == len(segments) - 1
        if seg == "**":
            if idx == 0 and last:
                parts.append(".*")
            elif idx == 0:
                # consumes its own trailing slash
                parts.append("(?:.*/)?")
            else:
                parts.append("(?:/.*)?")
            continue
        if idx > 0 and not (idx == 1 and segments[0] == "**"):
            parts.append("/")
        parts.append(_translate_segment(seg))
    return "".join(parts)


def compile_pattern(pattern: str) -> Matcher:
    """Compile a single glob *pattern* into a predicate over normalized paths.

    The empty pattern matches only the empty path.
    """
    if pattern == "":
        return lambda path: path == ""

    negated = pattern.startswith("!")
    if negated:
        pattern = pattern[1:]

    normalized = normalize_pattern(pattern)
    if "/" not in normalized and _has_glob(normalized):
        normalized = f"**/{normalized}"

    try:
        regexes = [re.compile(_translate(p)) for p in expand_braces(normalized)]
    except re.error as exc:
        msg = f"invalid pattern {pattern!r}: {exc}"
        raise PatternError(msg) from exc

    def _match(path: str) -> bool:
        hit = any(rx.fullmatch(path) is not None for rx in regexes)
        return hit != negated

    return _match


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


class MatcherCache:
    """Bounded, thread-safe memo of compiled patterns.

    When more than *max_size* patterns are stored, the oldest tenth is
    evicted.
    """

    def __init__(self, max_size: int = DEFAULT_CACHE_SIZE) -> None:
        self._max_size = max(1, max_size)
        self._store: dict[str, Matcher] = {}
        self._lock = threading.Lock()

    def get(self, pattern: str) -> Matcher:
        """Return the compiled predicate for *pattern*, compiling on a miss."""
        negated = pattern.startswith("!")
        key = ("!" if negated else "") + normalize_pattern(pattern[1:] if negated else pattern)
        with self._lock:
            cached = self._store.get(key)
        if cached is not None:
            return cached

        compiled = compile_pattern(pattern)
        with self._lock:
            self._store[key] = compiled
            if len(self._store) > self._max_size:
                drop = max(1, self._max_size // 10)
                for old in list(self._store)[:drop]:
                    del self._store[old]
        return compiled

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


default_cache = MatcherCache()


# ---------------------------------------------------------------------------
# Public matching helpers
# ---------------------------------------------------------------------------


def create_matcher(
    patterns: str | Sequence[str], cache: MatcherCache | None = None
) -> Matcher:
    """Create a predicate that is true when a path matches any of *patterns*.

    Example::

        is_ts = create_matcher(["*.ts", "*.tsx"])
        is_ts("src/file.ts")   # True
        is_ts("src/file.js")   # False
    """
    pattern_list = [patterns] if isinstance(patterns, str) else list(patterns)
    if not pattern_list:
        return lambda path: False
    memo = cache if cache is not None else default_cache
    compiled = [memo.get(p) for p in pattern_list]

    def _match(path: str) -> bool:
        normalized = normalize_path(path)
        return any(m(normalized) for m in compiled)

    return _match


def matches(path: str, pattern: str, cache: MatcherCache | None = None) -> bool:
    """Return True if *path* matches glob *pattern*."""
    memo = cache if cache is not None else default_cache
    return memo.get(pattern)(normalize_path(path))


def matches_any(
    path: str, patterns: Sequence[str], cache: MatcherCache | None = None
) -> bool:
    """Return True if *path* matches at least one of *patterns*."""
    if not patterns:
        return False
    memo = cache if cache is not None else default_cache
    normalized = normalize_path(path)
    return any(memo.get(p)(normalized) for p in patterns)


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def get_basename(path: str) -> str:
    """Last segment of *path* (``"src/a.ts"`` -> ``"a.ts"``)."""
    return normalize_path(path).rsplit("/", 1)[-1]


def get_parent(path: str) -> str:
    """Parent of *path*; ``""`` for top-level names."""
    normalized = normalize_path(path)
    if "/" not in normalized:
        return ""
    return normalized.rsplit("/", 1)[0]


def get_depth(path: str) -> int:
    """Number of segments in *path*; the root ``""`` has depth 0."""
    normalized = normalize_path(path)
    return 0 if normalized == "" else len(normalized.split("/"))


def join_path(*parts: str) -> str:
    """Join segments with ``/``, skipping empty ones."""
    return "/".join(p for p in parts if p)
