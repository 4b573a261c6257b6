"""Naming-convention checks for file and directory names."""

from __future__ import annotations

import re

CASE_KEBAB = "kebab"
CASE_SNAKE = "snake"
CASE_CAMEL = "camel"
CASE_PASCAL = "pascal"
CASE_ANY = "any"
VALID_CASES: frozenset[str] = frozenset({CASE_KEBAB, CASE_SNAKE, CASE_CAMEL, CASE_PASCAL, CASE_ANY})

# Extension segments (".test.ts") are allowed after the stem.
_CASE_RE: dict[str, re.Pattern[str]] = {
    CASE_KEBAB: re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*(\.[a-z0-9]+)*$"),
    CASE_SNAKE: re.compile(r"^[a-z][a-z0-9]*(_[a-z0-9]+)*(\.[a-z0-9]+)*$"),
    CASE_CAMEL: re.compile(r"^[a-z][a-zA-Z0-9]*(\.[a-zA-Z0-9]+)*$"),
    CASE_PASCAL: re.compile(r"^[A-Z][a-zA-Z0-9]*(\.[a-zA-Z0-9]+)*$"),
}

_CASE_NAMES: dict[str, str] = {
    CASE_KEBAB: "kebab-case",
    CASE_SNAKE: "snake_case",
    CASE_CAMEL: "camelCase",
    CASE_PASCAL: "PascalCase",
    CASE_ANY: "any case",
}

_LOWER_UPPER_RE = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATOR_CHAR_RE = re.compile(r"[-_](.)")


def is_hidden(name: str) -> bool:
    """Dot-prefixed names (``.gitignore``, ``.env``) follow their own conventions."""
    return name.startswith(".")


def validate_case(name: str, style: str) -> bool:
    """Return True if *name* satisfies *style*. Hidden names always pass."""
    if is_hidden(name):
        return True
    regex = _CASE_RE.get(style)
    if regex is None:
        return True
    return regex.match(name) is not None


def _split_ext(name: str) -> tuple[str, str]:
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem:
        return name, ""
    return stem, f".{ext}"


def suggest_case(name: str, style: str) -> str:
    """Best-effort conversion of *name* into *style*, keeping the last extension."""
    stem, ext = _split_ext(name)
    if style == CASE_KEBAB:
        converted = _LOWER_UPPER_RE.sub(r"\1-\2", stem).replace("_", "-").lower()
    elif style == CASE_SNAKE:
        converted = _LOWER_UPPER_RE.sub(r"\1_\2", stem).replace("-", "_").lower()
    elif style == CASE_CAMEL:
        converted = _SEPARATOR_CHAR_RE.sub(lambda m: m.group(1).upper(), stem)
        converted = converted[:1].lower() + converted[1:]
    elif style == CASE_PASCAL:
        converted = _SEPARATOR_CHAR_RE.sub(lambda m: m.group(1).upper(), stem)
        converted = converted[:1].upper() + converted[1:]
    else:
        return name
    return converted + ext


def case_name(style: str) -> str:
    """Human-readable name for *style* (``"kebab"`` -> ``"kebab-case"``)."""
    return _CASE_NAMES.get(style, style)
