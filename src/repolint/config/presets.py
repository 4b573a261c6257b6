"""Built-in configuration presets selectable with ``preset: <name>``.

Presets are expressed in raw configuration shape (exactly what a YAML file
would contain) so they merge with user files through the same code path as
``extends``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

_ROUTE_FILES = (
    "page.tsx",
    "layout.tsx",
    "loading.tsx",
    "error.tsx",
    "not-found.tsx",
    "template.tsx",
    "default.tsx",
    "route.ts",
)


def _route_children(route_case: str) -> dict[str, Any]:
    children: dict[str, Any] = {name: {"optional": True} for name in _ROUTE_FILES}
    children["$route"] = {
        "type": "param",
        "case": route_case,
        "child": {
            "type": "dir",
            "children": {
                "page.tsx": {"optional": True},
                "layout.tsx": {"optional": True},
                "loading.tsx": {"optional": True},
                "error.tsx": {"optional": True},
                "$files": {"type": "many", "pattern": "*.{ts,tsx,css}", "optional": True},
            },
        },
    }
    return children


def nextjs_preset(route_case: str = "kebab") -> dict[str, Any]:
    """Next.js App Router project layout."""
    route_children = _route_children(route_case)
    app_children = dict(route_children)
    app_children["$dynamic"] = {
        "type": "many",
        "pattern": "\\[*\\]",
        "child": {"type": "dir", "children": _route_children(route_case)},
    }

    layout: dict[str, Any] = {
        "type": "dir",
        "children": {
            "app": {"type": "dir", "optional": True, "children": app_children},
            "components": {
                "type": "dir",
                "optional": True,
                "children": {
                    "$component": {
                        "type": "many",
                        "case": "pascal",
                        "child": {
                            "type": "dir",
                            "children": {
                                "$files": {"type": "many", "pattern": "*.{ts,tsx,css}"},
                            },
                        },
                    },
                },
            },
            "lib": {
                "type": "dir",
                "optional": True,
                "children": {"$files": {"type": "many", "pattern": "*.ts"}},
            },
            "hooks": {
                "type": "dir",
                "optional": True,
                "children": {"$hook": {"type": "many", "case": "camel", "pattern": "use*.ts"}},
            },
            "public": {
                "type": "dir",
                "optional": True,
                "children": {"$assets": {"type": "many", "optional": True}},
            },
            "package.json": {"required": True},
            "next.config.js": {"optional": True},
            "next.config.mjs": {"optional": True},
            "next.config.ts": {"optional": True},
            "tsconfig.json": {"optional": True},
            ".env": {"optional": True},
            ".env.local": {"optional": True},
        },
    }

    return {
        "mode": "strict",
        "ignore": [
            "node_modules/**",
            ".next/**",
            ".git/**",
            "dist/**",
            "out/**",
            "coverage/**",
        ],
        "use_gitignore": True,
        "layout": layout,
        "rules": {
            "forbid_paths": ["**/node_modules/**"],
            "forbid_names": [".DS_Store", "Thumbs.db"],
        },
    }


PRESETS: dict[str, Callable[[], dict[str, Any]]] = {
    "nextjs": nextjs_preset,
    "nextjs-app": nextjs_preset,
}


def get_preset(name: str) -> dict[str, Any] | None:
    """Return a fresh raw config for preset *name*, or None if unknown."""
    factory = PRESETS.get(name)
    return factory() if factory is not None else None
