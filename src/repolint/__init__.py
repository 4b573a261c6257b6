"""Repolint: repository structure linter."""

__version__ = "0.5.0"
