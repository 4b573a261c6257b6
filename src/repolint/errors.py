"""Error taxonomy: configuration, filesystem, and scan failures."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class RepoLintError(Exception):
    """Base class for every failure surfaced to the caller."""


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigError(RepoLintError):
    """Raised when a configuration file cannot be used."""


class ConfigNotFoundError(ConfigError):
    """No configuration file exists at (or under) the given path."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Config file not found: {path}")


class ConfigParseError(ConfigError):
    """The configuration file is not valid YAML."""

    def __init__(self, path: str, cause: object) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to parse config at {path}: {cause}")


class ConfigValidationError(ConfigError):
    """The configuration file parsed but does not satisfy the schema."""

    def __init__(self, path: str, errors: list[str]) -> None:
        self.path = path
        self.errors = tuple(errors)
        joined = "\n".join(errors)
        super().__init__(f"Config validation failed at {path}:\n{joined}")


class CircularExtendsError(ConfigError):
    """An ``extends`` chain refers back to a file already in the chain."""

    def __init__(self, path: str, chain: list[str]) -> None:
        self.path = path
        self.chain = tuple(chain)
        super().__init__(f"Circular extends detected: {' -> '.join([*chain, path])}")


class PathTraversalError(ConfigError):
    """A path from configuration or the command line escapes its root."""

    def __init__(self, path: str, base: str) -> None:
        self.path = path
        self.base = base
        super().__init__(f'Path traversal detected: "{path}" escapes {base}')


# ---------------------------------------------------------------------------
# Filesystem / scanning
# ---------------------------------------------------------------------------


class FileSystemError(RepoLintError):
    """A read or stat call failed in a way that is not tolerated locally."""

    def __init__(self, path: str, operation: str, cause: object) -> None:
        self.path = path
        self.operation = operation
        self.cause = cause
        super().__init__(f"Filesystem error during {operation} on {path}: {cause}")


class ScanError(RepoLintError):
    """A scan was aborted. Partial results are discarded.

    Subclasses identify limit overruns and symlink loops; a plain
    ``ScanError`` wraps a timeout or an unrecoverable filesystem error
    (available as ``cause``).
    """

    def __init__(self, root: str, cause: object = None, *, message: str | None = None) -> None:
        self.root = root
        self.cause = cause
        super().__init__(message or f"Failed to scan directory {root}: {cause}")


class ScanTimeoutError(ScanError):
    """The scan did not finish within its timeout."""

    def __init__(self, root: str, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(
            root,
            "Scan timed out",
            message=f"Failed to scan directory {root}: scan timed out after {timeout_ms}ms",
        )


class SymlinkLoopError(ScanError):
    """A followed symlink resolves to a directory already visited."""

    def __init__(self, root: str, path: str, target: str) -> None:
        self.path = path
        self.target = target
        super().__init__(root, message=f"Symlink loop detected: {path} -> {target}")


class MaxDepthExceededError(ScanError):
    """A directory was found below the configured depth bound."""

    def __init__(self, root: str, path: str, depth: int, max_depth: int) -> None:
        self.path = path
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(root, message=f"Max depth exceeded at {path}: {depth} > {max_depth}")


class MaxFilesExceededError(ScanError):
    """More entries were found than the configured file-count bound."""

    def __init__(self, root: str, count: int, max_files: int) -> None:
        self.count = count
        self.max_files = max_files
        super().__init__(root, message=f"Max files exceeded: {count} > {max_files}")
