"""repolint CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from repolint import __version__
from repolint.output import OUTPUT_FORMATS

if TYPE_CHECKING:
    from repolint.config.schema import Config

_RULE_GROUP_HELP: dict[str, str] = {
    "forbid_paths": "Patterns of forbidden paths",
    "forbid_names": "List of forbidden file names",
    "ignore_paths": "Patterns invisible to every check",
    "dependencies": "File dependency requirements",
    "mirror": "Mirror structure rules",
    "when": "Conditional requirements",
    "match": "Pattern-based directory validation rules",
}

_project_option = click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)
_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: discovered in the project root).",
)


@click.group()
@click.version_option(version=__version__, prog_name="repolint")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool) -> None:
    """repolint - repository structure linter."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _load(project: Path | None, config_path: Path | None) -> Config:
    from repolint.config.loader import find_config, load_config
    from repolint.errors import ConfigNotFoundError

    root = (project or Path.cwd()).resolve()
    path = config_path or find_config(root)
    if path is None:
        raise ConfigNotFoundError(str(root))
    return load_config(path)


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@main.command()
@click.option("--scope", default=None, help="Only check this sub-path of the project.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(OUTPUT_FORMATS),
    default="console",
    help="Output format.",
)
@_config_option
@click.option(
    "--no-cache", is_flag=True, default=False, help="Ignore and do not update the cache."
)
@click.option(
    "--max-depth", type=click.IntRange(min=1), default=None, help="Maximum directory depth."
)
@click.option(
    "--max-files", type=click.IntRange(min=1), default=None, help="Maximum entries scanned."
)
@click.option("--timeout-ms", type=click.IntRange(min=1), default=None, help="Scan timeout.")
@click.option(
    "--concurrency", type=click.IntRange(min=1), default=None, help="Parallel directory reads."
)
@click.option(
    "--follow-symlinks/--no-follow-symlinks",
    default=None,
    help="Descend into symlinked directories.",
)
@click.option(
    "--gitignore/--no-gitignore", "use_gitignore", default=None, help="Honour .gitignore files."
)
@_project_option
def check(
    *,
    scope: str | None,
    fmt: str,
    config_path: Path | None,
    no_cache: bool,
    max_depth: int | None,
    max_files: int | None,
    timeout_ms: int | None,
    concurrency: int | None,
    follow_symlinks: bool | None,
    use_gitignore: bool | None,
    project: Path | None,
) -> None:
    """Check the repository structure against the configuration.

    Exit codes: 0 = no errors (warnings allowed), 1 = error-severity
    violations, 2 = configuration or scan failure.
    """
    from rich.console import Console

    from repolint.errors import RepoLintError
    from repolint.linter import ScanOverrides, run_check
    from repolint.output import FORMAT_CONSOLE, format_result, render_console

    overrides = ScanOverrides(
        max_depth=max_depth,
        max_files=max_files,
        timeout_ms=timeout_ms,
        concurrency=concurrency,
        follow_symlinks=follow_symlinks,
        use_gitignore=use_gitignore,
    )
    try:
        result = run_check(
            project or Path.cwd(),
            config_path=config_path,
            scope=scope,
            use_cache=not no_cache,
            overrides=overrides,
        )
    except RepoLintError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    if fmt == FORMAT_CONSOLE:
        render_console(result, Console())
    else:
        click.echo(format_result(result, fmt))

    if result.has_errors:
        sys.exit(1)


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


@main.group("inspect")
def inspect_group() -> None:
    """Show the resolved configuration."""


@inspect_group.command("layout")
@_config_option
@_project_option
def inspect_layout(*, config_path: Path | None, project: Path | None) -> None:
    """Print the resolved layout tree as JSON."""
    from repolint.config.schema import layout_to_dict
    from repolint.errors import RepoLintError

    try:
        config = _load(project, config_path)
    except RepoLintError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    if config.layout is None:
        click.echo("No layout defined in config")
        return
    click.echo(json.dumps(layout_to_dict(config.layout), indent=2))


@inspect_group.command("rule")
@click.argument("name", required=False)
@_config_option
@_project_option
def inspect_rule(*, name: str | None, config_path: Path | None, project: Path | None) -> None:
    """Print one configured rule group as JSON, or list the groups."""
    from repolint.config.schema import rule_group_to_data
    from repolint.errors import RepoLintError

    if name is None:
        click.echo("Available rules:")
        for group, description in _RULE_GROUP_HELP.items():
            click.echo(f"  {group:<14}- {description}")
        return

    try:
        config = _load(project, config_path)
    except RepoLintError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    data = rule_group_to_data(config.rules, name)
    if data is None:
        click.echo(f'Rule "{name}" not found or not configured')
        return
    click.echo(json.dumps(data, indent=2))


# ---------------------------------------------------------------------------
# cache
# ---------------------------------------------------------------------------


@main.group("cache")
def cache_group() -> None:
    """Manage the on-disk result cache."""


@cache_group.command("stats")
@_project_option
def cache_stats_cmd(*, project: Path | None) -> None:
    """Show the cached result for the project, if any."""
    from repolint.cache import cache_stats

    stats = cache_stats((project or Path.cwd()).resolve())
    if stats is None:
        click.echo("No cache")
        return
    click.echo(f"Path:    {stats.path}")
    click.echo(f"Size:    {stats.size_bytes} bytes")
    click.echo(f"Entries: {stats.files_count}")
    click.echo(f"Age:     {stats.age_seconds:.0f}s")


@cache_group.command("clear")
@_project_option
def cache_clear_cmd(*, project: Path | None) -> None:
    """Delete the project's cache directory."""
    from repolint.cache import clear_cache

    if clear_cache((project or Path.cwd()).resolve()):
        click.echo("Cache cleared")
    else:
        click.echo("No cache")
