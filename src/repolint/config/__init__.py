"""Configuration: typed schema, YAML loader, built-in presets."""

from repolint.config.loader import find_config, find_repo_root, load_config, parse_config
from repolint.config.schema import Config, Rules, ScanSettings

__all__ = [
    "Config",
    "Rules",
    "ScanSettings",
    "find_config",
    "find_repo_root",
    "load_config",
    "parse_config",
]
