"""Configuration files (YAML) and helpers.

``ConfigManager`` reads the default files from this folder and merges them
with user overrides.
"""

from .manager import ConfigManager, LINK_DEFAULTS

__all__ = [
    "ConfigManager",
    "LINK_DEFAULTS",
]
