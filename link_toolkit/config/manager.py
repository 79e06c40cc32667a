from __future__ import annotations

"""Configuration loading and access helpers.

Loads YAML files packaged with *link_toolkit* and optionally merges them
with user overrides:

On Windows: ``%LOCALAPPDATA%\\LinkToolkit\\config\\*.yml``
On Unix: ``~/.link_toolkit/*.yml``

Missing PyYAML falls back to the built-in defaults below so the link
surface still works with its documented settings.
"""

from importlib import resources
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

__all__ = ["ConfigManager", "LINK_DEFAULTS"]

LINK_DEFAULTS: Dict[str, Any] = {
    "debounce_ms": 100,
    "keystroke": "Ctrl+K",
    "marker_name": "link-ui",
    "list_input_name": "listRadioInput",
    "level_marker": "-",
}


def _get_user_config_dir() -> Path:
    """Get the user configuration directory."""
    override = os.environ.get("LINK_TOOLKIT_CONFIG_DIR")
    if override:
        return Path(override)
    if os.name == 'nt':  # Windows
        local_appdata = os.environ.get('LOCALAPPDATA')
        if local_appdata:
            return Path(local_appdata) / "LinkToolkit" / "config"
        return Path.home() / "AppData" / "Local" / "LinkToolkit" / "config"
    return Path.home() / ".link_toolkit"


class _Singleton(type):
    _instance: "ConfigManager" | None = None

    def __call__(cls, *args, **kwargs):  # type: ignore[no-self-use]
        if cls._instance is None:
            cls._instance = super().__call__(*args, **kwargs)
        return cls._instance


class ConfigManager(metaclass=_Singleton):
    """Lazy-loads and exposes configuration sections as dictionaries."""

    _DEFAULT_FILENAMES = {
        "link": "link_defaults.yml",
        "logging": "logging.yml",
    }

    def __init__(self, user_config_dir: Optional[Path] = None) -> None:
        self._user_config_dir = user_config_dir
        self._data: Dict[str, Dict[str, Any]] = {}
        self._ensure_loaded()

    @classmethod
    def reset(cls) -> None:
        """Forget the shared instance so the next call reloads from disk."""
        cls._instance = None

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------
    def get_link_config(self) -> Dict[str, Any]:
        merged = dict(LINK_DEFAULTS)
        merged.update(self._data.get("link", {}))
        return merged

    def get_logging_config(self) -> Dict[str, Any]:
        return self._data.get("logging", {})

    # ------------------------------------------------------------------
    # Internal loading logic
    # ------------------------------------------------------------------
    def _ensure_loaded(self) -> None:
        if self._data:
            return  # already loaded

        try:
            import yaml  # type: ignore
        except ModuleNotFoundError:
            logger.warning("PyYAML not installed – falling back to built-in defaults")
            self._data = self._builtin_defaults()
            return

        startup_summary = []
        user_config_dir = self._user_config_dir or _get_user_config_dir()

        for key, filename in self._DEFAULT_FILENAMES.items():
            merged_cfg: Dict[str, Any] = {}
            status = "missing"

            # 1. load packaged default
            try:
                packaged_text = resources.files(__package__).joinpath(filename).read_text(encoding="utf-8")
                merged_cfg.update(yaml.safe_load(packaged_text) or {})
                status = "loaded"
            except (FileNotFoundError, OSError):
                logger.error("Missing packaged config for %s (%s)", key, filename)
            except yaml.YAMLError as exc:
                logger.error("Invalid packaged config for %s (%s): %s", key, filename, exc)
                status = "invalid"

            # 2. load user overrides
            user_path = user_config_dir / filename
            if user_path.exists():
                try:
                    merged_cfg.update(yaml.safe_load(user_path.read_text(encoding="utf-8")) or {})
                    if status == "loaded":
                        status = "loaded+overrides"
                except (OSError, yaml.YAMLError) as exc:
                    logger.error("Could not parse user config %s: %s", user_path, exc)

            self._data[key] = merged_cfg
            startup_summary.append(f"{key}: {status}")

        logger.info("Config startup: %s", " | ".join(startup_summary))

    @staticmethod
    def _builtin_defaults() -> Dict[str, Dict[str, Any]]:
        return {
            "link": dict(LINK_DEFAULTS),
            "logging": {},
        }
