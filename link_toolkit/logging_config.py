from __future__ import annotations

"""Central logging configuration for the link toolkit.

Import and call :func:`setup_logging` once when the host editor starts.
"""

import logging
import os
import logging.config
from link_toolkit.config import ConfigManager

__all__ = ["setup_logging"]


def setup_logging() -> None:
    """Configure logging from the ``logging.yml`` section, or a console fallback."""
    log_dir = os.environ.get("LINK_TOOLKIT_LOG_DIR", "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, "link_toolkit.log")

    try:
        logging_config = ConfigManager().get_logging_config()

        if logging_config and isinstance(logging_config, dict) and logging_config.get("version"):
            logging_config = dict(logging_config)
            handlers = {name: dict(cfg) for name, cfg in (logging_config.get("handlers") or {}).items()}
            if "file" in handlers:
                handlers["file"]["filename"] = log_file
            logging_config["handlers"] = handlers

            logging.config.dictConfig(logging_config)
            logging.getLogger(__name__).info("===== Logging initialised from config files =====")
        else:
            _setup_minimal_logging()
    except (ValueError, TypeError, AttributeError, ImportError, OSError) as exc:
        # dictConfig reports every configuration problem through these
        print(f"Error loading logging config: {exc}")
        _setup_minimal_logging()

    _apply_debug_overrides()


def _setup_minimal_logging() -> None:
    """Set up console-only logging when config is unavailable."""
    minimal_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'simple': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'simple',
                'level': 'INFO',
            },
        },
        'root': {
            'level': 'INFO',
            'handlers': ['console'],
        },
    }

    logging.config.dictConfig(minimal_config)
    logging.getLogger(__name__).warning("===== Logging initialised with minimal fallback =====")


def _apply_debug_overrides() -> None:
    """Raise loggers listed in ``LINK_TOOLKIT_DEBUG_MODULES`` to DEBUG.

    Example: ``LINK_TOOLKIT_DEBUG_MODULES=link_toolkit.core.services.catalog_service``
    """
    extra_modules = os.environ.get('LINK_TOOLKIT_DEBUG_MODULES', '').strip()
    targets = [m.strip() for m in extra_modules.split(',') if m.strip()]
    for name in targets:
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        # Ensure at least one handler emits DEBUG for this logger
        has_debug_handler = any(h.level <= logging.DEBUG for h in logger.handlers)
        if not has_debug_handler:
            h = logging.StreamHandler()
            h.setLevel(logging.DEBUG)
            h.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            logger.addHandler(h)
        logger.info("Debug override active for logger '%s'", name)
