"""Central logging configuration for the navigator.

Import and call :func:`setup_logging` at start-up (the command-line entry
point does this for you).
"""

from __future__ import annotations

import copy
import logging
import logging.config
import os

from arclight_navigator.config import ConfigManager

__all__ = ["setup_logging"]


def setup_logging() -> None:
    """Configure logging using the ``logging`` section of the YAML config."""
    log_dir = os.environ.get("ARCLIGHT_LOG_DIR", "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, "navigator.log")

    logging_config = copy.deepcopy(ConfigManager().get_logging_config())
    if logging_config and isinstance(logging_config, dict) and logging_config.get("version"):
        if "handlers" in logging_config and "file" in logging_config["handlers"]:
            logging_config["handlers"]["file"]["filename"] = log_file
        try:
            logging.config.dictConfig(logging_config)
            logging.info("===== Logging initialised from config files =====")
        except (ValueError, TypeError, AttributeError, ImportError) as exc:
            _setup_minimal_logging()
            logging.error("Invalid logging config, using minimal fallback: %s", exc)
    else:
        _setup_minimal_logging()
        logging.warning("===== Logging initialised with minimal fallback (no config) =====")

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


def _apply_debug_overrides() -> None:
    """Apply environment-driven module-specific debug overrides.

    ``ARCLIGHT_DEBUG_MODULES=comma,separated,logger,names`` -> DEBUG for listed loggers
    """
    extra_modules = os.environ.get('ARCLIGHT_DEBUG_MODULES', '').strip()
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
