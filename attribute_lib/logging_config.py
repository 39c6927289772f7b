from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

from attribute_lib.config.config import load_config


def configure_logging(level: Optional[str] = None, config_path: Optional[Path] = None) -> logging.Logger:
    """Configure root logging for a host embedding the attribute store.

    The level is taken from `level` when given, otherwise from the
    `log_level` setting of the attribute store config, defaulting to
    WARNING. Returns a module logger for the caller.
    """
    default_level = logging.WARNING
    if level is None:
        try:
            level = load_config(config_path).log_level
        except Exception:
            # If config parse fails, fall back to default level
            level = None
    if level:
        resolved = logging.getLevelName(level.upper())
        if isinstance(resolved, int):
            default_level = resolved

    # Reconfigure root handlers to use the selected level and format
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=default_level, format='%(asctime)s %(levelname)s [%(name)s]: %(message)s')
    logger = logging.getLogger(__name__)
    logger.debug("Attribute store log level set to %s", logging.getLevelName(default_level))
    return logger
