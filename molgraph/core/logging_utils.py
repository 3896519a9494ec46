from __future__ import annotations

import logging
import os

PACKAGE_LOGGER = "molgraph"


def _parse_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; the first call sets the root level from MOLGRAPH_LOG_LEVEL."""
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=_parse_level(os.environ.get("MOLGRAPH_LOG_LEVEL", "INFO")),
            format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        )
    return logging.getLogger(name)


def set_log_level(level: str | int) -> int:
    """Set the level of every molgraph.* logger. Unknown names fall back to INFO."""
    value = _parse_level(level)
    logging.getLogger(PACKAGE_LOGGER).setLevel(value)
    return value
