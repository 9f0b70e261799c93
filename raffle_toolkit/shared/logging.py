"""
Logging setup for the raffle toolkit.

Every toolkit logger lives under the ``raffle_toolkit`` namespace. One console
handler is attached to that namespace root the first time a logger is
requested, and module loggers propagate to it. RAFFLE_LOG_LEVEL sets the level
(default INFO).
"""

import logging
import os
from typing import Optional

ROOT_LOGGER = "raffle_toolkit"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _level_from_env() -> int:
    level = logging.getLevelName(os.getenv("RAFFLE_LOG_LEVEL", "INFO").upper())
    # getLevelName returns "Level X" for unknown names
    return level if isinstance(level, int) else logging.INFO


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(_level_from_env())
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger under the toolkit namespace.

    Names outside the namespace are nested into it, so every logger shares
    the single root handler.
    """
    root = _configure_root()
    if not name or name == ROOT_LOGGER:
        return root
    if not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
