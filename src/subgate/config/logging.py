"""
Logging setup shared by the CLI and the API server.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a single formatted stream handler to the ``subgate`` logger.

    Calling this more than once replaces the level but never stacks handlers.

    Parameters
    ----------
    level : str
        Log level name (e.g. ``"INFO"``, ``"DEBUG"``).

    Returns
    -------
    logging.Logger
        The configured ``subgate`` root logger.
    """
    root_logger = logging.getLogger("subgate")
    root_logger.setLevel(level.upper())

    if not any(getattr(h, "_subgate_handler", False) for h in root_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        handler._subgate_handler = True  # type: ignore[attr-defined]
        root_logger.addHandler(handler)

    return root_logger
