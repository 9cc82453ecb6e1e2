"""
Logging configuration for LLM Leaderboard.

Modules obtain their logger with ``get_logger(__name__)``; entry points call
``setup_logging()`` once to attach handlers to the root logger.
"""

import logging
from pathlib import Path
from typing import Optional, Union

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    fmt: str = DEFAULT_FORMAT,
    force: bool = False,
) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        level: Log level name ("DEBUG", "INFO", ...) or numeric level
        log_file: Optional path; when given, records are also written there
        fmt: Log record format
        force: Reconfigure even if logging was already set up

    Returns:
        The root logger
    """
    global _configured

    root = logging.getLogger()
    if _configured and not force:
        return root

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(level=level, format=fmt, handlers=handlers, force=True)
    _configured = True
    return root
