"""Utility modules for LLM Leaderboard."""

from .logging_config import get_logger, setup_logging
from .text_utils import sanitize_for_filename, is_blank

__all__ = [
    "get_logger",
    "setup_logging",
    "sanitize_for_filename",
    "is_blank",
]
