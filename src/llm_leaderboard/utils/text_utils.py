"""Text helpers shared by the export endpoints."""

import re


def sanitize_for_filename(text: str, max_length: int = 50, default: str = "export") -> str:
    """
    Sanitize text for use in filenames.

    Args:
        text: Text to sanitize
        max_length: Maximum length of output
        default: Returned when nothing usable remains

    Returns:
        Sanitized string safe for filenames
    """
    # Keep alphanumeric, spaces, hyphens, underscores
    safe = re.sub(r'[^\w\s-]', '', text or '')
    safe = re.sub(r'[-\s]+', '_', safe)
    safe = safe.strip('_')
    return safe[:max_length] if safe else default


def is_blank(value) -> bool:
    """True for None and for strings that are empty after stripping."""
    return value is None or (isinstance(value, str) and not value.strip())
