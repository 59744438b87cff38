"""Utility helper functions"""

from typing import Any, Optional


def normalize_base_url(url: str) -> str:
    """
    Normalize a service base URL

    Args:
        url: URL to normalize

    Returns:
        URL without surrounding whitespace or trailing slashes
    """
    return (url or "").strip().rstrip("/")


def clean_text(value: Any) -> Optional[str]:
    """
    Normalize an optional text field from a JSON payload

    Args:
        value: Raw field value

    Returns:
        Stripped string, or None for null/empty/non-string values
    """
    if not isinstance(value, str):
        return None

    text = value.strip()
    return text or None


def coerce_count(value: Any) -> Optional[int]:
    """
    Coerce a counter field to a non-negative integer

    Args:
        value: Raw field value (int, numeric string, or None)

    Returns:
        Non-negative integer, or None when absent or not numeric
    """
    # bool is an int subclass; a boolean counter is malformed
    if value is None or isinstance(value, bool):
        return None

    try:
        count = int(value)
    except (TypeError, ValueError, OverflowError):
        return None

    return max(count, 0)
