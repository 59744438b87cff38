"""Logging configuration"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any, Optional, Union

REDACTED = "***REDACTED***"

_SENSITIVE_KEYS = ("token", "authorization", "api_key", "apikey", "secret", "password", "cookie")
_SENSITIVE_INLINE = re.compile(
    r"(?i)\b(access_token|token|api_key|apikey|secret|password)=([^&\s]+)"
)
_BEARER = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._\-]+")


def setup_logger(
    name: str,
    level: Union[int, str] = logging.INFO,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Set up a logger with consistent formatting

    Args:
        name: Logger name
        level: Logging level (number or name such as "DEBUG")
        format_string: Custom format string

    Returns:
        Configured logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if format_string is None:
        format_string = (
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    formatter = logging.Formatter(format_string)
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    return logger


def _is_sensitive_key(key: Optional[str]) -> bool:
    if not key:
        return False
    lowered = key.lower()
    return any(marker in lowered for marker in _SENSITIVE_KEYS)


def sanitize_for_log(value: Any, key: Optional[str] = None) -> Any:
    """Mask credential-looking keys and inline secrets before logging."""
    if _is_sensitive_key(key):
        return REDACTED

    if isinstance(value, dict):
        return {k: sanitize_for_log(v, key=str(k)) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [sanitize_for_log(item) for item in value]

    if isinstance(value, str):
        masked = _SENSITIVE_INLINE.sub(lambda m: f"{m.group(1)}={REDACTED}", value)
        return _BEARER.sub(f"Bearer {REDACTED}", masked)

    return value


def sanitize_log_extra(**fields: Any) -> dict[str, Any]:
    """Build a sanitized ``extra`` mapping for structured log calls."""
    return {key: sanitize_for_log(value, key=key) for key, value in fields.items()}
