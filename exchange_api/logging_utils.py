"""
Exchange API - Logging Utilities.

============================================================
PURPOSE
============================================================
Logging setup and credential masking.

SECURITY REQUIREMENTS:
1. NEVER log raw access tokens or signatures
2. Mask sensitive headers before they reach a log line

============================================================
"""

import logging
from typing import Dict, Optional, Union


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# Header names that should be masked
SENSITIVE_HEADERS = {
    "authorization",
    "access_token",
    "access-token",
    "key",
    "sign",
    "signature",
    "x-api-key",
}


def configure_logging(level: Union[str, int] = "INFO") -> None:
    """
    Configure root logging.

    Called by ExchangeAPI.initialize() with the configured level; does
    nothing when the root logger already has handlers.

    Args:
        level: Level name or number
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )


def mask_value(value: Optional[str], show_chars: int = 4) -> str:
    """
    Mask a sensitive value, showing only first few chars.

    Args:
        value: Value to mask
        show_chars: Number of chars to show at start

    Returns:
        Masked value
    """
    if not value or len(value) <= show_chars:
        return "***"
    return f"{value[:show_chars]}...***"


def mask_headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    """
    Mask sensitive headers.

    Args:
        headers: Request/response headers

    Returns:
        Headers with sensitive values masked
    """
    if not headers:
        return {}

    masked = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            masked[key] = mask_value(str(value))
        else:
            masked[key] = value
    return masked
