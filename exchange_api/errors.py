"""
Exchange API - Error Taxonomy.

============================================================
PURPOSE
============================================================
Error classification for facade, connector and signing failures.

ERROR CATEGORIES:
1. Configuration - No market for the requested pair, unknown exchange
2. Transient     - Network, timeout, rate limit (retried per policy)
3. Fatal         - Explicitly non-retryable operation failure

Order validation failures, retry exhaustion and cancellation are
reported as Fail outcomes, not exceptions.

RETRYABLE vs NON-RETRYABLE:
- Only TRANSIENT failures ever enter another attempt.
- Configuration and validation errors never reach the retry loop.

============================================================
"""

import asyncio
from enum import Enum
from typing import Iterable, Optional

from .types import Acknowledged, Fail, OperationOutcome, Retryable


# ============================================================
# ERROR CATEGORIES
# ============================================================

class ErrorCategory(Enum):
    """Error category classification."""

    CONFIGURATION = "CONFIGURATION"
    """Missing or inconsistent configuration."""

    TRANSIENT = "TRANSIENT"
    """Temporary condition, retry may succeed."""

    FATAL = "FATAL"
    """Permanent failure, will fail again."""


# Reasons reported by the retry executor
MAX_RETRIES_EXCEEDED = "Max retries exceeded"
RETRY_CANCELLED = "Cancelled"


# Substrings identifying transient failures in plain exception messages
TRANSIENT_ERROR_MARKERS = (
    "ETIMEDOUT",
    "ECONNRESET",
    "ECONNREFUSED",
    "EAI_AGAIN",
    "ESOCKETTIMEDOUT",
    "timed out",
    "Timeout",
    "429",
    "Too Many Requests",
    "Service Unavailable",
    "Bad Gateway",
    "Nonce must be greater",
)


# ============================================================
# EXCEPTIONS
# ============================================================

class ExchangeAPIError(Exception):
    """Base exception for the exchange API."""

    category: ErrorCategory = ErrorCategory.FATAL

    def __init__(self, message: str, category: Optional[ErrorCategory] = None):
        super().__init__(message)
        self.message = message
        if category is not None:
            self.category = category


class ConfigurationError(ExchangeAPIError):
    """Configuration is missing or inconsistent. Never retried."""

    category = ErrorCategory.CONFIGURATION


class MarketNotFoundError(ConfigurationError):
    """No market configured for the requested pair."""

    def __init__(self, asset_a: str, asset_b: str):
        super().__init__(f"No market found for {asset_a}/{asset_b}")
        self.asset_a = asset_a
        self.asset_b = asset_b


class ExchangeOperationError(ExchangeAPIError):
    """
    Failure raised by a connector operation.

    Connectors flag whether the failure is transient, may carry an
    explicit retry-after hint, and may mark a failure-shaped answer
    as acknowledged (treated as success by the caller).
    """

    def __init__(
        self,
        message: str,
        retryable: bool = False,
        retry_after_seconds: Optional[float] = None,
        acknowledged: bool = False,
        payload=None,
    ):
        super().__init__(
            message,
            ErrorCategory.TRANSIENT if retryable else ErrorCategory.FATAL,
        )
        self.retryable = retryable
        self.retry_after_seconds = retry_after_seconds
        self.acknowledged = acknowledged
        self.payload = payload

    def to_outcome(self) -> OperationOutcome:
        """Convert to an outcome value."""
        if self.acknowledged:
            return Acknowledged(reason=self.message, payload=self.payload)
        if self.retryable:
            return Retryable(
                reason=self.message,
                retry_after_seconds=self.retry_after_seconds,
            )
        return Fail(reason=self.message)


# ============================================================
# CLASSIFICATION HELPERS
# ============================================================

def contains_any(text, markers: Iterable[str]) -> bool:
    """
    Check whether any marker occurs in text.

    Non-string input never matches.
    """
    if not isinstance(text, str):
        return False
    return any(marker in text for marker in markers)


def is_transient_exception(exc: BaseException) -> bool:
    """Check whether an exception describes a transient condition."""
    if isinstance(exc, ExchangeOperationError):
        return exc.retryable
    if isinstance(exc, ExchangeAPIError):
        return exc.category == ErrorCategory.TRANSIENT
    if isinstance(exc, (asyncio.TimeoutError, ConnectionError)):
        return True
    return contains_any(str(exc), TRANSIENT_ERROR_MARKERS)


def outcome_from_exception(exc: BaseException) -> OperationOutcome:
    """
    Normalize an exception into an outcome value.

    Args:
        exc: Exception raised by an operation

    Returns:
        Acknowledged, Retryable or Fail
    """
    if isinstance(exc, ExchangeOperationError):
        return exc.to_outcome()

    message = str(exc) or exc.__class__.__name__
    if is_transient_exception(exc):
        return Retryable(reason=message)
    return Fail(reason=message)
