"""
Error Classification Tests.

============================================================
PURPOSE
============================================================
Tests for the error taxonomy and exception normalization.

============================================================
"""

import asyncio

from exchange_api import (
    Acknowledged,
    ConfigurationError,
    ErrorCategory,
    ExchangeAPIError,
    ExchangeOperationError,
    Fail,
    MarketNotFoundError,
    Retryable,
    contains_any,
    outcome_from_exception,
)
from exchange_api.errors import TRANSIENT_ERROR_MARKERS, is_transient_exception


class TestContainsAny:
    """Tests for contains_any."""

    def test_match(self):
        """Test a marker inside the text matches."""
        assert contains_any("connect ETIMEDOUT 10.0.0.1:443", TRANSIENT_ERROR_MARKERS)

    def test_no_match(self):
        """Test unrelated text does not match."""
        assert not contains_any("Invalid API key", TRANSIENT_ERROR_MARKERS)

    def test_non_string(self):
        """Test non-string input never matches."""
        assert not contains_any(None, ["a"])
        assert not contains_any(429, ["429"])


class TestExceptionHierarchy:
    """Tests for exception categories."""

    def test_configuration_error(self):
        """Test ConfigurationError category."""
        error = ConfigurationError("missing endpoint")

        assert isinstance(error, ExchangeAPIError)
        assert error.category == ErrorCategory.CONFIGURATION
        assert error.message == "missing endpoint"

    def test_market_not_found(self):
        """Test MarketNotFoundError is a configuration error."""
        error = MarketNotFoundError("BTC", "EUR")

        assert isinstance(error, ConfigurationError)
        assert str(error) == "No market found for BTC/EUR"

    def test_categories(self):
        """Test every category is carried by an exception class."""
        assert set(ErrorCategory) == {
            ErrorCategory.CONFIGURATION,
            ErrorCategory.TRANSIENT,
            ErrorCategory.FATAL,
        }

    def test_operation_error_category(self):
        """Test retryable flag drives the category."""
        assert ExchangeOperationError("x", retryable=True).category == ErrorCategory.TRANSIENT
        assert ExchangeOperationError("x").category == ErrorCategory.FATAL


class TestOutcomeFromException:
    """Tests for outcome_from_exception."""

    def test_retryable_operation_error(self):
        """Test retryable connector errors keep retry_after."""
        outcome = outcome_from_exception(
            ExchangeOperationError("Rate limited", retryable=True, retry_after_seconds=2.0)
        )

        assert outcome == Retryable(reason="Rate limited", retry_after_seconds=2.0)

    def test_acknowledged_operation_error(self):
        """Test acknowledged errors become Acknowledged outcomes."""
        outcome = outcome_from_exception(
            ExchangeOperationError("Order already closed", acknowledged=True, payload="42")
        )

        assert outcome == Acknowledged(reason="Order already closed", payload="42")
        assert outcome.is_success

    def test_timeout_is_transient(self):
        """Test asyncio timeouts are retryable."""
        outcome = outcome_from_exception(asyncio.TimeoutError())

        assert isinstance(outcome, Retryable)
        assert outcome.reason == "TimeoutError"

    def test_message_marker_is_transient(self):
        """Test plain exceptions naming a transient condition are retryable."""
        assert is_transient_exception(RuntimeError("503 Service Unavailable"))
        assert isinstance(outcome_from_exception(RuntimeError("HTTP 429")), Retryable)

    def test_configuration_error_is_fatal(self):
        """Test configuration errors never retry."""
        outcome = outcome_from_exception(ConfigurationError("Unsupported exchange: foo"))

        assert outcome == Fail(reason="Unsupported exchange: foo")

    def test_unknown_error_is_fatal(self):
        """Test unknown exceptions fail."""
        assert isinstance(outcome_from_exception(ValueError("bad input")), Fail)
