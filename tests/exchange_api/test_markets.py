"""
Market Resolution and Precision Tests.

============================================================
PURPOSE
============================================================
Tests for market lookup and decimal truncation.

TEST CATEGORIES:
- Resolution tests: Case-insensitive, order-sensitive lookup
- Truncation tests: Digit count, idempotence, no rounding
- Parsing tests: Connector payloads into Market records

============================================================
"""

import pytest
from decimal import Decimal

from exchange_api import (
    ExchangeProperties,
    Market,
    MarketNotFoundError,
    MinimalOrder,
    require_market,
    resolve_market,
    truncate_decimals,
)


def _properties() -> ExchangeProperties:
    return ExchangeProperties(markets=(
        Market(pair=("BTC", "USDT"), minimal_order=MinimalOrder(amount=0.001), max_decimals=2),
        Market(pair=("ETH", "BTC"), minimal_order=MinimalOrder(amount=0.01), max_decimals=6),
    ))


# ============================================================
# RESOLUTION TESTS
# ============================================================

class TestResolveMarket:
    """Tests for resolve_market / require_market."""

    def test_exact_match(self):
        """Test resolving a pair with matching case."""
        market = resolve_market(_properties(), "BTC", "USDT")

        assert market is not None
        assert market.max_decimals == 2

    def test_case_insensitive(self):
        """Test lowercase and mixed case symbols match."""
        props = _properties()

        assert resolve_market(props, "btc", "usdt") is not None
        assert resolve_market(props, "Eth", "bTc").max_decimals == 6

    def test_pair_order_is_significant(self):
        """Test swapped symbols do not match."""
        assert resolve_market(_properties(), "USDT", "BTC") is None

    def test_unknown_pair(self):
        """Test unknown pair resolves to None."""
        assert resolve_market(_properties(), "DOGE", "USDT") is None

    def test_empty_properties(self):
        """Test empty snapshot never matches."""
        assert resolve_market(ExchangeProperties(), "BTC", "USDT") is None

    def test_require_market_raises(self):
        """Test require_market raises for a missing pair."""
        with pytest.raises(MarketNotFoundError) as exc_info:
            require_market(_properties(), "USDT", "BTC")

        assert "USDT/BTC" in str(exc_info.value)


# ============================================================
# TRUNCATION TESTS
# ============================================================

class TestTruncateDecimals:
    """Tests for truncate_decimals."""

    def test_discards_excess_digits(self):
        """Test digits are dropped, never rounded up."""
        assert truncate_decimals(100.456, 2) == 100.45
        assert truncate_decimals(0.999, 2) == 0.99
        assert truncate_decimals(1.23456789, 6) == 1.234567

    def test_negative_values_truncate_toward_zero(self):
        """Test negative numbers are truncated toward zero."""
        assert truncate_decimals(-1.239, 2) == -1.23

    def test_shorter_values_unchanged(self):
        """Test values with fewer digits are returned unchanged."""
        assert truncate_decimals(1.5, 4) == 1.5
        assert truncate_decimals(7, 2) == 7.0

    def test_zero_decimals(self):
        """Test truncating to an integer."""
        assert truncate_decimals(9.99, 0) == 9.0

    def test_idempotent(self):
        """Test truncating twice gives the same result."""
        for value in (100.456, 0.123456789, 42.0, 3.14159):
            once = truncate_decimals(value, 3)
            assert truncate_decimals(once, 3) == once

    def test_no_float_artifacts(self):
        """Test values exactly representable in decimal are kept intact."""
        # 0.29 is stored as 0.28999999999999998 in binary
        assert truncate_decimals(0.29, 2) == 0.29
        assert truncate_decimals(1.1, 1) == 1.1

    def test_decimal_in_decimal_out(self):
        """Test Decimal input keeps its type and exact digits."""
        result = truncate_decimals(Decimal("100.456"), 2)

        assert isinstance(result, Decimal)
        assert result == Decimal("100.45")
        assert str(result) == "100.45"

    def test_float_in_float_out(self):
        """Test float input yields a float."""
        assert isinstance(truncate_decimals(100.456, 2), float)

    def test_digit_count(self):
        """Test result has at most the requested fractional digits."""
        result = truncate_decimals(Decimal("0.123456789"), 4)

        assert result.as_tuple().exponent == -4

    def test_large_value_high_precision(self):
        """Test quantize does not overflow the decimal context."""
        value = Decimal("12345678901234567890123.123456789")

        assert truncate_decimals(value, 8) == Decimal("12345678901234567890123.12345678")

    def test_negative_decimals_rejected(self):
        """Test negative precision is rejected."""
        with pytest.raises(ValueError):
            truncate_decimals(1.5, -1)


# ============================================================
# PARSING TESTS
# ============================================================

class TestMarketParsing:
    """Tests for Market / ExchangeProperties construction."""

    def test_from_wire_keys(self):
        """Test parsing connector wire keys."""
        market = Market.from_dict({
            "pair": ["BTC", "USDT"],
            "minimalOrder": {"amount": 0.001},
            "maxDecimals": 2,
        })

        assert market.asset_a == "BTC"
        assert market.asset_b == "USDT"
        assert market.minimal_order.amount == 0.001
        assert market.max_decimals == 2

    def test_properties_from_dict(self):
        """Test parsing a full properties payload."""
        props = ExchangeProperties.from_dict({
            "markets": [
                {"pair": ["ETH", "BTC"], "minimal_order": {"amount": 0.01}, "max_decimals": 6},
            ],
        })

        assert len(props.markets) == 1
        assert str(props.markets[0]) == "ETH/BTC"

    def test_invalid_pair_rejected(self):
        """Test pairs must have exactly two symbols."""
        with pytest.raises(ValueError):
            Market(pair=("BTC",))

    def test_negative_precision_rejected(self):
        """Test max_decimals must not be negative."""
        with pytest.raises(ValueError):
            Market(pair=("BTC", "USDT"), max_decimals=-1)
