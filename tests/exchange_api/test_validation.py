"""
Order Validation Tests.

============================================================
PURPOSE
============================================================
Tests for OrderValidator.

TEST CATEGORIES:
- Amount tests: Minimal order enforcement
- Capability tests: Optional connector predicates
- Precedence tests: First failure wins

============================================================
"""

from decimal import Decimal

from exchange_api import (
    Capability,
    Market,
    MinimalOrder,
    MockConfig,
    MockConnector,
    OrderValidator,
    validate_order,
)
from exchange_api.validation import AMOUNT_TOO_SMALL, LOT_TOO_SMALL, PRICE_NOT_VALID


MARKET = Market(pair=("BTC", "USDT"), minimal_order=MinimalOrder(amount=0.001), max_decimals=2)


def _connector(price_rule=None, lot_rule=None) -> MockConnector:
    capabilities = set()
    if price_rule is not None:
        capabilities.add(Capability.PRICE_VALIDATION)
    if lot_rule is not None:
        capabilities.add(Capability.LOT_VALIDATION)
    return MockConnector(MockConfig(
        capabilities=frozenset(capabilities),
        price_rule=price_rule,
        lot_rule=lot_rule,
    ))


# ============================================================
# AMOUNT TESTS
# ============================================================

class TestAmountValidation:
    """Tests for the minimal order rule."""

    def test_amount_below_minimum(self):
        """Test amounts under the market minimum are rejected."""
        result = OrderValidator().validate(amount=0.0005, price=100.45, market=MARKET)

        assert not result.valid
        assert result.reason == AMOUNT_TOO_SMALL

    def test_amount_at_minimum(self):
        """Test the minimum itself is admissible."""
        result = OrderValidator().validate(amount=0.001, price=100.45, market=MARKET)

        assert result.valid
        assert result.reason is None

    def test_decimal_amount(self):
        """Test Decimal amounts compare against float minimums."""
        result = validate_order(Decimal("0.002"), Decimal("100.45"), MARKET)

        assert result.valid


# ============================================================
# CAPABILITY TESTS
# ============================================================

class TestCapabilityValidation:
    """Tests for optional connector predicates."""

    def test_missing_capabilities_never_fail(self):
        """Test a connector without predicates accepts any price and lot."""
        connector = _connector()

        result = OrderValidator().validate(amount=1, price=-5, market=MARKET, connector=connector)

        assert result.valid

    def test_price_rejected(self):
        """Test price predicate failure."""
        connector = _connector(price_rule=lambda price: price > 1000)

        result = OrderValidator().validate(amount=1, price=100, market=MARKET, connector=connector)

        assert not result.valid
        assert result.reason == PRICE_NOT_VALID

    def test_lot_rejected(self):
        """Test lot predicate failure."""
        connector = _connector(lot_rule=lambda price, amount: price * amount >= 10)

        result = OrderValidator().validate(amount=0.01, price=100, market=MARKET, connector=connector)

        assert not result.valid
        assert result.reason == LOT_TOO_SMALL

    def test_all_predicates_pass(self):
        """Test valid order against both predicates."""
        connector = _connector(
            price_rule=lambda price: price > 0,
            lot_rule=lambda price, amount: price * amount >= 10,
        )

        result = OrderValidator().validate(amount=1, price=100, market=MARKET, connector=connector)

        assert result.valid

    def test_undeclared_predicate_not_called(self):
        """Test a rule is ignored when the capability is not declared."""
        connector = MockConnector(MockConfig(price_rule=lambda price: False))

        result = OrderValidator().validate(amount=1, price=100, market=MARKET, connector=connector)

        assert result.valid


# ============================================================
# PRECEDENCE TESTS
# ============================================================

class TestValidationPrecedence:
    """Tests for rule ordering."""

    def test_amount_checked_before_price(self):
        """Test amount failure wins over an invalid price."""
        connector = _connector(price_rule=lambda price: False)

        result = OrderValidator().validate(amount=0.0001, price=100, market=MARKET, connector=connector)

        assert result.reason == AMOUNT_TOO_SMALL

    def test_price_checked_before_lot(self):
        """Test price failure wins over a lot failure."""
        connector = _connector(
            price_rule=lambda price: False,
            lot_rule=lambda price, amount: False,
        )

        result = OrderValidator().validate(amount=1, price=100, market=MARKET, connector=connector)

        assert result.reason == PRICE_NOT_VALID
