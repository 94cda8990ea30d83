"""
Exchange API - Order Validation.

============================================================
PURPOSE
============================================================
Decides whether an order may be submitted to the exchange.

VALIDATION STEPS (first failure wins):
1. Amount against the market minimal order
2. Connector price rule (only if the connector has it)
3. Connector lot rule (only if the connector has it)

CRITICAL PRINCIPLE:
    "A missing connector capability is skipped, never a failure."

============================================================
"""

import logging
from typing import Optional

from .adapters.base import Capability, ExchangeConnector
from .types import Market, Number, ValidationResult


logger = logging.getLogger(__name__)


AMOUNT_TOO_SMALL = "Amount is too small"
PRICE_NOT_VALID = "Price is not valid"
LOT_TOO_SMALL = "Lot size is too small"


# ============================================================
# VALIDATOR
# ============================================================

class OrderValidator:
    """
    Validates orders against market constraints.

    Stateless; one instance can serve concurrent callers.
    """

    def validate(
        self,
        amount: Number,
        price: Number,
        market: Market,
        connector: Optional[ExchangeConnector] = None,
    ) -> ValidationResult:
        """
        Validate an order.

        Args:
            amount: Truncated order amount
            price: Truncated order price
            market: Resolved market configuration
            connector: Connector whose optional predicates apply

        Returns:
            ValidationResult
        """
        # 1. Minimal order amount
        result = self._validate_amount(amount, market)
        if not result.valid:
            return result

        if connector is None:
            return ValidationResult.ok()

        # 2. Some exchanges have restrictions on prices
        if connector.supports(Capability.PRICE_VALIDATION):
            if not connector.is_valid_price(price):
                logger.warning(
                    f"Validation failed: price {price} rejected by {connector.exchange_id}"
                )
                return ValidationResult.invalid(PRICE_NOT_VALID)

        # 3. ...and on lot sizes
        if connector.supports(Capability.LOT_VALIDATION):
            if not connector.is_valid_lot(price, amount):
                logger.warning(
                    f"Validation failed: lot {amount} @ {price} rejected by {connector.exchange_id}"
                )
                return ValidationResult.invalid(LOT_TOO_SMALL)

        return ValidationResult.ok()

    def _validate_amount(self, amount: Number, market: Market) -> ValidationResult:
        minimum = market.minimal_order.amount
        if amount < minimum:
            logger.warning(
                f"Validation failed: amount {amount} < min {minimum} for {market}"
            )
            return ValidationResult.invalid(AMOUNT_TOO_SMALL)
        return ValidationResult.ok()


# ============================================================
# VALIDATION HELPERS
# ============================================================

def validate_order(
    amount: Number,
    price: Number,
    market: Market,
    connector: Optional[ExchangeConnector] = None,
) -> ValidationResult:
    """Convenience function for validating an order."""
    return OrderValidator().validate(amount, price, market, connector)
