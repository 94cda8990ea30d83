"""
Exchange API - Market Resolution and Precision.

Finds the configuration record of the active pair inside an
exchange properties snapshot and truncates numbers to the
precision that market mandates.
"""

from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Optional

from .errors import MarketNotFoundError
from .types import ExchangeProperties, Market, Number


# ============================================================
# MARKET RESOLUTION
# ============================================================

def resolve_market(
    properties: ExchangeProperties,
    asset_a: str,
    asset_b: str,
) -> Optional[Market]:
    """
    Find the market trading asset_a against asset_b.

    Symbols are compared case-insensitively; pair order is significant,
    so (B, A) never matches a market configured as (A, B).

    Returns:
        The first matching Market, or None
    """
    for market in properties.markets:
        if market.matches(asset_a, asset_b):
            return market
    return None


def require_market(
    properties: ExchangeProperties,
    asset_a: str,
    asset_b: str,
) -> Market:
    """
    Like resolve_market, but a missing market is a configuration error.

    Raises:
        MarketNotFoundError: If no market matches
    """
    market = resolve_market(properties, asset_a, asset_b)
    if market is None:
        raise MarketNotFoundError(asset_a, asset_b)
    return market


# ============================================================
# DECIMAL TRUNCATION
# ============================================================

def truncate_decimals(value: Number, decimals: int) -> Number:
    """
    Truncate value to at most `decimals` fractional digits.

    Excess digits are discarded, never rounded. Works on the shortest
    decimal form of the value so binary float error is not carried into
    the result.

    Args:
        value: Number to truncate (float, int or Decimal)
        decimals: Fractional digits to keep

    Returns:
        Decimal for Decimal input, float otherwise
    """
    if decimals < 0:
        raise ValueError(f"decimals must be >= 0, got {decimals}")

    exact = value if isinstance(value, Decimal) else Decimal(str(value))
    quantum = Decimal(1).scaleb(-decimals)

    with localcontext() as ctx:
        # quantize fails when the result needs more digits than the context holds
        ctx.prec = max(ctx.prec, exact.adjusted() + decimals + 2)
        truncated = exact.quantize(quantum, rounding=ROUND_DOWN)

    if isinstance(value, Decimal):
        return truncated
    return float(truncated)
