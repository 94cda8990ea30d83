"""
Exchange API - Types.

============================================================
PURPOSE
============================================================
Value types shared by the facade, the validator, the retry
executor and the connectors.

- Market snapshots (read-only, produced by connectors)
- Order candidates
- Operation outcomes (Ok / Fail / Retryable / Acknowledged)
- Market data payloads

============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


Number = Union[int, float, Decimal]


# ============================================================
# ENUMS
# ============================================================

class OrderSide(Enum):
    """Order side."""

    BUY = "buy"
    SELL = "sell"


# ============================================================
# MARKETS
# ============================================================

@dataclass(frozen=True)
class MarketPair:
    """The pair a trading agent operates on."""

    asset_a: str
    """Base asset (e.g., BTC)."""

    asset_b: str
    """Quote asset (e.g., USDT)."""

    def __str__(self) -> str:
        return f"{self.asset_a}/{self.asset_b}"


@dataclass(frozen=True)
class MinimalOrder:
    """Minimum order constraints of a market."""

    amount: Number = 0
    """Smallest admissible order amount."""


@dataclass(frozen=True)
class Market:
    """
    Exchange configuration record for one trading pair.

    Pair order matters for display; matching is case-insensitive
    on both symbols.
    """

    pair: Tuple[str, str]
    """(asset_a, asset_b)."""

    minimal_order: MinimalOrder = field(default_factory=MinimalOrder)
    """Minimum order constraints."""

    max_decimals: int = 8
    """Decimal precision mandated for prices and amounts."""

    def __post_init__(self):
        if len(self.pair) != 2:
            raise ValueError(f"Market pair must have two symbols, got {self.pair!r}")
        if self.max_decimals < 0:
            raise ValueError(f"max_decimals must be >= 0, got {self.max_decimals}")

    @property
    def asset_a(self) -> str:
        return self.pair[0]

    @property
    def asset_b(self) -> str:
        return self.pair[1]

    def matches(self, asset_a: str, asset_b: str) -> bool:
        """Check whether this market trades asset_a against asset_b."""
        return (
            self.asset_a.upper() == asset_a.upper()
            and self.asset_b.upper() == asset_b.upper()
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Market":
        """
        Build a market from a connector payload.

        Accepts both the connector wire keys (``minimalOrder``,
        ``maxDecimals``) and the Python attribute names.
        """
        minimal = data.get("minimalOrder", data.get("minimal_order")) or {}
        if isinstance(minimal, MinimalOrder):
            minimal_order = minimal
        else:
            minimal_order = MinimalOrder(amount=minimal.get("amount", 0))

        return cls(
            pair=tuple(data["pair"]),
            minimal_order=minimal_order,
            max_decimals=int(data.get("maxDecimals", data.get("max_decimals", 8))),
        )

    def __str__(self) -> str:
        return f"{self.asset_a}/{self.asset_b}"


@dataclass(frozen=True)
class ExchangeProperties:
    """Snapshot of the markets an exchange exposes."""

    markets: Tuple[Market, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExchangeProperties":
        markets = []
        for item in data.get("markets", []):
            markets.append(item if isinstance(item, Market) else Market.from_dict(item))
        return cls(markets=tuple(markets))


# ============================================================
# ORDERS
# ============================================================

@dataclass(frozen=True)
class OrderCandidate:
    """An order as proposed by a trading agent, before truncation."""

    side: OrderSide
    rate: Number
    amount_a: Number
    amount_b: Number


@dataclass(frozen=True)
class ValidationResult:
    """Result of an order admissibility check."""

    valid: bool
    """Whether the order may be submitted."""

    reason: Optional[str] = None
    """First violated rule, empty when valid."""

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def invalid(cls, reason: str) -> "ValidationResult":
        return cls(valid=False, reason=reason)


# ============================================================
# OPERATION OUTCOMES
# ============================================================

@dataclass(frozen=True)
class Ok:
    """Operation succeeded."""

    payload: Any = None

    @property
    def is_success(self) -> bool:
        return True


@dataclass(frozen=True)
class Fail:
    """
    Operation failed and must not be retried.

    ``cause`` keeps the last outcome seen when the failure was
    produced by retry exhaustion.
    """

    reason: str = "Operation failed"
    cause: Optional[Any] = None

    @property
    def is_success(self) -> bool:
        return False


@dataclass(frozen=True)
class Retryable:
    """Operation hit a transient condition and may be attempted again."""

    reason: str = "Transient failure"
    retry_after_seconds: Optional[float] = None
    """Explicit wait before the next attempt; overrides the computed backoff."""

    @property
    def is_success(self) -> bool:
        return False


@dataclass(frozen=True)
class Acknowledged:
    """
    Failure-shaped answer the operation flags as a domain success.

    Returned to the caller as-is, never retried.
    """

    reason: str = ""
    payload: Any = None

    @property
    def is_success(self) -> bool:
        return True


OperationOutcome = Union[Ok, Fail, Retryable, Acknowledged]


# ============================================================
# MARKET DATA PAYLOADS
# ============================================================

@dataclass
class Ticker:
    """Best prices for a market."""

    bid: Number
    ask: Number
    last: Number


@dataclass
class Position:
    """An open order at the exchange."""

    id: str
    type: str
    rate: Number
    amount_a: Number
    amount_b: Number
    fee: Number = 0
    timestamp: Optional[datetime] = None


@dataclass
class Trade:
    """A public or executed trade."""

    trade_id: str
    type: str
    rate: Number
    amount_a: Number
    amount_b: Number
    global_trade_id: Optional[str] = None
    date: Optional[datetime] = None


@dataclass(frozen=True)
class Signature:
    """Signature returned by the key vault."""

    key: str
    signature: str
    date: Optional[str] = None

    def to_headers(self) -> Dict[str, str]:
        """Header form expected by exchange clients."""
        return {"Key": self.key, "Sign": self.signature}


