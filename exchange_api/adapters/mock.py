"""
Exchange API - Mock Connector.

============================================================
PURPOSE
============================================================
In-memory connector for tests and dry runs.

FEATURES:
- Configurable markets and prices
- Configurable capabilities
- Scripted error injection per operation
- Full order tracking

============================================================
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from ..errors import ExchangeOperationError
from ..types import (
    ExchangeProperties,
    Market,
    MarketPair,
    MinimalOrder,
    Number,
    Position,
    Ticker,
    Trade,
)
from .base import Capability, ExchangeConnector


logger = logging.getLogger(__name__)


def _default_markets() -> List[Market]:
    return [
        Market(pair=("BTC", "USDT"), minimal_order=MinimalOrder(amount=0.001), max_decimals=2),
        Market(pair=("ETH", "USDT"), minimal_order=MinimalOrder(amount=0.01), max_decimals=2),
        Market(pair=("ETH", "BTC"), minimal_order=MinimalOrder(amount=0.01), max_decimals=6),
    ]


# ============================================================
# MOCK CONFIGURATION
# ============================================================

@dataclass
class MockConfig:
    """Configuration for the mock connector."""

    markets: List[Market] = field(default_factory=_default_markets)
    """Markets returned by get_exchange_properties."""

    prices: Dict[str, Decimal] = field(default_factory=dict)
    """Last price by market key ("BTC/USDT")."""

    default_price: Decimal = Decimal("50000.0")
    """Price for markets without an explicit entry."""

    spread_bps: int = 10
    """Bid/ask spread in basis points."""

    latency_ms: float = 0.0
    """Simulated latency per call."""

    capabilities: FrozenSet[Capability] = frozenset()
    """Optional predicates the mock should expose."""

    price_rule: Optional[Callable[[Number], bool]] = None
    """Predicate behind is_valid_price."""

    lot_rule: Optional[Callable[[Number, Number], bool]] = None
    """Predicate behind is_valid_lot."""


# ============================================================
# MOCK CONNECTOR
# ============================================================

class MockConnector(ExchangeConnector):
    """
    Mock exchange connector for testing.

    Simulates exchange behavior including:
    - Order placement and moves
    - Open position tracking
    - Error injection
    """

    def __init__(
        self,
        config: Optional[MockConfig] = None,
        signer: Optional[Any] = None,
    ):
        """
        Initialize mock connector.

        Args:
            config: Mock configuration
            signer: Signing service (unused, accepted for parity)
        """
        super().__init__(signer=signer)
        self._config = config or MockConfig()
        self._connected = False

        # Instance-level capabilities, driven by config
        self.capabilities = frozenset(self._config.capabilities)

        # State
        self._positions: Dict[str, Position] = {}
        self._trades: Dict[str, List[Trade]] = {}
        self._public_trades: List[Trade] = []

        # Error injection: operation name -> queued errors
        self._injected: Dict[str, List[BaseException]] = {}

        # Call log: (operation, args)
        self.calls: List[tuple] = []

    @property
    def exchange_id(self) -> str:
        return "mock"

    @property
    def is_connected(self) -> bool:
        return self._connected

    # --------------------------------------------------------
    # ERROR INJECTION
    # --------------------------------------------------------

    def inject_error(self, operation: str, error: BaseException, times: int = 1) -> None:
        """
        Make the next `times` calls of operation raise error.

        Args:
            operation: Connector method name (e.g., "buy")
            error: Exception to raise
            times: Number of calls affected
        """
        self._injected.setdefault(operation, []).extend([error] * times)

    def call_count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)

    async def _enter(self, operation: str, *args) -> None:
        self.calls.append((operation, args))

        if self._config.latency_ms > 0:
            await asyncio.sleep(self._config.latency_ms / 1000.0)

        queued = self._injected.get(operation)
        if queued:
            raise queued.pop(0)

    # --------------------------------------------------------
    # CONNECTION
    # --------------------------------------------------------

    async def connect(self) -> None:
        """Connect to mock exchange."""
        self._connected = True
        logger.info("MockConnector connected")

    async def disconnect(self) -> None:
        """Disconnect from mock exchange."""
        self._connected = False
        logger.info("MockConnector disconnected")

    # --------------------------------------------------------
    # MARKET DATA
    # --------------------------------------------------------

    async def get_exchange_properties(self) -> ExchangeProperties:
        await self._enter("get_exchange_properties")
        return ExchangeProperties(markets=tuple(self._config.markets))

    async def get_ticker(self, market: MarketPair) -> Ticker:
        await self._enter("get_ticker", market)
        last = self._get_price(market.asset_a, market.asset_b)
        half_spread = last * Decimal(self._config.spread_bps) / Decimal("20000")
        return Ticker(bid=last - half_spread, ask=last + half_spread, last=last)

    async def get_public_trade_history(
        self,
        asset_a: str,
        asset_b: str,
        start_time: datetime,
        end_time: datetime,
    ) -> List[Trade]:
        await self._enter("get_public_trade_history", asset_a, asset_b, start_time, end_time)
        trades = [
            t for t in self._public_trades
            if t.date is not None and start_time <= t.date <= end_time
        ]
        return sorted(trades, key=lambda t: t.trade_id)

    def add_public_trade(self, trade: Trade) -> None:
        """Seed the public trade history."""
        self._public_trades.append(trade)

    def add_executed_trade(self, position_id: str, trade: Trade) -> None:
        """Seed the fills of an order."""
        self._trades.setdefault(position_id, []).append(trade)

    def set_price(self, asset_a: str, asset_b: str, price: Decimal) -> None:
        self._config.prices[self._key(asset_a, asset_b)] = Decimal(str(price))

    # --------------------------------------------------------
    # ACCOUNT OPERATIONS
    # --------------------------------------------------------

    async def get_open_positions(self, market: MarketPair) -> List[Position]:
        await self._enter("get_open_positions", market)
        prefix = self._key(market.asset_a, market.asset_b)
        return [p for key, p in self._positions.items() if key.startswith(prefix + ":")]

    async def get_executed_trades(self, position_id: str) -> List[Trade]:
        await self._enter("get_executed_trades", position_id)
        return list(self._trades.get(position_id, []))

    # --------------------------------------------------------
    # ORDER OPERATIONS
    # --------------------------------------------------------

    async def buy(self, asset_a: str, asset_b: str, rate: Number, amount: Number) -> str:
        await self._enter("buy", asset_a, asset_b, rate, amount)
        return self._open_position(asset_a, asset_b, "buy", rate, amount)

    async def sell(self, asset_a: str, asset_b: str, rate: Number, amount: Number) -> str:
        await self._enter("sell", asset_a, asset_b, rate, amount)
        return self._open_position(asset_a, asset_b, "sell", rate, amount)

    async def move_position(
        self,
        position: Position,
        new_rate: Number,
        new_amount: Number,
    ) -> str:
        await self._enter("move_position", position, new_rate, new_amount)

        old_key = next(
            (key for key, p in self._positions.items() if p.id == position.id),
            None,
        )
        if old_key is None:
            raise ExchangeOperationError(f"Order {position.id} not found", retryable=False)

        old = self._positions.pop(old_key)
        new_id = str(uuid.uuid4())
        moved = replace(
            old,
            id=new_id,
            rate=new_rate,
            amount_b=new_amount,
            timestamp=datetime.now(timezone.utc),
        )
        self._positions[old_key.split(":")[0] + ":" + new_id] = moved
        logger.debug(f"Mock moved order {position.id} -> {new_id} @ {new_rate}")
        return new_id

    # --------------------------------------------------------
    # OPTIONAL PREDICATES
    # --------------------------------------------------------

    def is_valid_price(self, price: Number) -> bool:
        if self._config.price_rule is None:
            return super().is_valid_price(price)
        return self._config.price_rule(price)

    def is_valid_lot(self, price: Number, amount: Number) -> bool:
        if self._config.lot_rule is None:
            return super().is_valid_lot(price, amount)
        return self._config.lot_rule(price, amount)

    # --------------------------------------------------------
    # HELPERS
    # --------------------------------------------------------

    @staticmethod
    def _key(asset_a: str, asset_b: str) -> str:
        return f"{asset_a.upper()}/{asset_b.upper()}"

    def _get_price(self, asset_a: str, asset_b: str) -> Decimal:
        return self._config.prices.get(self._key(asset_a, asset_b), self._config.default_price)

    def _open_position(
        self,
        asset_a: str,
        asset_b: str,
        side: str,
        rate: Number,
        amount: Number,
    ) -> str:
        order_id = str(uuid.uuid4())
        self._positions[f"{self._key(asset_a, asset_b)}:{order_id}"] = Position(
            id=order_id,
            type=side,
            rate=rate,
            amount_a=Decimal(str(rate)) * Decimal(str(amount)),
            amount_b=amount,
            timestamp=datetime.now(timezone.utc),
        )
        logger.debug(f"Mock {side} {amount} {asset_a}/{asset_b} @ {rate} -> {order_id}")
        return order_id
