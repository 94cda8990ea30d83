"""
Exchange API - Connector Base.

============================================================
PURPOSE
============================================================
Abstract interface for exchange connectors.

DESIGN PRINCIPLES:
- Exchange-agnostic interface
- Optional predicates declared up front as capabilities
- Failures raised as ExchangeOperationError, flagged
  retryable or not by the connector itself
- Fully testable with the mock connector

============================================================
"""

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, FrozenSet, List, Optional

from ..types import (
    ExchangeProperties,
    MarketPair,
    Number,
    Position,
    Ticker,
    Trade,
)


# ============================================================
# CAPABILITIES
# ============================================================

class Capability(Enum):
    """Optional connector features."""

    PRICE_VALIDATION = "price_validation"
    """Connector implements is_valid_price(price)."""

    LOT_VALIDATION = "lot_validation"
    """Connector implements is_valid_lot(price, amount)."""


# ============================================================
# ABSTRACT EXCHANGE CONNECTOR
# ============================================================

class ExchangeConnector(ABC):
    """
    Abstract interface for exchange connectors.

    Implementations:
    - MockConnector: For testing and dry runs
    """

    capabilities: FrozenSet[Capability] = frozenset()
    """Optional features this connector implements."""

    def __init__(self, signer: Optional[Any] = None):
        """
        Initialize connector.

        Args:
            signer: Signing service used for authenticated calls
        """
        self._signer = signer

    @property
    @abstractmethod
    def exchange_id(self) -> str:
        """Get exchange identifier."""
        pass

    def supports(self, capability: Capability) -> bool:
        """Check whether an optional capability is present."""
        return capability in self.capabilities

    # --------------------------------------------------------
    # CONNECTION
    # --------------------------------------------------------

    async def connect(self) -> None:
        """Open network resources. No-op by default."""

    async def disconnect(self) -> None:
        """Release network resources. No-op by default."""

    # --------------------------------------------------------
    # MARKET DATA
    # --------------------------------------------------------

    @abstractmethod
    async def get_exchange_properties(self) -> ExchangeProperties:
        """
        Get the markets the exchange exposes.

        Raises:
            ExchangeOperationError: If the properties cannot be loaded
        """
        pass

    @abstractmethod
    async def get_ticker(self, market: MarketPair) -> Ticker:
        """Get bid, ask and last price for a market."""
        pass

    @abstractmethod
    async def get_public_trade_history(
        self,
        asset_a: str,
        asset_b: str,
        start_time: datetime,
        end_time: datetime,
    ) -> List[Trade]:
        """
        Get public trades between start_time and end_time ordered by trade id.

        Connectors for exchanges without this endpoint raise a
        non-retryable ExchangeOperationError.
        """
        pass

    # --------------------------------------------------------
    # ACCOUNT OPERATIONS
    # --------------------------------------------------------

    @abstractmethod
    async def get_open_positions(self, market: MarketPair) -> List[Position]:
        """Get open orders of the account for a market."""
        pass

    @abstractmethod
    async def get_executed_trades(self, position_id: str) -> List[Trade]:
        """Get the trades that filled an order."""
        pass

    # --------------------------------------------------------
    # ORDER OPERATIONS
    # --------------------------------------------------------

    @abstractmethod
    async def buy(self, asset_a: str, asset_b: str, rate: Number, amount: Number) -> str:
        """
        Place a buy order.

        Returns:
            Exchange order id
        """
        pass

    @abstractmethod
    async def sell(self, asset_a: str, asset_b: str, rate: Number, amount: Number) -> str:
        """
        Place a sell order.

        Returns:
            Exchange order id
        """
        pass

    @abstractmethod
    async def move_position(
        self,
        position: Position,
        new_rate: Number,
        new_amount: Number,
    ) -> str:
        """
        Move an open order to a new rate and amount.

        Returns:
            New exchange order id
        """
        pass

    # --------------------------------------------------------
    # OPTIONAL PREDICATES
    # --------------------------------------------------------

    def is_valid_price(self, price: Number) -> bool:
        """Exchange-specific price rule. Requires Capability.PRICE_VALIDATION."""
        raise NotImplementedError(f"{self.exchange_id} does not validate prices")

    def is_valid_lot(self, price: Number, amount: Number) -> bool:
        """Exchange-specific lot rule. Requires Capability.LOT_VALIDATION."""
        raise NotImplementedError(f"{self.exchange_id} does not validate lots")
