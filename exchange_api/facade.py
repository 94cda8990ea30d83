"""
Exchange API - Facade.

============================================================
PURPOSE
============================================================
Lets trading bots connect to an exchange and trade on it.

FLOW (orders):
    resolve market -> truncate rate/amounts -> validate
        -> connector.buy / connector.sell (with retries)

RESPONSIBILITIES:
- Connector selection and lifecycle
- Market precision and minimum-size enforcement
- Retrying transient connector failures
- Turning every failure into an outcome value, logged once

============================================================
"""

import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

from .adapters.base import ExchangeConnector
from .adapters.factory import ConnectorFactory
from .config import ExchangeAPIConfig
from .errors import (
    ConfigurationError,
    ExchangeAPIError,
    ExchangeOperationError,
    outcome_from_exception,
)
from .logging_utils import configure_logging
from .markets import require_market, truncate_decimals
from .retry import RetryExecutor
from .signing import KeyVaultSigner, Signer
from .types import (
    ExchangeProperties,
    Fail,
    Market,
    MarketPair,
    Number,
    Ok,
    OperationOutcome,
    OrderCandidate,
    OrderSide,
    Position,
)
from .validation import OrderValidator


logger = logging.getLogger(__name__)


# ============================================================
# EXCHANGE API
# ============================================================

class ExchangeAPI:
    """
    Facade over an exchange connector.

    Public operations return OperationOutcome values; nothing
    raised by a connector escapes this class.
    """

    def __init__(
        self,
        config: Optional[ExchangeAPIConfig] = None,
        connector: Optional[ExchangeConnector] = None,
        signer: Optional[Signer] = None,
        executor: Optional[RetryExecutor] = None,
        validator: Optional[OrderValidator] = None,
    ):
        """
        Initialize facade.

        Args:
            config: Facade configuration (from_env() if omitted)
            connector: Pre-built connector; created by initialize() if omitted
            signer: Pre-built signer; built from config.key_vault if omitted
            executor: Retry executor for connector calls
            validator: Order validator
        """
        self._config = config or ExchangeAPIConfig.from_env()
        self._connector = connector
        self._signer = signer
        self._executor = executor or RetryExecutor(self._config.effective_retry)
        self._validator = validator or OrderValidator()

    @property
    def config(self) -> ExchangeAPIConfig:
        return self._config

    @property
    def connector(self) -> ExchangeConnector:
        if self._connector is None:
            raise ConfigurationError("Exchange API is not initialized")
        return self._connector

    # --------------------------------------------------------
    # LIFECYCLE
    # --------------------------------------------------------

    async def initialize(self) -> OperationOutcome:
        """Create the signer and connector, then connect."""
        configure_logging(self._config.log_level)
        logger.info(f"Initializing exchange API for {self._config.exchange_name}")
        try:
            if self._signer is None and self._config.key_vault.is_configured:
                self._signer = KeyVaultSigner(self._config.key_vault)

            if self._connector is None:
                self._connector = ConnectorFactory.create(
                    self._config.exchange_name,
                    signer=self._signer,
                )

            await self._connector.connect()
        except Exception as e:
            return self._fail("initialize", e)

        return Ok()

    async def close(self) -> None:
        """Disconnect connector and release the signer."""
        if self._connector is not None:
            await self._connector.disconnect()
        if self._signer is not None:
            await self._signer.close()

    async def __aenter__(self) -> "ExchangeAPI":
        outcome = await self.initialize()
        if not outcome.is_success:
            raise ConfigurationError(outcome.reason)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # --------------------------------------------------------
    # EXCHANGE PROPERTIES & PRECISION
    # --------------------------------------------------------

    async def get_exchange_properties(self) -> OperationOutcome:
        """Markets of the exchange. Fails fast, never returns an empty value."""
        logger.debug("get_exchange_properties -> Entering function.")
        try:
            return Ok(await self._load_properties())
        except Exception as e:
            return self._fail("get_exchange_properties", e)

    async def get_market_config(self, market: Optional[MarketPair] = None) -> OperationOutcome:
        """Configuration record of a market (default: the active market)."""
        try:
            return Ok(await self._load_market(market))
        except Exception as e:
            return self._fail("get_market_config", e)

    async def get_max_decimal_positions(self, market: Optional[MarketPair] = None) -> OperationOutcome:
        """Number of decimals for a market (default: the active market)."""
        try:
            resolved = await self._load_market(market)
        except Exception as e:
            return self._fail("get_max_decimal_positions", e)
        return Ok(resolved.max_decimals)

    async def truncate(self, value: Number, market: Optional[MarketPair] = None) -> OperationOutcome:
        """Truncate value to the precision of a market."""
        try:
            resolved = await self._load_market(market)
        except Exception as e:
            return self._fail("truncate", e)
        return Ok(truncate_decimals(value, resolved.max_decimals))

    # --------------------------------------------------------
    # MARKET DATA
    # --------------------------------------------------------

    async def get_ticker(self, market: MarketPair) -> OperationOutcome:
        """
        Price for a pair of assets.

        Ok payload: Ticker(bid, ask, last)
        """
        logger.debug("get_ticker -> Entering function.")
        return await self._call("get_ticker", lambda: self.connector.get_ticker(market))

    async def get_public_trade_history(
        self,
        asset_a: str,
        asset_b: str,
        start_time: datetime,
        end_time: datetime,
    ) -> OperationOutcome:
        """
        All public trades from start_time to end_time ordered by trade id.

        Some exchanges do not support this operation.
        """
        logger.debug("get_public_trade_history -> Entering function.")
        return await self._call(
            "get_public_trade_history",
            lambda: self.connector.get_public_trade_history(asset_a, asset_b, start_time, end_time),
        )

    # --------------------------------------------------------
    # ACCOUNT
    # --------------------------------------------------------

    async def get_open_positions(self, market: MarketPair) -> OperationOutcome:
        """Open positions at the exchange for a market."""
        logger.debug(f"get_open_positions -> market = {market}")
        return await self._call(
            "get_open_positions",
            lambda: self.connector.get_open_positions(market),
        )

    async def get_executed_trades(self, position_id: str) -> OperationOutcome:
        """Trades for a given order id."""
        logger.debug(f"get_executed_trades -> position_id = {position_id}")
        return await self._call(
            "get_executed_trades",
            lambda: self.connector.get_executed_trades(position_id),
        )

    # --------------------------------------------------------
    # ORDERS
    # --------------------------------------------------------

    async def put_position(
        self,
        market: MarketPair,
        side,
        rate: Number,
        amount_a: Number,
        amount_b: Number,
    ) -> OperationOutcome:
        """
        Create a new buy or sell order.

        Rate and amounts are truncated to the market precision and the
        order is validated before anything is sent to the exchange.

        Args:
            market: Pair to trade
            side: OrderSide or "buy" / "sell"
            rate: Limit price
            amount_a: Amount in asset A
            amount_b: Order amount sent to the exchange

        Returns:
            Ok(order_id), or Fail with the reason
        """
        try:
            resolved = await self._load_market(market)
        except Exception as e:
            return self._fail("put_position", e)

        decimals = resolved.max_decimals
        rate = truncate_decimals(rate, decimals)
        amount_a = truncate_decimals(amount_a, decimals)
        amount_b = truncate_decimals(amount_b, decimals)

        logger.info(
            f"put_position -> market = {market}, side = {side}, "
            f"rate = {rate}, amount_a = {amount_a}, amount_b = {amount_b}"
        )

        try:
            check = self._validator.validate(
                amount=amount_b,
                price=rate,
                market=resolved,
                connector=self.connector,
            )
        except Exception as e:
            return self._fail("put_position", e)
        if not check.valid:
            logger.error(f"put_position -> The order is invalid: {check.reason}")
            return Fail(reason=check.reason)

        try:
            order_side = side if isinstance(side, OrderSide) else OrderSide(str(side).lower())
        except ValueError:
            logger.error(f"put_position -> side must be either 'buy' or 'sell', got {side!r}")
            return Fail(reason="Order side must be either 'buy' or 'sell'")

        order = OrderCandidate(side=order_side, rate=rate, amount_a=amount_a, amount_b=amount_b)
        if order.side == OrderSide.BUY:
            place = self.connector.buy
        else:
            place = self.connector.sell

        return await self._submit(
            f"put_position[{order.side.value}]",
            lambda: place(market.asset_a, market.asset_b, order.rate, order.amount_b),
        )

    async def move_position(
        self,
        position: Position,
        new_rate: Number,
        new_amount_b: Number,
        market: Optional[MarketPair] = None,
    ) -> OperationOutcome:
        """
        Move an existing position to a new rate.

        Returns:
            Ok(new_order_id)
        """
        try:
            resolved = await self._load_market(market)
        except Exception as e:
            return self._fail("move_position", e)

        new_rate = truncate_decimals(new_rate, resolved.max_decimals)
        new_amount_b = truncate_decimals(new_amount_b, resolved.max_decimals)
        logger.info(f"move_position -> position = {position.id}, new_rate = {new_rate}")

        return await self._submit(
            "move_position",
            lambda: self.connector.move_position(position, new_rate, new_amount_b),
        )

    # --------------------------------------------------------
    # INTERNALS
    # --------------------------------------------------------

    async def _load_properties(self) -> ExchangeProperties:
        outcome = await self._executor.execute(
            self.connector.get_exchange_properties,
            name="get_exchange_properties",
        )
        if not isinstance(outcome, Ok):
            raise ExchangeAPIError(f"Cannot load exchange properties: {outcome.reason}")

        properties = outcome.payload
        if properties is None:
            raise ConfigurationError(
                f"{self.connector.exchange_id} returned no exchange properties"
            )
        return properties

    async def _load_market(self, market: Optional[MarketPair]) -> Market:
        market = market or self._config.market
        if market is None:
            raise ConfigurationError("No active market configured")
        properties = await self._load_properties()
        return require_market(properties, market.asset_a, market.asset_b)

    async def _call(
        self,
        name: str,
        operation: Callable[[], Awaitable[Any]],
    ) -> OperationOutcome:
        """Run a connector call under the retry executor."""
        if self._connector is None:
            return self._fail(name, ConfigurationError("Exchange API is not initialized"))

        outcome = await self._executor.execute(operation, name=name)
        if not outcome.is_success:
            logger.error(f"{name} -> {outcome.reason}")
        return outcome

    async def _submit(
        self,
        name: str,
        operation: Callable[[], Awaitable[Any]],
    ) -> OperationOutcome:
        """
        Run an order call under the retry executor.

        Only ExchangeOperationError(retryable=True) is retried: the
        connector raises it for requests the exchange refused before
        accepting them. Any other error leaves the order state unknown
        (it may already be on the book), so it fails without a resend.
        """
        async def attempt():
            try:
                return await operation()
            except ExchangeOperationError:
                raise
            except Exception as e:
                outcome = outcome_from_exception(e)
                logger.error(f"{name} -> order state unknown, not resubmitting: {outcome.reason}")
                return Fail(reason=outcome.reason, cause=outcome)

        return await self._call(name, attempt)

    def _fail(self, name: str, error: Exception) -> Fail:
        """Single normalization point for errors raised inside the facade."""
        if isinstance(error, ExchangeAPIError):
            logger.error(f"{name} -> {error}")
        else:
            logger.exception(f"{name} -> unexpected error: {error}")

        outcome = outcome_from_exception(error)
        if isinstance(outcome, Fail):
            return outcome
        return Fail(reason=getattr(outcome, "reason", str(error)), cause=outcome)
