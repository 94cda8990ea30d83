"""
Exchange API - Configuration.

============================================================
PURPOSE
============================================================
All configuration for the exchange API facade.

CRITICAL CONSTRAINTS:
- No blind retries
- No infinite loops
- No process-wide globals: market, credentials and retry
  policy are passed in explicitly

============================================================
"""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Optional

from dotenv import load_dotenv

from .types import MarketPair


logger = logging.getLogger(__name__)


DEFAULT_EXCHANGE_NAME = "mock"


# ============================================================
# RETRY POLICY
# ============================================================

@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded exponential backoff policy.

    SAFETY: Immutable once built, so an execution in progress
    always sees the policy it started with.
    """

    max_retries: int = 30
    """Retries after the first attempt (0 = single attempt)."""

    factor: float = 1.5
    """Exponential backoff multiplier. Values <= 1 give constant spacing."""

    min_delay_seconds: float = 1.0
    """Delay before the first retry."""

    max_delay_seconds: float = 8.0
    """Upper bound for any computed delay."""

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.min_delay_seconds < 0 or self.max_delay_seconds < 0:
            raise ValueError("Retry delays must not be negative")
        if self.min_delay_seconds > self.max_delay_seconds:
            raise ValueError(
                f"min_delay_seconds ({self.min_delay_seconds}) exceeds "
                f"max_delay_seconds ({self.max_delay_seconds})"
            )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def without_retries(self) -> "RetryPolicy":
        """Same policy collapsed to a single attempt."""
        return replace(self, max_retries=0)


# ============================================================
# KEY VAULT CONFIGURATION
# ============================================================

@dataclass
class KeyVaultConfig:
    """
    Remote signing service configuration.
    """

    endpoint: Optional[str] = None
    """GraphQL endpoint of the key vault."""

    access_token: Optional[str] = None
    """Token sent in the access_token header."""

    key_id: Optional[str] = None
    """Key used for signing."""

    clone_id: Optional[str] = None
    """Trading bot clone the key belongs to."""

    timeout_seconds: float = 30.0
    """Request timeout."""

    retry: RetryPolicy = field(
        default_factory=lambda: RetryPolicy(max_retries=3, min_delay_seconds=1.0, max_delay_seconds=8.0)
    )
    """Retry policy for signing requests."""

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint)


# ============================================================
# MASTER CONFIGURATION
# ============================================================

@dataclass
class ExchangeAPIConfig:
    """
    Master configuration for the exchange API facade.
    """

    exchange_name: str = DEFAULT_EXCHANGE_NAME
    """Connector to use (registered in ConnectorFactory)."""

    market: Optional[MarketPair] = None
    """Active market of the trading agent."""

    retry: RetryPolicy = field(default_factory=RetryPolicy)
    """Retry policy for connector calls."""

    retry_enabled: bool = True
    """Whether connector calls are retried at all."""

    key_vault: KeyVaultConfig = field(default_factory=KeyVaultConfig)
    """Signing service configuration."""

    log_level: str = "INFO"
    """Log level used by configure_logging."""

    @property
    def effective_retry(self) -> RetryPolicy:
        """Retry policy actually applied to connector calls."""
        if not self.retry_enabled:
            return self.retry.without_retries()
        return self.retry

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "ExchangeAPIConfig":
        """
        Build configuration from environment variables.

        A .env file is loaded first when present; variables already
        set in the environment win.
        """
        load_dotenv(env_file)

        market = None
        asset_a = os.environ.get("MARKET_ASSET_A")
        asset_b = os.environ.get("MARKET_ASSET_B")
        if asset_a and asset_b:
            market = MarketPair(asset_a=asset_a, asset_b=asset_b)

        retry = RetryPolicy()
        max_retries = os.environ.get("RETRY_MAX_RETRIES")
        if max_retries is not None:
            retry = replace(retry, max_retries=int(max_retries))

        key_vault = KeyVaultConfig(
            endpoint=os.environ.get("KEY_VAULT_ENDPOINT") or os.environ.get("GATEWAY_ENDPOINT"),
            access_token=os.environ.get("ACCESS_TOKEN"),
            key_id=os.environ.get("KEY_ID"),
            clone_id=os.environ.get("CLONE_ID"),
        )

        config = cls(
            exchange_name=os.environ.get("EXCHANGE_NAME", DEFAULT_EXCHANGE_NAME),
            market=market,
            retry=retry,
            key_vault=key_vault,
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
        )
        logger.debug(
            f"Loaded configuration: exchange={config.exchange_name}, "
            f"market={config.market}, key_vault={'yes' if key_vault.is_configured else 'no'}"
        )
        return config

    @classmethod
    def for_testing(cls, market: Optional[MarketPair] = None) -> "ExchangeAPIConfig":
        """Get configuration for testing."""
        return cls(
            exchange_name="mock",
            market=market or MarketPair("BTC", "USDT"),
            retry=RetryPolicy(max_retries=2, min_delay_seconds=0.0, max_delay_seconds=0.0),
            key_vault=KeyVaultConfig(
                retry=RetryPolicy(max_retries=1, min_delay_seconds=0.0, max_delay_seconds=0.0),
            ),
            log_level="DEBUG",
        )
