"""
Exchange API Package.

============================================================
PURPOSE
============================================================
Lets trading bots issue market-data and order operations
against a pluggable exchange connector.

CRITICAL PRINCIPLE:
    "Transient failures are retried within a bound.
     Inadmissible orders never reach the exchange."

============================================================
MODULES
============================================================
- types: Markets, orders, outcomes, payloads
- config: Retry policy, key vault and facade configuration
- errors: Error taxonomy and exception classification
- markets: Market resolution and decimal truncation
- validation: Order admissibility checks
- retry: Bounded exponential backoff executor
- adapters: Connector interface, factory and mock connector
- signing: Key vault transaction signing
- logging_utils: Logging setup and credential masking
- facade: ExchangeAPI

============================================================
"""

# ============================================================
# TYPES
# ============================================================
from .types import (
    OrderSide,
    MarketPair,
    MinimalOrder,
    Market,
    ExchangeProperties,
    OrderCandidate,
    ValidationResult,
    Ok,
    Fail,
    Retryable,
    Acknowledged,
    OperationOutcome,
    Ticker,
    Position,
    Trade,
    Signature,
)

# ============================================================
# CONFIGURATION
# ============================================================
from .config import (
    RetryPolicy,
    KeyVaultConfig,
    ExchangeAPIConfig,
)

# ============================================================
# ERRORS
# ============================================================
from .errors import (
    ErrorCategory,
    ExchangeAPIError,
    ConfigurationError,
    MarketNotFoundError,
    ExchangeOperationError,
    contains_any,
    outcome_from_exception,
)

# ============================================================
# CORE COMPONENTS
# ============================================================
from .markets import resolve_market, require_market, truncate_decimals
from .validation import OrderValidator, validate_order
from .retry import RetryExecutor, compute_backoff_delay, execute_with_retry

# ============================================================
# CONNECTORS & SIGNING
# ============================================================
from .adapters import (
    Capability,
    ExchangeConnector,
    ConnectorFactory,
    MockConfig,
    MockConnector,
)
from .signing import Signer, KeyVaultSigner

# ============================================================
# FACADE
# ============================================================
from .facade import ExchangeAPI
from .logging_utils import configure_logging


# ============================================================
# VERSION
# ============================================================
__version__ = "1.0.0"


# ============================================================
# ALL EXPORTS
# ============================================================
__all__ = [
    # Types
    "OrderSide",
    "MarketPair",
    "MinimalOrder",
    "Market",
    "ExchangeProperties",
    "OrderCandidate",
    "ValidationResult",
    "Ok",
    "Fail",
    "Retryable",
    "Acknowledged",
    "OperationOutcome",
    "Ticker",
    "Position",
    "Trade",
    "Signature",
    # Config
    "RetryPolicy",
    "KeyVaultConfig",
    "ExchangeAPIConfig",
    # Errors
    "ErrorCategory",
    "ExchangeAPIError",
    "ConfigurationError",
    "MarketNotFoundError",
    "ExchangeOperationError",
    "contains_any",
    "outcome_from_exception",
    # Core
    "resolve_market",
    "require_market",
    "truncate_decimals",
    "OrderValidator",
    "validate_order",
    "RetryExecutor",
    "compute_backoff_delay",
    "execute_with_retry",
    # Connectors & signing
    "Capability",
    "ExchangeConnector",
    "ConnectorFactory",
    "MockConfig",
    "MockConnector",
    "Signer",
    "KeyVaultSigner",
    # Facade
    "ExchangeAPI",
    "configure_logging",
]
