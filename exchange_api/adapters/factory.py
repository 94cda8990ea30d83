"""
Exchange Connector Factory.

============================================================
PURPOSE
============================================================
Registry-based creation of exchange connectors.

FEATURES:
- Connectors selected by configuration value
- Case-insensitive exchange names
- Registration hook for additional connectors

============================================================
USAGE
============================================================
```python
ConnectorFactory.register("poloniex", PoloniexConnector)
connector = ConnectorFactory.create("Poloniex", signer=signer)
```

============================================================
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..errors import ConfigurationError
from .base import ExchangeConnector


logger = logging.getLogger(__name__)


ConnectorCreator = Callable[..., ExchangeConnector]


# ============================================================
# CONNECTOR FACTORY
# ============================================================

class ConnectorFactory:
    """
    Factory for creating exchange connectors.

    Creators are called as creator(signer=..., **options).
    """

    # Registry of connector creators (classes or functions)
    _registry: Dict[str, ConnectorCreator] = {}

    @classmethod
    def register(cls, exchange_name: str, creator: ConnectorCreator) -> None:
        """
        Register a connector class or creator function.

        Args:
            exchange_name: Exchange identifier
            creator: Callable returning an ExchangeConnector
        """
        exchange_name = exchange_name.lower()
        if exchange_name in cls._registry:
            logger.warning(f"Replacing connector registered for {exchange_name}")
        cls._registry[exchange_name] = creator

    @classmethod
    def unregister(cls, exchange_name: str) -> None:
        """Unregister a connector."""
        cls._registry.pop(exchange_name.lower(), None)

    @classmethod
    def create(
        cls,
        exchange_name: str,
        signer: Optional[Any] = None,
        **options,
    ) -> ExchangeConnector:
        """
        Create a connector.

        Args:
            exchange_name: Exchange identifier
            signer: Signing service handed to the connector
            **options: Connector-specific arguments

        Returns:
            ExchangeConnector instance

        Raises:
            ConfigurationError: If exchange not supported
        """
        key = exchange_name.lower()
        creator = cls._registry.get(key)
        if creator is None:
            raise ConfigurationError(
                f"Unsupported exchange: {exchange_name} "
                f"(supported: {', '.join(cls.list_supported())})"
            )

        connector = creator(signer=signer, **options)
        logger.info(f"Created connector for {exchange_name}")
        return connector

    @classmethod
    def list_supported(cls) -> List[str]:
        """List supported exchanges."""
        return sorted(cls._registry.keys())


def _create_mock(signer: Optional[Any] = None, **options) -> ExchangeConnector:
    from .mock import MockConfig, MockConnector

    config = options.pop("config", None) or MockConfig(**options)
    return MockConnector(config=config, signer=signer)


ConnectorFactory.register("mock", _create_mock)
