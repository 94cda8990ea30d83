"""
Exchange API - Connectors Package.

============================================================
PURPOSE
============================================================
Exchange connector interface and implementations.

AVAILABLE CONNECTORS:
- MockConnector: For testing and dry runs

UTILITIES:
- ConnectorFactory: Registry for creating connectors by name
- Capability: Optional connector predicates

============================================================
"""

from .base import Capability, ExchangeConnector
from .factory import ConnectorFactory
from .mock import MockConfig, MockConnector


__all__ = [
    "Capability",
    "ExchangeConnector",
    "ConnectorFactory",
    "MockConfig",
    "MockConnector",
]
