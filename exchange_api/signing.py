"""
Exchange API - Transaction Signing.

============================================================
PURPOSE
============================================================
Client for the remote key vault that signs exchange requests,
so connectors never hold private keys.

The vault is a GraphQL endpoint exposing the
keyVault_SignTransaction mutation. Network failures, timeouts,
rate limits and 5xx answers are retried; GraphQL errors are not.

============================================================
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import aiohttp

from .config import KeyVaultConfig
from .errors import ConfigurationError
from .logging_utils import mask_headers
from .retry import RetryExecutor
from .types import Fail, Ok, OperationOutcome, Retryable, Signature


logger = logging.getLogger(__name__)


SIGN_TRANSACTION_MUTATION = """
mutation keyVault_SignTransaction($transaction: String!, $keyId: String, $cloneId: String){
    keyVault_SignTransaction(transaction: $transaction, keyId: $keyId, cloneId: $cloneId){
        key,
        signature,
        date
    }
}
"""


# ============================================================
# SIGNER INTERFACE
# ============================================================

class Signer(ABC):
    """Signs transaction payloads for authenticated exchange calls."""

    @abstractmethod
    async def sign(self, transaction: str) -> OperationOutcome:
        """
        Sign a transaction payload.

        Returns:
            Ok(Signature) on success, Fail otherwise
        """
        pass

    async def close(self) -> None:
        """Release resources. No-op by default."""


# ============================================================
# KEY VAULT SIGNER
# ============================================================

class KeyVaultSigner(Signer):
    """
    Signs transactions through the key vault GraphQL API.
    """

    def __init__(
        self,
        config: KeyVaultConfig,
        session: Optional[aiohttp.ClientSession] = None,
        executor: Optional[RetryExecutor] = None,
    ):
        """
        Initialize signer.

        Args:
            config: Key vault configuration
            session: Shared HTTP session (created lazily if omitted)
            executor: Retry executor for signing requests
        """
        if not config.is_configured:
            raise ConfigurationError("Key vault endpoint is not configured")

        self._config = config
        self._session = session
        self._owns_session = session is None
        self._executor = executor or RetryExecutor(config.retry, name="sign_transaction")

    async def sign(self, transaction: str) -> OperationOutcome:
        """Sign a transaction, retrying transient failures."""
        return await self._executor.execute(
            lambda: self._sign_once(transaction),
            policy=self._config.retry,
            name="sign_transaction",
        )

    async def close(self) -> None:
        """Close the HTTP session if this signer created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    def _build_request(self, transaction: str) -> Dict[str, Any]:
        return {
            "query": SIGN_TRANSACTION_MUTATION,
            "variables": {
                "transaction": transaction,
                "keyId": self._config.key_id,
                "cloneId": self._config.clone_id,
            },
        }

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._config.access_token:
            headers["access_token"] = self._config.access_token
        return headers

    async def _sign_once(self, transaction: str) -> OperationOutcome:
        """One signing request."""
        headers = self._headers()
        logger.debug(
            f"Signing transaction via {self._config.endpoint} headers={mask_headers(headers)}"
        )

        try:
            session = self._get_session()
            async with session.post(
                self._config.endpoint,
                json=self._build_request(transaction),
                headers=headers,
            ) as response:
                if response.status == 429:
                    return Retryable(
                        reason="Key vault rate limit exceeded",
                        retry_after_seconds=_parse_retry_after(response.headers.get("Retry-After")),
                    )
                if response.status >= 500:
                    return Retryable(reason=f"Key vault unavailable (HTTP {response.status})")
                if response.status >= 400:
                    return Fail(reason=f"Key vault rejected request (HTTP {response.status})")

                body = await response.json()

        except asyncio.TimeoutError:
            return Retryable(reason="Error signing the message on the key vault: timeout")
        except aiohttp.ClientError as e:
            return Retryable(reason=f"Error signing the message on the key vault: {e}")

        return _parse_sign_response(body)


# ============================================================
# RESPONSE HELPERS
# ============================================================

def _parse_sign_response(body: Dict[str, Any]) -> OperationOutcome:
    errors = body.get("errors")
    if errors:
        messages = "; ".join(
            str(err.get("message", err)) if isinstance(err, dict) else str(err)
            for err in errors
        )
        return Fail(reason=f"Error from graphql: {messages}")

    result = (body.get("data") or {}).get("keyVault_SignTransaction")
    if not result or not result.get("key") or not result.get("signature"):
        return Fail(reason="Key vault returned no signature")

    return Ok(payload=Signature(
        key=result["key"],
        signature=result["signature"],
        date=result.get("date"),
    ))


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None
