"""Proof-of-payment checks against the Base JSON-RPC endpoint."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from rightguard.settings import Settings, get_settings

LOGGER = logging.getLogger(__name__)


class TransactionProofVerifier(Protocol):
    def verify(self, tx_hash: str, expected_amount: float) -> bool: ...


class TransactionVerifier:
    """Treat a transaction as verified when the RPC node knows its hash.

    Amount, recipient, confirmation depth, and recency are not checked.
    """

    def __init__(self, *, settings: Settings | None = None, client: Optional[httpx.Client] = None) -> None:
        self._settings = settings or get_settings()
        self._client = client

    def verify(self, tx_hash: str, expected_amount: float) -> bool:
        chain = self._settings.chain
        payload = {"jsonrpc": "2.0", "method": "eth_getTransactionByHash", "params": [tx_hash], "id": 1}
        owns_client = self._client is None
        http = self._client or httpx.Client(timeout=chain.timeout_seconds)
        try:
            response = http.post(chain.rpc_url, json=payload)
            body = response.json()
        except (httpx.HTTPError, ValueError):
            LOGGER.warning("Transaction verification failed for %s", tx_hash, exc_info=True)
            return False
        finally:
            if owns_client:
                http.close()

        result = body.get("result") if isinstance(body, dict) else None
        if not result:
            LOGGER.info("Transaction %s not found on %s", tx_hash, chain.rpc_url)
            return False
        LOGGER.info("Transaction %s verified (expected amount %s)", tx_hash, expected_amount)
        return True


__all__ = ["TransactionProofVerifier", "TransactionVerifier"]
