"""
Solana chain data source.

``ChainDataSource`` is the boundary the analyzer depends on; ``SolanaRPCClient``
implements it over JSON-RPC 2.0 using ``AsyncAPIClient``. Retry policy for
transient transport failures lives in the HTTP client, not in the analyzer.
"""

import base64
import binascii
import itertools
from typing import Any, Dict, List, Optional, Protocol

from ..exceptions import UpstreamFetchError
from ..utils.async_client import AsyncAPIClient
from ..utils.logger import get_logger
from .records import AccountInfo, TransactionRecord

logger = get_logger(__name__)

DEFAULT_COMMITMENT = "confirmed"


class ChainDataSource(Protocol):
    """Capabilities the analyzer consumes from the chain."""

    async def fetch_transaction(self, signature: str) -> TransactionRecord:
        ...

    async def fetch_account(self, public_key: str) -> AccountInfo:
        ...

    async def list_signatures_for_address(self, public_key: str, limit: int = 100) -> List[str]:
        ...


class SolanaRPCClient:
    """JSON-RPC client for the subset of the Solana API the analyzer needs."""

    def __init__(self, rpc_url: str, http_client: Optional[AsyncAPIClient] = None,
                 commitment: str = DEFAULT_COMMITMENT, **client_kwargs: Any) -> None:
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.http = http_client or AsyncAPIClient(base_url=rpc_url, **client_kwargs)
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "SolanaRPCClient":
        await self.http.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.http.close()

    async def call(self, method: str, params: List[Any]) -> Any:
        """Invoke an RPC method and return its ``result`` member.

        Raises:
            UpstreamFetchError: On transport failure or a JSON-RPC error object
        """
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        response = await self.http.post("", json_data=payload)

        error = response.get("error")
        if error:
            message = error.get("message", "unknown error") if isinstance(error, dict) else str(error)
            raise UpstreamFetchError(
                f"RPC {method} failed: {message}",
                response_data=error if isinstance(error, dict) else {"error": error},
            )
        if "result" not in response:
            raise UpstreamFetchError(f"RPC {method} returned no result")
        return response["result"]

    async def fetch_transaction(self, signature: str) -> TransactionRecord:
        result = await self.call("getTransaction", [
            signature,
            {
                "encoding": "json",
                "commitment": self.commitment,
                "maxSupportedTransactionVersion": 0,
            },
        ])
        if not isinstance(result, dict):
            raise UpstreamFetchError(f"Transaction {signature} not found")
        return TransactionRecord(result)

    async def fetch_account(self, public_key: str) -> AccountInfo:
        result = await self.call("getAccountInfo", [
            public_key,
            {"encoding": "base64", "commitment": self.commitment},
        ])
        value = result.get("value") if isinstance(result, dict) else None
        if not isinstance(value, dict):
            raise UpstreamFetchError(f"Account {public_key} not found")
        return AccountInfo.from_rpc(public_key, value, self._decode_data(public_key, value.get("data")))

    @staticmethod
    def _decode_data(public_key: str, data: Any) -> bytes:
        if isinstance(data, list) and data and isinstance(data[0], str):
            try:
                return base64.b64decode(data[0])
            except (binascii.Error, ValueError) as e:
                raise UpstreamFetchError(f"Undecodable data for account {public_key}: {e}") from e
        if data in (None, "", []):
            return b""
        raise UpstreamFetchError(f"Unexpected data encoding for account {public_key}")

    async def list_signatures_for_address(self, public_key: str, limit: int = 100) -> List[str]:
        """Recent signatures involving ``public_key``; empty on any failure."""
        try:
            result = await self.call("getSignaturesForAddress", [
                public_key,
                {"limit": limit, "commitment": self.commitment},
            ])
        except UpstreamFetchError as e:
            logger.warning("Could not list signatures for %s: %s", public_key, e)
            return []
        if not isinstance(result, list):
            return []
        return [
            entry["signature"] for entry in result
            if isinstance(entry, dict) and isinstance(entry.get("signature"), str)
        ]
