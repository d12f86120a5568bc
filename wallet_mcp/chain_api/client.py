"""
Thin JSON-RPC client for the read-only EVM node methods used by the tools.

All methods are read-only and map node errors to internal exceptions that the
tool layer can turn into safe, user-facing messages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from wallet_mcp.config import WalletConfig, default_config

logger = logging.getLogger(__name__)


class ChainApiError(Exception):
    """Base exception for chain RPC errors."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str | int] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


# Failure of a read the analytics result cannot be built without.
UpstreamFetchError = ChainApiError


class InvalidAddressError(ChainApiError):
    """Raised when an address fails validation."""


class BlockNotFoundError(ChainApiError):
    """Raised when the node has no block at the requested height."""


class UnauthorizedError(ChainApiError):
    """Raised when the node rejects the request due to missing auth."""


class NodeUnreachableError(ChainApiError):
    """Raised when the node cannot be reached."""


@dataclass(frozen=True, slots=True)
class ChainInfo:
    """Chain metadata the client was configured for."""

    name: str
    chain_id: int


def parse_quantity(value: Any) -> int:
    """Decode a JSON-RPC hex quantity (``"0x1a"``) into an int."""
    if isinstance(value, bool):
        raise ChainApiError("Unexpected response from node.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 16) if value.lower().startswith("0x") else int(value)
        except ValueError:
            pass
    raise ChainApiError("Unexpected response from node.")


class ChainRpcClient:
    """Async client for the limited EVM JSON-RPC surface."""

    def __init__(
        self,
        config: WalletConfig | None = None,
        *,
        async_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config or default_config
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None
        self._next_id = 0

    @property
    def account_address(self) -> Optional[str]:
        """Address of the connected wallet, if one is configured."""
        return self.config.wallet_address

    @property
    def chain(self) -> Optional[ChainInfo]:
        if self.config.chain_name and self.config.chain_id is not None:
            return ChainInfo(name=self.config.chain_name, chain_id=self.config.chain_id)
        return None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _map_error(self, error: Dict[str, Any]) -> ChainApiError:
        code = error.get("code")
        message = error.get("message")
        lowered_message = message.lower() if isinstance(message, str) else ""
        if not isinstance(code, (str, int)):
            code = None

        if "invalid address" in lowered_message or "bad address" in lowered_message:
            return InvalidAddressError("Invalid address.", code=code)
        if "unauthorized" in lowered_message or "forbidden" in lowered_message:
            return UnauthorizedError("Unauthorized or API key required.", code=code)
        return ChainApiError("Chain RPC error.", code=code)

    def _process_response(self, response: httpx.Response) -> Any:
        if response.status_code in {401, 403}:
            raise UnauthorizedError(
                "Unauthorized or API key required.", status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code >= 400:
            if isinstance(data, dict) and isinstance(data.get("error"), dict):
                mapped = self._map_error(data["error"])
                mapped.status_code = response.status_code
                raise mapped
            raise ChainApiError("Chain RPC error.", status_code=response.status_code)

        if not isinstance(data, dict):
            raise ChainApiError("Unexpected response from node.", status_code=response.status_code)

        error = data.get("error")
        if error is not None:
            raise self._map_error(error if isinstance(error, dict) else {"message": str(error)})

        if "result" not in data:
            raise ChainApiError("Unexpected response from node.", status_code=response.status_code)
        return data["result"]

    async def _request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        client = await self._get_client()
        self._next_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._next_id,
            "method": method,
            "params": params or [],
        }
        try:
            response = await client.post(self.config.rpc_url, json=payload)
        except httpx.RequestError as exc:
            logger.warning("Chain node unreachable for method %s", method)
            raise NodeUnreachableError("Node unreachable") from exc
        return self._process_response(response)

    async def get_balance(self, address: str) -> int:
        """Return the latest balance of ``address`` in wei."""
        return parse_quantity(await self._request("eth_getBalance", [address, "latest"]))

    async def get_transaction_count(self, address: str) -> int:
        """Return the nonce (number of sent transactions) of ``address``."""
        return parse_quantity(await self._request("eth_getTransactionCount", [address, "latest"]))

    async def get_block_number(self) -> int:
        return parse_quantity(await self._request("eth_blockNumber"))

    async def get_chain_id(self) -> int:
        return parse_quantity(await self._request("eth_chainId"))

    async def get_block(self, number: int) -> Dict[str, Any]:
        """
        Fetch a block body by height.

        Transactions are requested as hashes only; some nodes still inline
        full objects, so callers must accept both shapes.
        """
        block = await self._request("eth_getBlockByNumber", [hex(number), False])
        if block is None:
            raise BlockNotFoundError("Block not found.")
        if not isinstance(block, dict):
            raise ChainApiError("Unexpected response from node.")
        return block

    async def get_transaction(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        """Fetch a transaction by hash; ``None`` when the node does not know it."""
        tx = await self._request("eth_getTransactionByHash", [tx_hash])
        if tx is not None and not isinstance(tx, dict):
            raise ChainApiError("Unexpected response from node.")
        return tx


default_client = ChainRpcClient()
