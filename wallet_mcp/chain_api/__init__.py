"""JSON-RPC client wrappers for EVM chain nodes."""

from .client import (
    BlockNotFoundError,
    ChainApiError,
    ChainInfo,
    ChainRpcClient,
    InvalidAddressError,
    NodeUnreachableError,
    UnauthorizedError,
    UpstreamFetchError,
    default_client,
)

__all__ = [
    "ChainRpcClient",
    "ChainApiError",
    "ChainInfo",
    "UpstreamFetchError",
    "InvalidAddressError",
    "BlockNotFoundError",
    "UnauthorizedError",
    "NodeUnreachableError",
    "default_client",
]
