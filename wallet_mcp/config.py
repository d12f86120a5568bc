"""
Configuration helpers for the wallet analytics MCP server.

This module centralizes RPC endpoint selection, the connected wallet address,
default chain metadata, timeouts, and scan limits. No secrets are stored in
the repository; the wallet address is read from environment or a local file
if present.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Default connection settings
DEFAULT_RPC_URL = os.getenv("WALLET_MCP_RPC_URL", "https://mainnet.base.org")


def _load_timeout() -> float:
    raw_timeout = os.getenv("WALLET_MCP_HTTP_TIMEOUT")
    if raw_timeout:
        try:
            return float(raw_timeout)
        except ValueError:
            return 10.0
    return 10.0


def _load_chain_id() -> Optional[int]:
    raw_chain_id = os.getenv("WALLET_MCP_CHAIN_ID")
    if not raw_chain_id:
        return None
    try:
        return int(raw_chain_id, 0)
    except ValueError:
        return None


DEFAULT_TIMEOUT = _load_timeout()

# Connected wallet handling
WALLET_ADDRESS_ENV_VAR = "WALLET_MCP_WALLET_ADDRESS"
WALLET_ADDRESS_FILE_ENV_VAR = "WALLET_MCP_WALLET_ADDRESS_FILE"
DEFAULT_WALLET_ADDRESS_FILE = "wallet_address.txt"

# Configured chain (optional); falls back to the default network below.
CHAIN_NAME = os.getenv("WALLET_MCP_CHAIN_NAME") or None
CHAIN_ID = _load_chain_id()
DEFAULT_NETWORK = "Base"
DEFAULT_CHAIN_ID = 8453

# Safety limits
SCAN_WINDOW_BLOCKS = 10
DEFAULT_ANALYTICS_LIMIT = 10
MAX_ANALYTICS_LIMIT = 100
LOG_LEVEL = os.getenv("WALLET_MCP_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("WALLET_MCP_LOG_FORMAT", "json")  # json or plain


def load_wallet_address() -> Optional[str]:
    """
    Load the connected wallet address from environment or a local file.

    Returns:
        The address string if available, otherwise None. The value is not
        validated here; the analytics tool validates whatever it resolves.
    """
    env_address = os.getenv(WALLET_ADDRESS_ENV_VAR)
    if env_address:
        return env_address.strip()

    address_path = os.getenv(WALLET_ADDRESS_FILE_ENV_VAR, DEFAULT_WALLET_ADDRESS_FILE)
    if address_path:
        path = Path(address_path)
        if path.is_file():
            return path.read_text(encoding="utf-8").strip() or None

    return None


@dataclass(slots=True)
class WalletConfig:
    """Runtime configuration for chain RPC access and analytics limits."""

    rpc_url: str = DEFAULT_RPC_URL
    timeout: float = DEFAULT_TIMEOUT
    wallet_address: Optional[str] = load_wallet_address()
    chain_name: Optional[str] = CHAIN_NAME
    chain_id: Optional[int] = CHAIN_ID
    default_network: str = DEFAULT_NETWORK
    default_chain_id: int = DEFAULT_CHAIN_ID
    scan_window_blocks: int = SCAN_WINDOW_BLOCKS
    default_limit: int = DEFAULT_ANALYTICS_LIMIT
    max_limit: int = MAX_ANALYTICS_LIMIT
    log_level: str = LOG_LEVEL
    log_format: str = LOG_FORMAT


default_config = WalletConfig()
