"""Minimal sanity checks for the wallet MCP tools against a live node."""

from __future__ import annotations

import asyncio
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from wallet_mcp.chain_api import default_client  # noqa: E402
from wallet_mcp.tools import validate_address, wallet_analytics  # noqa: E402

# Base fee vault; always active on Base mainnet. Override via env.
SAMPLE_ADDRESS = os.getenv("WALLET_MCP_SAMPLE_ADDRESS", "0x4200000000000000000000000000000000000011")
SAMPLE_LIMIT = int(os.getenv("WALLET_MCP_SAMPLE_LIMIT", "3"))


async def main() -> None:
    print("Validate address:", validate_address(SAMPLE_ADDRESS))
    print("Chain id:", await default_client.get_chain_id())
    print("Latest block:", await default_client.get_block_number())
    print("Wallet analytics:", await wallet_analytics(SAMPLE_ADDRESS, limit=SAMPLE_LIMIT))
    await default_client.aclose()


if __name__ == "__main__":
    asyncio.run(main())
