import json
import os

import httpx
import pytest
import pytest_asyncio

from wallet_mcp.chain_api.client import ChainRpcClient
from wallet_mcp.config import WalletConfig
from wallet_mcp.tools import wallet_analytics


LIVE = os.getenv("WALLET_MCP_LIVE_TESTS") in {"1", "true", "yes"}
RPC_URL = os.getenv("WALLET_MCP_RPC_URL", "https://mainnet.base.org")
SAMPLE_ADDRESS = os.getenv("WALLET_MCP_SAMPLE_ADDRESS", "0x4200000000000000000000000000000000000011")


pytestmark = pytest.mark.skipif(not LIVE, reason="Live chain integration tests are disabled")


@pytest_asyncio.fixture
async def live_client():
    async with httpx.AsyncClient(timeout=10.0) as httpx_client:
        yield ChainRpcClient(WalletConfig(rpc_url=RPC_URL), async_client=httpx_client)


@pytest.mark.asyncio
async def test_live_block_number(live_client):
    assert await live_client.get_block_number() > 0


@pytest.mark.asyncio
async def test_live_wallet_analytics(live_client):
    result = await wallet_analytics(SAMPLE_ADDRESS, limit=2, client=live_client)
    assert isinstance(result, str)
    summary = json.loads(result)
    assert summary["address"] == SAMPLE_ADDRESS
    assert len(summary["recentTransactions"]) <= 2
