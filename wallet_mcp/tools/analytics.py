"""Wallet analytics tool: balance, nonce and recent activity for an address."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from wallet_mcp.chain_api import (
    ChainApiError,
    InvalidAddressError,
    NodeUnreachableError,
    UnauthorizedError,
    default_client,
)
from wallet_mcp.chain_api.client import parse_quantity
from wallet_mcp.config import WalletConfig, default_config
from wallet_mcp.metrics import default_metrics
from wallet_mcp.tools.validators import is_valid_address, parse_limit

logger = logging.getLogger(__name__)

WEI_PER_ETH = 10**18


class TransactionFetchError(Exception):
    """A single transaction could not be fetched or decoded during a scan."""

    def __init__(self, tx_hash: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Failed to fetch transaction {tx_hash}")
        self.tx_hash = tx_hash
        self.cause = cause


@dataclass(frozen=True, slots=True)
class TxReference:
    """Block transaction entry given as a bare hash."""

    hash: str


@dataclass(frozen=True, slots=True)
class InlineTransaction:
    """Block transaction entry already expanded into a full object."""

    record: Dict[str, Any]


BlockTxEntry = Union[TxReference, InlineTransaction]


@dataclass(slots=True)
class WindowScan:
    """Accumulated matches and per-transaction failures for one scan."""

    limit: int
    matches: List[Dict[str, Any]] = field(default_factory=list)
    failures: List[TransactionFetchError] = field(default_factory=list)

    @property
    def full(self) -> bool:
        return len(self.matches) >= self.limit


def classify_block_entry(entry: Any) -> Optional[BlockTxEntry]:
    if isinstance(entry, str):
        return TxReference(entry)
    if isinstance(entry, dict):
        return InlineTransaction(entry)
    return None


def resolve_target_address(address: Optional[str], client) -> str:
    """Pick the explicit address or fall back to the connected wallet."""
    target = address or getattr(client, "account_address", None)
    if not isinstance(target, str) or not is_valid_address(target):
        raise InvalidAddressError(f"Invalid address: {target}")
    return target.strip()


def scan_heights(latest_block: int, window: int) -> List[int]:
    """Heights to scan, newest first: ``min(window, latest_block)`` blocks."""
    count = max(0, min(window, latest_block))
    return [latest_block - offset for offset in range(count)]


def _format_timestamp(raw: Any) -> Optional[str]:
    if not raw:
        return None
    seconds = parse_quantity(raw)
    if not seconds:
        return None
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _same_address(value: Any, target_lower: str) -> bool:
    return isinstance(value, str) and value.lower() == target_lower


def _match_transaction(
    tx: Dict[str, Any], block: Dict[str, Any], target_lower: str
) -> Optional[Dict[str, Any]]:
    sender = tx.get("from")
    recipient = tx.get("to")
    outgoing = _same_address(sender, target_lower)
    if not outgoing and not _same_address(recipient, target_lower):
        return None

    raw_block_number = tx.get("blockNumber")
    if raw_block_number is None:
        raw_block_number = block.get("number")
    return {
        "hash": tx.get("hash"),
        "from": sender,
        "to": recipient,
        "value": str(parse_quantity(tx.get("value") or 0)),
        "blockNumber": parse_quantity(raw_block_number) if raw_block_number is not None else None,
        "timestamp": _format_timestamp(block.get("timestamp")),
        "direction": "outgoing" if outgoing else "incoming",
    }


async def _scan_reference(
    client, ref: TxReference, block: Dict[str, Any], target_lower: str, scan: WindowScan
) -> None:
    try:
        tx = await client.get_transaction(ref.hash)
        if tx is None:
            raise ChainApiError("Transaction not found.")
        record = _match_transaction(tx, block, target_lower)
    except Exception as exc:
        failure = TransactionFetchError(ref.hash, exc)
        scan.failures.append(failure)
        logger.warning("Failed to fetch transaction %s: %s", ref.hash, exc)
        return
    if record is not None:
        scan.matches.append(record)


async def scan_blocks(
    client, blocks: List[Dict[str, Any]], target: str, limit: int
) -> WindowScan:
    """
    Walk blocks in the given order collecting transactions touching ``target``.

    Only hash references are fetched; inline transaction objects are skipped.
    The scan stops as soon as ``limit`` matches have been collected.
    """
    scan = WindowScan(limit=limit)
    target_lower = target.lower()
    for block in blocks:
        if scan.full:
            break
        for entry in block.get("transactions") or []:
            if scan.full:
                break
            classified = classify_block_entry(entry)
            if not isinstance(classified, TxReference):
                continue
            await _scan_reference(client, classified, block, target_lower, scan)
    return scan


def _sum_eth(records: List[Dict[str, Any]]) -> float:
    return sum((int(record["value"]) / WEI_PER_ETH for record in records), 0.0)


async def analyze_wallet(
    address: Optional[str] = None,
    limit: int = 10,
    *,
    client=default_client,
    config: WalletConfig = default_config,
) -> str:
    """
    Build the wallet analytics summary as a pretty-printed JSON string.

    Args:
        address: Address to analyze; defaults to the client's connected wallet.
        limit: Maximum number of matching transactions to return.
        client: Chain RPC client (override for testing).
        config: Runtime configuration supplying the scan window and default chain.

    Raises:
        InvalidAddressError: No usable address could be resolved.
        ChainApiError: A required read (balance, nonce, block number or block
            body) failed.
    """
    target = resolve_target_address(address, client)

    balance = await client.get_balance(target)
    tx_count = await client.get_transaction_count(target)
    latest_block = await client.get_block_number()

    heights = scan_heights(latest_block, config.scan_window_blocks)
    blocks = await asyncio.gather(*(client.get_block(height) for height in heights))

    scan = await scan_blocks(client, list(blocks), target, limit)
    if scan.failures:
        logger.debug("Skipped %d transaction(s) while scanning %s", len(scan.failures), target)
        default_metrics.incr_skipped_transactions(len(scan.failures))

    outgoing = [tx for tx in scan.matches if tx["direction"] == "outgoing"]
    incoming = [tx for tx in scan.matches if tx["direction"] == "incoming"]

    chain = getattr(client, "chain", None)
    result = {
        "address": target,
        "balanceInEth": balance / WEI_PER_ETH,
        "transactionCount": tx_count,
        "recentTransactions": scan.matches,
        "analytics": {
            "outgoingCount": len(outgoing),
            "incomingCount": len(incoming),
            "totalValueSent": _sum_eth(outgoing),
            "totalValueReceived": _sum_eth(incoming),
        },
        "blockchainInfo": {
            "network": chain.name if chain else config.default_network,
            "chainId": chain.chain_id if chain else config.default_chain_id,
            "latestBlock": latest_block,
        },
    }
    return json.dumps(result, indent=2)


async def wallet_analytics(
    address: Optional[str] = None,
    limit: Any = None,
    *,
    client=default_client,
    config: WalletConfig = default_config,
) -> str | Dict[str, Any]:
    """
    Analyze wallet activity and transaction history.

    Returns the JSON summary string on success, or an ``{"error": ...}`` dict.
    """
    effective_limit = parse_limit(limit, default=config.default_limit, max_value=config.max_limit)
    if effective_limit is None:
        return {"error": "Invalid limit."}
    if address is not None and not isinstance(address, str):
        return {"error": "Invalid address."}

    try:
        return await analyze_wallet(address, effective_limit, client=client, config=config)
    except InvalidAddressError:
        return {"error": "Invalid address."}
    except UnauthorizedError:
        return {"error": "Unauthorized or API key required."}
    except NodeUnreachableError:
        return {"error": "Node unreachable"}
    except ChainApiError:
        return {"error": "Chain RPC error."}
    except Exception:
        logger.exception("Unexpected error analyzing wallet %s", address)
        return {"error": "Unexpected error while analyzing wallet."}
