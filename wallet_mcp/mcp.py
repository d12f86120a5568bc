"""
Lightweight JSON-RPC surface for MCP-style tooling.

This keeps a minimal, safe mapping of tool names to existing implementations.
It is intentionally small and stateless; caller must handle authentication to
the HTTP server hosting this adapter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from wallet_mcp.config import default_config
from wallet_mcp.tools import validate_address, wallet_analytics
from wallet_mcp.tools.validators import ADDRESS_REGEX

ADDRESS_PATTERN = ADDRESS_REGEX.pattern


ToolCallable = Callable[..., Awaitable[Any]] | Callable[..., Any]


@dataclass(slots=True)
class ToolDefinition:
    name: str
    description: str
    params: Dict[str, Any]
    input_schema: Dict[str, Any]
    callable: ToolCallable


TOOL_REGISTRY: Dict[str, ToolDefinition] = {
    "wallet_analytics": ToolDefinition(
        name="wallet_analytics",
        description="Analyze wallet activity and transaction history",
        params={
            "address": "string (optional, defaults to the connected wallet)",
            "limit": f"integer (optional, 1-{default_config.max_limit}, default {default_config.default_limit})",
        },
        input_schema={
            "type": "object",
            "properties": {
                "address": {
                    "type": "string",
                    "description": "The wallet address to analyze (defaults to user wallet if not provided)",
                },
                "limit": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": default_config.max_limit,
                    "default": default_config.default_limit,
                    "description": f"Number of transactions to analyze (max {default_config.max_limit})",
                },
            },
            "required": [],
            "additionalProperties": False,
        },
        callable=wallet_analytics,
    ),
    "validate_address": ToolDefinition(
        name="validate_address",
        description="Validate EVM address format without calling the node.",
        params={"address": "string (required)"},
        input_schema={
            "type": "object",
            "properties": {
                "address": {
                    "type": "string",
                    "description": "EVM address (0x-prefixed, 40 hex characters)",
                    "pattern": ADDRESS_PATTERN,
                    "minLength": 42,
                    "maxLength": 42,
                }
            },
            "required": ["address"],
            "additionalProperties": False,
        },
        callable=validate_address,
    ),
}


def list_tools() -> List[Dict[str, Any]]:
    """Return a simple list of available tools."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "params": tool.params,
            "inputSchema": tool.input_schema,
        }
        for tool in TOOL_REGISTRY.values()
    ]


async def call_tool(tool_name: str, params: Optional[Dict[str, Any]] = None) -> Any:
    """Dispatch to a tool by name."""
    params = params or {}
    tool = TOOL_REGISTRY.get(tool_name)
    if tool is None:
        return {"error": f"Unknown tool: {tool_name}"}

    # Match parameters by name; tools already handle validation and error shaping.
    try:
        result = tool.callable(**params)
        if isinstance(result, Awaitable):
            return await result  # type: ignore[return-value]
        return result
    except TypeError:
        return {"error": "Invalid parameters."}
    except Exception:
        return {"error": "Unexpected error while calling tool."}
