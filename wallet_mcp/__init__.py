"""
Read-only wallet analytics MCP server package.

This package exposes an LLM-friendly wallet analytics tool backed by a small
subset of the EVM JSON-RPC API. See DESIGN.md for full details.
"""

__all__ = ["config"]
