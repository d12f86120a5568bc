"""Shared validation helpers for wallet MCP tools."""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

# Loose EVM address check: 0x prefix plus 40 hex digits, checksum not enforced.
ADDRESS_REGEX = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_valid_address(address: Optional[str]) -> bool:
    """Basic format validation for EVM addresses (any letter case)."""
    if not address or not isinstance(address, str):
        return False
    return bool(ADDRESS_REGEX.fullmatch(address.strip()))


def parse_limit(value: Any, *, default: int, max_value: int) -> Optional[int]:
    """
    Parse a 1-based result limit.

    Returns the default when no value is given, the parsed integer when it
    lies in ``[1, max_value]``, and None when the value is unusable.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    if parsed < 1 or parsed > max_value:
        return None
    return parsed


def validate_address(address: Optional[str]) -> Dict[str, bool]:
    """Validate address format without calling the node."""
    return {"isValid": is_valid_address(address)}
