"""LLM-facing tool implementations."""

from .analytics import analyze_wallet, wallet_analytics
from .validators import validate_address
from . import validators

__all__ = [
    "analyze_wallet",
    "wallet_analytics",
    "validate_address",
    "validators",
]
