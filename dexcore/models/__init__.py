"""Shared models and type helpers."""

from dexcore.models.types import (
    Address,
    Uint256,
    is_valid_address,
    is_zero_address,
    normalize_address,
    sort_addresses,
)

__all__ = [
    "Address",
    "Uint256",
    "is_valid_address",
    "is_zero_address",
    "normalize_address",
    "sort_addresses",
]
