"""Shared type definitions for addresses and on-ledger integers.

Addresses are carried around as lowercase 0x-prefixed hex strings. For
equal-length lowercase hex, string order equals byte order, so canonical
token ordering is a plain string comparison.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from dexcore.constants import UINT256_MAX, ZERO_ADDRESS


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a valid non-negative integer within uint256 range
    """
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Uint256 cannot be negative: {value}")
        if value > UINT256_MAX:
            raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
        return str(value)

    if not isinstance(value, str):
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    try:
        int_value = int(value)
    except ValueError as err:
        raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")

    return value


# Ethereum-style address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an address to lowercase with a 0x prefix.

    Args:
        address: An address (with or without 0x prefix)
        validate: If True, raises ValueError for invalid addresses.

    Returns:
        Lowercase address with 0x prefix

    Raises:
        ValueError: If validate=True and address is not a valid address
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a valid 20-byte hex address."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def is_zero_address(address: str) -> bool:
    """True for the zero address in any letter case."""
    return normalize_address(address) == ZERO_ADDRESS


def sort_addresses(address_a: str, address_b: str) -> tuple[str, str]:
    """Return the two addresses normalized and in canonical (ascending) order."""
    a = normalize_address(address_a)
    b = normalize_address(address_b)
    return (a, b) if a < b else (b, a)
