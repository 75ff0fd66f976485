"""Deterministic address derivation.

Every function here is pure: the same inputs give the same address on the
ledger and off it, so routers and the fee receiver can locate a pair from
(registry, token0, token1) without a lookup call.

Layout follows the EVM primitives:
- create:  keccak256(deployer ++ nonce)[12:]
- create2: keccak256(0xff ++ deployer ++ salt ++ init_code_hash)[12:]
"""

from __future__ import annotations

from Crypto.Hash import keccak
from eth_abi.packed import encode_packed

from dexcore.models.types import normalize_address, sort_addresses


def keccak256(data: bytes) -> bytes:
    """Keccak-256 digest (the pre-standard SHA-3 variant)."""
    return keccak.new(digest_bits=256, data=data).digest()


def _to_address(digest: bytes) -> str:
    return "0x" + digest[12:].hex()


def _address_bytes(address: str) -> bytes:
    return bytes.fromhex(normalize_address(address, validate=True)[2:])


def create_address(deployer: str, nonce: int) -> str:
    """Address of the ``nonce``-th contract created by ``deployer``."""
    packed = encode_packed(["address", "uint256"], [_address_bytes(deployer), nonce])
    return _to_address(keccak256(packed))


def create2_address(deployer: str, salt: bytes, init_code_hash: bytes) -> str:
    """Salted address, independent of the deployer's nonce."""
    packed = encode_packed(
        ["bytes1", "address", "bytes32", "bytes32"],
        [b"\xff", _address_bytes(deployer), salt, init_code_hash],
    )
    return _to_address(keccak256(packed))


def pair_salt(token_a: str, token_b: str) -> bytes:
    """Salt for a pair: hash of the canonically ordered token addresses."""
    token0, token1 = sort_addresses(token_a, token_b)
    packed = encode_packed(
        ["address", "address"], [_address_bytes(token0), _address_bytes(token1)]
    )
    return keccak256(packed)


def init_code_hash(contract_cls: type) -> bytes:
    """Fixed fingerprint standing in for a contract's creation code."""
    return keccak256(f"{contract_cls.__module__}.{contract_cls.__qualname__}".encode())


def address_from_label(label: str) -> str:
    """Stable externally-owned account address for a human-readable label."""
    return _to_address(keccak256(label.encode()))
