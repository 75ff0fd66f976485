"""Ledger, contract base class and address derivation."""

from dexcore.chain.addressing import (
    address_from_label,
    create2_address,
    create_address,
    init_code_hash,
    keccak256,
    pair_salt,
)
from dexcore.chain.contract import Contract, atomic
from dexcore.chain.events import Event
from dexcore.chain.ledger import Ledger

__all__ = [
    "Contract",
    "Event",
    "Ledger",
    "address_from_label",
    "atomic",
    "create2_address",
    "create_address",
    "init_code_hash",
    "keccak256",
    "pair_salt",
]
