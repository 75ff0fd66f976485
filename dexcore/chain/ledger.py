"""In-memory ledger with atomic transactions.

The Ledger owns every deployed contract, native-currency balances, deployer
nonces, the block clock and the event log. Operations run as serialized
transactions: a transaction either commits all of its effects or, when it
raises, restores the exact state it started from. Frames nest, so a failing
inner call unwinds only its own effects if an outer caller handles the error.

Contract storage is saved copy-on-write: a frame copies a contract's storage
the first time the contract is touched inside it (entry into one of its
``@atomic`` methods, resolution through ``contract_at`` or a native-value
receive hook), so a transaction pays only for the contracts it uses.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, TypeVar

import structlog

from dexcore.chain.addressing import create2_address, create_address, init_code_hash
from dexcore.chain.contract import Contract
from dexcore.chain.events import Event
from dexcore.errors import AddressInUse, InsufficientBalance, TransferRejected, UnknownContract
from dexcore.models.types import normalize_address

logger = structlog.get_logger()

C = TypeVar("C", bound=Contract)

# 2023-11-14T22:13:20Z, an arbitrary but realistic starting block time
DEFAULT_GENESIS_TIMESTAMP = 1_700_000_000


@dataclass
class _Frame:
    contracts: dict[str, Contract]
    native: dict[str, int]
    nonces: dict[str, int]
    event_count: int
    # storage of contracts touched since the frame opened, keyed by address
    storage: dict[str, dict[str, Any]] = field(default_factory=dict)


class Ledger:
    """Shared mutable state for all contracts plus transaction control."""

    def __init__(self, timestamp: int = DEFAULT_GENESIS_TIMESTAMP) -> None:
        self.timestamp = timestamp
        self.events: list[Event] = []
        self._contracts: dict[str, Contract] = {}
        self._native: dict[str, int] = {}
        self._nonces: dict[str, int] = {}
        self._frames: list[_Frame] = []

    # --- Transactions ---

    @contextmanager
    def transaction(self) -> Iterator[Ledger]:
        """Open a transaction frame; roll it back if the body raises."""
        frame = _Frame(
            contracts=dict(self._contracts),
            native=dict(self._native),
            nonces=dict(self._nonces),
            event_count=len(self.events),
        )
        self._frames.append(frame)
        try:
            yield self
        except Exception as exc:
            self._restore(frame)
            if len(self._frames) == 1:
                logger.debug("transaction_reverted", error=type(exc).__name__, reason=str(exc))
            raise
        finally:
            self._frames.pop()

    @property
    def in_transaction(self) -> bool:
        return bool(self._frames)

    def touch(self, contract: Contract) -> None:
        """Save ``contract``'s storage in every open frame that has not saved it yet.

        Frames holding a copy always form the outermost part of the stack, so
        the walk from the innermost frame stops at the first one that has it.
        """
        state: dict[str, Any] | None = None
        for frame in reversed(self._frames):
            if contract.address in frame.storage:
                break
            if state is None:
                state = contract.export_state()
            frame.storage[contract.address] = state

    def _restore(self, frame: _Frame) -> None:
        self._contracts = frame.contracts
        for address, state in frame.storage.items():
            contract = self._contracts.get(address)
            if contract is not None:
                # outer frames may share this copy
                contract.import_state(copy.deepcopy(state))
        self._native = frame.native
        self._nonces = frame.nonces
        del self.events[frame.event_count :]

    # --- Clock ---

    def advance_time(self, seconds: int) -> int:
        """Move the block clock forward and return the new timestamp."""
        if seconds < 0:
            raise ValueError(f"Cannot move the clock backwards: {seconds}")
        self.timestamp += seconds
        return self.timestamp

    def set_time(self, timestamp: int) -> None:
        if timestamp < self.timestamp:
            raise ValueError(f"Cannot move the clock backwards: {timestamp} < {self.timestamp}")
        self.timestamp = timestamp

    # --- Contracts ---

    def deploy(
        self,
        contract_cls: type[C],
        *args: Any,
        deployer: str,
        salt: bytes | None = None,
        **kwargs: Any,
    ) -> C:
        """Create a contract at a deterministic address.

        Without a salt the address derives from the deployer's nonce; with a
        salt it derives from (deployer, salt, init code hash of the class).

        Raises:
            AddressInUse: If a contract already lives at the derived address
        """
        deployer = normalize_address(deployer)
        with self.transaction():
            if salt is None:
                nonce = self._nonces.get(deployer, 0)
                self._nonces[deployer] = nonce + 1
                address = create_address(deployer, nonce)
            else:
                address = create2_address(deployer, salt, init_code_hash(contract_cls))

            if address in self._contracts:
                raise AddressInUse(f"Contract already deployed at {address}")

            contract = contract_cls(self, address, deployer, *args, **kwargs)
            self._contracts[address] = contract

        logger.debug(
            "contract_deployed",
            kind=contract_cls.__name__,
            address=address,
            deployer=deployer,
        )
        return contract

    def contract_at(self, address: str, kind: type[C]) -> C:
        """Resolve the contract at ``address``, checking its kind.

        Raises:
            UnknownContract: If nothing (or something else) is deployed there
        """
        contract = self._contracts.get(normalize_address(address))
        if contract is None:
            raise UnknownContract(f"No contract at {address}")
        if not isinstance(contract, kind):
            raise UnknownContract(
                f"Contract at {address} is {type(contract).__name__}, expected {kind.__name__}"
            )
        self.touch(contract)
        return contract

    def code_at(self, address: str) -> bool:
        """True if a contract is deployed at ``address``."""
        return normalize_address(address) in self._contracts

    @property
    def contracts(self) -> list[Contract]:
        return list(self._contracts.values())

    # --- Native currency ---

    def balance_of(self, address: str) -> int:
        """Native-currency balance of an account or contract."""
        return self._native.get(normalize_address(address), 0)

    def mint_native(self, address: str, amount: int) -> None:
        """Credit native currency out of thin air (test faucet / genesis allocation)."""
        if amount < 0:
            raise ValueError(f"Cannot mint a negative amount: {amount}")
        address = normalize_address(address)
        self._native[address] = self._native.get(address, 0) + amount

    def send_value(self, sender: str, to: str, amount: int) -> None:
        """Transfer native currency, running the recipient contract's receive hook.

        Raises:
            InsufficientBalance: If the sender cannot cover ``amount``
            TransferRejected: If ``to`` is a contract without a receive hook
        """
        sender = normalize_address(sender)
        to = normalize_address(to)
        with self.transaction():
            balance = self._native.get(sender, 0)
            if balance < amount:
                raise InsufficientBalance(f"{sender} holds {balance}, needs {amount}")
            self._native[sender] = balance - amount
            self._native[to] = self._native.get(to, 0) + amount

            contract = self._contracts.get(to)
            if contract is not None:
                hook = getattr(contract, "receive", None)
                if hook is None:
                    raise TransferRejected(f"{type(contract).__name__} at {to} rejects value")
                self.touch(contract)
                hook(sender=sender, value=amount)

    # --- Events ---

    def emit(self, event: Event) -> None:
        self.events.append(event)

    def events_for(self, address: str, name: str | None = None) -> list[Event]:
        """Events emitted by ``address``, optionally filtered by name."""
        address = normalize_address(address)
        return [e for e in self.events if e.address == address and (name is None or e.name == name)]
