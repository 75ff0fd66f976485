"""Base class for protocol contracts living on a Ledger."""

from __future__ import annotations

import copy
import functools
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar, cast

from dexcore.chain.events import Event

if TYPE_CHECKING:
    from dexcore.chain.ledger import Ledger

F = TypeVar("F", bound=Callable[..., Any])
C = TypeVar("C", bound="Contract")


def atomic(method: F) -> F:
    """Run a contract method as one all-or-nothing ledger transaction.

    If the method raises, every change made during the call (storage of all
    contracts, native balances, deployments, events) is rolled back before
    the exception propagates.
    """

    @functools.wraps(method)
    def wrapper(self: Contract, *args: Any, **kwargs: Any) -> Any:
        with self.ledger.transaction():
            self.ledger.touch(self)
            return method(self, *args, **kwargs)

    return cast(F, wrapper)


class Contract:
    """State and behaviour deployed at a ledger address.

    Contracts refer to each other by address only and resolve the target
    through the ledger on each call, so a snapshot of one contract never
    drags another contract's state along with it. Storage changes happen
    inside ``@atomic`` methods or native-value ``receive`` hooks, where the
    ledger has already saved the contract for rollback.
    """

    def __init__(self, ledger: Ledger, address: str, creator: str) -> None:
        self.ledger = ledger
        self.address = address
        self.creator = creator

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address})"

    def emit(self, name: str, **args: Any) -> None:
        """Append an event to the ledger log."""
        self.ledger.emit(Event(address=self.address, name=name, args=args))

    def at(self, address: str, kind: type[C]) -> C:
        """Resolve another contract by address."""
        return self.ledger.contract_at(address, kind)

    def export_state(self) -> dict[str, Any]:
        """Deep copy of the contract's storage, for rollback."""
        return {key: copy.deepcopy(value) for key, value in vars(self).items() if key != "ledger"}

    def import_state(self, state: dict[str, Any]) -> None:
        """Replace the contract's storage with a previously exported copy."""
        ledger = self.ledger
        vars(self).clear()
        vars(self).update(state)
        self.ledger = ledger
