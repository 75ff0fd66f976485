"""Ledger event records."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Event:
    """A log entry emitted by a contract.

    Events emitted inside a transaction that later reverts are discarded
    together with the rest of its side effects.
    """

    address: str
    name: str
    args: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.args[key]
