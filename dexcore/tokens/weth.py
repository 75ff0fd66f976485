"""Wrapped native currency."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dexcore.chain.contract import atomic
from dexcore.models.types import normalize_address
from dexcore.tokens.erc20 import ERC20Token

if TYPE_CHECKING:
    from dexcore.chain.ledger import Ledger


class WrappedNativeToken(ERC20Token):
    """ERC-20 backed 1:1 by native value held by the contract."""

    def __init__(
        self,
        ledger: Ledger,
        address: str,
        creator: str,
        name: str = "Wrapped Ether",
        symbol: str = "WETH",
    ) -> None:
        super().__init__(ledger, address, creator, name, symbol, 18)

    def receive(self, *, sender: str, value: int) -> None:
        """Native value sent to the token is wrapped for the sender."""
        self._deposit(sender, value)

    @atomic
    def deposit(self, value: int, *, caller: str) -> None:
        """Wrap ``value`` of the caller's native balance."""
        self.ledger.send_value(caller, self.address, value)

    @atomic
    def withdraw(self, value: int, *, caller: str) -> None:
        """Burn ``value`` wrapped tokens and send the native value back."""
        caller = normalize_address(caller)
        self._burn(caller, value)
        self.emit("Withdrawal", src=caller, value=value)
        self.ledger.send_value(self.address, caller, value)

    def _deposit(self, sender: str, value: int) -> None:
        self._mint(sender, value)
        self.emit("Deposit", dst=sender, value=value)
