"""Fungible token ledger.

Used for the pool tokens themselves and for the pool share token of every
Reserve Pair. Balances and allowances live in plain dicts keyed by
normalized address; every public mutator is atomic.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from dexcore.chain.contract import Contract, atomic
from dexcore.constants import UINT256_MAX, ZERO_ADDRESS
from dexcore.errors import InsufficientAllowance, InsufficientBalance
from dexcore.models.types import normalize_address

if TYPE_CHECKING:
    from dexcore.chain.ledger import Ledger

logger = structlog.get_logger()


class ERC20Token(Contract):
    """Minimal ERC-20 token.

    An allowance of 2**256-1 is treated as unlimited and never decremented.
    """

    def __init__(
        self,
        ledger: Ledger,
        address: str,
        creator: str,
        name: str,
        symbol: str,
        decimals: int = 18,
        initial_supply: int = 0,
        holder: str | None = None,
    ) -> None:
        super().__init__(ledger, address, creator)
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.total_supply = 0
        self.balances: dict[str, int] = {}
        self.allowances: dict[tuple[str, str], int] = {}
        if initial_supply:
            self._mint(holder or creator, initial_supply)

    def balance_of(self, account: str) -> int:
        return self.balances.get(normalize_address(account), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    @atomic
    def approve(self, spender: str, value: int, *, caller: str) -> bool:
        owner = normalize_address(caller)
        spender = normalize_address(spender)
        self.allowances[(owner, spender)] = value
        self.emit("Approval", owner=owner, spender=spender, value=value)
        return True

    @atomic
    def transfer(self, to: str, value: int, *, caller: str) -> bool:
        self._transfer(normalize_address(caller), normalize_address(to), value)
        return True

    @atomic
    def transfer_from(self, sender: str, to: str, value: int, *, caller: str) -> bool:
        """Move ``value`` from ``sender`` to ``to`` using the caller's allowance.

        Raises:
            InsufficientAllowance: If the caller's allowance is below ``value``
            InsufficientBalance: If ``sender`` holds less than ``value``
        """
        sender = normalize_address(sender)
        spender = normalize_address(caller)
        current = self.allowances.get((sender, spender), 0)
        if current != UINT256_MAX:
            if current < value:
                raise InsufficientAllowance(
                    f"{self.symbol}: allowance {current} of {spender} below {value}"
                )
            self.allowances[(sender, spender)] = current - value
        self._transfer(sender, normalize_address(to), value)
        return True

    # --- Internal ledger operations ---

    def _transfer(self, sender: str, to: str, value: int) -> None:
        if value < 0:
            raise ValueError(f"Negative transfer amount: {value}")
        balance = self.balances.get(sender, 0)
        if balance < value:
            raise InsufficientBalance(f"{self.symbol}: {sender} holds {balance}, needs {value}")
        self.balances[sender] = balance - value
        self.balances[to] = self.balances.get(to, 0) + value
        self.emit("Transfer", sender=sender, to=to, value=value)

    def _mint(self, to: str, value: int) -> None:
        to = normalize_address(to)
        self.total_supply += value
        self.balances[to] = self.balances.get(to, 0) + value
        self.emit("Transfer", sender=ZERO_ADDRESS, to=to, value=value)

    def _burn(self, account: str, value: int) -> None:
        account = normalize_address(account)
        balance = self.balances.get(account, 0)
        if balance < value:
            raise InsufficientBalance(f"{self.symbol}: burn of {value} exceeds balance {balance}")
        self.balances[account] = balance - value
        self.total_supply -= value
        self.emit("Transfer", sender=account, to=ZERO_ADDRESS, value=value)
