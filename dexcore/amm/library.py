"""Constant-product quoting math.

The same fee-adjusted constant product formula the pair enforces on swaps:

    amount_out = (in * (10000 - fee) * res_out) / (res_in * 10000 + in * (10000 - fee))

Everything here is pure integer math over reserves, plus thin helpers that
read reserves and swap fees from pairs deployed on a ledger for multi-hop
path quotes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dexcore.chain.addressing import create2_address, pair_salt
from dexcore.constants import FEE_DENOMINATOR, PROTOCOL_FEE_DISABLED
from dexcore.errors import (
    IdenticalAddresses,
    InsufficientAmount,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
    InvalidPath,
    ZeroAddress,
)
from dexcore.models.types import is_zero_address, normalize_address, sort_addresses
from dexcore.safe_int import S

if TYPE_CHECKING:
    from dexcore.chain.ledger import Ledger


class ConstantProduct:
    """Constant-product AMM math with per-pair swap fees in basis points."""

    def sort_tokens(self, token_a: str, token_b: str) -> tuple[str, str]:
        """Canonical (token0, token1) ordering.

        Raises:
            IdenticalAddresses: If both tokens are the same
            ZeroAddress: If the lower token is the zero address
        """
        if normalize_address(token_a) == normalize_address(token_b):
            raise IdenticalAddresses(f"Identical tokens: {token_a}")
        token0, token1 = sort_addresses(token_a, token_b)
        if is_zero_address(token0):
            raise ZeroAddress("Token is the zero address")
        return token0, token1

    def pair_for(self, registry: str, token_a: str, token_b: str) -> str:
        """Address of the pair for two tokens, derived without touching the ledger."""
        # Deferred import: the init code hash is a property of the pair class
        from dexcore.amm.registry import INIT_CODE_PAIR_HASH

        token0, token1 = self.sort_tokens(token_a, token_b)
        return create2_address(registry, pair_salt(token0, token1), INIT_CODE_PAIR_HASH)

    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        """Equivalent amount of the other asset at the current reserve ratio.

        Raises:
            InsufficientAmount: If amount_a is zero
            InsufficientLiquidity: If either reserve is empty
        """
        if amount_a <= 0:
            raise InsufficientAmount("Quote amount must be positive")
        if reserve_a <= 0 or reserve_b <= 0:
            raise InsufficientLiquidity("Cannot quote against empty reserves")
        return (S(amount_a) * reserve_b // reserve_a).value

    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        swap_fee_bps: int,
    ) -> int:
        """Maximum output for an exact input.

        Args:
            amount_in: Input token amount
            reserve_in: Reserve of input token in the pair
            reserve_out: Reserve of output token in the pair
            swap_fee_bps: The pair's swap fee in basis points

        Returns:
            Output token amount

        Raises:
            InsufficientInputAmount: If amount_in is zero
            InsufficientLiquidity: If either reserve is empty
        """
        if amount_in <= 0:
            raise InsufficientInputAmount("Input amount must be positive")
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidity("Cannot swap against empty reserves")

        amount_in_with_fee = S(amount_in) * (FEE_DENOMINATOR - swap_fee_bps)
        numerator = amount_in_with_fee * reserve_out
        denominator = S(reserve_in) * FEE_DENOMINATOR + amount_in_with_fee
        return (numerator // denominator).value

    def get_amount_in(
        self,
        amount_out: int,
        reserve_in: int,
        reserve_out: int,
        swap_fee_bps: int,
    ) -> int:
        """Minimum input for an exact output, rounded up.

        Raises:
            InsufficientOutputAmount: If amount_out is zero
            InsufficientLiquidity: If a reserve is empty or cannot cover amount_out
        """
        if amount_out <= 0:
            raise InsufficientOutputAmount("Output amount must be positive")
        if reserve_in <= 0 or reserve_out <= 0 or amount_out >= reserve_out:
            raise InsufficientLiquidity(f"Output {amount_out} not available from {reserve_out}")

        numerator = S(reserve_in) * amount_out * FEE_DENOMINATOR
        denominator = (S(reserve_out) - amount_out) * (FEE_DENOMINATOR - swap_fee_bps)
        return (numerator // denominator + 1).value

    def get_reserves(
        self, ledger: Ledger, registry: str, token_a: str, token_b: str
    ) -> tuple[int, int, int]:
        """Reserves ordered as (token_a, token_b) and the pair's swap fee."""
        from dexcore.amm.pair import ReservePair

        token0, _ = self.sort_tokens(token_a, token_b)
        pair = ledger.contract_at(self.pair_for(registry, token_a, token_b), ReservePair)
        reserve0, reserve1, _ = pair.get_reserves()
        if normalize_address(token_a) == token0:
            return reserve0, reserve1, pair.swap_fee
        return reserve1, reserve0, pair.swap_fee

    def get_amounts_out(
        self, ledger: Ledger, registry: str, amount_in: int, path: list[str]
    ) -> list[int]:
        """Chained exact-input quotes along ``path``; first element is amount_in.

        Raises:
            InvalidPath: If the path has fewer than two tokens
        """
        if len(path) < 2:
            raise InvalidPath(f"Path needs at least two tokens, got {len(path)}")
        amounts = [amount_in]
        for token_in, token_out in zip(path, path[1:]):
            reserve_in, reserve_out, fee = self.get_reserves(ledger, registry, token_in, token_out)
            amounts.append(self.get_amount_out(amounts[-1], reserve_in, reserve_out, fee))
        return amounts

    def get_amounts_in(
        self, ledger: Ledger, registry: str, amount_out: int, path: list[str]
    ) -> list[int]:
        """Chained exact-output quotes along ``path``; last element is amount_out.

        Raises:
            InvalidPath: If the path has fewer than two tokens
        """
        if len(path) < 2:
            raise InvalidPath(f"Path needs at least two tokens, got {len(path)}")
        amounts = [amount_out]
        for token_in, token_out in zip(reversed(path[:-1]), reversed(path[1:])):
            reserve_in, reserve_out, fee = self.get_reserves(ledger, registry, token_in, token_out)
            amounts.insert(0, self.get_amount_in(amounts[0], reserve_in, reserve_out, fee))
        return amounts

    def protocol_fee_shares(
        self,
        total_supply: int,
        reserve0: int,
        reserve1: int,
        k_last: int,
        protocol_fee_denominator: int,
    ) -> int:
        """Shares owed to the fee collector for growth of sqrt(k) since k_last.

        Returns 0 when collection is disabled, k_last is unset or k has not
        grown. Square roots are floored.
        """
        if protocol_fee_denominator == PROTOCOL_FEE_DISABLED or k_last == 0:
            return 0
        root_k = (S(reserve0) * reserve1).sqrt()
        root_k_last = S(k_last).sqrt()
        if root_k <= root_k_last:
            return 0
        numerator = S(total_supply) * (root_k - root_k_last)
        denominator = root_k * protocol_fee_denominator + root_k_last
        return (numerator // denominator).value


# Module-level instance used throughout the package
constant_product = ConstantProduct()
