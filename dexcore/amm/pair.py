"""Reserve Pair: the constant-product invariant engine.

A pair holds two tokens and issues shares against them. Deposits and
withdrawals are measured from actual token balances against the last
recorded reserves, so callers transfer tokens in first and then call
mint/swap. Every state change is atomic: a failed check unwinds optimistic
transfers made earlier in the same call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from dexcore.amm.library import constant_product
from dexcore.amm.oracle import encode_price
from dexcore.chain.contract import Contract, atomic
from dexcore.constants import (
    DEFAULT_SWAP_FEE_BPS,
    FEE_DENOMINATOR,
    MAX_SWAP_FEE_BPS,
    MINIMUM_LIQUIDITY,
    PROTOCOL_FEE_DISABLED,
    SHARE_TOKEN_DECIMALS,
    SHARE_TOKEN_NAME,
    SHARE_TOKEN_SYMBOL,
    TIMESTAMP_MODULUS,
    ZERO_ADDRESS,
)
from dexcore.errors import (
    Forbidden,
    ForbiddenFee,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InsufficientOutputAmount,
    InvalidTo,
    KInvariantViolation,
    Overflow,
)
from dexcore.models.types import is_zero_address, normalize_address
from dexcore.safe_int import S, Uint112Overflow
from dexcore.tokens.erc20 import ERC20Token

if TYPE_CHECKING:
    from dexcore.amm.registry import PoolRegistry
    from dexcore.chain.ledger import Ledger

logger = structlog.get_logger()


class ReservePair(ERC20Token):
    """Two-token pool issuing fungible shares.

    Attributes:
        factory: Address of the registry that created the pair
        token0, token1: Pool tokens in canonical order
        reserve0, reserve1: Balances as of the last update
        block_timestamp_last: Timestamp (mod 2**32) of the last update
        price0_cumulative_last, price1_cumulative_last: UQ112.112 accumulators
        k_last: reserve0 * reserve1 after the last liquidity event, 0 when
            protocol fee collection is off
        swap_fee: Swap fee in basis points
        pair_owner: Delegate allowed to change the swap fee
    """

    def __init__(self, ledger: Ledger, address: str, creator: str) -> None:
        super().__init__(
            ledger, address, creator, SHARE_TOKEN_NAME, SHARE_TOKEN_SYMBOL, SHARE_TOKEN_DECIMALS
        )
        self.factory = creator
        self.token0 = ZERO_ADDRESS
        self.token1 = ZERO_ADDRESS
        self.reserve0 = 0
        self.reserve1 = 0
        self.block_timestamp_last = 0
        self.price0_cumulative_last = 0
        self.price1_cumulative_last = 0
        self.k_last = 0
        self.swap_fee = DEFAULT_SWAP_FEE_BPS
        self.pair_owner = ZERO_ADDRESS

    @atomic
    def initialize(self, token0: str, token1: str, *, caller: str) -> None:
        """Set the pool tokens; called once by the registry right after creation."""
        if normalize_address(caller) != self.factory:
            raise Forbidden("DXswapPair: FORBIDDEN")
        self.token0 = normalize_address(token0)
        self.token1 = normalize_address(token1)

    def get_reserves(self) -> tuple[int, int, int]:
        """(reserve0, reserve1, block_timestamp_last)"""
        return self.reserve0, self.reserve1, self.block_timestamp_last

    # --- Liquidity ---

    @atomic
    def mint(self, to: str, *, caller: str) -> int:
        """Issue shares for the tokens transferred in since the last update.

        Raises:
            InsufficientLiquidityMinted: If the deposit earns no shares, or
                the first deposit cannot cover MINIMUM_LIQUIDITY
        """
        reserve0, reserve1, _ = self.get_reserves()
        balance0 = self._token(self.token0).balance_of(self.address)
        balance1 = self._token(self.token1).balance_of(self.address)
        amount0 = (S(balance0) - reserve0).value
        amount1 = (S(balance1) - reserve1).value

        fee_on = self._mint_fee(reserve0, reserve1)
        # Read after _mint_fee, which can change total_supply
        total_supply = self.total_supply
        if total_supply == 0:
            root = (S(amount0) * amount1).sqrt()
            if root <= MINIMUM_LIQUIDITY:
                raise InsufficientLiquidityMinted("DXswapPair: INSUFFICIENT_LIQUIDITY_MINTED")
            liquidity = (root - MINIMUM_LIQUIDITY).value
            self._mint(ZERO_ADDRESS, MINIMUM_LIQUIDITY)
        else:
            liquidity = (
                (S(amount0) * total_supply // reserve0)
                .min(S(amount1) * total_supply // reserve1)
                .value
            )
        if liquidity <= 0:
            raise InsufficientLiquidityMinted("DXswapPair: INSUFFICIENT_LIQUIDITY_MINTED")
        self._mint(to, liquidity)

        self._update(balance0, balance1, reserve0, reserve1)
        if fee_on:
            self.k_last = self.reserve0 * self.reserve1
        self.emit("Mint", sender=normalize_address(caller), amount0=amount0, amount1=amount1)
        logger.debug(
            "pair_mint",
            pair=self.address,
            amount0=amount0,
            amount1=amount1,
            liquidity=liquidity,
        )
        return liquidity

    @atomic
    def burn(self, to: str, *, caller: str) -> tuple[int, int]:
        """Redeem the shares held by the pair itself, pro rata to balances.

        Raises:
            InsufficientLiquidityBurned: If either redeemed amount is zero
        """
        to = normalize_address(to)
        reserve0, reserve1, _ = self.get_reserves()
        token0 = self._token(self.token0)
        token1 = self._token(self.token1)
        balance0 = token0.balance_of(self.address)
        balance1 = token1.balance_of(self.address)
        liquidity = self.balance_of(self.address)

        fee_on = self._mint_fee(reserve0, reserve1)
        total_supply = self.total_supply
        if total_supply == 0:
            raise InsufficientLiquidityBurned("DXswapPair: INSUFFICIENT_LIQUIDITY_BURNED")
        amount0 = (S(liquidity) * balance0 // total_supply).value
        amount1 = (S(liquidity) * balance1 // total_supply).value
        if amount0 == 0 or amount1 == 0:
            raise InsufficientLiquidityBurned("DXswapPair: INSUFFICIENT_LIQUIDITY_BURNED")

        self._burn(self.address, liquidity)
        token0.transfer(to, amount0, caller=self.address)
        token1.transfer(to, amount1, caller=self.address)
        balance0 = token0.balance_of(self.address)
        balance1 = token1.balance_of(self.address)

        self._update(balance0, balance1, reserve0, reserve1)
        if fee_on:
            self.k_last = self.reserve0 * self.reserve1
        self.emit(
            "Burn", sender=normalize_address(caller), amount0=amount0, amount1=amount1, to=to
        )
        logger.debug(
            "pair_burn",
            pair=self.address,
            amount0=amount0,
            amount1=amount1,
            liquidity=liquidity,
        )
        return amount0, amount1

    # --- Trading ---

    @atomic
    def swap(
        self,
        amount0_out: int,
        amount1_out: int,
        to: str,
        data: bytes = b"",
        *,
        caller: str,
    ) -> None:
        """Send out the requested amounts, then require the fee-adjusted invariant.

        Outputs are transferred before any input is checked. When ``data`` is
        non-empty the recipient's ``swap_callback`` runs in between, so it can
        pay for the swap with the tokens it just received.

        Raises:
            InsufficientOutputAmount: If both outputs are zero
            InsufficientLiquidity: If an output reaches its reserve
            InvalidTo: If the recipient is one of the pool tokens
            InsufficientInputAmount: If no input arrived
            KInvariantViolation: If the invariant does not hold after fees
        """
        if amount0_out <= 0 and amount1_out <= 0:
            raise InsufficientOutputAmount("DXswapPair: INSUFFICIENT_OUTPUT_AMOUNT")
        reserve0, reserve1, _ = self.get_reserves()
        if amount0_out >= reserve0 or amount1_out >= reserve1:
            raise InsufficientLiquidity("DXswapPair: INSUFFICIENT_LIQUIDITY")

        to = normalize_address(to)
        if to in (self.token0, self.token1):
            raise InvalidTo("DXswapPair: INVALID_TO")

        token0 = self._token(self.token0)
        token1 = self._token(self.token1)
        if amount0_out > 0:
            token0.transfer(to, amount0_out, caller=self.address)
        if amount1_out > 0:
            token1.transfer(to, amount1_out, caller=self.address)
        if data:
            self._call_swap_callback(to, caller, amount0_out, amount1_out, data)
        balance0 = token0.balance_of(self.address)
        balance1 = token1.balance_of(self.address)

        amount0_in = max(balance0 - (reserve0 - amount0_out), 0)
        amount1_in = max(balance1 - (reserve1 - amount1_out), 0)
        if amount0_in == 0 and amount1_in == 0:
            raise InsufficientInputAmount("DXswapPair: INSUFFICIENT_INPUT_AMOUNT")

        balance0_adjusted = S(balance0) * FEE_DENOMINATOR - S(amount0_in) * self.swap_fee
        balance1_adjusted = S(balance1) * FEE_DENOMINATOR - S(amount1_in) * self.swap_fee
        if balance0_adjusted * balance1_adjusted < S(reserve0) * reserve1 * FEE_DENOMINATOR**2:
            raise KInvariantViolation("DXswapPair: K")

        self._update(balance0, balance1, reserve0, reserve1)
        self.emit(
            "Swap",
            sender=normalize_address(caller),
            amount0_in=amount0_in,
            amount1_in=amount1_in,
            amount0_out=amount0_out,
            amount1_out=amount1_out,
            to=to,
        )
        logger.debug(
            "pair_swap",
            pair=self.address,
            amount0_in=amount0_in,
            amount1_in=amount1_in,
            amount0_out=amount0_out,
            amount1_out=amount1_out,
        )

    # --- Balance recovery ---

    @atomic
    def skim(self, to: str, *, caller: str) -> None:
        """Send balances in excess of the reserves to ``to``."""
        token0 = self._token(self.token0)
        token1 = self._token(self.token1)
        excess0 = (S(token0.balance_of(self.address)) - self.reserve0).value
        excess1 = (S(token1.balance_of(self.address)) - self.reserve1).value
        if excess0:
            token0.transfer(to, excess0, caller=self.address)
        if excess1:
            token1.transfer(to, excess1, caller=self.address)

    @atomic
    def sync(self, *, caller: str) -> None:
        """Force reserves to match balances."""
        self._update(
            self._token(self.token0).balance_of(self.address),
            self._token(self.token1).balance_of(self.address),
            self.reserve0,
            self.reserve1,
        )

    # --- Fee administration ---

    @atomic
    def set_swap_fee(self, swap_fee: int, *, caller: str) -> None:
        """Change the swap fee (basis points, at most 1000).

        Raises:
            Forbidden: Unless called by the fee authority or the pair owner
            ForbiddenFee: If ``swap_fee`` is outside 0..1000
        """
        caller = normalize_address(caller)
        if caller != self._registry().fee_authority and (
            is_zero_address(self.pair_owner) or caller != self.pair_owner
        ):
            raise Forbidden("DXswapPair: FORBIDDEN")
        if not 0 <= swap_fee <= MAX_SWAP_FEE_BPS:
            raise ForbiddenFee("DXswapPair: FORBIDDEN_FEE")
        self.swap_fee = swap_fee
        self.emit("SwapFeeChanged", swap_fee=swap_fee)
        logger.info("swap_fee_changed", pair=self.address, swap_fee=swap_fee, caller=caller)

    @atomic
    def transfer_pair_ownership(self, new_owner: str, *, caller: str) -> None:
        """Delegate swap fee changes to ``new_owner``. Fee authority only."""
        if normalize_address(caller) != self._registry().fee_authority:
            raise Forbidden("DXswapPair: FORBIDDEN")
        previous_owner = self.pair_owner
        self.pair_owner = normalize_address(new_owner)
        self.emit(
            "PairOwnershipTransferred", previous_owner=previous_owner, new_owner=self.pair_owner
        )
        logger.info("pair_ownership_transferred", pair=self.address, new_owner=self.pair_owner)

    # --- Internals ---

    def _token(self, address: str) -> ERC20Token:
        return self.at(address, ERC20Token)

    def _registry(self) -> PoolRegistry:
        from dexcore.amm.registry import PoolRegistry

        return self.at(self.factory, PoolRegistry)

    def _call_swap_callback(
        self, to: str, sender: str, amount0_out: int, amount1_out: int, data: bytes
    ) -> None:
        recipient = self.at(to, Contract)
        callback = getattr(recipient, "swap_callback", None)
        if callback is None:
            raise InvalidTo(f"{type(recipient).__name__} at {to} has no swap callback")
        callback(
            sender=normalize_address(sender),
            amount0_out=amount0_out,
            amount1_out=amount1_out,
            data=data,
        )

    def _update(self, balance0: int, balance1: int, reserve0: int, reserve1: int) -> None:
        """Store new reserves, first accruing the old price for the elapsed time."""
        try:
            balance0 = S(balance0).to_uint112()
            balance1 = S(balance1).to_uint112()
        except Uint112Overflow as exc:
            raise Overflow("DXswapPair: OVERFLOW") from exc
        block_timestamp = self.ledger.timestamp % TIMESTAMP_MODULUS
        time_elapsed = (block_timestamp - self.block_timestamp_last) % TIMESTAMP_MODULUS
        if time_elapsed > 0 and reserve0 != 0 and reserve1 != 0:
            self.price0_cumulative_last = (
                S(self.price0_cumulative_last)
                .wrapping_add(S(encode_price(reserve0, reserve1)) * time_elapsed)
                .value
            )
            self.price1_cumulative_last = (
                S(self.price1_cumulative_last)
                .wrapping_add(S(encode_price(reserve1, reserve0)) * time_elapsed)
                .value
            )
        self.reserve0 = balance0
        self.reserve1 = balance1
        self.block_timestamp_last = block_timestamp
        self.emit("Sync", reserve0=balance0, reserve1=balance1)

    def _mint_fee(self, reserve0: int, reserve1: int) -> bool:
        """Mint protocol fee shares for sqrt(k) growth since the last liquidity event.

        Returns whether fee collection is on.
        """
        registry = self._registry()
        fee_to = registry.fee_collector
        denominator = registry.protocol_fee_denominator
        fee_on = not is_zero_address(fee_to) and denominator != PROTOCOL_FEE_DISABLED
        if fee_on:
            liquidity = constant_product.protocol_fee_shares(
                self.total_supply, reserve0, reserve1, self.k_last, denominator
            )
            if liquidity > 0:
                self._mint(fee_to, liquidity)
                logger.debug(
                    "protocol_fee_minted", pair=self.address, fee_to=fee_to, shares=liquidity
                )
        elif self.k_last != 0:
            self.k_last = 0
        return fee_on
