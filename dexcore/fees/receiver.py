"""Fee Receiver: harvests protocol fee shares into the settlement currency.

The registry mints protocol fee shares of every pair to the receiver. A
harvest burns those shares and converts the redeemed tokens:

- the settlement currency is kept as is
- a token with a direct pair to the settlement currency is sold through it
- a token without such a pair goes unchanged to the fallback receiver

Amounts are always measured from balances after each transfer, so tokens
that take a cut on transfer are handled. A route pair that exists but
cannot produce output aborts the whole batch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from dexcore.amm.library import constant_product
from dexcore.amm.pair import ReservePair
from dexcore.amm.registry import PoolRegistry
from dexcore.chain.contract import Contract, atomic
from dexcore.errors import Forbidden, InsufficientLiquidity
from dexcore.models.types import is_zero_address, normalize_address
from dexcore.tokens.erc20 import ERC20Token
from dexcore.tokens.weth import WrappedNativeToken

if TYPE_CHECKING:
    from dexcore.chain.ledger import Ledger

logger = structlog.get_logger()


@dataclass
class HarvestReport:
    """Outcome of one ``take_protocol_fee`` batch.

    Attributes:
        harvested: Pair address -> (amount0, amount1) received from its burn
        skipped: Pairs where the receiver held no shares
        sold: Token -> amount sold into the settlement currency
        fallback: Token -> amount sent to the fallback receiver
        settlement_amount: Settlement currency sent to the settlement receiver
    """

    harvested: dict[str, tuple[int, int]] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)
    sold: dict[str, int] = field(default_factory=dict)
    fallback: dict[str, int] = field(default_factory=dict)
    settlement_amount: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.harvested


class FeeReceiver(Contract):
    """Collector of protocol fee shares.

    Attributes:
        owner: Sole account allowed to change receivers or ownership
        registry: Registry whose pairs are harvested and used as routes
        settlement_currency: Token all proceeds are converted into
        settlement_receiver: Recipient of the settlement currency
        fallback_receiver: Recipient of tokens without a route
    """

    def __init__(
        self,
        ledger: Ledger,
        address: str,
        creator: str,
        owner: str,
        registry: str,
        settlement_currency: str,
        settlement_receiver: str,
        fallback_receiver: str,
    ) -> None:
        super().__init__(ledger, address, creator)
        self.owner = normalize_address(owner)
        self.registry = normalize_address(registry)
        self.settlement_currency = normalize_address(settlement_currency)
        self.settlement_receiver = normalize_address(settlement_receiver)
        self.fallback_receiver = normalize_address(fallback_receiver)

    def receive(self, *, sender: str, value: int) -> None:
        """Accept native value, which arrives when wrapped settlement is unwrapped."""

    # --- Administration ---

    @atomic
    def transfer_ownership(self, new_owner: str, *, caller: str) -> None:
        self._check_owner(caller)
        previous_owner = self.owner
        self.owner = normalize_address(new_owner)
        self.emit("OwnershipTransferred", previous_owner=previous_owner, new_owner=self.owner)
        logger.info("fee_receiver_owner_changed", receiver=self.address, owner=self.owner)

    @atomic
    def change_receivers(
        self, settlement_receiver: str, fallback_receiver: str, *, caller: str
    ) -> None:
        self._check_owner(caller)
        self.settlement_receiver = normalize_address(settlement_receiver)
        self.fallback_receiver = normalize_address(fallback_receiver)
        self.emit(
            "ReceiversChanged",
            settlement_receiver=self.settlement_receiver,
            fallback_receiver=self.fallback_receiver,
        )
        logger.info(
            "fee_receivers_changed",
            receiver=self.address,
            settlement_receiver=self.settlement_receiver,
            fallback_receiver=self.fallback_receiver,
        )

    # --- Harvest ---

    @atomic
    def take_protocol_fee(
        self, pairs: list[str], *, caller: str, unwrap_settlement: bool = False
    ) -> HarvestReport:
        """Burn the receiver's shares of ``pairs`` and settle the proceeds.

        Args:
            pairs: Pair addresses to harvest, processed in order
            caller: Account triggering the harvest (anyone may)
            unwrap_settlement: Send the settlement currency as native value;
                requires a wrapped native settlement currency

        Raises:
            InsufficientLiquidity: If a route pair exists but cannot produce
                output; nothing from the batch is kept
        """
        report = HarvestReport()
        settlement_total = 0

        for pair_address in pairs:
            pair = self.at(pair_address, ReservePair)
            amounts = self._burn_shares(pair, report)
            if amounts is None:
                continue
            for token, amount in zip((pair.token0, pair.token1), amounts):
                if amount > 0:
                    settlement_total += self._convert(token, amount, report)

        if settlement_total > 0:
            self._send_settlement(settlement_total, unwrap_settlement)
        report.settlement_amount = settlement_total

        logger.info(
            "protocol_fee_taken",
            receiver=self.address,
            caller=normalize_address(caller),
            pairs=len(report.harvested),
            skipped=len(report.skipped),
            settlement_amount=settlement_total,
            fallback_tokens=len(report.fallback),
        )
        return report

    def _burn_shares(self, pair: ReservePair, report: HarvestReport) -> tuple[int, int] | None:
        """Redeem all shares held in ``pair``; returns the amounts actually received."""
        shares = pair.balance_of(self.address)
        if shares == 0:
            logger.warning("harvest_pair_skipped", pair=pair.address, reason="no_shares")
            report.skipped.append(pair.address)
            return None

        token0 = self.at(pair.token0, ERC20Token)
        token1 = self.at(pair.token1, ERC20Token)
        before0 = token0.balance_of(self.address)
        before1 = token1.balance_of(self.address)

        pair.transfer(pair.address, shares, caller=self.address)
        pair.burn(self.address, caller=self.address)

        amount0 = token0.balance_of(self.address) - before0
        amount1 = token1.balance_of(self.address) - before1
        report.harvested[pair.address] = (amount0, amount1)
        self.emit("ProtocolFeeTaken", pair=pair.address, amount0=amount0, amount1=amount1)
        logger.debug(
            "harvest_pair_burned",
            pair=pair.address,
            shares=shares,
            amount0=amount0,
            amount1=amount1,
        )
        return amount0, amount1

    def _convert(self, token: str, amount: int, report: HarvestReport) -> int:
        """Turn ``amount`` of ``token`` into settlement currency held by the receiver.

        Returns the settlement amount gained, 0 if the token went to the
        fallback receiver.
        """
        if token == self.settlement_currency:
            return amount

        route_address = self.at(self.registry, PoolRegistry).get_pair(
            token, self.settlement_currency
        )
        if is_zero_address(route_address):
            self.at(token, ERC20Token).transfer(self.fallback_receiver, amount, caller=self.address)
            report.fallback[token] = report.fallback.get(token, 0) + amount
            self.emit("FallbackSent", token=token, receiver=self.fallback_receiver, amount=amount)
            logger.warning(
                "harvest_token_to_fallback",
                token=token,
                amount=amount,
                fallback_receiver=self.fallback_receiver,
            )
            return 0

        gained = self._swap_to_settlement(self.at(route_address, ReservePair), token, amount)
        report.sold[token] = report.sold.get(token, 0) + amount
        return gained

    def _swap_to_settlement(self, route: ReservePair, token: str, amount: int) -> int:
        reserve0, reserve1, _ = route.get_reserves()
        if reserve0 == 0 or reserve1 == 0:
            raise InsufficientLiquidity("DXswapFeeReceiver: INSUFFICIENT_LIQUIDITY")
        token_is_0 = token == route.token0
        reserve_in, reserve_out = (reserve0, reserve1) if token_is_0 else (reserve1, reserve0)

        self.at(token, ERC20Token).transfer(route.address, amount, caller=self.address)
        amount_in = self.at(token, ERC20Token).balance_of(route.address) - reserve_in
        if amount_in <= 0:
            raise InsufficientLiquidity("DXswapFeeReceiver: INSUFFICIENT_LIQUIDITY")
        amount_out = constant_product.get_amount_out(
            amount_in, reserve_in, reserve_out, route.swap_fee
        )
        if amount_out == 0:
            raise InsufficientLiquidity("DXswapFeeReceiver: INSUFFICIENT_LIQUIDITY")

        settlement = self.at(self.settlement_currency, ERC20Token)
        before = settlement.balance_of(self.address)
        amount0_out, amount1_out = (0, amount_out) if token_is_0 else (amount_out, 0)
        route.swap(amount0_out, amount1_out, self.address, caller=self.address)
        gained = settlement.balance_of(self.address) - before
        logger.debug(
            "harvest_token_sold",
            token=token,
            route=route.address,
            amount_in=amount_in,
            amount_out=gained,
        )
        return gained

    def _send_settlement(self, amount: int, unwrap: bool) -> None:
        if unwrap:
            self.at(self.settlement_currency, WrappedNativeToken).withdraw(
                amount, caller=self.address
            )
            self.ledger.send_value(self.address, self.settlement_receiver, amount)
        else:
            self.at(self.settlement_currency, ERC20Token).transfer(
                self.settlement_receiver, amount, caller=self.address
            )
        self.emit("SettlementSent", receiver=self.settlement_receiver, amount=amount)

    def _check_owner(self, caller: str) -> None:
        if normalize_address(caller) != self.owner:
            raise Forbidden("DXswapFeeReceiver: FORBIDDEN")
