"""Time-weighted average prices from pair accumulators.

Pairs accumulate ``price * seconds`` in UQ112.112 fixed point on the first
state change of every block. Two observations taken at different times give
the average price over the window between them; wrapping arithmetic makes
the difference correct even after an accumulator overflows.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import TYPE_CHECKING

from dexcore.constants import Q112, TIMESTAMP_MODULUS, UINT256_MAX
from dexcore.safe_int import S

if TYPE_CHECKING:
    from dexcore.amm.pair import ReservePair


def encode_price(reserve0: int, reserve1: int) -> int:
    """Price of token0 in token1 as a UQ112.112 number."""
    return ((S(reserve1) << 112) // reserve0).value


def current_cumulative_prices(pair: ReservePair) -> tuple[int, int, int]:
    """Accumulators as they would read if the pair were updated right now.

    Returns:
        (price0_cumulative, price1_cumulative, block_timestamp)
    """
    block_timestamp = pair.ledger.timestamp % TIMESTAMP_MODULUS
    price0_cumulative = pair.price0_cumulative_last
    price1_cumulative = pair.price1_cumulative_last

    reserve0, reserve1, block_timestamp_last = pair.get_reserves()
    if block_timestamp_last != block_timestamp and reserve0 and reserve1:
        elapsed = (block_timestamp - block_timestamp_last) % TIMESTAMP_MODULUS
        price0_cumulative = (
            S(price0_cumulative).wrapping_add(S(encode_price(reserve0, reserve1)) * elapsed).value
        )
        price1_cumulative = (
            S(price1_cumulative).wrapping_add(S(encode_price(reserve1, reserve0)) * elapsed).value
        )
    return price0_cumulative, price1_cumulative, block_timestamp


@dataclass(frozen=True)
class PriceObservation:
    """Snapshot of a pair's cumulative prices."""

    timestamp: int
    price0_cumulative: int
    price1_cumulative: int

    @classmethod
    def observe(cls, pair: ReservePair) -> PriceObservation:
        price0, price1, timestamp = current_cumulative_prices(pair)
        return cls(timestamp=timestamp, price0_cumulative=price0, price1_cumulative=price1)


def average_price(start: PriceObservation, end: PriceObservation) -> tuple[Decimal, Decimal]:
    """Time-weighted average (price0, price1) between two observations.

    Raises:
        ValueError: If both observations share a timestamp
    """
    elapsed = (end.timestamp - start.timestamp) % TIMESTAMP_MODULUS
    if elapsed == 0:
        raise ValueError("Observations must be taken at different timestamps")

    modulus = UINT256_MAX + 1
    price0 = ((end.price0_cumulative - start.price0_cumulative) % modulus) // elapsed
    price1 = ((end.price1_cumulative - start.price1_cumulative) % modulus) // elapsed
    with localcontext() as ctx:
        ctx.prec = 78
        return Decimal(price0) / Q112, Decimal(price1) / Q112
