"""Constant-product pairs, their registry and quoting math."""

from dexcore.amm.library import ConstantProduct, constant_product
from dexcore.amm.oracle import (
    PriceObservation,
    average_price,
    current_cumulative_prices,
    encode_price,
)
from dexcore.amm.pair import ReservePair
from dexcore.amm.registry import INIT_CODE_PAIR_HASH, PoolRegistry

__all__ = [
    "INIT_CODE_PAIR_HASH",
    "ConstantProduct",
    "PoolRegistry",
    "PriceObservation",
    "ReservePair",
    "average_price",
    "constant_product",
    "current_cumulative_prices",
    "encode_price",
]
