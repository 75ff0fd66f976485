"""Pool Registry: creates pairs and holds the protocol fee parameters."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from dexcore.amm.library import constant_product
from dexcore.amm.pair import ReservePair
from dexcore.chain.addressing import init_code_hash, pair_salt
from dexcore.chain.contract import Contract, atomic
from dexcore.constants import DEFAULT_PROTOCOL_FEE_DENOMINATOR, ZERO_ADDRESS
from dexcore.errors import Forbidden, InvalidProtocolFeeDenominator, PairExists
from dexcore.models.types import normalize_address

if TYPE_CHECKING:
    from dexcore.chain.ledger import Ledger

logger = structlog.get_logger()

# Fingerprint of the pair's creation code; with the registry address and the
# sorted tokens it fixes every pair address.
INIT_CODE_PAIR_HASH = init_code_hash(ReservePair)


class PoolRegistry(Contract):
    """Pair factory.

    Pairs are keyed by the unordered token pair, so lookups work in either
    order. The fee authority is the only account that can change the fee
    collector, the protocol fee denominator, or the fee authority itself.
    """

    def __init__(self, ledger: Ledger, address: str, creator: str, fee_authority: str) -> None:
        super().__init__(ledger, address, creator)
        self.fee_authority = normalize_address(fee_authority)
        self.fee_collector = ZERO_ADDRESS
        self.protocol_fee_denominator = DEFAULT_PROTOCOL_FEE_DENOMINATOR
        self.pairs: dict[frozenset[str], str] = {}
        self.all_pairs: list[str] = []

    def get_pair(self, token_a: str, token_b: str) -> str:
        """Pair address for two tokens, or the zero address if none exists."""
        key = frozenset([normalize_address(token_a), normalize_address(token_b)])
        return self.pairs.get(key, ZERO_ADDRESS)

    def all_pairs_length(self) -> int:
        return len(self.all_pairs)

    @atomic
    def create_pair(self, token_a: str, token_b: str, *, caller: str) -> str:
        """Deploy the pair for two tokens at its deterministic address.

        Raises:
            IdenticalAddresses: If both tokens are the same
            ZeroAddress: If a token is the zero address
            PairExists: If the pair was already created, in either order
        """
        token0, token1 = constant_product.sort_tokens(token_a, token_b)
        key = frozenset([token0, token1])
        if key in self.pairs:
            raise PairExists("DXswapFactory: PAIR_EXISTS")

        salt = pair_salt(token0, token1)
        pair = self.ledger.deploy(ReservePair, deployer=self.address, salt=salt)
        pair.initialize(token0, token1, caller=self.address)
        self.pairs[key] = pair.address
        self.all_pairs.append(pair.address)

        self.emit(
            "PairCreated",
            token0=token0,
            token1=token1,
            pair=pair.address,
            index=len(self.all_pairs),
        )
        logger.debug("pair_created", pair=pair.address, token0=token0, token1=token1)
        return pair.address

    @atomic
    def set_fee_collector(self, fee_collector: str, *, caller: str) -> None:
        self._check_fee_authority(caller)
        self.fee_collector = normalize_address(fee_collector)
        self.emit("FeeCollectorChanged", fee_collector=self.fee_collector)
        logger.info(
            "fee_collector_changed", registry=self.address, fee_collector=self.fee_collector
        )

    @atomic
    def set_protocol_fee_denominator(self, denominator: int, *, caller: str) -> None:
        """Set the protocol cut to 1 / (denominator + 1) of fee growth; 0 turns it off."""
        self._check_fee_authority(caller)
        if denominator < 0:
            raise InvalidProtocolFeeDenominator(f"Negative protocol fee denominator: {denominator}")
        self.protocol_fee_denominator = denominator
        self.emit("ProtocolFeeDenominatorChanged", protocol_fee_denominator=denominator)
        logger.info(
            "protocol_fee_denominator_changed", registry=self.address, denominator=denominator
        )

    @atomic
    def set_fee_authority(self, fee_authority: str, *, caller: str) -> None:
        self._check_fee_authority(caller)
        self.fee_authority = normalize_address(fee_authority)
        self.emit("FeeAuthorityChanged", fee_authority=self.fee_authority)
        logger.info(
            "fee_authority_changed", registry=self.address, fee_authority=self.fee_authority
        )

    def _check_fee_authority(self, caller: str) -> None:
        if normalize_address(caller) != self.fee_authority:
            raise Forbidden("DXswapFactory: FORBIDDEN")
