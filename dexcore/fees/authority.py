"""Fee Authority: owner-gated proxy for fee parameter changes.

Deployed as the registry's fee authority, it lets a single owner change the
registry's fee parameters and individual pairs' swap fees. The downstream
gates still apply: once the registry's fee authority points elsewhere,
forwarded calls fail inside the registry or pair.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from dexcore.amm.pair import ReservePair
from dexcore.amm.registry import PoolRegistry
from dexcore.chain.contract import Contract, atomic
from dexcore.errors import Forbidden
from dexcore.models.types import normalize_address

if TYPE_CHECKING:
    from dexcore.chain.ledger import Ledger

logger = structlog.get_logger()


class FeeAuthority(Contract):
    def __init__(
        self, ledger: Ledger, address: str, creator: str, owner: str, registry: str
    ) -> None:
        super().__init__(ledger, address, creator)
        self.owner = normalize_address(owner)
        self.registry = normalize_address(registry)

    @atomic
    def transfer_ownership(self, new_owner: str, *, caller: str) -> None:
        self._check_owner(caller)
        previous_owner = self.owner
        self.owner = normalize_address(new_owner)
        self.emit("OwnershipTransferred", previous_owner=previous_owner, new_owner=self.owner)
        logger.info("fee_authority_owner_changed", authority=self.address, owner=self.owner)

    # --- Registry parameters ---

    @atomic
    def set_fee_collector(self, fee_collector: str, *, caller: str) -> None:
        self._check_owner(caller)
        self._registry().set_fee_collector(fee_collector, caller=self.address)

    @atomic
    def set_protocol_fee_denominator(self, denominator: int, *, caller: str) -> None:
        self._check_owner(caller)
        self._registry().set_protocol_fee_denominator(denominator, caller=self.address)

    @atomic
    def set_fee_authority(self, fee_authority: str, *, caller: str) -> None:
        """Hand the registry's fee authority role to another address."""
        self._check_owner(caller)
        self._registry().set_fee_authority(fee_authority, caller=self.address)

    # --- Pair parameters ---

    @atomic
    def set_swap_fee(self, pair: str, swap_fee: int, *, caller: str) -> None:
        self._check_owner(caller)
        self.at(pair, ReservePair).set_swap_fee(swap_fee, caller=self.address)

    @atomic
    def transfer_pair_ownership(self, pair: str, new_owner: str, *, caller: str) -> None:
        """Let ``new_owner`` set the swap fee of ``pair`` directly on the pair."""
        self._check_owner(caller)
        self.at(pair, ReservePair).transfer_pair_ownership(new_owner, caller=self.address)

    def _registry(self) -> PoolRegistry:
        return self.at(self.registry, PoolRegistry)

    def _check_owner(self, caller: str) -> None:
        if normalize_address(caller) != self.owner:
            raise Forbidden("DXswapFeeSetter: FORBIDDEN")
