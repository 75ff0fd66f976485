"""Bootstrap Deployer: one-shot deployment of the whole protocol.

The deployer waits for its owner to fund it, then creates the registry, the
initial pairs, the fee receiver and the fee authority in a single atomic
call, wiring the registry's fee collector and fee authority roles on the
way. It is spent afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

import structlog

from dexcore.amm.pair import ReservePair
from dexcore.amm.registry import PoolRegistry
from dexcore.chain.contract import Contract, atomic
from dexcore.errors import CallerNotAuthorized, InvalidBootstrapValue, WrongState
from dexcore.fees.authority import FeeAuthority
from dexcore.fees.receiver import FeeReceiver
from dexcore.models.types import normalize_address

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dexcore.chain.ledger import Ledger

logger = structlog.get_logger()


class DeployerState(IntEnum):
    AWAITING_FUNDS = 0
    FUNDED = 1
    COMPLETED = 2


@dataclass(frozen=True)
class InitialPair:
    """A pair created during bootstrap, with its swap fee in basis points."""

    token_a: str
    token_b: str
    swap_fee_bps: int


@dataclass(frozen=True)
class Deployment:
    """Addresses produced by a bootstrap."""

    registry: str
    fee_receiver: str
    fee_authority: str
    pairs: tuple[str, ...]


class BootstrapDeployer(Contract):
    """State machine AWAITING_FUNDS -> FUNDED -> COMPLETED.

    Attributes:
        settlement_receiver: Receives the fee receiver's settlement currency
        owner: Funder of the bootstrap; owns the deployed fee authority and
            fee receiver and is the fee receiver's fallback receiver
        settlement_currency: Token the fee receiver settles into
        initial_pairs: Pairs to create, in order
        bootstrap_value: Exact funding required, or None for any positive value
    """

    def __init__(
        self,
        ledger: Ledger,
        address: str,
        creator: str,
        settlement_receiver: str,
        owner: str,
        settlement_currency: str,
        initial_pairs: Sequence[InitialPair] = (),
        bootstrap_value: int | None = None,
    ) -> None:
        super().__init__(ledger, address, creator)
        self.settlement_receiver = normalize_address(settlement_receiver)
        self.owner = normalize_address(owner)
        self.settlement_currency = normalize_address(settlement_currency)
        self.initial_pairs = tuple(initial_pairs)
        self.bootstrap_value = bootstrap_value
        self.state = DeployerState.AWAITING_FUNDS

    def receive(self, *, sender: str, value: int) -> None:
        """Funding from the owner moves the deployer to FUNDED.

        Raises:
            WrongState: Unless awaiting funds
            CallerNotAuthorized: If the sender is not the owner
            InvalidBootstrapValue: If the value does not match the required funding
        """
        if self.state != DeployerState.AWAITING_FUNDS:
            raise WrongState("DXswapDeployer: WRONG_DEPLOYER_STATE")
        if normalize_address(sender) != self.owner:
            raise CallerNotAuthorized("DXswapDeployer: CALLER_NOT_FEE_TO_SETTER")
        if value <= 0 or (self.bootstrap_value is not None and value != self.bootstrap_value):
            raise InvalidBootstrapValue(
                f"Bootstrap requires {self.bootstrap_value or 'a positive value'}, got {value}"
            )
        self.state = DeployerState.FUNDED
        logger.info("bootstrap_funded", deployer=self.address, value=value)

    @atomic
    def deploy(self, *, caller: str) -> Deployment:
        """Deploy and wire the protocol. Anyone may trigger it once funded.

        Raises:
            WrongState: Unless funded
        """
        if self.state != DeployerState.FUNDED:
            raise WrongState("DXswapDeployer: WRONG_DEPLOYER_STATE")

        registry = self.ledger.deploy(PoolRegistry, self.address, deployer=self.address)
        self.emit("ContractDeployed", kind="registry", address=registry.address)

        pairs = []
        for initial in self.initial_pairs:
            pair_address = registry.create_pair(
                initial.token_a, initial.token_b, caller=self.address
            )
            self.at(pair_address, ReservePair).set_swap_fee(
                initial.swap_fee_bps, caller=self.address
            )
            self.emit("ContractDeployed", kind="pair", address=pair_address)
            pairs.append(pair_address)

        fee_receiver = self.ledger.deploy(
            FeeReceiver,
            self.owner,
            registry.address,
            self.settlement_currency,
            self.settlement_receiver,
            self.owner,
            deployer=self.address,
        )
        registry.set_fee_collector(fee_receiver.address, caller=self.address)
        self.emit("ContractDeployed", kind="fee_receiver", address=fee_receiver.address)

        fee_authority = self.ledger.deploy(
            FeeAuthority, self.owner, registry.address, deployer=self.address
        )
        registry.set_fee_authority(fee_authority.address, caller=self.address)
        self.emit("ContractDeployed", kind="fee_authority", address=fee_authority.address)

        self.state = DeployerState.COMPLETED
        deployment = Deployment(
            registry=registry.address,
            fee_receiver=fee_receiver.address,
            fee_authority=fee_authority.address,
            pairs=tuple(pairs),
        )
        logger.info(
            "bootstrap_completed",
            deployer=self.address,
            registry=registry.address,
            pairs=len(pairs),
            caller=normalize_address(caller),
        )
        return deployment
