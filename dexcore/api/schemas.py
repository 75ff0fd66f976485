"""Pydantic models for the inspection and quoting API."""

from typing import Self

from pydantic import BaseModel, Field, model_validator

from dexcore.models.types import Address, Uint256


class PairView(BaseModel):
    """Current state of a Reserve Pair."""

    address: Address
    registry: Address
    token0: Address
    token1: Address
    reserve0: Uint256
    reserve1: Uint256
    total_supply: Uint256 = Field(alias="totalSupply")
    swap_fee_bps: int = Field(alias="swapFeeBps", ge=0, le=1000)
    k_last: Uint256 = Field(alias="kLast")
    price0_cumulative_last: Uint256 = Field(alias="price0CumulativeLast")
    price1_cumulative_last: Uint256 = Field(alias="price1CumulativeLast")
    block_timestamp_last: int = Field(alias="blockTimestampLast")
    pair_owner: Address = Field(alias="pairOwner")

    model_config = {"populate_by_name": True}


class RegistryView(BaseModel):
    """Fee parameters and pairs of a Pool Registry."""

    address: Address
    fee_authority: Address = Field(alias="feeAuthority")
    fee_collector: Address = Field(alias="feeCollector")
    protocol_fee_denominator: int = Field(alias="protocolFeeDenominator")
    pairs: list[Address]

    model_config = {"populate_by_name": True}


class QuoteRequest(BaseModel):
    """Multi-hop quote along a token path.

    Exactly one of ``amountIn`` (exact input) or ``amountOut`` (exact
    output) must be given.
    """

    registry: Address
    path: list[Address] = Field(min_length=2)
    amount_in: Uint256 | None = Field(default=None, alias="amountIn")
    amount_out: Uint256 | None = Field(default=None, alias="amountOut")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def check_one_amount(self) -> Self:
        if (self.amount_in is None) == (self.amount_out is None):
            raise ValueError("Provide exactly one of amountIn or amountOut")
        return self


class QuoteResponse(BaseModel):
    """Amounts at every hop of the path, input first."""

    path: list[Address]
    amounts: list[Uint256]
