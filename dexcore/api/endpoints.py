"""API endpoints for inspecting pairs and quoting swaps."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from dexcore.amm.library import constant_product
from dexcore.amm.pair import ReservePair
from dexcore.amm.registry import PoolRegistry
from dexcore.api.schemas import PairView, QuoteRequest, QuoteResponse, RegistryView
from dexcore.chain.ledger import Ledger

logger = structlog.get_logger()

router = APIRouter()


def get_ledger(request: Request) -> Ledger:
    """Dependency provider for the ledger.

    The process embedding the API owns the ledger and attaches it with
    ``app.state.ledger = ledger`` (``dexcore.api.main.serve`` does this).
    Override this in tests to inject a populated ledger:
        app.dependency_overrides[get_ledger] = lambda: ledger

    Returns:
        The ledger the API reads from.

    Raises:
        HTTPException: 503 if no ledger has been attached
    """
    ledger = getattr(request.app.state, "ledger", None)
    if ledger is None:
        raise HTTPException(status_code=503, detail="No ledger attached to the service")
    return ledger


@router.get("/registries/{address}/pairs")
def get_registry(address: str, ledger: Ledger = Depends(get_ledger)) -> RegistryView:
    """Fee parameters of a registry and every pair it created, in creation order."""
    registry = ledger.contract_at(address, PoolRegistry)
    return RegistryView(
        address=registry.address,
        fee_authority=registry.fee_authority,
        fee_collector=registry.fee_collector,
        protocol_fee_denominator=registry.protocol_fee_denominator,
        pairs=list(registry.all_pairs),
    )


@router.get("/pairs/{address}")
def get_pair(address: str, ledger: Ledger = Depends(get_ledger)) -> PairView:
    pair = ledger.contract_at(address, ReservePair)
    reserve0, reserve1, block_timestamp_last = pair.get_reserves()
    return PairView(
        address=pair.address,
        registry=pair.factory,
        token0=pair.token0,
        token1=pair.token1,
        reserve0=reserve0,
        reserve1=reserve1,
        total_supply=pair.total_supply,
        swap_fee_bps=pair.swap_fee,
        k_last=pair.k_last,
        price0_cumulative_last=pair.price0_cumulative_last,
        price1_cumulative_last=pair.price1_cumulative_last,
        block_timestamp_last=block_timestamp_last,
        pair_owner=pair.pair_owner,
    )


@router.post("/quote")
def quote(request: QuoteRequest, ledger: Ledger = Depends(get_ledger)) -> QuoteResponse:
    """Quote an exact-input or exact-output swap along ``path``.

    Error Handling:
        - Unknown registry or missing pair on the path: 404
        - Empty reserves or unreachable output: 422 with the protocol error name
    """
    registry = ledger.contract_at(request.registry, PoolRegistry)
    if request.amount_in is not None:
        amounts = constant_product.get_amounts_out(
            ledger, registry.address, int(request.amount_in), request.path
        )
    elif request.amount_out is not None:
        amounts = constant_product.get_amounts_in(
            ledger, registry.address, int(request.amount_out), request.path
        )
    else:
        raise HTTPException(status_code=422, detail="Provide exactly one of amountIn or amountOut")
    logger.debug("quote_served", registry=registry.address, hops=len(request.path) - 1)
    return QuoteResponse(path=request.path, amounts=[str(a) for a in amounts])
