"""Factory functions for deploying and funding test contracts.

Usage:
    from tests.helpers import deploy_token, add_liquidity

    token = deploy_token(ledger, "TKA")
    add_liquidity(pair, expand_to_18(5), expand_to_18(10))
"""

from dexcore.amm.library import constant_product
from dexcore.amm.pair import ReservePair
from dexcore.amm.registry import PoolRegistry
from dexcore.chain.ledger import Ledger
from dexcore.tokens.erc20 import ERC20Token
from tests.helpers.constants import TOKEN_SUPPLY, WALLET


def deploy_token(
    ledger: Ledger,
    symbol: str,
    supply: int = TOKEN_SUPPLY,
    holder: str = WALLET,
) -> ERC20Token:
    """Deploy an 18-decimal token with the whole supply held by ``holder``."""
    return ledger.deploy(
        ERC20Token,
        f"Token {symbol}",
        symbol,
        18,
        supply,
        holder,
        deployer=holder,
    )


def create_pair(registry: PoolRegistry, token_a: str, token_b: str) -> ReservePair:
    address = registry.create_pair(token_a, token_b, caller=WALLET)
    return registry.ledger.contract_at(address, ReservePair)


def pair_tokens(pair: ReservePair) -> tuple[ERC20Token, ERC20Token]:
    """(token0, token1) contracts of a pair."""
    return (
        pair.ledger.contract_at(pair.token0, ERC20Token),
        pair.ledger.contract_at(pair.token1, ERC20Token),
    )


def add_liquidity(
    pair: ReservePair,
    amount0: int,
    amount1: int,
    to: str = WALLET,
    sender: str = WALLET,
) -> int:
    """Transfer both amounts into the pair and mint; returns the shares minted."""
    token0, token1 = pair_tokens(pair)
    token0.transfer(pair.address, amount0, caller=sender)
    token1.transfer(pair.address, amount1, caller=sender)
    return pair.mint(to, caller=sender)


def swap_exact_in(pair: ReservePair, token_in: str, amount_in: int, sender: str = WALLET) -> int:
    """Sell ``amount_in`` of ``token_in`` at the best price the pair allows."""
    reserve0, reserve1, _ = pair.get_reserves()
    zero_for_one = token_in == pair.token0
    reserve_in, reserve_out = (reserve0, reserve1) if zero_for_one else (reserve1, reserve0)
    amount_out = constant_product.get_amount_out(amount_in, reserve_in, reserve_out, pair.swap_fee)

    pair.ledger.contract_at(token_in, ERC20Token).transfer(pair.address, amount_in, caller=sender)
    if zero_for_one:
        pair.swap(0, amount_out, sender, caller=sender)
    else:
        pair.swap(amount_out, 0, sender, caller=sender)
    return amount_out


def remove_liquidity(pair: ReservePair, shares: int, to: str = WALLET, sender: str = WALLET):
    pair.transfer(pair.address, shares, caller=sender)
    return pair.burn(to, caller=sender)
