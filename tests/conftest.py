"""Pytest configuration and fixtures."""

import pytest

from dexcore.amm.pair import ReservePair
from dexcore.amm.registry import PoolRegistry
from dexcore.chain.ledger import Ledger
from dexcore.tokens.erc20 import ERC20Token
from dexcore.tokens.weth import WrappedNativeToken
from tests.helpers import WALLET, create_pair, deploy_token, expand_to_18, pair_tokens


@pytest.fixture
def ledger() -> Ledger:
    """Fresh ledger at the default genesis timestamp."""
    return Ledger()


@pytest.fixture
def token_a(ledger: Ledger) -> ERC20Token:
    return deploy_token(ledger, "TKA")


@pytest.fixture
def token_b(ledger: Ledger) -> ERC20Token:
    return deploy_token(ledger, "TKB")


@pytest.fixture
def weth(ledger: Ledger) -> WrappedNativeToken:
    """Wrapped native token with 1000 units wrapped by WALLET."""
    token = ledger.deploy(WrappedNativeToken, deployer=WALLET)
    ledger.mint_native(WALLET, expand_to_18(1000))
    token.deposit(expand_to_18(1000), caller=WALLET)
    return token


@pytest.fixture
def registry(ledger: Ledger) -> PoolRegistry:
    """Registry whose fee authority is WALLET."""
    return ledger.deploy(PoolRegistry, WALLET, deployer=WALLET)


@pytest.fixture
def pair(registry: PoolRegistry, token_a: ERC20Token, token_b: ERC20Token) -> ReservePair:
    return create_pair(registry, token_a.address, token_b.address)


@pytest.fixture
def token0(pair: ReservePair) -> ERC20Token:
    return pair_tokens(pair)[0]


@pytest.fixture
def token1(pair: ReservePair) -> ERC20Token:
    return pair_tokens(pair)[1]
