"""Tests for protocol fee accrual on liquidity events."""

import pytest

from dexcore.amm.pair import ReservePair
from dexcore.amm.registry import PoolRegistry
from dexcore.constants import MINIMUM_LIQUIDITY, ZERO_ADDRESS
from dexcore.tokens.erc20 import ERC20Token
from tests.helpers import (
    FEE_COLLECTOR,
    ROUND_EXCEPTION,
    WALLET,
    add_liquidity,
    expand_to_18,
    remove_liquidity,
    swap_exact_in,
)
from tests.helpers.reference import pending_protocol_fee


def _swap_token1_in(pair: ReservePair, token1: ERC20Token) -> None:
    """1 token1 in, 996006981039903216 token0 out from a 1000/1000 pool."""
    token1.transfer(pair.address, expand_to_18(1), caller=WALLET)
    pair.swap(996006981039903216, 0, WALLET, caller=WALLET)


class TestFeeCollectionOff:
    def test_fee_to_off(self, pair: ReservePair, token1: ERC20Token):
        """Without a fee collector all fee growth stays with liquidity providers."""
        token_amount = expand_to_18(1000)
        add_liquidity(pair, token_amount, token_amount)
        expected_liquidity = expand_to_18(1000)

        _swap_token1_in(pair, token1)
        remove_liquidity(pair, expected_liquidity - MINIMUM_LIQUIDITY)

        assert pair.total_supply == MINIMUM_LIQUIDITY
        assert pair.k_last == 0

    def test_zero_denominator_disables_collection(
        self, pair: ReservePair, registry: PoolRegistry, token1: ERC20Token
    ):
        registry.set_fee_collector(FEE_COLLECTOR, caller=WALLET)
        registry.set_protocol_fee_denominator(0, caller=WALLET)
        add_liquidity(pair, expand_to_18(1000), expand_to_18(1000))

        _swap_token1_in(pair, token1)
        remove_liquidity(pair, expand_to_18(1000) - MINIMUM_LIQUIDITY)

        assert pair.balance_of(FEE_COLLECTOR) == 0
        assert pair.total_supply == MINIMUM_LIQUIDITY
        assert pair.k_last == 0

    def test_turning_collection_off_clears_k_last(
        self, pair: ReservePair, registry: PoolRegistry
    ):
        registry.set_fee_collector(FEE_COLLECTOR, caller=WALLET)
        add_liquidity(pair, expand_to_18(5), expand_to_18(10))
        assert pair.k_last == expand_to_18(5) * expand_to_18(10)

        registry.set_fee_collector(ZERO_ADDRESS, caller=WALLET)
        add_liquidity(pair, expand_to_18(5), expand_to_18(10))
        assert pair.k_last == 0

    def test_swaps_only_do_not_mint_fees(self, pair: ReservePair, registry: PoolRegistry):
        """Fee shares are minted lazily, on the next mint or burn."""
        registry.set_fee_collector(FEE_COLLECTOR, caller=WALLET)
        add_liquidity(pair, expand_to_18(5), expand_to_18(10))
        supply = pair.total_supply

        swap_exact_in(pair, pair.token0, expand_to_18(1))
        swap_exact_in(pair, pair.token1, expand_to_18(1))

        assert pair.total_supply == supply
        assert pair.balance_of(FEE_COLLECTOR) == 0
        assert pending_protocol_fee(pair, registry) > 0


class TestFeeCollectionOn:
    def test_fee_to_on(
        self,
        pair: ReservePair,
        registry: PoolRegistry,
        token0: ERC20Token,
        token1: ERC20Token,
    ):
        """At the default denominator the collector receives 1/10 of fee growth."""
        registry.set_fee_collector(FEE_COLLECTOR, caller=WALLET)
        token_amount = expand_to_18(1000)
        add_liquidity(pair, token_amount, token_amount)
        expected_liquidity = expand_to_18(1000)

        _swap_token1_in(pair, token1)
        remove_liquidity(pair, expected_liquidity - MINIMUM_LIQUIDITY)

        assert pair.balance_of(FEE_COLLECTOR) == 149850284580759
        assert pair.total_supply == MINIMUM_LIQUIDITY + 149850284580759
        # Pool tokens backing the locked and fee shares
        assert token0.balance_of(pair.address) == 1000 + 149701010218466
        assert token1.balance_of(pair.address) == 1000 + 150000112387782

    def test_custom_denominator(
        self, pair: ReservePair, registry: PoolRegistry, token1: ERC20Token
    ):
        """Denominator 11 gives the collector 1/12 of fee growth."""
        registry.set_fee_collector(FEE_COLLECTOR, caller=WALLET)
        registry.set_protocol_fee_denominator(11, caller=WALLET)
        token_amount = expand_to_18(1000)
        add_liquidity(pair, token_amount, token_amount)

        _swap_token1_in(pair, token1)
        expected = pending_protocol_fee(pair, registry)
        remove_liquidity(pair, expand_to_18(1000) - MINIMUM_LIQUIDITY)

        fee_shares = pair.balance_of(FEE_COLLECTOR)
        assert fee_shares == expected
        assert abs(fee_shares - 124875234033868) <= ROUND_EXCEPTION

    def test_fee_shares_match_closed_form(self, pair: ReservePair, registry: PoolRegistry):
        """Fee shares minted on the next deposit equal the closed-form expectation."""
        registry.set_fee_collector(FEE_COLLECTOR, caller=WALLET)
        add_liquidity(pair, expand_to_18(5), expand_to_18(10))

        swap_exact_in(pair, pair.token0, expand_to_18(1))
        swap_exact_in(pair, pair.token1, expand_to_18(1))
        expected = pending_protocol_fee(pair, registry)
        add_liquidity(pair, expand_to_18(5), expand_to_18(10))

        assert expected > 0
        assert abs(pair.balance_of(FEE_COLLECTOR) - expected) <= ROUND_EXCEPTION

    def test_k_last_tracks_reserves(self, pair: ReservePair, registry: PoolRegistry):
        registry.set_fee_collector(FEE_COLLECTOR, caller=WALLET)
        add_liquidity(pair, expand_to_18(5), expand_to_18(10))
        swap_exact_in(pair, pair.token0, expand_to_18(1))
        shares = pair.balance_of(WALLET) // 2
        remove_liquidity(pair, shares)

        reserve0, reserve1, _ = pair.get_reserves()
        assert pair.k_last == reserve0 * reserve1

    def test_second_event_without_growth_mints_nothing(
        self, pair: ReservePair, registry: PoolRegistry
    ):
        registry.set_fee_collector(FEE_COLLECTOR, caller=WALLET)
        add_liquidity(pair, expand_to_18(5), expand_to_18(10))
        swap_exact_in(pair, pair.token0, expand_to_18(1))
        add_liquidity(pair, expand_to_18(1), expand_to_18(1))
        collected = pair.balance_of(FEE_COLLECTOR)
        assert collected > 0

        add_liquidity(pair, expand_to_18(1), expand_to_18(1))
        assert pair.balance_of(FEE_COLLECTOR) == collected


@pytest.mark.parametrize("denominator", [1, 5, 9, 20])
def test_fee_share_grows_as_denominator_shrinks(
    pair: ReservePair, registry: PoolRegistry, token1: ERC20Token, denominator: int
):
    registry.set_fee_collector(FEE_COLLECTOR, caller=WALLET)
    registry.set_protocol_fee_denominator(denominator, caller=WALLET)
    add_liquidity(pair, expand_to_18(1000), expand_to_18(1000))
    _swap_token1_in(pair, token1)
    expected = pending_protocol_fee(pair, registry)
    remove_liquidity(pair, expand_to_18(1000) - MINIMUM_LIQUIDITY)

    assert pair.balance_of(FEE_COLLECTOR) == expected
    # Roughly 1 / (denominator + 1) of the growth in sqrt(k), in shares
    assert expected * (denominator + 1) == pytest.approx(149850284580759 * 10, rel=1e-3)
