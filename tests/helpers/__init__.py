"""Test helpers module for shared test utilities.

- constants: Accounts and common amounts
- factories: Token, pair and liquidity helpers
- contracts: Test-only contracts (flash borrower, fee-on-transfer token)
- reference: Independent formulas for expected values
"""

from tests.helpers.constants import (
    DXDAO,
    FALLBACK_RECEIVER,
    FEE_COLLECTOR,
    OTHER,
    ROUND_EXCEPTION,
    SETTLEMENT_RECEIVER,
    WALLET,
    expand_to_18,
)
from tests.helpers.factories import (
    add_liquidity,
    create_pair,
    deploy_token,
    pair_tokens,
    remove_liquidity,
    swap_exact_in,
)

__all__ = [
    # Constants
    "WALLET",
    "OTHER",
    "FEE_COLLECTOR",
    "DXDAO",
    "SETTLEMENT_RECEIVER",
    "FALLBACK_RECEIVER",
    "ROUND_EXCEPTION",
    "expand_to_18",
    # Factories
    "deploy_token",
    "create_pair",
    "pair_tokens",
    "add_liquidity",
    "remove_liquidity",
    "swap_exact_in",
]
