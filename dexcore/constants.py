"""Protocol constants for the dexcore exchange engine.

Centralizes numeric domains and fee parameters shared by the pair engine,
the registry and the fee receiver.
"""

# The zero address: burn target for locked liquidity and "unset" marker
ZERO_ADDRESS = "0x" + "00" * 20

UINT256_MAX = 2**256 - 1
UINT112_MAX = 2**112 - 1

# Block timestamps are stored modulo 2**32
TIMESTAMP_MODULUS = 2**32

# Fixed-point resolution of the UQ112.112 price accumulators
Q112 = 2**112

# Shares permanently locked at the zero address on the first deposit
MINIMUM_LIQUIDITY = 10**3

# Swap fees are expressed in basis points of this denominator
FEE_DENOMINATOR = 10_000

# 15 bps = 0.15%
DEFAULT_SWAP_FEE_BPS = 15

# 1000 bps = 10%
MAX_SWAP_FEE_BPS = 1_000

# Protocol takes 1 / (denominator + 1) of the fee growth in sqrt(k)
DEFAULT_PROTOCOL_FEE_DENOMINATOR = 9

# Denominator value that turns protocol fee collection off
PROTOCOL_FEE_DISABLED = 0

# Name and symbol of the pool share token
SHARE_TOKEN_NAME = "DXswap"
SHARE_TOKEN_SYMBOL = "DXS"
SHARE_TOKEN_DECIMALS = 18
