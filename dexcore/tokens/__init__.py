"""Token contracts."""

from dexcore.tokens.erc20 import ERC20Token
from dexcore.tokens.weth import WrappedNativeToken

__all__ = ["ERC20Token", "WrappedNativeToken"]
