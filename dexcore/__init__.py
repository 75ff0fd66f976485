"""dexcore - constant-product AMM exchange engine with protocol fee settlement."""

from dexcore.amm import PoolRegistry, ReservePair, constant_product
from dexcore.chain import Ledger
from dexcore.deployment import BootstrapDeployer, Deployment, InitialPair
from dexcore.fees import FeeAuthority, FeeReceiver, HarvestReport

__version__ = "0.1.0"
__all__ = [
    "BootstrapDeployer",
    "Deployment",
    "FeeAuthority",
    "FeeReceiver",
    "HarvestReport",
    "InitialPair",
    "Ledger",
    "PoolRegistry",
    "ReservePair",
    "__version__",
    "constant_product",
]
