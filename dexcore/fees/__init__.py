"""Protocol fee governance and collection."""

from dexcore.fees.authority import FeeAuthority
from dexcore.fees.receiver import FeeReceiver, HarvestReport

__all__ = ["FeeAuthority", "FeeReceiver", "HarvestReport"]
