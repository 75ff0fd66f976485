"""One-shot protocol bootstrap."""

from dexcore.deployment.bootstrap import (
    BootstrapDeployer,
    Deployment,
    DeployerState,
    InitialPair,
)

__all__ = ["BootstrapDeployer", "DeployerState", "Deployment", "InitialPair"]
