"""Clients for the deploy service, the identity registry and the fee locker"""

from launchpad.services.chain.interface import (
    AgentIdentity,
    ClaimReceipt,
    DeployClient,
    DeploySubmission,
    FeeClient,
    IdentityClient,
)

__all__ = [
    "AgentIdentity",
    "ClaimReceipt",
    "DeployClient",
    "DeploySubmission",
    "FeeClient",
    "IdentityClient",
]
