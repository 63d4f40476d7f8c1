from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, Optional


@dataclass
class AgentIdentity:
    agent_id: int
    wallet: str
    uri: str = ""
    verified: bool = False


@dataclass
class DeploySubmission:
    """
    Result of handing a configuration to the deploy service.

    Either ``error`` is set (the service rejected the config before anything
    reached the chain) or ``tx_hash`` is set and ``wait_for_transaction`` can be
    awaited for the deployed address.
    """

    tx_hash: Optional[str] = None
    error: Optional[str] = None
    waiter: Optional[Callable[[], Awaitable[Dict[str, Any]]]] = None

    async def wait_for_transaction(self) -> Dict[str, Any]:
        if self.waiter is None:
            raise RuntimeError("Deployment was not submitted")
        return await self.waiter()


@dataclass
class ClaimReceipt:
    tx_hash: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.tx_hash is not None


class DeployClient(ABC):
    """Submits token deployments and reports their outcome"""

    @abstractmethod
    async def deploy(self, config: Dict[str, Any]) -> DeploySubmission:
        raise NotImplementedError


class IdentityClient(ABC):
    """Looks up agent identity for a requester wallet"""

    @abstractmethod
    async def verify_agent(self, wallet: str, agent_id: Optional[int] = None) -> Optional[AgentIdentity]:
        """Return the identity, or None if the wallet is not allowed to launch"""
        raise NotImplementedError


class FeeClient(ABC):
    """Reads and withdraws accrued trading fees held for a recipient"""

    @abstractmethod
    async def available_fees(self, asset: str, recipient: str) -> Decimal:
        """Claimable amount of ``asset`` for ``recipient``, in whole units"""
        raise NotImplementedError

    @abstractmethod
    async def claim(self, asset: str, recipient: str) -> ClaimReceipt:
        raise NotImplementedError
