"""
Agent identity checks against an ERC-8004 style registry.

With no registry configured (zero address) the launchpad runs in open mode:
every wallet is admitted with an unverified identity.
"""

from typing import Optional

import structlog
from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import AsyncWeb3

from launchpad.config import settings
from launchpad.services.chain.interface import AgentIdentity, IdentityClient
from launchpad.utils.evm import is_zero_address, same_address, to_checksum

logger = structlog.get_logger()

IDENTITY_REGISTRY_ABI = [
    {
        "name": "ownerOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "name": "tokenURI",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "string"}],
    },
]


class RegistryIdentityClient(IdentityClient):
    def __init__(self, w3: Optional[AsyncWeb3] = None, registry_address: Optional[str] = None):
        self.registry_address = registry_address or settings.IDENTITY_REGISTRY_ADDRESS
        self.contract = None
        if not self.open_mode:
            self.w3 = w3 or AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(settings.RPC_URL))
            self.contract = self.w3.eth.contract(address=to_checksum(self.registry_address), abi=IDENTITY_REGISTRY_ABI)

    @property
    def open_mode(self) -> bool:
        return is_zero_address(self.registry_address)

    async def verify_agent(self, wallet: str, agent_id: Optional[int] = None) -> Optional[AgentIdentity]:
        if self.open_mode:
            return AgentIdentity(agent_id=agent_id or 0, wallet=wallet, verified=False)

        if not agent_id:
            return None

        try:
            owner = await self.contract.functions.ownerOf(agent_id).call()
            if not same_address(owner, wallet):
                logger.info("Agent id not owned by wallet", agent_id=agent_id, wallet=wallet, owner=owner)
                return None
            uri = await self.contract.functions.tokenURI(agent_id).call()
        except Exception as e:
            # Unknown ids revert in ownerOf
            logger.warning("Identity registry lookup failed", agent_id=agent_id, wallet=wallet, error=str(e))
            return None

        return AgentIdentity(agent_id=agent_id, wallet=wallet, uri=uri, verified=True)


def verify_signature(message: str, signature: str, address: str) -> bool:
    """Check that ``signature`` is an EIP-191 personal signature of ``message`` by ``address``"""
    try:
        signer = Account.recover_message(encode_defunct(text=message), signature=signature)
    except Exception as e:
        logger.debug("Signature recovery failed", error=str(e))
        return False
    return same_address(signer, address)
