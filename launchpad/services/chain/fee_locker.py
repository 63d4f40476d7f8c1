"""
Fee-locker contract client.

Trading fees accrue in the locker keyed by ``(feeOwner, asset)``. Reads are
plain ``eth_call``; claims are signed with the platform key and sent from the
platform wallet, the locker pays out to ``feeOwner`` regardless of sender.
"""

import asyncio
from decimal import Decimal
from typing import Optional

import structlog
from eth_account import Account
from web3 import AsyncWeb3

from launchpad.config import settings
from launchpad.services.chain.interface import ClaimReceipt, FeeClient
from launchpad.services.error_handler import ErrorHandler
from launchpad.utils.amounts import WEI_DECIMALS, from_wei
from launchpad.utils.evm import to_checksum

FEE_LOCKER_ABI = [
    {
        "name": "availableFees",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "feeOwner", "type": "address"},
            {"name": "token", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "claim",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "feeOwner", "type": "address"},
            {"name": "token", "type": "address"},
        ],
        "outputs": [],
    },
]


class FeeLockerClient(FeeClient):
    def __init__(
        self,
        w3: Optional[AsyncWeb3] = None,
        locker_address: Optional[str] = None,
        private_key: Optional[str] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.logger = structlog.get_logger()
        self.error_handler = error_handler or ErrorHandler()
        self.w3 = w3 or AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(settings.RPC_URL))
        self.contract = self.w3.eth.contract(
            address=to_checksum(locker_address or settings.FEE_LOCKER_ADDRESS),
            abi=FEE_LOCKER_ABI,
        )
        self._private_key = private_key or settings.PLATFORM_PRIVATE_KEY
        self._account = Account.from_key(self._private_key) if self._private_key else None

    async def available_fees(self, asset: str, recipient: str) -> Decimal:
        raw = await self.contract.functions.availableFees(to_checksum(recipient), to_checksum(asset)).call()
        return from_wei(raw, WEI_DECIMALS)

    async def claim(self, asset: str, recipient: str) -> ClaimReceipt:
        if self._account is None:
            return ClaimReceipt(error="Platform signing key is not configured")

        attempt = 0
        while True:
            attempt += 1
            try:
                tx_hash, receipt = await self._send_claim(asset, recipient)
                break
            except Exception as e:
                if self.error_handler.is_transient(e) and self.error_handler.should_retry(attempt):
                    self.logger.warning(
                        "Fee claim transaction conflict, retrying",
                        asset=asset,
                        recipient=recipient,
                        attempt=attempt,
                        error=str(e),
                    )
                    await asyncio.sleep(self.error_handler.get_retry_delay(attempt))
                    continue
                self.logger.error("Fee claim transaction failed", asset=asset, recipient=recipient, error=str(e))
                return ClaimReceipt(error=str(e))

        tx_hex = self.w3.to_hex(tx_hash)
        if receipt["status"] != 1:
            self.logger.warning("Fee claim reverted", asset=asset, recipient=recipient, tx_hash=tx_hex)
            return ClaimReceipt(error=f"Claim transaction reverted: {tx_hex}")

        self.logger.info("Fee claim confirmed", asset=asset, recipient=recipient, tx_hash=tx_hex)
        return ClaimReceipt(tx_hash=tx_hex)

    async def _send_claim(self, asset: str, recipient: str):
        # Fresh nonce per attempt so a retried conflict picks up the next slot
        nonce = await self.w3.eth.get_transaction_count(self._account.address, "pending")
        tx = await self.contract.functions.claim(to_checksum(recipient), to_checksum(asset)).build_transaction(
            {
                "from": self._account.address,
                "nonce": nonce,
                "chainId": settings.CHAIN_ID,
            }
        )
        signed = self._account.sign_transaction(tx)
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=settings.TX_RECEIPT_TIMEOUT)
        return tx_hash, receipt
