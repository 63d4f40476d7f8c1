"""
Fee claim engine.

Claims walk both revenue recipients (platform first, then the requester when
it is a different wallet) across both fee-bearing assets (the issued token and
the paired asset). Claim transactions share one signing key, so every
submission goes through a single ``ClaimSigner``.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

import structlog

from launchpad.config import settings
from launchpad.services.chain.interface import ClaimReceipt, FeeClient
from launchpad.services.error_handler import ErrorHandler
from launchpad.services.token_store import TokenStore
from launchpad.utils.amounts import ZERO, to_decimal
from launchpad.utils.evm import same_address
from launchpad.utils.exceptions import TokenNotFoundError
from launchpad.utils.locks import KeyedLocks
from launchpad.utils.timeutils import isoformat_utc


class ClaimSigner:
    """Serializes claim submissions so at most one is in flight"""

    def __init__(self, fee_client: FeeClient):
        self.fee_client = fee_client
        self._lock = asyncio.Lock()

    async def submit(self, asset: str, recipient: str) -> ClaimReceipt:
        async with self._lock:
            return await self.fee_client.claim(asset, recipient)


@dataclass
class FeeClaimResult:
    token_address: str
    tx_hash: str
    tx_hashes: List[str]
    paired_claimed: Decimal
    token_claimed: Decimal
    claimed_at: datetime

    def to_dict(self) -> dict:
        return {
            "token_address": self.token_address,
            "tx_hash": self.tx_hash,
            "tx_hashes": list(self.tx_hashes),
            "paired_claimed": self.paired_claimed,
            "token_claimed": self.token_claimed,
            "claimed_at": isoformat_utc(self.claimed_at),
        }


@dataclass
class ClaimAllResult:
    claimed: List[FeeClaimResult] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "claimed": [c.to_dict() for c in self.claimed],
            "skipped": list(self.skipped),
            "errors": list(self.errors),
        }


@dataclass
class RecipientFees:
    wallet: str
    paired_amount: Decimal = ZERO
    token_amount: Decimal = ZERO

    @property
    def has_fees(self) -> bool:
        return self.paired_amount > 0 or self.token_amount > 0

    def to_dict(self) -> dict:
        return {"wallet": self.wallet, "paired_amount": self.paired_amount, "token_amount": self.token_amount}


@dataclass
class FeeCheck:
    token_address: str
    platform: RecipientFees
    client: Optional[RecipientFees] = None

    @property
    def available(self) -> bool:
        return self.platform.has_fees or (self.client is not None and self.client.has_fees)

    def to_dict(self) -> dict:
        return {
            "token_address": self.token_address,
            "available": self.available,
            "platform": self.platform.to_dict(),
            "client": self.client.to_dict() if self.client else None,
        }


class FeeClaimEngine:
    def __init__(
        self,
        token_store: TokenStore,
        fee_client: FeeClient,
        signer: Optional[ClaimSigner] = None,
        platform_wallet: Optional[str] = None,
        paired_asset: Optional[str] = None,
        error_handler: Optional[ErrorHandler] = None,
        fee_cache=None,
    ):
        self.logger = structlog.get_logger()
        self.token_store = token_store
        self.fee_client = fee_client
        self.signer = signer or ClaimSigner(fee_client)
        self.platform_wallet = platform_wallet or settings.PLATFORM_WALLET
        self.paired_asset = paired_asset or settings.PAIRED_TOKEN_ADDRESS
        self.error_handler = error_handler or ErrorHandler()
        self.fee_cache = fee_cache
        self._token_locks = KeyedLocks()

    def _recipients(self, token) -> List[str]:
        recipients = [self.platform_wallet]
        if token.requester_address and not same_address(token.requester_address, self.platform_wallet):
            recipients.append(token.requester_address)
        return recipients

    async def _require_token(self, token_address: str):
        token = await asyncio.to_thread(self.token_store.get_token_by_address, token_address)
        if token is None:
            raise TokenNotFoundError(f"Token {token_address} is not tracked")
        return token

    async def _lookup(self, asset: str, recipient: str, token_address: str) -> Decimal:
        try:
            return to_decimal(await self.fee_client.available_fees(asset, recipient))
        except Exception as e:
            self.logger.warning(
                "Fee lookup failed",
                token_address=token_address,
                asset=asset,
                recipient=recipient,
                error=str(e),
            )
            return ZERO

    async def check_fees(self, token_address: str) -> FeeCheck:
        """Live claimable amounts for both recipients on both assets; nothing is claimed"""
        token = await self._require_token(token_address)
        issued_asset = token.token_address

        amounts = []
        for recipient in self._recipients(token):
            token_amount, paired_amount = await asyncio.gather(
                self._lookup(issued_asset, recipient, issued_asset),
                self._lookup(self.paired_asset, recipient, issued_asset),
            )
            amounts.append(RecipientFees(wallet=recipient, paired_amount=paired_amount, token_amount=token_amount))

        return FeeCheck(
            token_address=issued_asset,
            platform=amounts[0],
            client=amounts[1] if len(amounts) > 1 else None,
        )

    async def claim_one(self, token_address: str) -> Optional[FeeClaimResult]:
        """
        Claim everything claimable for one token.

        Returns:
            The claim summary, or None if nothing was claimable or every claim
            attempt failed

        Raises:
            TokenNotFoundError: if the token is not tracked
        """
        token = await self._require_token(token_address)
        issued_asset = token.token_address

        async with self._token_locks.hold(issued_asset.lower()):
            tx_hashes: List[str] = []
            claimed = {issued_asset: ZERO, self.paired_asset: ZERO}

            for recipient in self._recipients(token):
                for asset in (issued_asset, self.paired_asset):
                    available = await self._lookup(asset, recipient, issued_asset)
                    if available <= 0:
                        continue

                    try:
                        receipt = await self.signer.submit(asset, recipient)
                    except Exception as e:
                        self.logger.error(
                            "Fee claim failed",
                            token_address=issued_asset,
                            asset=asset,
                            recipient=recipient,
                            error=str(e),
                        )
                        continue

                    if not receipt.ok:
                        self.logger.error(
                            "Fee claim rejected",
                            token_address=issued_asset,
                            asset=asset,
                            recipient=recipient,
                            error=receipt.error,
                        )
                        continue

                    tx_hashes.append(receipt.tx_hash)
                    claimed[asset] += available

            if not tx_hashes:
                self.logger.debug("Nothing to claim", token_address=issued_asset)
                return None

            claim = await asyncio.to_thread(
                self.token_store.record_fee_claim,
                issued_asset,
                tx_hashes[0],
                paired_claimed=claimed[self.paired_asset],
                token_claimed=claimed[issued_asset],
            )

        if self.fee_cache is not None:
            self.fee_cache.invalidate()

        return FeeClaimResult(
            token_address=issued_asset,
            tx_hash=tx_hashes[0],
            tx_hashes=tx_hashes,
            paired_claimed=claimed[self.paired_asset],
            token_claimed=claimed[issued_asset],
            claimed_at=claim.claimed_at,
        )

    async def claim_all(self) -> ClaimAllResult:
        """Claim every active token in turn; one token's failure never stops the pass"""
        result = ClaimAllResult()

        for token in await asyncio.to_thread(self.token_store.list_active_tokens):
            address = token.token_address
            try:
                claim = await self.claim_one(address)
            except Exception as e:
                self.logger.error("Token claim failed", token_address=address, error=str(e))
                result.errors.append({"address": address, "error": self.error_handler.sanitize(e)})
                continue

            if claim is None:
                result.skipped.append(address)
            else:
                result.claimed.append(claim)

        self.logger.info(
            "Claim pass finished",
            claimed=len(result.claimed),
            skipped=len(result.skipped),
            errors=len(result.errors),
        )
        return result
