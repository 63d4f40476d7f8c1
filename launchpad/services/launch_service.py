"""
Launch orchestration.

A launch runs validate, rate limit, identity, allocation, deploy and persist in
that order. The per-requester lock is held from the rate-limit check until the
deployment record is written, so two concurrent launches from one wallet in
this process cannot both pass the cooldown.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import structlog

from launchpad.api.models import LaunchRequest
from launchpad.config import settings
from launchpad.services.chain.interface import DeployClient, IdentityClient
from launchpad.services.error_handler import ErrorHandler
from launchpad.services.rate_limiter import RateLimiter, RateLimitStatus
from launchpad.services.reward_allocation import RewardRecipient, compute_reward_allocation
from launchpad.services.token_store import TokenStore
from launchpad.services.validator import LaunchValidationResult, LaunchValidator
from launchpad.utils.amounts import BPS_DENOMINATOR
from launchpad.utils.exceptions import (
    DeploymentRejected,
    IdentityError,
    RateLimitError,
    ValidationError,
)
from launchpad.utils.locks import KeyedLocks

SECONDS_PER_DAY = 86400

POOL_TICK_IF_TOKEN0_IS_ISSUED = -230400
POOL_TICK_LOWER = -230400
POOL_TICK_UPPER = -120000
POOL_POSITION_BPS = 10000


@dataclass
class LaunchResult:
    name: str
    symbol: str
    token_address: str
    tx_hash: str
    rewards: List[RewardRecipient]
    warnings: List[str] = field(default_factory=list)


class LaunchService:
    def __init__(
        self,
        token_store: TokenStore,
        deploy_client: DeployClient,
        identity_client: IdentityClient,
        rate_limiter: Optional[RateLimiter] = None,
        validator: Optional[LaunchValidator] = None,
        error_handler: Optional[ErrorHandler] = None,
        platform_wallet: Optional[str] = None,
        platform_fee_bps: Optional[int] = None,
    ):
        self.logger = structlog.get_logger()
        self.token_store = token_store
        self.deploy_client = deploy_client
        self.identity_client = identity_client
        self.platform_wallet = platform_wallet or settings.PLATFORM_WALLET
        self.platform_fee_bps = platform_fee_bps if platform_fee_bps is not None else settings.PLATFORM_FEE_BPS
        self.rate_limiter = rate_limiter or RateLimiter(token_store)
        self.validator = validator or LaunchValidator(token_store, self.platform_fee_bps)
        self.error_handler = error_handler or ErrorHandler()
        self._requester_locks = KeyedLocks()

    def preview(self, request: LaunchRequest) -> LaunchValidationResult:
        """Dry run: validation plus a cooldown warning, nothing is deployed"""
        result = self.validator.validate(request)
        if result.valid:
            status = self.rate_limiter.check(request.requester)
            if not status.allowed:
                result.warnings.append(f"Rate limited: next launch in {status.cooldown}")
        return result

    def rate_limit_status(self, wallet: str) -> RateLimitStatus:
        return self.rate_limiter.check(wallet)

    async def launch(self, request: LaunchRequest) -> LaunchResult:
        """
        Deploy a token for the requester.

        Raises:
            ValidationError: request has blocking errors
            RateLimitError: requester launched within the cooldown window
            IdentityError: requester is not a recognised agent
            AllocationError: fee split cannot be allocated
            DeploymentRejected: deploy service refused the configuration
            DeploymentFault: deployment failed after submission
        """
        validation = await asyncio.to_thread(self.validator.validate, request)
        if not validation.valid:
            self.error_handler.handle_validation_error(
                ValidationError(validation.errors, validation.warnings),
                {"symbol": request.symbol, "requester": request.requester},
            )
            raise ValidationError(validation.errors, validation.warnings)

        async with self._requester_locks.hold(request.requester.lower()):
            status = await asyncio.to_thread(self.rate_limiter.check, request.requester)
            if not status.allowed:
                self.logger.info(
                    "Launch rate limited",
                    requester=request.requester,
                    remaining_ms=status.remaining_ms,
                )
                raise RateLimitError(status.next_allowed_at, status.remaining_ms, status.cooldown)

            identity = await self.identity_client.verify_agent(request.requester, request.agent_id)
            if identity is None:
                raise IdentityError("Wallet is not a registered agent")

            rewards = compute_reward_allocation(request, self.platform_wallet, self.platform_fee_bps)
            config = self.build_deploy_config(request, rewards)

            token_address, tx_hash = await self._deploy(config, request)

            try:
                await asyncio.to_thread(
                    self.token_store.insert_token,
                    name=request.name,
                    symbol=request.symbol.upper(),
                    token_address=token_address,
                    tx_hash=tx_hash,
                    requester_address=request.requester,
                    requester_bps=BPS_DENOMINATOR - self.platform_fee_bps,
                    platform_bps=self.platform_fee_bps,
                    vault_percentage=request.vault.percentage if request.vault else 0,
                    description=request.description,
                    image=request.image,
                    website=request.website,
                    twitter=request.twitter,
                )
            except Exception as e:
                # The token is live on chain at this point; keep enough to backfill the record
                self.logger.critical(
                    "Deployed token could not be recorded",
                    token_address=token_address,
                    tx_hash=tx_hash,
                    requester=request.requester,
                    error=str(e),
                )
                raise

        self.logger.info(
            "Token launched",
            token_address=token_address,
            tx_hash=tx_hash,
            symbol=request.symbol.upper(),
            requester=request.requester,
            agent_verified=identity.verified,
        )
        return LaunchResult(
            name=request.name,
            symbol=request.symbol.upper(),
            token_address=token_address,
            tx_hash=tx_hash,
            rewards=rewards,
            warnings=validation.warnings,
        )

    async def _deploy(self, config: Dict[str, Any], request: LaunchRequest):
        context = {"symbol": config["symbol"], "requester": request.requester}
        try:
            submission = await self.deploy_client.deploy(config)
        except Exception as e:
            raise self.error_handler.classify_deploy_failure(e, context) from e

        if submission.error:
            self.logger.warning("Deployment rejected", error=submission.error, **context)
            raise DeploymentRejected("Deployment rejected")

        try:
            receipt = await submission.wait_for_transaction()
        except Exception as e:
            raise self.error_handler.classify_deploy_failure(e, {**context, "tx_hash": submission.tx_hash}) from e

        address = receipt.get("address") if receipt else None
        if not address:
            raise self.error_handler.classify_deploy_failure(
                RuntimeError("Deployment receipt has no token address"), {**context, "tx_hash": submission.tx_hash}
            )
        return address, submission.tx_hash

    def build_deploy_config(self, request: LaunchRequest, rewards: List[RewardRecipient]) -> Dict[str, Any]:
        trading_fee_bps = settings.DEFAULT_TRADING_FEE_BPS
        if request.fees is not None and request.fees.bps is not None:
            trading_fee_bps = request.fees.bps

        social_media_urls = []
        if request.twitter:
            social_media_urls.append({"platform": "x", "url": f"https://x.com/{request.twitter.replace('@', '')}"})
        if request.website:
            social_media_urls.append({"platform": "website", "url": request.website})

        now_ms = int(time.time() * 1000)
        config: Dict[str, Any] = {
            "name": request.name,
            "symbol": request.symbol.upper(),
            "token_admin": self.platform_wallet,
            "metadata": {
                "description": request.description or f"Deployed by {settings.PLATFORM_NAME} agent launchpad",
                "social_media_urls": social_media_urls,
            },
            "pool": {
                "paired_token": settings.PAIRED_TOKEN_ADDRESS,
                "tick_if_token0_is_issued": POOL_TICK_IF_TOKEN0_IS_ISSUED,
                "positions": [
                    {
                        "tick_lower": POOL_TICK_LOWER,
                        "tick_upper": POOL_TICK_UPPER,
                        "position_bps": POOL_POSITION_BPS,
                    }
                ],
            },
            "fees": {"type": "static", "issued_fee": trading_fee_bps, "paired_fee": trading_fee_bps},
            "rewards": {"recipients": [r.to_deploy_dict() for r in rewards]},
            "context": {
                "interface": settings.PLATFORM_NAME,
                "platform": settings.PLATFORM_NAME,
                "message_id": f"lp-{now_ms}",
                "id": f"{request.symbol.lower()}-{now_ms}",
            },
            "vanity": True,
        }

        if request.image:
            config["image"] = request.image

        if request.vault is not None and request.vault.percentage > 0:
            config["vault"] = {
                "percentage": request.vault.percentage,
                "lockup_duration": request.vault.lockup_days * SECONDS_PER_DAY,
                "vesting_duration": (request.vault.vesting_days or 0) * SECONDS_PER_DAY,
            }

        if request.initial_buy is not None and request.initial_buy > 0:
            config["dev_buy"] = {"eth_amount": str(request.initial_buy)}

        return config
