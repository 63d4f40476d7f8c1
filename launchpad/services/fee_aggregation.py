"""
Platform-wide fee aggregation with a short-lived in-memory snapshot.

Every active token needs one or two live fee-locker reads, which is too slow
to do per request. The snapshot is rebuilt at most once per TTL; concurrent
callers that find it stale wait on the same rebuild instead of starting
their own.
"""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Optional

import structlog

from launchpad.config import settings
from launchpad.services.chain.interface import FeeClient
from launchpad.services.token_store import TokenStore
from launchpad.utils.amounts import ZERO, to_decimal
from launchpad.utils.evm import same_address
from launchpad.utils.timeutils import isoformat_utc, utcnow

logger = structlog.get_logger()


@dataclass
class LookupOutcome:
    """A fee-locker read that either produced an amount or failed"""

    amount: Optional[Decimal] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or_zero(self) -> Decimal:
        return self.amount if self.ok and self.amount is not None else ZERO


@dataclass
class TokenFeeBreakdown:
    token_address: str
    symbol: str
    platform_amount: Decimal = ZERO
    client_amount: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.platform_amount + self.client_amount

    def to_dict(self) -> dict:
        return {
            "token_address": self.token_address,
            "symbol": self.symbol,
            "platform_amount": self.platform_amount,
            "client_amount": self.client_amount,
            "total": self.total,
        }


@dataclass
class FeeAggregationSnapshot:
    total_paired_value: Decimal
    tokens: List[TokenFeeBreakdown] = field(default_factory=list)
    built_at: datetime = field(default_factory=utcnow)
    ttl_seconds: int = 0

    @property
    def expires_at(self) -> datetime:
        return self.built_at + timedelta(seconds=self.ttl_seconds)

    def to_dict(self) -> dict:
        return {
            "total_paired_value": self.total_paired_value,
            "token_count": len(self.tokens),
            "tokens": [t.to_dict() for t in self.tokens],
            "built_at": isoformat_utc(self.built_at),
            "expires_at": isoformat_utc(self.expires_at),
        }


class FeeAggregationCache:
    def __init__(
        self,
        token_store: TokenStore,
        fee_client: FeeClient,
        platform_wallet: Optional[str] = None,
        ttl_seconds: Optional[int] = None,
        batch_size: Optional[int] = None,
        sanity_ceiling: Optional[Decimal] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.token_store = token_store
        self.fee_client = fee_client
        self.platform_wallet = platform_wallet or settings.PLATFORM_WALLET
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.FEE_CACHE_TTL
        self.batch_size = batch_size or settings.FEE_BATCH_SIZE
        self.sanity_ceiling = to_decimal(sanity_ceiling if sanity_ceiling is not None else settings.FEE_SANITY_CEILING)
        self.clock = clock

        self._snapshot: Optional[FeeAggregationSnapshot] = None
        self._built_at_tick: Optional[float] = None
        self._lock = asyncio.Lock()
        # Bumped by invalidate(); a rebuild that spans a bump is not stored
        self._generation = 0

    def _is_fresh(self) -> bool:
        if self._snapshot is None or self._built_at_tick is None:
            return False
        return self.clock() - self._built_at_tick < self.ttl_seconds

    async def get_aggregate(self) -> FeeAggregationSnapshot:
        if self._is_fresh():
            return self._snapshot

        async with self._lock:
            # Another caller may have rebuilt while we waited
            if self._is_fresh():
                return self._snapshot

            generation = self._generation
            snapshot = await self._build()
            if generation == self._generation:
                self._snapshot = snapshot
                self._built_at_tick = self.clock()
            else:
                logger.info("Fee aggregate invalidated during rebuild, not cached")
            return snapshot

    def invalidate(self) -> None:
        self._generation += 1
        self._snapshot = None
        self._built_at_tick = None

    async def _lookup(self, asset: str, recipient: str) -> LookupOutcome:
        try:
            amount = await self.fee_client.available_fees(asset, recipient)
        except Exception as e:
            return LookupOutcome(error=str(e))
        return LookupOutcome(amount=to_decimal(amount))

    def _bounded(self, outcome: LookupOutcome, token_address: str, recipient: str) -> Decimal:
        if not outcome.ok:
            logger.warning("Fee lookup failed", token_address=token_address, recipient=recipient, error=outcome.error)
            return ZERO

        amount = outcome.value_or_zero()
        if amount > self.sanity_ceiling:
            logger.warning(
                "Fee lookup above sanity ceiling, counting as zero",
                token_address=token_address,
                recipient=recipient,
                amount=str(amount),
                ceiling=str(self.sanity_ceiling),
            )
            return ZERO
        return amount

    async def _token_breakdown(self, token) -> TokenFeeBreakdown:
        asset = token.token_address
        requester = token.requester_address
        include_requester = requester and not same_address(requester, self.platform_wallet)

        lookups = [self._lookup(asset, self.platform_wallet)]
        if include_requester:
            lookups.append(self._lookup(asset, requester))
        outcomes = await asyncio.gather(*lookups)

        breakdown = TokenFeeBreakdown(token_address=asset, symbol=token.symbol)
        breakdown.platform_amount = self._bounded(outcomes[0], asset, self.platform_wallet)
        if include_requester:
            breakdown.client_amount = self._bounded(outcomes[1], asset, requester)
        return breakdown

    async def _build(self) -> FeeAggregationSnapshot:
        tokens = await asyncio.to_thread(self.token_store.list_active_tokens)
        breakdowns: List[TokenFeeBreakdown] = []

        for start in range(0, len(tokens), self.batch_size):
            batch = tokens[start:start + self.batch_size]
            breakdowns.extend(await asyncio.gather(*(self._token_breakdown(t) for t in batch)))

        total = sum((b.total for b in breakdowns), ZERO)
        snapshot = FeeAggregationSnapshot(
            total_paired_value=total,
            tokens=breakdowns,
            built_at=utcnow(),
            ttl_seconds=self.ttl_seconds,
        )
        logger.info("Fee aggregate rebuilt", token_count=len(breakdowns), total=str(total))
        return snapshot
