"""
Periodic fee claiming.

Waits ``AUTO_CLAIM_INITIAL_DELAY`` seconds after start so the server can settle,
then runs a full claim pass every ``AUTO_CLAIM_INTERVAL`` seconds. A failed
pass is logged and the schedule carries on.
"""

import asyncio
from typing import Optional

import structlog

from launchpad.config import settings
from launchpad.services.fee_claim import ClaimAllResult, FeeClaimEngine

logger = structlog.get_logger()


class AutoClaimScheduler:
    def __init__(
        self,
        engine: FeeClaimEngine,
        initial_delay: Optional[float] = None,
        interval: Optional[float] = None,
    ):
        self.engine = engine
        self.initial_delay = initial_delay if initial_delay is not None else settings.AUTO_CLAIM_INITIAL_DELAY
        self.interval = interval if interval is not None else settings.AUTO_CLAIM_INTERVAL
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        logger.info("Auto-claim daemon started", initial_delay=self.initial_delay, interval=self.interval)
        self._task = asyncio.get_running_loop().create_task(self._loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Auto-claim daemon stopped")

    async def run_once(self) -> Optional[ClaimAllResult]:
        logger.info("Auto-claim: starting batch claim")
        try:
            result = await self.engine.claim_all()
        except Exception as e:
            logger.error("Auto-claim failed", error=str(e))
            return None

        logger.info(
            "Auto-claim finished",
            claimed=len(result.claimed),
            skipped=len(result.skipped),
            errors=len(result.errors),
        )
        for error in result.errors:
            logger.error("Auto-claim token error", token_address=error["address"], error=error["error"])
        return result

    async def _loop(self) -> None:
        await asyncio.sleep(self.initial_delay)
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval)
