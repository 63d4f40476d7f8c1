"""
Tests for AutoClaimScheduler.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from launchpad.services import autoclaim
from launchpad.services.autoclaim import AutoClaimScheduler
from launchpad.services.fee_claim import ClaimAllResult


def engine_returning(result=None, error=None):
    engine = MagicMock()
    engine.claim_all = AsyncMock(return_value=result, side_effect=error)
    return engine


class TestAutoClaimScheduler:
    def test_run_once_logs_counts(self):
        result = ClaimAllResult(claimed=[MagicMock()], skipped=["0xa", "0xb"], errors=[])
        scheduler = AutoClaimScheduler(engine_returning(result), initial_delay=0, interval=1)

        with patch.object(autoclaim.logger, "info") as mock_log:
            assert asyncio.run(scheduler.run_once()) is result

        mock_log.assert_called_with("Auto-claim finished", claimed=1, skipped=2, errors=0)

    def test_run_once_logs_each_token_error(self):
        result = ClaimAllResult(errors=[{"address": "0xa", "error": "boom"}])
        scheduler = AutoClaimScheduler(engine_returning(result), initial_delay=0, interval=1)

        with patch.object(autoclaim.logger, "error") as mock_log:
            asyncio.run(scheduler.run_once())

        mock_log.assert_called_once_with("Auto-claim token error", token_address="0xa", error="boom")

    def test_run_once_swallows_failures(self):
        scheduler = AutoClaimScheduler(engine_returning(error=RuntimeError("db down")), initial_delay=0, interval=1)

        with patch.object(autoclaim.logger, "error") as mock_log:
            assert asyncio.run(scheduler.run_once()) is None

        mock_log.assert_called_once_with("Auto-claim failed", error="db down")

    def test_loop_waits_then_repeats(self):
        engine = engine_returning(error=RuntimeError("still failing"))
        scheduler = AutoClaimScheduler(engine, initial_delay=0.01, interval=0.01)

        async def run_for_a_while():
            scheduler.start()
            assert scheduler.running
            assert engine.claim_all.await_count == 0
            await asyncio.sleep(0.1)
            await scheduler.stop()

        with patch.object(autoclaim.logger, "error"):
            asyncio.run(run_for_a_while())

        assert engine.claim_all.await_count >= 2
        assert scheduler.running is False

    def test_start_is_idempotent(self):
        scheduler = AutoClaimScheduler(engine_returning(ClaimAllResult()), initial_delay=60, interval=60)

        async def start_twice():
            scheduler.start()
            task = scheduler._task
            scheduler.start()
            assert scheduler._task is task
            await scheduler.stop()

        asyncio.run(start_twice())

    def test_defaults_from_settings(self):
        scheduler = AutoClaimScheduler(engine_returning())
        assert scheduler.initial_delay == 300
        assert scheduler.interval == 86400
