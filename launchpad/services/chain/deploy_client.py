"""
HTTP client for the token deploy service.

The service accepts a deploy configuration and answers with either a
submitted transaction hash or a rejection. Confirmation is polled at
``{DEPLOY_SERVICE_URL}/{tx_hash}`` until the service reports the deployed
address or a failure.
"""

import asyncio
from typing import Any, Dict, Optional

import aiohttp
import structlog

from launchpad.config import settings
from launchpad.services.chain.interface import DeployClient, DeploySubmission

STATUS_CONFIRMED = "confirmed"
STATUS_FAILED = "failed"


class DeploymentTimeout(Exception):
    pass


class HttpDeployClient(DeployClient):
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        poll_interval: Optional[float] = None,
    ):
        self.logger = structlog.get_logger()
        self.base_url = (base_url or settings.DEPLOY_SERVICE_URL).rstrip("/")
        self.timeout = timeout or settings.DEPLOY_TIMEOUT
        self.poll_interval = poll_interval or settings.DEPLOY_POLL_INTERVAL

    async def deploy(self, config: Dict[str, Any]) -> DeploySubmission:
        async with aiohttp.ClientSession() as session:
            async with session.post(self.base_url, json=config) as response:
                body = await response.json(content_type=None)
                if response.status >= 500:
                    raise RuntimeError(body.get("error") or f"Deploy service returned HTTP {response.status}")

        if body.get("error"):
            self.logger.warning("Deploy service rejected configuration", error=body["error"], symbol=config.get("symbol"))
            return DeploySubmission(error=str(body["error"]))

        tx_hash = body.get("tx_hash")
        if not tx_hash:
            raise RuntimeError("Deploy service returned no transaction hash")

        self.logger.info("Deployment submitted", tx_hash=tx_hash, symbol=config.get("symbol"))
        return DeploySubmission(tx_hash=tx_hash, waiter=lambda: self._wait_for_address(tx_hash))

    async def _wait_for_address(self, tx_hash: str) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        url = f"{self.base_url}/{tx_hash}"

        async with aiohttp.ClientSession() as session:
            while loop.time() < deadline:
                async with session.get(url) as response:
                    body = await response.json(content_type=None)

                status = body.get("status")
                if status == STATUS_CONFIRMED:
                    return {"address": body["address"], "tx_hash": tx_hash}
                if status == STATUS_FAILED:
                    raise RuntimeError(body.get("error") or "Deployment transaction failed")

                await asyncio.sleep(self.poll_interval)

        raise DeploymentTimeout(f"Deployment not confirmed within {self.timeout}s")
