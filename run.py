"""
Runnable script for the agent token launchpad.
"""

import argparse
import asyncio

import structlog
import uvicorn

from launchpad.config import settings

logger = structlog.get_logger()


def start_api_server(host: str, port: int):
    """Starts the FastAPI server."""
    from launchpad.api.main import app as api_app

    logger.info("Starting API server...", host=host, port=port, auto_claim=settings.AUTO_CLAIM_ENABLED)
    uvicorn.run(api_app, host=host, port=port)


def run_claim_pass():
    """Runs a single claim pass over all active tokens and exits."""
    from launchpad.api.dependencies import get_claim_engine
    from launchpad.services.autoclaim import AutoClaimScheduler
    from launchpad.utils.logging import setup_logging

    setup_logging()
    scheduler = AutoClaimScheduler(get_claim_engine(), initial_delay=0)
    result = asyncio.run(scheduler.run_once())
    if result is None:
        raise SystemExit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Agent token launchpad")
    parser.add_argument("--host", default=settings.API_HOST, help="Interface to bind the API server to")
    parser.add_argument("--port", type=int, default=settings.API_PORT, help="Port for the API server")
    parser.add_argument(
        "--no-auto-claim",
        action="store_true",
        help="Do not start the periodic fee claim daemon",
    )
    parser.add_argument(
        "--claim-once",
        action="store_true",
        help="Claim fees for every active token once and exit (no API server)",
    )
    args = parser.parse_args()

    if args.claim_once:
        run_claim_pass()
    else:
        if args.no_auto_claim:
            settings.AUTO_CLAIM_ENABLED = False
        start_api_server(args.host, args.port)
