"""
Service wiring for the HTTP layer.

Services that hold in-process state (requester locks, the fee snapshot, the
claim signer) are process-wide singletons; tests swap them out through
``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException

from launchpad.config import settings
from launchpad.services.analytics import AnalyticsService
from launchpad.services.chain.deploy_client import HttpDeployClient
from launchpad.services.chain.fee_locker import FeeLockerClient
from launchpad.services.chain.identity import RegistryIdentityClient
from launchpad.services.fee_aggregation import FeeAggregationCache
from launchpad.services.fee_claim import FeeClaimEngine
from launchpad.services.launch_service import LaunchService
from launchpad.services.token_store import TokenStore


@lru_cache()
def get_token_store() -> TokenStore:
    return TokenStore()


@lru_cache()
def get_fee_client() -> FeeLockerClient:
    return FeeLockerClient()


@lru_cache()
def get_launch_service() -> LaunchService:
    return LaunchService(
        token_store=get_token_store(),
        deploy_client=HttpDeployClient(),
        identity_client=RegistryIdentityClient(),
    )


@lru_cache()
def get_fee_cache() -> FeeAggregationCache:
    return FeeAggregationCache(get_token_store(), get_fee_client())


@lru_cache()
def get_claim_engine() -> FeeClaimEngine:
    return FeeClaimEngine(get_token_store(), get_fee_client(), fee_cache=get_fee_cache())


def get_analytics_service(token_store: TokenStore = Depends(get_token_store)) -> AnalyticsService:
    return AnalyticsService(token_store)


def require_api_key(authorization: Optional[str] = Header(default=None)) -> None:
    """Bearer check for state-changing fee endpoints; open when no key is configured"""
    if not settings.API_KEY:
        return
    if authorization != f"Bearer {settings.API_KEY}":
        raise HTTPException(status_code=401, detail="Unauthorized: valid API key required")
