from fastapi import APIRouter, Depends
import structlog

from launchpad.api.dependencies import get_claim_engine, get_fee_cache, require_api_key
from launchpad.api.models import ClaimAllResponse, FeeAggregateResponse, FeeCheckResponse, FeeClaimItem
from launchpad.services.fee_aggregation import FeeAggregationCache
from launchpad.services.fee_claim import FeeClaimEngine

logger = structlog.get_logger()

router = APIRouter(prefix="/v1/fees")


@router.get("/aggregate", response_model=FeeAggregateResponse)
async def get_fee_aggregate(cache: FeeAggregationCache = Depends(get_fee_cache)):
    snapshot = await cache.get_aggregate()
    return FeeAggregateResponse(**snapshot.to_dict())


@router.post("/claim-all", response_model=ClaimAllResponse, dependencies=[Depends(require_api_key)])
async def claim_all_fees(engine: FeeClaimEngine = Depends(get_claim_engine)):
    result = await engine.claim_all()
    return ClaimAllResponse(**result.to_dict())


@router.get("/{address}", response_model=FeeCheckResponse)
async def check_fees(address: str, engine: FeeClaimEngine = Depends(get_claim_engine)):
    check = await engine.check_fees(address)
    return FeeCheckResponse(**check.to_dict())


@router.post("/{address}/claim", dependencies=[Depends(require_api_key)])
async def claim_fees(address: str, engine: FeeClaimEngine = Depends(get_claim_engine)):
    result = await engine.claim_one(address)
    if result is None:
        return {"message": "No fees to claim"}
    return FeeClaimItem(**result.to_dict())
