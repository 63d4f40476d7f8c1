from fastapi import APIRouter, Depends, HTTPException, Request
import structlog

from launchpad.api.dependencies import get_launch_service
from launchpad.api.models import (
    LaunchedTokenInfo,
    LaunchRequest,
    LaunchResponse,
    RateLimitResponse,
    RewardRecipientItem,
    ValidationResponse,
)
from launchpad.services.analytics import build_links
from launchpad.services.launch_service import LaunchService
from launchpad.utils.evm import is_valid_address

logger = structlog.get_logger()

router = APIRouter(prefix="/v1")


@router.post("/launch", response_model=LaunchResponse)
async def launch_token(
    body: LaunchRequest,
    request: Request,
    service: LaunchService = Depends(get_launch_service),
):
    """Deploy a token; errors are mapped by the application exception handlers"""
    result = await service.launch(body)

    return LaunchResponse(
        request_id=getattr(request.state, "request_id", None),
        token=LaunchedTokenInfo(
            address=result.token_address,
            tx_hash=result.tx_hash,
            links=build_links(result.token_address),
        ),
        rewards=[RewardRecipientItem(**r.to_dict()) for r in result.rewards],
        warnings=result.warnings,
        message=f"{result.name} (${result.symbol}) deployed on Base",
    )


@router.post("/launch/preview", response_model=ValidationResponse)
async def preview_launch(
    body: LaunchRequest,
    service: LaunchService = Depends(get_launch_service),
):
    result = service.preview(body)
    return ValidationResponse(**result.to_dict())


@router.get("/rate-limit/{wallet}", response_model=RateLimitResponse)
async def get_rate_limit(
    wallet: str,
    service: LaunchService = Depends(get_launch_service),
):
    if not is_valid_address(wallet):
        raise HTTPException(status_code=400, detail="Invalid wallet address")

    status = service.rate_limit_status(wallet)
    return RateLimitResponse(**status.to_dict())
