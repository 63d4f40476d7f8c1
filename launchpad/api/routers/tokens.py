from math import ceil
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
import structlog

from launchpad.api.dependencies import get_token_store
from launchpad.api.models import Pagination, StatsResponse, TokenItem, TokenListResponse
from launchpad.models.token import TokenStatus
from launchpad.services.token_store import SORT_FEES, SORT_NEWEST, TokenStore
from launchpad.utils.evm import is_valid_address

logger = structlog.get_logger()

router = APIRouter(prefix="/v1")


@router.get("/tokens", response_model=TokenListResponse)
async def list_tokens(
    status: Optional[TokenStatus] = Query(None, description="Filter by status"),
    sort: str = Query(SORT_NEWEST, pattern=f"^({SORT_NEWEST}|{SORT_FEES})$"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    store: TokenStore = Depends(get_token_store),
):
    tokens, total = store.list_tokens(
        status=status.value if status else None,
        sort=sort,
        offset=(page - 1) * limit,
        limit=limit,
    )
    return TokenListResponse(
        tokens=[TokenItem.model_validate(t) for t in tokens],
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=ceil(total / limit)),
    )


@router.get("/tokens/{address}", response_model=TokenItem)
async def get_token(address: str, store: TokenStore = Depends(get_token_store)):
    token = store.get_token_by_address(address)
    if token is None:
        raise HTTPException(status_code=404, detail="Token not found")
    return TokenItem.model_validate(token)


@router.get("/clients/{wallet}/tokens", response_model=List[TokenItem])
async def get_client_tokens(wallet: str, store: TokenStore = Depends(get_token_store)):
    if not is_valid_address(wallet):
        raise HTTPException(status_code=400, detail="Invalid wallet address")
    return [TokenItem.model_validate(t) for t in store.list_tokens_by_requester(wallet)]


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    period: Optional[str] = Query(None, pattern="^24h$", description="Restrict to the last 24 hours"),
    store: TokenStore = Depends(get_token_store),
):
    return StatsResponse(**store.get_stats(period))
