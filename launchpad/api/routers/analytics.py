from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from launchpad.api.dependencies import get_analytics_service
from launchpad.api.models import AgentAnalytics, LeaderboardEntry, TokenAnalytics
from launchpad.services.analytics import MAX_LEADERBOARD_SIZE, SORT_BY_FEES, SORT_BY_LAUNCHES, AnalyticsService

router = APIRouter(prefix="/v1/analytics")


@router.get("/token/{address}", response_model=TokenAnalytics)
async def get_token_analytics(address: str, service: AnalyticsService = Depends(get_analytics_service)):
    analytics = service.token_analytics(address)
    if analytics is None:
        raise HTTPException(status_code=404, detail="Token not found")
    return TokenAnalytics(**analytics)


@router.get("/agent/{wallet}", response_model=AgentAnalytics)
async def get_agent_analytics(wallet: str, service: AnalyticsService = Depends(get_analytics_service)):
    return AgentAnalytics(**service.agent_analytics(wallet))


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def get_leaderboard(
    sort: str = Query(SORT_BY_LAUNCHES, pattern=f"^({SORT_BY_LAUNCHES}|{SORT_BY_FEES})$"),
    limit: int = Query(50, ge=1, le=MAX_LEADERBOARD_SIZE),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return [LeaderboardEntry(**entry) for entry in service.leaderboard(sort, limit)]
