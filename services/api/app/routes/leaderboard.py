"""Leaderboard read endpoint.

GET /v1/leaderboard/{period} - period leaders by received likes / dislikes.

Routers are thin: call services for business logic.
"""

from fastapi import APIRouter, Path

from app.dependencies import get_leaderboard_service
from app.schemas import LeaderboardResponse
from app.services.period import Period

router = APIRouter()


@router.get("/{period}", response_model=LeaderboardResponse)
async def get_leaderboard(
    period: str = Path(
        description="Period in YYYY-MM form",
        examples=["2024-02"],
    ),
) -> LeaderboardResponse:
    """Get the members with the most likes and dislikes for a period.

    Raises:
        InvalidError (400): malformed period.
        NotFoundError (404): no reactions recorded for the period.
    """
    leaderboard = await get_leaderboard_service().compute(Period.parse(period))
    return LeaderboardResponse.from_leaderboard(leaderboard)
