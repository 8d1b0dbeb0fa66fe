"""Pydantic schemas for API request/response validation."""

from app.schemas.common import ErrorDetail, ErrorResponse
from app.schemas.leaderboard import LeaderboardResponse, MemberStats, ReportResponse

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "LeaderboardResponse",
    "MemberStats",
    "ReportResponse",
]
