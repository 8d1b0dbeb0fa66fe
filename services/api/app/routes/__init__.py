"""API routes."""

from fastapi import APIRouter

from app.routes import leaderboard, reports, slack

api_router = APIRouter()

# Slack Events API webhook (reaction_added / reaction_removed)
api_router.include_router(slack.router, prefix="/slack", tags=["slack"])

# Monthly report trigger
api_router.include_router(reports.router, prefix="/v1/reports", tags=["reports"])

# Leaderboard read endpoint
api_router.include_router(leaderboard.router, prefix="/v1/leaderboard", tags=["leaderboard"])
