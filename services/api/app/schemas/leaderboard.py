"""Schemas for leaderboard and report endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.models import Member
from app.services.leaderboard import Leaderboard
from app.services.members import as_utc


class MemberStats(BaseModel):
    """Counters of one member for one period."""

    id: int
    slack_uid: str = Field(alias="slackUID")
    period: str
    received_likes: int = Field(alias="receivedLikes", ge=0)
    received_dislikes: int = Field(alias="receivedDislikes", ge=0)
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_member(cls, member: Member) -> "MemberStats":
        return cls(
            id=member.id,
            slack_uid=member.slack_uid,
            period=member.period_key,
            received_likes=member.received_likes,
            received_dislikes=member.received_dislikes,
            created_at=as_utc(member.created_at),
            updated_at=as_utc(member.updated_at),
        )


class LeaderboardResponse(BaseModel):
    """Period leaders by received likes and dislikes."""

    period: str
    most_likes: MemberStats = Field(alias="mostLikes")
    most_dislikes: MemberStats = Field(alias="mostDislikes")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_leaderboard(cls, leaderboard: Leaderboard) -> "LeaderboardResponse":
        return cls(
            period=leaderboard.period.key,
            most_likes=MemberStats.from_member(leaderboard.most_likes),
            most_dislikes=MemberStats.from_member(leaderboard.most_dislikes),
        )


class ReportResponse(BaseModel):
    """Result of a monthly report trigger."""

    success: bool
    period: str
    text: str
