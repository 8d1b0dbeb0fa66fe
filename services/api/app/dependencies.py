"""Service wiring for routes and scripts.

Routes call these providers instead of holding process-wide service objects;
tests monkeypatch them on the route modules.
"""

from datetime import datetime, timezone

from app.services.leaderboard import LeaderboardService
from app.services.members import MemberStore
from app.services.reactions import ReactionMapping, ReactionReconciler
from app.services.slack import ReportPublisher, SlackReportPublisher
from app.settings import get_settings
from app.stores.postgres import get_session_factory


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_member_store() -> MemberStore:
    return MemberStore(get_session_factory())


def get_leaderboard_service() -> LeaderboardService:
    return LeaderboardService(get_session_factory())


def get_reconciler() -> ReactionReconciler:
    settings = get_settings()
    return ReactionReconciler(
        get_member_store(),
        mapping=ReactionMapping(like=settings.like_reaction, dislike=settings.dislike_reaction),
        system_identities=settings.system_identities,
        max_create_attempts=settings.member_create_attempts,
    )


def get_report_publisher() -> ReportPublisher:
    settings = get_settings()
    return SlackReportPublisher.from_token(settings.slack_bot_token, settings.slack_channel_id)
