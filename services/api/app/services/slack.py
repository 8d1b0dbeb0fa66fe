"""Slack transport helpers.

- Request signature verification (Events API, slash/form triggers)
- Events API payload decoding into ReactionNotification
- Monthly report delivery through chat.postMessage

Delivery is modelled as a ReportPublisher capability so routes and scripts get
it injected instead of reaching for a process-wide client.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Protocol

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from slack_sdk.signature import SignatureVerifier

from app.errors import NotFoundError
from app.services.leaderboard import LeaderboardService
from app.services.period import Period
from app.services.reactions import EventKind, ReactionNotification
from app.services.report import MonthlyReport, build_empty_report, build_monthly_report

logger = logging.getLogger("uvicorn.error")

REACTION_EVENT_KINDS = {
    "reaction_added": EventKind.ADDED,
    "reaction_removed": EventKind.REMOVED,
}


class ReportDeliveryError(RuntimeError):
    pass


def verify_request(*, signing_secret: str, body: bytes, headers: Mapping[str, str]) -> bool:
    """Check X-Slack-Signature / X-Slack-Request-Timestamp against the signing secret."""
    if not signing_secret:
        logger.error("SLACK_SIGNING_SECRET is not set - rejecting Slack request")
        return False
    verifier = SignatureVerifier(signing_secret=signing_secret)
    return verifier.is_valid_request(body, dict(headers))


def parse_reaction_event(event: Mapping[str, Any]) -> ReactionNotification | None:
    """Decode an Events API inner event; None for anything but reaction_added/removed."""
    event_kind = REACTION_EVENT_KINDS.get(str(event.get("type", "")))
    if event_kind is None:
        return None
    return ReactionNotification(
        event_kind=event_kind,
        reacting_identity=str(event.get("user") or ""),
        target_identity=str(event.get("item_user") or ""),
        reaction=str(event.get("reaction") or ""),
    )


class ReportPublisher(Protocol):
    async def publish(self, report: MonthlyReport) -> None: ...


class SlackReportPublisher:
    """Posts reports to one channel via chat.postMessage."""

    def __init__(self, client: WebClient, channel_id: str) -> None:
        self._client = client
        self._channel_id = channel_id

    @classmethod
    def from_token(cls, bot_token: str, channel_id: str) -> SlackReportPublisher:
        return cls(WebClient(token=bot_token), channel_id)

    async def publish(self, report: MonthlyReport) -> None:
        if not self._channel_id:
            raise ReportDeliveryError("SLACK_CHANNEL_ID is not set")
        try:
            await asyncio.to_thread(
                self._client.chat_postMessage,
                channel=self._channel_id,
                text=report.text,
                blocks=report.blocks,
            )
        except SlackApiError as e:
            error_type = e.response.get("error", "unknown")
            logger.error(f"Slack chat.postMessage failed: {error_type} (period={report.period})")
            raise ReportDeliveryError(f"Slack API error: {error_type}") from e
        logger.info(f"[report] posted period={report.period} channel={self._channel_id}")


async def send_monthly_report(
    *,
    leaderboards: LeaderboardService,
    publisher: ReportPublisher,
    period: Period,
    post_empty: bool = False,
) -> MonthlyReport:
    """Compute, render and deliver the report for `period`.

    Raises:
        NotFoundError: if the period has no activity and `post_empty` is False.
        ReportDeliveryError: if delivery fails.
    """
    try:
        leaderboard = await leaderboards.compute(period)
    except NotFoundError:
        if not post_empty:
            logger.info(f"[report] no activity period={period}, nothing posted")
            raise
        report = build_empty_report(period)
    else:
        report = build_monthly_report(leaderboard)

    await publisher.publish(report)
    return report
