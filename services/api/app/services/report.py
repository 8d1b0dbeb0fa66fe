"""Monthly report formatting (pure, no I/O).

Produces both a plain-text summary (Slack notification fallback) and Block Kit
blocks for chat.postMessage. Callers must not pass an empty leaderboard; an
empty period is rendered separately with `build_empty_report`.
"""

from calendar import month_name
from dataclasses import dataclass, field
from typing import Any

from app.services.leaderboard import Leaderboard
from app.services.period import Period

HEADER = "Monthly Stats Update"


@dataclass(frozen=True)
class MonthlyReport:
    period: Period
    text: str
    blocks: list[dict[str, Any]] = field(default_factory=list)


def _period_label(period: Period) -> str:
    return f"{month_name[period.month]} {period.year}"


def _mention(slack_uid: str) -> str:
    return f"<@{slack_uid}>"


def _header_block(title: str) -> dict[str, Any]:
    return {"type": "header", "text": {"type": "plain_text", "text": title}}


def _section_block(text: str) -> dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def build_monthly_report(leaderboard: Leaderboard) -> MonthlyReport:
    """Render the period leaders."""
    title = f"{HEADER}: {_period_label(leaderboard.period)}"
    likes = leaderboard.most_likes
    dislikes = leaderboard.most_dislikes

    likes_line = (
        "Most likes received this month (aka good boy of the month): "
        f"{_mention(likes.slack_uid)} ({likes.received_likes})"
    )
    dislikes_line = (
        "Most dislikes received this month: "
        f"{_mention(dislikes.slack_uid)} ({dislikes.received_dislikes})"
    )

    return MonthlyReport(
        period=leaderboard.period,
        text="\n".join([f"*{title}*", likes_line, dislikes_line]),
        blocks=[
            _header_block(title),
            _section_block(likes_line),
            _section_block(dislikes_line),
        ],
    )


def build_empty_report(period: Period) -> MonthlyReport:
    """Render the "no activity" message for a period without reactions."""
    title = f"{HEADER}: {_period_label(period)}"
    line = "No likes or dislikes were recorded this month."
    return MonthlyReport(
        period=period,
        text="\n".join([f"*{title}*", line]),
        blocks=[_header_block(title), _section_block(line)],
    )
