"""Monthly report trigger.

POST /v1/reports/monthly  (form field `date`, YYYY-MM)

Computes the period leaderboard, renders the report and posts it to the
configured Slack channel. An empty period is a 404 unless REPORT_POST_EMPTY is
enabled, in which case a "no activity" message is posted.
"""

import logging

from fastapi import APIRouter, Form

from app.dependencies import get_leaderboard_service, get_report_publisher
from app.errors import InvalidError
from app.schemas import ReportResponse
from app.services.period import Period
from app.services.slack import send_monthly_report
from app.settings import get_settings

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


@router.post("/monthly", response_model=ReportResponse)
async def trigger_monthly_report(
    date: str | None = Form(default=None, description="Period in YYYY-MM form"),
) -> ReportResponse:
    """Post the monthly stats update for the given period."""
    if not date:
        raise InvalidError("no date value provided within the form")
    period = Period.parse(date)

    logger.info(f"[report] trigger period={period}")
    report = await send_monthly_report(
        leaderboards=get_leaderboard_service(),
        publisher=get_report_publisher(),
        period=period,
        post_empty=get_settings().report_post_empty,
    )
    return ReportResponse(success=True, period=period.key, text=report.text)
