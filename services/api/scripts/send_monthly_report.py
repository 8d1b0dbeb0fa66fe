#!/usr/bin/env python3
"""Monthly report job for Railway Cron.

Schedule:
- Run once at the start of each month (e.g. 09:00 UTC on day 1).

Behavior:
- Compute the leaderboard for the previous calendar month (UTC)
- Post the "Monthly Stats Update" to SLACK_CHANNEL_ID
- A month without reactions posts nothing unless REPORT_POST_EMPTY=true

Run (local / Railway):
  cd services/api
  python -m scripts.send_monthly_report

Optional env vars:
  REPORT_PERIOD=2024-02   # report a specific month instead of the previous one
"""

import asyncio
import os
import sys
from datetime import datetime, timezone


# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.dependencies import get_leaderboard_service, get_report_publisher  # noqa: E402
from app.errors import NotFoundError  # noqa: E402
from app.services.period import Period  # noqa: E402
from app.services.slack import send_monthly_report  # noqa: E402
from app.settings import get_settings  # noqa: E402
from app.stores.postgres import close_db, init_db, ping_db  # noqa: E402


def _resolve_period(now: datetime) -> Period:
    raw = os.getenv("REPORT_PERIOD", "").strip()
    if raw:
        return Period.parse(raw)
    return Period.from_datetime(now).previous()


async def main() -> None:
    # Initialize shared connections (same as API lifespan, but for a one-off cron run)
    await init_db()
    await ping_db()

    try:
        period = _resolve_period(datetime.now(timezone.utc))
        try:
            report = await send_monthly_report(
                leaderboards=get_leaderboard_service(),
                publisher=get_report_publisher(),
                period=period,
                post_empty=get_settings().report_post_empty,
            )
        except NotFoundError:
            print({"ok": True, "period": period.key, "posted": False, "reason": "no_activity"})
            return

        print({"ok": True, "period": period.key, "posted": True, "text": report.text})
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
