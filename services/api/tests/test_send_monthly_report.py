"""Tests for the monthly report cron script."""

from datetime import datetime, timedelta, timezone

import pytest

from app.errors import InvalidError
from app.services.period import Period
from app.settings import Settings
from scripts import send_monthly_report as job

from test_slack import FakeLeaderboards, FakePublisher, _board


@pytest.mark.parametrize(
    ("now", "expected"),
    [
        (datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc), Period(2024, 2)),
        (datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc), Period(2023, 12)),
        # 00:30 on Feb 1st at UTC+2 is still January in UTC.
        (datetime(2024, 2, 1, 0, 30, tzinfo=timezone(timedelta(hours=2))), Period(2023, 12)),
    ],
)
def test_defaults_to_previous_month(monkeypatch: pytest.MonkeyPatch, now: datetime, expected: Period):
    """Without REPORT_PERIOD the previous UTC calendar month is reported."""
    monkeypatch.delenv("REPORT_PERIOD", raising=False)
    assert job._resolve_period(now) == expected


def test_report_period_override(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("REPORT_PERIOD", " 2023-07 ")
    assert job._resolve_period(datetime(2024, 3, 1, tzinfo=timezone.utc)) == Period(2023, 7)


def test_report_period_override_must_be_canonical(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("REPORT_PERIOD", "07-2023")
    with pytest.raises(InvalidError):
        job._resolve_period(datetime(2024, 3, 1, tzinfo=timezone.utc))


@pytest.fixture
def stores(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Replace DB lifecycle calls with recorders."""
    calls: list[str] = []

    def recorder(name: str):
        async def record() -> None:
            calls.append(name)

        return record

    monkeypatch.setattr(job, "init_db", recorder("init"))
    monkeypatch.setattr(job, "ping_db", recorder("ping"))
    monkeypatch.setattr(job, "close_db", recorder("close"))
    monkeypatch.setattr(job, "get_settings", lambda: Settings(report_post_empty=False))
    monkeypatch.setenv("REPORT_PERIOD", "2024-02")
    return calls


@pytest.mark.asyncio
async def test_main_posts_report(monkeypatch: pytest.MonkeyPatch, stores: list[str], capsys):
    """The report for the selected period is published and the DB is closed."""
    publisher = FakePublisher()
    monkeypatch.setattr(job, "get_leaderboard_service", lambda: FakeLeaderboards(_board()))
    monkeypatch.setattr(job, "get_report_publisher", lambda: publisher)

    await job.main()

    assert len(publisher.reports) == 1
    assert publisher.reports[0].period == Period(2024, 2)
    assert stores == ["init", "ping", "close"]
    out = capsys.readouterr().out
    assert "'posted': True" in out
    assert "'period': '2024-02'" in out


@pytest.mark.asyncio
async def test_main_empty_period_posts_nothing(monkeypatch: pytest.MonkeyPatch, stores: list[str], capsys):
    """A month without reactions is reported as skipped, not as a failure."""
    publisher = FakePublisher()
    monkeypatch.setattr(job, "get_leaderboard_service", lambda: FakeLeaderboards(None))
    monkeypatch.setattr(job, "get_report_publisher", lambda: publisher)

    await job.main()

    assert publisher.reports == []
    assert stores == ["init", "ping", "close"]
    out = capsys.readouterr().out
    assert "'posted': False" in out
    assert "no_activity" in out
