import pytest

from app.errors import NotFoundError
from app.services.leaderboard import LeaderboardService
from app.services.members import MemberStore, MemberUpdate
from app.services.period import Period

from conftest import FEB_2024

FEB = Period(2024, 2)


async def _seed(store: MemberStore, slack_uid: str, likes: int, dislikes: int, period: Period = FEB) -> int:
    member = await store.create(slack_uid, period, now=FEB_2024)
    await store.update(
        member.id,
        MemberUpdate(received_likes=likes, received_dislikes=dislikes),
        now=FEB_2024,
    )
    return member.id


@pytest.mark.asyncio
async def test_most_likes_tie_is_deterministic(store: MemberStore, session_factory):
    """Equal counters resolve to the same member on every call."""
    await _seed(store, "A", likes=5, dislikes=0)
    await _seed(store, "C", likes=9, dislikes=0)
    await _seed(store, "B", likes=9, dislikes=0)

    service = LeaderboardService(session_factory)
    first = await service.compute(FEB)
    second = await service.compute(FEB)

    assert first.most_likes.slack_uid in {"B", "C"}
    # Ties go to the lowest slack_uid.
    assert first.most_likes.slack_uid == "B"
    assert second.most_likes.slack_uid == first.most_likes.slack_uid
    assert first.most_likes.received_likes == 9


@pytest.mark.asyncio
async def test_likes_and_dislikes_are_independent(store: MemberStore, session_factory):
    await _seed(store, "A", likes=1, dislikes=7)
    await _seed(store, "B", likes=3, dislikes=2)

    board = await LeaderboardService(session_factory).compute(FEB)
    assert board.period == FEB
    assert board.most_likes.slack_uid == "B"
    assert board.most_dislikes.slack_uid == "A"
    assert board.most_dislikes.received_dislikes == 7


@pytest.mark.asyncio
async def test_same_member_can_lead_both(store: MemberStore, session_factory):
    await _seed(store, "A", likes=4, dislikes=4)
    await _seed(store, "B", likes=1, dislikes=1)

    board = await LeaderboardService(session_factory).compute(FEB)
    assert board.most_likes.slack_uid == board.most_dislikes.slack_uid == "A"


@pytest.mark.asyncio
async def test_other_periods_are_excluded(store: MemberStore, session_factory):
    await _seed(store, "A", likes=1, dislikes=0)
    await _seed(store, "Z", likes=50, dislikes=50, period=Period(2024, 3))

    board = await LeaderboardService(session_factory).compute(FEB)
    assert board.most_likes.slack_uid == "A"


@pytest.mark.asyncio
async def test_empty_period_raises_not_found(session_factory):
    """A period with no member rows has no leaderboard."""
    with pytest.raises(NotFoundError):
        await LeaderboardService(session_factory).compute(FEB)
