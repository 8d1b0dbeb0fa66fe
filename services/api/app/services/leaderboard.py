"""Leaderboard service: period leaders by received likes / dislikes.

Ranking logic (each query independent, same member may win both):
1. Sort by the counter DESC
2. Then by slack_uid ASC (deterministic tie-break)
3. Then by id ASC

Both queries run in one read-only transaction so the pair reflects a single
snapshot of the period.
"""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.errors import NotFoundError
from app.models import Member
from app.services.period import Period
from app.stores.postgres import session_scope


@dataclass(frozen=True)
class Leaderboard:
    period: Period
    most_likes: Member
    most_dislikes: Member


class LeaderboardService:
    """Read-only aggregation over the members table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def compute(self, period: Period) -> Leaderboard:
        """Compute the leaders for `period`.

        Raises:
            NotFoundError: if no member rows exist for the period.
        """
        async with session_scope(self._session_factory) as session:
            most_likes = await _top_member(session, period, Member.received_likes)
            if most_likes is None:
                raise NotFoundError(f"No reactions recorded for {period}", detail={"period": period.key})
            most_dislikes = await _top_member(session, period, Member.received_dislikes)
            if most_dislikes is None:
                # Rows vanished between the two queries.
                raise NotFoundError(f"No reactions recorded for {period}", detail={"period": period.key})

        return Leaderboard(period=period, most_likes=most_likes, most_dislikes=most_dislikes)


async def _top_member(session: AsyncSession, period: Period, counter) -> Member | None:
    query = (
        select(Member)
        .where(Member.period_key == period.key)
        .order_by(counter.desc(), Member.slack_uid.asc(), Member.id.asc())
        .limit(1)
    )
    res = await session.execute(query)
    return res.scalar_one_or_none()
