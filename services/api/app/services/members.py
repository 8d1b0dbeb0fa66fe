"""Member store: transactional access to per-period reaction counters.

Every public operation runs in exactly one transaction (commit on success,
rollback on error). The store is the only writer of `members` rows.

Counter invariants:
- counters never go negative (set values are validated, deltas clamp at 0)
- exactly one row per (slack_uid, period), enforced by a unique constraint;
  losing a concurrent create surfaces as AlreadyExistsError
- updated_at >= created_at
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import case, delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from app.errors import AlreadyExistsError, InvalidError, NotFoundError
from app.models import Member
from app.services.period import Period
from app.stores.postgres import session_scope


@dataclass(frozen=True)
class MemberUpdate:
    """Sparse patch: each counter is either set to a value or left unchanged (None)."""

    received_likes: int | None = None
    received_dislikes: int | None = None


@dataclass(frozen=True)
class CounterDelta:
    """Relative change applied atomically by the store, clamped at zero."""

    likes: int = 0
    dislikes: int = 0

    @property
    def is_zero(self) -> bool:
        return self.likes == 0 and self.dislikes == 0


def as_utc(dt: datetime) -> datetime:
    """Normalize a timestamp to aware UTC (SQLite hands back naive values)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _touch(now: datetime, created_at: datetime) -> datetime:
    now = as_utc(now)
    created_at = as_utc(created_at)
    return now if now >= created_at else created_at


def _clamped_add(column: ColumnElement[int], amount: int) -> ColumnElement[int]:
    if amount >= 0:
        return column + amount
    return case((column + amount < 0, 0), else_=column + amount)


def _validate_counter(name: str, value: int | None) -> None:
    if value is not None and value < 0:
        raise InvalidError(f"{name} must be >= 0, got {value}", detail={name: value})


class MemberStore:
    """Data access for Member rows.

    Args:
        session_factory: async session factory; each operation opens its own session.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_id(self, member_id: int) -> Member:
        """Retrieve a Member by ID. Raises NotFoundError if the ID does not exist."""
        async with session_scope(self._session_factory) as session:
            member = await session.get(Member, member_id)
            if member is None:
                raise NotFoundError(f"Member {member_id} not found", detail={"id": member_id})
            return member

    async def find_by_identity(self, slack_uid: str, period: Period) -> Member:
        """Retrieve a Member by exact Slack user ID and period.

        Raises:
            NotFoundError: if no row matches both fields.
        """
        async with session_scope(self._session_factory) as session:
            res = await session.execute(
                select(Member)
                .where(Member.slack_uid == slack_uid)
                .where(Member.period_key == period.key)
                .limit(1)
            )
            member = res.scalar_one_or_none()
            if member is None:
                raise NotFoundError(
                    f"Member {slack_uid} not found for {period}",
                    detail={"slack_uid": slack_uid, "period": period.key},
                )
            return member

    async def create(self, slack_uid: str, period: Period, *, now: datetime) -> Member:
        """Insert a zeroed Member row for (slack_uid, period).

        Raises:
            InvalidError: if slack_uid is empty.
            AlreadyExistsError: if a concurrent writer already created the row.
        """
        if not slack_uid or not slack_uid.strip():
            raise InvalidError("slack_uid must not be empty")

        ts = as_utc(now)
        member = Member(
            slack_uid=slack_uid,
            period_key=period.key,
            received_likes=0,
            received_dislikes=0,
            created_at=ts,
            updated_at=ts,
        )
        try:
            async with session_scope(self._session_factory) as session:
                session.add(member)
                await session.flush()
        except IntegrityError as e:
            raise AlreadyExistsError(
                f"Member {slack_uid} already exists for {period}",
                detail={"slack_uid": slack_uid, "period": period.key},
            ) from e
        return member

    async def update(self, member_id: int, upd: MemberUpdate, *, now: datetime) -> Member:
        """Apply a sparse set-to-value patch.

        The row is read and written in the same transaction so fields the patch
        leaves unset keep their committed values.

        Raises:
            InvalidError: if a set value is negative.
            NotFoundError: if the ID does not exist at update time.
        """
        _validate_counter("received_likes", upd.received_likes)
        _validate_counter("received_dislikes", upd.received_dislikes)

        async with session_scope(self._session_factory) as session:
            member = await session.get(Member, member_id, with_for_update=True)
            if member is None:
                raise NotFoundError(f"Member {member_id} not found", detail={"id": member_id})

            if upd.received_likes is not None:
                member.received_likes = upd.received_likes
            if upd.received_dislikes is not None:
                member.received_dislikes = upd.received_dislikes
            member.updated_at = _touch(now, member.created_at)
            await session.flush()
            return member

    async def apply_delta(self, member_id: int, delta: CounterDelta, *, now: datetime) -> Member:
        """Add `delta` to the counters with one atomic UPDATE, clamping at zero.

        Concurrent callers on the same row never lose each other's increments.

        Raises:
            NotFoundError: if the ID does not exist at update time.
        """
        async with session_scope(self._session_factory) as session:
            member = await session.get(Member, member_id)
            if member is None:
                raise NotFoundError(f"Member {member_id} not found", detail={"id": member_id})

            stmt = (
                update(Member)
                .where(Member.id == member_id)
                .values(
                    received_likes=_clamped_add(Member.received_likes, delta.likes),
                    received_dislikes=_clamped_add(Member.received_dislikes, delta.dislikes),
                    updated_at=_touch(now, member.created_at),
                )
                .execution_options(synchronize_session=False)
            )
            res = await session.execute(stmt)
            if res.rowcount == 0:
                raise NotFoundError(f"Member {member_id} not found", detail={"id": member_id})
            await session.refresh(member)
            return member

    async def delete(self, member_id: int) -> None:
        """Permanently delete a Member. Deleting a missing ID is not an error."""
        async with session_scope(self._session_factory) as session:
            await session.execute(delete(Member).where(Member.id == member_id))
