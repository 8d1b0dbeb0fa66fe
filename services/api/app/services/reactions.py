"""Reaction reconciliation: reaction notification -> member counter mutation.

Flow per notification:
1. Filter: empty / system target, or a member reacting to themselves -> no-op
2. Map the platform token to like/dislike (unknown tokens -> no-op)
3. Period from the caller's clock (reactions are attributed to "now")
4. Resolve the target member, creating it on first sight. A lost create race
   is re-resolved by lookup, bounded to `max_create_attempts`.
5. Apply +1 / -1 atomically (removals clamp at zero)

Each store call commits its own transaction; abandoning a notification between
steps leaves a valid state (e.g. a zeroed member row).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import logging

from app.errors import AlreadyExistsError, FatalError, NotFoundError
from app.models import Member
from app.services.members import CounterDelta, MemberStore
from app.services.period import Period

logger = logging.getLogger("uvicorn.error")

DEFAULT_SYSTEM_IDENTITIES = ("USLACKBOT",)
DEFAULT_MAX_CREATE_ATTEMPTS = 3


class EventKind(Enum):
    ADDED = "added"
    REMOVED = "removed"


class ReactionKind(Enum):
    LIKE = "like"
    DISLIKE = "dislike"


class ReconcileOutcome(Enum):
    """What happened to a notification (for logs and tests, not a success signal)."""

    APPLIED = "applied"
    FILTERED = "filtered"  # self-reaction, empty or system target
    IGNORED = "ignored"  # reaction token is neither like nor dislike
    LOST_RACE = "lost_race"  # member deleted between resolve and update


@dataclass(frozen=True)
class ReactionNotification:
    """Decoded reaction event from the transport layer."""

    event_kind: EventKind
    reacting_identity: str
    target_identity: str
    reaction: str  # platform token, e.g. "+1"


@dataclass(frozen=True)
class ReactionMapping:
    """Platform reaction tokens counted as like / dislike."""

    like: str = "+1"
    dislike: str = "-1"

    def kind_for(self, token: str) -> ReactionKind | None:
        if token == self.like:
            return ReactionKind.LIKE
        if token == self.dislike:
            return ReactionKind.DISLIKE
        return None


def delta_for(event_kind: EventKind, kind: ReactionKind) -> CounterDelta:
    step = 1 if event_kind is EventKind.ADDED else -1
    if kind is ReactionKind.LIKE:
        return CounterDelta(likes=step)
    return CounterDelta(dislikes=step)


class ReactionReconciler:
    """Turns one reaction notification into one member counter mutation."""

    def __init__(
        self,
        store: MemberStore,
        *,
        mapping: ReactionMapping | None = None,
        system_identities: Iterable[str] = DEFAULT_SYSTEM_IDENTITIES,
        max_create_attempts: int = DEFAULT_MAX_CREATE_ATTEMPTS,
    ) -> None:
        if max_create_attempts < 1:
            raise ValueError("max_create_attempts must be >= 1")
        self._store = store
        self._mapping = mapping or ReactionMapping()
        self._system_identities = frozenset(system_identities)
        self._max_create_attempts = max_create_attempts

    def filter_reason(self, notification: ReactionNotification) -> str | None:
        """Why a notification is discarded, or None if it should be processed."""
        target = notification.target_identity
        if not target:
            return "empty_target"
        if target in self._system_identities:
            return "system_target"
        if notification.reacting_identity == target:
            return "self_reaction"
        return None

    async def reconcile(self, notification: ReactionNotification, *, now: datetime) -> ReconcileOutcome:
        """Apply a reaction notification.

        Args:
            notification: Decoded reaction event.
            now: Processing time; selects the period the reaction counts toward.

        Raises:
            FatalError: if the target member could not be resolved within the retry bound.
            InvalidError / SQLAlchemyError: propagated unchanged from the store.
        """
        reason = self.filter_reason(notification)
        if reason is not None:
            logger.info(
                f"[reactions] filtered reason={reason} "
                f"target={notification.target_identity} actor={notification.reacting_identity}"
            )
            return ReconcileOutcome.FILTERED

        kind = self._mapping.kind_for(notification.reaction)
        if kind is None:
            return ReconcileOutcome.IGNORED

        period = Period.from_datetime(now)
        member = await self._resolve_member(notification.target_identity, period, now=now)
        delta = delta_for(notification.event_kind, kind)
        likes_before, dislikes_before = member.received_likes, member.received_dislikes

        try:
            updated = await self._store.apply_delta(member.id, delta, now=now)
        except NotFoundError:
            logger.warning(
                f"[reactions] lost race member_id={member.id} target={notification.target_identity} "
                f"period={period}: member deleted before update"
            )
            return ReconcileOutcome.LOST_RACE

        logger.info(
            f"[reactions] applied kind={notification.event_kind.value} reaction={kind.value} "
            f"target={notification.target_identity} actor={notification.reacting_identity} period={period} "
            f"likes={likes_before}->{updated.received_likes} "
            f"dislikes={dislikes_before}->{updated.received_dislikes}"
        )
        return ReconcileOutcome.APPLIED

    async def _resolve_member(self, slack_uid: str, period: Period, *, now: datetime) -> Member:
        for attempt in range(1, self._max_create_attempts + 1):
            try:
                return await self._store.find_by_identity(slack_uid, period)
            except NotFoundError:
                pass

            try:
                member = await self._store.create(slack_uid, period, now=now)
            except AlreadyExistsError:
                logger.info(
                    f"[reactions] create race slack_uid={slack_uid} period={period} "
                    f"attempt={attempt}/{self._max_create_attempts}"
                )
                continue

            logger.info(f"[reactions] created member slack_uid={slack_uid} period={period} id={member.id}")
            return member

        raise FatalError(
            f"Could not resolve member {slack_uid} for {period} after {self._max_create_attempts} attempts",
            detail={"slack_uid": slack_uid, "period": period.key},
        )
