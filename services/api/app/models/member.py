"""Member model.

One row per (Slack user, period): the likes and dislikes a member received in
that calendar month. Rows are created on the first reaction a member receives
in a period and only ever mutated through the member store.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.stores.postgres import Base


class Member(Base):
    """Per-period reaction counters for a Slack member."""

    __tablename__ = "members"
    __table_args__ = (
        UniqueConstraint("slack_uid", "period_key", name="uq_members_slack_uid_period_key"),
        CheckConstraint("received_likes >= 0", name="ck_members_received_likes_non_negative"),
        CheckConstraint("received_dislikes >= 0", name="ck_members_received_dislikes_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    # Identity (unique only together with period_key)
    slack_uid: Mapped[str] = mapped_column(String(64))
    period_key: Mapped[str] = mapped_column(String(7), index=True)  # YYYY-MM

    # Counters
    received_likes: Mapped[int] = mapped_column(default=0)
    received_dislikes: Mapped[int] = mapped_column(default=0)

    # Timestamps (set by the store from the caller's clock)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return (
            f"<Member {self.slack_uid} {self.period_key} "
            f"likes={self.received_likes} dislikes={self.received_dislikes}>"
        )
