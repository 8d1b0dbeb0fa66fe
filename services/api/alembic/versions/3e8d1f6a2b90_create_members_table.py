"""create_members_table

Revision ID: 3e8d1f6a2b90
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3e8d1f6a2b90"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("slack_uid", sa.String(length=64), nullable=False),
        sa.Column("period_key", sa.String(length=7), nullable=False),
        sa.Column("received_likes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("received_dislikes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.CheckConstraint("received_likes >= 0", name="ck_members_received_likes_non_negative"),
        sa.CheckConstraint("received_dislikes >= 0", name="ck_members_received_dislikes_non_negative"),
        sa.PrimaryKeyConstraint("id"),
        # One row per member per month; the reconciler relies on this to detect create races.
        sa.UniqueConstraint("slack_uid", "period_key", name="uq_members_slack_uid_period_key"),
    )

    op.create_index(op.f("ix_members_period_key"), "members", ["period_key"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_members_period_key"), table_name="members")
    op.drop_table("members")
