"""Add campfire tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

Adds fires, messages, battle_plans and duels. A duel row is keyed by its
fire, so a fire holds at most one duel at a time.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    # ============================================
    # Create fires table
    # ============================================
    op.create_table(
        "fires",
        sa.Column("id", sa.String(200), primary_key=True),
        *_timestamps(),
    )

    # ============================================
    # Create messages table
    # ============================================
    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("fire_id", sa.String(200), sa.ForeignKey("fires.id"), nullable=False, index=True),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("author", sa.String(200), nullable=True),
        *_timestamps(),
    )

    # ============================================
    # Create battle_plans table
    # ============================================
    op.create_table(
        "battle_plans",
        sa.Column("fire_id", sa.String(200), sa.ForeignKey("fires.id"), primary_key=True),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps(),
    )

    # ============================================
    # Create duels table
    # ============================================
    duel_role_enum = sa.Enum("challenger", "defender", "judge", name="duel_role")

    op.create_table(
        "duels",
        sa.Column("fire_id", sa.String(200), sa.ForeignKey("fires.id"), primary_key=True),
        sa.Column("challenger_name", sa.String(200), nullable=False),
        sa.Column("defender_name", sa.String(200), nullable=False),
        sa.Column("judge_name", sa.String(200), nullable=True),
        sa.Column("thesis_of_attack", sa.Text(), nullable=False),
        sa.Column("current_turn", duel_role_enum, nullable=False, server_default="challenger"),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("duels")
    op.drop_table("battle_plans")
    op.drop_table("messages")
    op.drop_table("fires")

    sa.Enum(name="duel_role").drop(op.get_bind(), checkfirst=True)
