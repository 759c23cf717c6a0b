"""Create community rewards tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 10:00:00.000000

Creates the following tables:
- members: Members with spendable coins and loyalty points
- user_privileges: Privilege grants per member
- rewards: Reward catalog
- reward_redemptions: Redemption records and their lifecycle
- point_history: Append-only ledger of coin movements
- notifications: In-app member notifications
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ========================================
    # 1. members table
    # ========================================
    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        # Balances
        sa.Column("coin", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("loyalty_point", sa.Integer(), nullable=False, server_default="0"),
        # Timestamps
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        # Constraints
        sa.PrimaryKeyConstraint("id", name="pk_members"),
        sa.UniqueConstraint("email", name="uq_members_email"),
        sa.CheckConstraint("coin >= 0", name="ck_members_coin_non_negative"),
    )

    # ========================================
    # 2. user_privileges table
    # ========================================
    op.create_table(
        "user_privileges",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("privilege", sa.String(30), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("granted_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_user_privileges"),
        sa.ForeignKeyConstraint(
            ["member_id"], ["members.id"],
            name="fk_user_privileges_member_id_members",
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_user_privileges_member_active", "user_privileges", ["member_id", "is_active"]
    )

    # ========================================
    # 3. rewards table
    # ========================================
    op.create_table(
        "rewards",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("reward_name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("point_cost", sa.Integer(), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("required_privilege", sa.String(30), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_rewards"),
        sa.CheckConstraint("stock >= 0", name="ck_rewards_stock_non_negative"),
        sa.CheckConstraint("point_cost > 0", name="ck_rewards_point_cost_positive"),
    )
    op.create_index("ix_rewards_is_active", "rewards", ["is_active"])

    # ========================================
    # 4. reward_redemptions table
    # ========================================
    op.create_table(
        "reward_redemptions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("reward_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("points_spent", sa.Integer(), nullable=False),
        # Status info
        sa.Column("status", sa.String(30), nullable=False, server_default="awaiting_verification"),
        sa.Column("shipping_notes", sa.Text(), nullable=True),
        sa.Column("redemption_notes", sa.Text(), nullable=True),
        sa.Column("tracking_number", sa.String(100), nullable=True),
        # Time info
        sa.Column("redeemed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("shipped_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        # Constraints
        sa.PrimaryKeyConstraint("id", name="pk_reward_redemptions"),
        sa.ForeignKeyConstraint(
            ["member_id"], ["members.id"],
            name="fk_reward_redemptions_member_id_members",
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["reward_id"], ["rewards.id"],
            name="fk_reward_redemptions_reward_id_rewards",
            ondelete="RESTRICT",
        ),
        sa.CheckConstraint(
            "status IN ('awaiting_verification', 'shipped', 'delivered', 'rejected', 'cancelled')",
            name="ck_reward_redemptions_status",
        ),
        sa.CheckConstraint("quantity >= 1", name="ck_reward_redemptions_quantity_positive"),
        sa.CheckConstraint(
            "points_spent >= 0", name="ck_reward_redemptions_points_spent_non_negative"
        ),
    )
    op.create_index("ix_reward_redemptions_member_id", "reward_redemptions", ["member_id"])
    op.create_index("ix_reward_redemptions_reward_id", "reward_redemptions", ["reward_id"])
    op.create_index("ix_reward_redemptions_status", "reward_redemptions", ["status"])
    op.create_index("ix_reward_redemptions_redeemed_at", "reward_redemptions", ["redeemed_at"])

    # ========================================
    # 5. point_history table
    # ========================================
    op.create_table(
        "point_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("redemption_id", sa.Integer(), nullable=True),
        sa.Column("event", sa.Text(), nullable=False),
        sa.Column("point", sa.Integer(), nullable=False),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_point_history"),
        sa.ForeignKeyConstraint(
            ["member_id"], ["members.id"],
            name="fk_point_history_member_id_members",
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["redemption_id"], ["reward_redemptions.id"],
            name="fk_point_history_redemption_id_reward_redemptions",
            ondelete="RESTRICT",
        ),
    )
    op.create_index("ix_point_history_member", "point_history", ["member_id"])
    op.create_index("ix_point_history_event_type", "point_history", ["event_type"])

    # ========================================
    # 6. notifications table
    # ========================================
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("link_url", sa.String(255), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_notifications"),
        sa.ForeignKeyConstraint(
            ["member_id"], ["members.id"],
            name="fk_notifications_member_id_members",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_notifications_member_id", "notifications", ["member_id"])


def downgrade() -> None:
    # Drop tables in reverse order (respecting foreign key dependencies)
    op.drop_table("notifications")
    op.drop_table("point_history")
    op.drop_table("reward_redemptions")
    op.drop_table("rewards")
    op.drop_table("user_privileges")
    op.drop_table("members")
