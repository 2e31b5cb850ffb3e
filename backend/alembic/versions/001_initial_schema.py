"""Initial schema: games_schedule, profiles, notification_logs

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-02-01 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Games: recurring rows use day_of_week, one-off rows use game_date
    op.create_table(
        "games_schedule",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("location", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("day_of_week", sa.Integer(), nullable=True),
        sa.Column("game_date", sa.Date(), nullable=True),
        sa.Column("game_time", sa.String(), nullable=False),
        sa.Column("end_time", sa.String(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_games_schedule_game_date", "games_schedule", ["game_date"])

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # Append-only record of every message Green API accepted
    op.create_table(
        "notification_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("target", sa.String(), nullable=False),
        sa.Column("message", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="sent"),
        sa.Column("gateway_response", sa.JSON(), nullable=True),
        sa.Column("sent_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notification_logs_type", "notification_logs", ["type"])


def downgrade() -> None:
    op.drop_index("ix_notification_logs_type", table_name="notification_logs")
    op.drop_table("notification_logs")
    op.drop_table("profiles")
    op.drop_index("ix_games_schedule_game_date", table_name="games_schedule")
    op.drop_table("games_schedule")
