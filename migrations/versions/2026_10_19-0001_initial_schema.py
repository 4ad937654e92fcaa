"""initial schema: users, habits, habit completions, user streaks

Revision ID: 0001
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

habit_frequency_enum = sa.Enum("daily", "weekly", "monthly", name="habit_frequency_enum")


def timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="Время создания записи",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="Время последнего обновления записи",
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=True),
        sa.Column("timezone", sa.String(length=50), server_default="UTC", nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *timestamp_columns(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_external_id"), "users", ["external_id"], unique=True)

    op.create_table(
        "habits",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("frequency", habit_frequency_enum, nullable=False),
        sa.Column("days_of_week", sa.JSON(), nullable=True),
        sa.Column("days_of_month", sa.JSON(), nullable=True),
        sa.Column("streak", sa.Integer(), nullable=False),
        sa.Column("longest_streak", sa.Integer(), nullable=False),
        sa.Column("last_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completion_history", sa.JSON(), nullable=False),
        *timestamp_columns(),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_habits_user_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_habits")),
    )
    op.create_index(op.f("ix_habits_id"), "habits", ["id"], unique=False)
    op.create_index(op.f("ix_habits_user_id"), "habits", ["user_id"], unique=False)
    op.create_index(op.f("ix_habits_category"), "habits", ["category"], unique=False)

    op.create_table(
        "habit_completions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("habit_id", sa.Integer(), nullable=False),
        sa.Column("completion_date", sa.Date(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_completed", sa.Boolean(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        *timestamp_columns(),
        sa.ForeignKeyConstraint(
            ["habit_id"], ["habits.id"], name=op.f("fk_habit_completions_habit_id_habits"), ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_habit_completions_user_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_habit_completions")),
        sa.UniqueConstraint("habit_id", "completion_date", name="uq_habit_completion_per_day"),
    )
    op.create_index(op.f("ix_habit_completions_id"), "habit_completions", ["id"], unique=False)
    op.create_index(op.f("ix_habit_completions_user_id"), "habit_completions", ["user_id"], unique=False)
    op.create_index(op.f("ix_habit_completions_habit_id"), "habit_completions", ["habit_id"], unique=False)
    op.create_index(
        op.f("ix_habit_completions_completion_date"), "habit_completions", ["completion_date"], unique=False
    )

    op.create_table(
        "user_streaks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("current_streak", sa.Integer(), nullable=False),
        sa.Column("longest_streak", sa.Integer(), nullable=False),
        sa.Column("last_streak_date", sa.Date(), nullable=True),
        sa.Column("total_habits_completed", sa.Integer(), nullable=False),
        *timestamp_columns(),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_user_streaks_user_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_user_streaks")),
    )
    op.create_index(op.f("ix_user_streaks_id"), "user_streaks", ["id"], unique=False)
    op.create_index(op.f("ix_user_streaks_user_id"), "user_streaks", ["user_id"], unique=True)


def downgrade() -> None:
    op.drop_index(op.f("ix_user_streaks_user_id"), table_name="user_streaks")
    op.drop_index(op.f("ix_user_streaks_id"), table_name="user_streaks")
    op.drop_table("user_streaks")

    op.drop_index(op.f("ix_habit_completions_completion_date"), table_name="habit_completions")
    op.drop_index(op.f("ix_habit_completions_habit_id"), table_name="habit_completions")
    op.drop_index(op.f("ix_habit_completions_user_id"), table_name="habit_completions")
    op.drop_index(op.f("ix_habit_completions_id"), table_name="habit_completions")
    op.drop_table("habit_completions")

    op.drop_index(op.f("ix_habits_category"), table_name="habits")
    op.drop_index(op.f("ix_habits_user_id"), table_name="habits")
    op.drop_index(op.f("ix_habits_id"), table_name="habits")
    op.drop_table("habits")

    op.drop_index(op.f("ix_users_external_id"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_table("users")

    # Тип ENUM в PostgreSQL не удаляется вместе с таблицей
    habit_frequency_enum.drop(op.get_bind(), checkfirst=True)
