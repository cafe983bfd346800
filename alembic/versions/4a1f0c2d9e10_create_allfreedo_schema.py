"""Create rooms, roomies, task templates, tasks and ratings

Revision ID: 4a1f0c2d9e10
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4a1f0c2d9e10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "roomies",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("avatar", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index(op.f("ix_roomies_user_id"), "roomies", ["user_id"], unique=True)

    op.create_table(
        "rooms",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("access_code", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("roomies.id", ondelete="SET NULL"), nullable=True),
    )
    op.create_index(op.f("ix_rooms_access_code"), "rooms", ["access_code"], unique=True)

    op.create_table(
        "roomie_room",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("roomie_id", sa.Integer(), sa.ForeignKey("roomies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("room_id", "roomie_id", name="uq_roomie_room_membership"),
    )
    op.create_index(op.f("ix_roomie_room_room_id"), "roomie_room", ["room_id"], unique=False)
    op.create_index(op.f("ix_roomie_room_roomie_id"), "roomie_room", ["roomie_id"], unique=False)

    op.create_table(
        "task_templates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("weight", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("recurring", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("recurrence_rule", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("roomies.id", ondelete="SET NULL"), nullable=True),
        sa.Column("last_assigned_roomie_id", sa.Integer(), sa.ForeignKey("roomies.id", ondelete="SET NULL"), nullable=True),
    )
    op.create_index(op.f("ix_task_templates_room_id"), "task_templates", ["room_id"], unique=False)

    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("weight", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("assigned_roomie_id", sa.Integer(), sa.ForeignKey("roomies.id", ondelete="SET NULL"), nullable=True),
        sa.Column("scheduled_date", sa.Date(), nullable=True),
        sa.Column("is_done", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("done_date", sa.DateTime(), nullable=True),
        sa.Column("done_by", sa.Integer(), sa.ForeignKey("roomies.id", ondelete="SET NULL"), nullable=True),
        sa.Column("task_template_id", sa.Integer(), sa.ForeignKey("task_templates.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index(op.f("ix_tasks_room_id"), "tasks", ["room_id"], unique=False)
    op.create_index(op.f("ix_tasks_assigned_roomie_id"), "tasks", ["assigned_roomie_id"], unique=False)
    op.create_index(op.f("ix_tasks_scheduled_date"), "tasks", ["scheduled_date"], unique=False)
    op.create_index(op.f("ix_tasks_is_done"), "tasks", ["is_done"], unique=False)
    op.create_index(op.f("ix_tasks_task_template_id"), "tasks", ["task_template_id"], unique=False)

    op.create_table(
        "task_ratings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("task_id", sa.Integer(), sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("roomie_id", sa.Integer(), sa.ForeignKey("roomies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("task_id", "roomie_id", name="uq_task_rating_roomie"),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_task_rating_range"),
    )
    op.create_index(op.f("ix_task_ratings_task_id"), "task_ratings", ["task_id"], unique=False)
    op.create_index(op.f("ix_task_ratings_roomie_id"), "task_ratings", ["roomie_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("task_ratings")
    op.drop_table("tasks")
    op.drop_table("task_templates")
    op.drop_table("roomie_room")
    op.drop_table("rooms")
    op.drop_table("roomies")
    op.drop_table("users")
