"""sessions

Revision ID: 20250106_090000
Revises:
Create Date: 2025-01-06 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20250106_090000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


session_status_enum = sa.Enum("running", "paused", "completed", name="session_status", create_constraint=True)


def upgrade() -> None:
    op.create_table(
        "sessions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=True),
        sa.Column("pause_time", sa.DateTime(), nullable=True),
        sa.Column("paused_seconds", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_seconds", sa.Integer(), nullable=True),
        sa.Column("project", sa.String(), nullable=True),
        sa.Column("tag", sa.String(), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("status", session_status_enum, nullable=False, server_default="running"),
    )
    op.create_index("idx_start_time", "sessions", ["start_time"])
    op.create_index("idx_status", "sessions", ["status"])
    op.create_index("idx_project", "sessions", ["project"])


def downgrade() -> None:
    op.drop_index("idx_project", table_name="sessions")
    op.drop_index("idx_status", table_name="sessions")
    op.drop_index("idx_start_time", table_name="sessions")
    op.drop_table("sessions")
