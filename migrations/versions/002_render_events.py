"""render events

Revision ID: 002
Revises: 001
Create Date: 2026-09-28 10:05:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "render_events",
        sa.Column("id", sa.Integer(), sa.Identity(), primary_key=True),
        sa.Column("run_id", sa.String(length=100), nullable=True),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), server_default="{}", nullable=False),
        sa.Column("execution_seconds", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_render_events_run_id", "render_events", ["run_id"])
    op.create_index("ix_render_events_created_at", "render_events", ["created_at"])


def downgrade():
    op.drop_index("ix_render_events_created_at", table_name="render_events")
    op.drop_index("ix_render_events_run_id", table_name="render_events")
    op.drop_table("render_events")
