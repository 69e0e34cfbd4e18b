"""create lesson_plans

Revision ID: 5c1f0e7a2b94
Revises:
Create Date: 2026-10-19 09:12:44.281310

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "5c1f0e7a2b94"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
  """Upgrade schema."""
  op.create_table(
    "lesson_plans",
    sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
    sa.Column("topic_key", sa.String(), nullable=False),
    sa.Column("key_concepts", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
    sa.Column("analogies", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
    sa.Column("quiz", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.PrimaryKeyConstraint("id"),
  )
  # Unique so concurrent first requests for a topic store one row.
  op.create_index(op.f("ix_lesson_plans_topic_key"), "lesson_plans", ["topic_key"], unique=True)


def downgrade() -> None:
  """Downgrade schema."""
  op.drop_index(op.f("ix_lesson_plans_topic_key"), table_name="lesson_plans")
  op.drop_table("lesson_plans")
