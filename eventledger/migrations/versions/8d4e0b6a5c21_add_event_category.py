"""Add category to events

Revision ID: 8d4e0b6a5c21
Revises: 3a1f9c2d7b10
Create Date: 2026-09-28
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "8d4e0b6a5c21"
down_revision = "3a1f9c2d7b10"
branch_labels = None
depends_on = None


def upgrade():
    op.add_column(
        "events",
        sa.Column("category", sa.String(50), nullable=True)
    )


def downgrade():
    with op.batch_alter_table("events") as batch_op:
        batch_op.drop_column("category")
