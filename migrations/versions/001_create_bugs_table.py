"""Create bugs table

Revision ID: 001_create_bugs_table
Revises:
Create Date: 2026-10-19

"""
import sqlalchemy as sa
from alembic import op

# revision identifiers
revision = "001_create_bugs_table"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "bugs",
        sa.Column("pk", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column(
            "priority",
            sa.Enum("low", "medium", "high", "critical", name="bug_priority"),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum("open", "in-progress", "resolved", "closed", name="bug_status"),
            nullable=False,
        ),
        sa.Column("assignee", sa.Text, nullable=False),
        sa.Column("reporter", sa.Text, nullable=False),
        sa.Column("environment", sa.Text, nullable=False),
        sa.Column("reproducible", sa.Boolean, nullable=False),
        sa.Column("steps_to_reproduce", sa.Text, nullable=True),
        sa.Column("tags", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_index("ix_bugs_id", "bugs", ["id"], unique=True)
    op.create_index("ix_bugs_priority", "bugs", ["priority"])
    op.create_index("ix_bugs_status", "bugs", ["status"])
    op.create_index("ix_bugs_status_priority", "bugs", ["status", "priority"])
    op.create_index("ix_bugs_created_at", "bugs", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_bugs_created_at", table_name="bugs")
    op.drop_index("ix_bugs_status_priority", table_name="bugs")
    op.drop_index("ix_bugs_status", table_name="bugs")
    op.drop_index("ix_bugs_priority", table_name="bugs")
    op.drop_index("ix_bugs_id", table_name="bugs")
    op.drop_table("bugs")
    sa.Enum(name="bug_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="bug_priority").drop(op.get_bind(), checkfirst=True)
