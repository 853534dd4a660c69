"""Create users table

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users table."""
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=True),
        sa.Column("provider", sa.Text(), nullable=False, server_default=sa.text("'local'")),
        sa.Column("google_id", sa.Text(), nullable=True),
        sa.Column("role", sa.Text(), nullable=False, server_default=sa.text("'user'")),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column("reset_password_token", sa.Text(), nullable=True),
        sa.Column("reset_password_token_expires", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("deleted_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.UniqueConstraint("google_id", name="uq_users_google_id"),
        sa.CheckConstraint("provider IN ('local', 'google')", name="ck_users_provider"),
        sa.CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),
        sa.CheckConstraint(
            "(provider = 'local' AND password_hash IS NOT NULL AND google_id IS NULL) OR "
            "(provider = 'google' AND password_hash IS NULL AND google_id IS NOT NULL)",
            name="ck_users_credentials",
        ),
    )

    # Create indexes
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_refresh_token", "users", ["refresh_token"], unique=False)
    op.create_index(
        "ix_users_reset_password_token", "users", ["reset_password_token"], unique=False
    )


def downgrade() -> None:
    """Drop users table."""
    op.drop_index("ix_users_reset_password_token", table_name="users")
    op.drop_index("ix_users_refresh_token", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
