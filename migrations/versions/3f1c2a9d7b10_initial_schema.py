"""initial_schema

Create the identity schema for Lynkr:
- Users (ban flag and role live here, shared by every linked identity)
- Accounts (one row per provider identity bound to a user)
- Linking tokens (single-use, short-lived proof of re-authentication)

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 10:12:44.310528

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ========================================================================
    # USERS table
    # ========================================================================
    op.create_table(
        "users",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("handle", sa.String(30), nullable=True),  # NULL until onboarding
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("banned", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("handle", name="uq_users_handle"),
        sa.CheckConstraint(
            "role IN ('user', 'admin', 'superadmin')", name="ck_users_role"
        ),
    )

    # ========================================================================
    # ACCOUNTS table (provider identities)
    # ========================================================================
    op.create_table(
        "accounts",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("provider", sa.String(50), nullable=False),
        sa.Column("subject_id", sa.String(255), nullable=False),
        sa.Column("provider_handle", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        # An identity backs at most one user
        sa.UniqueConstraint(
            "provider", "subject_id", name="uq_accounts_provider_subject"
        ),
        # A user has at most one identity per provider
        sa.UniqueConstraint("user_id", "provider", name="uq_accounts_user_provider"),
    )
    op.create_index("idx_accounts_user_id", "accounts", ["user_id"])

    # ========================================================================
    # LINKING_TOKENS table
    # ========================================================================
    op.create_table(
        "linking_tokens",
        sa.Column("token", sa.String(128), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("provider", sa.String(50), nullable=False),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column("subject_id", sa.String(255), nullable=True),
        sa.Column("subject_handle", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("token"),
    )
    op.create_index(
        "idx_linking_tokens_expires_at", "linking_tokens", ["expires_at"]
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_linking_tokens_expires_at", table_name="linking_tokens")
    op.drop_table("linking_tokens")
    op.drop_index("idx_accounts_user_id", table_name="accounts")
    op.drop_table("accounts")
    op.drop_table("users")
