"""SQLAlchemy table definitions for Lynkr.

They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

metadata = MetaData()

# ============================================================================
# USERS TABLE (ban and role are user-global)
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("name", String(255), nullable=True),
    Column("email", String(255), nullable=True),
    Column("image", Text, nullable=True),
    Column("handle", String(30), nullable=True, unique=True),  # NULL until onboarding
    Column("role", String(20), nullable=False, server_default="user"),
    Column("banned", Boolean, nullable=False, server_default="false"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

# ============================================================================
# ACCOUNTS TABLE (provider identity bindings)
# ============================================================================
accounts_table = Table(
    "accounts",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("user_id", UUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("provider", String(50), nullable=False),  # 'google', 'github', 'discord'
    Column("subject_id", String(255), nullable=False),
    Column("provider_handle", String(255), nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint("provider", "subject_id", name="uq_accounts_provider_subject"),
    UniqueConstraint("user_id", "provider", name="uq_accounts_user_provider"),
)

Index("idx_accounts_user_id", accounts_table.c.user_id)

# ============================================================================
# LINKING TOKENS TABLE (single-use, short-lived)
# ============================================================================
linking_tokens_table = Table(
    "linking_tokens",
    metadata,
    Column("token", String(128), primary_key=True),
    Column("user_id", UUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("provider", String(50), nullable=False),
    Column("expires_at", TIMESTAMP(timezone=True), nullable=False),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("subject_id", String(255), nullable=True),
    Column("subject_handle", String(255), nullable=True),
)

Index("idx_linking_tokens_expires_at", linking_tokens_table.c.expires_at)
