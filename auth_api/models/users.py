"""User model definition using SQLAlchemy Core."""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    MetaData,
    String,
    Table,
    Text,
)

metadata = MetaData()


class UserProvider(str, Enum):
    """Where the account's credentials live."""

    LOCAL = "local"
    GOOGLE = "google"


class UserRole(str, Enum):
    """Authorization role."""

    USER = "user"
    ADMIN = "admin"


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(UTC)


users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True, default=lambda: str(uuid4())),
    # Identity
    Column("email", Text, nullable=False, unique=True, index=True),
    Column("name", Text, nullable=False),
    # Credentials: password hash for local accounts, google_id for google accounts
    Column("password_hash", Text, nullable=True),
    Column("provider", Text, nullable=False, default=UserProvider.LOCAL.value),
    Column("google_id", Text, nullable=True, unique=True),
    Column("role", Text, nullable=False, default=UserRole.USER.value),
    # Session state (single active refresh token)
    Column("refresh_token", Text, nullable=True, index=True),
    # Password reset (set and cleared together)
    Column("reset_password_token", Text, nullable=True, index=True),
    Column("reset_password_token_expires", DateTime(timezone=True), nullable=True),
    # Audit
    Column("created_at", DateTime(timezone=True), nullable=False, default=utcnow),
    Column("updated_at", DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow),
    Column("deleted_at", DateTime(timezone=True), nullable=True),
    CheckConstraint("provider IN ('local', 'google')", name="ck_users_provider"),
    CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),
    CheckConstraint(
        "(provider = 'local' AND password_hash IS NOT NULL AND google_id IS NULL) OR "
        "(provider = 'google' AND password_hash IS NULL AND google_id IS NOT NULL)",
        name="ck_users_credentials",
    ),
)
