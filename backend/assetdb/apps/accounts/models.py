# backend/assetdb/apps/accounts/models.py

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    String,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship

from assetdb.database import Base
from assetdb.user_id import generate_company_id, generate_user_id


# ---------------------------------------------------------------------------
# ENUMS
# ---------------------------------------------------------------------------


class AccountRole(str, enum.Enum):
    """High-level roles used by the permission table in assetdb.permissions."""

    SUPERUSER = "SUPERUSER"           # Platform owner
    ADMIN = "ADMIN"                   # Company admin
    ASSET_MANAGER = "ASSET_MANAGER"
    TECHNICIAN = "TECHNICIAN"
    VIEW_ONLY = "VIEW_ONLY"


# ---------------------------------------------------------------------------
# COMPANY
# ---------------------------------------------------------------------------


class Company(Base):
    """
    Tenant boundary for inventory records.

    When multi-company support is enabled, non-superusers only see and
    create records for their own company.
    """

    __tablename__ = "companies"

    id = Column(
        String(36),
        primary_key=True,
        default=generate_company_id,
    )
    name = Column(String(255), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    users = relationship(
        "User",
        back_populates="company",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Company {self.name}>"


# ---------------------------------------------------------------------------
# USER
# ---------------------------------------------------------------------------


class User(Base):
    """
    User account.

    company_id is nullable: users without a company are not restricted by
    company scoping, the same as superusers.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("idx_users_role_active", "role", "is_active"),
    )

    id = Column(
        String(36),
        primary_key=True,
        default=generate_user_id,
    )

    company_id = Column(
        String(36),
        ForeignKey("companies.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    email = Column(String(255), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)

    role = Column(
        Enum(AccountRole, name="account_role_enum"),
        nullable=False,
        default=AccountRole.TECHNICIAN,
        index=True,
    )

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_superuser = Column(Boolean, nullable=False, default=False, index=True)

    hashed_password = Column(String(255), nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    company = relationship("Company", back_populates="users")

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
