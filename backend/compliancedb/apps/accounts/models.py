# backend/compliancedb/apps/accounts/models.py

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from compliancedb.database import Base
from compliancedb.utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# ENUMS
# ---------------------------------------------------------------------------


class MemberRole(str, enum.Enum):
    """Roles inside one customer organization.

    OWNER / ADMIN hold the "manage team" permission (assign, remind, delete
    training); MEMBER can only see and complete their own training.
    """

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


# ---------------------------------------------------------------------------
# ORGANIZATION + MEMBERS
# ---------------------------------------------------------------------------


class Organization(Base):
    """
    Customer organization. Every training record is scoped to exactly one.
    """

    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    name = Column(String(255), nullable=False)
    slug = Column(String(64), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    members = relationship("OrgMember", back_populates="organization", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Organization id={self.id} slug={self.slug}>"


class OrgMember(Base):
    """
    A signed-in user of the product, always belonging to one organization.
    """

    __tablename__ = "org_members"
    __table_args__ = (
        UniqueConstraint("org_id", "email", name="uq_org_members_org_email"),
        Index("ix_org_members_org_role", "org_id", "role"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    org_id = Column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    email = Column(String(255), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    role = Column(
        Enum(MemberRole, name="member_role_enum", native_enum=False),
        nullable=False,
        default=MemberRole.MEMBER,
    )
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    organization = relationship("Organization", back_populates="members", lazy="joined")

    @property
    def can_manage_team(self) -> bool:
        return self.role in (MemberRole.OWNER, MemberRole.ADMIN)

    def __repr__(self) -> str:
        return f"<OrgMember id={self.id} email={self.email} role={self.role}>"
