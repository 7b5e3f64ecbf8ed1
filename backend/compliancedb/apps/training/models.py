# backend/compliancedb/apps/training/models.py

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
    Integer,
    JSON,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ...database import Base
from ...utils.identifiers import generate_magic_token, generate_uuid7
from .catalog import TrainingTrack


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls):
    # Persist the lowercase wire values ("in_progress"), not member names.
    return [member.value for member in enum_cls]


# ---------------------------------------------------------------------------
# ENUMS
# ---------------------------------------------------------------------------


class AssignmentStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = [AssignmentStatus.PENDING, AssignmentStatus.IN_PROGRESS, AssignmentStatus.COMPLETED]


class NotificationType(str, enum.Enum):
    """Expiry reminder tiers, named by days remaining before expiry."""

    DAY_30 = "day_30"
    DAY_7 = "day_7"
    DAY_0 = "day_0"


class NotificationRecordStatus(str, enum.Enum):
    """
    - CLAIMED: a worker owns the (certificate, tier) pair and is delivering
    - SENT: delivery accepted; the row is permanent
    """

    CLAIMED = "CLAIMED"
    SENT = "SENT"


# ---------------------------------------------------------------------------
# ASSIGNMENTS
# ---------------------------------------------------------------------------


class TrainingAssignment(Base):
    """
    "This person must complete this track" for one organization.

    Status only moves forward (pending -> in_progress -> completed);
    completed_at is set exactly once, on the move to completed.
    """

    __tablename__ = "training_assignments"
    __table_args__ = (
        UniqueConstraint("org_id", "user_email", "track", name="uq_training_assignments_org_email_track"),
        Index("idx_training_assignments_org_status", "org_id", "status"),
        Index("idx_training_assignments_email", "user_email"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)

    org_id = Column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    track = Column(
        Enum(TrainingTrack, name="training_track_enum", native_enum=False, values_callable=_enum_values),
        nullable=False,
        index=True,
    )
    user_email = Column(String(255), nullable=False)
    user_name = Column(String(255), nullable=False)

    status = Column(
        Enum(AssignmentStatus, name="training_assignment_status_enum", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=AssignmentStatus.PENDING,
        index=True,
    )

    assigned_by_user_id = Column(
        String(36),
        ForeignKey("org_members.id", ondelete="SET NULL"),
        nullable=True,
    )
    assigned_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    magic_token = Column(
        String(64),
        nullable=False,
        unique=True,
        default=generate_magic_token,
        doc="Opaque token for the login-free training link.",
    )
    token_expires_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    organization = relationship("Organization", lazy="joined")
    progress = relationship(
        "TrainingSectionProgress",
        back_populates="assignment",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TrainingSectionProgress.section_number",
        lazy="selectin",
    )
    quiz_attempts = relationship(
        "TrainingQuizAttempt",
        back_populates="assignment",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="select",
    )
    certificate = relationship(
        "TrainingCertificate",
        back_populates="assignment",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="select",
    )

    def __repr__(self) -> str:
        return f"<TrainingAssignment id={self.id} track={self.track} status={self.status}>"


# ---------------------------------------------------------------------------
# PROGRESS
# ---------------------------------------------------------------------------


class TrainingSectionProgress(Base):
    """
    One row per (assignment, section) ever touched, created lazily.

    quiz_completed_at is only set by a passing quiz submission; failed
    submissions just bump `attempts`.
    """

    __tablename__ = "training_section_progress"
    __table_args__ = (
        UniqueConstraint("assignment_id", "section_number", name="uq_training_progress_assignment_section"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    assignment_id = Column(
        String(36),
        ForeignKey("training_assignments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    section_number = Column(Integer, nullable=False)

    video_watched_seconds = Column(Integer, nullable=False, default=0)
    video_total_seconds = Column(Integer, nullable=False, default=0)
    video_completed_at = Column(DateTime(timezone=True), nullable=True)

    quiz_completed_at = Column(DateTime(timezone=True), nullable=True)
    quiz_score = Column(Integer, nullable=True, doc="Best passing score, 0-100.")
    attempts = Column(Integer, nullable=False, default=0)

    started_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    assignment = relationship("TrainingAssignment", back_populates="progress")

    def __repr__(self) -> str:
        return (
            f"<TrainingSectionProgress assignment={self.assignment_id} "
            f"section={self.section_number} attempts={self.attempts}>"
        )


class TrainingQuizAttempt(Base):
    """Append-only history of every quiz submission, passed or not."""

    __tablename__ = "training_quiz_attempts"
    __table_args__ = (
        Index("idx_training_quiz_attempts_assignment_section", "assignment_id", "section_number"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    assignment_id = Column(
        String(36),
        ForeignKey("training_assignments.id", ondelete="CASCADE"),
        nullable=False,
    )
    section_number = Column(Integer, nullable=False)
    answers = Column(JSON, nullable=False)
    score = Column(Integer, nullable=False)
    passed = Column(Boolean, nullable=False, default=False)
    submitted_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    assignment = relationship("TrainingAssignment", back_populates="quiz_attempts")


# ---------------------------------------------------------------------------
# CERTIFICATES
# ---------------------------------------------------------------------------


class TrainingCertificate(Base):
    """
    Issued once per assignment on track completion; immutable afterwards.
    Recertification issues a new certificate on a new assignment.
    """

    __tablename__ = "training_certificates"

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    assignment_id = Column(
        String(36),
        ForeignKey("training_assignments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    certificate_number = Column(String(32), nullable=False, unique=True, index=True)
    issued_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    assignment = relationship("TrainingAssignment", back_populates="certificate", lazy="joined")
    notifications = relationship(
        "TrainingCertNotification",
        back_populates="certificate",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="select",
    )

    def __repr__(self) -> str:
        return f"<TrainingCertificate number={self.certificate_number} expires={self.expires_at}>"


class TrainingCertNotification(Base):
    """
    Notification ledger: at most one row per (certificate, tier).

    The unique constraint is what makes expiry reminders at-most-once when
    several runs overlap.
    """

    __tablename__ = "training_cert_notifications"
    __table_args__ = (
        UniqueConstraint(
            "certificate_id",
            "notification_type",
            name="uq_training_cert_notifications_cert_type",
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    certificate_id = Column(
        String(36),
        ForeignKey("training_certificates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    notification_type = Column(
        Enum(NotificationType, name="training_notification_type_enum", native_enum=False, values_callable=_enum_values),
        nullable=False,
    )
    status = Column(
        Enum(NotificationRecordStatus, name="training_notification_status_enum", native_enum=False),
        nullable=False,
        default=NotificationRecordStatus.CLAIMED,
    )
    email_to = Column(String(255), nullable=False)
    email_message_id = Column(String(255), nullable=True)
    claimed_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    sent_at = Column(DateTime(timezone=True), nullable=True)

    certificate = relationship("TrainingCertificate", back_populates="notifications")

    def __repr__(self) -> str:
        return (
            f"<TrainingCertNotification cert={self.certificate_id} "
            f"type={self.notification_type} status={self.status}>"
        )
