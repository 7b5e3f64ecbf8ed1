"""Assignment Store: bulk creation, listing, lookup and removal of training assignments."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, List, Mapping, Optional, Sequence

from pydantic import EmailStr, TypeAdapter, ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from compliancedb.apps.audit import services as audit_services
from compliancedb.apps.notifications.service import deliver_email
from compliancedb.utils.dates import ensure_utc, utcnow

from . import emails, models
from .catalog import TrainingTrack, parse_track, total_sections, track_label
from .errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

try:
    TOKEN_TTL_DAYS = int(os.getenv("TRAINING_TOKEN_TTL_DAYS", "30"))
except ValueError:
    TOKEN_TTL_DAYS = 30

_email_adapter = TypeAdapter(EmailStr)


@dataclass(frozen=True)
class AssignmentRequest:
    name: str
    email: str
    track: TrainingTrack


@dataclass(frozen=True)
class AssignmentOutcome:
    email: str
    assignment: models.TrainingAssignment
    created: bool

    @property
    def status(self) -> str:
        return "assigned" if self.created else "already_assigned"


def _field(entry: Any, key: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(key)
    return getattr(entry, key, None)


def _normalise_email(value: str) -> str:
    return value.strip().lower()


def validate_entries(entries: Sequence[Any]) -> List[AssignmentRequest]:
    """
    Validate a whole batch up front so a bad row never leaves a partial write.
    """
    if not entries:
        raise ValidationError("No assignments provided")

    requests: List[AssignmentRequest] = []
    for index, entry in enumerate(entries):
        name = _field(entry, "name")
        email = _field(entry, "email")
        track = _field(entry, "track")
        if not name or not str(name).strip() or not email or not str(email).strip() or not track:
            raise ValidationError(f"Invalid assignment data at row {index + 1}: name, email and track are required")
        try:
            _email_adapter.validate_python(str(email).strip())
        except PydanticValidationError:
            raise ValidationError(f"Invalid email address at row {index + 1}: {email}")
        requests.append(
            AssignmentRequest(
                name=str(name).strip(),
                email=_normalise_email(str(email)),
                track=parse_track(track),
            )
        )
    return requests


def create_assignments(
    db: Session,
    *,
    org_id: str,
    entries: Sequence[Any],
    assigned_by_user_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[AssignmentOutcome]:
    """
    Bulk-create pending assignments for one organization.

    An existing (org, email, track) assignment is returned as-is with
    created=False. Invite emails are the caller's job.
    """
    requests = validate_entries(entries)
    now = now or utcnow()

    outcomes: List[AssignmentOutcome] = []
    seen: dict = {}
    for req in requests:
        key = (req.email, req.track)
        if key in seen:
            outcomes.append(AssignmentOutcome(email=req.email, assignment=seen[key], created=False))
            continue

        existing = (
            db.query(models.TrainingAssignment)
            .filter(
                models.TrainingAssignment.org_id == org_id,
                models.TrainingAssignment.user_email == req.email,
                models.TrainingAssignment.track == req.track,
            )
            .first()
        )
        if existing:
            seen[key] = existing
            outcomes.append(AssignmentOutcome(email=req.email, assignment=existing, created=False))
            continue

        assignment = models.TrainingAssignment(
            org_id=org_id,
            track=req.track,
            user_email=req.email,
            user_name=req.name,
            status=models.AssignmentStatus.PENDING,
            assigned_by_user_id=assigned_by_user_id,
            assigned_at=now,
            token_expires_at=now + timedelta(days=TOKEN_TTL_DAYS),
        )
        db.add(assignment)
        db.flush()
        seen[key] = assignment
        audit_services.log_event(
            db,
            org_id=org_id,
            actor_user_id=assigned_by_user_id,
            entity_type="training_assignment",
            entity_id=str(assignment.id),
            action="assigned",
            after={"track": req.track.value, "user_email": req.email, "status": assignment.status.value},
            metadata={"module": "training"},
        )
        outcomes.append(AssignmentOutcome(email=req.email, assignment=assignment, created=True))

    logger.info(
        "Training assignments created",
        extra={
            "org_id": org_id,
            "created": sum(1 for o in outcomes if o.created),
            "existing": sum(1 for o in outcomes if not o.created),
        },
    )
    return outcomes


def list_assignments(
    db: Session,
    *,
    org_id: str,
    status: Optional[models.AssignmentStatus] = None,
    track: Optional[TrainingTrack] = None,
    email: Optional[str] = None,
) -> Sequence[models.TrainingAssignment]:
    qs = db.query(models.TrainingAssignment).filter(models.TrainingAssignment.org_id == org_id)
    if status:
        qs = qs.filter(models.TrainingAssignment.status == status)
    if track:
        qs = qs.filter(models.TrainingAssignment.track == track)
    if email:
        qs = qs.filter(models.TrainingAssignment.user_email == _normalise_email(email))
    return qs.order_by(models.TrainingAssignment.created_at.desc(), models.TrainingAssignment.id.desc()).all()


def list_assignments_for_email(db: Session, *, email: str) -> Sequence[models.TrainingAssignment]:
    return (
        db.query(models.TrainingAssignment)
        .filter(models.TrainingAssignment.user_email == _normalise_email(email))
        .order_by(models.TrainingAssignment.assigned_at.desc())
        .all()
    )


def get_assignment(
    db: Session,
    assignment_id: str,
    *,
    org_id: Optional[str] = None,
) -> models.TrainingAssignment:
    qs = db.query(models.TrainingAssignment).filter(models.TrainingAssignment.id == assignment_id)
    if org_id is not None:
        qs = qs.filter(models.TrainingAssignment.org_id == org_id)
    assignment = qs.first()
    if not assignment:
        raise NotFoundError("Assignment not found")
    return assignment


def get_assignment_by_token(
    db: Session,
    token: str,
    *,
    now: Optional[datetime] = None,
) -> models.TrainingAssignment:
    """Resolve a training link token; unknown and expired tokens look the same."""
    now = now or utcnow()
    assignment = (
        db.query(models.TrainingAssignment)
        .filter(models.TrainingAssignment.magic_token == token)
        .first()
    )
    if not assignment:
        raise NotFoundError("Assignment not found")
    expires_at = ensure_utc(assignment.token_expires_at)
    if expires_at is not None and expires_at <= now:
        raise NotFoundError("Link has expired")
    return assignment


def delete_assignment(
    db: Session,
    *,
    org_id: str,
    assignment_id: str,
    actor_user_id: Optional[str] = None,
) -> None:
    """Hard delete; progress, attempts, certificate and ledger rows go with it."""
    assignment = get_assignment(db, assignment_id, org_id=org_id)
    before = {
        "track": assignment.track.value,
        "user_email": assignment.user_email,
        "status": assignment.status.value,
    }
    db.delete(assignment)
    db.flush()
    audit_services.log_event(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        entity_type="training_assignment",
        entity_id=str(assignment_id),
        action="deleted",
        before=before,
        metadata={"module": "training"},
        critical=True,
    )


def refresh_link(assignment: models.TrainingAssignment, *, now: Optional[datetime] = None) -> None:
    """Extend an expired training link, e.g. before a manual reminder."""
    now = now or utcnow()
    expires_at = ensure_utc(assignment.token_expires_at)
    if expires_at is None or expires_at <= now:
        assignment.token_expires_at = now + timedelta(days=TOKEN_TTL_DAYS)


# ---------------------------------------------------------------------------
# INVITES / MANUAL REMINDERS
# ---------------------------------------------------------------------------


def _org_name(assignment: models.TrainingAssignment) -> str:
    org = assignment.organization
    return org.name if org and org.name else "Your Company"


def send_invite(
    db: Session,
    assignment: models.TrainingAssignment,
    *,
    base_url: Optional[str] = None,
    correlation_id: Optional[str] = None,
) -> Optional[str]:
    """Email the training link to a newly assigned learner. Best-effort."""
    rendered = emails.render_invite_email(
        name=assignment.user_name,
        track_label=track_label(assignment.track),
        org_name=_org_name(assignment),
        training_url=emails.training_link(assignment.magic_token, override_base=base_url),
    )
    return deliver_email(
        "training_invite",
        [assignment.user_email],
        rendered.subject,
        rendered.html,
        org_id=assignment.org_id,
        db=db,
        context={"assignment_id": assignment.id, "track": assignment.track.value},
        correlation_id=correlation_id or f"training-invite:{assignment.id}",
    )


def send_completion_reminder(
    db: Session,
    *,
    org_id: str,
    assignment_id: str,
    base_url: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[str]:
    """
    Nudge a learner who has not finished. Expired links are extended first
    so the reminder is usable.
    """
    assignment = get_assignment(db, assignment_id, org_id=org_id)
    if assignment.status == models.AssignmentStatus.COMPLETED:
        raise ValidationError("Training already completed")

    now = now or utcnow()
    refresh_link(assignment, now=now)
    db.flush()

    completed = sum(1 for p in assignment.progress if p.quiz_completed_at is not None)
    rendered = emails.render_completion_reminder_email(
        name=assignment.user_name,
        track_label=track_label(assignment.track),
        org_name=_org_name(assignment),
        training_url=emails.training_link(assignment.magic_token, override_base=base_url),
        completed_sections=completed,
        total_sections=total_sections(assignment.track),
    )
    return deliver_email(
        "training_reminder",
        [assignment.user_email],
        rendered.subject,
        rendered.html,
        org_id=assignment.org_id,
        db=db,
        context={"assignment_id": assignment.id, "completed_sections": completed},
        correlation_id=f"training-reminder:{assignment.id}:{now.date().isoformat()}",
    )
