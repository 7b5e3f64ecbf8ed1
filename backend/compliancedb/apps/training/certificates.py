"""
Certificate Issuer.

One certificate per assignment, issued when the track is completed. Issuing
twice is a normal outcome (`AlreadyIssued`), not an error, and lookups by
number return `Found` / `NotFound` instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from compliancedb.apps.audit import services as audit_services
from compliancedb.utils.dates import ensure_utc, utcnow
from compliancedb.utils.identifiers import random_code

from . import models
from .catalog import CERTIFICATE_PREFIXES, get_track, track_label

logger = logging.getLogger(__name__)

CERTIFICATE_VALIDITY = timedelta(days=365)
CERTIFICATE_NUMBER_ATTEMPTS = 8


class CertificateNumberExhausted(RuntimeError):
    """No free certificate number after CERTIFICATE_NUMBER_ATTEMPTS tries."""


@dataclass(frozen=True)
class Issued:
    certificate: models.TrainingCertificate
    created: bool = True


@dataclass(frozen=True)
class AlreadyIssued:
    certificate: models.TrainingCertificate
    created: bool = False


IssueResult = Union[Issued, AlreadyIssued]


@dataclass(frozen=True)
class Found:
    certificate: models.TrainingCertificate


@dataclass(frozen=True)
class NotFound:
    certificate_number: str


LookupResult = Union[Found, NotFound]


def format_certificate_number(prefix: str, year: int, code: str) -> str:
    return f"{prefix}-{year}-{code}"


def generate_certificate_number(track, issued_at: datetime) -> str:
    return format_certificate_number(CERTIFICATE_PREFIXES[track], issued_at.year, random_code(6))


def _existing_for(db: Session, assignment_id: str) -> Optional[models.TrainingCertificate]:
    return (
        db.query(models.TrainingCertificate)
        .filter(models.TrainingCertificate.assignment_id == assignment_id)
        .first()
    )


def _number_taken(db: Session, number: str) -> bool:
    return (
        db.query(models.TrainingCertificate.id)
        .filter(models.TrainingCertificate.certificate_number == number)
        .first()
        is not None
    )


def issue_certificate(
    db: Session,
    assignment: models.TrainingAssignment,
    *,
    now: Optional[datetime] = None,
    actor_user_id: Optional[str] = None,
) -> IssueResult:
    """
    Issue the assignment's certificate, or return the one it already has.

    The insert runs in a savepoint; losing a race on the assignment_id
    unique index re-reads the winner's row. A collision on the number
    retries with a fresh code.
    """
    existing = _existing_for(db, assignment.id)
    if existing:
        return AlreadyIssued(existing)

    issued_at = ensure_utc(now) if now else utcnow()
    expires_at = issued_at + CERTIFICATE_VALIDITY

    for _ in range(CERTIFICATE_NUMBER_ATTEMPTS):
        number = generate_certificate_number(assignment.track, issued_at)
        if _number_taken(db, number):
            continue

        certificate = models.TrainingCertificate(
            assignment_id=assignment.id,
            certificate_number=number,
            issued_at=issued_at,
            expires_at=expires_at,
        )
        try:
            with db.begin_nested():
                db.add(certificate)
                db.flush()
        except IntegrityError:
            winner = _existing_for(db, assignment.id)
            if winner:
                logger.info(
                    "Certificate issued concurrently",
                    extra={"assignment_id": assignment.id, "certificate_number": winner.certificate_number},
                )
                return AlreadyIssued(winner)
            continue

        audit_services.log_event(
            db,
            org_id=assignment.org_id,
            actor_user_id=actor_user_id,
            entity_type="training_certificate",
            entity_id=str(certificate.id),
            action="issued",
            after={
                "assignment_id": assignment.id,
                "certificate_number": number,
                "issued_at": issued_at.isoformat(),
                "expires_at": expires_at.isoformat(),
            },
            metadata={"module": "training"},
        )
        logger.info(
            "Certificate issued",
            extra={"assignment_id": assignment.id, "certificate_number": number},
        )
        return Issued(certificate)

    raise CertificateNumberExhausted(
        f"Could not allocate a certificate number after {CERTIFICATE_NUMBER_ATTEMPTS} attempts"
    )


def find_certificate(db: Session, certificate_number: str) -> LookupResult:
    number = (certificate_number or "").strip().upper()
    certificate = (
        db.query(models.TrainingCertificate)
        .filter(models.TrainingCertificate.certificate_number == number)
        .first()
    )
    if certificate is None:
        return NotFound(number)
    return Found(certificate)


def certificate_view(certificate: models.TrainingCertificate, *, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Public, denormalised view of a certificate for the lookup endpoint."""
    now = now or utcnow()
    assignment = certificate.assignment
    org = assignment.organization if assignment else None
    expires_at = ensure_utc(certificate.expires_at)
    track = assignment.track if assignment else None
    return {
        "certificate_number": certificate.certificate_number,
        "employee_name": assignment.user_name if assignment else None,
        "company_name": org.name if org else None,
        "track": track.value if track else None,
        "track_label": track_label(track) if track else None,
        "track_title": get_track(track).title if track else None,
        "issued_at": ensure_utc(certificate.issued_at),
        "expires_at": expires_at,
        "is_expired": expires_at is not None and now > expires_at,
    }


def find_for_assignment(db: Session, assignment_id: str) -> Optional[models.TrainingCertificate]:
    return _existing_for(db, assignment_id)
