"""
Certificate expiry reminders.

`run_tick` is stateless: every run rediscovers due (certificate, tier) pairs
from the certificates' expiry dates and relies on the notification ledger
to send each pair at most once, however often it is invoked.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from compliancedb.apps.notifications.service import deliver_email
from compliancedb.utils.dates import day_window, ensure_utc

from . import emails, ledger, models
from .catalog import track_label
from .errors import StoreUnavailableError

logger = logging.getLogger(__name__)

# (days before expiry, ledger tier), processed in this order.
NOTIFICATION_TIERS: Tuple[Tuple[int, models.NotificationType], ...] = (
    (30, models.NotificationType.DAY_30),
    (7, models.NotificationType.DAY_7),
    (0, models.NotificationType.DAY_0),
)

STATUS_SENT = "sent"
STATUS_ALREADY_SENT = "already_sent"
STATUS_SEND_FAILED = "send_failed"


@dataclass
class TickDetail:
    certificate: str
    tier: str
    recipient: str
    status: str


@dataclass
class TickSummary:
    processed: int = 0
    sent: int = 0
    errors: int = 0
    details: List[TickDetail] = field(default_factory=list)

    def add(self, certificate: models.TrainingCertificate, tier: models.NotificationType, recipient: str, status: str) -> None:
        self.details.append(
            TickDetail(
                certificate=certificate.certificate_number,
                tier=tier.value,
                recipient=recipient,
                status=status,
            )
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "processed": self.processed,
            "sent": self.sent,
            "errors": self.errors,
            "details": [asdict(d) for d in self.details],
        }


def certificates_due(db: Session, *, now: datetime, days: int) -> List[models.TrainingCertificate]:
    """Certificates expiring on the UTC calendar day `days` after `now`."""
    start, end = day_window(now, days)
    return (
        db.query(models.TrainingCertificate)
        .filter(
            models.TrainingCertificate.expires_at >= start,
            models.TrainingCertificate.expires_at <= end,
        )
        .order_by(models.TrainingCertificate.expires_at, models.TrainingCertificate.id)
        .all()
    )


def _send_reminder(
    db: Session,
    certificate: models.TrainingCertificate,
    tier: models.NotificationType,
    *,
    now: datetime,
    base_url: Optional[str],
) -> Optional[str]:
    assignment = certificate.assignment
    org = assignment.organization
    rendered = emails.render_expiry_email(
        name=assignment.user_name,
        track_label=track_label(assignment.track),
        certificate_number=certificate.certificate_number,
        expires_at=certificate.expires_at,
        org_name=org.name if org else "Your Company",
        now=now,
        recertify_url=f"{emails.base_url(base_url)}/training",
    )
    try:
        return deliver_email(
            "training_certificate_expiry",
            [assignment.user_email],
            rendered.subject,
            rendered.html,
            org_id=assignment.org_id,
            db=db,
            context={"certificate_number": certificate.certificate_number, "tier": tier.value},
            correlation_id=f"training-expiry:{certificate.id}:{tier.value}",
        )
    except DBAPIError:
        raise
    except Exception as exc:
        logger.warning(
            "Expiry reminder delivery raised",
            extra={"certificate_number": certificate.certificate_number, "tier": tier.value, "error": str(exc)},
        )
        return None


def _process(
    db: Session,
    summary: TickSummary,
    certificate: models.TrainingCertificate,
    tier: models.NotificationType,
    *,
    now: datetime,
    base_url: Optional[str],
) -> None:
    summary.processed += 1
    recipient = certificate.assignment.user_email

    outcome = ledger.claim(db, certificate_id=certificate.id, tier=tier, recipient=recipient)
    if isinstance(outcome, ledger.AlreadyRecorded):
        summary.add(certificate, tier, recipient, STATUS_ALREADY_SENT)
        return

    reference = _send_reminder(db, certificate, tier, now=now, base_url=base_url)
    if reference:
        ledger.mark_sent(db, outcome.record, delivery_reference=reference, now=now)
        summary.sent += 1
        summary.add(certificate, tier, recipient, STATUS_SENT)
        return

    ledger.release(db, outcome.record)
    summary.errors += 1
    summary.add(certificate, tier, recipient, STATUS_SEND_FAILED)
    logger.warning(
        "Expiry reminder not sent",
        extra={"certificate_number": certificate.certificate_number, "tier": tier.value},
    )


def run_tick(db: Session, *, now: datetime, base_url: Optional[str] = None) -> TickSummary:
    """
    One reminder run for `now`.

    Delivery failures are counted and the run continues; losing the store
    aborts with StoreUnavailableError, leaving committed ledger rows intact.
    """
    now = ensure_utc(now)
    summary = TickSummary()
    try:
        for days, tier in NOTIFICATION_TIERS:
            for certificate in certificates_due(db, now=now, days=days):
                _process(db, summary, certificate, tier, now=now, base_url=base_url)
    except DBAPIError as exc:
        logger.error(
            "Training reminder run aborted: store unavailable",
            extra={"processed": summary.processed, "sent": summary.sent, "error": str(exc)},
        )
        try:
            db.rollback()
        except DBAPIError:
            logger.warning("Rollback after store failure also failed")
        raise StoreUnavailableError("Training data store unavailable") from exc

    logger.info(
        "Training reminder run completed",
        extra={"processed": summary.processed, "sent": summary.sent, "errors": summary.errors},
    )
    return summary
