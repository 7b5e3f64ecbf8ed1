"""
Notification Ledger for certificate-expiry reminders.

A (certificate, tier) pair is claimed before anything is sent: the claim is
an insert against the unique (certificate_id, notification_type) index, so
of two overlapping runs exactly one gets `Claimed` and the other sees
`AlreadyRecorded`. The claim is committed before delivery. After delivery
the claim is either marked SENT (permanent) or released so a later run can
try again.

A CLAIMED row whose owner died mid-delivery is taken over once it is older
than the claim lease.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from compliancedb.utils.dates import utcnow

from . import models

logger = logging.getLogger(__name__)

try:
    CLAIM_LEASE = timedelta(minutes=int(os.getenv("TRAINING_REMINDER_CLAIM_LEASE_MIN", "15")))
except ValueError:
    CLAIM_LEASE = timedelta(minutes=15)

CLAIM_INSERT_ATTEMPTS = 2


@dataclass(frozen=True)
class Claimed:
    record: models.TrainingCertNotification


@dataclass(frozen=True)
class AlreadyRecorded:
    record: Optional[models.TrainingCertNotification]

    @property
    def sent(self) -> bool:
        return self.record is not None and self.record.status == models.NotificationRecordStatus.SENT


ClaimResult = Union[Claimed, AlreadyRecorded]


def get_record(
    db: Session,
    certificate_id: str,
    tier: models.NotificationType,
) -> Optional[models.TrainingCertNotification]:
    return (
        db.query(models.TrainingCertNotification)
        .filter(
            models.TrainingCertNotification.certificate_id == certificate_id,
            models.TrainingCertNotification.notification_type == tier,
        )
        .first()
    )


def _take_over_stale(
    db: Session,
    record: models.TrainingCertNotification,
    *,
    recipient: str,
    lease: timedelta,
) -> bool:
    # Conditional update: only one contender can move claimed_at forward.
    claimed_at = utcnow()
    result = db.execute(
        update(models.TrainingCertNotification)
        .where(
            models.TrainingCertNotification.id == record.id,
            models.TrainingCertNotification.status == models.NotificationRecordStatus.CLAIMED,
            models.TrainingCertNotification.claimed_at < claimed_at - lease,
        )
        .values(claimed_at=claimed_at, email_to=recipient)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return False
    db.commit()
    db.refresh(record)
    return True


def _insert_claim(
    db: Session,
    *,
    certificate_id: str,
    tier: models.NotificationType,
    recipient: str,
) -> Optional[models.TrainingCertNotification]:
    record = models.TrainingCertNotification(
        certificate_id=certificate_id,
        notification_type=tier,
        status=models.NotificationRecordStatus.CLAIMED,
        email_to=recipient,
        claimed_at=utcnow(),
    )
    try:
        with db.begin_nested():
            db.add(record)
            db.flush()
    except IntegrityError:
        return None
    db.commit()
    return record


def claim(
    db: Session,
    *,
    certificate_id: str,
    tier: models.NotificationType,
    recipient: str,
    lease: Optional[timedelta] = None,
) -> ClaimResult:
    """
    Atomically claim a (certificate, tier) notification. Commits on success.

    The lease is measured on the wall clock, never on a run's logical date,
    so a backfill for a later day cannot take over a claim that is still
    being delivered.
    """
    lease = CLAIM_LEASE if lease is None else lease

    existing = None
    for _ in range(CLAIM_INSERT_ATTEMPTS):
        record = _insert_claim(db, certificate_id=certificate_id, tier=tier, recipient=recipient)
        if record is not None:
            return Claimed(record)
        existing = get_record(db, certificate_id, tier)
        if existing is not None:
            break
        # The conflicting claim was released between the insert and the read.

    if existing is not None and existing.status == models.NotificationRecordStatus.CLAIMED:
        if _take_over_stale(db, existing, recipient=recipient, lease=lease):
            logger.warning(
                "Took over stale reminder claim",
                extra={"certificate_id": certificate_id, "tier": tier.value},
            )
            return Claimed(existing)
    return AlreadyRecorded(existing)


def mark_sent(
    db: Session,
    record: models.TrainingCertNotification,
    *,
    delivery_reference: str,
    now: Optional[datetime] = None,
) -> models.TrainingCertNotification:
    record.status = models.NotificationRecordStatus.SENT
    record.email_message_id = delivery_reference
    record.sent_at = now or utcnow()
    db.add(record)
    db.commit()
    return record


def release(db: Session, record: models.TrainingCertNotification) -> None:
    """Drop a claim after a failed delivery. SENT rows are never released."""
    if record.status == models.NotificationRecordStatus.SENT:
        raise ValueError("Cannot release a notification that was already sent")
    db.delete(record)
    db.commit()
