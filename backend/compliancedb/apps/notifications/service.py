from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from compliancedb.database import WriteSessionLocal

from . import models, providers

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def send_email(
    template_key: str,
    recipients: Sequence[str],
    subject: str,
    html: str,
    context: dict,
    correlation_id: Optional[str],
    critical: bool = False,
    *,
    org_id: Optional[str] = None,
    db: Optional[Session] = None,
) -> models.EmailLog:
    """
    Hand one message to the configured provider and record the attempt.

    Provider exceptions are captured on the log row (status FAILED); they are
    re-raised only for critical sends.
    """
    owns_session = db is None
    db = db or WriteSessionLocal()
    if not org_id:
        raise ValueError("org_id is required to create an email log entry")
    recipients = [r.strip() for r in recipients if r and r.strip()]
    if not recipients:
        raise ValueError("at least one recipient is required")
    log = models.EmailLog(
        org_id=org_id,
        recipient=", ".join(recipients),
        subject=subject[:255],
        template_key=template_key,
        status=models.EmailStatus.QUEUED,
        context_json=context or {},
        correlation_id=correlation_id,
    )
    try:
        db.add(log)
        db.flush()

        provider, configured = providers.get_email_provider()
        if not configured:
            log.status = models.EmailStatus.SKIPPED_NO_PROVIDER
            log.error = "No provider configured"
            db.add(log)
            if owns_session:
                db.commit()
            return log

        try:
            message_id = provider.send(
                recipients=recipients,
                subject=subject,
                html=html,
                correlation_id=correlation_id,
            )
            if not message_id:
                raise providers.DeliveryError("Provider did not return a message id")
            log.provider_message_id = message_id
            log.status = (
                models.EmailStatus.LOGGED
                if isinstance(provider, providers.LogProvider)
                else models.EmailStatus.SENT
            )
            log.sent_at = _utcnow()
        except Exception as exc:
            log.status = models.EmailStatus.FAILED
            log.error = str(exc)
            logger.warning(
                "Email delivery failed",
                extra={
                    "template_key": template_key,
                    "correlation_id": correlation_id,
                    "error": str(exc),
                },
            )
            if critical:
                db.add(log)
                if owns_session:
                    db.commit()
                raise
        db.add(log)
        if owns_session:
            db.commit()
        return log
    finally:
        if owns_session:
            db.close()


def delivery_reference(log: Optional[models.EmailLog]) -> Optional[str]:
    """Provider reference for a delivered message, otherwise None."""
    if log is None or not log.delivered:
        return None
    return log.provider_message_id


def deliver_email(
    template_key: str,
    recipients: Sequence[str],
    subject: str,
    html: str,
    *,
    org_id: str,
    db: Session,
    context: Optional[dict] = None,
    correlation_id: Optional[str] = None,
) -> Optional[str]:
    """
    Send and return the delivery reference, or None when nothing went out.

    A provider exception and a missing reference are the same outcome here;
    both leave a FAILED EmailLog behind.
    """
    log = send_email(
        template_key,
        recipients,
        subject,
        html,
        context or {},
        correlation_id,
        org_id=org_id,
        db=db,
    )
    return delivery_reference(log)
