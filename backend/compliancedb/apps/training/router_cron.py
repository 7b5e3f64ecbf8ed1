from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from compliancedb.database import get_db
from compliancedb.security import verify_cron_secret
from compliancedb.utils.dates import ensure_utc, utcnow

from . import reminders, schemas
from .errors import StoreUnavailableError

router = APIRouter(prefix="/cron", tags=["cron"])


@router.api_route(
    "/training-reminders",
    methods=["GET", "POST"],
    response_model=schemas.ReminderRunResponse,
)
def run_training_reminders(
    as_of: Optional[datetime] = Query(None, description="Evaluate the run as of this instant (backfill)."),
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
):
    """Scheduler entry point; safe to call repeatedly."""
    verify_cron_secret(authorization)
    now = ensure_utc(as_of) if as_of else utcnow()
    try:
        summary = reminders.run_tick(db, now=now)
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return schemas.ReminderRunResponse(
        success=True,
        processed=summary.processed,
        sent=summary.sent,
        errors=summary.errors,
        details=[schemas.TickDetailRead(**d) for d in summary.as_dict()["details"]],
        timestamp=utcnow(),
    )
