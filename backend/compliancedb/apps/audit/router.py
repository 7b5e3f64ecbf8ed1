from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from compliancedb.apps.accounts import models as account_models
from compliancedb.database import get_read_db
from compliancedb.security import require_team_manager

from . import schemas, services

router = APIRouter(prefix="/audit-events", tags=["audit"])


@router.get("/", response_model=List[schemas.AuditEventRead])
def list_audit_events(
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    db: Session = Depends(get_read_db),
    current_member: account_models.OrgMember = Depends(require_team_manager),
):
    """Audit trail for the caller's organization, oldest first."""
    events = services.list_audit_events(
        db,
        org_id=current_member.org_id,
        entity_type=entity_type,
        entity_id=entity_id,
    )
    return [schemas.AuditEventRead.model_validate(e) for e in events]
