from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from compliancedb.apps.audit import services as audit_services
from compliancedb.apps.audit.models import AuditEvent

from .registry import WORKFLOWS


@dataclass
class TransitionError(Exception):
    code: str
    detail: List[Dict[str, str]]

    def __str__(self) -> str:
        reasons = "; ".join(d.get("reason", "") for d in self.detail)
        return f"{self.code}: {reasons}" if reasons else self.code


def allowed_targets(entity_type: str, from_state: str) -> Sequence[str]:
    states = WORKFLOWS.get(entity_type, {}).get("transitions", {})
    return tuple(states.get(from_state, {}))


def apply_transition(
    db: Session,
    *,
    entity_type: str,
    entity_id: str,
    org_id: str,
    from_state: str,
    to_state: str,
    context: Optional[Mapping[str, Any]] = None,
    actor_user_id: Optional[str] = None,
    correlation_id: Optional[str] = None,
    critical: bool = True,
) -> Optional[AuditEvent]:
    """
    Check a status change against the registered workflow and its guards,
    then record it on the audit trail. Setting the new status on the row is
    left to the caller, inside the same unit of work.
    """
    if entity_type not in WORKFLOWS:
        raise TransitionError(
            code="invalid_transition",
            detail=[{"field": "entity_type", "reason": f"No workflow registered for {entity_type}"}],
        )

    targets = allowed_targets(entity_type, from_state)
    if to_state not in targets:
        allowed = ", ".join(targets) or "none (terminal)"
        raise TransitionError(
            code="invalid_transition",
            detail=[
                {
                    "field": "status",
                    "reason": f"Cannot move {entity_type} from {from_state} to {to_state}; allowed: {allowed}",
                }
            ],
        )

    context = dict(context or {})
    guards = WORKFLOWS[entity_type]["transitions"][from_state][to_state]
    failures: List[Dict[str, str]] = []
    for guard in guards:
        failures.extend(guard(db, context=context, from_state=from_state, to_state=to_state))
    if failures:
        raise TransitionError(code="missing_requirements", detail=failures)

    return audit_services.log_event(
        db,
        org_id=org_id,
        actor_user_id=actor_user_id,
        entity_type=entity_type,
        entity_id=entity_id,
        action="transition",
        before={"status": from_state},
        after={"status": to_state, **context},
        correlation_id=correlation_id,
        metadata={"workflow": entity_type},
        critical=critical,
    )
