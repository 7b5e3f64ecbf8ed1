from __future__ import annotations

from typing import Any, Dict, List, Mapping

from sqlalchemy.orm import Session

GuardResult = List[Dict[str, str]]


def guard_assignment_completion(
    db: Session,
    *,
    context: Mapping[str, Any],
    from_state: str,
    to_state: str,
) -> GuardResult:
    """Every section of the track must have a passed quiz."""
    completed = context.get("completed_sections")
    total = context.get("total_sections")
    if completed is None or total is None:
        return [{"field": "completed_sections", "reason": "section totals required"}]
    if completed < total:
        return [{"field": "completed_sections", "reason": f"{completed} of {total} sections passed"}]
    if not context.get("completed_at"):
        return [{"field": "completed_at", "reason": "completion timestamp required"}]
    return []
