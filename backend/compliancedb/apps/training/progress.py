"""
Progress Tracker: per-section video/quiz progress and the assignment status
machine (pending -> in_progress -> completed).

Status changes go through the workflow engine so they are validated and
audited in one place. Nothing here commits; the caller owns the unit of work.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from compliancedb.apps.workflow import apply_transition
from compliancedb.utils.dates import utcnow

from . import certificates, models
from .catalog import get_section, total_sections
from .errors import ValidationError
from .quiz import QuizScore, score_quiz

logger = logging.getLogger(__name__)

ENTITY_TYPE = "training_assignment"
VIDEO_COMPLETE_RATIO = 0.9


@dataclass
class QuizSubmissionResult:
    section_number: int
    passed: bool
    score: int
    attempts: int
    track_complete: bool
    quiz: QuizScore
    correct_answers: Optional[List[Dict[str, Any]]] = None
    certificate: Optional[models.TrainingCertificate] = None


@dataclass
class ProgressSummary:
    completed_sections: int
    total_sections: int
    per_section: List[models.TrainingSectionProgress] = field(default_factory=list)


@dataclass(frozen=True)
class SectionStatus:
    completed: bool
    video_complete: bool
    video_progress: int


# ---------------------------------------------------------------------------
# INTERNAL HELPERS
# ---------------------------------------------------------------------------


def _section_rows(db: Session, assignment_id: str) -> List[models.TrainingSectionProgress]:
    return (
        db.query(models.TrainingSectionProgress)
        .filter(models.TrainingSectionProgress.assignment_id == assignment_id)
        .order_by(models.TrainingSectionProgress.section_number)
        .all()
    )


def _find_row(db: Session, assignment_id: str, section_number: int) -> Optional[models.TrainingSectionProgress]:
    return (
        db.query(models.TrainingSectionProgress)
        .filter(
            models.TrainingSectionProgress.assignment_id == assignment_id,
            models.TrainingSectionProgress.section_number == section_number,
        )
        .first()
    )


def _get_or_create_row(
    db: Session,
    assignment: models.TrainingAssignment,
    section_number: int,
    now: datetime,
) -> models.TrainingSectionProgress:
    section = get_section(assignment.track, section_number)
    row = _find_row(db, assignment.id, section_number)
    if row:
        return row

    row = models.TrainingSectionProgress(
        assignment_id=assignment.id,
        section_number=section_number,
        video_total_seconds=section.video_duration_seconds,
        video_watched_seconds=0,
        attempts=0,
        started_at=now,
        updated_at=now,
    )
    try:
        with db.begin_nested():
            db.add(row)
            db.flush()
    except IntegrityError:
        # Another request created the row first.
        row = _find_row(db, assignment.id, section_number)
    db.expire(assignment, ["progress"])
    return row


def _move_status(
    db: Session,
    assignment: models.TrainingAssignment,
    to_state: models.AssignmentStatus,
    *,
    after: Dict[str, Any],
    actor_user_id: Optional[str],
) -> None:
    apply_transition(
        db,
        entity_type=ENTITY_TYPE,
        entity_id=str(assignment.id),
        org_id=assignment.org_id,
        from_state=assignment.status.value,
        to_state=to_state.value,
        context=after,
        actor_user_id=actor_user_id,
    )
    assignment.status = to_state


def _mark_started(
    db: Session,
    assignment: models.TrainingAssignment,
    *,
    actor_user_id: Optional[str] = None,
) -> None:
    if assignment.status == models.AssignmentStatus.PENDING:
        _move_status(db, assignment, models.AssignmentStatus.IN_PROGRESS, after={}, actor_user_id=actor_user_id)


def _completed_count(rows: List[models.TrainingSectionProgress]) -> int:
    return sum(1 for r in rows if r.quiz_completed_at is not None)


# ---------------------------------------------------------------------------
# OPERATIONS
# ---------------------------------------------------------------------------


def start_section(
    db: Session,
    assignment: models.TrainingAssignment,
    section_number: int,
    *,
    now: Optional[datetime] = None,
    actor_user_id: Optional[str] = None,
) -> models.TrainingSectionProgress:
    now = now or utcnow()
    row = _get_or_create_row(db, assignment, section_number, now)
    _mark_started(db, assignment, actor_user_id=actor_user_id)
    db.flush()
    return row


def record_video_progress(
    db: Session,
    assignment: models.TrainingAssignment,
    section_number: int,
    watched_seconds: int,
    *,
    now: Optional[datetime] = None,
    actor_user_id: Optional[str] = None,
) -> models.TrainingSectionProgress:
    """Watched seconds only ever grow; a smaller report is ignored."""
    if watched_seconds is None or isinstance(watched_seconds, bool) or watched_seconds < 0:
        raise ValidationError("video_watched_seconds must be a non-negative integer")
    now = now or utcnow()
    row = _get_or_create_row(db, assignment, section_number, now)
    row.video_watched_seconds = max(row.video_watched_seconds or 0, int(watched_seconds))
    row.updated_at = now
    _mark_started(db, assignment, actor_user_id=actor_user_id)
    db.flush()
    return row


def record_video_complete(
    db: Session,
    assignment: models.TrainingAssignment,
    section_number: int,
    *,
    now: Optional[datetime] = None,
    actor_user_id: Optional[str] = None,
) -> models.TrainingSectionProgress:
    now = now or utcnow()
    row = _get_or_create_row(db, assignment, section_number, now)
    row.video_watched_seconds = max(row.video_watched_seconds or 0, row.video_total_seconds or 0)
    if row.video_completed_at is None:
        row.video_completed_at = now
    row.updated_at = now
    _mark_started(db, assignment, actor_user_id=actor_user_id)
    db.flush()
    return row


def submit_quiz(
    db: Session,
    assignment: models.TrainingAssignment,
    section_number: int,
    answers: Optional[Mapping[str, Any]],
    *,
    now: Optional[datetime] = None,
    actor_user_id: Optional[str] = None,
) -> QuizSubmissionResult:
    """
    Score one quiz submission and apply its effects.

    A failed quiz is a normal result, never an error, and retries are
    unlimited. Passing the last outstanding section completes the
    assignment and issues its certificate in the same unit of work.
    """
    if answers is None:
        raise ValidationError("Quiz answers required")
    if not isinstance(answers, Mapping):
        raise ValidationError("Quiz answers must map question ids to option indexes")

    now = now or utcnow()
    section = get_section(assignment.track, section_number)
    row = _get_or_create_row(db, assignment, section_number, now)
    result = score_quiz(section.quiz, answers)

    db.add(
        models.TrainingQuizAttempt(
            assignment_id=assignment.id,
            section_number=section_number,
            answers=dict(answers),
            score=result.score_percent,
            passed=result.passed,
            submitted_at=now,
        )
    )
    row.attempts = (row.attempts or 0) + 1
    row.updated_at = now

    if assignment.status == models.AssignmentStatus.COMPLETED:
        # Review attempts after completion do not touch status or certificate.
        db.flush()
        return QuizSubmissionResult(
            section_number=section_number,
            passed=result.passed,
            score=result.score_percent,
            attempts=row.attempts,
            track_complete=True,
            quiz=result,
            correct_answers=None if result.passed else _review(section),
            certificate=certificates.find_for_assignment(db, assignment.id),
        )

    _mark_started(db, assignment, actor_user_id=actor_user_id)

    if not result.passed:
        db.flush()
        logger.info(
            "Quiz not passed",
            extra={"assignment_id": assignment.id, "section": section_number, "score": result.score_percent},
        )
        return QuizSubmissionResult(
            section_number=section_number,
            passed=False,
            score=result.score_percent,
            attempts=row.attempts,
            track_complete=False,
            quiz=result,
            correct_answers=_review(section),
        )

    if row.quiz_completed_at is None:
        row.quiz_completed_at = now
    row.quiz_score = max(row.quiz_score or 0, result.score_percent)
    db.flush()

    completed = _completed_count(_section_rows(db, assignment.id))
    total = total_sections(assignment.track)
    if completed < total:
        return QuizSubmissionResult(
            section_number=section_number,
            passed=True,
            score=result.score_percent,
            attempts=row.attempts,
            track_complete=False,
            quiz=result,
        )

    _move_status(
        db,
        assignment,
        models.AssignmentStatus.COMPLETED,
        after={"completed_sections": completed, "total_sections": total, "completed_at": now.isoformat()},
        actor_user_id=actor_user_id,
    )
    assignment.completed_at = now
    db.flush()
    issued = certificates.issue_certificate(db, assignment, now=now, actor_user_id=actor_user_id)
    logger.info(
        "Training track completed",
        extra={
            "assignment_id": assignment.id,
            "track": assignment.track.value,
            "certificate_number": issued.certificate.certificate_number,
        },
    )
    return QuizSubmissionResult(
        section_number=section_number,
        passed=True,
        score=result.score_percent,
        attempts=row.attempts,
        track_complete=True,
        quiz=result,
        certificate=issued.certificate,
    )


def _review(section) -> List[Dict[str, Any]]:
    return [
        {"id": q.id, "correct_answer": q.correct_answer, "explanation": q.explanation}
        for q in section.quiz
    ]


def get_progress(db: Session, assignment: models.TrainingAssignment) -> ProgressSummary:
    rows = _section_rows(db, assignment.id)
    return ProgressSummary(
        completed_sections=_completed_count(rows),
        total_sections=total_sections(assignment.track),
        per_section=rows,
    )


def get_section_status(
    db: Session,
    assignment: models.TrainingAssignment,
    section_number: int,
) -> SectionStatus:
    get_section(assignment.track, section_number)
    row = _find_row(db, assignment.id, section_number)
    if row is None:
        return SectionStatus(completed=False, video_complete=False, video_progress=0)

    watched = row.video_watched_seconds or 0
    total = row.video_total_seconds or 0
    video_complete = row.video_completed_at is not None or watched >= total * VIDEO_COMPLETE_RATIO
    percent = min(100, round(watched * 100 / total)) if total > 0 else 0
    return SectionStatus(
        completed=row.quiz_completed_at is not None,
        video_complete=video_complete,
        video_progress=percent,
    )
