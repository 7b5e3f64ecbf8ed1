from __future__ import annotations

import logging
from typing import List, NoReturn, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from compliancedb.apps.accounts import models as account_models
from compliancedb.apps.workflow import TransitionError
from compliancedb.database import get_db, get_read_db
from compliancedb.security import get_current_member, get_optional_member, require_team_manager

from . import assignments, certificates, models, progress, schemas
from .catalog import TRAINING_TRACKS, get_track, parse_track
from .errors import NotFoundError, StoreUnavailableError, TrainingError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/training", tags=["training"])


def _raise_http(exc: Exception) -> NoReturn:
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ValidationError):
        raise HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, StoreUnavailableError):
        raise HTTPException(status_code=503, detail=str(exc))
    if isinstance(exc, TransitionError):
        raise HTTPException(status_code=409, detail={"code": exc.code, "detail": exc.detail})
    raise HTTPException(status_code=400, detail=str(exc))


def _assignment_read(db: Session, assignment: models.TrainingAssignment) -> schemas.AssignmentRead:
    summary = progress.get_progress(db, assignment)
    read = schemas.AssignmentRead.model_validate(assignment)
    read.completed_sections = summary.completed_sections
    read.total_sections = summary.total_sections
    return read


def _resolve_assignment(
    db: Session,
    *,
    assignment_id: Optional[str],
    token: Optional[str],
    member: Optional[account_models.OrgMember],
) -> models.TrainingAssignment:
    """Magic-link token, or an assignment id within the signed-in member's organization."""
    if token:
        return assignments.get_assignment_by_token(db, token)
    if not assignment_id:
        raise ValidationError("Assignment ID or token required")
    if member is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return assignments.get_assignment(db, assignment_id, org_id=member.org_id)


# ---------------------------------------------------------------------------
# CATALOG
# ---------------------------------------------------------------------------


@router.get("/tracks", response_model=List[schemas.TrackSummary])
def list_tracks():
    return [
        schemas.TrackSummary(
            track=definition.track,
            label=definition.label,
            title=definition.title,
            description=definition.description,
            target_audience=definition.target_audience,
            estimated_time=definition.estimated_time,
            total_sections=definition.total_sections,
            sections=[
                schemas.SectionSummary(
                    number=s.number,
                    title=s.title,
                    description=s.description,
                    video_duration_seconds=s.video_duration_seconds,
                    question_count=len(s.quiz),
                )
                for s in definition.sections
            ],
        )
        for definition in TRAINING_TRACKS.values()
    ]


# ---------------------------------------------------------------------------
# TEAM MANAGEMENT
# ---------------------------------------------------------------------------


@router.post("/assign-team", response_model=schemas.AssignTeamResponse)
def assign_team(
    payload: schemas.AssignTeamRequest,
    db: Session = Depends(get_db),
    current_member: account_models.OrgMember = Depends(require_team_manager),
):
    try:
        outcomes = assignments.create_assignments(
            db,
            org_id=current_member.org_id,
            entries=payload.assignments,
            assigned_by_user_id=current_member.id,
        )
    except TrainingError as exc:
        db.rollback()
        _raise_http(exc)
    db.commit()

    results: List[schemas.AssignResultItem] = []
    for outcome in outcomes:
        invite_sent = None
        if outcome.created:
            try:
                invite_sent = assignments.send_invite(db, outcome.assignment) is not None
                db.commit()
            except Exception as exc:
                db.rollback()
                invite_sent = False
                logger.warning(
                    "Training invite failed",
                    extra={"assignment_id": outcome.assignment.id, "error": str(exc)},
                )
        results.append(
            schemas.AssignResultItem(
                email=outcome.email,
                status=outcome.status,
                id=outcome.assignment.id,
                invite_sent=invite_sent,
            )
        )
    return schemas.AssignTeamResponse(success=True, results=results)


@router.get("/assignments", response_model=List[schemas.AssignmentRead])
def list_assignments(
    status: Optional[models.AssignmentStatus] = None,
    track: Optional[str] = None,
    email: Optional[str] = None,
    db: Session = Depends(get_read_db),
    current_member: account_models.OrgMember = Depends(require_team_manager),
):
    try:
        parsed_track = parse_track(track) if track else None
    except ValidationError as exc:
        _raise_http(exc)
    rows = assignments.list_assignments(
        db,
        org_id=current_member.org_id,
        status=status,
        track=parsed_track,
        email=email,
    )
    return [_assignment_read(db, a) for a in rows]


@router.delete("/assignments/{assignment_id}")
def delete_assignment(
    assignment_id: str,
    db: Session = Depends(get_db),
    current_member: account_models.OrgMember = Depends(require_team_manager),
):
    try:
        assignments.delete_assignment(
            db,
            org_id=current_member.org_id,
            assignment_id=assignment_id,
            actor_user_id=current_member.id,
        )
    except TrainingError as exc:
        db.rollback()
        _raise_http(exc)
    db.commit()
    return {"success": True}


@router.post("/send-reminder", response_model=schemas.SendReminderResponse)
def send_reminder(
    payload: schemas.SendReminderRequest,
    db: Session = Depends(get_db),
    current_member: account_models.OrgMember = Depends(require_team_manager),
):
    try:
        reference = assignments.send_completion_reminder(
            db,
            org_id=current_member.org_id,
            assignment_id=payload.assignment_id,
        )
    except TrainingError as exc:
        db.rollback()
        _raise_http(exc)
    db.commit()
    return schemas.SendReminderResponse(success=True, delivered=reference is not None)


# ---------------------------------------------------------------------------
# LEARNER
# ---------------------------------------------------------------------------


@router.get("/my-assignments", response_model=List[schemas.AssignmentRead])
def my_assignments(
    db: Session = Depends(get_read_db),
    current_member: account_models.OrgMember = Depends(get_current_member),
):
    rows = assignments.list_assignments_for_email(db, email=current_member.email)
    return [_assignment_read(db, a) for a in rows if a.org_id == current_member.org_id]


@router.get("/start/{token}", response_model=schemas.StartLinkResponse)
def start_from_link(token: str, db: Session = Depends(get_read_db)):
    try:
        assignment = assignments.get_assignment_by_token(db, token)
    except TrainingError as exc:
        _raise_http(exc)
    return schemas.StartLinkResponse(
        assignment=_assignment_read(db, assignment),
        organization_name=assignment.organization.name if assignment.organization else None,
        track_title=get_track(assignment.track).title,
    )


@router.post(
    "/progress",
    response_model=Union[schemas.QuizResultRead, schemas.ProgressActionResponse],
)
def update_progress(
    payload: schemas.ProgressUpdate,
    db: Session = Depends(get_db),
    current_member: Optional[account_models.OrgMember] = Depends(get_optional_member),
):
    actor_user_id = current_member.id if current_member else None
    try:
        assignment = _resolve_assignment(
            db,
            assignment_id=payload.assignment_id,
            token=payload.token,
            member=current_member,
        )
        if payload.action == "submit_quiz":
            result = progress.submit_quiz(
                db,
                assignment,
                payload.section_number,
                payload.quiz_answers,
                actor_user_id=actor_user_id,
            )
        elif payload.action == "video_progress":
            if payload.video_watched_seconds is None:
                raise ValidationError("video_watched_seconds required")
            row = progress.record_video_progress(
                db,
                assignment,
                payload.section_number,
                payload.video_watched_seconds,
                actor_user_id=actor_user_id,
            )
        elif payload.action == "complete_video":
            row = progress.record_video_complete(
                db, assignment, payload.section_number, actor_user_id=actor_user_id
            )
        else:
            row = progress.start_section(db, assignment, payload.section_number, actor_user_id=actor_user_id)
    except (TrainingError, TransitionError) as exc:
        db.rollback()
        _raise_http(exc)
    db.commit()

    if payload.action != "submit_quiz":
        return schemas.ProgressActionResponse(
            action=payload.action,
            status=assignment.status,
            section=schemas.SectionProgressRead.model_validate(row),
        )

    return schemas.QuizResultRead(
        action="quiz_passed" if result.passed else "quiz_submitted",
        section_number=result.section_number,
        score=result.score,
        passed=result.passed,
        attempts=result.attempts,
        track_complete=result.track_complete,
        correct_answers=result.correct_answers,
        certificate=(
            schemas.CertificateView(**certificates.certificate_view(result.certificate))
            if result.certificate is not None
            else None
        ),
    )


@router.get("/progress", response_model=schemas.ProgressRead)
def read_progress(
    assignment_id: Optional[str] = Query(None),
    token: Optional[str] = Query(None),
    db: Session = Depends(get_read_db),
    current_member: Optional[account_models.OrgMember] = Depends(get_optional_member),
):
    try:
        assignment = _resolve_assignment(db, assignment_id=assignment_id, token=token, member=current_member)
    except TrainingError as exc:
        _raise_http(exc)
    summary = progress.get_progress(db, assignment)
    return schemas.ProgressRead(
        assignment_id=assignment.id,
        status=assignment.status,
        completed_sections=summary.completed_sections,
        total_sections=summary.total_sections,
        per_section=[schemas.SectionProgressRead.model_validate(r) for r in summary.per_section],
    )


@router.get("/section-progress", response_model=schemas.SectionStatusRead)
def read_section_progress(
    section: int = Query(..., ge=1),
    assignment_id: Optional[str] = Query(None),
    token: Optional[str] = Query(None),
    db: Session = Depends(get_read_db),
    current_member: Optional[account_models.OrgMember] = Depends(get_optional_member),
):
    try:
        assignment = _resolve_assignment(db, assignment_id=assignment_id, token=token, member=current_member)
        status = progress.get_section_status(db, assignment, section)
    except TrainingError as exc:
        _raise_http(exc)
    return schemas.SectionStatusRead(
        completed=status.completed,
        video_complete=status.video_complete,
        video_progress=status.video_progress,
    )


# ---------------------------------------------------------------------------
# CERTIFICATES
# ---------------------------------------------------------------------------


@router.get("/certificate/{certificate_number}", response_model=schemas.CertificateView)
def read_certificate(certificate_number: str, db: Session = Depends(get_read_db)):
    result = certificates.find_certificate(db, certificate_number)
    if isinstance(result, certificates.NotFound):
        raise HTTPException(status_code=404, detail="Certificate not found")
    return schemas.CertificateView(**certificates.certificate_view(result.certificate))
