from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from compliancedb.apps.audit import models as audit_models
from compliancedb.apps.training import assignments, certificates, models, progress
from compliancedb.apps.training.catalog import TrainingTrack, get_section, get_track
from compliancedb.apps.training.errors import NotFoundError, ValidationError

NOW = datetime(2026, 5, 4, 14, 0, tzinfo=timezone.utc)


def _perfect(track, number):
    return {q.id: q.correct_answer for q in get_section(track, number).quiz}


def _all_wrong(track, number):
    return {q.id: (q.correct_answer + 1) % len(q.options) for q in get_section(track, number).quiz}


@pytest.fixture()
def assignment(db_session, org, manager):
    (outcome,) = assignments.create_assignments(
        db_session,
        org_id=org.id,
        entries=[{"name": "Jane Doe", "email": "jane@acme.com", "track": "recruiter"}],
        assigned_by_user_id=manager.id,
        now=NOW,
    )
    db_session.commit()
    return outcome.assignment


def _transitions(db, assignment_id):
    return [
        (e.before.get("status") if e.before else None, e.after.get("status") if e.after else None)
        for e in db.query(audit_models.AuditEvent)
        .filter(
            audit_models.AuditEvent.entity_id == assignment_id,
            audit_models.AuditEvent.action == "transition",
        )
    ]


def test_video_complete_moves_pending_to_in_progress(db_session, assignment):
    row = progress.record_video_complete(db_session, assignment, 1, now=NOW)
    db_session.commit()

    assert assignment.status == models.AssignmentStatus.IN_PROGRESS
    assert row.video_completed_at == NOW
    assert row.video_watched_seconds == row.video_total_seconds == get_section("recruiter", 1).video_duration_seconds


def test_passing_first_section_does_not_complete_track(db_session, assignment):
    progress.record_video_complete(db_session, assignment, 1, now=NOW)

    result = progress.submit_quiz(db_session, assignment, 1, _perfect("recruiter", 1), now=NOW)
    db_session.commit()

    assert result.passed is True
    assert result.score == 100
    assert result.attempts == 1
    assert result.track_complete is False
    assert result.certificate is None
    assert assignment.status == models.AssignmentStatus.IN_PROGRESS
    assert progress.get_progress(db_session, assignment).completed_sections == 1


def test_passing_every_section_completes_and_issues_certificate(db_session, assignment):
    track = get_track(TrainingTrack.RECRUITER)
    result = None
    for section in track.sections:
        progress.record_video_complete(db_session, assignment, section.number, now=NOW)
        result = progress.submit_quiz(db_session, assignment, section.number, _perfect(track.track, section.number), now=NOW)
    db_session.commit()

    assert result.track_complete is True
    assert assignment.status == models.AssignmentStatus.COMPLETED
    assert assignment.completed_at == NOW
    certificate = result.certificate
    assert certificate is not None
    assert certificate.assignment_id == assignment.id
    assert certificate.issued_at == NOW
    assert certificate.expires_at == NOW + timedelta(days=365)
    assert certificate.certificate_number.startswith(f"REC-{NOW.year}-")
    assert db_session.query(models.TrainingCertificate).count() == 1


def test_sections_can_be_passed_in_any_order(db_session, assignment):
    for number in (3, 1, 2):
        result = progress.submit_quiz(db_session, assignment, number, _perfect("recruiter", number), now=NOW)

    assert result.track_complete is True
    assert assignment.status == models.AssignmentStatus.COMPLETED


def test_failed_quiz_returns_review_and_counts_attempt(db_session, assignment):
    result = progress.submit_quiz(db_session, assignment, 1, _all_wrong("recruiter", 1), now=NOW)
    db_session.commit()

    assert result.passed is False
    assert result.score == 0
    assert result.attempts == 1
    section = get_section("recruiter", 1)
    assert [c["id"] for c in result.correct_answers] == [q.id for q in section.quiz]
    assert [c["correct_answer"] for c in result.correct_answers] == [q.correct_answer for q in section.quiz]
    assert assignment.status == models.AssignmentStatus.IN_PROGRESS

    retry = progress.submit_quiz(db_session, assignment, 1, _perfect("recruiter", 1), now=NOW)
    assert retry.passed is True
    assert retry.attempts == 2
    assert db_session.query(models.TrainingQuizAttempt).count() == 2


def test_later_attempts_keep_first_completion_and_best_score(db_session, assignment):
    section = get_section("recruiter", 1)
    one_wrong = _perfect("recruiter", 1)
    first_q = section.quiz[0]
    one_wrong[first_q.id] = (first_q.correct_answer + 1) % len(first_q.options)
    later = NOW + timedelta(hours=2)

    progress.submit_quiz(db_session, assignment, 1, _perfect("recruiter", 1), now=NOW)
    progress.submit_quiz(db_session, assignment, 1, one_wrong, now=later)
    row = progress.get_progress(db_session, assignment).per_section[0]

    assert row.quiz_completed_at == NOW
    assert row.quiz_score == 100


def test_missing_answers_rejected(db_session, assignment):
    with pytest.raises(ValidationError):
        progress.submit_quiz(db_session, assignment, 1, None, now=NOW)
    with pytest.raises(ValidationError):
        progress.submit_quiz(db_session, assignment, 1, ["not", "a", "mapping"], now=NOW)


def test_unknown_section_not_found(db_session, assignment):
    with pytest.raises(NotFoundError):
        progress.submit_quiz(db_session, assignment, 99, {}, now=NOW)
    with pytest.raises(NotFoundError):
        progress.start_section(db_session, assignment, 0, now=NOW)
    with pytest.raises(NotFoundError):
        progress.get_section_status(db_session, assignment, 4)


def test_video_progress_never_decreases(db_session, assignment):
    progress.record_video_progress(db_session, assignment, 1, 200, now=NOW)
    row = progress.record_video_progress(db_session, assignment, 1, 50, now=NOW)

    assert row.video_watched_seconds == 200
    with pytest.raises(ValidationError):
        progress.record_video_progress(db_session, assignment, 1, -1, now=NOW)


def test_section_status_reports_video_at_ninety_percent(db_session, assignment):
    total = get_section("recruiter", 1).video_duration_seconds

    assert progress.get_section_status(db_session, assignment, 1) == progress.SectionStatus(
        completed=False, video_complete=False, video_progress=0
    )

    progress.record_video_progress(db_session, assignment, 1, int(total * 0.5), now=NOW)
    halfway = progress.get_section_status(db_session, assignment, 1)
    assert halfway.video_complete is False
    assert halfway.video_progress == 50

    progress.record_video_progress(db_session, assignment, 1, int(total * 0.9), now=NOW)
    assert progress.get_section_status(db_session, assignment, 1).video_complete is True


def test_status_only_moves_forward(db_session, assignment):
    for number in (1, 2, 3):
        progress.submit_quiz(db_session, assignment, number, _perfect("recruiter", number), now=NOW)
    db_session.commit()
    certificate_number = certificates.find_for_assignment(db_session, assignment.id).certificate_number

    progress.start_section(db_session, assignment, 1, now=NOW)
    review = progress.submit_quiz(db_session, assignment, 2, _all_wrong("recruiter", 2), now=NOW)
    db_session.commit()

    assert assignment.status == models.AssignmentStatus.COMPLETED
    assert assignment.completed_at == NOW
    assert review.track_complete is True
    assert review.certificate.certificate_number == certificate_number
    assert db_session.query(models.TrainingCertificate).count() == 1
    assert sorted(_transitions(db_session, assignment.id)) == [("in_progress", "completed"), ("pending", "in_progress")]
