from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from compliancedb.apps.audit import models as audit_models
from compliancedb.apps.notifications import models as notification_models
from compliancedb.apps.training import assignments, models, progress
from compliancedb.apps.training.errors import NotFoundError, ValidationError

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def _assign(db, org, manager, *entries):
    outcomes = assignments.create_assignments(
        db,
        org_id=org.id,
        entries=list(entries),
        assigned_by_user_id=manager.id,
        now=NOW,
    )
    db.commit()
    return outcomes


def test_create_assignment_starts_pending_with_link(db_session, org, manager):
    (outcome,) = _assign(
        db_session, org, manager, {"name": "Jane Doe", "email": "Jane@Co.com", "track": "recruiter"}
    )

    assignment = outcome.assignment
    assert outcome.created is True
    assert outcome.status == "assigned"
    assert assignment.status == models.AssignmentStatus.PENDING
    assert assignment.user_email == "jane@co.com"
    assert assignment.completed_at is None
    assert assignment.magic_token
    assert assignment.token_expires_at == NOW + timedelta(days=assignments.TOKEN_TTL_DAYS)


def test_existing_assignment_is_not_duplicated(db_session, org, manager):
    entry = {"name": "Jane Doe", "email": "jane@co.com", "track": "recruiter"}
    (first,) = _assign(db_session, org, manager, entry)

    (second,) = _assign(db_session, org, manager, {**entry, "email": "JANE@co.com"})

    assert second.created is False
    assert second.status == "already_assigned"
    assert second.assignment.id == first.assignment.id
    assert db_session.query(models.TrainingAssignment).count() == 1


def test_duplicate_rows_in_one_batch_collapse(db_session, org, manager):
    entry = {"name": "Jane Doe", "email": "jane@co.com", "track": "manager"}

    outcomes = _assign(db_session, org, manager, entry, entry)

    assert [o.created for o in outcomes] == [True, False]
    assert db_session.query(models.TrainingAssignment).count() == 1


def test_same_person_can_hold_several_tracks(db_session, org, manager):
    outcomes = _assign(
        db_session,
        org,
        manager,
        {"name": "Jane", "email": "jane@co.com", "track": "recruiter"},
        {"name": "Jane", "email": "jane@co.com", "track": "executive"},
    )

    assert all(o.created for o in outcomes)


@pytest.mark.parametrize(
    "bad_entry",
    [
        {"name": "", "email": "x@co.com", "track": "recruiter"},
        {"name": "X", "email": "", "track": "recruiter"},
        {"name": "X", "email": "not-an-email", "track": "recruiter"},
        {"name": "X", "email": "x@co.com", "track": "janitor"},
        {"name": "X", "email": "x@co.com"},
    ],
)
def test_invalid_row_rejects_whole_batch(db_session, org, manager, bad_entry):
    good = {"name": "Jane", "email": "jane@co.com", "track": "recruiter"}

    with pytest.raises(ValidationError):
        assignments.create_assignments(db_session, org_id=org.id, entries=[good, bad_entry])

    assert db_session.query(models.TrainingAssignment).count() == 0


def test_empty_batch_rejected(db_session, org):
    with pytest.raises(ValidationError):
        assignments.create_assignments(db_session, org_id=org.id, entries=[])


def test_list_assignments_filters(db_session, org, manager):
    _assign(
        db_session,
        org,
        manager,
        {"name": "A", "email": "a@co.com", "track": "recruiter"},
        {"name": "B", "email": "b@co.com", "track": "manager"},
    )

    assert len(assignments.list_assignments(db_session, org_id=org.id)) == 2
    only_managers = assignments.list_assignments(
        db_session, org_id=org.id, track=models.TrainingTrack.MANAGER
    )
    assert [a.user_email for a in only_managers] == ["b@co.com"]
    assert assignments.list_assignments(db_session, org_id=org.id, status=models.AssignmentStatus.COMPLETED) == []
    assert len(assignments.list_assignments(db_session, org_id=org.id, email="A@co.com")) == 1


def test_get_assignment_is_scoped_to_org(db_session, org, manager):
    (outcome,) = _assign(db_session, org, manager, {"name": "A", "email": "a@co.com", "track": "recruiter"})

    assert assignments.get_assignment(db_session, outcome.assignment.id, org_id=org.id) is outcome.assignment
    with pytest.raises(NotFoundError):
        assignments.get_assignment(db_session, outcome.assignment.id, org_id="other-org")


def test_token_lookup_and_expiry(db_session, org, manager):
    (outcome,) = _assign(db_session, org, manager, {"name": "A", "email": "a@co.com", "track": "recruiter"})
    token = outcome.assignment.magic_token

    found = assignments.get_assignment_by_token(db_session, token, now=NOW + timedelta(days=1))
    assert found.id == outcome.assignment.id

    with pytest.raises(NotFoundError):
        assignments.get_assignment_by_token(db_session, token, now=NOW + timedelta(days=31))
    with pytest.raises(NotFoundError):
        assignments.get_assignment_by_token(db_session, "unknown-token", now=NOW)


def test_delete_cascades_progress_and_audits(db_session, org, manager):
    (outcome,) = _assign(db_session, org, manager, {"name": "A", "email": "a@co.com", "track": "recruiter"})
    progress.start_section(db_session, outcome.assignment, 1, now=NOW)
    db_session.commit()
    assignment_id = outcome.assignment.id

    assignments.delete_assignment(db_session, org_id=org.id, assignment_id=assignment_id, actor_user_id=manager.id)
    db_session.commit()

    assert db_session.query(models.TrainingAssignment).count() == 0
    assert db_session.query(models.TrainingSectionProgress).count() == 0
    event = (
        db_session.query(audit_models.AuditEvent)
        .filter(audit_models.AuditEvent.entity_id == assignment_id, audit_models.AuditEvent.action == "deleted")
        .one()
    )
    assert event.before["user_email"] == "a@co.com"


def test_delete_other_org_assignment_not_found(db_session, org, manager):
    (outcome,) = _assign(db_session, org, manager, {"name": "A", "email": "a@co.com", "track": "recruiter"})

    with pytest.raises(NotFoundError):
        assignments.delete_assignment(db_session, org_id="someone-else", assignment_id=outcome.assignment.id)


def test_send_invite_emails_training_link(db_session, org, manager, outbox):
    (outcome,) = _assign(db_session, org, manager, {"name": "Jane", "email": "jane@co.com", "track": "admin"})

    reference = assignments.send_invite(db_session, outcome.assignment)
    db_session.commit()

    assert reference == "msg_1"
    (message,) = outbox.sent
    assert message["recipients"] == ["jane@co.com"]
    assert f"/training/start/{outcome.assignment.magic_token}" in message["html"]
    assert "Acme Staffing" in message["html"]
    log = db_session.query(notification_models.EmailLog).one()
    assert log.template_key == "training_invite"


def test_completion_reminder_refreshes_expired_link(db_session, org, manager, outbox):
    (outcome,) = _assign(db_session, org, manager, {"name": "Jane", "email": "jane@co.com", "track": "admin"})
    later = NOW + timedelta(days=45)

    reference = assignments.send_completion_reminder(
        db_session, org_id=org.id, assignment_id=outcome.assignment.id, now=later
    )

    assert reference is not None
    assert outcome.assignment.token_expires_at == later + timedelta(days=assignments.TOKEN_TTL_DAYS)
    assert "0 of 4 sections complete" in outbox.sent[0]["html"]


def test_completion_reminder_rejected_for_completed(db_session, org, manager, outbox):
    (outcome,) = _assign(db_session, org, manager, {"name": "Jane", "email": "jane@co.com", "track": "admin"})
    outcome.assignment.status = models.AssignmentStatus.COMPLETED
    outcome.assignment.completed_at = NOW
    db_session.commit()

    with pytest.raises(ValidationError):
        assignments.send_completion_reminder(db_session, org_id=org.id, assignment_id=outcome.assignment.id)
    assert outbox.sent == []
