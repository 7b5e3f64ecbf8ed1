from __future__ import annotations

from datetime import datetime, timedelta, timezone

from compliancedb.apps.accounts import models as account_models
from compliancedb.apps.notifications import providers as notification_providers
from compliancedb.apps.training import assignments, certificates
from compliancedb.jobs import training_reminder_runner

AS_OF = datetime(2026, 12, 1, 7, 0, tzinfo=timezone.utc)


class _Outbox(notification_providers.EmailProvider):
    name = "outbox"

    def __init__(self):
        self.subjects = []

    def send(self, *, recipients, subject, html, correlation_id):
        self.subjects.append(subject)
        return f"out_{len(self.subjects)}"


def _seed_certificate(db_session, expires_at):
    org = account_models.Organization(name="Initech", slug="initech")
    db_session.add(org)
    db_session.flush()
    (outcome,) = assignments.create_assignments(
        db_session,
        org_id=org.id,
        entries=[{"name": "Peter Gibbons", "email": "peter@initech.com", "track": "executive"}],
    )
    cert = certificates.issue_certificate(
        db_session, outcome.assignment, now=expires_at - certificates.CERTIFICATE_VALIDITY
    ).certificate
    db_session.commit()
    return cert


def test_runner_sends_once_per_tier(monkeypatch, db_session):
    cert = _seed_certificate(db_session, AS_OF + timedelta(hours=10))
    outbox = _Outbox()
    monkeypatch.setattr(training_reminder_runner, "WriteSessionLocal", lambda: db_session)
    monkeypatch.setattr(notification_providers, "get_email_provider", lambda: (outbox, True))

    first = training_reminder_runner.run(AS_OF)
    second = training_reminder_runner.run(AS_OF + timedelta(minutes=30))

    assert first["sent"] == 1
    assert first["details"][0]["certificate"] == cert.certificate_number
    assert first["details"][0]["tier"] == "day_0"
    assert second["sent"] == 0
    assert second["details"][0]["status"] == "already_sent"
    assert outbox.subjects == ["ACTION REQUIRED: Your Executive certification expires today"]


def test_as_of_argument_parses_iso_timestamps():
    args = training_reminder_runner._parse_args(["--as-of", "2026-12-01T07:00:00+00:00"])

    assert args.as_of == AS_OF
    assert training_reminder_runner._parse_args([]).as_of is None
