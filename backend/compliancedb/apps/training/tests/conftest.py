from __future__ import annotations

from typing import Dict, List

import pytest

from compliancedb.apps.accounts import models as account_models
from compliancedb.apps.notifications import providers as notification_providers


class RecordingProvider(notification_providers.EmailProvider):
    """Captures every send; `fail` makes sends raise, `silent` makes them return None."""

    name = "recording"

    def __init__(self) -> None:
        self.sent: List[Dict] = []
        self.fail = False
        self.silent = False

    def send(self, *, recipients, subject, html, correlation_id):
        if self.fail:
            raise notification_providers.DeliveryError("provider timeout")
        self.sent.append(
            {"recipients": list(recipients), "subject": subject, "html": html, "correlation_id": correlation_id}
        )
        if self.silent:
            return None
        return f"msg_{len(self.sent)}"


@pytest.fixture()
def outbox(monkeypatch) -> RecordingProvider:
    provider = RecordingProvider()
    monkeypatch.setattr(notification_providers, "get_email_provider", lambda: (provider, True))
    return provider


@pytest.fixture()
def org(db_session) -> account_models.Organization:
    org = account_models.Organization(name="Acme Staffing", slug="acme")
    db_session.add(org)
    db_session.commit()
    return org


@pytest.fixture()
def manager(db_session, org) -> account_models.OrgMember:
    member = account_models.OrgMember(
        org_id=org.id,
        email="hr@acme.com",
        full_name="Hana Ruiz",
        role=account_models.MemberRole.ADMIN,
    )
    db_session.add(member)
    db_session.commit()
    return member



@pytest.fixture()
def make_assignment(db_session, org, manager):
    """Create and commit one assignment; keyword overrides for name/email/track/now."""
    from compliancedb.apps.training import assignments

    def _make(*, name="Jane Doe", email="jane@acme.com", track="recruiter", now=None):
        (outcome,) = assignments.create_assignments(
            db_session,
            org_id=org.id,
            entries=[{"name": name, "email": email, "track": track}],
            assigned_by_user_id=manager.id,
            now=now,
        )
        db_session.commit()
        return outcome.assignment

    return _make
