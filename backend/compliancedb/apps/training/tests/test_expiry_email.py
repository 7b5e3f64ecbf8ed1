from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from compliancedb.apps.training import emails

NOW = datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "expires_at,band,days",
    [
        (NOW + timedelta(days=30), emails.BAND_NOTICE, 30),
        (NOW + timedelta(days=8), emails.BAND_NOTICE, 8),
        (NOW + timedelta(days=7), emails.BAND_URGENT, 7),
        (NOW + timedelta(days=1), emails.BAND_URGENT, 1),
        (NOW + timedelta(hours=11), emails.BAND_TODAY, 0),
        (NOW - timedelta(minutes=1), emails.BAND_EXPIRED, 0),
    ],
)
def test_expiry_band(expires_at, band, days):
    assert emails.expiry_band(expires_at, NOW) == (band, days)


def test_band_counts_calendar_days_not_hours():
    # 13 hours away but on the next UTC day.
    assert emails.expiry_band(NOW + timedelta(hours=13), NOW) == (emails.BAND_URGENT, 1)


def test_naive_expiry_treated_as_utc():
    naive = (NOW + timedelta(days=7)).replace(tzinfo=None)

    assert emails.expiry_band(naive, NOW) == (emails.BAND_URGENT, 7)


def _render(expires_at, **overrides):
    kwargs = dict(
        name="Jane Doe",
        track_label="Recruiter",
        certificate_number="REC-2026-ABC123",
        expires_at=expires_at,
        org_name="Acme Staffing",
        now=NOW,
        recertify_url="https://app.example.com/training",
    )
    kwargs.update(overrides)
    return emails.render_expiry_email(**kwargs)


def test_subject_prefixes_by_band():
    assert _render(NOW + timedelta(days=30)).subject == "Your Recruiter certification expires in 30 days"
    assert _render(NOW + timedelta(days=7)).subject == "URGENT: Your Recruiter certification expires in 7 days"
    assert _render(NOW + timedelta(hours=2)).subject == "ACTION REQUIRED: Your Recruiter certification expires today"
    assert _render(NOW - timedelta(hours=2)).subject == "EXPIRED: Your Recruiter certification has expired"


def test_body_carries_certificate_details():
    html = _render(NOW + timedelta(days=30)).html

    assert "#REC-2026-ABC123" in html
    assert "March 12, 2026" in html
    assert 'href="https://app.example.com/training"' in html


def test_user_values_are_escaped():
    html = _render(NOW + timedelta(days=7), name="<script>x</script>", org_name="A & B").html

    assert "<script>x</script>" not in html
    assert "&lt;script&gt;" in html
    assert "A &amp; B" in html


def test_invite_link_uses_base_url_override():
    link = emails.training_link("tok123", override_base="https://staging.example.com/")

    assert link == "https://staging.example.com/training/start/tok123"
