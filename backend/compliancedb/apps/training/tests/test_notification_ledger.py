from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from compliancedb.apps.training import certificates, ledger, models, reminders
from compliancedb.utils.dates import ensure_utc

NOW = datetime(2026, 8, 10, 8, 0, tzinfo=timezone.utc)
TIER = models.NotificationType.DAY_7


@pytest.fixture()
def certificate(db_session, make_assignment):
    cert = certificates.issue_certificate(db_session, make_assignment(), now=NOW - timedelta(days=358)).certificate
    db_session.commit()
    return cert


def _claim(db, cert, *, lease=None):
    return ledger.claim(db, certificate_id=cert.id, tier=TIER, recipient="jane@acme.com", lease=lease)


def _freeze_clock(monkeypatch, moment):
    monkeypatch.setattr(ledger, "utcnow", lambda: moment)


def test_first_claim_wins_and_second_sees_record(db_session, certificate):
    first = _claim(db_session, certificate)
    second = _claim(db_session, certificate)

    assert isinstance(first, ledger.Claimed)
    assert first.record.status == models.NotificationRecordStatus.CLAIMED
    assert isinstance(second, ledger.AlreadyRecorded)
    assert second.record.id == first.record.id
    assert second.sent is False


def test_tiers_are_claimed_independently(db_session, certificate):
    seven = _claim(db_session, certificate)
    thirty = ledger.claim(
        db_session,
        certificate_id=certificate.id,
        tier=models.NotificationType.DAY_30,
        recipient="jane@acme.com",
    )

    assert isinstance(seven, ledger.Claimed)
    assert isinstance(thirty, ledger.Claimed)


def test_mark_sent_is_permanent(db_session, certificate):
    claimed = _claim(db_session, certificate)

    ledger.mark_sent(db_session, claimed.record, delivery_reference="msg_42", now=NOW)
    again = _claim(db_session, certificate)

    record = ledger.get_record(db_session, certificate.id, TIER)
    assert record.status == models.NotificationRecordStatus.SENT
    assert record.email_message_id == "msg_42"
    assert isinstance(again, ledger.AlreadyRecorded)
    assert again.sent is True


def test_release_lets_a_later_run_claim_again(db_session, certificate):
    claimed = _claim(db_session, certificate)

    ledger.release(db_session, claimed.record)

    assert ledger.get_record(db_session, certificate.id, TIER) is None
    assert isinstance(_claim(db_session, certificate), ledger.Claimed)


def test_sent_record_cannot_be_released(db_session, certificate):
    claimed = _claim(db_session, certificate)
    ledger.mark_sent(db_session, claimed.record, delivery_reference="msg_1", now=NOW)

    with pytest.raises(ValueError):
        ledger.release(db_session, claimed.record)


def test_stale_claim_is_taken_over(db_session, certificate, monkeypatch):
    _freeze_clock(monkeypatch, NOW)
    _claim(db_session, certificate)
    later = NOW + timedelta(minutes=20)
    _freeze_clock(monkeypatch, later)

    result = _claim(db_session, certificate, lease=timedelta(minutes=15))

    assert isinstance(result, ledger.Claimed)
    assert ensure_utc(result.record.claimed_at) == later


def test_fresh_claim_is_left_alone(db_session, certificate, monkeypatch):
    _freeze_clock(monkeypatch, NOW)
    _claim(db_session, certificate)
    _freeze_clock(monkeypatch, NOW + timedelta(minutes=5))

    result = _claim(db_session, certificate, lease=timedelta(minutes=15))

    assert isinstance(result, ledger.AlreadyRecorded)
    assert ensure_utc(result.record.claimed_at) == NOW


def test_backfill_for_a_later_day_does_not_steal_a_live_claim(db_session, outbox, certificate, monkeypatch):
    # The scheduled run claimed the pair a couple of minutes ago and is still delivering.
    _freeze_clock(monkeypatch, NOW)
    live = _claim(db_session, certificate)
    _freeze_clock(monkeypatch, NOW + timedelta(minutes=2))

    backfill = reminders.run_tick(db_session, now=NOW + timedelta(hours=4))

    assert [(d.tier, d.status) for d in backfill.details] == [("day_7", "already_sent")]
    assert outbox.sent == []
    record = ledger.get_record(db_session, certificate.id, TIER)
    assert record.id == live.record.id
    assert record.status == models.NotificationRecordStatus.CLAIMED
    assert ensure_utc(record.claimed_at) == NOW


def test_claim_retries_when_conflicting_claim_is_released(db_session, certificate, monkeypatch):
    other_run = _claim(db_session, certificate)
    real_get_record = ledger.get_record
    calls = []

    def released_before_read(db, certificate_id, tier):
        if not calls:
            ledger.release(db, other_run.record)
        calls.append(tier)
        return real_get_record(db, certificate_id, tier)

    monkeypatch.setattr(ledger, "get_record", released_before_read)

    result = _claim(db_session, certificate)

    assert isinstance(result, ledger.Claimed)
    assert calls == [TIER]
    assert real_get_record(db_session, certificate.id, TIER).id == result.record.id
